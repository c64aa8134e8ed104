"""
日志配置
仅由入口脚本调用；库模块只使用 logging.getLogger(__name__)
"""
import logging
import sys
from typing import Dict, Optional, Union

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%H:%M:%S"

# 迭代内部的诊断信息默认不刷屏
DEFAULT_COMPONENT_LEVELS: Dict[str, int] = {
    'ik_solver.solver.solve_ik': logging.INFO,
    'ik_solver.model.chain': logging.WARNING,
}


def setup_logging(level: Union[int, str] = logging.INFO,
                  component_levels: Optional[Dict[str, Union[int, str]]] = None):
    """
    配置根 logger：输出到 stdout，格式中包含 logger 名称

    :param level: 根 logger 的默认级别（int 或 'DEBUG' 等名称）
    :param component_levels: 组件名 -> 级别，例如 {'ik_solver.solver': logging.DEBUG}
    """
    if isinstance(level, str):
        level = level.upper()
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        stream=sys.stdout,
    )

    levels = dict(DEFAULT_COMPONENT_LEVELS)
    if component_levels:
        levels.update(component_levels)
    for component, comp_level in levels.items():
        logging.getLogger(component).setLevel(comp_level)
