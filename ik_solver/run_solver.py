"""
无界面批量求解入口
按帧依次把目标送入 ArmSession（帧间沿用 warm start），导出每帧的关节角

用法: python -m ik_solver.run_solver [config.json]
"""
import sys
import time
import logging
from typing import List, Optional

from .data_io import export_results, load_config, load_targets
from .session import ArmSession
from .solver.solve_ik import IKResult
from .utils.logger import setup_logging
from .utils.resource_path import get_data_path

logger = logging.getLogger(__name__)


def run_solver(config_path: Optional[str] = None) -> int:
    """
    :param config_path: 配置文件路径，为 None 时使用包内 data/config.json
    :return: 进程退出码
    """
    if config_path is None:
        config_path = get_data_path('config.json')

    # 1. 加载配置
    try:
        config = load_config(config_path)
    except (OSError, ValueError) as e:
        setup_logging()
        logger.error("❌ 配置加载失败 %s: %s", config_path, e)
        return 1

    setup_logging(config.log_level)
    logger.info("----------- IK Solver Headless -----------")
    logger.info("配置加载: %s (dof=%d)", config_path, config.dof)

    # 2. 构建会话
    try:
        session = ArmSession(dof=config.dof, chain=config.dh_params,
                             fast=config.fast, robust=config.robust)
    except ValueError as e:
        logger.error("❌ 关节链构建失败: %s", e)
        return 1

    # 3. 加载目标
    if config.targets_path is None:
        logger.error("❌ 配置中缺少 targets_path")
        return 1
    try:
        targets = load_targets(config.targets_path)
    except (OSError, ValueError, KeyError) as e:
        logger.error("❌ 目标加载失败 %s: %s", config.targets_path, e)
        return 1
    logger.info("目标加载成功，共 %d 帧", len(targets))

    # 4. 逐帧求解
    results: List[IKResult] = []
    start_time = time.perf_counter()
    for target in targets:
        session.set_target(position=target.position, orientation=target.orientation)
        result = session.update()
        results.append(result)
        logger.info("帧 %d: %s，误差 %.2e，耗时 %.2f ms",
                    target.frame, "已求解" if result.success else "未求解",
                    result.error, result.elapsed * 1e3)

    solved = sum(1 for r in results if r.success)
    logger.info("求解完成: %d/%d 帧成功，总耗时 %.3f 秒",
                solved, len(results), time.perf_counter() - start_time)

    # 5. 导出结果
    export_results([t.frame for t in targets], results, session.chain, config.output_path)
    logger.info("✅ 结果已导出到: %s", config.output_path)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    return run_solver(argv[0] if argv else None)


if __name__ == "__main__":
    sys.exit(main())
