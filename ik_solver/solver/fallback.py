"""
两阶段重试策略
第一阶段从 warm start 出发，使用快速、宽松的参数（适合小幅增量移动）；
失败后第二阶段从零向量出发，使用更慢、更严格的参数（适合大幅跳变或卡住之后）
"""
import time
import logging
import numpy as np
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

from ..model.chain import JointChain
from .solve_ik import IKResult, solve_ik

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IKParams:
    """单次 solve_ik 的迭代参数"""
    max_iterations: int
    tolerance: float
    damping: float
    orientation_weight: float

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]], default: 'IKParams') -> 'IKParams':
        """用配置字典覆盖默认参数，缺省字段沿用 default"""
        data = data or {}
        unknown = set(data) - set(cls.__dataclass_fields__)
        if unknown:
            raise ValueError(f"Unknown IK parameters: {sorted(unknown)}")
        return cls(
            max_iterations=int(data.get('max_iterations', default.max_iterations)),
            tolerance=float(data.get('tolerance', default.tolerance)),
            damping=float(data.get('damping', default.damping)),
            orientation_weight=float(data.get('orientation_weight', default.orientation_weight)),
        )


# 经验调参得到的默认值，可通过配置覆盖
FAST_PARAMS = IKParams(max_iterations=300, tolerance=1e-3, damping=0.05, orientation_weight=0.8)
ROBUST_PARAMS = IKParams(max_iterations=800, tolerance=1e-4, damping=0.01, orientation_weight=0.5)


def solve_with_fallback(
    target_position,
    target_rotation,
    warm_start,
    dof: int,
    chain: Optional[JointChain] = None,
    fast: IKParams = FAST_PARAMS,
    robust: IKParams = ROBUST_PARAMS
) -> IKResult:
    """
    两阶段 IK 求解；只有两个阶段都失败时才返回失败
    不保存任何状态：warm start 作为参数传入，新的关节角通过返回值传出

    :param target_position: 目标位置 [x, y, z]
    :param target_rotation: 目标旋转矩阵 (3, 3)
    :param warm_start: 上一次的解（可为 None）
    :param dof: 自由度
    :param chain: DH 关节链（可选）
    :param fast: 第一阶段参数
    :param robust: 第二阶段参数
    :return: IKResult，elapsed 为两个阶段的总耗时
    """
    start_time = time.perf_counter()

    result = solve_ik(
        target_position,
        target_rotation,
        initial_guess=warm_start,
        max_iterations=fast.max_iterations,
        tolerance=fast.tolerance,
        damping=fast.damping,
        orientation_weight=fast.orientation_weight,
        dof=dof,
        chain=chain,
    )

    if not result.success:
        logger.debug("Fast IK attempt failed (error %.3g); retrying from zero", result.error)
        result = solve_ik(
            target_position,
            target_rotation,
            initial_guess=np.zeros(dof, dtype=np.float64),
            max_iterations=robust.max_iterations,
            tolerance=robust.tolerance,
            damping=robust.damping,
            orientation_weight=robust.orientation_weight,
            dof=dof,
            chain=chain,
        )

    return replace(result, elapsed=time.perf_counter() - start_time)
