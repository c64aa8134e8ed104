"""
求解层 (Solver Layer)
纯数学计算，负责雅可比矩阵构建、误差向量计算、DLS 迭代及两阶段重试
"""

from .ik_core import (
    compute_jacobian,
    compute_error_vector
)
from .solve_ik import (
    ACCEPTANCE_THRESHOLD,
    IKResult,
    solve_ik
)
from .fallback import (
    FAST_PARAMS,
    ROBUST_PARAMS,
    IKParams,
    solve_with_fallback
)

__all__ = [
    'compute_jacobian',
    'compute_error_vector',
    'ACCEPTANCE_THRESHOLD',
    'IKResult',
    'solve_ik',
    'FAST_PARAMS',
    'ROBUST_PARAMS',
    'IKParams',
    'solve_with_fallback'
]
