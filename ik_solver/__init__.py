"""
DH 串联机械臂运动学求解器
正向运动学、数值雅可比、阻尼最小二乘 IK（含 best-effort 与两阶段重试）及工作空间包围盒

分层：
- model: DH 关节链、正向运动学、工作空间
- solver: 雅可比/误差向量、DLS 迭代、两阶段重试
- utils: 小矩阵线性代数、旋转表示转换、日志、资源路径
"""

from .model import (
    DEFAULT_DOF,
    DH_TEMPLATE,
    WORKSPACE_BOUNDS,
    JointChain,
    chain_for_dof,
    forward_kinematics,
    joint_frames,
    is_reachable
)
from .solver import (
    IKResult,
    IKParams,
    solve_ik,
    solve_with_fallback
)
from .session import ArmSession, IKStatus

__version__ = "0.1.0"

__all__ = [
    'DEFAULT_DOF',
    'DH_TEMPLATE',
    'WORKSPACE_BOUNDS',
    'JointChain',
    'chain_for_dof',
    'forward_kinematics',
    'joint_frames',
    'is_reachable',
    'IKResult',
    'IKParams',
    'solve_ik',
    'solve_with_fallback',
    'ArmSession',
    'IKStatus'
]
