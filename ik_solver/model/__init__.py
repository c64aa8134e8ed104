"""
模型层 (Model Layer)
DH 关节链、正向运动学与工作空间包围盒

导出：
- DHParameters / JointChain: 单关节 DH 参数与不可变关节链
- DH_TEMPLATE / chain_for_dof: 7 自由度模板及按自由度截取
- joint_transform / forward_kinematics / joint_frames: 正向运动学
- WorkspaceBounds / WORKSPACE_BOUNDS: 按自由度的可达包围盒
"""

from .chain import (
    DEFAULT_DOF,
    MIN_DOF,
    MAX_DOF,
    DH_TEMPLATE,
    DHParameters,
    JointChain,
    as_chain,
    chain_for_dof,
    joint_transform,
    forward_kinematics,
    joint_frames
)
from .workspace import (
    WORKSPACE_BOUNDS,
    WorkspaceBounds,
    bounds,
    is_reachable,
    slider_ranges,
    clamp_to_workspace
)

__all__ = [
    'DEFAULT_DOF',
    'MIN_DOF',
    'MAX_DOF',
    'DH_TEMPLATE',
    'DHParameters',
    'JointChain',
    'as_chain',
    'chain_for_dof',
    'joint_transform',
    'forward_kinematics',
    'joint_frames',
    'WORKSPACE_BOUNDS',
    'WorkspaceBounds',
    'bounds',
    'is_reachable',
    'slider_ranges',
    'clamp_to_workspace'
]
