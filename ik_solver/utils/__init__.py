"""
工具层 (Utils Layer)
小矩阵线性代数、旋转表示转换、日志配置与资源路径
"""

from .linalg import (
    multiply,
    transpose,
    invert,
    damped_pseudoinverse
)
from .rotation_utils import (
    quaternion_to_rotation_matrix,
    euler_to_rotation_matrix,
    rotation_matrix_to_euler,
    rotation_matrix_to_rotvec
)

__all__ = [
    'multiply',
    'transpose',
    'invert',
    'damped_pseudoinverse',
    'quaternion_to_rotation_matrix',
    'euler_to_rotation_matrix',
    'rotation_matrix_to_euler',
    'rotation_matrix_to_rotvec'
]
