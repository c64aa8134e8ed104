"""
IK核心算法实现
数值雅可比矩阵（单侧有限差分）与 6x1 位姿误差向量
"""
import numpy as np

from ..model.chain import JointChain, forward_kinematics
from ..utils.linalg import multiply, transpose
from ..utils.rotation_utils import rotation_matrix_to_rotvec


def compute_jacobian(joint_angles, chain: JointChain, delta: float = 1e-6) -> np.ndarray:
    """
    构建雅可比矩阵 J (6xN)，对每个关节角做前向扰动 +delta 后重新计算正向运动学

    - 位置行: (p_perturbed - p_base) / delta
    - 姿态行: rotvec(R_perturbed @ R_base^T) / delta；转角过小时该列姿态部分保持为零

    :param joint_angles: 当前 N 个关节角（弧度）
    :param chain: DH 关节链
    :param delta: 扰动步长
    :return: 6xN 雅可比矩阵
    """
    q = np.asarray(joint_angles, dtype=np.float64).reshape(-1)
    num_dofs = q.shape[0]
    base_pos, base_rot = forward_kinematics(q, chain)
    base_rot_t = transpose(base_rot)

    jacobian = np.zeros((6, num_dofs), dtype=np.float64)
    for i in range(num_dofs):
        perturbed = q.copy()
        perturbed[i] += delta
        pos, rot = forward_kinematics(perturbed, chain)

        # 线速度贡献
        jacobian[:3, i] = (pos - base_pos) / delta
        # 角速度贡献：扰动前后的相对旋转转为轴-角向量
        jacobian[3:, i] = rotation_matrix_to_rotvec(multiply(rot, base_rot_t)) / delta

    return jacobian


def compute_error_vector(current_pos: np.ndarray,
                         current_rot: np.ndarray,
                         target_pos: np.ndarray,
                         target_rot: np.ndarray,
                         orientation_weight: float = 1.0) -> np.ndarray:
    """
    计算当前末端位姿和目标位姿之间的 6x1 误差向量 (delta_x)

    :param current_pos: 末端当前位置 (3,)
    :param current_rot: 末端当前旋转矩阵 (3, 3)
    :param target_pos: 目标位置 (3,)
    :param target_rot: 目标旋转矩阵 (3, 3)
    :param orientation_weight: 姿态误差权重 w
    :return: [delta_p (3), w * delta_r (3)]
    """
    # 位置误差
    delta_p = np.asarray(target_pos, dtype=np.float64) - np.asarray(current_pos, dtype=np.float64)

    # 姿态误差: R_error = R_target @ R_current^T（旋转矩阵转置即是逆）
    r_error = multiply(target_rot, transpose(current_rot))
    delta_r = rotation_matrix_to_rotvec(r_error)

    return np.concatenate([delta_p, orientation_weight * delta_r])
