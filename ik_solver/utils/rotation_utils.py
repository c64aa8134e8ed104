"""
旋转表示转换工具
四元数 / RPY 欧拉角 -> 旋转矩阵，以及旋转矩阵 -> 轴-角向量
"""
import numpy as np
from scipy.spatial.transform import Rotation as R
from typing import Union

# 转角小于该值时视为无旋转
ANGLE_EPS = 1e-10


def quaternion_to_rotation_matrix(quaternion: Union[np.ndarray, list, tuple]) -> np.ndarray:
    """
    将四元数转换为旋转矩阵

    :param quaternion: 四元数，格式为 [w, x, y, z]
    :return: 3x3 旋转矩阵
    """
    quaternion = np.asarray(quaternion, dtype=np.float64)
    if quaternion.shape != (4,):
        raise ValueError(f"Quaternion must be a 4-element array, got shape {quaternion.shape}")

    norm = np.linalg.norm(quaternion)
    if norm < 1e-10:
        raise ValueError(f"Quaternion norm too small: {norm}, cannot normalize")
    w, x, y, z = quaternion / norm

    return np.array([
        [1 - 2 * (y * y + z * z),     2 * (x * y - w * z),     2 * (x * z + w * y)],
        [    2 * (x * y + w * z), 1 - 2 * (x * x + z * z),     2 * (y * z - w * x)],
        [    2 * (x * z - w * y),     2 * (y * z + w * x), 1 - 2 * (x * x + y * y)]
    ], dtype=np.float64)


def euler_to_rotation_matrix(roll: float, pitch: float, yaw: float) -> np.ndarray:
    """
    RPY 欧拉角（弧度）转旋转矩阵，组合顺序固定为 R = Rz(yaw) @ Ry(pitch) @ Rx(roll)
    内旋 ZYX 与该乘法顺序等价

    :param roll: 绕 X 轴
    :param pitch: 绕 Y 轴
    :param yaw: 绕 Z 轴
    :return: 3x3 旋转矩阵
    """
    return R.from_euler('ZYX', [yaw, pitch, roll], degrees=False).as_matrix()


def rotation_matrix_to_rotvec(rotation: np.ndarray) -> np.ndarray:
    """
    旋转矩阵 -> 轴-角向量 (axis * angle)
    angle = acos(clamp((trace - 1) / 2, -1, 1))，轴取自反对称部分 / (2 sin(angle))
    angle 接近 0 时返回零向量，不除以接近零的 sin(angle)

    :param rotation: 3x3 旋转矩阵（如 R_target @ R_current^T）
    :return: 3 维轴-角向量
    """
    rotation = np.asarray(rotation, dtype=np.float64)
    trace = rotation[0, 0] + rotation[1, 1] + rotation[2, 2]
    angle = np.arccos(np.clip((trace - 1.0) / 2.0, -1.0, 1.0))

    if abs(angle) < ANGLE_EPS:
        return np.zeros(3)

    sin_angle = np.sin(angle)
    if sin_angle < ANGLE_EPS:
        # angle ≈ π：反对称部分退化，轴交给 scipy 从对称部分恢复
        return R.from_matrix(rotation).as_rotvec()

    axis = np.array([
        rotation[2, 1] - rotation[1, 2],
        rotation[0, 2] - rotation[2, 0],
        rotation[1, 0] - rotation[0, 1],
    ]) / (2.0 * sin_angle)
    return axis * angle


def rotation_matrix_to_euler(rotation: np.ndarray) -> np.ndarray:
    """
    旋转矩阵 -> RPY 欧拉角（弧度），euler_to_rotation_matrix 的逆

    :param rotation: 3x3 旋转矩阵
    :return: [roll, pitch, yaw]
    """
    yaw, pitch, roll = R.from_matrix(np.asarray(rotation, dtype=np.float64)).as_euler('ZYX', degrees=False)
    return np.array([roll, pitch, yaw], dtype=np.float64)
