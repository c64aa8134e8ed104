"""
小矩阵线性代数工具
1x1 ~ 3x3 使用闭式解（伴随矩阵/行列式），更大的矩阵使用带部分主元的高斯-约旦消元；
接近奇异时加入固定正则项而不是报错
"""
import numpy as np

# 行列式或主元绝对值小于该值时视为奇异
SINGULAR_EPS = 1e-10
# 奇异时加到行列式/主元上的正则项
REGULARIZATION = 1e-6


def _as_matrix(a) -> np.ndarray:
    m = np.asarray(a, dtype=np.float64)
    if m.ndim != 2:
        raise ValueError(f"Expected a 2-D matrix, got shape {m.shape}")
    return m


def multiply(a, b) -> np.ndarray:
    """
    矩阵乘法 A @ B；维度不匹配属于调用方错误

    :param a: m x k 矩阵
    :param b: k x n 矩阵
    :return: m x n 矩阵
    """
    a = _as_matrix(a)
    b = _as_matrix(b)
    if a.shape[1] != b.shape[0]:
        raise ValueError(f"Cannot multiply {a.shape} by {b.shape}")
    return a @ b


def transpose(a) -> np.ndarray:
    return _as_matrix(a).T.copy()


def _invert_2x2(m: np.ndarray) -> np.ndarray:
    det = m[0, 0] * m[1, 1] - m[0, 1] * m[1, 0]
    reg = 0.0
    if abs(det) < SINGULAR_EPS:
        reg = REGULARIZATION
    inv_det = 1.0 / (det + reg)
    return np.array([
        [(m[1, 1] + reg) * inv_det, -m[0, 1] * inv_det],
        [-m[1, 0] * inv_det, (m[0, 0] + reg) * inv_det],
    ], dtype=np.float64)


def _invert_3x3(m: np.ndarray) -> np.ndarray:
    # 第一行的代数余子式同时用于行列式展开
    c00 = m[1, 1] * m[2, 2] - m[1, 2] * m[2, 1]
    c01 = m[1, 2] * m[2, 0] - m[1, 0] * m[2, 2]
    c02 = m[1, 0] * m[2, 1] - m[1, 1] * m[2, 0]
    det = m[0, 0] * c00 + m[0, 1] * c01 + m[0, 2] * c02

    reg = 0.0
    if abs(det) < SINGULAR_EPS:
        reg = REGULARIZATION
    inv_det = 1.0 / (det + reg)

    adjugate = np.array([
        [c00 + reg,
         m[0, 2] * m[2, 1] - m[0, 1] * m[2, 2],
         m[0, 1] * m[1, 2] - m[0, 2] * m[1, 1]],
        [c01,
         m[0, 0] * m[2, 2] - m[0, 2] * m[2, 0] + reg,
         m[0, 2] * m[1, 0] - m[0, 0] * m[1, 2]],
        [c02,
         m[0, 1] * m[2, 0] - m[0, 0] * m[2, 1],
         m[0, 0] * m[1, 1] - m[0, 1] * m[1, 0] + reg],
    ], dtype=np.float64)
    return adjugate * inv_det


def _invert_gauss_jordan(m: np.ndarray) -> np.ndarray:
    n = m.shape[0]
    # 增广矩阵 [A | I]
    augmented = np.hstack([m, np.identity(n, dtype=np.float64)])

    for i in range(n):
        # 部分主元：把第 i 列（第 i 行及以下）绝对值最大的行换到主元行
        pivot_row = i + int(np.argmax(np.abs(augmented[i:, i])))
        if pivot_row != i:
            augmented[[i, pivot_row]] = augmented[[pivot_row, i]]

        # 主元过小：加正则项而不是报错
        if abs(augmented[i, i]) < SINGULAR_EPS:
            augmented[i, i] += REGULARIZATION

        augmented[i, i:] /= augmented[i, i]

        # 消去其余各行的第 i 列
        for j in range(n):
            if j != i:
                factor = augmented[j, i]
                if factor != 0.0:
                    augmented[j, i:] -= factor * augmented[i, i:]

    return augmented[:, n:].copy()


def invert(a) -> np.ndarray:
    """
    方阵求逆
    奇异或接近奇异时加入固定正则项 (1e-6)，不抛出异常；
    因此在运动学奇异位形附近得到的是带轻微偏差的结果

    :param a: n x n 方阵
    :return: n x n 逆矩阵
    """
    m = _as_matrix(a)
    n = m.shape[0]
    if m.shape[1] != n:
        raise ValueError(f"Cannot invert non-square matrix of shape {m.shape}")
    if n == 0:
        raise ValueError("Cannot invert an empty matrix")

    if n == 1:
        value = m[0, 0]
        if abs(value) < SINGULAR_EPS:
            value += REGULARIZATION
        return np.array([[1.0 / value]], dtype=np.float64)
    if n == 2:
        return _invert_2x2(m)
    if n == 3:
        return _invert_3x3(m)
    return _invert_gauss_jordan(m)


def damped_pseudoinverse(jacobian, damping: float = 0.01) -> np.ndarray:
    """
    阻尼伪逆: J^T (J J^T + λ² I)^(-1)  (Tikhonov 正则化)

    :param jacobian: m x n 雅可比矩阵
    :param damping: 阻尼系数 λ
    :return: n x m 矩阵
    """
    j = _as_matrix(jacobian)
    jjt = multiply(j, transpose(j))
    jjt[np.diag_indices_from(jjt)] += damping * damping
    return multiply(transpose(j), invert(jjt))
