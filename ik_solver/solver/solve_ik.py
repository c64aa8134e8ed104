"""
IK求解器实现
使用阻尼最小二乘法 (Damped Least Squares, DLS)，记录迭代过程中误差最小的解；
未收敛时按绝对误差阈值给出 best-effort 结果
"""
import logging
import numpy as np
from dataclasses import dataclass
from typing import Optional

from ..model.chain import DEFAULT_DOF, JointChain, as_chain, chain_for_dof, forward_kinematics
from ..model.workspace import WORKSPACE_BOUNDS, is_reachable
from ..utils.linalg import damped_pseudoinverse, multiply
from .ik_core import compute_jacobian, compute_error_vector

logger = logging.getLogger(__name__)

# 未收敛时，最优解的误差范数低于该值仍视为成功（位置 + 加权姿态的组合单位）
ACCEPTANCE_THRESHOLD = 0.1


@dataclass(frozen=True)
class IKResult:
    """
    一次 IK 求解的结果；每次调用都返回新的实例

    :param joint_angles: 关节角 (dof,)，前置条件不满足时为 None
    :param success: 是否求解成功（收敛，或最优误差低于 ACCEPTANCE_THRESHOLD）
    :param error: 最优组合误差范数，未迭代时为 inf
    :param iterations: 实际执行的误差评估次数，前置条件拒绝时为 0
    :param elapsed: 求解耗时（秒），由调用层填写
    """
    joint_angles: Optional[np.ndarray]
    success: bool
    error: float = float('inf')
    iterations: int = 0
    elapsed: float = 0.0

    def __eq__(self, other) -> bool:
        # joint_angles 为 ndarray，逐元素比较
        if not isinstance(other, IKResult):
            return NotImplemented
        if (self.joint_angles is None) != (other.joint_angles is None):
            return False
        if self.joint_angles is not None and not np.array_equal(self.joint_angles, other.joint_angles):
            return False
        return ((self.success, self.error, self.iterations, self.elapsed)
                == (other.success, other.error, other.iterations, other.elapsed))


def _as_array(value, shape) -> Optional[np.ndarray]:
    if value is None:
        return None
    try:
        array = np.asarray(value, dtype=np.float64)
    except (TypeError, ValueError):
        return None
    if array.shape != shape:
        return None
    return array


def _initial_joint_angles(initial_guess, dof: int) -> np.ndarray:
    """初值长度不少于 dof 时取前 dof 个，否则使用零向量"""
    if initial_guess is not None:
        guess = np.asarray(initial_guess, dtype=np.float64).reshape(-1)
        if guess.shape[0] >= dof:
            return guess[:dof].copy()
    return np.zeros(dof, dtype=np.float64)


def solve_ik(
    target_position,
    target_rotation,
    initial_guess=None,
    max_iterations: int = 1000,
    tolerance: float = 1e-4,
    damping: float = 0.05,
    orientation_weight: float = 0.5,
    dof: int = DEFAULT_DOF,
    chain: Optional[JointChain] = None
) -> IKResult:
    """
    使用阻尼最小二乘法 (DLS) 求解IK

    :param target_position: 目标位置 [x, y, z]
    :param target_rotation: 目标旋转矩阵 (3, 3)
    :param initial_guess: 初始关节角（warm start）；为 None 或长度不足 dof 时从零向量开始
    :param max_iterations: 最大迭代次数，默认值1000
    :param tolerance: 组合误差范数的收敛容差，默认值1e-4
    :param damping: 阻尼系数λ，默认值0.05
    :param orientation_weight: 姿态误差权重 w，默认值0.5
    :param dof: 自由度，决定工作空间包围盒与默认关节链
    :param chain: DH 关节链（可选，为 None 时取 DH 模板的前 dof 行）
    :return: IKResult；前置条件不满足或目标超出工作空间时 joint_angles 为 None
    """
    # 前置条件：不满足时直接返回，不进入迭代
    target_pos = _as_array(target_position, (3,))
    target_rot = _as_array(target_rotation, (3, 3))
    if target_pos is None or target_rot is None:
        logger.error("Invalid IK target: position=%r rotation=%r", target_position, target_rotation)
        return IKResult(None, False)

    if dof not in WORKSPACE_BOUNDS:
        logger.error("No workspace bounds for DOF %r", dof)
        return IKResult(None, False)

    try:
        chain = chain_for_dof(dof) if chain is None else as_chain(chain)
    except (TypeError, ValueError) as e:
        logger.error("Invalid DH chain: %s", e)
        return IKResult(None, False)
    if len(chain) == 0:
        logger.error("Empty DH chain")
        return IKResult(None, False)

    if not is_reachable(target_pos, dof):
        logger.warning("Target %s is outside the %d-DOF workspace", target_pos.tolist(), dof)
        return IKResult(None, False)

    try:
        q_full = _initial_joint_angles(initial_guess, dof)
    except (TypeError, ValueError) as e:
        logger.error("Invalid initial guess %r: %s", initial_guess, e)
        return IKResult(None, False)

    # 关节链长度应等于 dof；不一致时只对公共前缀求解，其余关节保持初值
    active = min(dof, len(chain))
    if len(chain) != dof:
        logger.warning("DH chain has %d joints but DOF is %d; solving the first %d joints",
                       len(chain), dof, active)
        chain = JointChain(list(chain)[:active])
    q = q_full[:active].copy()

    best_q = q.copy()
    best_error = float('inf')
    iterations = 0

    def _result(success: bool) -> IKResult:
        joint_angles = q_full.copy()
        joint_angles[:active] = best_q
        return IKResult(joint_angles, success, best_error, iterations)

    for iteration in range(max_iterations):
        iterations = iteration + 1

        # 计算误差 ΔX
        current_pos, current_rot = forward_kinematics(q, chain)
        delta_x = compute_error_vector(current_pos, current_rot, target_pos, target_rot,
                                       orientation_weight)
        error_norm = float(np.linalg.norm(delta_x))

        if not np.isfinite(error_norm):
            logger.warning("Non-finite IK error at iteration %d; keeping best solution", iterations)
            break

        # 记录误差最小的状态（未收敛时据此降级返回）
        if error_norm < best_error:
            best_error = error_norm
            best_q = q.copy()

        # 收敛检查
        if error_norm < tolerance:
            logger.debug("IK converged in %d iterations (error %.3g)", iterations, error_norm)
            return _result(True)

        # 构建雅可比矩阵并求解 Δq = J⁺ ΔX
        jacobian = compute_jacobian(q, chain)
        j_pinv = damped_pseudoinverse(jacobian, damping)
        delta_q = multiply(j_pinv, delta_x.reshape(-1, 1)).reshape(-1)

        q = q + delta_q

    success = best_error < ACCEPTANCE_THRESHOLD
    logger.debug("IK stopped after %d iterations, best error %.3g, success=%s",
                 iterations, best_error, success)
    return _result(success)
