"""
交互会话状态
保存当前自由度、目标位姿、关节角与 warm start；每次更新调用两阶段 IK，
失败时保留上一次有效的关节角
"""
import logging
import threading
import numpy as np
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .model.chain import DEFAULT_DOF, JointChain, Pose, as_chain, chain_for_dof, joint_frames
from .model.workspace import bounds, clamp_to_workspace
from .solver.fallback import FAST_PARAMS, ROBUST_PARAMS, IKParams, solve_with_fallback
from .solver.solve_ik import IKResult
from .utils.rotation_utils import euler_to_rotation_matrix

logger = logging.getLogger(__name__)

DEFAULT_POSITION = (0.0, 0.0, 0.3)
DEFAULT_ORIENTATION = (0.0, 0.0, 0.0)


@dataclass(frozen=True)
class IKStatus:
    """最近一次更新的求解状态；time 为两阶段求解总耗时（秒）"""
    solved: bool = True
    time: float = 0.0


class ArmSession:
    """
    机械臂交互会话

    warm start 的读写由锁保护，IK 迭代本身在锁外进行；
    对外只暴露副本，调用方无法直接修改内部状态
    """

    def __init__(self,
                 dof: int = DEFAULT_DOF,
                 chain: Optional[Sequence[Sequence[float]]] = None,
                 fast: IKParams = FAST_PARAMS,
                 robust: IKParams = ROBUST_PARAMS):
        """
        :param dof: 初始自由度
        :param chain: 自定义 DH 关节链（可选）；给定时自由度固定为其长度
        :param fast: 第一阶段参数
        :param robust: 第二阶段参数
        """
        self._lock = threading.Lock()
        self._custom_chain: Optional[JointChain] = None if chain is None else as_chain(chain)
        self.fast = fast
        self.robust = robust

        self._position = np.array(DEFAULT_POSITION, dtype=np.float64)
        self._orientation = np.array(DEFAULT_ORIENTATION, dtype=np.float64)
        self._status = IKStatus()
        # 每次切换自由度递增，用于丢弃切换前发起的求解结果
        self._generation = 0
        self.set_dof(dof)

    # ------------------------------------------------------------------
    # 状态读取（均返回副本）
    # ------------------------------------------------------------------

    @property
    def dof(self) -> int:
        return self._dof

    @property
    def chain(self) -> JointChain:
        return self._chain

    @property
    def position(self) -> np.ndarray:
        return self._position.copy()

    @property
    def orientation(self) -> np.ndarray:
        return self._orientation.copy()

    @property
    def target_rotation(self) -> np.ndarray:
        return euler_to_rotation_matrix(*self._orientation)

    @property
    def joint_angles(self) -> np.ndarray:
        with self._lock:
            return self._joint_angles.copy()

    @property
    def warm_start(self) -> np.ndarray:
        with self._lock:
            return self._warm_start.copy()

    @property
    def status(self) -> IKStatus:
        return self._status

    # ------------------------------------------------------------------
    # 状态修改
    # ------------------------------------------------------------------

    def set_dof(self, dof: int):
        """
        切换自由度：warm start 与关节角重置为新长度的零向量，目标位置限制到新的工作空间

        :param dof: 新的自由度，2 ~ 7
        """
        bounds(dof)  # 未定义的自由度直接报错
        if self._custom_chain is not None:
            if len(self._custom_chain) != dof:
                raise ValueError(
                    f"Custom DH chain has {len(self._custom_chain)} joints, cannot use DOF {dof}")
            chain = self._custom_chain
        else:
            chain = chain_for_dof(dof)

        with self._lock:
            self._dof = dof
            self._chain = chain
            self._warm_start = np.zeros(dof, dtype=np.float64)
            self._joint_angles = np.zeros(dof, dtype=np.float64)
            self._position = clamp_to_workspace(self._position, dof)
            self._generation += 1
        logger.debug("DOF set to %d, target clamped to %s", dof, self._position.tolist())

    def set_target(self, position=None, orientation=None):
        """
        :param position: 目标位置 [x, y, z]（可选）
        :param orientation: 目标姿态 [roll, pitch, yaw]，弧度（可选）
        """
        with self._lock:
            if position is not None:
                position = np.asarray(position, dtype=np.float64)
                if position.shape != (3,):
                    raise ValueError(f"Target position must have 3 elements, got shape {position.shape}")
                self._position = position.copy()
            if orientation is not None:
                orientation = np.asarray(orientation, dtype=np.float64)
                if orientation.shape != (3,):
                    raise ValueError(f"Orientation must be [roll, pitch, yaw], got shape {orientation.shape}")
                self._orientation = orientation.copy()

    def update(self) -> IKResult:
        """
        对当前目标执行两阶段 IK
        成功时替换关节角与 warm start；失败时保留上一次有效的关节角，仅更新状态

        :return: 本次的 IKResult
        """
        with self._lock:
            generation = self._generation
            dof = self._dof
            chain = self._chain
            position = self._position.copy()
            rotation = euler_to_rotation_matrix(*self._orientation)
            warm_start = self._warm_start.copy()

        result = solve_with_fallback(position, rotation, warm_start, dof, chain,
                                     fast=self.fast, robust=self.robust)

        with self._lock:
            if generation != self._generation:
                logger.debug("Discarding IK result computed for a previous DOF setting")
                return result
            if result.success and result.joint_angles is not None:
                self._joint_angles = result.joint_angles[:dof].copy()
                self._warm_start = self._joint_angles.copy()
            self._status = IKStatus(solved=result.success, time=result.elapsed)

        if not result.success:
            logger.info("IK unsolved for target %s (%.1f ms)", position.tolist(), result.elapsed * 1e3)
        return result

    def frames(self) -> List[Pose]:
        """当前关节角下每个关节坐标系的位姿（基座在前，末端在后），供渲染使用"""
        with self._lock:
            joint_angles = self._joint_angles.copy()
            chain = self._chain
        return joint_frames(joint_angles, chain)
