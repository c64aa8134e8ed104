"""
DH 串联关节链与正向运动学
每个关节由标准 DH 参数 (theta_offset, d, a, alpha) 描述，全部为旋转关节
"""
import logging
import numpy as np
from typing import Iterable, Iterator, List, NamedTuple, Sequence, Tuple

from ..utils.linalg import multiply

logger = logging.getLogger(__name__)

MIN_DOF = 2
MAX_DOF = 7
DEFAULT_DOF = 7

Pose = Tuple[np.ndarray, np.ndarray]  # (position (3,), rotation (3, 3))


class DHParameters(NamedTuple):
    """单个关节的 DH 参数"""
    theta_offset: float
    d: float
    a: float
    alpha: float


# 7 自由度模板，低自由度构型取前 dof 行
DH_TEMPLATE: Tuple[DHParameters, ...] = (
    DHParameters(0.0, 0.3, 0.0, np.pi / 2),
    DHParameters(0.0, 0.0, 0.3, 0.0),
    DHParameters(0.0, 0.0, 0.3, np.pi / 2),
    DHParameters(0.0, 0.3, 0.0, -np.pi / 2),
    DHParameters(0.0, 0.0, 0.3, np.pi / 2),
    DHParameters(0.0, 0.0, 0.3, -np.pi / 2),
    DHParameters(0.0, 0.3, 0.0, 0.0),
)


class JointChain:
    """
    不可变的 DH 关节链（有序），长度即自由度
    越界访问直接抛出 IndexError，不返回默认值
    """

    def __init__(self, joints: Iterable[Sequence[float]]):
        """
        :param joints: 每个元素为 (theta_offset, d, a, alpha)
        """
        params = []
        for i, joint in enumerate(joints):
            values = tuple(float(v) for v in joint)
            if len(values) != 4:
                raise ValueError(f"Joint {i} must have 4 DH parameters, got {len(values)}")
            params.append(DHParameters(*values))
        self._joints: Tuple[DHParameters, ...] = tuple(params)

    @property
    def dof(self) -> int:
        return len(self._joints)

    def __len__(self) -> int:
        return len(self._joints)

    def __getitem__(self, index: int) -> DHParameters:
        if not -len(self._joints) <= index < len(self._joints):
            raise IndexError(f"Joint index {index} out of range for a {self.dof}-DOF chain")
        return self._joints[index]

    def __iter__(self) -> Iterator[DHParameters]:
        return iter(self._joints)

    def __eq__(self, other) -> bool:
        if not isinstance(other, JointChain):
            return NotImplemented
        return self._joints == other._joints

    def __hash__(self) -> int:
        return hash(self._joints)

    def as_list(self) -> List[List[float]]:
        return [list(joint) for joint in self._joints]

    def __repr__(self):
        return f"<{self.__class__.__name__}: {self.dof} joints>"


def chain_for_dof(dof: int) -> JointChain:
    """
    取 DH 模板的前 dof 行构成关节链

    :param dof: 自由度，2 ~ 7
    :return: JointChain
    """
    if not MIN_DOF <= dof <= MAX_DOF:
        raise ValueError(f"DOF must be between {MIN_DOF} and {MAX_DOF}, got {dof}")
    return JointChain(DH_TEMPLATE[:dof])


def joint_transform(theta: float, d: float, a: float, alpha: float) -> np.ndarray:
    """
    标准 DH 约定下单个关节的 4x4 齐次变换矩阵

    :param theta: 关节角（已包含 theta_offset）
    :param d: 沿 z 轴偏移
    :param a: 沿 x 轴连杆长度
    :param alpha: 绕 x 轴扭转角
    :return: 4x4 变换矩阵
    """
    ct, st = np.cos(theta), np.sin(theta)
    ca, sa = np.cos(alpha), np.sin(alpha)
    return np.array([
        [ct, -st * ca,  st * sa, a * ct],
        [st,  ct * ca, -ct * sa, a * st],
        [0.0,      sa,       ca,      d],
        [0.0,     0.0,      0.0,    1.0],
    ], dtype=np.float64)


def as_chain(chain) -> JointChain:
    """接受 JointChain 或 (theta_offset, d, a, alpha) 序列"""
    if isinstance(chain, JointChain):
        return chain
    return JointChain(chain)


def _shared_length(joint_angles: np.ndarray, chain: JointChain) -> int:
    n = min(len(joint_angles), len(chain))
    if len(joint_angles) != len(chain):
        # 兼容变自由度调用：只使用公共前缀，但这是调用方错误
        logger.warning(
            "Joint angle count (%d) does not match chain length (%d); using the first %d joints",
            len(joint_angles), len(chain), n)
    return n


def _iter_transforms(joint_angles, chain) -> Iterator[np.ndarray]:
    """依次产出 T_0 = I, T_0·T_1, T_0·T_1·T_2 ..."""
    chain = as_chain(chain)
    q = np.asarray(joint_angles, dtype=np.float64).reshape(-1)
    transform = np.identity(4, dtype=np.float64)
    yield transform
    for i in range(_shared_length(q, chain)):
        joint = chain[i]
        # global = parent_global @ local
        transform = multiply(transform, joint_transform(
            q[i] + joint.theta_offset, joint.d, joint.a, joint.alpha))
        yield transform


def forward_kinematics(joint_angles, chain: JointChain) -> Pose:
    """
    正向运动学：从单位矩阵开始左乘累积 T = T · T_i

    :param joint_angles: N 个关节角（弧度）
    :param chain: DH 关节链
    :return: (末端位置 (3,), 末端旋转矩阵 (3, 3))
    """
    transform = None
    for transform in _iter_transforms(joint_angles, chain):
        pass
    return transform[:3, 3].copy(), transform[:3, :3].copy()


def joint_frames(joint_angles, chain: JointChain) -> List[Pose]:
    """
    每个关节坐标系的位姿，供渲染连杆/关节或导出使用
    第一个元素为基座坐标系，最后一个为末端坐标系

    :param joint_angles: N 个关节角（弧度）
    :param chain: DH 关节链
    :return: [(position, rotation), ...]，长度为 N + 1
    """
    return [(t[:3, 3].copy(), t[:3, :3].copy()) for t in _iter_transforms(joint_angles, chain)]
