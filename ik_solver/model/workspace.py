"""
工作空间模型
按自由度给出轴对齐的可达包围盒，用于拒绝明显不可达的目标，以及限定目标位置的调节范围

注意：包围盒只是真实（非凸）可达空间的粗略近似，既会拒绝少数可达位姿，
也会放过盒子角落处不可达的位姿
"""
import numpy as np
from dataclasses import dataclass
from typing import Dict, Tuple


@dataclass(frozen=True)
class WorkspaceBounds:
    """轴对齐包围盒（米），各轴闭区间"""
    x_min: float
    x_max: float
    y_min: float
    y_max: float
    z_min: float
    z_max: float

    def contains(self, position) -> bool:
        x, y, z = (float(v) for v in position)
        return (self.x_min <= x <= self.x_max
                and self.y_min <= y <= self.y_max
                and self.z_min <= z <= self.z_max)

    def as_dict(self) -> Dict[str, float]:
        return {
            'x_min': self.x_min, 'x_max': self.x_max,
            'y_min': self.y_min, 'y_max': self.y_max,
            'z_min': self.z_min, 'z_max': self.z_max,
        }


# 自由度越多，名义可达范围越大
WORKSPACE_BOUNDS: Dict[int, WorkspaceBounds] = {
    2: WorkspaceBounds(-0.4, 0.4, -0.4, 0.4, 0.3, 0.8),
    3: WorkspaceBounds(-0.5, 0.5, -0.5, 0.5, 0.3, 1.0),
    4: WorkspaceBounds(-0.6, 0.6, -0.6, 0.6, 0.3, 1.1),
    5: WorkspaceBounds(-0.7, 0.7, -0.7, 0.7, 0.3, 1.2),
    6: WorkspaceBounds(-0.8, 0.8, -0.8, 0.8, 0.3, 1.3),
    7: WorkspaceBounds(-1.0, 1.0, -1.0, 1.0, 0.3, 1.5),
}


def bounds(dof: int) -> WorkspaceBounds:
    """
    :param dof: 自由度，2 ~ 7
    :return: 该自由度的工作空间包围盒
    """
    if dof not in WORKSPACE_BOUNDS:
        raise ValueError(f"No workspace bounds defined for DOF {dof}")
    return WORKSPACE_BOUNDS[dof]


def is_reachable(position, dof: int) -> bool:
    """目标位置是否落在该自由度的包围盒内（含边界）"""
    return bounds(dof).contains(position)


def slider_ranges(dof: int) -> Tuple[Tuple[float, float], Tuple[float, float], Tuple[float, float]]:
    """
    目标位置的调节范围：x/y 取关于原点对称的 max(|min|, |max|)，z 直接取包围盒范围

    :return: ((x_lo, x_hi), (y_lo, y_hi), (z_lo, z_hi))
    """
    box = bounds(dof)
    x_range = max(abs(box.x_min), abs(box.x_max))
    y_range = max(abs(box.y_min), abs(box.y_max))
    return (-x_range, x_range), (-y_range, y_range), (box.z_min, box.z_max)


def clamp_to_workspace(position, dof: int) -> np.ndarray:
    """
    将目标位置限制到调节范围内（切换自由度时使用）

    :param position: [x, y, z]
    :param dof: 新的自由度
    :return: 限制后的位置 (3,)
    """
    lower, upper = zip(*slider_ranges(dof))
    return np.clip(np.asarray(position, dtype=np.float64), lower, upper)
