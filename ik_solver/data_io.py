"""
数据交换功能实现
读取 config.json / targets.json，导出逐帧求解结果
"""
import json
import os
import numpy as np
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from .model.chain import DEFAULT_DOF, JointChain, joint_frames
from .solver.fallback import FAST_PARAMS, ROBUST_PARAMS, IKParams
from .solver.solve_ik import IKResult
from .utils.rotation_utils import quaternion_to_rotation_matrix, rotation_matrix_to_euler


@dataclass
class SolverConfig:
    """
    求解配置

    :param dof: 自由度
    :param dh_params: 自定义 DH 参数（可选），长度必须等于 dof
    :param targets_path: 目标文件路径
    :param output_path: 结果输出路径
    :param fast: 第一阶段参数
    :param robust: 第二阶段参数
    :param log_level: 日志级别名称
    """
    dof: int = DEFAULT_DOF
    dh_params: Optional[List[List[float]]] = None
    targets_path: Optional[str] = None
    output_path: str = 'results.json'
    fast: IKParams = FAST_PARAMS
    robust: IKParams = ROBUST_PARAMS
    log_level: str = 'INFO'


@dataclass
class Target:
    """单帧目标位姿；orientation 为 [roll, pitch, yaw]（弧度）"""
    frame: int
    position: np.ndarray
    orientation: np.ndarray = field(default_factory=lambda: np.zeros(3))


def _resolve(path: Optional[str], base_dir: str) -> Optional[str]:
    if path is None or os.path.isabs(path):
        return path
    return os.path.normpath(os.path.join(base_dir, path))


def load_config(json_path: str) -> SolverConfig:
    """
    从 config.json 加载求解配置
    输入文件 (targets_path) 的相对路径以配置文件所在目录为基准，
    输出路径 (output_path) 的相对路径以当前工作目录为基准

    :param json_path: 配置文件路径
    :return: SolverConfig
    """
    with open(json_path, 'r', encoding='utf-8') as f:
        data = json.load(f)
    base_dir = os.path.dirname(os.path.abspath(json_path))

    dof = int(data.get('dof', DEFAULT_DOF))
    dh_params = data.get('dh_params')
    if dh_params is not None:
        if len(dh_params) != dof:
            raise ValueError(f"dh_params has {len(dh_params)} rows but dof is {dof}")
        for i, row in enumerate(dh_params):
            if len(row) != 4:
                raise ValueError(f"dh_params row {i} must be [theta_offset, d, a, alpha]")

    return SolverConfig(
        dof=dof,
        dh_params=dh_params,
        targets_path=_resolve(data.get('targets_path'), base_dir),
        output_path=str(data.get('output_path', 'results.json')),
        fast=IKParams.from_dict(data.get('fast'), FAST_PARAMS),
        robust=IKParams.from_dict(data.get('robust'), ROBUST_PARAMS),
        log_level=str(data.get('log_level', 'INFO')),
    )


def _target_orientation(item: Dict) -> np.ndarray:
    if 'quaternion' in item:
        # 四元数 [w, x, y, z] 统一转换为 RPY
        return rotation_matrix_to_euler(quaternion_to_rotation_matrix(item['quaternion']))
    rpy = np.array(item.get('rpy', [0.0, 0.0, 0.0]), dtype=np.float64)
    if rpy.shape != (3,):
        raise ValueError(f"rpy must be [roll, pitch, yaw], got {item['rpy']}")
    return rpy


def load_targets(json_path: str) -> List[Target]:
    """
    从 targets.json 加载目标序列

    :param json_path: targets.json 文件路径
    :return: 按帧号排序的目标列表；每个元素为
             {"frame": int, "pos": [x, y, z], "rpy": [roll, pitch, yaw]（弧度）}
             或用 "quaternion": [w, x, y, z] 代替 "rpy"
    """
    with open(json_path, 'r', encoding='utf-8') as f:
        data = json.load(f)

    targets = []
    for index, item in enumerate(data):
        if 'pos' not in item:
            raise ValueError(f"Target {index} has no 'pos'")
        position = np.array(item['pos'], dtype=np.float64)
        if position.shape != (3,):
            raise ValueError(f"Target {index} position must be [x, y, z], got {item['pos']}")
        targets.append(Target(
            frame=int(item.get('frame', index)),
            position=position,
            orientation=_target_orientation(item),
        ))

    # 按帧号排序
    targets.sort(key=lambda t: t.frame)
    return targets


def export_results(frames: Sequence[int],
                   results: Sequence[IKResult],
                   chain: JointChain,
                   output_path: str):
    """
    导出逐帧求解结果到 JSON

    :param frames: 帧号列表
    :param results: 与 frames 一一对应的 IKResult
    :param chain: 求解所用的 DH 关节链，用于计算各关节位置
    :param output_path: 输出文件路径
    """
    frames_data = []
    for frame, result in zip(frames, results):
        frame_data = {
            'frame': int(frame),
            'success': bool(result.success),
            'elapsed': float(result.elapsed),
            'error': float(result.error) if np.isfinite(result.error) else None,
            'joint_angles': None,
            'joint_positions': None,
        }
        if result.joint_angles is not None:
            frame_data['joint_angles'] = [float(q) for q in result.joint_angles]
            frame_data['joint_positions'] = [
                [float(v) for v in pos] for pos, _ in joint_frames(result.joint_angles, chain)]
        frames_data.append(frame_data)

    output = {'dof': len(chain), 'frames': frames_data}

    # 确保输出目录存在
    os.makedirs(os.path.dirname(os.path.abspath(output_path)), exist_ok=True)
    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(output, f, indent=2, ensure_ascii=False)
