"""
资源路径工具函数
定位随包分发的 ik_solver/data 目录（默认配置与示例目标），兼容 PyInstaller 打包环境
"""
import os
import sys


def _package_path() -> str:
    if getattr(sys, 'frozen', False):
        # PyInstaller 打包后：资源解压到 sys._MEIPASS，否则放在可执行文件旁边
        base_path = getattr(sys, '_MEIPASS', os.path.dirname(sys.executable))
        return os.path.join(base_path, 'ik_solver')
    # 开发或安装环境：ik_solver/utils 的上一级即包目录
    return os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


def get_data_path(filename: str) -> str:
    """
    获取包内 data 目录下文件的绝对路径

    :param filename: 文件名（如 'config.json'）
    :return: 文件的绝对路径
    """
    return os.path.join(_package_path(), 'data', filename)
