"""
Базовые геометрические классы (Geometric Base).

- GeneralPose3 - позы с масштабированием (иерархия сцены, инстансы)
- qmul, qrot, qinv - операции с кватернионами (x, y, z, w)
"""

from .general_pose3 import GeneralPose3
from .quat import qmul, qrot, qinv, quat_from_matrix

__all__ = [
    'GeneralPose3',
    'qmul',
    'qrot',
    'qinv',
    'quat_from_matrix',
]
