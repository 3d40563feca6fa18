"""
Meshmerge - пакетирование сцены: замена множества одинаковых объектов
инстансными прокси с объединённой коллизией.

Основные модули:
- batching - группировка, сборка прокси, коллизии, оркестратор слияния
- scene - дерево сцены, компоненты, отложенные мутации
- geombase - позы (GeneralPose3)
- mesh, resources, colliders - геометрия, материалы, формы коллизий
- components - компоненты сцены для запуска слияния
"""

from .batching import MergeOrchestrator, MergeResult, MergeSettings

__version__ = '0.1.0'

__all__ = [
    'MergeOrchestrator',
    'MergeResult',
    'MergeSettings',
]
