"""
Модуль коллизионных форм.

Содержит:
- Базовый класс Shape
- Примитивы: BoxShape, SphereShape, CapsuleShape
- ConvexPolygonShape, ConcavePolygonShape - формы, построенные по мешу
"""

from .shape import (
    Shape,
    BoxShape,
    SphereShape,
    CapsuleShape,
    ConvexPolygonShape,
    ConcavePolygonShape,
)

__all__ = [
    'Shape',
    'BoxShape',
    'SphereShape',
    'CapsuleShape',
    'ConvexPolygonShape',
    'ConcavePolygonShape',
]
