"""
Collision shape resources.

A shape is geometry only: it carries no pose. CollisionShape nodes place
a shape in the scene. Shapes are mutable resources (the inspector edits
box size, sphere radius), so whoever needs a private copy calls
duplicate().
"""

from __future__ import annotations

import uuid as _uuid

import numpy as np


class Shape:
    """Base class for collision shapes."""

    type_name = "Shape"

    def __init__(self):
        self.uuid = _uuid.uuid4().hex

    def duplicate(self) -> "Shape":
        """Deep copy with a new resource identity."""
        raise NotImplementedError("duplicate must be implemented in subclasses.")

    def local_aabb(self) -> tuple[np.ndarray, np.ndarray]:
        """AABB в локальных координатах."""
        raise NotImplementedError("local_aabb must be implemented in subclasses.")

    def serialize(self) -> dict:
        raise NotImplementedError("serialize must be implemented in subclasses.")

    @staticmethod
    def deserialize(data: dict) -> "Shape":
        kind = data.get("type")
        cls = _SHAPE_TYPES.get(kind)
        if cls is None:
            raise ValueError(f"Unknown shape type: {kind}")
        return cls.from_dict(data)


class BoxShape(Shape):
    """
    Box — параллелепипед с центром в начале координат.

    size: Полный размер (не half_size)
    """

    type_name = "Box"

    def __init__(self, size=(1.0, 1.0, 1.0)):
        super().__init__()
        self.size = np.array(size, dtype=np.float32)

    def duplicate(self) -> "BoxShape":
        return BoxShape(self.size.copy())

    def local_aabb(self):
        half = self.size / 2.0
        return -half, half

    def serialize(self) -> dict:
        return {"type": self.type_name, "size": self.size.tolist()}

    @classmethod
    def from_dict(cls, data: dict) -> "BoxShape":
        return cls(data.get("size", (1.0, 1.0, 1.0)))

    def __repr__(self):
        return f"BoxShape(size={self.size})"


class SphereShape(Shape):
    type_name = "Sphere"

    def __init__(self, radius: float = 0.5):
        super().__init__()
        self.radius = float(radius)

    def duplicate(self) -> "SphereShape":
        return SphereShape(self.radius)

    def local_aabb(self):
        r = np.full(3, self.radius, dtype=np.float32)
        return -r, r

    def serialize(self) -> dict:
        return {"type": self.type_name, "radius": self.radius}

    @classmethod
    def from_dict(cls, data: dict) -> "SphereShape":
        return cls(data.get("radius", 0.5))

    def __repr__(self):
        return f"SphereShape(radius={self.radius})"


class CapsuleShape(Shape):
    """
    Capsule along the Y axis.

    half_height is the half-length of the axis (not including caps).
    """

    type_name = "Capsule"

    def __init__(self, half_height: float = 0.5, radius: float = 0.25):
        super().__init__()
        self.half_height = float(half_height)
        self.radius = float(radius)

    def duplicate(self) -> "CapsuleShape":
        return CapsuleShape(self.half_height, self.radius)

    def local_aabb(self):
        ext = np.array([self.radius, self.half_height + self.radius, self.radius], dtype=np.float32)
        return -ext, ext

    def serialize(self) -> dict:
        return {"type": self.type_name, "half_height": self.half_height, "radius": self.radius}

    @classmethod
    def from_dict(cls, data: dict) -> "CapsuleShape":
        return cls(data.get("half_height", 0.5), data.get("radius", 0.25))


class ConvexPolygonShape(Shape):
    """Convex hull given by its points, shape (N, 3)."""

    type_name = "ConvexPolygon"

    def __init__(self, points: np.ndarray):
        super().__init__()
        self.points = np.asarray(points, dtype=np.float32).reshape(-1, 3)

    def duplicate(self) -> "ConvexPolygonShape":
        return ConvexPolygonShape(self.points.copy())

    def local_aabb(self):
        return self.points.min(axis=0), self.points.max(axis=0)

    def serialize(self) -> dict:
        return {"type": self.type_name, "points": self.points.tolist()}

    @classmethod
    def from_dict(cls, data: dict) -> "ConvexPolygonShape":
        return cls(np.array(data["points"], dtype=np.float32))

    def __repr__(self):
        return f"ConvexPolygonShape(points={len(self.points)})"


class ConcavePolygonShape(Shape):
    """Exact triangle mesh collision: triangle soup, shape (M, 3, 3)."""

    type_name = "ConcavePolygon"

    def __init__(self, faces: np.ndarray):
        super().__init__()
        self.faces = np.asarray(faces, dtype=np.float32).reshape(-1, 3, 3)

    @property
    def triangle_count(self) -> int:
        return len(self.faces)

    def duplicate(self) -> "ConcavePolygonShape":
        return ConcavePolygonShape(self.faces.copy())

    def local_aabb(self):
        flat = self.faces.reshape(-1, 3)
        return flat.min(axis=0), flat.max(axis=0)

    def serialize(self) -> dict:
        return {"type": self.type_name, "faces": self.faces.reshape(-1, 9).tolist()}

    @classmethod
    def from_dict(cls, data: dict) -> "ConcavePolygonShape":
        return cls(np.array(data["faces"], dtype=np.float32))

    def __repr__(self):
        return f"ConcavePolygonShape(triangles={self.triangle_count})"


_SHAPE_TYPES = {
    cls.type_name: cls
    for cls in (BoxShape, SphereShape, CapsuleShape, ConvexPolygonShape, ConcavePolygonShape)
}
