"""Base mesh class: triangle geometry with a stable resource identity."""

from __future__ import annotations

import uuid as _uuid
from typing import TYPE_CHECKING, Optional

import numpy as np

if TYPE_CHECKING:
    from meshmerge.resources.material import Material


class Mesh3:
    """
    Triangle mesh: vertex positions, triangle indices and optional UVs.

    `uuid` is the geometry identity. Two MeshInstance nodes referencing
    the same asset share the uuid even when they hold different Mesh3
    objects (e.g. the asset was loaded twice), so batching groups by uuid,
    never by `id()`.

    `source_path` is the asset path the mesh was loaded from (empty for
    procedural meshes). `material` is the mesh's own surface material.
    """

    def __init__(
        self,
        vertices: np.ndarray,
        triangles: np.ndarray,
        uvs: Optional[np.ndarray] = None,
        name: str = "",
        uuid: str = "",
        source_path: str = "",
        material: Optional["Material"] = None,
    ):
        self.vertices = np.asarray(vertices, dtype=np.float32)
        self.triangles = np.asarray(triangles, dtype=np.int32)
        self.uvs = np.asarray(uvs, dtype=np.float32) if uvs is not None else None
        self.name = name
        self.uuid = uuid or _uuid.uuid4().hex
        self.source_path = source_path
        self.material = material
        self._validate_mesh()

    def _validate_mesh(self):
        """Ensure that the vertex/index arrays have correct shapes and bounds."""
        if self.vertices.size == 0:
            self.vertices = self.vertices.reshape(0, 3)
        if self.triangles.size == 0:
            self.triangles = self.triangles.reshape(0, 3)
        if self.vertices.ndim != 2 or self.vertices.shape[1] != 3:
            raise ValueError("Vertices must be a Nx3 array.")
        if self.triangles.ndim != 2 or self.triangles.shape[1] != 3:
            raise ValueError("Triangles must be a Mx3 array.")
        if self.triangles.size and (self.triangles.min() < 0 or self.triangles.max() >= len(self.vertices)):
            raise ValueError("Triangle index out of range.")
        if self.uvs is not None and self.uvs.shape != (len(self.vertices), 2):
            raise ValueError("UVs must be a Nx2 array matching vertices.")

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)

    @property
    def triangle_count(self) -> int:
        return len(self.triangles)

    def is_empty(self) -> bool:
        return self.vertex_count == 0 or self.triangle_count == 0

    def bounds(self) -> tuple[np.ndarray, np.ndarray]:
        """Local AABB as (min, max)."""
        if self.vertex_count == 0:
            zero = np.zeros(3, dtype=np.float32)
            return zero, zero.copy()
        return self.vertices.min(axis=0), self.vertices.max(axis=0)

    def triangle_soup(self) -> np.ndarray:
        """Vertices of every triangle, shape (M, 3, 3)."""
        return self.vertices[self.triangles]

    def copy(self, keep_identity: bool = False) -> "Mesh3":
        """
        Copy geometry. A copy is a new resource unless keep_identity is set
        (used when the same asset is loaded into a second object).
        """
        return Mesh3(
            self.vertices.copy(),
            self.triangles.copy(),
            uvs=self.uvs.copy() if self.uvs is not None else None,
            name=self.name,
            uuid=self.uuid if keep_identity else "",
            source_path=self.source_path,
            material=self.material,
        )

    def __repr__(self):
        return f"Mesh3(name={self.name!r}, uuid={self.uuid}, vertices={self.vertex_count}, triangles={self.triangle_count})"


# Re-export primitives
from .primitives import (  # noqa: E402
    CubeMesh,
    PlaneMesh,
    UVSphereMesh,
)
