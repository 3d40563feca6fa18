"""BatchedProxy - one mesh drawn at many instance poses."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Sequence

import numpy as np

from meshmerge.batching.mesh_groups import MeshKey
from meshmerge.geombase import GeneralPose3

if TYPE_CHECKING:
    from meshmerge.mesh import Mesh3
    from meshmerge.resources import Material


class BatchedProxy:
    """
    Render batch resource.

    Instance poses are frozen at construction: index i always refers to
    the same instance, collision synthesis relies on it.
    """

    def __init__(
        self,
        mesh: "Mesh3",
        transforms: Sequence[GeneralPose3],
        material: Optional["Material"] = None,
        name: str = "",
    ):
        self.mesh = mesh
        self.material = material
        self.name = name or f"{mesh.name or 'Mesh'}_batch"
        self._transforms: tuple[GeneralPose3, ...] = tuple(p.copy() for p in transforms)

    @property
    def key(self) -> MeshKey:
        return MeshKey.of(self.mesh)

    @property
    def transforms(self) -> tuple[GeneralPose3, ...]:
        return self._transforms

    @property
    def instance_count(self) -> int:
        return len(self._transforms)

    def instance_pose(self, index: int) -> GeneralPose3:
        return self._transforms[index]

    def instance_matrices(self) -> np.ndarray:
        """Model matrices of all instances, shape (N, 4, 4)."""
        if not self._transforms:
            return np.zeros((0, 4, 4))
        return np.stack([p.as_matrix() for p in self._transforms])

    def world_bounds(self) -> tuple[np.ndarray, np.ndarray]:
        """AABB of all instances in the proxy frame."""
        lo, hi = self.mesh.bounds()
        corners = np.array([[x, y, z] for x in (lo[0], hi[0]) for y in (lo[1], hi[1]) for z in (lo[2], hi[2])])
        if not self._transforms:
            return lo.astype(float), hi.astype(float)
        points = np.concatenate([p.transform_points(corners) for p in self._transforms])
        return points.min(axis=0), points.max(axis=0)

    def __repr__(self):
        return f"BatchedProxy(name={self.name!r}, mesh={self.mesh.uuid}, instances={self.instance_count})"
