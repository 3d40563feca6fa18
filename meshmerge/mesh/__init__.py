"""Mesh module - Mesh3 and primitive meshes."""

from meshmerge.mesh.mesh import Mesh3, CubeMesh, PlaneMesh, UVSphereMesh

__all__ = ["Mesh3", "CubeMesh", "PlaneMesh", "UVSphereMesh"]
