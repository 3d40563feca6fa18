"""Scene components driving the batching pipeline."""

from meshmerge.components.mesh_merger import MeshMergerComponent
from meshmerge.components.instance_collision import InstanceCollisionComponent

__all__ = ["MeshMergerComponent", "InstanceCollisionComponent"]
