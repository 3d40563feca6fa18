"""Node variants: geometry holders, collision shapes, physics bodies, batches."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Optional

from meshmerge.geombase import GeneralPose3
from meshmerge.scene.entity import Entity, NodeKind

if TYPE_CHECKING:
    from meshmerge.batching.proxy import BatchedProxy
    from meshmerge.colliders import Shape
    from meshmerge.mesh import Mesh3
    from meshmerge.resources import Material


class MeshInstance(Entity):
    """Visual geometry holder: one mesh plus an optional material override."""

    kind = NodeKind.GEOMETRY

    def __init__(
        self,
        name: str = "",
        mesh: Optional["Mesh3"] = None,
        material_override: Optional["Material"] = None,
        pose: Optional[GeneralPose3] = None,
    ):
        super().__init__(name, pose)
        self.mesh = mesh
        self.material_override = material_override

    def _serialize_extra(self) -> dict:
        return {
            "mesh": self.mesh.uuid if self.mesh is not None else None,
            "material": self.material_override.uuid if self.material_override is not None else None,
        }


class CollisionShape(Entity):
    """Places a collision shape resource under a physics body."""

    kind = NodeKind.COLLISION_SHAPE

    def __init__(
        self,
        name: str = "",
        shape: Optional["Shape"] = None,
        pose: Optional[GeneralPose3] = None,
        disabled: bool = False,
    ):
        super().__init__(name, pose)
        self.shape = shape
        self.disabled = disabled

    def _serialize_extra(self) -> dict:
        return {
            "shape": self.shape.serialize() if self.shape is not None else None,
            "disabled": self.disabled,
        }


class BodyKind(Enum):
    STATIC = "static"
    RIGID = "rigid"
    CHARACTER = "character"
    AREA = "area"


class PhysicsBody(Entity):
    """Base physics body. Collision comes from CollisionShape children."""

    kind = NodeKind.PHYSICS_BODY
    body_kind = BodyKind.STATIC

    def __init__(
        self,
        name: str = "",
        pose: Optional[GeneralPose3] = None,
        collision_layer: int = 1,
        collision_mask: int = 1,
    ):
        super().__init__(name, pose)
        self.collision_layer = collision_layer
        self.collision_mask = collision_mask

    def shape_nodes(self) -> list[CollisionShape]:
        """Direct CollisionShape children, enabled only."""
        return [
            c for c in self.children
            if c.kind is NodeKind.COLLISION_SHAPE and not c.disabled and c.shape is not None
        ]

    def _serialize_extra(self) -> dict:
        return {
            "body_kind": self.body_kind.value,
            "collision_layer": self.collision_layer,
            "collision_mask": self.collision_mask,
        }


class StaticBody(PhysicsBody):
    body_kind = BodyKind.STATIC


class RigidBody(PhysicsBody):
    body_kind = BodyKind.RIGID

    def __init__(self, name: str = "", pose: Optional[GeneralPose3] = None, mass: float = 1.0, **kwargs):
        super().__init__(name, pose, **kwargs)
        self.mass = mass


class CharacterBody(PhysicsBody):
    body_kind = BodyKind.CHARACTER


class Area(PhysicsBody):
    body_kind = BodyKind.AREA


class MultiMeshInstance(Entity):
    """
    Batched render proxy node: draws `proxy.mesh` once per instance pose.

    instance_bodies lists per-instance collision bodies generated for
    this node (including ones whose attachment is still deferred).
    """

    kind = NodeKind.BATCH

    def __init__(self, name: str = "", proxy: Optional["BatchedProxy"] = None, pose: Optional[GeneralPose3] = None):
        super().__init__(name, pose)
        self.proxy = proxy
        self.instance_bodies: list[Entity] = []

    @property
    def instance_count(self) -> int:
        return self.proxy.instance_count if self.proxy is not None else 0

    def _serialize_extra(self) -> dict:
        if self.proxy is None:
            return {"proxy": None}
        return {
            "proxy": {
                "mesh": self.proxy.mesh.uuid if self.proxy.mesh is not None else None,
                "instance_count": self.proxy.instance_count,
            }
        }
