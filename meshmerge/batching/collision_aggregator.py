"""
CollisionAggregator — сбор авторских коллизий в одно статическое тело.

Участвуют только объекты, которые сами являются StaticBody или содержат
его прямым потомком. Каждая CollisionShape такого тела даёт одну запись
со своей мировой позой и КОПИЕЙ формы: исходные объекты будут удалены,
объединённое тело не должно делить с ними изменяемое состояние.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from meshmerge import log
from meshmerge.colliders import Shape
from meshmerge.geombase import GeneralPose3
from meshmerge.scene.entity import Entity, NodeKind, node_kind
from meshmerge.scene.nodes import BodyKind, CollisionShape, PhysicsBody, StaticBody

MERGED_COLLISION_TAG = "merge_collision"


@dataclass
class CollisionSource:
    pose: GeneralPose3
    shape: Shape
    source_name: str = ""


@dataclass
class MergedCollisionBody:
    """Ordered (pose, shape) pairs gathered in one pass. Never empty."""

    entries: List[CollisionSource] = field(default_factory=list)
    collision_layer: int = 1
    collision_mask: int = 1

    @property
    def shape_count(self) -> int:
        return len(self.entries)

    def build_node(self, name: str = "MergedCollision") -> StaticBody:
        """StaticBody with one CollisionShape child per entry."""
        body = StaticBody(name, collision_layer=self.collision_layer, collision_mask=self.collision_mask)
        body.generated = MERGED_COLLISION_TAG
        for index, entry in enumerate(self.entries):
            body.add_child(CollisionShape(f"Shape_{index}", shape=entry.shape, pose=entry.pose))
        return body


class CollisionAggregator:
    """Collects pre-authored static collision shapes from source objects."""

    def __init__(self) -> None:
        self._first_body: Optional[PhysicsBody] = None

    @staticmethod
    def find_static_body(entity: Entity) -> Optional[PhysicsBody]:
        """The object itself if it is a static body, else its first static body child."""
        if node_kind(entity) is NodeKind.PHYSICS_BODY and entity.body_kind is BodyKind.STATIC:
            return entity
        for child in entity.children:
            if node_kind(child) is NodeKind.PHYSICS_BODY and child.body_kind is BodyKind.STATIC:
                return child
        return None

    def gather(self, sources: Iterable[Entity], root: Optional[Entity] = None) -> List[CollisionSource]:
        """
        Args:
            sources: Source objects in input order.
            root: Frame of the resulting poses (world frame when None).
        """
        root_inv = root.global_pose().inverse() if root is not None else None
        result: List[CollisionSource] = []
        self._first_body = None

        for source in sources:
            body = self.find_static_body(source)
            if body is None:
                continue
            if self._first_body is None:
                self._first_body = body
            for shape_node in body.shape_nodes():
                world = shape_node.global_pose()
                pose = root_inv * world if root_inv is not None else world.copy()
                result.append(CollisionSource(pose=pose, shape=shape_node.shape.duplicate(), source_name=source.name))
        return result

    def aggregate(self, sources: Iterable[Entity], root: Optional[Entity] = None) -> Optional[MergedCollisionBody]:
        """Merged body, or None when nothing collidable was found."""
        entries = self.gather(sources, root)
        if not entries:
            log.debug("[CollisionAggregator] No static collision shapes found")
            return None
        merged = MergedCollisionBody(entries=entries)
        if self._first_body is not None:
            merged.collision_layer = self._first_body.collision_layer
            merged.collision_mask = self._first_body.collision_mask
        log.debug(f"[CollisionAggregator] Merged {merged.shape_count} shape(s)")
        return merged
