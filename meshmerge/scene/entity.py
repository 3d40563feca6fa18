"""Entity - scene graph node with a local pose, children and components."""

from __future__ import annotations

import uuid as _uuid
from enum import Enum
from typing import TYPE_CHECKING, Iterator, Optional, Type, TypeVar

from meshmerge.geombase import GeneralPose3

if TYPE_CHECKING:
    from meshmerge.scene.component import Component
    from meshmerge.scene.scene import Scene

C = TypeVar("C", bound="Component")


class NodeKind(Enum):
    """Closed set of node variants the scene tools care about."""
    GEOMETRY = "geometry"               # MeshInstance
    COLLISION_SHAPE = "collision_shape" # CollisionShape
    PHYSICS_BODY = "physics_body"       # StaticBody, RigidBody, ...
    BATCH = "batch"                     # MultiMeshInstance
    OTHER = "other"


class Entity:
    """
    Узел сцены.

    pose      – локальная поза относительно родителя
    owner     – узел, которому принадлежит entity при сохранении сцены
                (None — узел создан в рантайме и не сохраняется)
    generated – метка узлов, созданных инструментами ("" для авторских)
    """

    kind = NodeKind.OTHER

    def __init__(self, name: str = "", pose: Optional[GeneralPose3] = None):
        self.name = name or type(self).__name__
        self.uuid = _uuid.uuid4().hex
        self.pose = pose.copy() if pose is not None else GeneralPose3.identity()
        self.owner: Optional[Entity] = None
        self.generated: str = ""
        self.destroyed = False
        self.components: list["Component"] = []
        self._parent: Optional[Entity] = None
        self._children: list[Entity] = []
        self._scene: Optional["Scene"] = None

    # --- Hierarchy ---

    @property
    def parent(self) -> Optional["Entity"]:
        return self._parent

    @property
    def children(self) -> tuple["Entity", ...]:
        return tuple(self._children)

    def add_child(self, child: "Entity") -> "Entity":
        if child is self:
            raise ValueError("Entity cannot be its own child")
        if child._parent is not None:
            raise ValueError(f"Entity '{child.name}' already has a parent '{child._parent.name}'")
        if child.destroyed:
            raise ValueError(f"Entity '{child.name}' is destroyed")
        self._children.append(child)
        child._parent = self
        scene = self.scene
        if scene is not None:
            child._attach_scene(scene)
        return child

    def remove_child(self, child: "Entity") -> None:
        self._children.remove(child)
        child._parent = None
        child._detach_scene()

    def destroy(self) -> None:
        """Detach from the parent and destroy the whole subtree."""
        if self.destroyed:
            return
        if self._parent is not None:
            self._parent.remove_child(self)
        for node in list(self.iter_subtree()):
            node.destroyed = True
            for comp in node.components:
                comp.on_destroy()

    def iter_subtree(self) -> Iterator["Entity"]:
        """Depth-first pre-order, self first."""
        yield self
        for child in self._children:
            yield from child.iter_subtree()

    def iter_descendants(self) -> Iterator["Entity"]:
        """Depth-first pre-order without self."""
        for child in self._children:
            yield from child.iter_subtree()

    def find(self, path: str) -> Optional["Entity"]:
        """Find descendant by slash separated name path ("Props/Crates")."""
        node = self
        for part in path.strip("/").split("/"):
            if not part or part == ".":
                continue
            if part == "..":
                node = node._parent
                if node is None:
                    return None
                continue
            node = next((c for c in node._children if c.name == part), None)
            if node is None:
                return None
        return node

    def path(self) -> str:
        parts = []
        node = self
        while node._parent is not None:
            parts.append(node.name)
            node = node._parent
        return "/".join(reversed(parts))

    def set_owner_recursive(self, owner: Optional["Entity"]) -> None:
        for node in self.iter_subtree():
            if node is not owner:
                node.owner = owner

    # --- Transforms ---

    def global_pose(self) -> GeneralPose3:
        pose = self.pose
        node = self._parent
        while node is not None:
            pose = node.pose * pose
            node = node._parent
        return pose

    def pose_relative_to(self, ancestor: Optional["Entity"]) -> GeneralPose3:
        """Pose in the local frame of `ancestor` (world pose when None)."""
        world = self.global_pose()
        if ancestor is None:
            return world
        return ancestor.global_pose().inverse() * world

    # --- Scene ---

    @property
    def scene(self) -> Optional["Scene"]:
        return self._scene

    def _attach_scene(self, scene: "Scene") -> None:
        for node in self.iter_subtree():
            node._scene = scene
            for comp in node.components:
                comp.on_added(scene)

    def _detach_scene(self) -> None:
        for node in self.iter_subtree():
            if node._scene is not None:
                for comp in node.components:
                    comp.on_removed()
            node._scene = None

    # --- Components ---

    def add_component(self, component: "Component") -> "Component":
        self.components.append(component)
        component.entity = self
        component.on_added_to_entity()
        if self._scene is not None:
            component.on_added(self._scene)
        return component

    def remove_component(self, component: "Component") -> None:
        self.components.remove(component)
        component.on_removed_from_entity()
        component.entity = None

    def get_component(self, component_type: Type[C]) -> Optional[C]:
        for comp in self.components:
            if isinstance(comp, component_type):
                return comp
        return None

    # --- Serialization ---

    def serialize(self) -> dict:
        data = {
            "type": type(self).__name__,
            "name": self.name,
            "uuid": self.uuid,
            "pose": self.pose.to_list(),
        }
        if self.generated:
            data["generated"] = self.generated
        data.update(self._serialize_extra())
        if self.components:
            data["components"] = [c.serialize() for c in self.components]
        return data

    def _serialize_extra(self) -> dict:
        return {}

    def __repr__(self):
        return f"{type(self).__name__}({self.name!r})"


def node_kind(entity: Entity) -> NodeKind:
    """Capability query: which variant the node is."""
    return entity.kind
