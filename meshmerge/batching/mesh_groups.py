"""
MeshGroupBuilder — группировка исходных объектов по общей геометрии.

Для каждого исходного объекта ищется MeshInstance (сам объект, затем
потомки в глубину, первый найденный). Трансформы складываются в группу
в порядке входа: индекс инстанса = позиция в группе.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional

from meshmerge import log
from meshmerge.geombase import GeneralPose3
from meshmerge.scene.entity import Entity, NodeKind, node_kind

if TYPE_CHECKING:
    from meshmerge.mesh import Mesh3
    from meshmerge.resources import Material
    from meshmerge.scene.nodes import MeshInstance


@dataclass(frozen=True)
class MeshKey:
    """Geometry identity: value-equal for every reference to the same asset."""

    uuid: str

    @staticmethod
    def of(mesh: "Mesh3") -> "MeshKey":
        return MeshKey(mesh.uuid)


@dataclass
class MeshGroup:
    """All instances sharing one MeshKey, in input order."""

    key: MeshKey
    mesh: "Mesh3"
    poses: List[GeneralPose3] = field(default_factory=list)
    material: Optional["Material"] = None
    source_names: List[str] = field(default_factory=list)

    @property
    def instance_count(self) -> int:
        return len(self.poses)


class MeshGroupBuilder:
    """
    Scans source objects and groups their placements by mesh identity.

    After build():
        skipped       – number of sources without resolvable mesh
        skipped_names – their names (diagnostics)
    """

    def __init__(self) -> None:
        self.skipped = 0
        self.skipped_names: List[str] = []

    @staticmethod
    def resolve_mesh_holder(entity: Entity) -> Optional["MeshInstance"]:
        """First geometry holder with a usable mesh: self, then depth-first descendants."""
        for node in entity.iter_subtree():
            if node_kind(node) is NodeKind.GEOMETRY and node.mesh is not None and not node.mesh.is_empty():
                return node
        return None

    def build(self, sources: Iterable[Entity], root: Optional[Entity] = None) -> Dict[MeshKey, MeshGroup]:
        """
        Group sources by mesh.

        Args:
            sources: Source objects in input order.
            root: Frame of the resulting poses (world frame when None).

        Returns:
            Insertion-ordered mapping MeshKey -> MeshGroup. Empty when no
            source has a resolvable mesh.
        """
        self.skipped = 0
        self.skipped_names = []
        groups: Dict[MeshKey, MeshGroup] = {}
        root_inv = root.global_pose().inverse() if root is not None else None

        for source in sources:
            holder = self.resolve_mesh_holder(source)
            if holder is None:
                self.skipped += 1
                self.skipped_names.append(source.name)
                continue

            key = MeshKey.of(holder.mesh)
            group = groups.get(key)
            if group is None:
                group = MeshGroup(key=key, mesh=holder.mesh)
                groups[key] = group

            # Pose is captured now, later edits of the source do not leak in.
            world = holder.global_pose()
            pose = root_inv * world if root_inv is not None else world.copy()
            group.poses.append(pose)
            group.source_names.append(source.name)

            if group.material is None and holder.material_override is not None:
                group.material = holder.material_override

        if self.skipped:
            log.warn(
                f"[MeshGroupBuilder] {self.skipped} object(s) without mesh skipped: "
                f"{', '.join(self.skipped_names[:10])}"
            )
        if not groups:
            log.error("[MeshGroupBuilder] No source object has a resolvable mesh")
        else:
            total = sum(g.instance_count for g in groups.values())
            log.debug(f"[MeshGroupBuilder] {total} instance(s) in {len(groups)} group(s)")
        return groups
