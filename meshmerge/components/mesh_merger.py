"""
MeshMergerComponent - runs a merge pass from a scene object.

Usage:
1. Add this component to the group node holding the source objects
   (or set Target Group to a path from the scene root)
2. Click "Merge" in the inspector, or enable Run On Load
3. Sources are replaced by batched proxies and one merged collision body
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, Optional

from meshmerge import log
from meshmerge.batching.merge_record import MergeRecord
from meshmerge.batching.orchestrator import MergeOrchestrator, MergeResult
from meshmerge.batching.persistence import ResourceSaver
from meshmerge.batching.settings import MergeSettings, MergeSettingsManager, ShapePolicy
from meshmerge.core.event import Event
from meshmerge.core.scheduler import TaskScheduler
from meshmerge.editor.inspect_field import InspectField
from meshmerge.resources import Material, Texture
from meshmerge.scene.component import Component


class MeshMergerComponent(Component):
    inspect_fields = {
        "target_group_path": InspectField(
            path="settings.target_group_path",
            label="Target Group",
            kind="string",
        ),
        "output_folder": InspectField(
            path="settings.output_folder",
            label="Output Folder",
            kind="string",
        ),
        "save_proxies": InspectField(
            path="settings.save_proxies",
            label="Save Proxies",
            kind="bool",
        ),
        "run_on_load": InspectField(
            path="settings.run_on_load",
            label="Run On Load",
            kind="bool",
        ),
        "keep_originals": InspectField(
            path="settings.keep_originals",
            label="Keep Originals",
            kind="bool",
        ),
        "generate_instance_collision": InspectField(
            path="settings.generate_instance_collision",
            label="Instance Collision",
            kind="bool",
        ),
        "shape_policy": InspectField(
            path="settings.shape_policy",
            label="Shape Policy",
            kind="enum",
            choices=[(p.value, p.name.title()) for p in ShapePolicy],
        ),
        "collision_layer": InspectField(
            path="settings.collision_layer",
            label="Collision Layer",
            kind="int",
            min=0,
        ),
        "collision_mask": InspectField(
            path="settings.collision_mask",
            label="Collision Mask",
            kind="int",
            min=0,
        ),
        "yield_interval": InspectField(
            path="settings.yield_interval",
            label="Bodies Per Step",
            kind="int",
            min=1,
            max=100000,
            step=10,
        ),
        "completed": InspectField(
            path="record.completed",
            label="Merged",
            kind="bool",
            read_only=True,
        ),
        "merge_btn": InspectField(
            path=None,
            label="Merge",
            kind="button",
            action=lambda comp: comp.merge(),
            non_serializable=True,
        ),
        "reset_btn": InspectField(
            path=None,
            label="Reset",
            kind="button",
            action=lambda comp: comp.reset(),
            non_serializable=True,
        ),
    }

    serializable_fields = [
        "enabled",
        "target_group_path",
        "output_folder",
        "save_proxies",
        "run_on_load",
        "keep_originals",
        "generate_instance_collision",
        "shape_policy",
        "collision_layer",
        "collision_mask",
        "yield_interval",
    ]

    def __init__(self, settings: Optional[MergeSettings] = None, saver: Optional[ResourceSaver] = None):
        super().__init__(enabled=True)
        # Without explicit settings a component starts from a copy of the project-wide ones.
        self.settings = settings if settings is not None else replace(MergeSettingsManager.instance().settings)
        self.record = MergeRecord()
        self.saver = saver
        self.scheduler = TaskScheduler()
        self.last_result: Optional[MergeResult] = None
        self.on_merged: Event[MergeResult] = Event("on_merged")
        self._orchestrator: Optional[MergeOrchestrator] = None

    def serialize_data(self) -> Dict[str, Any]:
        data = super().serialize_data()
        material, texture = self.settings.material_override, self.settings.texture_override
        data["material_override"] = material.serialize() if material is not None else None
        data["texture_override"] = texture.serialize() if texture is not None else None
        data["record"] = self.record.to_dict()
        return data

    def deserialize_data(self, data: Dict[str, Any], context: Any = None) -> None:
        if not data:
            return
        data = dict(data)
        record = data.pop("record", None)
        has_material = "material_override" in data
        has_texture = "texture_override" in data
        material_data = data.pop("material_override", None)
        texture_data = data.pop("texture_override", None)
        super().deserialize_data(data, context)
        if has_material:
            self.settings.material_override = Material.deserialize(material_data) if material_data else None
        if has_texture:
            self.settings.texture_override = Texture.deserialize(texture_data) if texture_data else None
        if record is not None:
            self.record = MergeRecord.from_dict(record)
            if self._orchestrator is not None:
                self._orchestrator.record = self.record

    @property
    def orchestrator(self) -> Optional[MergeOrchestrator]:
        return self._orchestrator

    def _get_orchestrator(self) -> Optional[MergeOrchestrator]:
        if self.scene is None or self.entity is None:
            log.error("[MeshMergerComponent] Component is not in a scene")
            return None
        if self._orchestrator is None or self._orchestrator.scene is not self.scene:
            self._orchestrator = MergeOrchestrator(
                self.scene,
                settings=self.settings,
                record=self.record,
                group=self.entity,
                scheduler=self.scheduler,
                saver=self.saver,
            )
            self._orchestrator.on_merged += self.on_merged.emit
        # Settings may have been replaced by deserialization.
        self._orchestrator.settings = self.settings
        return self._orchestrator

    def merge(self) -> Optional[MergeResult]:
        orchestrator = self._get_orchestrator()
        if orchestrator is None:
            return None
        self.last_result = orchestrator.merge()
        return self.last_result

    def reset(self) -> None:
        if self._orchestrator is not None:
            self._orchestrator.reset()
        else:
            self.record.reset()

    def start(self) -> None:
        if self.settings.run_on_load and not self.record.completed:
            self.merge()

    def on_editor_start(self) -> None:
        self.start()

    def update(self, dt: float) -> None:
        if self.scheduler:
            self.scheduler.tick()

    def on_destroy(self) -> None:
        self.scheduler.clear()


__all__ = ["MeshMergerComponent"]
