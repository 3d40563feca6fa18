"""
InstanceCollisionComponent - per-instance collision for a batched proxy.

Attach to a MultiMeshInstance node. "Generate" replaces the instance
bodies of the proxy, spreading the work over frames (one batch of
`yield_interval` bodies per update). "Clear" removes them.
"""

from __future__ import annotations

from typing import Optional

from meshmerge import log
from meshmerge.batching.instance_collision import PerInstanceCollisionSynthesizer
from meshmerge.batching.settings import ShapePolicy
from meshmerge.core.event import Event
from meshmerge.core.scheduler import Task, TaskScheduler
from meshmerge.editor.inspect_field import InspectField
from meshmerge.scene.component import Component
from meshmerge.scene.entity import NodeKind, node_kind
from meshmerge.scene.mutation import sink_for


class InstanceCollisionComponent(Component):
    inspect_fields = {
        "shape_policy": InspectField(
            path="shape_policy",
            label="Shape Policy",
            kind="enum",
            choices=[(p.value, p.name.title()) for p in ShapePolicy],
        ),
        "yield_interval": InspectField(
            path="yield_interval",
            label="Bodies Per Step",
            kind="int",
            min=1,
            max=100000,
            step=10,
        ),
        "collision_layer": InspectField(path="collision_layer", label="Collision Layer", kind="int", min=0),
        "collision_mask": InspectField(path="collision_mask", label="Collision Mask", kind="int", min=0),
        "generate_btn": InspectField(
            path=None,
            label="Generate",
            kind="button",
            action=lambda comp: comp.generate(),
            non_serializable=True,
        ),
        "clear_btn": InspectField(
            path=None,
            label="Clear",
            kind="button",
            action=lambda comp: comp.clear(),
            non_serializable=True,
        ),
    }

    serializable_fields = ["enabled", "shape_policy", "yield_interval", "collision_layer", "collision_mask"]

    def __init__(
        self,
        shape_policy: ShapePolicy = ShapePolicy.CONVEX,
        yield_interval: int = 100,
        collision_layer: int = 1,
        collision_mask: int = 1,
    ):
        super().__init__(enabled=True)
        self.shape_policy = shape_policy
        self.yield_interval = yield_interval
        self.collision_layer = collision_layer
        self.collision_mask = collision_mask
        self.scheduler = TaskScheduler()
        self.on_generated: Event[int] = Event("on_generated")
        self._task: Optional[Task] = None

    @property
    def is_generating(self) -> bool:
        return self._task is not None and not self._task.finished

    def _proxy_node(self):
        entity = self.entity
        if entity is None or node_kind(entity) is not NodeKind.BATCH:
            log.error("[InstanceCollisionComponent] Must be attached to a MultiMeshInstance")
            return None
        return entity

    def _synthesizer(self) -> PerInstanceCollisionSynthesizer:
        return PerInstanceCollisionSynthesizer(
            policy=self.shape_policy,
            yield_interval=self.yield_interval,
            collision_layer=self.collision_layer,
            collision_mask=self.collision_mask,
        )

    def generate(self) -> Optional[Task]:
        """Schedule generation. A running generation is cancelled first."""
        node = self._proxy_node()
        if node is None:
            return None
        if self.is_generating:
            log.info("[InstanceCollisionComponent] Restarting generation")
            self.scheduler.clear()
        sink = sink_for(self.scene)
        self._task = self.scheduler.add(
            self._synthesizer().generate(node, sink),
            name=f"collision:{node.name}",
            on_done=self._on_task_done,
        )
        return self._task

    def _on_task_done(self, task: Task) -> None:
        if task.failed:
            return
        self.on_generated.emit(task.result or 0)

    def clear(self) -> int:
        node = self._proxy_node()
        if node is None:
            return 0
        self.scheduler.clear()
        self._task = None
        return PerInstanceCollisionSynthesizer.clear(node, sink_for(self.scene))

    def update(self, dt: float) -> None:
        if self.scheduler:
            self.scheduler.tick()

    def on_destroy(self) -> None:
        self.scheduler.clear()


__all__ = ["InstanceCollisionComponent"]
