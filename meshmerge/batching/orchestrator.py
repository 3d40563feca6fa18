"""
MergeOrchestrator — one merge pass over a group of source objects.

    IDLE -> GATHERING -> GROUPING -> ASSEMBLING -> FINALIZING -> DONE
                 \\            \\            \\             \\
                  +------------+------------+-------------+--> FAILED

Sources stay untouched until FINALIZING, after every consumer has read
them. All structural edits of a pass go through one MutationSink chosen
from the scene mode: deferred and owned in the editor, immediate at
runtime.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import List, Optional

from meshmerge import log
from meshmerge.batching.collision_aggregator import (
    MERGED_COLLISION_TAG,
    CollisionAggregator,
    MergedCollisionBody,
)
from meshmerge.batching.instance_collision import PerInstanceCollisionSynthesizer
from meshmerge.batching.merge_record import MergeRecord
from meshmerge.batching.mesh_groups import MeshGroupBuilder
from meshmerge.batching.persistence import ResourceSaver
from meshmerge.batching.proxy_assembler import PROXY_TAG, BatchedProxyAssembler
from meshmerge.batching.settings import MergeSettings, MergeSettingsManager
from meshmerge.core.event import Event
from meshmerge.core.scheduler import Task, TaskScheduler
from meshmerge.scene.entity import Entity
from meshmerge.scene.mutation import MutationSink, sink_for
from meshmerge.scene.nodes import MultiMeshInstance, StaticBody
from meshmerge.scene.scene import Scene


class MergeState(Enum):
    IDLE = "idle"
    GATHERING = "gathering"
    GROUPING = "grouping"
    ASSEMBLING = "assembling"
    FINALIZING = "finalizing"
    DONE = "done"
    FAILED = "failed"


@dataclass
class MergeResult:
    """Outcome of merge(). success=False carries the reason."""

    success: bool
    reason: str = ""
    proxy_count: int = 0
    instance_count: int = 0
    shape_count: int = 0
    skipped: int = 0
    removed_sources: int = 0
    synthesis_tasks: int = 0
    saved_paths: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    proxy_nodes: List[MultiMeshInstance] = field(default_factory=list)
    collision_node: Optional[StaticBody] = None


class MergeOrchestrator:
    """
    Sequences grouping, collision aggregation, proxy assembly and cleanup.

    Args:
        scene: Scene holding the objects (its mode selects the mutation sink).
        settings: Pipeline options (a copy of the project-wide settings when omitted).
        record: Completion marker, owned by the caller.
        group: Target group node, used when settings.target_group_path is empty.
        scheduler: Receives per-instance collision synthesis tasks.
        saver: Persistence surface for proxies.
    """

    def __init__(
        self,
        scene: Scene,
        settings: Optional[MergeSettings] = None,
        record: Optional[MergeRecord] = None,
        group: Optional[Entity] = None,
        scheduler: Optional[TaskScheduler] = None,
        saver: Optional[ResourceSaver] = None,
    ):
        self.scene = scene
        self.settings = settings if settings is not None else replace(MergeSettingsManager.instance().settings)
        self.record = record if record is not None else MergeRecord()
        self.group = group
        self.scheduler = scheduler if scheduler is not None else TaskScheduler()
        self.saver = saver

        self.on_state_changed: Event[MergeState] = Event("on_state_changed")
        self.on_merged: Event[MergeResult] = Event("on_merged")
        self.on_failed: Event[MergeResult] = Event("on_failed")

        self._state = MergeState.IDLE
        self._running = False
        self._outputs: List[Entity] = []
        self._tasks: List[Task] = []

    @property
    def state(self) -> MergeState:
        return self._state

    @property
    def is_running(self) -> bool:
        """True during merge() and while its synthesis tasks are pending."""
        return self._running or self.has_pending_tasks

    @property
    def has_pending_tasks(self) -> bool:
        self._tasks = [t for t in self._tasks if not t.finished]
        return bool(self._tasks)

    def _set_state(self, state: MergeState) -> None:
        self._state = state
        self.on_state_changed.emit(state)

    def reset(self) -> None:
        """Clear the completion marker so the next merge() is accepted."""
        if self.is_running:
            log.warn("[MergeOrchestrator] Cannot reset while a merge is running")
            return
        self.record.reset()
        self._state = MergeState.IDLE

    def resolve_group(self) -> Optional[Entity]:
        path = self.settings.target_group_path
        if path:
            return self.scene.find(path)
        return self.group

    # ------------------------------------------------------------------

    def merge(self) -> MergeResult:
        if self.is_running:
            log.warn("[MergeOrchestrator] Merge already in progress, request ignored")
            return MergeResult(success=False, reason="merge already in progress")
        if self.record.completed:
            log.warn("[MergeOrchestrator] Objects already merged, reset the merge record to merge again")
            return MergeResult(success=False, reason="already merged")

        self._running = True
        try:
            return self._merge_pass()
        finally:
            self._running = False

    def _fail(self, reason: str) -> MergeResult:
        log.error(f"[MergeOrchestrator] Merge failed: {reason}")
        self._set_state(MergeState.FAILED)
        result = MergeResult(success=False, reason=reason)
        self.on_failed.emit(result)
        return result

    def _merge_pass(self) -> MergeResult:
        settings = self.settings

        self._set_state(MergeState.GATHERING)
        group = self.resolve_group()
        if group is None:
            path = settings.target_group_path or "<owner>"
            return self._fail(f"target group not found: {path}")
        sources = [child for child in group.children if not child.generated]
        if not sources:
            return self._fail(f"group '{group.name}' has no source objects")

        self._set_state(MergeState.GROUPING)
        builder = MeshGroupBuilder()
        groups = builder.build(sources, root=group)
        if not groups:
            return self._fail(f"no resolvable mesh in group '{group.name}'")

        self._set_state(MergeState.ASSEMBLING)
        merged = CollisionAggregator().aggregate(sources, root=group)
        assembler = BatchedProxyAssembler(
            material_override=settings.material_override,
            texture_override=settings.texture_override,
            saver=self.saver,
        )
        proxies = assembler.assemble(groups)

        result = MergeResult(success=True, skipped=builder.skipped)
        if builder.skipped:
            result.warnings.append(f"{builder.skipped} object(s) without mesh skipped")
        if settings.save_proxies:
            saved, failed = assembler.persist(proxies, settings.output_folder)
            result.saved_paths = saved
            result.warnings.extend(f"proxy not saved: {path}" for path in failed)
            if not settings.output_folder:
                result.warnings.append("output folder is empty, proxies not saved")

        self._set_state(MergeState.FINALIZING)
        sink = sink_for(self.scene)
        self._clear_previous_outputs(group, sink)

        for proxy in proxies:
            node = assembler.build_node(proxy)
            sink.add_child(group, node)
            self._outputs.append(node)
            result.proxy_nodes.append(node)

        if merged is not None:
            result.collision_node = self._attach_collision(group, merged, sink)
            result.shape_count = merged.shape_count

        if not settings.keep_originals:
            consumed = [s for s in sources if self._is_consumed(s)]
            for source in consumed:
                sink.remove(source)
            result.removed_sources = len(consumed)

        result.proxy_count = len(proxies)
        result.instance_count = sum(p.instance_count for p in proxies)
        self.record.mark(result.proxy_count, result.instance_count, result.shape_count)

        if settings.generate_instance_collision and merged is None:
            result.synthesis_tasks = self._schedule_synthesis(result.proxy_nodes, sink)

        self._set_state(MergeState.DONE)
        log.info(
            f"[MergeOrchestrator] Merged {result.instance_count} instance(s) into "
            f"{result.proxy_count} proxy(ies), {result.shape_count} collision shape(s)"
            + (" (deferred)" if sink.deferred else "")
        )
        self.on_merged.emit(result)
        return result

    @staticmethod
    def _is_consumed(source: Entity) -> bool:
        """Represented in the outputs: has a mesh or contributed collision. Others stay."""
        return (
            MeshGroupBuilder.resolve_mesh_holder(source) is not None
            or CollisionAggregator.find_static_body(source) is not None
        )

    def _attach_collision(self, group: Entity, merged: MergedCollisionBody, sink: MutationSink) -> StaticBody:
        node = merged.build_node(f"{group.name}_Collision")
        sink.add_child(group, node)
        self._outputs.append(node)
        return node

    def _clear_previous_outputs(self, group: Entity, sink: MutationSink) -> None:
        """A re-merge replaces the outputs of the previous pass."""
        previous = [n for n in self._outputs if not n.destroyed]
        known = {id(n) for n in previous}
        for child in group.children:
            if child.generated in (PROXY_TAG, MERGED_COLLISION_TAG) and id(child) not in known:
                previous.append(child)
        for node in previous:
            sink.remove(node)
        self._outputs = []
        if previous:
            log.debug(f"[MergeOrchestrator] Removed {len(previous)} output(s) of the previous merge")

    def _schedule_synthesis(self, proxy_nodes: List[MultiMeshInstance], sink: MutationSink) -> int:
        synth = PerInstanceCollisionSynthesizer(
            policy=self.settings.shape_policy,
            yield_interval=self.settings.yield_interval,
            collision_layer=self.settings.collision_layer,
            collision_mask=self.settings.collision_mask,
        )
        for node in proxy_nodes:
            task = self.scheduler.add(synth.generate(node, sink), name=f"collision:{node.name}")
            self._tasks.append(task)
        return len(proxy_nodes)
