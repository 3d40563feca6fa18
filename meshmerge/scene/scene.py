"""Scene - root of the entity tree, lifecycle dispatch and deferred calls."""

from __future__ import annotations

import uuid as _uuid
from typing import Callable, Iterator, Optional

from meshmerge import log
from meshmerge.scene.entity import Entity


def _entity_destroyed(comp) -> bool:
    # Removed earlier in the same pass.
    return comp.entity is not None and comp.entity.destroyed


class Scene:
    """
    Сцена: дерево Entity с корнем `root`.

    editor_mode – сцена открыта в редакторе (компоненты получают
    on_editor_start вместо start, авторские узлы получают owner=root).

    Structural edits that must not happen while the tree is being walked
    are queued with call_deferred() and applied by flush_deferred(), which
    runs at the end of update() (the safe point of a frame).
    """

    def __init__(self, name: str = "Scene", editor_mode: bool = False):
        self.name = name
        self.uuid = _uuid.uuid4().hex
        self.editor_mode = editor_mode
        self.root = Entity("root")
        self.root._scene = self
        self._deferred: list[Callable[[], None]] = []
        self._started = False
        self._traversing = False

    # --- Structure ---

    def add(self, entity: Entity, parent: Optional[Entity] = None) -> Entity:
        """
        Add authored content immediately.

        In editor mode the subtree is owned by root, so it is saved with
        the scene.
        """
        (parent or self.root).add_child(entity)
        if self.editor_mode:
            entity.set_owner_recursive(self.root)
        if self._started:
            self._start_subtree(entity)
        return entity

    def find(self, path: str) -> Optional[Entity]:
        """Find entity by path from root. Empty path is the root itself."""
        return self.root.find(path)

    def iter_entities(self) -> Iterator[Entity]:
        return self.root.iter_descendants()

    @property
    def is_traversing(self) -> bool:
        return self._traversing

    # --- Deferred calls ---

    def call_deferred(self, fn: Callable[[], None]) -> None:
        self._deferred.append(fn)

    @property
    def has_deferred(self) -> bool:
        return bool(self._deferred)

    def flush_deferred(self) -> int:
        """
        Run queued calls in order. Calls queued while flushing wait for
        the next flush. Returns number of calls executed.
        """
        if self._traversing:
            log.warn("[Scene] flush_deferred() called during traversal, postponed")
            return 0
        pending = self._deferred
        self._deferred = []
        for fn in pending:
            try:
                fn()
            except Exception as e:
                log.error(e, "[Scene] Deferred call failed")
        return len(pending)

    # --- Lifecycle ---

    def start(self) -> None:
        """Start all components (editor or play mode)."""
        self._started = True
        self._start_subtree(self.root)
        self.flush_deferred()

    def _start_subtree(self, entity: Entity) -> None:
        components = [c for node in entity.iter_subtree() for c in node.components]
        self._traversing = True
        try:
            for comp in components:
                if comp._started or _entity_destroyed(comp):
                    continue
                comp._started = True
                if self.editor_mode:
                    comp.on_editor_start()
                else:
                    comp.start()
        finally:
            self._traversing = False

    def update(self, dt: float) -> None:
        components = [c for node in self.root.iter_subtree() for c in node.components if c.enabled]
        self._traversing = True
        try:
            for comp in components:
                if _entity_destroyed(comp):
                    continue
                comp.update(dt)
        finally:
            self._traversing = False
        self.flush_deferred()

    # --- Persistence ---

    def serialize(self) -> dict:
        """
        Scene data as saved by the editor.

        Only nodes owned by root are written. A node without owner is
        runtime-only and is skipped together with its subtree.
        """
        def visit(entity: Entity) -> dict:
            data = entity.serialize()
            data["children"] = [
                visit(child) for child in entity.children
                if child.owner is self.root
            ]
            return data

        return {
            "name": self.name,
            "uuid": self.uuid,
            "root": visit(self.root),
        }
