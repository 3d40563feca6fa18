"""
Scene mutations and the sinks that apply them.

Two regimes exist for structural edits:

* ImmediateMutationSink - play mode. Applied at once, nodes get no owner
  and are not saved with the scene.
* DeferredMutationSink - editor mode. Queued to Scene.flush_deferred()
  and the added subtree is assigned an owner so the editor saves it.

Tools pick one sink per pass with sink_for(scene) and never mix them.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from meshmerge import log

if TYPE_CHECKING:
    from meshmerge.scene.entity import Entity
    from meshmerge.scene.scene import Scene


class Mutation(ABC):
    @abstractmethod
    def apply(self, owner: Optional["Entity"]) -> None:
        ...


@dataclass
class AddChild(Mutation):
    parent: "Entity"
    child: "Entity"

    def apply(self, owner: Optional["Entity"]) -> None:
        # Removed before the deferred add ran (regenerated in the same frame).
        if self.child.destroyed or self.parent.destroyed:
            log.debug(f"[AddChild] Skipped destroyed node '{self.child.name}'")
            return
        self.parent.add_child(self.child)
        if owner is not None:
            self.child.set_owner_recursive(owner)


@dataclass
class RemoveNode(Mutation):
    node: "Entity"

    def apply(self, owner: Optional["Entity"]) -> None:
        self.node.destroy()


class MutationSink(ABC):
    """Applies mutations under one execution regime."""

    deferred: bool = False

    def __init__(self) -> None:
        self.count = 0

    @abstractmethod
    def apply(self, mutation: Mutation) -> None:
        ...

    def add_child(self, parent: "Entity", child: "Entity") -> None:
        self.apply(AddChild(parent, child))

    def remove(self, node: "Entity") -> None:
        self.apply(RemoveNode(node))


class ImmediateMutationSink(MutationSink):
    deferred = False

    def apply(self, mutation: Mutation) -> None:
        mutation.apply(None)
        self.count += 1


class DeferredMutationSink(MutationSink):
    deferred = True

    def __init__(self, scene: "Scene", owner: Optional["Entity"] = None) -> None:
        super().__init__()
        self.scene = scene
        self.owner = owner if owner is not None else scene.root

    def apply(self, mutation: Mutation) -> None:
        owner = self.owner
        self.scene.call_deferred(lambda: mutation.apply(owner))
        self.count += 1


def sink_for(scene: Optional["Scene"]) -> MutationSink:
    """Deferred + owned in the editor, immediate otherwise."""
    if scene is not None and scene.editor_mode:
        return DeferredMutationSink(scene)
    return ImmediateMutationSink()
