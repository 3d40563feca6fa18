"""
Scene graph: Entity, node variants, Scene, components and mutation sinks.
"""

from meshmerge.scene.entity import Entity, NodeKind, node_kind
from meshmerge.scene.nodes import (
    MeshInstance,
    CollisionShape,
    BodyKind,
    PhysicsBody,
    StaticBody,
    RigidBody,
    CharacterBody,
    Area,
    MultiMeshInstance,
)
from meshmerge.scene.component import Component
from meshmerge.scene.scene import Scene
from meshmerge.scene.mutation import (
    Mutation,
    AddChild,
    RemoveNode,
    MutationSink,
    ImmediateMutationSink,
    DeferredMutationSink,
    sink_for,
)

__all__ = [
    "Entity",
    "NodeKind",
    "node_kind",
    "MeshInstance",
    "CollisionShape",
    "BodyKind",
    "PhysicsBody",
    "StaticBody",
    "RigidBody",
    "CharacterBody",
    "Area",
    "MultiMeshInstance",
    "Component",
    "Scene",
    "Mutation",
    "AddChild",
    "RemoveNode",
    "MutationSink",
    "ImmediateMutationSink",
    "DeferredMutationSink",
    "sink_for",
]
