"""
Пакетирование сцены: слияние многих объектов с общей геометрией
в инстансные прокси с объединённой коллизией.

Usage:
    from meshmerge.batching import MergeOrchestrator, MergeSettings

    orchestrator = MergeOrchestrator(scene, MergeSettings(target_group_path="Props"))
    result = orchestrator.merge()
"""

from meshmerge.batching.settings import MergeSettings, MergeSettingsManager, ShapePolicy
from meshmerge.batching.merge_record import MergeRecord
from meshmerge.batching.mesh_groups import MeshGroup, MeshGroupBuilder, MeshKey
from meshmerge.batching.proxy import BatchedProxy
from meshmerge.batching.persistence import (
    PROXY_FILE_EXTENSION,
    BatchedProxyPersistence,
    ProxySaver,
    ResourceSaver,
)
from meshmerge.batching.collision_aggregator import (
    MERGED_COLLISION_TAG,
    CollisionAggregator,
    CollisionSource,
    MergedCollisionBody,
)
from meshmerge.batching.proxy_assembler import PROXY_TAG, BatchedProxyAssembler
from meshmerge.batching.instance_collision import (
    INSTANCE_BODY_TAG,
    PerInstanceCollisionSynthesizer,
    ShapeDerivationError,
    derive_collision_shape,
)
from meshmerge.batching.orchestrator import MergeOrchestrator, MergeResult, MergeState

__all__ = [
    "MergeSettings",
    "MergeSettingsManager",
    "ShapePolicy",
    "MergeRecord",
    "MeshGroup",
    "MeshGroupBuilder",
    "MeshKey",
    "BatchedProxy",
    "PROXY_FILE_EXTENSION",
    "BatchedProxyPersistence",
    "ProxySaver",
    "ResourceSaver",
    "MERGED_COLLISION_TAG",
    "CollisionAggregator",
    "CollisionSource",
    "MergedCollisionBody",
    "PROXY_TAG",
    "BatchedProxyAssembler",
    "INSTANCE_BODY_TAG",
    "PerInstanceCollisionSynthesizer",
    "ShapeDerivationError",
    "derive_collision_shape",
    "MergeOrchestrator",
    "MergeResult",
    "MergeState",
]
