"""
PerInstanceCollisionSynthesizer — collision bodies for a batched proxy.

A proxy has no collision of its own. One shape is derived from the base
mesh (convex hull or exact triangle mesh) and referenced by one
StaticBody per instance. Generation is a generator yielding batches of
bodies, so a scheduler can spread large proxies over several frames.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Generator, List, Optional

import numpy as np
from scipy.spatial import ConvexHull, QhullError

from meshmerge import log
from meshmerge.batching.settings import ShapePolicy
from meshmerge.colliders import ConcavePolygonShape, ConvexPolygonShape, Shape
from meshmerge.scene.entity import Entity
from meshmerge.scene.mutation import MutationSink
from meshmerge.scene.nodes import CollisionShape, MultiMeshInstance, StaticBody

if TYPE_CHECKING:
    from meshmerge.mesh import Mesh3

INSTANCE_BODY_TAG = "instance_body"

# Triangles with a smaller area are dropped from concave shapes.
DEGENERATE_AREA_EPS = 1e-12


class ShapeDerivationError(RuntimeError):
    """Base geometry cannot produce a collision shape."""


def derive_collision_shape(mesh: "Mesh3", policy: ShapePolicy = ShapePolicy.CONVEX) -> Shape:
    """
    Collision shape of a mesh. Depends on geometry only.

    Raises:
        ShapeDerivationError: empty or degenerate (flat, collinear) geometry.
    """
    if mesh is None or mesh.is_empty():
        raise ShapeDerivationError("mesh has no geometry")

    if policy is ShapePolicy.CONVEX:
        points = np.unique(mesh.vertices.astype(np.float64), axis=0)
        if len(points) < 4:
            raise ShapeDerivationError(f"convex hull needs 4 distinct points, got {len(points)}")
        try:
            hull = ConvexHull(points)
        except (QhullError, ValueError) as e:
            raise ShapeDerivationError(f"convex hull failed: {e}") from e
        return ConvexPolygonShape(hull.points[hull.vertices])

    faces = mesh.triangle_soup().astype(np.float64)
    areas = 0.5 * np.linalg.norm(np.cross(faces[:, 1] - faces[:, 0], faces[:, 2] - faces[:, 0]), axis=1)
    faces = faces[areas > DEGENERATE_AREA_EPS]
    if len(faces) == 0:
        raise ShapeDerivationError("all triangles are degenerate")
    return ConcavePolygonShape(faces)


class PerInstanceCollisionSynthesizer:
    """
    Generates one static body per proxy instance.

    Usage:
        synth = PerInstanceCollisionSynthesizer(ShapePolicy.CONVEX, yield_interval=100)
        scheduler.add(synth.generate(proxy_node, sink))   # chunked
        synth.run(proxy_node, sink)                       # all at once
    """

    def __init__(
        self,
        policy: ShapePolicy = ShapePolicy.CONVEX,
        yield_interval: int = 100,
        collision_layer: int = 1,
        collision_mask: int = 1,
    ):
        self.policy = policy
        self.yield_interval = max(1, int(yield_interval))
        self.collision_layer = collision_layer
        self.collision_mask = collision_mask

    def _prepare(self, proxy_node: MultiMeshInstance) -> Optional[Shape]:
        proxy = proxy_node.proxy
        if proxy is None or proxy.mesh is None:
            log.error(f"[PerInstanceCollisionSynthesizer] '{proxy_node.name}' has no base geometry")
            return None
        if proxy.instance_count == 0:
            log.error(f"[PerInstanceCollisionSynthesizer] '{proxy_node.name}' has no instances")
            return None
        try:
            return derive_collision_shape(proxy.mesh, self.policy)
        except ShapeDerivationError as e:
            log.error(f"[PerInstanceCollisionSynthesizer] '{proxy_node.name}': {e}")
            return None

    def generate(
        self,
        proxy_node: MultiMeshInstance,
        sink: MutationSink,
    ) -> Generator[List[StaticBody], None, int]:
        """
        Replace the instance bodies of proxy_node.

        Yields the list of bodies created since the previous yield, every
        `yield_interval` instances and once more for the remainder.
        Returns the number of bodies created (0 on failure, previous
        bodies are then left untouched).
        """
        shape = self._prepare(proxy_node)
        if shape is None:
            return 0

        self.clear(proxy_node, sink)

        batch: List[StaticBody] = []
        count = 0
        for index, pose in enumerate(proxy_node.proxy.transforms):
            body = StaticBody(
                f"{proxy_node.name}_body_{index}",
                pose=pose,
                collision_layer=self.collision_layer,
                collision_mask=self.collision_mask,
            )
            body.generated = INSTANCE_BODY_TAG
            body.add_child(CollisionShape("Shape", shape=shape))
            sink.add_child(proxy_node, body)
            proxy_node.instance_bodies.append(body)
            batch.append(body)
            count += 1
            if len(batch) >= self.yield_interval:
                yield batch
                batch = []
        if batch:
            yield batch

        log.info(f"[PerInstanceCollisionSynthesizer] '{proxy_node.name}': {count} body(ies) generated")
        return count

    def run(self, proxy_node: MultiMeshInstance, sink: MutationSink) -> int:
        """Drive generate() to completion."""
        gen = self.generate(proxy_node, sink)
        while True:
            try:
                next(gen)
            except StopIteration as stop:
                return stop.value

    @staticmethod
    def clear(proxy_node: MultiMeshInstance, sink: MutationSink) -> int:
        """Remove every previously generated instance body. Returns removed count."""
        bodies: List[Entity] = list(proxy_node.instance_bodies)
        tracked = {id(b) for b in bodies}
        for child in proxy_node.children:
            if child.generated == INSTANCE_BODY_TAG and id(child) not in tracked:
                bodies.append(child)
        for body in bodies:
            sink.remove(body)
        proxy_node.instance_bodies = []
        return len(bodies)
