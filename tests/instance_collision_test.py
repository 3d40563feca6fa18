import unittest

import numpy as np
from numpy.testing import assert_allclose

from meshmerge.batching import (
    INSTANCE_BODY_TAG,
    BatchedProxy,
    BatchedProxyAssembler,
    PerInstanceCollisionSynthesizer,
    ShapeDerivationError,
    ShapePolicy,
    derive_collision_shape,
)
from meshmerge.colliders import ConcavePolygonShape, ConvexPolygonShape
from meshmerge.geombase import GeneralPose3
from meshmerge.mesh import CubeMesh, Mesh3, PlaneMesh, UVSphereMesh
from meshmerge.scene import (
    DeferredMutationSink,
    Entity,
    ImmediateMutationSink,
    MultiMeshInstance,
    Scene,
)


def make_proxy_node(count, mesh=None):
    poses = [GeneralPose3.translation(float(i), 0.0, 0.0) for i in range(count)]
    return BatchedProxyAssembler.build_node(BatchedProxy(mesh or CubeMesh(), poses))


class DeriveShapeTest(unittest.TestCase):
    def test_convex_hull_of_cube(self):
        shape = derive_collision_shape(CubeMesh(2.0), ShapePolicy.CONVEX)
        self.assertIsInstance(shape, ConvexPolygonShape)
        self.assertEqual(len(shape.points), 8)
        assert_allclose(np.abs(shape.points), 1.0)

    def test_concave_drops_degenerate_triangles(self):
        sphere = UVSphereMesh(1.0, 8, 4)
        shape = derive_collision_shape(sphere, ShapePolicy.CONCAVE)
        self.assertIsInstance(shape, ConcavePolygonShape)
        self.assertLess(shape.triangle_count, sphere.triangle_count)
        self.assertGreater(shape.triangle_count, 0)

    def test_flat_mesh_has_no_convex_hull(self):
        with self.assertRaises(ShapeDerivationError):
            derive_collision_shape(PlaneMesh(), ShapePolicy.CONVEX)

    def test_flat_mesh_concave_is_valid(self):
        shape = derive_collision_shape(PlaneMesh(), ShapePolicy.CONCAVE)
        self.assertEqual(shape.triangle_count, 2)

    def test_empty_mesh(self):
        empty = Mesh3(np.zeros((0, 3)), np.zeros((0, 3)))
        for policy in ShapePolicy:
            with self.assertRaises(ShapeDerivationError):
                derive_collision_shape(empty, policy)


class SynthesizerTest(unittest.TestCase):
    def test_one_body_per_instance(self):
        node = make_proxy_node(5)
        count = PerInstanceCollisionSynthesizer().run(node, ImmediateMutationSink())
        self.assertEqual(count, 5)
        bodies = [c for c in node.children if c.generated == INSTANCE_BODY_TAG]
        self.assertEqual(len(bodies), 5)
        for index, body in enumerate(bodies):
            self.assertTrue(body.pose.almost_equal(node.proxy.instance_pose(index)))
            self.assertEqual(len(body.shape_nodes()), 1)

    def test_shape_is_shared(self):
        node = make_proxy_node(3)
        PerInstanceCollisionSynthesizer().run(node, ImmediateMutationSink())
        shapes = {id(body.shape_nodes()[0].shape) for body in node.instance_bodies}
        self.assertEqual(len(shapes), 1)

    def test_layers_applied(self):
        node = make_proxy_node(2)
        PerInstanceCollisionSynthesizer(collision_layer=8, collision_mask=3).run(node, ImmediateMutationSink())
        self.assertEqual({(b.collision_layer, b.collision_mask) for b in node.instance_bodies}, {(8, 3)})

    def test_regeneration_replaces_bodies(self):
        node = make_proxy_node(4)
        synth = PerInstanceCollisionSynthesizer()
        sink = ImmediateMutationSink()
        synth.run(node, sink)
        first = list(node.instance_bodies)
        synth.run(node, sink)
        self.assertEqual(len(node.children), 4)
        self.assertTrue(all(b.destroyed for b in first))

    def test_regeneration_before_deferred_flush(self):
        scene = Scene(editor_mode=True)
        node = make_proxy_node(3)
        scene.add(node)
        sink = DeferredMutationSink(scene)
        synth = PerInstanceCollisionSynthesizer()
        synth.run(node, sink)
        synth.run(node, sink)
        scene.flush_deferred()
        self.assertEqual(len(node.children), 3)
        self.assertTrue(all(b.owner is scene.root for b in node.children))

    def test_yields_in_batches(self):
        node = make_proxy_node(250)
        gen = PerInstanceCollisionSynthesizer(yield_interval=100).generate(node, ImmediateMutationSink())
        sizes = [len(batch) for batch in gen]
        self.assertEqual(sizes, [100, 100, 50])

    def test_invalid_interval_clamped(self):
        self.assertEqual(PerInstanceCollisionSynthesizer(yield_interval=0).yield_interval, 1)

    def test_degenerate_mesh_keeps_previous_bodies(self):
        node = make_proxy_node(2)
        sink = ImmediateMutationSink()
        PerInstanceCollisionSynthesizer().run(node, sink)
        node.proxy.mesh = PlaneMesh()
        self.assertEqual(PerInstanceCollisionSynthesizer(ShapePolicy.CONVEX).run(node, sink), 0)
        self.assertEqual(len(node.instance_bodies), 2)

    def test_no_instances(self):
        node = make_proxy_node(0)
        self.assertEqual(PerInstanceCollisionSynthesizer().run(node, ImmediateMutationSink()), 0)
        self.assertEqual(node.children, ())

    def test_missing_proxy(self):
        node = MultiMeshInstance("Empty")
        self.assertEqual(PerInstanceCollisionSynthesizer().run(node, ImmediateMutationSink()), 0)

    def test_clear(self):
        node = make_proxy_node(3)
        node.add_child(Entity("Authored"))
        sink = ImmediateMutationSink()
        PerInstanceCollisionSynthesizer().run(node, sink)
        self.assertEqual(PerInstanceCollisionSynthesizer.clear(node, sink), 3)
        self.assertEqual([c.name for c in node.children], ["Authored"])


if __name__ == '__main__':
    unittest.main()
