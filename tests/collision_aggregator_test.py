import unittest

import numpy as np
from numpy.testing import assert_allclose

from meshmerge.batching import MERGED_COLLISION_TAG, CollisionAggregator
from meshmerge.colliders import (
    BoxShape,
    CapsuleShape,
    ConcavePolygonShape,
    ConvexPolygonShape,
    Shape,
    SphereShape,
)
from meshmerge.geombase import GeneralPose3
from meshmerge.mesh import CubeMesh
from meshmerge.scene import CollisionShape, Entity, MeshInstance, RigidBody, StaticBody


def crate_with_body(name, x, layer=1, mask=1):
    crate = MeshInstance(name, mesh=CubeMesh(), pose=GeneralPose3.translation(x, 0.0, 0.0))
    body = crate.add_child(StaticBody("Body", collision_layer=layer, collision_mask=mask))
    body.add_child(CollisionShape("Shape", shape=BoxShape((1.0, 1.0, 1.0)), pose=GeneralPose3.translation(0.0, 0.5, 0.0)))
    return crate


class ShapeTest(unittest.TestCase):
    def test_serialize_registry(self):
        shapes = [
            BoxShape((1.0, 2.0, 3.0)),
            SphereShape(0.5),
            CapsuleShape(1.0, 0.25),
            ConvexPolygonShape(CubeMesh().vertices),
            ConcavePolygonShape(CubeMesh().triangle_soup()),
        ]
        for shape in shapes:
            restored = Shape.deserialize(shape.serialize())
            self.assertIs(type(restored), type(shape))
            assert_allclose(restored.local_aabb()[0], shape.local_aabb()[0])
            assert_allclose(restored.local_aabb()[1], shape.local_aabb()[1])

    def test_unknown_type(self):
        with self.assertRaises(ValueError):
            Shape.deserialize({"type": "Torus"})

    def test_capsule_aabb(self):
        lo, hi = CapsuleShape(1.0, 0.25).local_aabb()
        assert_allclose(hi, [0.25, 1.25, 0.25])


class CollisionAggregatorTest(unittest.TestCase):
    def test_no_collision_gives_none(self):
        sources = [MeshInstance("a", mesh=CubeMesh()), Entity("b")]
        self.assertIsNone(CollisionAggregator().aggregate(sources))

    def test_shapes_in_source_order_with_world_poses(self):
        sources = [crate_with_body(f"c{i}", float(i)) for i in range(3)]
        merged = CollisionAggregator().aggregate(sources)
        self.assertEqual(merged.shape_count, 3)
        assert_allclose([e.pose.lin for e in merged.entries], [[0, 0.5, 0], [1, 0.5, 0], [2, 0.5, 0]])
        self.assertEqual([e.source_name for e in merged.entries], ["c0", "c1", "c2"])

    def test_shapes_are_duplicated(self):
        source = crate_with_body("c", 0.0)
        original = source.find("Body/Shape").shape
        merged = CollisionAggregator().aggregate([source])
        copy = merged.entries[0].shape
        self.assertIsNot(copy, original)
        copy.size[0] = 42.0
        self.assertAlmostEqual(float(original.size[0]), 1.0)

    def test_source_itself_static_body(self):
        body = StaticBody("Wall", pose=GeneralPose3.translation(0.0, 0.0, 3.0))
        body.add_child(CollisionShape("Shape", shape=SphereShape(1.0)))
        merged = CollisionAggregator().aggregate([body])
        assert_allclose(merged.entries[0].pose.lin, [0.0, 0.0, 3.0])

    def test_only_direct_static_body_child(self):
        crate = MeshInstance("c", mesh=CubeMesh())
        nested = crate.add_child(Entity("Nested")).add_child(StaticBody("Body"))
        nested.add_child(CollisionShape("Shape", shape=BoxShape()))
        rigid = crate.add_child(RigidBody("Rigid"))
        rigid.add_child(CollisionShape("Shape", shape=BoxShape()))
        self.assertIsNone(CollisionAggregator().aggregate([crate]))

    def test_disabled_shapes_ignored(self):
        crate = crate_with_body("c", 0.0)
        crate.find("Body").add_child(CollisionShape("Off", shape=BoxShape(), disabled=True))
        self.assertEqual(CollisionAggregator().aggregate([crate]).shape_count, 1)

    def test_layers_from_first_body(self):
        sources = [crate_with_body("a", 0.0, layer=4, mask=6), crate_with_body("b", 1.0, layer=1, mask=1)]
        merged = CollisionAggregator().aggregate(sources)
        self.assertEqual((merged.collision_layer, merged.collision_mask), (4, 6))

    def test_build_node(self):
        root = Entity("Group", pose=GeneralPose3.translation(-1.0, 0.0, 0.0))
        crate = root.add_child(crate_with_body("c", 0.0))
        merged = CollisionAggregator().aggregate([crate], root=root)
        node = merged.build_node("Merged")
        self.assertEqual(node.generated, MERGED_COLLISION_TAG)
        self.assertEqual(len(node.shape_nodes()), 1)
        assert_allclose(node.shape_nodes()[0].pose.lin, [0.0, 0.5, 0.0], atol=1e-9)


if __name__ == '__main__':
    unittest.main()
