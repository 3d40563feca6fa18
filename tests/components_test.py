import unittest

from meshmerge.batching import (
    INSTANCE_BODY_TAG,
    PROXY_TAG,
    BatchedProxy,
    BatchedProxyAssembler,
    MergeSettings,
    MergeSettingsManager,
    ShapePolicy,
)
from meshmerge.components import InstanceCollisionComponent, MeshMergerComponent
from meshmerge.geombase import GeneralPose3
from meshmerge.mesh import CubeMesh
from meshmerge.resources import Material, Texture
from meshmerge.scene import Entity, MeshInstance, Scene


def build_scene(editor_mode=False, count=3, settings=None):
    scene = Scene(editor_mode=editor_mode)
    group = scene.add(Entity("Props"))
    cube = CubeMesh()
    for i in range(count):
        scene.add(MeshInstance(f"Crate{i}", mesh=cube, pose=GeneralPose3.translation(i, 0, 0)), parent=group)
    merger = group.add_component(MeshMergerComponent(settings))
    return scene, group, merger


class MeshMergerComponentTest(unittest.TestCase):
    def test_merge_button(self):
        scene, group, merger = build_scene()
        MeshMergerComponent.all_inspect_fields()["merge_btn"].press(merger)
        self.assertTrue(merger.last_result.success)
        self.assertTrue(merger.record.completed)
        self.assertEqual([c.generated for c in group.children], [PROXY_TAG])

    def test_reset_button(self):
        scene, group, merger = build_scene()
        merger.merge()
        MeshMergerComponent.all_inspect_fields()["reset_btn"].press(merger)
        self.assertFalse(merger.record.completed)

    def test_run_on_load_runtime(self):
        scene, group, merger = build_scene(settings=MergeSettings(run_on_load=True))
        scene.start()
        self.assertTrue(merger.record.completed)
        self.assertEqual([c.generated for c in group.children], [PROXY_TAG])

    def test_run_on_load_editor_is_deferred(self):
        scene, group, merger = build_scene(editor_mode=True, settings=MergeSettings(run_on_load=True))
        scene.start()
        # start() flushes deferred calls.
        self.assertEqual([c.generated for c in group.children], [PROXY_TAG])
        self.assertIs(group.children[0].owner, scene.root)

    def test_component_lookup_and_removal(self):
        scene, group, merger = build_scene()
        self.assertIs(group.get_component(MeshMergerComponent), merger)
        group.remove_component(merger)
        self.assertIsNone(group.get_component(MeshMergerComponent))
        self.assertIsNone(merger.entity)

    def test_not_in_scene(self):
        merger = MeshMergerComponent()
        self.assertIsNone(merger.merge())

    def test_update_drives_instance_collision(self):
        settings = MergeSettings(generate_instance_collision=True, yield_interval=2)
        scene, group, merger = build_scene(count=5, settings=settings)
        merger.merge()
        proxy_node = group.children[0]
        for _ in range(4):
            scene.update(0.016)
        self.assertEqual(len(proxy_node.instance_bodies), 5)
        self.assertFalse(merger.scheduler)

    def test_serialize_roundtrip(self):
        scene, group, merger = build_scene()
        merger.settings.target_group_path = "Props"
        merger.settings.shape_policy = ShapePolicy.CONCAVE
        merger.settings.yield_interval = 10
        merger.settings.material_override = Material("M1", color=(1.0, 0.0, 0.0, 1.0))
        merger.settings.texture_override = Texture.white_1x1()
        merger.merge()
        data = merger.serialize()
        self.assertEqual(data["type"], "MeshMergerComponent")
        self.assertEqual(data["data"]["shape_policy"], "concave")
        self.assertNotIn("merge_btn", data["data"])

        restored = MeshMergerComponent()
        restored.deserialize_data(data["data"])
        self.assertEqual(restored.settings.target_group_path, "Props")
        self.assertIs(restored.settings.shape_policy, ShapePolicy.CONCAVE)
        self.assertEqual(restored.settings.yield_interval, 10)
        self.assertTrue(restored.record.completed)
        self.assertEqual(restored.settings.material_override.name, "M1")
        self.assertEqual(restored.settings.material_override.uuid, merger.settings.material_override.uuid)
        self.assertEqual(restored.settings.material_override.color, (1.0, 0.0, 0.0, 1.0))
        self.assertEqual((restored.settings.texture_override.width, restored.settings.texture_override.height), (1, 1))

    def test_serialize_without_overrides(self):
        scene, group, merger = build_scene()
        data = merger.serialize_data()
        self.assertIsNone(data["material_override"])
        restored = MeshMergerComponent(MergeSettings(material_override=Material("kept")))
        restored.deserialize_data({"yield_interval": 5})
        self.assertEqual(restored.settings.material_override.name, "kept")
        restored.deserialize_data(data)
        self.assertIsNone(restored.settings.material_override)

    def test_defaults_from_project_settings(self):
        manager = MergeSettingsManager.instance()
        manager.settings = MergeSettings(output_folder="batches", yield_interval=7)
        try:
            merger = MeshMergerComponent()
            self.assertEqual(merger.settings.output_folder, "batches")
            self.assertEqual(merger.settings.yield_interval, 7)
            # A copy: inspector edits stay local to the component.
            merger.settings.output_folder = "local"
            self.assertEqual(manager.settings.output_folder, "batches")
        finally:
            MergeSettingsManager._instance = None


class InstanceCollisionComponentTest(unittest.TestCase):
    def make_node(self, scene, count):
        poses = [GeneralPose3.translation(float(i), 0.0, 0.0) for i in range(count)]
        node = BatchedProxyAssembler.build_node(BatchedProxy(CubeMesh(), poses))
        return scene.add(node)

    def test_generate_over_frames(self):
        scene = Scene()
        node = self.make_node(scene, 7)
        comp = node.add_component(InstanceCollisionComponent(yield_interval=3))
        generated = []
        comp.on_generated += generated.append

        comp.generate()
        self.assertTrue(comp.is_generating)
        scene.update(0.016)
        self.assertEqual(len(node.instance_bodies), 3)
        for _ in range(3):
            scene.update(0.016)
        self.assertEqual(len(node.instance_bodies), 7)
        self.assertEqual(generated, [7])
        self.assertFalse(comp.is_generating)

    def test_generate_twice_replaces(self):
        scene = Scene()
        node = self.make_node(scene, 4)
        comp = node.add_component(InstanceCollisionComponent())
        comp.generate()
        comp.scheduler.run_until_complete()
        comp.generate()
        comp.scheduler.run_until_complete()
        bodies = [c for c in node.children if c.generated == INSTANCE_BODY_TAG]
        self.assertEqual(len(bodies), 4)

    def test_clear_button(self):
        scene = Scene()
        node = self.make_node(scene, 2)
        comp = node.add_component(InstanceCollisionComponent())
        comp.generate()
        comp.scheduler.run_until_complete()
        InstanceCollisionComponent.all_inspect_fields()["clear_btn"].press(comp)
        self.assertEqual(node.children, ())

    def test_wrong_node(self):
        scene = Scene()
        entity = scene.add(Entity("NotAProxy"))
        comp = entity.add_component(InstanceCollisionComponent())
        self.assertIsNone(comp.generate())


if __name__ == '__main__':
    unittest.main()
