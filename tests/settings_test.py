"""
Тесты для настроек слияния и маркера завершения.
"""

import json
import os
import tempfile
import unittest
from pathlib import Path

from meshmerge.batching import MergeRecord, MergeSettings, MergeSettingsManager, ShapePolicy
from meshmerge.resources import Material, Texture


class MergeSettingsTest(unittest.TestCase):
    def test_defaults(self):
        settings = MergeSettings()
        self.assertEqual(settings.yield_interval, 100)
        self.assertIs(settings.shape_policy, ShapePolicy.CONVEX)
        self.assertFalse(settings.keep_originals)

    def test_yield_interval_clamped(self):
        self.assertEqual(MergeSettings(yield_interval=0).yield_interval, 1)

    def test_dict_roundtrip(self):
        settings = MergeSettings(
            target_group_path="Level/Props",
            material_override=Material("stone"),
            texture_override=Texture.white_1x1(),
            shape_policy=ShapePolicy.CONCAVE,
            collision_layer=2,
            yield_interval=25,
        )
        restored = MergeSettings.from_dict(json.loads(json.dumps(settings.to_dict())))
        self.assertEqual(restored.target_group_path, "Level/Props")
        self.assertEqual(restored.material_override.name, "stone")
        self.assertEqual(restored.material_override.uuid, settings.material_override.uuid)
        self.assertEqual(restored.texture_override.width, 1)
        self.assertIs(restored.shape_policy, ShapePolicy.CONCAVE)
        self.assertEqual((restored.collision_layer, restored.yield_interval), (2, 25))

    def test_unknown_policy_falls_back(self):
        self.assertIs(MergeSettings.from_dict({"shape_policy": "voxel"}).shape_policy, ShapePolicy.CONVEX)


class MergeSettingsManagerTest(unittest.TestCase):
    def setUp(self):
        MergeSettingsManager._instance = None

    def tearDown(self):
        MergeSettingsManager._instance = None

    def test_save_and_load(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            manager = MergeSettingsManager.instance()
            manager.set_project_path(Path(tmpdir))
            manager.settings = MergeSettings(output_folder="batches", save_proxies=True)
            self.assertTrue(manager.save())
            self.assertTrue(os.path.exists(os.path.join(tmpdir, "project_settings", "mesh_merge.json")))

            MergeSettingsManager._instance = None
            reloaded = MergeSettingsManager.instance()
            reloaded.set_project_path(Path(tmpdir))
        self.assertEqual(reloaded.settings.output_folder, "batches")
        self.assertTrue(reloaded.settings.save_proxies)

    def test_broken_file_gives_defaults(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "project_settings" / "mesh_merge.json"
            path.parent.mkdir()
            path.write_text("{oops")
            manager = MergeSettingsManager.instance()
            manager.set_project_path(Path(tmpdir))
        self.assertEqual(manager.settings.output_folder, "")

    def test_save_without_project(self):
        self.assertFalse(MergeSettingsManager.instance().save())


class MergeRecordTest(unittest.TestCase):
    def test_mark_and_reset(self):
        record = MergeRecord()
        record.mark(2, 10, 4)
        self.assertTrue(record.completed)
        record.reset()
        self.assertEqual(record, MergeRecord())

    def test_save_load(self):
        record = MergeRecord()
        record.mark(1, 7, 3)
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "state", "merge.json")
            self.assertTrue(record.save(path))
            self.assertEqual(MergeRecord.load(path), record)

    def test_missing_or_broken_file(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            self.assertEqual(MergeRecord.load(os.path.join(tmpdir, "none.json")), MergeRecord())
            broken = os.path.join(tmpdir, "broken.json")
            with open(broken, "w") as f:
                f.write("[")
            self.assertFalse(MergeRecord.load(broken).completed)


if __name__ == '__main__':
    unittest.main()
