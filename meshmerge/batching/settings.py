"""
Mesh merge settings — configuration of the batching pipeline.

Settings can live on a MeshMergerComponent (per scene object) or be
shared project-wide in project_settings/mesh_merge.json.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from meshmerge import log
from meshmerge.resources import Material, Texture


class ShapePolicy(Enum):
    """How a collision shape is derived from base geometry."""
    CONVEX = "convex"     # convex hull, fast and approximate
    CONCAVE = "concave"   # exact triangle mesh, expensive at simulation time


@dataclass
class MergeSettings:
    """
    Options of one merge pass.

    target_group_path  – путь к группе исходных объектов (пусто — сам владелец)
    material_override  – материал для всех прокси
    texture_override   – текстура, оборачивается в unlit материал
    output_folder      – папка для сохранения прокси
    save_proxies       – сохранять прокси на диск
    run_on_load        – запускать слияние при загрузке сцены
    keep_originals     – не удалять исходные объекты
    collision_layer, collision_mask – для синтезированных тел
    shape_policy       – convex / concave
    yield_interval     – тел за один шаг генерации
    generate_instance_collision – синтезировать тела для прокси без коллизии
    """

    target_group_path: str = ""
    material_override: Optional[Material] = None
    texture_override: Optional[Texture] = None
    output_folder: str = ""
    save_proxies: bool = False
    run_on_load: bool = False
    keep_originals: bool = False
    collision_layer: int = 1
    collision_mask: int = 1
    shape_policy: ShapePolicy = ShapePolicy.CONVEX
    yield_interval: int = 100
    generate_instance_collision: bool = False

    def __post_init__(self):
        if self.yield_interval < 1:
            log.warn(f"[MergeSettings] yield_interval must be >= 1, got {self.yield_interval}, using 1")
            self.yield_interval = 1

    def to_dict(self) -> dict:
        """Serialize to dictionary."""
        return {
            "target_group_path": self.target_group_path,
            "material_override": self.material_override.serialize() if self.material_override else None,
            "texture_override": self.texture_override.serialize() if self.texture_override else None,
            "output_folder": self.output_folder,
            "save_proxies": self.save_proxies,
            "run_on_load": self.run_on_load,
            "keep_originals": self.keep_originals,
            "collision_layer": self.collision_layer,
            "collision_mask": self.collision_mask,
            "shape_policy": self.shape_policy.value,
            "yield_interval": self.yield_interval,
            "generate_instance_collision": self.generate_instance_collision,
        }

    @staticmethod
    def from_dict(data: dict) -> "MergeSettings":
        """Deserialize from dictionary."""
        try:
            shape_policy = ShapePolicy(data.get("shape_policy", "convex"))
        except ValueError:
            shape_policy = ShapePolicy.CONVEX

        material_data = data.get("material_override")
        texture_data = data.get("texture_override")
        return MergeSettings(
            target_group_path=data.get("target_group_path", ""),
            material_override=Material.deserialize(material_data) if material_data else None,
            texture_override=Texture.deserialize(texture_data) if texture_data else None,
            output_folder=data.get("output_folder", ""),
            save_proxies=data.get("save_proxies", False),
            run_on_load=data.get("run_on_load", False),
            keep_originals=data.get("keep_originals", False),
            collision_layer=data.get("collision_layer", 1),
            collision_mask=data.get("collision_mask", 1),
            shape_policy=shape_policy,
            yield_interval=data.get("yield_interval", 100),
            generate_instance_collision=data.get("generate_instance_collision", False),
        )


class MergeSettingsManager:
    """
    Singleton manager for project-wide merge settings.

    Handles loading/saving settings from project directory.
    """

    _instance: Optional["MergeSettingsManager"] = None
    _settings: MergeSettings
    _project_path: Optional[Path] = None

    def __init__(self) -> None:
        self._settings = MergeSettings()

    @classmethod
    def instance(cls) -> "MergeSettingsManager":
        """Get singleton instance."""
        if cls._instance is None:
            cls._instance = MergeSettingsManager()
        return cls._instance

    @property
    def settings(self) -> MergeSettings:
        return self._settings

    @settings.setter
    def settings(self, value: MergeSettings) -> None:
        self._settings = value

    def set_project_path(self, path: Path) -> None:
        """Set project path and load settings."""
        self._project_path = Path(path)
        self._load()

    def _get_settings_path(self) -> Optional[Path]:
        if self._project_path is None:
            return None
        return self._project_path / "project_settings" / "mesh_merge.json"

    def _load(self) -> None:
        path = self._get_settings_path()
        if path is None or not path.exists():
            self._settings = MergeSettings()
            return

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
            self._settings = MergeSettings.from_dict(data)
            log.info(f"[MergeSettings] Loaded from {path}")
        except Exception as e:
            log.error(f"[MergeSettings] Failed to load settings: {e}")
            self._settings = MergeSettings()

    def save(self) -> bool:
        """Save settings to file."""
        path = self._get_settings_path()
        if path is None:
            log.error("[MergeSettings] No project path set, cannot save")
            return False

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                json.dump(self._settings.to_dict(), f, indent=2)
            log.info(f"[MergeSettings] Saved to {path}")
            return True
        except Exception as e:
            log.error(f"[MergeSettings] Failed to save settings: {e}")
            return False
