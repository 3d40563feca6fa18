"""
Сохранение и загрузка BatchedProxy.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import List, Protocol, Union

import numpy as np

from meshmerge import log
from meshmerge.batching.proxy import BatchedProxy
from meshmerge.geombase import GeneralPose3
from meshmerge.mesh import Mesh3
from meshmerge.resources import Material


PROXY_FILE_EXTENSION = ".multimesh"
PROXY_FORMAT_VERSION = "1.0"


class ResourceSaver(Protocol):
    """Persistence surface: save(resource, path) -> success."""

    def save(self, resource, path: Union[str, Path]) -> bool:
        ...


def proxy_file_name(proxy: BatchedProxy, index: int) -> str:
    """
    File name keyed by the mesh asset (stem of its source path), or by the
    proxy ordinal for procedural meshes.
    """
    source_path = proxy.mesh.source_path if proxy.mesh is not None else ""
    if source_path:
        return Path(source_path).stem + PROXY_FILE_EXTENSION
    return f"multimesh_{index}{PROXY_FILE_EXTENSION}"


class BatchedProxyPersistence:
    """
    Сохранение и загрузка BatchedProxy в файл .multimesh.

    Формат — JSON: меш (вершины, треугольники), материал и позы инстансов.
    Файл самодостаточен: прокси восстанавливается без повторной группировки.
    """

    @staticmethod
    def save(proxy: BatchedProxy, path: Union[str, Path]) -> None:
        """
        Сохранить прокси в файл.

        Raises:
            OSError: Если запись не удалась.
            TypeError: Если материал содержит несериализуемые данные
                (файл при этом не создаётся).
        """
        path = Path(path)
        mesh = proxy.mesh
        data = {
            "version": PROXY_FORMAT_VERSION,
            "name": proxy.name,
            "mesh": {
                "uuid": mesh.uuid,
                "name": mesh.name,
                "source_path": mesh.source_path,
                "vertices": mesh.vertices.tolist(),
                "triangles": mesh.triangles.tolist(),
                "uvs": mesh.uvs.tolist() if mesh.uvs is not None else None,
            },
            "material": proxy.material.serialize() if proxy.material is not None else None,
            "instances": [pose.to_list() for pose in proxy.transforms],
        }

        # Atomic write via temp file: an existing file survives a failed save.
        json_str = json.dumps(data)

        temp = tempfile.NamedTemporaryFile(
            mode="w", encoding="utf-8", suffix=".tmp", dir=str(path.parent), delete=False
        )
        try:
            with temp as f:
                f.write(json_str)
            os.replace(temp.name, str(path))
        except OSError:
            Path(temp.name).unlink(missing_ok=True)
            raise

    @staticmethod
    def load(path: Union[str, Path]) -> BatchedProxy:
        """
        Загрузить прокси из файла.

        Raises:
            ValueError: Если формат файла неверный.
            FileNotFoundError: Если файл не найден.
        """
        path = Path(path)

        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)

        version = data.get("version", "")
        if not version.startswith("1."):
            raise ValueError(f"Unsupported multimesh format version: {version}")

        mesh_data = data["mesh"]
        uvs = mesh_data.get("uvs")
        mesh = Mesh3(
            vertices=np.array(mesh_data["vertices"], dtype=np.float32),
            triangles=np.array(mesh_data["triangles"], dtype=np.int32),
            uvs=np.array(uvs, dtype=np.float32) if uvs is not None else None,
            name=mesh_data.get("name", ""),
            uuid=mesh_data.get("uuid", ""),
            source_path=mesh_data.get("source_path", ""),
        )
        material_data = data.get("material")
        return BatchedProxy(
            mesh=mesh,
            transforms=[GeneralPose3.from_list(p) for p in data.get("instances", [])],
            material=Material.deserialize(material_data) if material_data else None,
            name=data.get("name", ""),
        )

    @staticmethod
    def get_info(path: Union[str, Path]) -> dict:
        """
        Получить информацию о файле без построения прокси.

        Returns:
            Словарь: name, mesh_uuid, instance_count, vertex_count, triangle_count.
        """
        path = Path(path)

        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)

        mesh_data = data.get("mesh", {})
        return {
            "name": data.get("name", ""),
            "mesh_uuid": mesh_data.get("uuid", ""),
            "instance_count": len(data.get("instances", [])),
            "vertex_count": len(mesh_data.get("vertices", [])),
            "triangle_count": len(mesh_data.get("triangles", [])),
        }

    @staticmethod
    def load_folder(folder: Union[str, Path]) -> List[BatchedProxy]:
        """Load every .multimesh file of a folder (sorted by name). Broken files are skipped."""
        folder = Path(folder)
        proxies: List[BatchedProxy] = []
        if not folder.is_dir():
            log.warn(f"[BatchedProxyPersistence] Folder not found: {folder}")
            return proxies
        for path in sorted(folder.glob(f"*{PROXY_FILE_EXTENSION}")):
            try:
                proxies.append(BatchedProxyPersistence.load(path))
            except (OSError, ValueError, KeyError) as e:
                log.warn(f"[BatchedProxyPersistence] Failed to load {path}: {e}")
        return proxies


class ProxySaver:
    """ResourceSaver for BatchedProxy: a failed write is a warning, not an error."""

    def save(self, resource: BatchedProxy, path: Union[str, Path]) -> bool:
        try:
            Path(path).parent.mkdir(parents=True, exist_ok=True)
            BatchedProxyPersistence.save(resource, path)
            return True
        except (OSError, TypeError, ValueError) as e:
            log.warn(f"[ProxySaver] Failed to save '{resource.name}' to {path}: {e}")
            return False
