"""
BatchedProxyAssembler — one render proxy per mesh group.

Material precedence (evaluated once per proxy):
    material override > texture override (unlit material)
    > group material (first seen) > mesh surface material > None
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Dict, List, Optional

from meshmerge import log
from meshmerge.batching.mesh_groups import MeshGroup, MeshKey
from meshmerge.batching.persistence import ProxySaver, ResourceSaver, proxy_file_name
from meshmerge.batching.proxy import BatchedProxy
from meshmerge.resources import Material
from meshmerge.scene.nodes import MultiMeshInstance

if TYPE_CHECKING:
    from meshmerge.resources import Texture

PROXY_TAG = "merge_proxy"


class BatchedProxyAssembler:
    def __init__(
        self,
        material_override: Optional[Material] = None,
        texture_override: Optional["Texture"] = None,
        saver: Optional[ResourceSaver] = None,
    ):
        self.material_override = material_override
        self.texture_override = texture_override
        self.saver: ResourceSaver = saver if saver is not None else ProxySaver()
        self._texture_material: Optional[Material] = None

    def resolve_material(self, group: MeshGroup) -> Optional[Material]:
        if self.material_override is not None:
            return self.material_override
        if self.texture_override is not None:
            # One wrapper material shared by every proxy of the pass.
            if self._texture_material is None or self._texture_material.texture is not self.texture_override:
                self._texture_material = Material.unlit_from_texture(self.texture_override)
            return self._texture_material
        if group.material is not None:
            return group.material
        return group.mesh.material

    def assemble(self, groups: Dict[MeshKey, MeshGroup]) -> List[BatchedProxy]:
        proxies = []
        for group in groups.values():
            proxy = BatchedProxy(
                mesh=group.mesh,
                transforms=group.poses,
                material=self.resolve_material(group),
            )
            proxies.append(proxy)
        log.debug(f"[BatchedProxyAssembler] Assembled {len(proxies)} proxy(ies)")
        return proxies

    @staticmethod
    def build_node(proxy: BatchedProxy) -> MultiMeshInstance:
        node = MultiMeshInstance(proxy.name, proxy=proxy)
        node.generated = PROXY_TAG
        return node

    def persist(self, proxies: List[BatchedProxy], folder: str) -> tuple[List[str], List[str]]:
        """
        Save proxies into folder.

        Returns:
            (saved paths, failed paths). Failures are already logged as warnings.
        """
        saved: List[str] = []
        failed: List[str] = []
        if not folder:
            log.warn("[BatchedProxyAssembler] Proxy saving enabled but output folder is empty")
            return saved, failed

        used_names: set[str] = set()
        for index, proxy in enumerate(proxies):
            name = proxy_file_name(proxy, index)
            if name in used_names:
                # Two assets with the same file stem in different folders.
                stem, suffix = Path(name).stem, Path(name).suffix
                name = f"{stem}_{index}{suffix}"
                attempt = 1
                while name in used_names:
                    name = f"{stem}_{index}_{attempt}{suffix}"
                    attempt += 1
            used_names.add(name)
            path = str(Path(folder) / name)
            if self.saver.save(proxy, path):
                saved.append(path)
            else:
                failed.append(path)
        if failed:
            log.warn(f"[BatchedProxyAssembler] {len(failed)} proxy(ies) not saved, in-memory result kept")
        return saved, failed
