"""
Встроенные меши-примитивы: куб, плоскость, UV-сфера.

Примитив ведёт себя как ассет. Его source_path — `builtin/<kind>_<params>.mesh`,
uuid выводится из этого пути. Примитивы с одинаковыми параметрами считаются
одним ассетом: попадают в одну группу и сохраняются в файл по имени
ассета (`cube_1x1x1.multimesh`).
"""

import hashlib
import itertools

import numpy as np

from .mesh import Mesh3

BUILTIN_ASSET_ROOT = "builtin"


def _format_param(value) -> str:
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    # Dots would split the file stem.
    return str(value).replace(".", "p")


def builtin_asset_path(kind: str, *params) -> str:
    """builtin_asset_path("cube", 1.0, 0.5, 1.0) -> 'builtin/cube_1x0p5x1.mesh'"""
    return f"{BUILTIN_ASSET_ROOT}/{kind}_{'x'.join(_format_param(p) for p in params)}.mesh"


def asset_uuid(source_path: str) -> str:
    """Stable geometry identity of an asset path."""
    return hashlib.sha256(source_path.encode("utf-8")).hexdigest()[:16]


class PrimitiveMesh(Mesh3):
    """Mesh3 addressed by a builtin asset path."""

    kind = ""

    def __init__(self, vertices, triangles, params: tuple, uvs=None, name: str = ""):
        source_path = builtin_asset_path(self.kind, *params)
        super().__init__(
            vertices=vertices,
            triangles=triangles,
            uvs=uvs,
            name=name or self.kind.capitalize(),
            uuid=asset_uuid(source_path),
            source_path=source_path,
        )


class CubeMesh(PrimitiveMesh):
    """Box centred at the origin. Eight shared corners, two outward-facing triangles per side."""

    kind = "cube"

    def __init__(self, size: float = 1.0, y: float = None, z: float = None):
        extents = np.array([size, size if y is None else y, size if z is None else z], dtype=float)
        # Corner i has sign bits (x, y, z) = (i >> 2, i >> 1, i) & 1.
        signs = np.array(list(itertools.product((-1.0, 1.0), repeat=3)))
        vertices = signs * extents * 0.5

        triangles = []
        for axis in range(3):
            u, v = (a for a in range(3) if a != axis)
            for side in (-1.0, 1.0):
                quad = []
                for su, sv in ((-1.0, -1.0), (1.0, -1.0), (1.0, 1.0), (-1.0, 1.0)):
                    sign = np.zeros(3)
                    sign[axis], sign[u], sign[v] = side, su, sv
                    quad.append(int(4 * (sign[0] > 0) + 2 * (sign[1] > 0) + (sign[2] > 0)))
                for tri in ((quad[0], quad[1], quad[2]), (quad[0], quad[2], quad[3])):
                    p0, p1, p2 = vertices[list(tri)]
                    if np.dot(np.cross(p1 - p0, p2 - p0), p0) < 0:
                        tri = (tri[0], tri[2], tri[1])
                    triangles.append(tri)

        uvs = (signs[:, :2] + 1.0) * 0.5
        super().__init__(vertices, np.array(triangles, dtype=int), params=tuple(extents.tolist()), uvs=uvs)


class PlaneMesh(PrimitiveMesh):
    """Flat grid in the XZ plane. Has no volume: convex hull derivation fails on it."""

    kind = "plane"

    def __init__(self, width: float = 1.0, depth: float = 1.0, segments_w: int = 1, segments_d: int = 1):
        xs = (np.arange(segments_w + 1) / segments_w - 0.5) * width
        zs = (np.arange(segments_d + 1) / segments_d - 0.5) * depth
        gx, gz = np.meshgrid(xs, zs)
        vertices = np.stack([gx.ravel(), np.zeros(gx.size), gz.ravel()], axis=1)

        row = segments_w + 1
        cells = (np.arange(segments_d)[:, None] * row + np.arange(segments_w)[None, :]).ravel()
        lower = np.stack([cells, cells + row, cells + 1], axis=1)
        upper = np.stack([cells + 1, cells + row, cells + row + 1], axis=1)
        triangles = np.stack([lower, upper], axis=1).reshape(-1, 3)

        gu, gv = np.meshgrid(np.arange(segments_w + 1) / segments_w, np.arange(segments_d + 1) / segments_d)
        uvs = np.stack([gu.ravel(), gv.ravel()], axis=1)
        super().__init__(vertices, triangles, params=(width, depth, segments_w, segments_d), uvs=uvs)


class UVSphereMesh(PrimitiveMesh):
    """
    Latitude/longitude sphere around the Z axis.

    Pole rows keep `n_meridians` coincident vertices, so the pole
    triangles are degenerate.
    """

    kind = "uvsphere"

    def __init__(self, radius: float = 1.0, n_meridians: int = 16, n_parallels: int = 16):
        theta = np.linspace(0.0, np.pi, n_parallels + 1)[:, None]
        phi = (np.arange(n_meridians) * 2.0 * np.pi / n_meridians)[None, :]
        vertices = radius * np.stack(
            [
                (np.sin(theta) * np.cos(phi)).ravel(),
                (np.sin(theta) * np.sin(phi)).ravel(),
                np.broadcast_to(np.cos(theta), (n_parallels + 1, n_meridians)).ravel(),
            ],
            axis=1,
        )

        ring = np.arange(n_parallels)[:, None] * n_meridians
        s = np.arange(n_meridians)[None, :]
        s_next = (s + 1) % n_meridians
        a = (ring + s).ravel()
        b = (ring + n_meridians + s).ravel()
        c = (ring + n_meridians + s_next).ravel()
        d = (ring + s_next).ravel()
        triangles = np.stack([np.stack([a, b, c], axis=1), np.stack([a, c, d], axis=1)], axis=1).reshape(-1, 3)

        super().__init__(vertices, triangles, params=(radius, n_meridians, n_parallels), name="UVSphere")
