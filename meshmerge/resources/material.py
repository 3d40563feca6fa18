"""Material - surface appearance shared by many mesh instances."""

from __future__ import annotations

import uuid as _uuid
from dataclasses import dataclass, field
from typing import Optional

from meshmerge.resources.texture import Texture


@dataclass(eq=False)
class Material:
    """
    Surface material.

    Materials are resources: compared by identity, shared between
    instances, never copied implicitly.

    unlit   – shading is skipped, the texture (or color) is shown as is.
    opaque  – no blending.
    """

    name: str = ""
    color: tuple[float, float, float, float] = (1.0, 1.0, 1.0, 1.0)
    texture: Optional[Texture] = None
    unlit: bool = False
    opaque: bool = True
    uuid: str = field(default_factory=lambda: _uuid.uuid4().hex)

    @classmethod
    def unlit_from_texture(cls, texture: Texture, name: str = "") -> "Material":
        """Minimal unlit, opaque material displaying the texture."""
        return cls(
            name=name or "UnlitTexture",
            texture=texture,
            unlit=True,
            opaque=True,
        )

    def serialize(self) -> dict:
        return {
            "uuid": self.uuid,
            "name": self.name,
            "color": list(self.color),
            "texture": self.texture.serialize() if self.texture is not None else None,
            "unlit": self.unlit,
            "opaque": self.opaque,
        }

    @classmethod
    def deserialize(cls, data: dict) -> "Material":
        texture_data = data.get("texture")
        return cls(
            name=data.get("name", ""),
            color=tuple(data.get("color", (1.0, 1.0, 1.0, 1.0))),
            texture=Texture.deserialize(texture_data) if texture_data else None,
            unlit=data.get("unlit", False),
            opaque=data.get("opaque", True),
            uuid=data.get("uuid") or _uuid.uuid4().hex,
        )
