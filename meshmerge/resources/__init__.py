"""Render resources: materials and textures."""

from meshmerge.resources.texture import Texture
from meshmerge.resources.material import Material

__all__ = ["Texture", "Material"]
