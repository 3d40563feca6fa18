"""Texture - raw image data container."""

from __future__ import annotations

import base64
from dataclasses import dataclass
from pathlib import Path

import numpy as np


@dataclass
class Texture:
    """
    Raw image data container.

    Attributes:
        data: Numpy array of shape (height, width, channels) with uint8 values.
        width: Texture width in pixels.
        height: Texture height in pixels.
        channels: Number of color channels (typically 4 for RGBA).
        source_path: Path to source file (for serialization).
    """

    data: np.ndarray
    width: int
    height: int
    channels: int = 4
    source_path: str | None = None

    @classmethod
    def from_file(cls, path: str | Path) -> "Texture":
        """
        Load texture from image file (PNG, JPG, ...).

        Raises:
            FileNotFoundError: If the file does not exist.
            PIL.UnidentifiedImageError: If the file is not an image.
        """
        from PIL import Image

        with Image.open(path) as image:
            rgba = image.convert("RGBA")
            data = np.array(rgba, dtype=np.uint8)
            width, height = rgba.size

        return cls(data=data, width=width, height=height, channels=4, source_path=str(path))

    @classmethod
    def from_array(cls, data: np.ndarray) -> "Texture":
        """Create texture from a (height, width, channels) array."""
        if len(data.shape) != 3:
            raise ValueError(f"Expected 3D array (height, width, channels), got shape {data.shape}")

        height, width, channels = data.shape
        return cls(data=np.asarray(data, dtype=np.uint8), width=width, height=height, channels=channels)

    @classmethod
    def white_1x1(cls) -> "Texture":
        """Create 1x1 white pixel texture."""
        data = np.array([[[255, 255, 255, 255]]], dtype=np.uint8)
        return cls(data=data, width=1, height=1, channels=4)

    # ----------------------------------------------------------------
    # Сериализация
    # ----------------------------------------------------------------

    def serialize(self) -> dict:
        """
        Сериализует текстуру в словарь.

        Если source_path задан, возвращает ссылку на файл.
        Иначе сериализует данные в base64.
        """
        if self.source_path is not None:
            return {
                "type": "path",
                "path": self.source_path,
            }

        data_b64 = base64.b64encode(self.data.tobytes()).decode("ascii")
        return {
            "type": "inline",
            "width": self.width,
            "height": self.height,
            "channels": self.channels,
            "data_b64": data_b64,
        }

    @classmethod
    def deserialize(cls, data: dict) -> "Texture":
        """Десериализует текстуру из словаря."""
        if data.get("type") == "path":
            return cls.from_file(data["path"])

        width = data["width"]
        height = data["height"]
        channels = data.get("channels", 4)
        pixels = np.frombuffer(base64.b64decode(data["data_b64"]), dtype=np.uint8)
        return cls(
            data=pixels.reshape(height, width, channels).copy(),
            width=width,
            height=height,
            channels=channels,
        )
