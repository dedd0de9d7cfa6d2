"""RGBA images uploaded to the GPU on first use."""

from __future__ import annotations

from os import PathLike
from typing import Any

from PIL import Image

from laneracer.shaders import _resolve_gl


class Texture:
    """An RGBA image; the GPU copy is created and filled lazily."""

    def __init__(self, width: int, height: int, data: bytes, *, gl: Any = None) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("texture dimensions must be positive")
        pixels = bytes(data)
        if len(pixels) != width * height * 4:
            raise ValueError("texture data must hold four bytes per pixel")
        self.width = width
        self.height = height
        self.data = pixels
        self._gl = gl
        self._id = 0
        self._dirty = True

    @classmethod
    def from_file(cls, path: str | PathLike) -> Texture:
        """Load an image file, converting it to RGBA."""
        try:
            with Image.open(path) as image:
                rgba = image.convert("RGBA")
        except OSError as exc:
            raise OSError(f"Failed to load texture [{path}]") from exc
        return cls(rgba.width, rgba.height, rgba.tobytes())

    @property
    def _backend(self) -> Any:
        if self._gl is None:
            self._gl = _resolve_gl(None)
        return self._gl

    def bind(self) -> int:
        """Upload if needed, bind to texture unit 0 and return the texture id."""
        backend = self._backend
        if not self._id:
            self._id = backend.create_texture()
            if not self._id:
                raise RuntimeError("Failed to generate texture")
        if self._dirty:
            backend.upload_texture(self._id, self.width, self.height, self.data)
            self._dirty = False
        backend.bind_texture(self._id)
        return self._id

    def release(self) -> None:
        """Delete the GPU copy; a later bind uploads again."""
        if self._id:
            self._backend.delete_texture(self._id)
            self._id = 0
            self._dirty = True