"""On-screen score counter rendered as a textured quad."""

from __future__ import annotations

import logging
from os import PathLike
from typing import Any, Protocol

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from laneracer.shaders import _resolve_gl
from laneracer.textures import Texture

logger = logging.getLogger(__name__)

DEFAULT_FONT = "ShineTypewriter-lgwzd.ttf"
DEFAULT_SIZE = 24
TEXT_COLOR = (255, 255, 255, 255)

# Unit quad as two triangles: position (x, y), texcoord (u, v).
QUAD_VERTICES = np.array(
    [
        [0.0, 1.0, 0.0, 1.0],
        [1.0, 0.0, 1.0, 0.0],
        [0.0, 0.0, 0.0, 0.0],
        [0.0, 1.0, 0.0, 1.0],
        [1.0, 1.0, 1.0, 1.0],
        [1.0, 0.0, 1.0, 0.0],
    ],
    dtype=np.float32,
)

_FLOAT_SIZE = np.dtype(np.float32).itemsize


class _Usable(Protocol):
    def use(self) -> None: ...


def render_text(
    text: str, font_path: str | PathLike | None = None, size: int = DEFAULT_SIZE
) -> Image.Image:
    """Render ``text`` in solid white on a transparent RGBA image.

    With no ``font_path`` the built-in Pillow font is used.
    """
    if font_path is None:
        font = ImageFont.load_default()
    else:
        font = ImageFont.truetype(str(font_path), size)
    _, _, right, bottom = font.getbbox(text)
    image = Image.new("RGBA", (max(1, int(right)), max(1, int(bottom))), (0, 0, 0, 0))
    draw = ImageDraw.Draw(image)
    draw.fontmode = "1"
    draw.text((0, 0), text, font=font, fill=TEXT_COLOR)
    return image


class Score:
    """Score value plus the texture that shows it."""

    def __init__(
        self,
        font_path: str | PathLike | None = DEFAULT_FONT,
        size: int = DEFAULT_SIZE,
        *,
        gl: Any = None,
    ) -> None:
        self.score = 0
        self.text = ""
        self.width = 0
        self.height = 0
        self.texture: Texture | None = None
        self._font_path = font_path
        self._size = size
        self._gl = gl
        self._vao = 0
        self._vbo = 0
        self._set_text("Score: 0")

    @property
    def _backend(self) -> Any:
        if self._gl is None:
            self._gl = _resolve_gl(None)
        return self._gl

    def _render(self, text: str) -> Image.Image:
        try:
            return render_text(text, self._font_path, self._size)
        except OSError as exc:
            logger.error("Failed to load font %s: %s", self._font_path, exc)
            self._font_path = None
            return render_text(text, None, self._size)

    def _set_text(self, text: str) -> None:
        image = self._render(text)
        self.text = text
        self.width, self.height = image.size
        if self.texture is not None:
            self.texture.release()
        self.texture = Texture(self.width, self.height, image.tobytes(), gl=self._gl)

    def _setup_quad(self) -> None:
        backend = self._backend
        self._vbo = backend.create_buffer()
        if not self._vbo:
            raise RuntimeError("Failed to generate quad buffer")
        backend.buffer_data(self._vbo, QUAD_VERTICES.tobytes())
        self._vao = backend.create_vertex_array()
        if not self._vao:
            raise RuntimeError("Failed to generate quad vertex array")
        stride = 4 * _FLOAT_SIZE
        backend.attribute_pointer(self._vao, self._vbo, 0, 2, stride, 0)
        backend.attribute_pointer(self._vao, self._vbo, 1, 2, stride, 2 * _FLOAT_SIZE)

    def increase(self, amount: int) -> None:
        """Add ``amount`` to the score and redraw its text."""
        self.score += amount
        self._set_text(f"Score: {self.score}")
        logger.info(self.text)

    def draw(self, shader: _Usable) -> None:
        """Draw the score quad; the caller sets projection, model and blending."""
        shader.use()
        backend = self._backend
        self.texture.bind()
        if not self._vao:
            self._setup_quad()
        backend.bind_vertex_array(self._vao)
        backend.draw_triangles(len(QUAD_VERTICES))
        backend.bind_texture(0)
        backend.bind_vertex_array(0)

    def release(self) -> None:
        """Delete the texture and quad buffers."""
        if self.texture is not None:
            self.texture.release()
        if self._vao:
            self._backend.delete_vertex_array(self._vao)
            self._vao = 0
        if self._vbo:
            self._backend.delete_buffer(self._vbo)
            self._vbo = 0