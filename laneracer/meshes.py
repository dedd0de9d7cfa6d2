"""GPU vertex buffers for flat-coloured meshes and OBJ models."""

from __future__ import annotations

from typing import Any, Protocol, Sequence

import numpy as np

from laneracer.objmodel import FLOATS_PER_VERTEX, Model
from laneracer.shaders import _resolve_gl

_FLOAT_SIZE = np.dtype(np.float32).itemsize


class _Usable(Protocol):
    def use(self) -> None: ...


def _new_buffer(backend: Any, data: bytes) -> int:
    buffer = backend.create_buffer()
    if not buffer:
        raise RuntimeError("Failed to initialize VBO on GPU")
    backend.buffer_data(buffer, data)
    return buffer


class Mesh:
    """Triangles with a per-vertex position (xyz) and colour (rgba)."""

    def __init__(
        self, positions: Sequence[float], colors: Sequence[float], *, gl: Any = None
    ) -> None:
        pos = np.asarray(positions, dtype=np.float32).ravel()
        col = np.asarray(colors, dtype=np.float32).ravel()
        if pos.size == 0 or pos.size % 3:
            raise ValueError("positions must hold a non-empty multiple of 3 floats")
        if col.size % 4:
            raise ValueError("colors must hold a multiple of 4 floats")
        if pos.size // 3 != col.size // 4:
            raise ValueError("positions and colors must describe the same vertices")

        self.gl = _resolve_gl(gl)
        self.count = pos.size // 3
        self.position_vbo = _new_buffer(self.gl, pos.tobytes())
        self.color_vbo = _new_buffer(self.gl, col.tobytes())
        self.vao = self.gl.create_vertex_array()
        if not self.vao:
            raise RuntimeError("Failed to initialize VAO on GPU")
        self.gl.attribute_pointer(self.vao, self.position_vbo, 0, 3, 3 * _FLOAT_SIZE, 0)
        self.gl.attribute_pointer(self.vao, self.color_vbo, 1, 4, 4 * _FLOAT_SIZE, 0)

    def draw(self, shader: _Usable) -> None:
        """Draw every vertex as triangles with ``shader``."""
        shader.use()
        self.gl.bind_vertex_array(self.vao)
        self.gl.draw_triangles(self.count)
        self.gl.bind_vertex_array(0)

    def release(self) -> None:
        """Delete the buffers and vertex array."""
        if self.vao:
            self.gl.delete_buffer(self.position_vbo)
            self.gl.delete_buffer(self.color_vbo)
            self.gl.delete_vertex_array(self.vao)
            self.vao = self.position_vbo = self.color_vbo = 0


class GpuModel:
    """An OBJ model whose interleaved vertex data is uploaded on first use."""

    def __init__(self, model: Model, *, gl: Any = None) -> None:
        self.model = model
        self._gl = gl
        self._vbo = 0
        self._vao = 0
        self._dirty = True

    @property
    def _backend(self) -> Any:
        if self._gl is None:
            self._gl = _resolve_gl(None)
        return self._gl

    def vao_id(self) -> int:
        """Vertex array id, creating and filling the buffers when needed."""
        if not self.model.faces:
            raise ValueError("Model is empty")
        backend = self._backend
        if not self._vbo:
            self._vbo = backend.create_buffer()
            if not self._vbo:
                raise RuntimeError("Failed to generate vertex buffer")
        if not self._vao:
            self._vao = backend.create_vertex_array()
            if not self._vao:
                raise RuntimeError("Failed to generate vertex array")
        if self._dirty:
            backend.buffer_data(self._vbo, self.model.interleaved().tobytes())
            stride = FLOATS_PER_VERTEX * _FLOAT_SIZE
            backend.attribute_pointer(self._vao, self._vbo, 0, 3, stride, 0)
            backend.attribute_pointer(self._vao, self._vbo, 1, 2, stride, 3 * _FLOAT_SIZE)
            backend.attribute_pointer(self._vao, self._vbo, 2, 3, stride, 5 * _FLOAT_SIZE)
            self._dirty = False
        return self._vao

    def draw(self, shader: _Usable) -> None:
        """Draw the model's triangles with ``shader``."""
        shader.use()
        backend = self._backend
        backend.bind_vertex_array(self.vao_id())
        backend.draw_triangles(self.model.vertex_count())
        backend.bind_vertex_array(0)

    def release(self) -> None:
        """Delete the GPU buffers; a later draw uploads again."""
        if self._vao:
            self._backend.delete_vertex_array(self._vao)
            self._vao = 0
        if self._vbo:
            self._backend.delete_buffer(self._vbo)
            self._vbo = 0
        self._dirty = True