"""GLSL programs for the 3-D scene and the 2-D overlay.

Every GPU call goes through a small backend object. By default that is an
adapter over pyglet's OpenGL bindings, created on first use, which needs a
current OpenGL context. Another object with the same methods can be made
active for a block of code with ``_using_gl``.
"""

from __future__ import annotations

import functools
import logging
import re
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Iterator, Sequence

import numpy as np

logger = logging.getLogger(__name__)

SCENE_VERTEX_SRC = """
attribute vec3 a_Position;
attribute vec2 a_TexCoord;
attribute vec3 a_Normal;
uniform mat4 u_Projection;
uniform mat4 u_Model;
uniform mat4 u_View;

varying vec3 v_FragPos;
varying vec3 v_Normal;
varying vec2 v_TexCoord;

void main()
{
    gl_Position = u_Projection * u_View * u_Model * vec4(a_Position, 1.0);
    v_TexCoord = a_TexCoord;
    v_Normal = mat3(u_Model) * a_Normal;
    v_FragPos = vec3(u_Model * vec4(a_Position, 1.0));
}
"""

SCENE_FRAGMENT_SRC = """
uniform sampler2D u_Texture;
uniform vec3 u_ViewPos;

varying vec2 v_TexCoord;
varying vec3 v_Normal;
varying vec3 v_FragPos;

vec3 lightPos = vec3(10.0, 5.0, 10.0);
vec3 diffuseColor = vec3(1.0, 1.0, 1.0);
vec3 specularColor = vec3(1.0, 1.0, 1.0);

void main()
{
    vec3 N = normalize(v_Normal);
    vec3 lightDir = normalize(lightPos - v_FragPos);
    float diff = max(dot(N, lightDir), 0.0);
    vec3 diffuse = diffuseColor * diff;

    vec3 viewDir = normalize(u_ViewPos - v_FragPos);
    vec3 reflectDir = reflect(-lightDir, N);
    float spec = pow(max(dot(viewDir, reflectDir), 0.0), 32.0);
    vec3 specular = spec * specularColor;

    vec4 tex = texture2D(u_Texture, v_TexCoord);
    vec3 lighting = diffuse + specular;
    gl_FragColor = vec4(lighting, 1.0) * tex;
}
"""

UI_VERTEX_SRC = """
attribute vec2 a_Position;
attribute vec2 a_TexCoord;
uniform mat4 u_Projection;
uniform mat4 u_Model;
varying vec2 v_TexCoord;

void main()
{
    gl_Position = u_Projection * u_Model * vec4(a_Position, 0.0, 1.0);
    v_TexCoord = a_TexCoord;
}
"""

UI_FRAGMENT_SRC = """
uniform sampler2D u_Texture;
varying vec2 v_TexCoord;

void main()
{
    gl_FragColor = texture2D(u_Texture, v_TexCoord);
}
"""

SCENE_ATTRIBUTES = ("a_Position", "a_TexCoord", "a_Normal")
UI_ATTRIBUTES = ("a_Position", "a_TexCoord")

_ATTRIBUTE_DECL = re.compile(r"\battribute\s+\w+\s+(\w+)\s*;")


class ShaderError(RuntimeError):
    """A shader failed to compile or a program failed to link."""


class _PygletGL:
    """OpenGL calls through pyglet, in the shapes this package needs."""

    def __init__(self) -> None:
        from pyglet import gl
        from pyglet.graphics import shader as pyglet_shader

        self.gl = gl
        self._shader_module = pyglet_shader
        self._shaders: dict[int, Any] = {}

    def _int_out(self) -> Any:
        return (self.gl.GLint * 1)()

    def _generate(self, generator) -> int:
        handles = (self.gl.GLuint * 1)()
        generator(1, handles)
        return handles[0]

    def _delete(self, deleter, handle: int) -> None:
        deleter(1, (self.gl.GLuint * 1)(handle))

    # shaders and programs
    def compile_shader(self, stage: str, source: str) -> int:
        module = self._shader_module
        try:
            shader = module.Shader(source, stage)
        except module.ShaderException as exc:
            raise ShaderError(f"Failed to compile {stage} shader: {exc}") from exc
        self._shaders[shader.id] = shader
        return shader.id

    def create_program(self) -> int:
        return self.gl.glCreateProgram()

    def attach_shader(self, program: int, shader: int) -> None:
        self.gl.glAttachShader(program, shader)

    def detach_shader(self, program: int, shader: int) -> None:
        self.gl.glDetachShader(program, shader)

    def bind_attribute(self, program: int, index: int, name: str) -> None:
        self.gl.glBindAttribLocation(program, index, name.encode("utf-8"))

    def link_program(self, program: int) -> bool:
        gl = self.gl
        gl.glLinkProgram(program)
        status = self._int_out()
        gl.glGetProgramiv(program, gl.GL_LINK_STATUS, status)
        return bool(status[0])

    def program_log(self, program: int) -> str:
        gl = self.gl
        length = self._int_out()
        gl.glGetProgramiv(program, gl.GL_INFO_LOG_LENGTH, length)
        if length[0] <= 0:
            return ""
        buffer = (gl.GLchar * length[0])()
        gl.glGetProgramInfoLog(program, length[0], None, buffer)
        return buffer.value.decode("utf-8", "replace")

    def use_program(self, program: int) -> None:
        self.gl.glUseProgram(program)

    def delete_shader(self, shader: int) -> None:
        wrapped = self._shaders.pop(shader, None)
        if wrapped is not None:
            wrapped.delete()
        else:
            self.gl.glDeleteShader(shader)

    def delete_program(self, program: int) -> None:
        self.gl.glDeleteProgram(program)

    # uniforms
    def uniform_location(self, program: int, name: str) -> int:
        return self.gl.glGetUniformLocation(program, name.encode("utf-8"))

    def set_uniform_ints(self, location: int, values: Sequence[int]) -> None:
        setter = getattr(self.gl, f"glUniform{len(values)}i")
        setter(location, *values)

    def set_uniform_floats(self, location: int, values: Sequence[float]) -> None:
        setter = getattr(self.gl, f"glUniform{len(values)}f")
        setter(location, *values)

    def set_uniform_matrix(self, location: int, matrix: np.ndarray) -> None:
        gl = self.gl
        flat = np.asarray(matrix, dtype=np.float32).ravel()
        values = (gl.GLfloat * 16)(*flat)
        gl.glUniformMatrix4fv(location, 1, gl.GL_TRUE, values)

    # buffers and vertex arrays
    def create_buffer(self) -> int:
        return self._generate(self.gl.glGenBuffers)

    def buffer_data(self, buffer: int, data: bytes) -> None:
        gl = self.gl
        payload = (gl.GLubyte * len(data)).from_buffer_copy(data)
        gl.glBindBuffer(gl.GL_ARRAY_BUFFER, buffer)
        gl.glBufferData(gl.GL_ARRAY_BUFFER, len(data), payload, gl.GL_STATIC_DRAW)
        gl.glBindBuffer(gl.GL_ARRAY_BUFFER, 0)

    def delete_buffer(self, buffer: int) -> None:
        self._delete(self.gl.glDeleteBuffers, buffer)

    def create_vertex_array(self) -> int:
        return self._generate(self.gl.glGenVertexArrays)

    def bind_vertex_array(self, vao: int) -> None:
        self.gl.glBindVertexArray(vao)

    def attribute_pointer(
        self, vao: int, vbo: int, index: int, size: int, stride: int, offset: int
    ) -> None:
        gl = self.gl
        gl.glBindVertexArray(vao)
        gl.glBindBuffer(gl.GL_ARRAY_BUFFER, vbo)
        gl.glVertexAttribPointer(index, size, gl.GL_FLOAT, gl.GL_FALSE, stride, offset)
        gl.glEnableVertexAttribArray(index)
        gl.glBindBuffer(gl.GL_ARRAY_BUFFER, 0)
        gl.glBindVertexArray(0)

    def draw_triangles(self, count: int) -> None:
        self.gl.glDrawArrays(self.gl.GL_TRIANGLES, 0, count)

    def delete_vertex_array(self, vao: int) -> None:
        self._delete(self.gl.glDeleteVertexArrays, vao)

    # textures
    def create_texture(self) -> int:
        return self._generate(self.gl.glGenTextures)

    def upload_texture(self, texture: int, width: int, height: int, data: bytes) -> None:
        gl = self.gl
        pixels = (gl.GLubyte * len(data)).from_buffer_copy(data)
        gl.glBindTexture(gl.GL_TEXTURE_2D, texture)
        gl.glTexImage2D(
            gl.GL_TEXTURE_2D, 0, gl.GL_RGBA, width, height, 0,
            gl.GL_RGBA, gl.GL_UNSIGNED_BYTE, pixels,
        )
        gl.glGenerateMipmap(gl.GL_TEXTURE_2D)
        gl.glBindTexture(gl.GL_TEXTURE_2D, 0)

    def bind_texture(self, texture: int) -> None:
        gl = self.gl
        gl.glActiveTexture(gl.GL_TEXTURE0)
        gl.glBindTexture(gl.GL_TEXTURE_2D, texture)

    def delete_texture(self, texture: int) -> None:
        self._delete(self.gl.glDeleteTextures, texture)


@functools.lru_cache(maxsize=None)
def _default_gl() -> _PygletGL:
    return _PygletGL()


_active_gl: Any = None


@contextmanager
def _using_gl(gl: Any) -> Iterator[Any]:
    """Make ``gl`` the backend for calls that are not given one."""
    global _active_gl
    previous = _active_gl
    _active_gl = gl
    try:
        yield gl
    finally:
        _active_gl = previous


def _resolve_gl(gl: Any) -> Any:
    if gl is not None:
        return gl
    if _active_gl is not None:
        return _active_gl
    return _default_gl()


def _declared_attributes(vertex_src: str) -> list[str]:
    return _ATTRIBUTE_DECL.findall(vertex_src)


@dataclass
class ShaderProgram:
    """A linked program with its two attached shaders."""

    program_id: int
    vertex_id: int
    fragment_id: int
    gl: Any = field(repr=False)
    _locations: dict[str, int] = field(default_factory=dict, init=False, repr=False)
    _released: bool = field(default=False, init=False, repr=False)

    def use(self) -> None:
        """Make this the active program."""
        self.gl.use_program(self.program_id)

    def _location(self, name: str) -> int:
        if name not in self._locations:
            self._locations[name] = self.gl.uniform_location(self.program_id, name)
        return self._locations[name]

    def set_uniform(self, name: str, value: Any) -> None:
        """Set a uniform; names the program does not use are ignored."""
        location = self._location(name)
        if location < 0:
            return
        if isinstance(value, (bool, int, np.integer, np.bool_)):
            self.gl.set_uniform_ints(location, (int(value),))
            return
        array = np.asarray(value, dtype=np.float64)
        if array.shape == ():
            self.gl.set_uniform_floats(location, (float(array),))
        elif array.ndim == 1 and 1 <= array.size <= 4:
            self.gl.set_uniform_floats(location, tuple(float(v) for v in array))
        elif array.shape == (4, 4):
            self.gl.set_uniform_matrix(location, array)
        else:
            raise ValueError(f"unsupported uniform value of shape {array.shape} for {name!r}")

    def release(self) -> None:
        """Detach and delete the shaders and the program."""
        if self._released:
            return
        for shader in (self.vertex_id, self.fragment_id):
            self.gl.detach_shader(self.program_id, shader)
        for shader in (self.vertex_id, self.fragment_id):
            self.gl.delete_shader(shader)
        self.gl.delete_program(self.program_id)
        self._released = True


def compile_program(vertex_src: str, fragment_src: str) -> ShaderProgram:
    """Compile both stages and link them.

    The vertex attributes are bound to locations 0, 1, 2... in the order
    they are declared in the vertex source.
    """
    backend = _resolve_gl(None)
    shaders: list[int] = []
    try:
        for stage, source in (("vertex", vertex_src), ("fragment", fragment_src)):
            shaders.append(backend.compile_shader(stage, source))

        program = backend.create_program()
        for shader in shaders:
            backend.attach_shader(program, shader)
        for index, name in enumerate(_declared_attributes(vertex_src)):
            backend.bind_attribute(program, index, name)
        if not backend.link_program(program):
            log = backend.program_log(program)
            backend.delete_program(program)
            detail = f": {log}" if log else "."
            raise ShaderError(f"Failed to link shader program{detail}")
    except ShaderError:
        for shader in shaders:
            backend.delete_shader(shader)
        raise

    return ShaderProgram(program, shaders[0], shaders[1], backend)


def scene_shader() -> ShaderProgram:
    """The lit, textured program used for the 3-D world."""
    program = compile_program(SCENE_VERTEX_SRC, SCENE_FRAGMENT_SRC)
    logger.info("Shaders initialised")
    return program


def ui_shader() -> ShaderProgram:
    """The flat textured program used for the on-screen overlay."""
    program = compile_program(UI_VERTEX_SRC, UI_FRAGMENT_SRC)
    logger.info("UI shader initialised")
    return program