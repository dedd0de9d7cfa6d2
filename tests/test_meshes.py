import itertools

import numpy as np
import pytest

from laneracer.meshes import GpuModel, Mesh
from laneracer.objmodel import Model, parse_obj

POSITIONS = [0.0, 0.5, 0.0, -0.5, -0.5, 0.0, 0.5, -0.5, 0.0]
COLORS = [1.0, 0.0, 0.0, 1.0, 0.0, 1.0, 0.0, 1.0, 0.0, 0.0, 1.0, 1.0]

TRIANGLE_OBJ = """
v 0 0 0
v 1 0 0
v 0 1 0
vt 0 0
vn 0 0 1
f 1/1/1 2/1/1 3/1/1
"""


class FakeGL:
    def __init__(self, fail_buffers=False, fail_arrays=False):
        self._ids = itertools.count(1)
        self.fail_buffers = fail_buffers
        self.fail_arrays = fail_arrays
        self.uploads = []
        self.pointers = []
        self.bound = []
        self.draws = []
        self.deleted_buffers = []
        self.deleted_arrays = []

    def create_buffer(self):
        return 0 if self.fail_buffers else next(self._ids)

    def buffer_data(self, buffer, data):
        self.uploads.append((buffer, bytes(data)))

    def create_vertex_array(self):
        return 0 if self.fail_arrays else next(self._ids)

    def attribute_pointer(self, vao, vbo, index, size, stride, offset):
        self.pointers.append((vao, vbo, index, size, stride, offset))

    def bind_vertex_array(self, vao):
        self.bound.append(vao)

    def draw_triangles(self, count):
        self.draws.append(count)

    def delete_buffer(self, buffer):
        self.deleted_buffers.append(buffer)

    def delete_vertex_array(self, vao):
        self.deleted_arrays.append(vao)


class FakeShader:
    def __init__(self):
        self.uses = 0

    def use(self):
        self.uses += 1


def test_mesh_uploads_positions_and_colors():
    gl = FakeGL()
    mesh = Mesh(POSITIONS, COLORS, gl=gl)
    assert gl.uploads == [
        (mesh.position_vbo, np.array(POSITIONS, dtype=np.float32).tobytes()),
        (mesh.color_vbo, np.array(COLORS, dtype=np.float32).tobytes()),
    ]
    assert gl.pointers == [
        (mesh.vao, mesh.position_vbo, 0, 3, 12, 0),
        (mesh.vao, mesh.color_vbo, 1, 4, 16, 0),
    ]


def test_mesh_draw_uses_shader_and_draws_its_vertices():
    gl = FakeGL()
    shader = FakeShader()
    mesh = Mesh(POSITIONS, COLORS, gl=gl)
    mesh.draw(shader)
    assert shader.uses == 1
    assert gl.draws == [len(POSITIONS) // 3]
    assert gl.bound == [mesh.vao, 0]


@pytest.mark.parametrize(
    "positions, colors",
    [
        ([], []),
        ([0.0, 1.0], [1.0, 1.0, 1.0, 1.0]),
        (POSITIONS, COLORS[:-1]),
        (POSITIONS, COLORS[:8]),
    ],
)
def test_mesh_rejects_bad_data(positions, colors):
    with pytest.raises(ValueError):
        Mesh(positions, colors, gl=FakeGL())


def test_mesh_buffer_failure_raises():
    with pytest.raises(RuntimeError, match="VBO"):
        Mesh(POSITIONS, COLORS, gl=FakeGL(fail_buffers=True))


def test_mesh_array_failure_raises():
    with pytest.raises(RuntimeError, match="VAO"):
        Mesh(POSITIONS, COLORS, gl=FakeGL(fail_arrays=True))


def test_mesh_release_deletes_everything_once():
    gl = FakeGL()
    mesh = Mesh(POSITIONS, COLORS, gl=gl)
    buffers = [mesh.position_vbo, mesh.color_vbo]
    vao = mesh.vao
    mesh.release()
    mesh.release()
    assert gl.deleted_buffers == buffers
    assert gl.deleted_arrays == [vao]


def test_gpu_model_uploads_interleaved_data_once():
    gl = FakeGL()
    model = parse_obj(TRIANGLE_OBJ)
    gpu = GpuModel(model, gl=gl)
    first = gpu.vao_id()
    second = gpu.vao_id()
    assert first == second
    assert len(gl.uploads) == 1
    assert gl.uploads[0][1] == model.interleaved().tobytes()


def test_gpu_model_attribute_layout():
    gl = FakeGL()
    gpu = GpuModel(parse_obj(TRIANGLE_OBJ), gl=gl)
    vao = gpu.vao_id()
    vbo = gl.uploads[0][0]
    assert gl.pointers == [
        (vao, vbo, 0, 3, 32, 0),
        (vao, vbo, 1, 2, 32, 12),
        (vao, vbo, 2, 3, 32, 20),
    ]


def test_gpu_model_draw_counts_vertices():
    gl = FakeGL()
    shader = FakeShader()
    model = parse_obj(TRIANGLE_OBJ)
    gpu = GpuModel(model, gl=gl)
    gpu.draw(shader)
    assert shader.uses == 1
    assert gl.draws == [model.vertex_count()]
    assert gl.bound[-1] == 0


def test_gpu_model_empty_raises_without_allocating():
    gl = FakeGL()
    with pytest.raises(ValueError, match="Model is empty"):
        GpuModel(Model(), gl=gl).vao_id()
    assert gl.uploads == []
    assert gl.pointers == []


def test_gpu_model_buffer_failure_raises():
    gpu = GpuModel(parse_obj(TRIANGLE_OBJ), gl=FakeGL(fail_buffers=True))
    with pytest.raises(RuntimeError, match="vertex buffer"):
        gpu.vao_id()


def test_gpu_model_release_then_reupload():
    gl = FakeGL()
    gpu = GpuModel(parse_obj(TRIANGLE_OBJ), gl=gl)
    vao = gpu.vao_id()
    gpu.release()
    assert gl.deleted_arrays == [vao]
    assert len(gl.deleted_buffers) == 1
    gpu.vao_id()
    assert len(gl.uploads) == 2