import numpy as np
import pytest

from laneracer.barrier import Barrier
from laneracer.meshes import GpuModel
from laneracer.objmodel import parse_obj
from laneracer.textures import Texture

TRIANGLE = "v 0 0 0\nv 1 0 0\nv 0 1 0\nf 1 2 3\n"


class FakeGL:
    def __init__(self):
        self.calls = []
        self._next = 0

    def __getattr__(self, name):
        def record(*args):
            self.calls.append((name, args))
            if name.startswith("create_"):
                self._next += 1
                return self._next
            return None

        return record

    def called(self, name):
        return [args for call, args in self.calls if call == name]


class FakeShader:
    def __init__(self):
        self.uniforms = {}

    def use(self):
        pass

    def set_uniform(self, name, value):
        self.uniforms[name] = np.array(value)


def test_defaults_from_source():
    barrier = Barrier()
    assert np.allclose(barrier.position, [0.0, -3.0, 0.0])
    assert np.allclose(barrier.scale, [10.0, 10.0, 10.0])
    assert barrier.has_been_passed is False
    assert barrier.has_collided is False


def test_update_moves_towards_negative_z():
    barrier = Barrier(position=[20.0, -3.0, 50.0])
    barrier.update(0.5, 10.0)
    assert barrier.position[2] == pytest.approx(50.0 - 10.0 * 0.5)
    assert barrier.position[0] == 20.0
    assert barrier.position[1] == -3.0


def test_update_with_zero_dt_keeps_position():
    barrier = Barrier(position=[0.0, -3.0, 7.0])
    barrier.update(0.0, 10.0)
    assert np.allclose(barrier.position, [0.0, -3.0, 7.0])


def test_model_matrix_scales_then_translates():
    barrier = Barrier(position=[1.0, 2.0, 3.0], scale=[2.0, 2.0, 2.0])
    matrix = barrier.model_matrix()
    assert np.allclose(matrix @ np.array([0.0, 0.0, 0.0, 1.0]), [1.0, 2.0, 3.0, 1.0])
    assert np.allclose(matrix @ np.array([1.0, 0.0, 0.0, 1.0]), [3.0, 2.0, 3.0, 1.0])


def test_bad_scale_rejected():
    with pytest.raises(ValueError):
        Barrier(scale=[1.0])


def test_draw_without_assets_raises():
    with pytest.raises(RuntimeError):
        Barrier().draw(FakeShader())


def test_draw_uploads_model_matrix():
    gl = FakeGL()
    barrier = Barrier(
        model=GpuModel(parse_obj(TRIANGLE), gl=gl),
        texture=Texture(1, 1, b"\x00" * 4, gl=gl),
    )
    shader = FakeShader()
    barrier.draw(shader)
    assert np.allclose(shader.uniforms["u_Model"], barrier.model_matrix())
    assert gl.called("draw_triangles") == [(3,)]