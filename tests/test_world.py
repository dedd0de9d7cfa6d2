import random

import numpy as np
import pytest

from laneracer.barrier import Barrier
from laneracer.player import Player
from laneracer.road import Road
from laneracer.score import Score
from laneracer.transforms import ortho, perspective, scaling
from laneracer.world import (
    FAR_PLANE,
    FIELD_OF_VIEW,
    NEAR_PLANE,
    ROAD_TILES,
    SCORE_SCALE,
    SPAWN_DISTANCE,
    WINDOW_HEIGHT,
    WINDOW_WIDTH,
    World,
    check_collision,
)


class FakeShader:
    def __init__(self):
        self.uniforms = {}
        self.uses = 0

    def use(self):
        self.uses += 1

    def set_uniform(self, name, value):
        self.uniforms[name] = value


class FakeState:
    def __init__(self):
        self.events = []

    def depth_test(self, enabled):
        self.events.append(("depth", enabled))

    def blending(self, enabled):
        self.events.append(("blend", enabled))


class FakeGL:
    def __init__(self):
        self.calls = []
        self._next = 0

    def _new(self):
        self._next += 1
        return self._next

    def create_buffer(self):
        return self._new()

    def create_vertex_array(self):
        return self._new()

    def create_texture(self):
        return self._new()

    def buffer_data(self, buffer, data):
        self.calls.append(("buffer_data", buffer))

    def attribute_pointer(self, vao, vbo, index, size, stride, offset):
        self.calls.append(("attribute", index))

    def bind_vertex_array(self, vao):
        self.calls.append(("bind_vao", vao))

    def draw_triangles(self, count):
        self.calls.append(("draw", count))

    def upload_texture(self, texture, width, height, data):
        self.calls.append(("upload", texture))

    def bind_texture(self, texture):
        self.calls.append(("bind_texture", texture))

    def delete_texture(self, texture):
        self.calls.append(("delete_texture", texture))

    def delete_buffer(self, buffer):
        self.calls.append(("delete_buffer", buffer))

    def delete_vertex_array(self, vao):
        self.calls.append(("delete_vao", vao))


class FakeModel:
    def __init__(self, name, log):
        self.name = name
        self.log = log

    def draw(self, shader):
        self.log.append(self.name)


class FakeTexture:
    def bind(self):
        return 1


def make_world(**kwargs):
    log = []
    texture = FakeTexture()
    world = World(
        Player(model=FakeModel("player", log), texture=texture),
        Road(model=FakeModel("road", log), texture=texture),
        Barrier(model=FakeModel("barrier", log), texture=texture),
        Score(None, gl=FakeGL()),
        shader=FakeShader(),
        ui_shader=FakeShader(),
        gl_state=FakeState(),
        rng=random.Random(1),
        **kwargs,
    )
    return world, log


def test_collision_same_lane_and_close():
    player = Player()
    assert check_collision(player, Barrier(position=(0.0, -3.0, 0.5)))
    assert check_collision(player, Barrier(position=(0.0, -3.0, 1.0)))
    assert check_collision(player, Barrier(position=(0.0, -3.0, -1.0)))


def test_no_collision_in_other_lane_or_far_away():
    player = Player()
    assert not check_collision(player, Barrier(position=(20.0, -3.0, 0.0)))
    assert not check_collision(player, Barrier(position=(0.0, -3.0, 1.5)))
    assert not check_collision(player, Barrier(position=(0.0, -3.0, -2.0)))


def test_initial_roads_laid_out_ahead():
    world, _ = make_world()
    assert len(world.roads) == ROAD_TILES
    zs = [float(road.position[2]) for road in world.roads]
    assert zs == [i * world.tile_length for i in range(ROAD_TILES)]
    assert all(road.position[1] == world.road.position[1] for road in world.roads)
    assert all(road.model is world.road.model for road in world.roads)


def test_initial_health_matches_player():
    world, _ = make_world()
    assert world.player_health == world.player.hp


def test_take_damage_decrements_health():
    world, _ = make_world()
    start = world.player_health
    world.take_damage()
    world.take_damage()
    assert world.player_health == start - 2


def test_update_roads_recycles_passed_tile():
    world, _ = make_world()
    world.player.position[2] = world.tile_length + 1.0
    before = [float(road.position[2]) for road in world.roads]
    world.update_roads()
    after = [float(road.position[2]) for road in world.roads]
    assert after[0] == max(before) + world.tile_length
    assert after[1:] == before[1:]


def test_update_roads_keeps_tiles_when_player_near():
    world, _ = make_world()
    before = [float(road.position[2]) for road in world.roads]
    world.update_roads()
    assert [float(road.position[2]) for road in world.roads] == before


def test_spawn_barrier_after_interval():
    world, _ = make_world()
    world.update_barriers(5.0)
    assert len(world.barriers) == 1
    spawned = world.barriers[0]
    assert spawned.position[2] == world.player.position[2] + SPAWN_DISTANCE
    assert spawned.position[1] == world.barrier.position[1]
    assert spawned.position[0] in {-world.lane_space, 0.0, world.lane_space}
    assert spawned.model is world.barrier.model
    assert world.spawn_timer == 0.0
    assert 1.0 <= world.spawn_interval <= 5.0


def test_no_spawn_before_interval():
    world, _ = make_world()
    world.update_barriers(1.0)
    assert world.barriers == []
    assert world.spawn_timer == 1.0


def test_collision_costs_one_life_once():
    world, _ = make_world()
    world.barriers.append(Barrier(position=(0.0, -3.0, 0.0)))
    start = world.player_health
    world.update_barriers(0.0)
    world.update_barriers(0.0)
    assert world.player_health == start - 1
    assert world.barriers[0].has_collided


def test_passed_barrier_scores_once():
    world, _ = make_world()
    world.barriers.append(Barrier(position=(20.0, -3.0, -5.0)))
    world.update_barriers(0.0)
    world.update_barriers(0.0)
    assert world.score.score == 1
    assert world.score.text == "Score: 1"
    assert world.barriers[0].has_been_passed


def test_update_moves_player_and_camera():
    world, _ = make_world()
    world.update(0.1, {"d"})
    assert world.player.lane == 1
    assert world.player.position[0] == -world.player.lane_space
    assert np.allclose(world.camera.target, world.player.position)
    assert world.player.position[2] > 0.0
    assert len(world.lights.lights) > 1


def test_render_sets_uniforms_and_draws():
    world, log = make_world()
    world.barriers.append(
        Barrier(model=world.barrier.model, texture=world.barrier.texture)
    )
    world.render()

    scene = world.shader.uniforms
    assert np.allclose(
        scene["u_Projection"],
        perspective(FIELD_OF_VIEW, WINDOW_WIDTH / WINDOW_HEIGHT, NEAR_PLANE, FAR_PLANE),
    )
    assert np.allclose(scene["u_View"], world.camera.view_matrix())
    assert scene["u_NumLights"] == len(world.lights.lights)

    ui = world.ui_shader.uniforms
    assert np.allclose(ui["u_Projection"], ortho(0.0, WINDOW_WIDTH, WINDOW_HEIGHT, 0.0))
    assert np.allclose(ui["u_Model"], scaling(SCORE_SCALE))

    assert log == ["player"] + ["road"] * ROAD_TILES + ["barrier"]
    assert ("draw", 6) in world.score._gl.calls


def test_render_state_order():
    world, _ = make_world()
    world.render()
    events = world._gl_state.events
    assert events[0] == ("depth", True)
    assert events[1] == ("blend", False)
    assert events[-1] == ("depth", True)
    assert events.index(("depth", False)) < events.index(("blend", True))


def test_render_without_shaders_fails():
    world = World(Player(), Road(), Barrier(), Score(None, gl=FakeGL()))
    with pytest.raises(RuntimeError):
        world.render()