"""The game world: player, camera, road tiles, barriers, lights and score."""

from __future__ import annotations

import logging
import math
import random
from dataclasses import replace
from typing import Any, Container

from laneracer.barrier import Barrier
from laneracer.camera import Camera
from laneracer.lights import LightManager
from laneracer.player import Player
from laneracer.road import Road
from laneracer.score import Score
from laneracer.transforms import ortho, perspective, scaling, translation

logger = logging.getLogger(__name__)

WINDOW_WIDTH = 800
WINDOW_HEIGHT = 600
FIELD_OF_VIEW = math.radians(120.0)
NEAR_PLANE = 0.1
FAR_PLANE = 100.0

TILE_LENGTH = 78.5
ROAD_TILES = 4
LANE_SPACE = 20.0
SPAWN_INTERVAL = 5.0
SPAWN_DISTANCE = 100.0
COLLISION_DEPTH = 1.0

SCORE_OFFSET = (0.0, 0.0, 0.0)
SCORE_SCALE = (200.0, 100.0, 1.0)

TRIANGLE_POSITIONS = (
    0.0, 0.5, 0.0,
    -0.5, -0.5, 0.0,
    0.5, -0.5, 0.0,
)
TRIANGLE_COLORS = (
    1.0, 0.0, 0.0, 1.0,
    0.0, 1.0, 0.0, 1.0,
    0.0, 0.0, 1.0, 1.0,
)


class _PygletState:
    """Fixed-function state switches through pyglet."""

    def __init__(self) -> None:
        from pyglet import gl

        self.gl = gl

    def depth_test(self, enabled: bool) -> None:
        gl = self.gl
        (gl.glEnable if enabled else gl.glDisable)(gl.GL_DEPTH_TEST)

    def blending(self, enabled: bool) -> None:
        gl = self.gl
        if enabled:
            gl.glEnable(gl.GL_BLEND)
            gl.glBlendFunc(gl.GL_SRC_ALPHA, gl.GL_ONE_MINUS_SRC_ALPHA)
        else:
            gl.glDisable(gl.GL_BLEND)


def check_collision(player: Player, barrier: Barrier) -> bool:
    """True when the barrier is in the player's lane and within one unit along z."""
    player_z = float(player.position[2])
    barrier_z = float(barrier.position[2])
    close = player_z - COLLISION_DEPTH <= barrier_z <= player_z + COLLISION_DEPTH
    return close and float(barrier.position[0]) == float(player.position[0])


class World:
    """Everything in play, advanced one frame at a time.

    ``road`` and ``barrier`` are templates: the world lays out copies of the
    road and spawns copies of the barrier, all sharing their model and texture.
    """

    def __init__(
        self,
        player: Player | None = None,
        road: Road | None = None,
        barrier: Barrier | None = None,
        score: Score | None = None,
        *,
        camera: Camera | None = None,
        lights: LightManager | None = None,
        shader: Any = None,
        ui_shader: Any = None,
        mesh: Any = None,
        gl_state: Any = None,
        rng: random.Random | None = None,
        tile_length: float = TILE_LENGTH,
        lane_space: float = LANE_SPACE,
        spawn_interval: float = SPAWN_INTERVAL,
    ) -> None:
        self.player = player if player is not None else Player()
        self.road = road if road is not None else Road()
        self.barrier = barrier if barrier is not None else Barrier()
        self.score = score if score is not None else Score()
        self.camera = camera if camera is not None else Camera()
        self.lights = lights if lights is not None else LightManager()
        self.shader = shader
        self.ui_shader = ui_shader
        self.mesh = mesh
        self._gl_state = gl_state
        self.rng = rng if rng is not None else random.Random()
        self.tile_length = tile_length
        self.lane_space = lane_space
        self.spawn_timer = 0.0
        self.spawn_interval = spawn_interval
        self.player_health = self.player.hp
        logger.info("Player health: %d", self.player_health)

        road_y = float(self.road.position[1])
        self.roads: list[Road] = [
            replace(self.road, position=(0.0, road_y, i * tile_length))
            for i in range(ROAD_TILES)
        ]
        self.barriers: list[Barrier] = []

    @property
    def _state(self) -> Any:
        if self._gl_state is None:
            self._gl_state = _PygletState()
        return self._gl_state

    def update(self, dt: float, keys: Container[str]) -> None:
        """Advance one frame given the set of held key names."""
        self.player.handle_input(keys, dt)
        self.player.update(dt)
        self.camera.update(self.player.position, dt)
        self.update_roads()
        self.update_barriers(dt)
        self.lights.update(self.player.position)

    def update_roads(self) -> None:
        """Move tiles the player has left behind to the far end of the road."""
        player_z = float(self.player.position[2])
        max_z = max([0.0, *(float(road.position[2]) for road in self.roads)])
        for road in self.roads:
            if float(road.position[2]) + self.tile_length < player_z:
                road.position = road.position.copy()
                road.position[0] = 0.0
                road.position[2] = max_z + self.tile_length
                max_z = float(road.position[2])

    def update_barriers(self, dt: float) -> None:
        """Move barriers, apply hits and passes, and spawn new ones on a timer."""
        template_y = float(self.barrier.position[1])
        player_z = float(self.player.position[2])

        for barrier in self.barriers:
            barrier.update(dt, self.player.speed)
            if check_collision(self.player, barrier):
                if not barrier.has_collided:
                    self.take_damage()
                    barrier.has_collided = True
                continue
            barrier.has_collided = False
            if not barrier.has_been_passed and barrier.position[2] < self.player.position[2]:
                barrier.has_been_passed = True
                self.score.increase(1)
                logger.info("Score increased! New score: %d", self.score.score)

        self.spawn_timer += dt
        if self.spawn_timer >= self.spawn_interval:
            self.spawn_timer = 0.0
            self.spawn_interval = float(self.rng.randint(1, 5))
            lane = self.rng.randint(-1, 1)
            self.barriers.append(
                replace(
                    self.barrier,
                    position=(lane * self.lane_space, template_y, player_z + SPAWN_DISTANCE),
                    has_been_passed=False,
                    has_collided=False,
                )
            )

    def take_damage(self) -> None:
        """Lose one life."""
        self.player_health -= 1
        logger.info("You have %d more lives", self.player_health)

    def render(self) -> None:
        """Draw the scene with the lit shader, then the score overlay."""
        if self.shader is None or self.ui_shader is None:
            raise RuntimeError("world has no shaders to render with")
        state = self._state
        state.depth_test(True)
        state.blending(False)

        shader = self.shader
        shader.use()
        self.lights.send_to_shader(shader)
        shader.set_uniform(
            "u_Projection",
            perspective(FIELD_OF_VIEW, WINDOW_WIDTH / WINDOW_HEIGHT, NEAR_PLANE, FAR_PLANE),
        )
        shader.set_uniform("u_View", self.camera.view_matrix())

        if self.mesh is not None:
            self.mesh.draw(shader)
        self.player.draw(shader)
        for road in self.roads:
            road.draw(shader)
        for barrier in self.barriers:
            barrier.draw(shader)

        state.depth_test(False)
        state.blending(True)
        ui = self.ui_shader
        ui.use()
        ui.set_uniform("u_Projection", ortho(0.0, WINDOW_WIDTH, WINDOW_HEIGHT, 0.0))
        ui.set_uniform("u_Model", translation(SCORE_OFFSET) @ scaling(SCORE_SCALE))
        self.score.draw(ui)

        state.depth_test(True)