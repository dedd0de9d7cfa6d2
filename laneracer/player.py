"""The runner: always moving forward, hopping between three lanes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Container, Protocol, Sequence

import numpy as np

from laneracer.transforms import translation

LEFT_KEY = "a"
RIGHT_KEY = "d"


class _Shader(Protocol):
    def use(self) -> None: ...

    def set_uniform(self, name: str, value: Any) -> None: ...


def _vec3(value: Sequence[float]) -> np.ndarray:
    vec = np.array(value, dtype=np.float64)
    if vec.shape != (3,):
        raise ValueError(f"expected a 3-component vector, got shape {vec.shape}")
    return vec


@dataclass
class Player:
    """Player state; ``model`` and ``texture`` are only needed for drawing."""

    model: Any = None
    texture: Any = None
    position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    velocity: np.ndarray = field(default_factory=lambda: np.zeros(3))
    speed: float = 10.0
    hp: int = 3
    dead: bool = False
    lane: int = 0
    lane_space: float = 20.0
    min_lane: int = -1
    max_lane: int = 1
    _left_held: bool = field(default=False, init=False, repr=False)
    _right_held: bool = field(default=False, init=False, repr=False)

    def __post_init__(self) -> None:
        self.position = _vec3(self.position)
        self.velocity = _vec3(self.velocity)
        if self.min_lane > self.max_lane:
            raise ValueError("min_lane must not exceed max_lane")
        if not self.min_lane <= self.lane <= self.max_lane:
            raise ValueError("lane is outside the allowed range")

    def _shift_lane(self, step: int) -> None:
        self.lane += step
        self.position[0] = -self.lane * self.lane_space

    def handle_input(self, keys: Container[str], dt: float) -> None:
        """Apply one frame of input; ``keys`` holds the names of held keys.

        A lane change happens once per key press, not once per frame held.
        """
        self.velocity[2] += 1.0

        left = LEFT_KEY in keys
        if left and not self._left_held and self.lane > self.min_lane:
            self._shift_lane(-1)
        self._left_held = left

        right = RIGHT_KEY in keys
        if right and not self._right_held and self.lane < self.max_lane:
            self._shift_lane(1)
        self._right_held = right

        length = float(np.linalg.norm(self.velocity))
        if length > 0.0:
            self.velocity = self.velocity / length * self.speed

    def update(self, dt: float) -> None:
        """Advance the position by the current velocity."""
        self.position = self.position + self.velocity * dt

    def model_matrix(self) -> np.ndarray:
        """World transform of the player model."""
        return translation(self.position)

    def draw(self, shader: _Shader) -> None:
        """Draw the textured player model with ``shader``."""
        if self.model is None or self.texture is None:
            raise RuntimeError("player has no model or texture to draw")
        shader.use()
        shader.set_uniform("u_Model", self.model_matrix())
        self.texture.bind()
        self.model.draw(shader)