"""Obstacles that sit in a lane and count towards the score once passed."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, Sequence

import numpy as np

from laneracer.transforms import scaling, translation


class _Shader(Protocol):
    def use(self) -> None: ...

    def set_uniform(self, name: str, value: Any) -> None: ...


def _vec3(value: Sequence[float]) -> np.ndarray:
    vec = np.array(value, dtype=np.float64)
    if vec.shape != (3,):
        raise ValueError(f"expected a 3-component vector, got shape {vec.shape}")
    return vec


@dataclass
class Barrier:
    """A barrier; ``model`` and ``texture`` are only needed for drawing."""

    model: Any = None
    texture: Any = None
    position: np.ndarray = field(default_factory=lambda: np.array([0.0, -3.0, 0.0]))
    scale: np.ndarray = field(default_factory=lambda: np.array([10.0, 10.0, 10.0]))
    has_been_passed: bool = False
    has_collided: bool = False

    def __post_init__(self) -> None:
        self.position = _vec3(self.position)
        self.scale = _vec3(self.scale)

    def update(self, dt: float, player_speed: float) -> None:
        """Slide towards the player at the player's speed."""
        self.position = self.position - np.array([0.0, 0.0, player_speed * dt])

    def model_matrix(self) -> np.ndarray:
        """World transform: scale first, then move into place."""
        return translation(self.position) @ scaling(self.scale)

    def draw(self, shader: _Shader) -> None:
        """Draw the textured barrier with ``shader``."""
        if self.model is None or self.texture is None:
            raise RuntimeError("barrier has no model or texture to draw")
        shader.use()
        shader.set_uniform("u_Model", self.model_matrix())
        self.texture.bind()
        self.model.draw(shader)