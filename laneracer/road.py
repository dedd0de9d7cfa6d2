"""Ground tiles the player runs along."""

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
class Road:
    """One road tile; ``model`` and ``texture`` are only needed for drawing."""

    model: Any = None
    texture: Any = None
    position: np.ndarray = field(default_factory=lambda: np.array([0.0, -2.8, 0.0]))
    scale: np.ndarray = field(default_factory=lambda: np.array([0.01, 1.0, 0.01]))

    def __post_init__(self) -> None:
        self.position = _vec3(self.position)
        self.scale = _vec3(self.scale)

    def update(self, dt: float, player_speed: float) -> None:
        """Tiles stay put; the world recycles them as the player passes."""

    def model_matrix(self) -> np.ndarray:
        """World transform: scale first, then move into place."""
        return translation(self.position) @ scaling(self.scale)

    def draw(self, shader: _Shader) -> None:
        """Draw the textured tile with ``shader``."""
        if self.model is None or self.texture is None:
            raise RuntimeError("road has no model or texture to draw")
        shader.use()
        shader.set_uniform("u_Model", self.model_matrix())
        self.texture.bind()
        self.model.draw(shader)