"""Street lights spawned ahead of the player and culled behind."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol, Sequence

logger = logging.getLogger(__name__)

LIGHT_HEIGHT = 5.0
WHITE = (1.0, 1.0, 1.0)


class UniformTarget(Protocol):
    def set_uniform(self, name: str, value: Any) -> None: ...


@dataclass(frozen=True)
class Light:
    """A point light."""

    position: tuple[float, float, float]
    color: tuple[float, float, float] = WHITE
    intensity: float = 1.0


def _initial_lights() -> list[Light]:
    return [Light((0.0, LIGHT_HEIGHT, 0.0))]


@dataclass
class LightManager:
    """Keeps a moving window of lights around the player."""

    spacing: float = 20.0
    cull_distance_behind: float = 10.0
    spawn_distance_ahead: float = 20.0
    max_lights: int = 8
    last_spawn_z: float = 0.0
    lights: list[Light] = field(default_factory=_initial_lights)

    def __post_init__(self) -> None:
        if self.spacing <= 0:
            raise ValueError("light spacing must be positive")

    def update(self, player_pos: Sequence[float]) -> None:
        """Spawn lights ahead of the player and drop those far behind."""
        player_z = float(player_pos[2])
        while self.last_spawn_z < player_z + self.spawn_distance_ahead:
            self.last_spawn_z += self.spacing
            self.lights.append(Light((0.0, LIGHT_HEIGHT, self.last_spawn_z)))
            logger.debug("Spawned light at Z = %s", self.last_spawn_z)

        cutoff = player_z - self.cull_distance_behind
        self.lights = [light for light in self.lights if light.position[2] >= cutoff]

    def uniforms(self) -> dict[str, Any]:
        """Shader uniform values for at most ``max_lights`` lights."""
        shown = self.lights[: self.max_lights]
        values: dict[str, Any] = {"u_NumLights": len(shown)}
        for index, light in enumerate(shown):
            base = f"u_Lights[{index}]"
            values[f"{base}.position"] = light.position
            values[f"{base}.color"] = light.color
            values[f"{base}.intensity"] = light.intensity
        return values

    def send_to_shader(self, shader: UniformTarget) -> None:
        """Set every light uniform on ``shader``."""
        for name, value in self.uniforms().items():
            shader.set_uniform(name, value)