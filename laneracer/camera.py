"""Chase camera that sits behind and above its target."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

import numpy as np

from laneracer.transforms import look_at


def _vector(*components: float) -> np.ndarray:
    return np.array(components, dtype=np.float64)


@dataclass
class Camera:
    """A camera that snaps to a fixed offset from the target it follows."""

    position: np.ndarray = field(default_factory=lambda: _vector(0.0, 3.0, -3.0))
    target: np.ndarray = field(default_factory=lambda: _vector(0.0, 0.0, 0.0))
    tilt: np.ndarray = field(default_factory=lambda: _vector(0.0, 3.0, 0.0))
    distance: float = 5.0
    smooth_speed: float = 5.0
    height: float = 5.0

    def view_matrix(self) -> np.ndarray:
        """View matrix looking from the camera position at its target."""
        return look_at(self.position, self.target, self.tilt)

    def update(self, target: Sequence[float], dt: float) -> None:
        """Follow ``target``; the camera jumps straight to its chase offset."""
        target_v = np.asarray(target, dtype=np.float64).copy()
        if target_v.shape != (3,):
            raise ValueError("target must have three components")
        self.target = target_v
        self.position = target_v - _vector(0.0, -self.height, self.distance)