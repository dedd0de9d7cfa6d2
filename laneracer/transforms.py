"""4x4 transformation matrices for the scene and UI cameras.

Matrices act on column vectors (``matrix @ vector``). Upload them to OpenGL
transposed, or with the transpose flag set.
"""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

Vector3 = Sequence[float]


def _vec3(value: Vector3) -> np.ndarray:
    vec = np.asarray(value, dtype=np.float64)
    if vec.shape != (3,):
        raise ValueError(f"expected a 3-component vector, got shape {vec.shape}")
    return vec


def _normalized(vec: np.ndarray, what: str) -> np.ndarray:
    length = float(np.linalg.norm(vec))
    if length == 0.0:
        raise ValueError(f"degenerate view: {what} has zero length")
    return vec / length


def look_at(eye: Vector3, center: Vector3, up: Vector3) -> np.ndarray:
    """Right-handed view matrix looking from ``eye`` towards ``center``."""
    eye_v, center_v, up_v = _vec3(eye), _vec3(center), _vec3(up)
    forward = _normalized(center_v - eye_v, "view direction")
    side = _normalized(np.cross(forward, up_v), "side vector")
    upward = np.cross(side, forward)

    matrix = np.identity(4)
    matrix[0, :3] = side
    matrix[1, :3] = upward
    matrix[2, :3] = -forward
    matrix[0, 3] = -side @ eye_v
    matrix[1, 3] = -upward @ eye_v
    matrix[2, 3] = forward @ eye_v
    return matrix


def perspective(fovy: float, aspect: float, near: float, far: float) -> np.ndarray:
    """Right-handed perspective projection onto the [-1, 1] depth range.

    ``fovy`` is the vertical field of view in radians.
    """
    if aspect == 0:
        raise ValueError("aspect ratio must not be zero")
    if near == far:
        raise ValueError("near and far planes must differ")
    tan_half = math.tan(fovy / 2.0)
    if tan_half == 0:
        raise ValueError("field of view must not be zero")

    matrix = np.zeros((4, 4))
    matrix[0, 0] = 1.0 / (aspect * tan_half)
    matrix[1, 1] = 1.0 / tan_half
    matrix[2, 2] = -(far + near) / (far - near)
    matrix[3, 2] = -1.0
    matrix[2, 3] = -(2.0 * far * near) / (far - near)
    return matrix


def ortho(left: float, right: float, bottom: float, top: float) -> np.ndarray:
    """Two-dimensional orthographic projection."""
    if left == right or bottom == top:
        raise ValueError("orthographic bounds must span a non-empty area")
    matrix = np.identity(4)
    matrix[0, 0] = 2.0 / (right - left)
    matrix[1, 1] = 2.0 / (top - bottom)
    matrix[2, 2] = -1.0
    matrix[0, 3] = -(right + left) / (right - left)
    matrix[1, 3] = -(top + bottom) / (top - bottom)
    return matrix


def translation(offset: Vector3) -> np.ndarray:
    """Matrix that moves points by ``offset``."""
    matrix = np.identity(4)
    matrix[:3, 3] = _vec3(offset)
    return matrix


def scaling(factors: Vector3) -> np.ndarray:
    """Matrix that scales each axis by the matching factor."""
    matrix = np.identity(4)
    matrix[:3, :3] = np.diag(_vec3(factors))
    return matrix