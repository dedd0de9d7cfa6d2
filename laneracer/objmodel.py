"""Wavefront OBJ geometry: parsing into triangles and interleaving vertex data."""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from os import PathLike
from typing import Iterable, Iterator, Sequence

import numpy as np

Vec2 = tuple[float, float]
Vec3 = tuple[float, float, float]

_WORD = re.compile(r"[^ \r\n\t]+")
_FLOAT_PREFIX = re.compile(
    r"[+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|inf(?:inity)?|nan)",
    re.IGNORECASE,
)
_INT_PREFIX = re.compile(r"[+-]?\d+")

FLOATS_PER_VERTEX = 8


@dataclass(frozen=True)
class Vertex:
    """One corner of a triangle."""

    position: Vec3 = (0.0, 0.0, 0.0)
    texcoord: Vec2 = (0.0, 0.0)
    normal: Vec3 = (0.0, 0.0, 0.0)


@dataclass(frozen=True)
class Face:
    """A triangle of three vertices."""

    a: Vertex
    b: Vertex
    c: Vertex

    def __iter__(self) -> Iterator[Vertex]:
        return iter((self.a, self.b, self.c))


@dataclass
class Model:
    """Triangle list loaded from an OBJ file."""

    faces: list[Face] = field(default_factory=list)

    def vertex_count(self) -> int:
        """Number of vertices drawn: three per face."""
        return len(self.faces) * 3

    def interleaved(self) -> np.ndarray:
        """Vertex data as rows of position(3), texcoord(2), normal(3)."""
        if not self.faces:
            raise ValueError("Model is empty")
        rows = [
            (*vertex.position, *vertex.texcoord, *vertex.normal)
            for face in self.faces
            for vertex in face
        ]
        return np.array(rows, dtype=np.float32)


def _atof(text: str) -> float:
    match = _FLOAT_PREFIX.match(text)
    return float(match.group()) if match else 0.0


def _atoi(text: str) -> int:
    match = _INT_PREFIX.match(text)
    return int(match.group()) if match else 0


def _split_parts(word: str) -> list[str]:
    parts = word.split("/")
    if parts[-1] == "":
        parts.pop()
    return parts


def _lookup(items: Sequence, reference: str, kind: str):
    index = _atoi(reference) - 1
    if not 0 <= index < len(items):
        raise IndexError(f"{kind} index {reference!r} out of range")
    return items[index]


def _apply_reference(
    vertex: Vertex,
    word: str,
    positions: Sequence[Vec3],
    texcoords: Sequence[Vec2],
    normals: Sequence[Vec3],
) -> Vertex:
    parts = _split_parts(word)
    if len(parts) >= 1:
        vertex = replace(vertex, position=_lookup(positions, parts[0], "position"))
    if len(parts) >= 2:
        vertex = replace(vertex, texcoord=_lookup(texcoords, parts[1], "texcoord"))
    if len(parts) >= 3:
        vertex = replace(vertex, normal=_lookup(normals, parts[2], "normal"))
    return vertex


def parse_obj(lines: Iterable[str] | str) -> Model:
    """Build a model from OBJ text, fanning polygons into triangles."""
    if isinstance(lines, str):
        lines = lines.splitlines()

    positions: list[Vec3] = []
    texcoords: list[Vec2] = []
    normals: list[Vec3] = []
    model = Model()

    for line in lines:
        words = _WORD.findall(line)
        if not words:
            continue
        kind, args = words[0], words[1:]

        if kind == "v" and len(args) >= 3:
            positions.append(tuple(_atof(t) for t in args[:3]))
        elif kind == "vt" and len(args) >= 2:
            texcoords.append((_atof(args[0]), 1.0 - _atof(args[1])))
        elif kind == "vn" and len(args) >= 3:
            normals.append(tuple(_atof(t) for t in args[:3]))
        elif kind == "f" and len(args) >= 3:
            tables = (positions, texcoords, normals)
            first = _apply_reference(Vertex(), args[0], *tables)
            second = third = Vertex()
            for left, right in zip(args[1:], args[2:]):
                second = _apply_reference(second, left, *tables)
                third = _apply_reference(third, right, *tables)
                model.faces.append(Face(first, second, third))

    return model


def load_obj(path: str | PathLike) -> Model:
    """Read and parse an OBJ file."""
    try:
        with open(path, encoding="utf-8", errors="replace") as handle:
            return parse_obj(handle)
    except OSError as exc:
        raise OSError(f"Failed to open model [{path}]") from exc