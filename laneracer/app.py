"""Command-line entry point: open a window and run the game loop."""

from __future__ import annotations

import argparse
import logging
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Sequence

from laneracer.barrier import Barrier
from laneracer.meshes import GpuModel, Mesh
from laneracer.objmodel import load_obj
from laneracer.player import Player
from laneracer.road import Road
from laneracer.score import DEFAULT_FONT, Score
from laneracer.shaders import scene_shader, ui_shader
from laneracer.textures import Texture
from laneracer.world import (
    TRIANGLE_COLORS,
    TRIANGLE_POSITIONS,
    WINDOW_HEIGHT,
    WINDOW_WIDTH,
    World,
)

WINDOW_TITLE = "OpenGL Game"
DEFAULT_ASSETS = "models"


@dataclass
class _Assets:
    player: Player
    road: Road
    barrier: Barrier
    score: Score


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command-line options."""
    parser = argparse.ArgumentParser(
        prog="laneracer", description="Dodge barriers in a three-lane endless runner."
    )
    parser.add_argument(
        "--assets", default=DEFAULT_ASSETS, help="directory holding models and textures"
    )
    parser.add_argument("--font", default=DEFAULT_FONT, help="TrueType font for the score")
    parser.add_argument("-v", "--verbose", action="store_true", help="log game events")
    return parser.parse_args(argv)


def _textured(assets: Path, model_name: str, texture_name: str) -> tuple[GpuModel, Texture]:
    return GpuModel(load_obj(assets / model_name)), Texture.from_file(assets / texture_name)


def _load_assets(assets: Path, font: str) -> _Assets:
    player_model, player_texture = _textured(assets, "curuthers.obj", "Whiskers_diffuse.png")
    road_model, road_texture = _textured(assets, "ground.obj", "ground_Diffuse.png")
    barrier_model, barrier_texture = _textured(assets, "barrier.obj", "barrier_Diffuse.png")
    return _Assets(
        Player(model=player_model, texture=player_texture),
        Road(model=road_model, texture=road_texture),
        Barrier(model=barrier_model, texture=barrier_texture),
        Score(font),
    )


def _held_keys(handler: Any, key: Any) -> set[str]:
    return {name for name, code in (("a", key.A), ("d", key.D)) if handler[code]}


def _run(assets: _Assets) -> None:
    import pyglet
    from pyglet import gl
    from pyglet.window import key

    config = gl.Config(double_buffer=True, depth_size=24, major_version=2, minor_version=1)
    window = pyglet.window.Window(
        width=WINDOW_WIDTH,
        height=WINDOW_HEIGHT,
        caption=WINDOW_TITLE,
        resizable=True,
        config=config,
    )
    handler = key.KeyStateHandler()
    window.push_handlers(handler)
    try:
        world = World(
            assets.player,
            assets.road,
            assets.barrier,
            assets.score,
            shader=scene_shader(),
            ui_shader=ui_shader(),
            mesh=Mesh(TRIANGLE_POSITIONS, TRIANGLE_COLORS),
        )
        last = time.perf_counter()
        while not window.has_exit:
            now = time.perf_counter()
            dt = now - last
            last = now
            window.dispatch_events()
            if window.has_exit:
                break
            gl.glClearColor(0.0, 0.0, 0.0, 1.0)
            gl.glClear(gl.GL_COLOR_BUFFER_BIT | gl.GL_DEPTH_BUFFER_BIT)
            world.update(dt, _held_keys(handler, key))
            world.render()
            window.flip()
    finally:
        window.close()


def main(argv: Sequence[str] | None = None) -> int:
    """Load the assets, open the game window and play until it is closed."""
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING, format="%(message)s"
    )
    try:
        assets = _load_assets(Path(args.assets), args.font)
    except OSError as exc:
        print(f"laneracer: {exc}", file=sys.stderr)
        return 1
    _run(assets)
    return 0


if __name__ == "__main__":
    sys.exit(main())