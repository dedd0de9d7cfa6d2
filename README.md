# laneracer

A small 3D endless runner. Your character runs forward down a road with three
lanes. Barriers appear ahead of you in random lanes, and you switch lanes to
get past them. Each barrier you pass adds a point to the score in the corner
of the window. Each barrier you run into takes away a life.

## Installing

```
pip install .
```

You need a desktop with OpenGL. The window and all drawing use pyglet, and
Pillow reads the image files and draws the score text.

## Playing

```
laneracer
```

Controls:

- `A`: move one lane left
- `D`: move one lane right

One key press moves you one lane. Holding the key down does not move you
again. You start in the middle lane and run forward at a fixed speed. Close
the window to quit.

### Options

```
laneracer [--assets DIR] [--font FONT] [-v]
```

- `--assets DIR`: the directory that holds the models and textures. The
  default is `models`, relative to the current working directory.
- `--font FONT`: the TrueType font used for the score. The default is
  `ShineTypewriter-lgwzd.ttf`. If the font cannot be loaded, the error is
  logged and the score uses Pillow's built-in font instead.
- `-v`, `--verbose`: log game events such as score changes and lives lost.

### Assets

These files are read from the assets directory:

- `curuthers.obj`, `Whiskers_diffuse.png`: the player
- `ground.obj`, `ground_Diffuse.png`: the road tiles
- `barrier.obj`, `barrier_Diffuse.png`: the barriers

If any of them cannot be opened, `laneracer` prints the error and exits with
status 1 before it opens a window.

Models are Wavefront OBJ files. The loader reads `v`, `vt` and `vn` records,
reads `f` records in the `p`, `p/t` and `p/t/n` forms, and splits polygons
into triangle fans. Images in any format Pillow can open are converted to
RGBA.

## Using the pieces

Some modules work without a window:

- `laneracer.objmodel`: `parse_obj` (lines or one string) and `load_obj` (a
  path) build a `Model` made of triangle `Face`s, each holding three
  `Vertex` objects. `Model.vertex_count()` is three per face, and
  `Model.interleaved()` returns a float32 array with one row per vertex:
  position (3), texcoord (2), normal (3).
- `laneracer.transforms`: `look_at`, `perspective`, `ortho`, `translation`
  and `scaling` return 4×4 numpy matrices for column vectors.
- `laneracer.camera`: a `Camera` that follows a target from behind and above.
  `view_matrix()` gives its view transform.
- `laneracer.lights`: a `LightManager` that adds lights ahead of the player,
  removes the ones far behind, and gives their shader values from
  `uniforms()`.
- `laneracer.player`, `laneracer.barrier`, `laneracer.road`: the game objects.
  The model and texture are only needed to draw them.
- `laneracer.world`: `check_collision(player, barrier)` and the `World`. Its
  `update(dt, keys)` takes a set of held key names such as `{"a"}`.

```python
from laneracer.objmodel import parse_obj

model = parse_obj([
    "v 0 0 0",
    "v 1 0 0",
    "v 0 1 0",
    "f 1 2 3",
])
print(model.vertex_count())  # 3
```

```python
from laneracer.world import World

world = World()
world.update(0.1, {"d"})
print(world.player.lane)  # 1
```

`World.render()` and the modules that deal with the GPU (`shaders`,
`textures`, `meshes`, and drawing in `score`) need a current OpenGL context.

## What it does not do

- The game never ends. Lives go down when you hit a barrier, but nothing
  happens when they reach zero, and the lives left are only logged, not shown.
- There is no menu, no pause, and no saved high score.
- The lights from `LightManager` are passed to the scene shader, but that
  shader lights everything from one fixed light and ignores them.

## Running the tests

```
pip install .[test]
pytest
```