[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "laneracer"
version = "0.1.0"
description = "A three-lane endless runner drawn with OpenGL: switch lanes to dodge barriers and raise the score."
requires-python = ">=3.10"
keywords = ["game", "endless-runner", "opengl", "pyglet", "arcade", "3d", "obj"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: X11 Applications",
    "Environment :: MacOS X",
    "Environment :: Win32 (MS Windows)",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment :: Arcade",
]
dependencies = [
    "numpy",
    "pyglet",
    "pillow",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
laneracer = "laneracer.app:main"

[tool.hatch.build.targets.wheel]
packages = ["laneracer"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
