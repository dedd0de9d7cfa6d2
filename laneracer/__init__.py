"""A three-lane endless runner drawn with OpenGL through pyglet."""

__version__ = "0.1.0"