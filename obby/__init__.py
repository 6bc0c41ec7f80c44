"""A tile-based side-scrolling platformer with a pygame front end and a window-free engine."""

__version__ = "0.1.0"