"""Core pieces of a small game engine: assertions, asset handles and managers, WAVE loading, audio channels and fixed-step timing."""

__version__ = "0.1.0"

__all__ = [
    "asserts",
    "audio",
    "handle",
    "manager",
    "refcount",
    "timing",
    "wave",
]