"""loopmatch - tiered content reuse and audio caching for affirmation sessions."""

__version__ = "0.1.0"
__all__ = ["Engine"]


def __getattr__(name: str):  # type: ignore[no-untyped-def]
    if name == "Engine":
        from .core import Engine

        return Engine
    raise AttributeError(f"module 'loopmatch' has no attribute {name!r}")
