"""Application services."""

from signal_app.services.engine_registry import EngineRegistry

__all__ = [
    "EngineRegistry",
]
