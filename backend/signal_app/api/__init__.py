"""API layer."""

from signal_app.api.routes import router, get_registry

__all__ = ["router", "get_registry"]
