"""Main application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from signal_app.api import router
from signal_app.config import Settings, get_settings
from signal_app.overlay_config import load_overlay_config
from signal_app.services import EngineRegistry
from signal_app.storage import SnapshotStore

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once, before serving."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )
    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def build_registry(settings: Settings) -> EngineRegistry:
    """Create the engine registry from settings and overlay.yaml."""
    overlay_config = load_overlay_config(settings.config_path)
    store = SnapshotStore(settings.snapshot_dir) if settings.snapshot_dir else None
    return EngineRegistry(
        overlay_config=overlay_config,
        store=store,
        autosave=settings.autosave,
    )


def create_app(
    registry: EngineRegistry | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        registry: Pre-built registry (tests); built from settings when None
        settings: Settings override (defaults to get_settings())
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager."""
        if getattr(app.state, "registry", None) is None:
            app.state.registry = build_registry(settings)
        logger.info(
            "Signal overlay service started (persistence=%s)",
            app.state.registry.store is not None,
        )

        yield

        # Shutdown
        logger.info("Shutting down...")
        try:
            app.state.registry.persist_all()
        except Exception as e:
            logger.warning(f"Error persisting snapshots on shutdown: {e}")
        logger.info("Shutdown complete")

    app = FastAPI(
        title="Price Signal Overlay",
        description="Streaming EMA/RSI trading signals with paper trading",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.registry = registry

    # Browser overlays post from arbitrary page origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router, prefix="/api")

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


def main():
    """Run the application."""
    import uvicorn

    settings = get_settings()
    configure_logging(settings.log_level)
    uvicorn.run(
        create_app(settings=settings),
        host=settings.host,
        port=settings.port,
    )


if __name__ == "__main__":
    main()
