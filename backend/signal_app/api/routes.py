"""REST API routes.

The price source (browser overlay, scraper) posts samples per entity key;
renderers read the EngineView. Entity keys are opaque and may contain
slashes (page URLs), so they are matched with the ``path`` convertor and
every suffixed route is declared before the bare ``/entities/{key}`` ones.

Engine state is only touched on the event loop; snapshot file writes run
in the threadpool.
"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Request, status
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, model_validator

from signal_core.engine import EngineUpdate, SignalEngine
from signal_core.models import EngineSnapshot, EngineView, Signal, TradeModel, trade_to_model
from signal_core.parsing import parse_price_text
from signal_core.strategy import list_policies

from signal_app.services import EngineRegistry

logger = logging.getLogger(__name__)

router = APIRouter()

API_VERSION = "0.1.0"


# Request models
class PriceRequest(BaseModel):
    """A price sample: either a numeric value or raw scraped text."""

    value: Optional[float] = None
    text: Optional[str] = None
    timestamp: Optional[int] = None  # ms; defaults to server time

    @model_validator(mode="after")
    def _validate(self):
        if self.value is None and self.text is None:
            raise ValueError("one of 'value' or 'text' is required")
        return self


class SimulationToggle(BaseModel):
    enabled: bool


class SimulationResetRequest(BaseModel):
    start_balance: Optional[float] = None


# Response models
class UpdateResponse(BaseModel):
    price: float
    timestamp: int
    signal: Signal
    previous_signal: Signal
    changed: bool
    trade: Optional[TradeModel] = None


class PriceResponse(BaseModel):
    """Outcome of a price submission. Rejected samples leave state unchanged."""

    accepted: bool
    update: Optional[UpdateResponse] = None
    view: EngineView


class SystemStatus(BaseModel):
    status: str
    version: str
    entities: int
    policies: list[str]
    persistence: bool


def get_registry(request: Request) -> EngineRegistry:
    registry = getattr(request.app.state, "registry", None)
    if registry is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Engine registry not initialized",
        )
    return registry


def _require(registry: EngineRegistry, key: str) -> SignalEngine:
    engine = registry.get(key)
    if engine is None:
        raise HTTPException(status_code=404, detail=f"Entity {key} not tracked")
    return engine


def _update_response(update: EngineUpdate) -> UpdateResponse:
    return UpdateResponse(
        price=update.price,
        timestamp=update.timestamp,
        signal=update.signal,
        previous_signal=update.previous_signal,
        changed=update.changed,
        trade=trade_to_model(update.trade) if update.trade else None,
    )


async def _persist(registry: EngineRegistry, key: str) -> None:
    """Autosave one entity without blocking the event loop."""
    if not registry.autosave:
        return
    snapshot = registry.snapshot(key)
    if snapshot is not None:
        await run_in_threadpool(registry.store.save, key, snapshot)


@router.get("/status", response_model=SystemStatus)
async def get_status(request: Request):
    """Get system status."""
    registry = get_registry(request)
    return SystemStatus(
        status="running",
        version=API_VERSION,
        entities=len(registry.keys()),
        policies=list_policies(),
        persistence=registry.store is not None,
    )


@router.get("/entities", response_model=list[str])
async def get_entities(request: Request):
    """List tracked entity keys, including persisted ones not yet loaded."""
    return get_registry(request).keys()


@router.post("/entities/{key:path}/prices", response_model=PriceResponse)
async def submit_price(key: str, body: PriceRequest, request: Request):
    """Submit a price sample for an entity (tracked from its first accepted sample)."""
    registry = get_registry(request)

    value = body.value
    if value is None:
        value = parse_price_text(body.text)

    update = None
    if value is not None:
        update = registry.submit_price(key, value, body.timestamp, persist=False)

    if update is not None:
        await _persist(registry, key)
        engine = registry.get(key)
    else:
        logger.debug(f"Rejected sample for {key}: value={body.value!r} text={body.text!r}")
        # Rejected samples never start tracking an entity
        engine = registry.get(key) or registry.build(key)

    return PriceResponse(
        accepted=update is not None,
        update=_update_response(update) if update is not None else None,
        view=engine.view(),
    )


@router.get("/entities/{key:path}/snapshot", response_model=EngineSnapshot)
async def get_snapshot(key: str, request: Request):
    """Serializable engine state."""
    return _require(get_registry(request), key).snapshot()


@router.put("/entities/{key:path}/snapshot", response_model=EngineView)
async def put_snapshot(key: str, snapshot: EngineSnapshot, request: Request):
    """Re-seed an entity from a snapshot (created if not tracked)."""
    registry = get_registry(request)
    engine = registry.restore(key, snapshot, persist=False)
    await _persist(registry, key)
    return engine.view()


@router.post("/entities/{key:path}/simulation/reset", response_model=EngineView)
async def reset_simulation(
    key: str,
    request: Request,
    body: Optional[SimulationResetRequest] = None,
):
    """Re-seed the paper portfolio without touching price history."""
    registry = get_registry(request)
    _require(registry, key)
    try:
        registry.reset_simulation(
            key, body.start_balance if body else None, persist=False
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    await _persist(registry, key)
    return registry.view(key)


@router.put("/entities/{key:path}/simulation", response_model=EngineView)
async def toggle_simulation(key: str, body: SimulationToggle, request: Request):
    """Enable or disable paper trading for an entity."""
    return get_registry(request).set_simulation_enabled(key, body.enabled).view()


@router.post("/entities/{key:path}/reset", response_model=EngineView)
async def reset_entity(key: str, request: Request):
    """Clear price history and indicator state. Simulation is kept."""
    registry = get_registry(request)
    _require(registry, key)
    registry.reset(key, persist=False)
    await _persist(registry, key)
    return registry.view(key)


@router.get("/entities/{key:path}", response_model=EngineView)
async def get_view(key: str, request: Request):
    """Read-only indicator/signal/simulation view for rendering."""
    return _require(get_registry(request), key).view()


@router.delete("/entities/{key:path}")
async def drop_entity(key: str, request: Request):
    """Stop tracking an entity and delete its stored snapshot."""
    registry = get_registry(request)
    removed = registry.drop(key, delete_stored=False)
    if registry.store is not None:
        removed = await run_in_threadpool(registry.store.delete, key) or removed
    if not removed:
        raise HTTPException(status_code=404, detail=f"Entity {key} not tracked")
    return {"deleted": key}
