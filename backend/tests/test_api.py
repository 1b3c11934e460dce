"""HTTP API tests.

Most tests build the app around an in-memory registry (no snapshot
directory); the persistence tests point a SnapshotStore at tmp_path.
"""

from urllib.parse import quote

import pytest
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient

from signal_app.config import Settings
from signal_app.main import create_app
from signal_app.overlay_config import OverlayConfig
from signal_app.services import EngineRegistry
from signal_app.storage import SnapshotStore

PRICES = [10.0, 9.0, 12.0, 13.0, 8.0]


def _overlay(simulate: bool = True) -> OverlayConfig:
    return OverlayConfig(
        preset="custom",
        engine={
            "ema_short_period": 2,
            "ema_long_period": 3,
            "rsi_period": 14,
            "max_history": 50,
        },
        simulate_trading=simulate,
    )


def _make_app(simulate: bool = True, registry: EngineRegistry | None = None):
    settings = Settings(_env_file=None, snapshot_dir="", config_path="missing.yaml")
    if registry is None:
        registry = EngineRegistry(_overlay(simulate))
    return create_app(registry=registry, settings=settings)


@pytest.fixture
def client():
    with TestClient(_make_app()) as c:
        yield c


def _post_prices(client, key, prices):
    responses = []
    for i, price in enumerate(prices):
        resp = client.post(
            f"/api/entities/{key}/prices",
            json={"value": price, "timestamp": 1000 + i},
        )
        assert resp.status_code == 200, resp.text
        responses.append(resp.json())
    return responses


class TestSystemEndpoints:
    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "healthy"}

    def test_status(self, client):
        data = client.get("/api/status").json()
        assert data["status"] == "running"
        assert data["entities"] == 0
        assert data["persistence"] is False
        assert "edge-triggered-crossover" in data["policies"]

    def test_registry_missing_is_503(self):
        app = _make_app()
        app.state.registry = None
        # No lifespan: the registry is never built
        client = TestClient(app)
        assert client.get("/api/status").status_code == 503


class TestPriceEndpoints:
    def test_signals_follow_prices(self, client):
        responses = _post_prices(client, "btc", PRICES)
        signals = [r["update"]["signal"] for r in responses]
        assert signals == ["HOLD", "SELL", "BUY", "HOLD", "SELL"]

        buy = responses[2]["update"]
        assert buy["changed"] is True
        assert buy["trade"] == {"type": "BUY", "price": 12.0, "timestamp": 1002}

    def test_text_price(self, client):
        resp = client.post("/api/entities/btc/prices", json={"text": "$ 1,234.50"})
        data = resp.json()
        assert data["accepted"] is True
        assert data["view"]["price"] == 1234.5

    def test_rejected_price(self, client):
        _post_prices(client, "btc", [10.0])
        resp = client.post("/api/entities/btc/prices", json={"value": -3.0})
        data = resp.json()
        assert resp.status_code == 200
        assert data["accepted"] is False
        assert data["update"] is None
        assert data["view"]["history_size"] == 1

    def test_unparseable_text_is_rejected(self, client):
        resp = client.post("/api/entities/btc/prices", json={"text": "n/a"})
        assert resp.json()["accepted"] is False

    def test_empty_body_is_422(self, client):
        resp = client.post("/api/entities/btc/prices", json={})
        assert resp.status_code == 422

    @pytest.mark.parametrize("body", [{"value": -5.0}, {"text": "n/a"}])
    def test_rejected_price_does_not_track_new_entity(self, client, body):
        resp = client.post("/api/entities/fresh/prices", json=body)
        data = resp.json()
        assert resp.status_code == 200
        assert data["accepted"] is False
        assert data["view"]["history_size"] == 0
        assert data["view"]["signal"] == "WARMUP"

        assert client.get("/api/entities").json() == []
        assert client.get("/api/entities/fresh").status_code == 404

    def test_non_finite_timestamp_is_422(self, client):
        resp = client.post(
            "/api/entities/fresh/prices",
            content=b'{"value": 10.0, "timestamp": NaN}',
            headers={"content-type": "application/json"},
        )
        assert resp.status_code == 422
        assert client.get("/api/entities").json() == []


class TestEntityEndpoints:
    def test_list_entities(self, client):
        _post_prices(client, "b", [1.0])
        _post_prices(client, "a", [1.0])
        assert client.get("/api/entities").json() == ["a", "b"]

    def test_view(self, client):
        _post_prices(client, "btc", PRICES[:4])
        view = client.get("/api/entities/btc").json()
        assert view["price"] == 13.0
        assert view["history_size"] == 4
        assert view["simulation"]["trade_count"] == 1

    def test_unknown_entity_is_404(self, client):
        assert client.get("/api/entities/nope").status_code == 404
        assert client.get("/api/entities/nope/snapshot").status_code == 404
        assert client.post("/api/entities/nope/reset").status_code == 404
        assert client.delete("/api/entities/nope").status_code == 404

    def test_snapshot_round_trip(self, client):
        _post_prices(client, "btc", PRICES)
        snapshot = client.get("/api/entities/btc/snapshot").json()

        resp = client.put("/api/entities/eth/snapshot", json=snapshot)
        assert resp.status_code == 200
        assert resp.json()["signal"] == "WARMUP"
        assert client.get("/api/entities/eth/snapshot").json() == snapshot

    def test_invalid_snapshot_is_422(self, client):
        bad = {"simulation": {"balance": -5}}
        assert client.put("/api/entities/btc/snapshot", json=bad).status_code == 422

    def test_reset(self, client):
        _post_prices(client, "btc", PRICES[:3])
        view = client.post("/api/entities/btc/reset").json()
        assert view["history_size"] == 0
        assert view["signal"] == "WARMUP"
        assert view["simulation"]["trade_count"] == 1

    def test_reset_simulation(self, client):
        _post_prices(client, "btc", PRICES[:3])
        view = client.post(
            "/api/entities/btc/simulation/reset", json={"start_balance": 250.0}
        ).json()
        assert view["history_size"] == 3
        assert view["simulation"]["balance"] == 250.0
        assert view["simulation"]["trade_count"] == 0

    def test_reset_simulation_invalid_balance(self, client):
        _post_prices(client, "btc", [1.0])
        resp = client.post(
            "/api/entities/btc/simulation/reset", json={"start_balance": -1.0}
        )
        assert resp.status_code == 422

    def test_toggle_simulation(self, client):
        view = client.put("/api/entities/btc/simulation", json={"enabled": False}).json()
        assert view["simulation"] is None

    def test_delete(self, client):
        _post_prices(client, "btc", [1.0])
        assert client.delete("/api/entities/btc").json() == {"deleted": "btc"}
        assert client.get("/api/entities").json() == []


@pytest.mark.asyncio
async def test_async_price_flow():
    app = _make_app(simulate=False)
    async with app.router.lifespan_context(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            resp = await client.post("/api/entities/x/prices", json={"value": 100.0})
            assert resp.status_code == 200, resp.text
            resp = await client.post("/api/entities/x/prices", json={"value": 110.0})
            view = resp.json()["view"]
            assert view["change_pct"] == pytest.approx(10.0)
            assert view["simulation"] is None


class TestUrlKeys:
    """Entity keys derived from page URLs contain slashes."""

    KEY = "https://example.com/token/btc?tab=1"

    @property
    def path(self) -> str:
        return f"/api/entities/{quote(self.KEY, safe='')}"

    def test_full_lifecycle(self, client):
        for i, price in enumerate(PRICES[:3]):
            resp = client.post(
                f"{self.path}/prices", json={"value": price, "timestamp": 1000 + i}
            )
            assert resp.status_code == 200, resp.text
            assert resp.json()["accepted"] is True

        assert client.get("/api/entities").json() == [self.KEY]

        view = client.get(self.path).json()
        assert view["history_size"] == 3
        assert view["simulation"]["trade_count"] == 1

        snapshot = client.get(f"{self.path}/snapshot").json()
        assert len(snapshot["price_history"]) == 3
        assert client.put(f"{self.path}/snapshot", json=snapshot).status_code == 200

        view = client.post(
            f"{self.path}/simulation/reset", json={"start_balance": 100.0}
        ).json()
        assert view["simulation"]["balance"] == 100.0
        assert view["history_size"] == 3

        assert client.put(f"{self.path}/simulation", json={"enabled": False}).json()[
            "simulation"
        ] is None

        assert client.post(f"{self.path}/reset").json()["history_size"] == 0

        assert client.delete(self.path).json() == {"deleted": self.KEY}
        assert client.get("/api/entities").json() == []

    def test_keys_are_not_confused_with_suffixes(self, client):
        _post_prices(client, quote("example.com/reset", safe=""), [1.0])
        _post_prices(client, "example.com", [2.0])

        assert client.get("/api/entities").json() == ["example.com", "example.com/reset"]
        assert client.get(f"/api/entities/{quote('example.com/reset', safe='')}").json()[
            "price"
        ] == 1.0


class TestPersistence:
    """Autosave through the HTTP handlers."""

    def test_prices_are_saved(self, tmp_path):
        store = SnapshotStore(tmp_path)
        app = _make_app(registry=EngineRegistry(_overlay(), store=store))

        with TestClient(app) as client:
            _post_prices(client, "btc", PRICES[:3])
            snapshot = client.get("/api/entities/btc/snapshot").json()
            assert store.load("btc").model_dump(mode="json") == snapshot

            client.post("/api/entities/btc/reset")
            assert store.load("btc").price_history == []

    def test_stored_entities_listed_after_restart(self, tmp_path):
        store = SnapshotStore(tmp_path)
        with TestClient(_make_app(registry=EngineRegistry(_overlay(), store=store))) as client:
            _post_prices(client, "btc", PRICES[:2])

        registry = EngineRegistry(_overlay(), store=store)
        with TestClient(_make_app(registry=registry)) as client:
            assert len(registry) == 0
            assert client.get("/api/entities").json() == ["btc"]
            assert client.get("/api/entities/btc").json()["history_size"] == 2

    def test_delete_removes_stored_snapshot(self, tmp_path):
        store = SnapshotStore(tmp_path)
        app = _make_app(registry=EngineRegistry(_overlay(), store=store))

        with TestClient(app) as client:
            _post_prices(client, "btc", [1.0])
            assert client.delete("/api/entities/btc").status_code == 200
            assert store.load("btc") is None
            assert client.get("/api/entities").json() == []
