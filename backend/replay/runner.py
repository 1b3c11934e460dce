"""ReplayRunner: feed a recorded price series through one SignalEngine.

Completely independent of signal_app/. Uses signal_core/ only, so a
replay reproduces exactly what the live overlay would have emitted.
"""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from signal_core.engine import EngineUpdate, SignalEngine
from signal_core.models import EngineConfig, EngineView, Trade
from signal_core.parsing import parse_price_text

from replay import stats
from replay.stats import ReplayStats

logger = logging.getLogger(__name__)

# Spacing for samples recorded without a timestamp (the overlay polls every 5s)
DEFAULT_INTERVAL_MS = 5000


@dataclass
class PriceSample:
    timestamp: int | None
    value: float | None


@dataclass
class ReplayResult:
    config: EngineConfig
    total_samples: int
    rejected: int
    transitions: list[EngineUpdate] = field(default_factory=list)
    trades: list[Trade] = field(default_factory=list)  # newest first
    stats: ReplayStats | None = None
    final_view: EngineView | None = None


def load_prices_csv(path: Path | str) -> list[PriceSample]:
    """Read ``timestamp,value`` rows (or a single ``value`` column).

    The first non-blank row is skipped as a header when its value isn't
    numeric. Non-finite timestamps are treated as missing. Values are
    parsed like scraped text, so "1,234.50" and "$12" are accepted.
    Unparseable values are kept as None and rejected by the engine.
    """
    samples: list[PriceSample] = []
    first_row = True
    with open(path, newline="") as f:
        for row in csv.reader(f):
            row = [c.strip() for c in row if c.strip()]
            if not row:
                continue
            if len(row) == 1:
                timestamp_text, value_text = None, row[0]
            else:
                timestamp_text, value_text = row[0], ",".join(row[1:])

            value = parse_price_text(value_text)
            is_header = first_row and value is None
            first_row = False
            if is_header:
                continue

            timestamp = None
            if timestamp_text is not None:
                try:
                    timestamp = int(float(timestamp_text))
                except (ValueError, OverflowError):
                    timestamp = None
            samples.append(PriceSample(timestamp=timestamp, value=value))
    return samples


class ReplayRunner:
    """Run one engine over a price series and collect the results."""

    def __init__(self, config: EngineConfig, interval_ms: int = DEFAULT_INTERVAL_MS):
        self.config = config
        self.interval_ms = interval_ms

    def run(self, samples: Iterable[PriceSample]) -> ReplayResult:
        engine = SignalEngine(self.config, name="replay")
        result = ReplayResult(config=self.config, total_samples=0, rejected=0)

        engine.on_signal(result.transitions.append)

        last_ts = 0
        for i, sample in enumerate(samples):
            result.total_samples += 1
            timestamp = sample.timestamp
            if timestamp is None:
                timestamp = last_ts + self.interval_ms if i > 0 else 0
            last_ts = timestamp

            if sample.value is None:
                result.rejected += 1
                continue
            if engine.submit_price(sample.value, timestamp) is None:
                result.rejected += 1

        result.trades = engine.simulator.trades
        result.final_view = engine.view()
        if self.config.simulate_trading:
            result.stats = stats.calculate(
                engine.simulator.start_balance,
                engine.simulator.trades,
                engine.simulator.portfolio_history,
            )

        logger.info(
            f"Replay complete: {result.total_samples} samples, "
            f"{result.rejected} rejected, {len(result.transitions)} transitions, "
            f"{len(result.trades)} trades"
        )
        return result
