"""Report formatting for replay results.

Outputs results to console (formatted tables) and JSON files.
"""

from __future__ import annotations

from pathlib import Path

import orjson

from signal_core.models import trade_to_model

from replay.runner import ReplayResult


class ReportFormatter:
    """Format replay results for display and export."""

    @staticmethod
    def print_console(result: ReplayResult, max_rows: int = 50) -> None:
        """Print formatted report to console."""
        config = result.config

        print("\n" + "=" * 70)
        print("  REPLAY RESULTS")
        print("=" * 70)
        print(
            f"  EMA {config.ema_short_period}/{config.ema_long_period}  "
            f"RSI {config.rsi_period} ({config.rsi_buy_threshold:g}/{config.rsi_sell_threshold:g})  "
            f"policy={config.crossover_policy.value}"
        )
        print(f"  Samples: {result.total_samples}  Rejected: {result.rejected}")

        print("\n" + "-" * 70)
        print("  SIGNAL TRANSITIONS")
        print("-" * 70)
        print(f"  {'Timestamp':>14} {'Price':>14} {'From':>7} {'To':>7} {'RSI':>7}")
        for update in result.transitions[:max_rows]:
            rsi = f"{update.rsi:.2f}" if update.rsi is not None else "-"
            print(
                f"  {update.timestamp:>14} {update.price:>14.8g} "
                f"{update.previous_signal.value:>7} {update.signal.value:>7} {rsi:>7}"
            )
        if len(result.transitions) > max_rows:
            print(f"  ... {len(result.transitions) - max_rows} more")

        if result.stats is not None:
            s = result.stats
            print("\n" + "-" * 70)
            print("  PAPER TRADING")
            print("-" * 70)
            print(f"  Trades:         {len(result.trades)}")
            print(f"  Round trips:    {len(s.round_trips)} ({s.wins} wins, {s.win_rate:.1f}%)")
            print(f"  Start balance:  {s.start_balance:,.2f}")
            print(f"  Final value:    {s.final_value:,.2f}")
            print(f"  Total return:   {s.total_return_pct:+.2f}%")
            print(f"  Max drawdown:   {s.max_drawdown_pct:.2f}%")
            print(f"  Open position:  {'yes' if s.open_position else 'no'}")

        view = result.final_view
        if view is not None:
            print("\n" + "-" * 70)
            print(f"  Final signal: {view.signal.value}  history={view.history_size}")
        print("=" * 70 + "\n")

    @staticmethod
    def to_dict(result: ReplayResult) -> dict:
        data: dict = {
            "config": result.config.model_dump(mode="json"),
            "total_samples": result.total_samples,
            "rejected": result.rejected,
            "transitions": [
                {
                    "timestamp": u.timestamp,
                    "price": u.price,
                    "from": u.previous_signal.value,
                    "to": u.signal.value,
                    "ema_short": u.ema_short,
                    "ema_long": u.ema_long,
                    "rsi": u.rsi,
                }
                for u in result.transitions
            ],
            "trades": [trade_to_model(t).model_dump(mode="json") for t in result.trades],
            "final_view": result.final_view.model_dump(mode="json") if result.final_view else None,
        }
        if result.stats is not None:
            s = result.stats
            data["stats"] = {
                "start_balance": s.start_balance,
                "final_value": s.final_value,
                "total_return_pct": s.total_return_pct,
                "max_drawdown_pct": s.max_drawdown_pct,
                "round_trips": len(s.round_trips),
                "wins": s.wins,
                "win_rate": s.win_rate,
                "open_position": s.open_position,
            }
        return data

    @staticmethod
    def save_json(result: ReplayResult, path: Path | str) -> None:
        Path(path).write_bytes(
            orjson.dumps(ReportFormatter.to_dict(result), option=orjson.OPT_INDENT_2)
        )
