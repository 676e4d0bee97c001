"""Per-roll CSV journal for a single session."""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Any, Dict, Iterable, List, Union

from .engine import RollResult

JOURNAL_COLUMNS = [
    "roll_num",
    "die1",
    "die2",
    "roll",
    "point_before",
    "point_after",
    "bankroll_before",
    "bankroll_after",
    "new_bets",
    "resolved_bets",
]


def _point(state) -> Any:
    return state.point if state.point_is_on else ""


def journal_row(result: RollResult) -> Dict[str, Any]:
    dice = list(result.dice) + ["", ""]
    return {
        "roll_num": result.resulting_state.roll_num,
        "die1": dice[0],
        "die2": dice[1],
        "roll": result.roll,
        "point_before": _point(result.initial_state),
        "point_after": _point(result.resulting_state),
        "bankroll_before": result.initial_state.bankroll,
        "bankroll_after": result.resulting_state.bankroll,
        "new_bets": "; ".join(b.describe() for b in result.new_bets),
        "resolved_bets": "; ".join(r.describe() for r in result.resolved_bets),
    }


def write_journal(results: Iterable[RollResult], path: Union[str, Path]) -> int:
    """Write one row per roll to ``path``; returns the number of rows written."""
    p = Path(path)
    if p.parent and not p.parent.exists():
        p.parent.mkdir(parents=True, exist_ok=True)

    rows: List[Dict[str, Any]] = [journal_row(r) for r in results]
    with p.open("w", newline="", encoding="utf-8") as fh:
        writer = csv.DictWriter(fh, fieldnames=JOURNAL_COLUMNS)
        writer.writeheader()
        writer.writerows(rows)
    return len(rows)
