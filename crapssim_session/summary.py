"""Summary statistics over the final states of a batch of sessions."""

from __future__ import annotations

from collections import Counter
from typing import Any, Dict, Iterable, List, Optional

import numpy as np

from .game_state import GameState, LimitReached

HISTOGRAM_BINS = 10


def _describe(values: np.ndarray) -> Dict[str, float]:
    return {
        "mean": float(np.mean(values)),
        "median": float(np.median(values)),
        "min": float(np.min(values)),
        "max": float(np.max(values)),
        # population std, like the browser stats panel
        "std": float(np.std(values)),
    }


def bankroll_histogram(bankrolls: np.ndarray, bins: int = HISTOGRAM_BINS) -> List[Dict[str, float]]:
    counts, edges = np.histogram(bankrolls, bins=bins)
    return [
        {"low": float(edges[i]), "high": float(edges[i + 1]), "count": int(counts[i])}
        for i in range(len(counts))
    ]


def summarize_states(states: Iterable[GameState], initial_bankroll: Optional[float] = None) -> Dict[str, Any]:
    """
    Aggregate finished sessions.

    ``initial_bankroll`` defaults to the first state's configured starting
    bankroll; wins/losses/evens are counted against it.
    """
    states = list(states)
    if not states:
        return {"sessions": 0}

    if initial_bankroll is None:
        initial_bankroll = states[0].configuration.initial_bankroll or 0

    bankrolls = np.array([s.bankroll for s in states], dtype=float)
    rolls = np.array([s.roll_num for s in states], dtype=float)

    limits: Counter = Counter()
    for s in states:
        reached = s.limit_reached()
        limits[reached.value if reached is not None else "None"] += 1

    return {
        "sessions": len(states),
        "initial_bankroll": initial_bankroll,
        "bankroll": _describe(bankrolls),
        "rolls": _describe(rolls),
        "wins": int(np.sum(bankrolls > initial_bankroll)),
        "losses": int(np.sum(bankrolls < initial_bankroll)),
        "evens": int(np.sum(bankrolls == initial_bankroll)),
        "limits": {member.value: limits.get(member.value, 0) for member in LimitReached},
        "histogram": bankroll_histogram(bankrolls),
    }


def format_summary(summary: Dict[str, Any]) -> str:
    """Plain-text rendering for the CLI."""
    if not summary.get("sessions"):
        return "No sessions completed."
    b = summary["bankroll"]
    r = summary["rolls"]
    lines = [
        f"Sessions: {summary['sessions']}",
        f"Final bankroll: mean {b['mean']:.2f}  median {b['median']:.2f}  "
        f"min {b['min']:.2f}  max {b['max']:.2f}  std {b['std']:.2f}",
        f"Rolls: mean {r['mean']:.1f}  median {r['median']:.1f}  min {r['min']:.0f}  max {r['max']:.0f}",
        f"Won {summary['wins']}  Lost {summary['losses']}  Even {summary['evens']}",
        "Limits: " + "  ".join(f"{k}={v}" for k, v in summary["limits"].items()),
        "Histogram:",
    ]
    for bucket in summary["histogram"]:
        lines.append(f"  {bucket['low']:>10.2f} - {bucket['high']:<10.2f} {bucket['count']}")
    return "\n".join(lines)
