"""
Run many independent sessions of one configuration across worker threads.

Protocol (worker -> orchestrator, plain dicts on a queue.Queue):
  {"type": "progress", "completed": 1000}
  {"type": "result", "states": [GameState.to_dict(), ...]}
  {"type": "cancelled", "states": [...]}      finished early on cancel_event
  {"type": "error", "error": "..."}

Workers only ever see plain data, never shared objects, so shards are
independent and can run in any order.
"""

from __future__ import annotations

import logging
import os
import random
import threading
from dataclasses import dataclass, field
from queue import Queue
from typing import Any, Callable, Dict, List, Optional

import numpy as np

from .config import Configuration
from .dice import RandomDice
from .errors import ConfigurationError, CrapsSessionError
from .game_state import GameState
from .session import run_session

log = logging.getLogger("CSS.Batch")

PROGRESS_BATCH = 1000

ProgressCallback = Callable[[int, int], None]


@dataclass
class BatchResult:
    states: List[GameState] = field(default_factory=list)
    cancelled: bool = False
    simulation_count: int = 0
    workers: int = 0
    seed: Optional[int] = None

    @property
    def completed(self) -> int:
        return len(self.states)


def spawn_seeds(seed: Optional[int], count: int) -> List[Optional[int]]:
    """Independent per-shard seeds from one root seed (or None for OS entropy)."""
    if seed is None:
        return [None] * count
    children = np.random.SeedSequence(seed).spawn(count)
    return [int(child.generate_state(1)[0]) for child in children]


def split_sessions(total: int, workers: int) -> List[int]:
    base, extra = divmod(total, workers)
    return [base + (1 if i < extra else 0) for i in range(workers)]


def run_shard(
    config_data: Dict[str, Any],
    session_count: int,
    seed: Optional[int],
    outbox: Queue,
    cancel_event: Optional[threading.Event] = None,
) -> None:
    """
    Worker body: play ``session_count`` sessions and post the final states.

    Never raises; failures are reported on ``outbox`` as an error message.
    """
    try:
        configuration = Configuration.from_dict(config_data)
        dice = RandomDice(rng=random.Random(seed))
        states: List[Dict[str, Any]] = []

        for i in range(session_count):
            if cancel_event is not None and cancel_event.is_set():
                outbox.put({"type": "cancelled", "states": states})
                return
            final_state, _ = run_session(configuration, dice)
            states.append(final_state.to_dict())
            if (i + 1) % PROGRESS_BATCH == 0:
                outbox.put({"type": "progress", "completed": PROGRESS_BATCH})

        outbox.put({"type": "result", "states": states})
    except Exception as e:
        outbox.put({"type": "error", "error": f"{type(e).__name__}: {e}"})


def run_batch(
    configuration: Configuration,
    simulation_count: Optional[int] = None,
    workers: Optional[int] = None,
    seed: Optional[int] = None,
    on_progress: Optional[ProgressCallback] = None,
    cancel_event: Optional[threading.Event] = None,
) -> BatchResult:
    """
    Run ``simulation_count`` sessions (default: the configuration's own
    simulation_count) over ``workers`` threads (default: CPU count).

    ``on_progress(completed, total)`` is called from the calling thread as
    progress messages arrive. Setting ``cancel_event`` stops the shards at
    their next session boundary; the result then holds whatever finished.
    """
    invalid = configuration.get_invalid_fields()
    if invalid:
        raise ConfigurationError(invalid)

    total = configuration.simulation_count if simulation_count is None else int(simulation_count)
    if total is None or total < 1:
        raise ConfigurationError(["Simulation Count"])

    workers = workers or os.cpu_count() or 1
    workers = max(1, min(int(workers), total))
    cancel_event = cancel_event or threading.Event()

    config_data = configuration.to_dict()
    seeds = spawn_seeds(seed, workers)
    shards = split_sessions(total, workers)
    outbox: Queue = Queue()

    log.info("batch: %d sessions across %d workers (seed=%s)", total, workers, seed)

    threads = [
        threading.Thread(
            target=run_shard,
            args=(config_data, count, shard_seed, outbox, cancel_event),
            name=f"css-shard-{i}",
            daemon=True,
        )
        for i, (count, shard_seed) in enumerate(zip(shards, seeds))
    ]
    for t in threads:
        t.start()

    result = BatchResult(simulation_count=total, workers=workers, seed=seed)
    completed = 0
    pending = len(threads)
    errors: List[str] = []

    while pending:
        msg = outbox.get()
        kind = msg.get("type")
        if kind == "progress":
            completed += msg["completed"]
            if on_progress is not None:
                on_progress(completed, total)
            continue

        pending -= 1
        if kind == "error":
            errors.append(msg["error"])
            log.error("batch shard failed: %s", msg["error"])
            cancel_event.set()
            continue

        states = [GameState.from_dict(s, configuration) for s in msg.get("states", [])]
        result.states.extend(states)
        # account for the tail of the shard that never filled a progress batch
        completed += len(states) % PROGRESS_BATCH
        if kind == "cancelled":
            result.cancelled = True
        if on_progress is not None:
            on_progress(min(completed, total), total)

    for t in threads:
        t.join()

    if errors:
        raise CrapsSessionError(f"{len(errors)} batch shard(s) failed: {errors[0]}")

    if cancel_event.is_set() and result.completed < total:
        result.cancelled = True
    log.info("batch done: %d/%d sessions%s", result.completed, total, " (cancelled)" if result.cancelled else "")
    return result
