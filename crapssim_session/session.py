"""
Session driver: feed rolls through the engine until the state says stop.

Purely sequential. Whoever drives a session (the CLI, a batch worker, a
test) owns its DiceSource.
"""

from __future__ import annotations

import logging
from typing import Iterator, List, Optional, Tuple, Union

from .config import Configuration
from .dice import DiceSource, RandomDice
from .engine import RollResult, execute_single_roll
from .game_state import GameState

log = logging.getLogger("CSS.Session")


def _start(start: Union[Configuration, GameState]) -> GameState:
    if isinstance(start, GameState):
        return start
    return GameState.init(start)


def iter_rolls(start: Union[Configuration, GameState], dice: DiceSource) -> Iterator[RollResult]:
    """Yield one RollResult per roll until the session is done."""
    state = _start(start)
    while not state.is_done():
        result = execute_single_roll(state, dice)
        yield result
        state = result.resulting_state
    log.info(
        "session over after %d rolls: bankroll %s (%s)",
        state.roll_num,
        state.bankroll,
        state.limit_reached().value,
    )


def run_session(
    start: Union[Configuration, GameState],
    dice: Optional[DiceSource] = None,
    seed: Optional[int] = None,
    keep_rolls: bool = False,
) -> Tuple[GameState, List[RollResult]]:
    """
    Play a full session and return ``(final_state, rolls)``.

    ``rolls`` is only populated when ``keep_rolls`` is set; batch workers
    run thousands of sessions and only need the final state.
    """
    dice = dice if dice is not None else RandomDice(seed)
    state = _start(start)
    rolls: List[RollResult] = []
    for result in iter_rolls(state, dice):
        if keep_rolls:
            rolls.append(result)
        state = result.resulting_state
    return state, rolls
