"""
Strategy evaluators: how big an odds bet to take, and what to do with a
number bet's winnings.

Both are pure functions of configuration values and current bet sizes.
"""

from __future__ import annotations

from typing import Optional, Tuple

from .config import OddsBetStrategy, OddsBetStrategyType, PressStrategy, PressStrategyType
from .legalize import (
    Number,
    RoundingType,
    floor_to_proper_unit,
    odds_amount_avoid_rounding,
    round_amount,
)
from .table_rules import table_max_multiple


def calculate_odds_bet_amount(
    controlling_bet: Number,
    strategy: OddsBetStrategy,
    point: int,
    *,
    dont: bool,
    avoid_rounding: bool,
    rounding: RoundingType,
) -> Number:
    """
    Odds stake for a line/come bet of ``controlling_bet`` on ``point``.

    NONE         -> 0 (no odds)
    SET_AMOUNT   -> strategy.value
    MULTIPLIER   -> controlling_bet * strategy.value
    TABLE_MAX    -> 3-4-5x behind pass/come, 6x behind don't pass/don't come

    With avoid_rounding, SET_AMOUNT and MULTIPLIER amounts are rounded up to
    the next stake that pays out evenly. TABLE_MAX amounts are already the
    table limit and only pass through the rounding mode.
    """
    kind = strategy.type
    if kind == OddsBetStrategyType.NONE:
        return 0
    if kind == OddsBetStrategyType.SET_AMOUNT:
        raw = strategy.value
    elif kind == OddsBetStrategyType.MULTIPLIER:
        raw = controlling_bet * strategy.value
    elif kind == OddsBetStrategyType.TABLE_MAX:
        return round_amount(table_max_multiple(point, dont) * controlling_bet, rounding)
    else:
        raise ValueError(f"Unknown odds bet strategy: {kind!r}")

    if avoid_rounding:
        return odds_amount_avoid_rounding(raw, point, dont=dont)
    return round_amount(raw, rounding)


def apply_press_strategy(
    stake: Number,
    payout: Number,
    number: int,
    strategy: PressStrategy,
    rounding: Optional[RoundingType] = None,
) -> Tuple[Number, Number]:
    """
    Split a winning number bet's payout between the bet and the bankroll.

    Returns ``(new_stake, bankroll_delta)``; ``new_stake + bankroll_delta``
    always equals ``stake + payout``.

    NO_PRESS     everything to the bankroll
    HALF_PRESS   half the payout onto the bet (rounded per ``rounding`` if given)
    FULL_PRESS   the whole payout onto the bet
    POWER_PRESS  as much as possible while keeping a clean stake for the number
    PRESS_UNTIL  press toward ``strategy.value``; once there, bank the rest
    """
    kind = strategy.type
    if kind == PressStrategyType.NO_PRESS:
        return stake, payout

    if kind == PressStrategyType.HALF_PRESS:
        half = payout / 2
        if rounding is not None:
            half = round_amount(half, rounding)
        return stake + half, payout - half

    if kind == PressStrategyType.FULL_PRESS:
        return stake + payout, 0

    if kind == PressStrategyType.POWER_PRESS:
        available = stake + payout
        pressed = floor_to_proper_unit(available, number)
        # never take down part of the original stake
        pressed = max(pressed, stake)
        return pressed, available - pressed

    if kind == PressStrategyType.PRESS_UNTIL:
        target = strategy.value
        if stake >= target:
            return stake, payout
        pressed = min(payout, target - stake)
        return stake + pressed, payout - pressed

    raise ValueError(f"Unknown press strategy: {kind!r}")
