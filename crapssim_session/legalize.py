"""
legalize.py -- rounding and rounding-avoidance helpers

Helpers to turn raw bet amounts into amounts whose payouts come out even.

Public:
  - round_amount(value, rounding)
  - ceil_to_multiple(amount, divisor)
  - odds_amount_avoid_rounding(planned, point, dont=False)
  - number_bet_avoid_rounding(planned, number)
  - floor_to_proper_unit(amount, number)
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Union

from .errors import InvalidPointError

Number = Union[int, float]

BOX_NUMBERS = (4, 5, 6, 8, 9, 10)

# 4/10 stakes at or above this are "bought" (2:1 less vig) instead of placed (9:5)
BUY_THRESHOLD = 20


class RoundingType(str, Enum):
    DOLLAR = "Dollar"
    CENT = "Cent"


def round_amount(value: Number, rounding: RoundingType) -> Number:
    """
    DOLLAR floors to a whole dollar.
    CENT rounds half-up to the cent; value*100 is snapped to 15 significant
    digits first so 1.005 style inputs don't drift.
    """
    if rounding == RoundingType.DOLLAR:
        return math.floor(value)
    if rounding == RoundingType.CENT:
        scaled = float(f"{value * 100:.15g}")
        return math.floor(scaled + 0.5) / 100
    raise ValueError(f"Unexpected rounding type: {rounding!r}")


def ceil_to_multiple(amount: Number, divisor: int) -> Number:
    if amount % divisor == 0:
        return amount
    return divisor * (math.floor(amount / divisor) + 1)


def odds_amount_avoid_rounding(planned: Number, point: int, dont: bool = False) -> Number:
    """
    Round an odds stake up so the true-odds payout is a whole number.

    Take odds (pass/come):   4/10 any whole amount, 5/9 multiples of 2, 6/8 multiples of 5.
    Lay odds (don't side):   4/10 multiples of 2, 5/9 multiples of 3, 6/8 multiples of 6.
    """
    if point not in BOX_NUMBERS:
        raise InvalidPointError(point)
    if not dont:
        if point in (4, 10):
            return math.ceil(planned)
        if point in (5, 9):
            return ceil_to_multiple(planned, 2)
        return ceil_to_multiple(planned, 5)
    if point in (4, 10):
        return ceil_to_multiple(planned, 2)
    if point in (5, 9):
        return ceil_to_multiple(planned, 3)
    return ceil_to_multiple(planned, 6)


def number_bet_avoid_rounding(planned: Number, number: int) -> Number:
    """
    Round a number bet stake up so its payout is a whole number.

    4/10 below $20 pay 9:5 (multiples of 5); from $20 up they are bought at
    2:1 less 5% (multiples of 20). 5/9 pay 7:5 (5), 6/8 pay 7:6 (6).
    """
    if number not in BOX_NUMBERS:
        raise InvalidPointError(number, "number bet")
    if planned <= 0:
        return planned
    if number in (4, 10):
        if planned >= BUY_THRESHOLD:
            return ceil_to_multiple(planned, 20)
        return ceil_to_multiple(planned, 5)
    if number in (5, 9):
        return ceil_to_multiple(planned, 5)
    return ceil_to_multiple(planned, 6)


def floor_to_proper_unit(amount: Number, number: int) -> Number:
    """Largest clean stake for `number` that does not exceed `amount` (power press)."""
    if number in (6, 8):
        return amount - (amount % 6)
    if number in (5, 9):
        return amount - (amount % 5)
    if number in (4, 10):
        if amount >= BUY_THRESHOLD:
            return amount - (amount % 20)
        return amount - (amount % 5)
    raise InvalidPointError(number, "number bet")
