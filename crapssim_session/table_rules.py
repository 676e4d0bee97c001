from __future__ import annotations

from typing import Dict, Tuple

from .errors import InvalidPointError
from .legalize import BOX_NUMBERS, BUY_THRESHOLD, Number, RoundingType, round_amount


# ---------------------------
# Pay tables
# ---------------------------

# (numerator, denominator) applied to the odds stake
TAKE_ODDS_PAYOUTS: Dict[int, Tuple[int, int]] = {
    4: (2, 1),
    5: (3, 2),
    6: (6, 5),
    8: (6, 5),
    9: (3, 2),
    10: (2, 1),
}

LAY_ODDS_PAYOUTS: Dict[int, Tuple[int, int]] = {
    4: (1, 2),
    5: (2, 3),
    6: (5, 6),
    8: (5, 6),
    9: (2, 3),
    10: (1, 2),
}

PLACE_PAYOUTS: Dict[int, Tuple[int, int]] = {
    4: (9, 5),
    5: (7, 5),
    6: (7, 6),
    8: (7, 6),
    9: (7, 5),
    10: (9, 5),
}

BUY_PAYOUT: Tuple[int, int] = (2, 1)
BUY_VIG_RATE = 0.05

# Typical live casino: 3-4-5x odds behind pass/come, flat 6x lay behind don't.
TABLE_MAX_TAKE_MULTIPLES: Dict[int, int] = {4: 3, 5: 4, 6: 5, 8: 5, 9: 4, 10: 3}
TABLE_MAX_LAY_MULTIPLE = 6


def _ratio(table: Dict[int, Tuple[int, int]], point: int, context: str) -> Tuple[int, int]:
    try:
        return table[point]
    except (KeyError, TypeError):
        raise InvalidPointError(point, context) from None


def pass_odds_payout(point: int, odds: Number, rounding: RoundingType) -> Number:
    """Winnings on a pass/come odds stake when the point is made."""
    num, den = _ratio(TAKE_ODDS_PAYOUTS, point, "point")
    return round_amount(odds * num / den, rounding)


def dont_pass_odds_payout(point: int, odds: Number, rounding: RoundingType) -> Number:
    """Winnings on a don't pass/don't come lay stake when the seven shows."""
    num, den = _ratio(LAY_ODDS_PAYOUTS, point, "point")
    return round_amount(odds * num / den, rounding)


def number_bet_payout(wager: Number, number: int, rounding: RoundingType) -> Number:
    """
    Winnings on a number bet:
      - 4/10 at $20 and up: bought, 2:1 minus 5% vig on the stake (vig rounded per mode)
      - 4/10 under $20: placed at 9:5
      - 5/9: 7:5, 6/8: 7:6
    """
    if number not in BOX_NUMBERS:
        raise InvalidPointError(number, "number bet")
    if number in (4, 10) and wager >= BUY_THRESHOLD:
        num, den = BUY_PAYOUT
        vig = round_amount(BUY_VIG_RATE * wager, rounding)
        return round_amount(wager * num / den - vig, rounding)
    num, den = PLACE_PAYOUTS[number]
    return round_amount(wager * num / den, rounding)


def table_max_multiple(point: int, dont: bool) -> int:
    if point not in BOX_NUMBERS:
        raise InvalidPointError(point)
    if dont:
        return TABLE_MAX_LAY_MULTIPLE
    return TABLE_MAX_TAKE_MULTIPLES[point]
