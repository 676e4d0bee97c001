"""
engine.py -- one discrete transition of a session.

execute_single_roll(state, dice) runs:
  1) placement   odds on established bets, then line or come bets, then number bets
  2) roll        two dice from the injected DiceSource
  3) resolution  pass line, come, don't pass, don't come, number bets,
                 then the point, then new come points

Every phase builds new immutable objects; the incoming GameState is never
modified and is returned untouched inside the RollResult.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from .bets import (
    ODDS_TYPE_FOR,
    BetCollection,
    BetOutcome,
    BetType,
    ComeBet,
    LineBet,
    NumberBet,
    PlacedBet,
    ResolvedBet,
)
from .config import Configuration, OddsBetStrategy
from .dice import DiceSource
from .game_state import GameState
from .legalize import BOX_NUMBERS, Number, number_bet_avoid_rounding
from .strategy import apply_press_strategy, calculate_odds_bet_amount
from .table_rules import dont_pass_odds_payout, number_bet_payout, pass_odds_payout

log = logging.getLogger("CSS.Engine")

NATURALS = (7, 11)
CRAPS = (2, 3, 12)


@dataclass(frozen=True)
class RollResult:
    """Full audit of one roll. ``roll`` is 0 (and ``dice`` empty) when the session was already done."""

    initial_state: GameState
    new_bets: Tuple[PlacedBet, ...]
    placed_bet_state: GameState
    dice: Tuple[int, ...]
    roll: int
    resolved_bets: Tuple[ResolvedBet, ...]
    resulting_state: GameState

    def to_dict(self) -> Dict[str, Any]:
        return {
            "roll_num": self.resulting_state.roll_num,
            "dice": list(self.dice),
            "roll": self.roll,
            "new_bets": [b.to_dict() for b in self.new_bets],
            "resolved_bets": [r.to_dict() for r in self.resolved_bets],
            "initial_state": _state_view(self.initial_state),
            "placed_bet_state": _state_view(self.placed_bet_state),
            "resulting_state": _state_view(self.resulting_state),
        }


def _state_view(state: GameState) -> Dict[str, Any]:
    view = state.to_dict()
    view.pop("configuration", None)
    return view


def execute_single_roll(initial_state: GameState, dice: DiceSource) -> RollResult:
    if initial_state.is_done():
        return RollResult(
            initial_state=initial_state,
            new_bets=(),
            placed_bet_state=initial_state,
            dice=(),
            roll=0,
            resolved_bets=(),
            resulting_state=initial_state,
        )

    placed_bet_state, new_bets = place_bets(initial_state)

    die1, die2 = dice.roll()
    roll = die1 + die2

    resulting_state, resolved_bets = resolve_bets(placed_bet_state, roll)
    log.debug(
        "roll %d: %d+%d=%d bankroll %s -> %s",
        resulting_state.roll_num,
        die1,
        die2,
        roll,
        initial_state.bankroll,
        resulting_state.bankroll,
    )

    return RollResult(
        initial_state=initial_state,
        new_bets=tuple(new_bets),
        placed_bet_state=placed_bet_state,
        dice=(die1, die2),
        roll=roll,
        resolved_bets=tuple(resolved_bets),
        resulting_state=resulting_state,
    )


def can_place_bet(bankroll: Number, bet: Optional[Number], bankroll_minimum: Optional[Number]) -> bool:
    """A bet fits if it is positive, covered by the bankroll, and keeps us at or above the floor."""
    if bet is None or bet <= 0:
        return False
    if bet > bankroll:
        return False
    if bankroll_minimum is not None and bankroll_minimum > 0 and bankroll - bet < bankroll_minimum:
        return False
    return True


# --------------------------------------------------------------------------- #
# Phase 1: placement
# --------------------------------------------------------------------------- #


class _Table:
    """Working copy of the bets and bankroll while a phase is in progress."""

    def __init__(self, state: GameState):
        bets = state.current_bets
        self.cfg: Configuration = state.configuration
        self.bankroll: Number = state.bankroll
        self.pass_line_bet: Optional[LineBet] = bets.pass_line_bet
        self.dont_pass_bet: Optional[LineBet] = bets.dont_pass_bet
        self.come_bets: List[ComeBet] = list(bets.come_bets)
        self.dont_come_bets: List[ComeBet] = list(bets.dont_come_bets)
        self.number_bets: List[NumberBet] = list(bets.number_bets)
        self.placed: List[PlacedBet] = []
        self.resolved: List[ResolvedBet] = []

    def try_place(self, bet_type: BetType, amount: Optional[Number], number: Optional[int] = None) -> bool:
        if not amount:
            return False
        if not can_place_bet(self.bankroll, amount, self.cfg.bankroll_minimum):
            log.debug("skipping %s of %s: bankroll %s", bet_type.value, amount, self.bankroll)
            return False
        self.bankroll -= amount
        placed = PlacedBet(bet_type, amount, number)
        self.placed.append(placed)
        log.debug("placed %s", placed.describe())
        return True

    def settle(
        self,
        bet_type: BetType,
        amount: Number,
        outcome: BetOutcome,
        payout: Number = 0,
        credit: Number = 0,
        number: Optional[int] = None,
    ) -> None:
        self.bankroll += credit
        resolved = ResolvedBet(PlacedBet(bet_type, amount, number), outcome, payout, credit)
        self.resolved.append(resolved)
        log.debug("resolved %s", resolved.describe())

    def bet_collection(self) -> BetCollection:
        return BetCollection(
            pass_line_bet=self.pass_line_bet,
            dont_pass_bet=self.dont_pass_bet,
            come_bets=tuple(self.come_bets),
            dont_come_bets=tuple(self.dont_come_bets),
            number_bets=tuple(self.number_bets),
        )


def place_bets(initial_state: GameState) -> Tuple[GameState, List[PlacedBet]]:
    # Once a limit is hit no new money goes out; working bets still resolve.
    if initial_state.limit_reached() is not None:
        return initial_state, []

    table = _Table(initial_state)
    cfg = table.cfg
    point_is_on = initial_state.point_is_on
    point = initial_state.point
    cashed_out = tuple(initial_state.cashed_out_numbers)

    _place_odds_bets(table, point_is_on, point)

    if not point_is_on:
        if table.pass_line_bet is None and table.try_place(BetType.PASS_LINE, cfg.pass_bet):
            table.pass_line_bet = LineBet(cfg.pass_bet)
        if table.dont_pass_bet is None and table.try_place(BetType.DONT_PASS, cfg.dont_pass_bet):
            table.dont_pass_bet = LineBet(cfg.dont_pass_bet)
    else:
        if len(table.come_bets) < cfg.max_come_bets and table.try_place(BetType.COME, cfg.come_bet):
            table.come_bets.append(ComeBet(cfg.come_bet))
        if len(table.dont_come_bets) < cfg.max_dont_come_bets and table.try_place(
            BetType.DONT_COME, cfg.dont_come_bet
        ):
            table.dont_come_bets.append(ComeBet(cfg.dont_come_bet))

    if not point_is_on:
        if cfg.place_number_bets_during_come_out:
            _place_number_bets(table, point_is_on, point, cashed_out=())
        # New come-out, new cycle: cashed-out numbers may go back up.
        cashed_out = ()
    else:
        _place_number_bets(table, point_is_on, point, cashed_out=cashed_out)

    placed_bet_state = GameState(
        configuration=cfg,
        roll_num=initial_state.roll_num,
        bankroll=table.bankroll,
        point=point,
        point_is_on=point_is_on,
        current_bets=table.bet_collection(),
        cashed_out_numbers=cashed_out,
    )
    return placed_bet_state, table.placed


def _odds_amount(table: _Table, base: Number, strategy: OddsBetStrategy, point: int, dont: bool) -> Number:
    return calculate_odds_bet_amount(
        base,
        strategy,
        point,
        dont=dont,
        avoid_rounding=table.cfg.avoid_rounding,
        rounding=table.cfg.rounding,
    )


def _place_odds_bets(table: _Table, point_is_on: bool, point: int) -> None:
    cfg = table.cfg

    if point_is_on and table.pass_line_bet is not None and table.pass_line_bet.odds is None:
        odds = _odds_amount(table, table.pass_line_bet.amount, cfg.pass_bet_odds_strategy, point, dont=False)
        if table.try_place(BetType.PASS_LINE_ODDS, odds):
            table.pass_line_bet = table.pass_line_bet.with_odds(odds)

    if point_is_on and table.dont_pass_bet is not None and table.dont_pass_bet.odds is None:
        odds = _odds_amount(table, table.dont_pass_bet.amount, cfg.dont_pass_bet_odds_strategy, point, dont=True)
        if table.try_place(BetType.DONT_PASS_ODDS, odds):
            table.dont_pass_bet = table.dont_pass_bet.with_odds(odds)

    if point_is_on or cfg.come_bet_odds_working_come_out:
        table.come_bets = _with_come_odds(table, table.come_bets, cfg.come_bet_odds_strategy, BetType.COME)

    if point_is_on or cfg.dont_come_bet_odds_working_come_out:
        table.dont_come_bets = _with_come_odds(
            table, table.dont_come_bets, cfg.dont_come_bet_odds_strategy, BetType.DONT_COME
        )


def _with_come_odds(
    table: _Table, bets: List[ComeBet], strategy: OddsBetStrategy, base_type: BetType
) -> List[ComeBet]:
    dont = base_type == BetType.DONT_COME
    out: List[ComeBet] = []
    for cb in bets:
        if cb.come_point is not None and cb.odds is None:
            odds = _odds_amount(table, cb.amount, strategy, cb.come_point, dont=dont)
            if table.try_place(ODDS_TYPE_FOR[base_type], odds):
                cb = cb.with_odds(odds)
        out.append(cb)
    return out


def _place_number_bets(table: _Table, point_is_on: bool, point: int, cashed_out: Tuple[int, ...]) -> None:
    cfg = table.cfg
    for number, amount in cfg.number_bets():
        if not amount or amount <= 0:
            continue
        if cfg.omit_number_bet_on_point and point_is_on and point == number:
            continue
        # A bet taken down by the press limit stays down until the next come-out.
        if number in cashed_out:
            continue
        if any(nb.number == number for nb in table.number_bets):
            continue

        wager = number_bet_avoid_rounding(amount, number) if cfg.avoid_rounding else amount
        if table.try_place(BetType.NUMBER_BET, wager, number):
            table.number_bets.append(NumberBet(number, wager))


# --------------------------------------------------------------------------- #
# Phase 3: resolution
# --------------------------------------------------------------------------- #


def resolve_bets(placed_bet_state: GameState, roll: int) -> Tuple[GameState, List[ResolvedBet]]:
    table = _Table(placed_bet_state)
    cfg = table.cfg
    point_is_on = placed_bet_state.point_is_on
    point = placed_bet_state.point
    cashed_out = list(placed_bet_state.cashed_out_numbers)

    # 1) pass line
    if table.pass_line_bet is not None:
        pl = table.pass_line_bet
        if _resolve_do_bet(table, BetType.PASS_LINE, pl.amount, pl.odds, point if point_is_on else None, roll, True):
            table.pass_line_bet = None

    # 2) come bets, each against its own come point
    remaining: List[ComeBet] = []
    for cb in table.come_bets:
        working = point_is_on or cfg.come_bet_odds_working_come_out
        if not _resolve_do_bet(table, BetType.COME, cb.amount, cb.odds, cb.come_point, roll, working):
            remaining.append(cb)
    table.come_bets = remaining

    # 3) don't pass
    if table.dont_pass_bet is not None:
        dp = table.dont_pass_bet
        if _resolve_dont_bet(table, BetType.DONT_PASS, dp.amount, dp.odds, point if point_is_on else None, roll, True):
            table.dont_pass_bet = None

    # 4) don't come bets
    remaining = []
    for dc in table.dont_come_bets:
        working = point_is_on or cfg.dont_come_bet_odds_working_come_out
        if not _resolve_dont_bet(table, BetType.DONT_COME, dc.amount, dc.odds, dc.come_point, roll, working):
            remaining.append(dc)
    table.dont_come_bets = remaining

    # 5) number bets; off on the come-out unless configured to stay working
    if point_is_on or cfg.leave_number_bets_working_during_come_out:
        for number in _resolve_number_bets(table, roll):
            if number not in cashed_out:
                cashed_out.append(number)

    # 6) point
    if point_is_on:
        if roll == point or roll == 7:
            point_is_on, point = False, 0
    elif roll in BOX_NUMBERS:
        point_is_on, point = True, roll

    # 7) come points for bets that just travelled
    if roll in BOX_NUMBERS:
        table.come_bets = [cb if cb.come_point is not None else cb.with_come_point(roll) for cb in table.come_bets]
        table.dont_come_bets = [
            dc if dc.come_point is not None else dc.with_come_point(roll) for dc in table.dont_come_bets
        ]

    resulting_state = GameState(
        configuration=cfg,
        roll_num=placed_bet_state.roll_num + 1,
        bankroll=table.bankroll,
        point=point,
        point_is_on=point_is_on,
        current_bets=table.bet_collection(),
        cashed_out_numbers=tuple(cashed_out),
    )
    return resulting_state, table.resolved


def _resolve_do_bet(
    table: _Table,
    bet_type: BetType,
    amount: Number,
    odds: Optional[Number],
    point: Optional[int],
    roll: int,
    odds_working: bool,
) -> bool:
    """Pass line / come. ``point`` is None on the bet's own come-out. Returns True if the bet came down."""
    odds_type = ODDS_TYPE_FOR[bet_type]

    if point is None:
        if roll in NATURALS:
            table.settle(bet_type, amount, BetOutcome.WIN, amount, 2 * amount)
            return True
        if roll in CRAPS:
            table.settle(bet_type, amount, BetOutcome.LOSS)
            return True
        return False

    if roll == point:
        table.settle(bet_type, amount, BetOutcome.WIN, amount, 2 * amount)
        if odds:
            if odds_working:
                win = pass_odds_payout(point, odds, table.cfg.rounding)
                table.settle(odds_type, odds, BetOutcome.WIN, win, win + odds)
            else:
                table.settle(odds_type, odds, BetOutcome.PUSH, odds, odds)
        return True

    if roll == 7:
        table.settle(bet_type, amount, BetOutcome.LOSS)
        if odds:
            if odds_working:
                table.settle(odds_type, odds, BetOutcome.LOSS)
            else:
                table.settle(odds_type, odds, BetOutcome.PUSH, odds, odds)
        return True
    return False


def _resolve_dont_bet(
    table: _Table,
    bet_type: BetType,
    amount: Number,
    odds: Optional[Number],
    point: Optional[int],
    roll: int,
    odds_working: bool,
) -> bool:
    """Don't pass / don't come: the mirror of _resolve_do_bet, with 12 barred on the come-out."""
    odds_type = ODDS_TYPE_FOR[bet_type]

    if point is None:
        if roll in (2, 3):
            table.settle(bet_type, amount, BetOutcome.WIN, amount, 2 * amount)
            return True
        if roll in NATURALS:
            table.settle(bet_type, amount, BetOutcome.LOSS)
            return True
        if roll == 12:
            table.settle(bet_type, amount, BetOutcome.PUSH, amount, amount)
            return True
        return False

    if roll == 7:
        table.settle(bet_type, amount, BetOutcome.WIN, amount, 2 * amount)
        if odds:
            if odds_working:
                win = dont_pass_odds_payout(point, odds, table.cfg.rounding)
                table.settle(odds_type, odds, BetOutcome.WIN, win, win + odds)
            else:
                table.settle(odds_type, odds, BetOutcome.PUSH, odds, odds)
        return True

    if roll == point:
        table.settle(bet_type, amount, BetOutcome.LOSS)
        if odds:
            if odds_working:
                table.settle(odds_type, odds, BetOutcome.LOSS)
            else:
                table.settle(odds_type, odds, BetOutcome.PUSH, odds, odds)
        return True
    return False


def _resolve_number_bets(table: _Table, roll: int) -> List[int]:
    """Settle number bets against ``roll``; returns the numbers cashed out by the press limit."""
    cfg = table.cfg
    cashed_out: List[int] = []

    if roll == 7:
        for nb in table.number_bets:
            table.settle(BetType.NUMBER_BET, nb.wager, BetOutcome.LOSS, number=nb.number)
        table.number_bets = []
        return cashed_out

    remaining: List[NumberBet] = []
    for nb in table.number_bets:
        if nb.number != roll:
            remaining.append(nb)
            continue

        payout = number_bet_payout(nb.wager, nb.number, cfg.rounding)
        new_stake, to_bankroll = apply_press_strategy(nb.wager, payout, nb.number, cfg.press_strategy, cfg.rounding)
        wins = nb.consecutive_win_count + 1

        if cfg.press_limit is not None and wins >= cfg.press_limit:
            # Take the bet down: the whole pressed stake comes back too.
            table.settle(
                BetType.NUMBER_BET, nb.wager, BetOutcome.WIN, payout, to_bankroll + new_stake, number=nb.number
            )
            cashed_out.append(nb.number)
            log.debug("number %d cashed out after %d wins", nb.number, wins)
        else:
            table.settle(BetType.NUMBER_BET, nb.wager, BetOutcome.WIN, payout, to_bankroll, number=nb.number)
            remaining.append(NumberBet(nb.number, new_stake, wins))
    table.number_bets = remaining
    return cashed_out
