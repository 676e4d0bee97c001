"""
bets.py -- the bets a session can have working, plus the per-roll
placement/resolution records handed back to callers.

All records are frozen; a roll never edits a bet, it builds a new one.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from .legalize import Number


class BetType(str, Enum):
    PASS_LINE = "Pass Line Bet"
    PASS_LINE_ODDS = "Pass Line Odds Bet"
    DONT_PASS = "Don't Pass Bet"
    DONT_PASS_ODDS = "Don't Pass Odds Bet"
    COME = "Come Bet"
    COME_ODDS = "Come Odds Bet"
    DONT_COME = "Don't Come Bet"
    DONT_COME_ODDS = "Don't Come Odds Bet"
    NUMBER_BET = "Number Bet"


class BetOutcome(str, Enum):
    WIN = "Win"
    LOSS = "Loss"
    PUSH = "Push"


# Odds tag for each base bet kind
ODDS_TYPE_FOR: Dict[BetType, BetType] = {
    BetType.PASS_LINE: BetType.PASS_LINE_ODDS,
    BetType.DONT_PASS: BetType.DONT_PASS_ODDS,
    BetType.COME: BetType.COME_ODDS,
    BetType.DONT_COME: BetType.DONT_COME_ODDS,
}


@dataclass(frozen=True)
class LineBet:
    """Pass line or don't pass bet, with its odds once taken."""

    amount: Number
    odds: Optional[Number] = None

    def with_odds(self, odds: Number) -> "LineBet":
        return replace(self, odds=odds)

    def to_dict(self) -> Dict[str, Any]:
        return {"amount": self.amount, "odds": self.odds}


@dataclass(frozen=True)
class ComeBet:
    amount: Number
    odds: Optional[Number] = None
    come_point: Optional[int] = None

    def with_odds(self, odds: Number) -> "ComeBet":
        return replace(self, odds=odds)

    def with_come_point(self, come_point: int) -> "ComeBet":
        return replace(self, come_point=come_point)

    def to_dict(self) -> Dict[str, Any]:
        return {"amount": self.amount, "odds": self.odds, "come_point": self.come_point}


@dataclass(frozen=True)
class NumberBet:
    number: int
    wager: Number
    consecutive_win_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "number": self.number,
            "wager": self.wager,
            "consecutive_win_count": self.consecutive_win_count,
        }


@dataclass(frozen=True)
class BetCollection:
    pass_line_bet: Optional[LineBet] = None
    dont_pass_bet: Optional[LineBet] = None
    come_bets: Tuple[ComeBet, ...] = ()
    dont_come_bets: Tuple[ComeBet, ...] = ()
    number_bets: Tuple[NumberBet, ...] = ()

    def is_empty(self) -> bool:
        return not (
            self.pass_line_bet
            or self.dont_pass_bet
            or self.come_bets
            or self.dont_come_bets
            or self.number_bets
        )

    def number_bet_for(self, number: int) -> Optional[NumberBet]:
        for nb in self.number_bets:
            if nb.number == number:
                return nb
        return None

    def total_at_risk(self) -> Number:
        """Money currently on the table (stakes plus odds)."""
        total: Number = 0
        for line in (self.pass_line_bet, self.dont_pass_bet):
            if line is not None:
                total += line.amount + (line.odds or 0)
        for cb in self.come_bets + self.dont_come_bets:
            total += cb.amount + (cb.odds or 0)
        for nb in self.number_bets:
            total += nb.wager
        return total

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pass_line_bet": self.pass_line_bet.to_dict() if self.pass_line_bet else None,
            "dont_pass_bet": self.dont_pass_bet.to_dict() if self.dont_pass_bet else None,
            "come_bets": [cb.to_dict() for cb in self.come_bets],
            "dont_come_bets": [cb.to_dict() for cb in self.dont_come_bets],
            "number_bets": [nb.to_dict() for nb in self.number_bets],
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "BetCollection":
        data = data or {}

        def _line(raw: Optional[Dict[str, Any]]) -> Optional[LineBet]:
            if not raw:
                return None
            return LineBet(raw["amount"], raw.get("odds"))

        return cls(
            pass_line_bet=_line(data.get("pass_line_bet")),
            dont_pass_bet=_line(data.get("dont_pass_bet")),
            come_bets=tuple(
                ComeBet(c["amount"], c.get("odds"), c.get("come_point")) for c in data.get("come_bets", [])
            ),
            dont_come_bets=tuple(
                ComeBet(c["amount"], c.get("odds"), c.get("come_point"))
                for c in data.get("dont_come_bets", [])
            ),
            number_bets=tuple(
                NumberBet(n["number"], n["wager"], n.get("consecutive_win_count", 0))
                for n in data.get("number_bets", [])
            ),
        )


@dataclass(frozen=True)
class PlacedBet:
    """A bet put down this roll (``number`` only for number bets)."""

    type: BetType
    amount: Number
    number: Optional[int] = None

    def describe(self) -> str:
        if self.number is not None:
            return f"{self.type.value} {self.number} ${self.amount}"
        return f"{self.type.value} ${self.amount}"

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type.value, "amount": self.amount, "number": self.number}


@dataclass(frozen=True)
class ResolvedBet:
    """
    A bet whose fate was decided this roll.

    payout          winnings (returned stake on a push, 0 on a loss)
    bankroll_credit everything credited to the bankroll for this bet,
                    including returned principal; winnings pressed back
                    onto a number bet are not credited
    """

    placed_bet: PlacedBet
    outcome: BetOutcome
    payout: Number
    bankroll_credit: Number = 0

    def describe(self) -> str:
        return f"{self.placed_bet.describe()} -> {self.outcome.value} (${self.payout})"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "placed_bet": self.placed_bet.to_dict(),
            "outcome": self.outcome.value,
            "payout": self.payout,
            "bankroll_credit": self.bankroll_credit,
        }
