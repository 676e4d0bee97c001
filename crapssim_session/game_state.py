"""Immutable snapshot of one session, with its termination and eligibility predicates."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from .bets import BetCollection
from .config import Configuration
from .errors import ConfigurationError
from .legalize import Number


class LimitReached(str, Enum):
    BANKROLL_MAX = "Upper Bankroll Limit"
    BANKROLL_MIN = "Lower Bankroll Limit"
    BUSTED = "Busted"
    MAX_ROLLS = "Roll Limit"


@dataclass(frozen=True)
class GameState:
    """
    One point in a session. ``point`` is 0 whenever ``point_is_on`` is False.
    ``cashed_out_numbers`` holds the numbers taken down by the press limit
    during the current point cycle.
    """

    configuration: Configuration
    roll_num: int = 0
    bankroll: Number = 0
    point: int = 0
    point_is_on: bool = False
    current_bets: BetCollection = field(default_factory=BetCollection)
    cashed_out_numbers: Tuple[int, ...] = ()

    @classmethod
    def init(cls, configuration: Configuration) -> "GameState":
        invalid = configuration.get_invalid_fields()
        if invalid or configuration.initial_bankroll is None:
            raise ConfigurationError(
                invalid or ["Initial Bankroll"],
                f"Cannot start game from invalid configuration: {', '.join(invalid or ['Initial Bankroll'])}",
            )
        return cls(configuration=configuration, bankroll=configuration.initial_bankroll)

    # ------------------------------------------------------------------ #
    # Predicates
    # ------------------------------------------------------------------ #

    def has_active_bet(self) -> bool:
        return not self.current_bets.is_empty()

    def min_bet_amount(self) -> Number:
        """Smallest strictly positive stake the engine would actually put down."""
        amounts = [a for a in self.configuration.effective_bet_amounts() if a > 0]
        if not amounts:
            raise ConfigurationError(
                ["At least one bet must be configured."],
                "Unexpected configuration: all bets are zero/null. At least one bet is required.",
            )
        return min(amounts)

    def limit_reached(self) -> Optional[LimitReached]:
        cfg = self.configuration
        floor = cfg.bankroll_minimum if cfg.bankroll_minimum is not None and cfg.bankroll_minimum > 0 else None

        if floor is not None and self.bankroll <= floor:
            return LimitReached.BANKROLL_MIN
        if cfg.bankroll_maximum is not None and self.bankroll >= cfg.bankroll_maximum:
            return LimitReached.BANKROLL_MAX
        if cfg.maximum_rolls is not None and self.roll_num >= cfg.maximum_rolls:
            return LimitReached.MAX_ROLLS

        smallest = self.min_bet_amount()
        if self.bankroll - smallest < 0:
            return LimitReached.BUSTED

        # Above the floor, but no bet fits without breaking it: walk away.
        if floor is not None:
            margin = self.bankroll - floor
            if 0 < margin < smallest:
                return LimitReached.BANKROLL_MIN
        return None

    def is_done(self) -> bool:
        # Money still on the table is always played out, even past a limit.
        if self.has_active_bet():
            return False
        return self.limit_reached() is not None

    # ------------------------------------------------------------------ #
    # Plain-data round trip (batch protocol)
    # ------------------------------------------------------------------ #

    def to_dict(self) -> Dict[str, Any]:
        return {
            "configuration": self.configuration.to_dict(),
            "roll_num": self.roll_num,
            "bankroll": self.bankroll,
            "point": self.point,
            "point_is_on": self.point_is_on,
            "current_bets": self.current_bets.to_dict(),
            "cashed_out_numbers": list(self.cashed_out_numbers),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], configuration: Optional[Configuration] = None) -> "GameState":
        cfg = configuration or Configuration.from_dict(data["configuration"])
        return cls(
            configuration=cfg,
            roll_num=int(data.get("roll_num", 0)),
            bankroll=data.get("bankroll", 0),
            point=int(data.get("point") or 0),
            point_is_on=bool(data.get("point_is_on", False)),
            current_bets=BetCollection.from_dict(data.get("current_bets")),
            cashed_out_numbers=tuple(data.get("cashed_out_numbers") or ()),
        )
