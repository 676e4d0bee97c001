"""Strategy configuration: the immutable, validated bundle a session is played from."""

from __future__ import annotations

import dataclasses
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Type, TypeVar, Union

from .errors import ConfigurationError
from .legalize import BOX_NUMBERS, Number, RoundingType, number_bet_avoid_rounding, round_amount

_TRUE_STRINGS = {"true", "1", "yes", "on"}
_FALSE_STRINGS = {"false", "0", "no", "off"}
_DEFAULT_STRINGS = {"default", "auto", "inherit"}

# Placement order for number bets
NUMBER_BET_ORDER: Tuple[int, ...] = (6, 8, 5, 9, 4, 10)


class OddsBetStrategyType(str, Enum):
    NONE = "None"
    SET_AMOUNT = "Set Amount"
    MULTIPLIER = "Multiplier"
    TABLE_MAX = "Max 3-4-5X"


class PressStrategyType(str, Enum):
    NO_PRESS = "No Press"
    PRESS_UNTIL = "Press Until Amount"
    HALF_PRESS = "Half Press"
    FULL_PRESS = "Full Press"
    POWER_PRESS = "Power Press"


@dataclass(frozen=True)
class OddsBetStrategy:
    type: OddsBetStrategyType = OddsBetStrategyType.NONE
    value: Number = 1

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type.value, "value": self.value}


@dataclass(frozen=True)
class PressStrategy:
    type: PressStrategyType = PressStrategyType.NO_PRESS
    # Target stake; only meaningful for PRESS_UNTIL
    value: Number = 0

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type.value, "value": self.value}


_E = TypeVar("_E", bound=Enum)


def parse_enum(enum_cls: Type[_E], raw: Any) -> _E:
    """Accept an enum member, its value ("Half Press") or its name ("half_press"/"half-press")."""
    if isinstance(raw, enum_cls):
        return raw
    text = str(raw).strip()
    for member in enum_cls:
        if text.lower() == str(member.value).lower():
            return member
    key = text.upper().replace("-", "_").replace(" ", "_")
    try:
        return enum_cls[key]
    except KeyError:
        raise ValueError(f"Unknown {enum_cls.__name__} '{raw}'") from None


def coerce_flag(value: Any, *, default: Optional[bool] = None) -> Tuple[Optional[bool], bool]:
    """Coerce a loosely-typed flag value into ``True``/``False``/``None``.

    ``default`` is returned when ``value`` is ``None`` or explicitly requests
    inheritance (``"default"``/``"auto"``). The boolean in the return tuple
    indicates whether the coercion succeeded.
    """

    if isinstance(value, bool):
        return value, True
    if value is None:
        return default, True
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_STRINGS:
            return True, True
        if text in _FALSE_STRINGS:
            return False, True
        if default is not None and text in _DEFAULT_STRINGS:
            return default, True
        return None, False
    if isinstance(value, (int, float)):
        if value == 1:
            return True, True
        if value == 0:
            return False, True
        return None, False
    return None, False


_MONEY_FIELDS = (
    "initial_bankroll",
    "bankroll_minimum",
    "bankroll_maximum",
    "pass_bet",
    "come_bet",
    "dont_pass_bet",
    "dont_come_bet",
    "number_bet_4",
    "number_bet_5",
    "number_bet_6",
    "number_bet_8",
    "number_bet_9",
    "number_bet_10",
)
_COUNT_FIELDS = ("maximum_rolls", "max_come_bets", "max_dont_come_bets", "simulation_count", "press_limit")
_FLAG_FIELDS = (
    "come_bet_odds_working_come_out",
    "dont_come_bet_odds_working_come_out",
    "place_number_bets_during_come_out",
    "leave_number_bets_working_during_come_out",
    "omit_number_bet_on_point",
    "avoid_rounding",
)
_ODDS_FIELDS = (
    "pass_bet_odds_strategy",
    "come_bet_odds_strategy",
    "dont_pass_bet_odds_strategy",
    "dont_come_bet_odds_strategy",
)
_BET_FIELDS = _MONEY_FIELDS[3:]


@dataclass(frozen=True)
class Configuration:
    """
    Strategy parameters for a session. Instances are never mutated; use
    ``replace(**changes)`` to derive an updated copy. Money amounts are
    rounded with ``rounding`` on construction and counts are floored.
    """

    initial_bankroll: Optional[Number] = 300
    bankroll_minimum: Optional[Number] = 50
    bankroll_maximum: Optional[Number] = 450
    maximum_rolls: Optional[int] = 400
    pass_bet: Optional[Number] = 15
    pass_bet_odds_strategy: OddsBetStrategy = field(default_factory=OddsBetStrategy)
    come_bet: Optional[Number] = None
    max_come_bets: int = 3
    come_bet_odds_strategy: OddsBetStrategy = field(default_factory=OddsBetStrategy)
    come_bet_odds_working_come_out: bool = False
    dont_pass_bet: Optional[Number] = None
    dont_pass_bet_odds_strategy: OddsBetStrategy = field(default_factory=OddsBetStrategy)
    dont_come_bet: Optional[Number] = None
    max_dont_come_bets: int = 3
    dont_come_bet_odds_strategy: OddsBetStrategy = field(default_factory=OddsBetStrategy)
    dont_come_bet_odds_working_come_out: bool = False
    number_bet_4: Optional[Number] = None
    number_bet_5: Optional[Number] = None
    number_bet_6: Optional[Number] = None
    number_bet_8: Optional[Number] = None
    number_bet_9: Optional[Number] = None
    number_bet_10: Optional[Number] = None
    place_number_bets_during_come_out: bool = False
    leave_number_bets_working_during_come_out: bool = False
    omit_number_bet_on_point: bool = True
    press_limit: Optional[int] = None
    press_strategy: PressStrategy = field(default_factory=PressStrategy)
    avoid_rounding: bool = True
    rounding: RoundingType = RoundingType.DOLLAR
    simulation_count: Optional[int] = 10_000

    def __post_init__(self) -> None:
        for name in _MONEY_FIELDS:
            value = getattr(self, name)
            if value is not None:
                object.__setattr__(self, name, round_amount(value, self.rounding))
        for name in _COUNT_FIELDS:
            value = getattr(self, name)
            if value is not None:
                object.__setattr__(self, name, math.floor(value))

    # ------------------------------------------------------------------ #
    # Construction
    # ------------------------------------------------------------------ #

    @classmethod
    def default(cls) -> "Configuration":
        return cls()

    def replace(self, **changes: Any) -> "Configuration":
        """Return a new configuration with ``changes`` applied."""
        return dataclasses.replace(self, **changes)

    # ------------------------------------------------------------------ #
    # Bet lookups
    # ------------------------------------------------------------------ #

    def number_bet(self, number: int) -> Optional[Number]:
        if number not in BOX_NUMBERS:
            raise ValueError(f"Invalid number bet: {number}")
        return getattr(self, f"number_bet_{number}")

    def number_bets(self) -> List[Tuple[int, Optional[Number]]]:
        return [(n, self.number_bet(n)) for n in NUMBER_BET_ORDER]

    def configured_bet_amounts(self) -> List[Number]:
        return [getattr(self, name) for name in _BET_FIELDS if getattr(self, name) is not None]

    def effective_bet_amounts(self) -> List[Number]:
        """Configured stakes as the engine actually places them (number bets after rounding avoidance)."""
        amounts: List[Number] = [
            amount
            for amount in (self.pass_bet, self.come_bet, self.dont_pass_bet, self.dont_come_bet)
            if amount is not None
        ]
        for number, amount in self.number_bets():
            if amount is None:
                continue
            if self.avoid_rounding and amount > 0:
                amount = number_bet_avoid_rounding(amount, number)
            amounts.append(amount)
        return amounts

    # ------------------------------------------------------------------ #
    # Validity predicates
    # ------------------------------------------------------------------ #

    def is_initial_bankroll_valid(self) -> bool:
        return self.initial_bankroll is not None and self.initial_bankroll > 0

    def is_bankroll_minimum_valid(self) -> bool:
        if self.initial_bankroll is None:
            return False
        return self.bankroll_minimum is None or 0 <= self.bankroll_minimum < self.initial_bankroll

    def is_bankroll_maximum_valid(self) -> bool:
        if self.initial_bankroll is None:
            return False
        return self.bankroll_maximum is None or self.bankroll_maximum > self.initial_bankroll

    def is_maximum_rolls_valid(self) -> bool:
        return self.maximum_rolls is None or self.maximum_rolls > 0

    def is_simulation_count_valid(self) -> bool:
        return self.simulation_count is not None and self.simulation_count > 0

    def is_press_limit_valid(self) -> bool:
        return self.press_limit is None or self.press_limit >= 1

    def is_press_strategy_valid(self) -> bool:
        if self.press_strategy.type != PressStrategyType.PRESS_UNTIL:
            return True
        return self.press_strategy.value is not None and self.press_strategy.value > 0

    def are_bet_amounts_valid(self) -> bool:
        return all(amount >= 0 for amount in self.configured_bet_amounts())

    def has_configured_bet(self) -> bool:
        return any(amount > 0 for amount in self.configured_bet_amounts())

    def get_invalid_fields(self) -> List[str]:
        fields: List[str] = []
        if not self.is_initial_bankroll_valid():
            fields.append("Initial Bankroll")
        if not self.is_bankroll_minimum_valid():
            fields.append("Bankroll Minimum")
        if not self.is_bankroll_maximum_valid():
            fields.append("Bankroll Maximum")
        if not self.is_maximum_rolls_valid():
            fields.append("Maximum Rolls")
        if not self.is_simulation_count_valid():
            fields.append("Simulation Count")
        if not self.is_press_limit_valid():
            fields.append("Press Limit (must be empty for unlimited or 1 or greater)")
        if not self.is_press_strategy_valid():
            fields.append("Press Until Amount (must be greater than 0)")
        if not self.are_bet_amounts_valid():
            fields.append("Bet amounts must not be negative.")
        if not self.has_configured_bet():
            fields.append("At least one bet must be configured.")
        return fields

    def is_valid(self) -> bool:
        return not self.get_invalid_fields()

    # ------------------------------------------------------------------ #
    # Plain-data round trip
    # ------------------------------------------------------------------ #

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        for f in dataclasses.fields(self):
            value = getattr(self, f.name)
            if isinstance(value, (OddsBetStrategy, PressStrategy)):
                value = value.to_dict()
            elif isinstance(value, Enum):
                value = value.value
            out[f.name] = value
        return out

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Configuration":
        """
        Build a configuration from plain data (the inverse of ``to_dict``).
        Missing keys take their defaults; unknown keys or malformed values
        raise ConfigurationError listing every problem found.
        """
        known = {f.name for f in dataclasses.fields(cls)}
        errors: List[str] = []
        kwargs: Dict[str, Any] = {}

        for key, raw in (data or {}).items():
            if key not in known:
                errors.append(f"Unknown configuration key '{key}'")
                continue
            try:
                kwargs[key] = _coerce_field(key, raw)
            except (TypeError, ValueError) as exc:
                errors.append(f"{key}: {exc}")

        if errors:
            raise ConfigurationError(errors)
        return cls(**kwargs)


def _coerce_number(raw: Any) -> Optional[Number]:
    if raw is None:
        return None
    if isinstance(raw, bool):
        raise TypeError("expected a number, got a boolean")
    if isinstance(raw, (int, float)):
        return raw
    text = str(raw).strip()
    if text == "":
        return None
    return float(text)


def _coerce_strategy(
    raw: Any, strategy_cls: Union[Type[OddsBetStrategy], Type[PressStrategy]]
) -> Union[OddsBetStrategy, PressStrategy]:
    type_cls = OddsBetStrategyType if strategy_cls is OddsBetStrategy else PressStrategyType
    if isinstance(raw, strategy_cls):
        return raw
    if raw is None:
        return strategy_cls()
    if isinstance(raw, dict):
        kind = parse_enum(type_cls, raw.get("type", list(type_cls)[0]))
        value = _coerce_number(raw.get("value"))
        if value is None:
            return strategy_cls(kind)  # type: ignore[arg-type]
        return strategy_cls(kind, value)  # type: ignore[arg-type]
    return strategy_cls(parse_enum(type_cls, raw))  # type: ignore[arg-type]


def _coerce_field(name: str, raw: Any) -> Any:
    if name in _MONEY_FIELDS or name in _COUNT_FIELDS:
        value = _coerce_number(raw)
        if value is None and name in ("max_come_bets", "max_dont_come_bets"):
            return 0
        return value
    if name in _FLAG_FIELDS:
        value, ok = coerce_flag(raw)
        if not ok or value is None:
            raise ValueError(f"expected a boolean, got {raw!r}")
        return value
    if name in _ODDS_FIELDS:
        return _coerce_strategy(raw, OddsBetStrategy)
    if name == "press_strategy":
        return _coerce_strategy(raw, PressStrategy)
    if name == "rounding":
        return parse_enum(RoundingType, raw)
    return raw
