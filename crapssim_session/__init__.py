"""
crapssim-session: craps session simulation engine, strategy evaluators and
a threaded batch harness.
"""

from .bets import BetCollection, BetOutcome, BetType, ComeBet, LineBet, NumberBet, PlacedBet, ResolvedBet
from .config import (
    Configuration,
    OddsBetStrategy,
    OddsBetStrategyType,
    PressStrategy,
    PressStrategyType,
)
from .dice import DiceSource, RandomDice, SequenceDice
from .engine import RollResult, execute_single_roll
from .errors import ConfigurationError, CrapsSessionError, DiceSequenceExhausted, InvalidPointError
from .game_state import GameState, LimitReached
from .legalize import RoundingType
from .session import iter_rolls, run_session

__version__ = "1.0.0"

__all__ = [
    "BetCollection",
    "BetOutcome",
    "BetType",
    "ComeBet",
    "Configuration",
    "ConfigurationError",
    "CrapsSessionError",
    "DiceSequenceExhausted",
    "DiceSource",
    "GameState",
    "InvalidPointError",
    "LimitReached",
    "LineBet",
    "NumberBet",
    "OddsBetStrategy",
    "OddsBetStrategyType",
    "PlacedBet",
    "PressStrategy",
    "PressStrategyType",
    "RandomDice",
    "ResolvedBet",
    "RollResult",
    "RoundingType",
    "SequenceDice",
    "execute_single_roll",
    "iter_rolls",
    "run_session",
]
