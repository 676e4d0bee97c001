from __future__ import annotations

import argparse
import json
import logging
import os
import sys
import traceback
from pathlib import Path
from typing import Any, Dict, List, Optional

from .batch_runner import run_batch
from .config import Configuration
from .config_loader import dump_configuration, load_configuration
from .dice import RandomDice
from .errors import ConfigurationError
from .game_state import GameState
from .journal import write_journal
from .logging_utils import setup_logging
from .session import iter_rolls
from .summary import format_summary, summarize_states

log = logging.getLogger("crapssim-session")


# ------------------------------- Helpers ------------------------------------ #


def _load(path: Optional[str]) -> Configuration:
    """No path means the built-in default configuration."""
    if not path:
        return Configuration.default()
    return load_configuration(path)


def _fail_validation(errors: List[str]) -> int:
    print("failed validation:", file=sys.stderr)
    for e in errors:
        print(f"- {e}", file=sys.stderr)
    return 2


def _print_roll(result) -> None:
    state = result.resulting_state
    point = f"point {state.point}" if state.point_is_on else "point off"
    print(f"#{state.roll_num:>4}  rolled {result.roll:>2}  {point:<9}  bankroll {state.bankroll}")
    for bet in result.new_bets:
        print(f"        + {bet.describe()}")
    for res in result.resolved_bets:
        print(f"        = {res.describe()}")


# ------------------------------- Commands ----------------------------------- #


def _cmd_validate(args: argparse.Namespace) -> int:
    try:
        cfg = _load(args.config)
    except ConfigurationError as e:
        return _fail_validation(e.errors)

    invalid = cfg.get_invalid_fields()
    if invalid:
        return _fail_validation(invalid)
    print(f"OK: {args.config or '<defaults>'}")
    return 0


def _cmd_run(args: argparse.Namespace) -> int:
    try:
        cfg = _load(args.config)
        state = GameState.init(cfg)
    except ConfigurationError as e:
        return _fail_validation(e.errors)

    dice = RandomDice(args.seed)
    results = []
    for result in iter_rolls(state, dice):
        results.append(result)
        if not args.json:
            _print_roll(result)

    final = results[-1].resulting_state if results else state
    if args.journal:
        rows = write_journal(results, args.journal)
        log.info("wrote %d journal rows to %s", rows, args.journal)

    if args.json:
        payload: Dict[str, Any] = {
            "rolls": [r.to_dict() for r in results],
            "final_bankroll": final.bankroll,
            "roll_count": final.roll_num,
            "limit_reached": final.limit_reached().value if final.limit_reached() else None,
        }
        print(json.dumps(payload, indent=2))
    else:
        reached = final.limit_reached()
        print(
            f"Session over after {final.roll_num} rolls: bankroll {final.bankroll}"
            + (f" ({reached.value})" if reached else "")
        )
    return 0


def _cmd_batch(args: argparse.Namespace) -> int:
    try:
        cfg = _load(args.config)
    except ConfigurationError as e:
        return _fail_validation(e.errors)
    invalid = cfg.get_invalid_fields()
    if invalid:
        return _fail_validation(invalid)

    def _progress(done: int, total: int) -> None:
        log.info("progress: %d/%d", done, total)

    result = run_batch(cfg, simulation_count=args.count, workers=args.workers, seed=args.seed, on_progress=_progress)
    summary = summarize_states(result.states, cfg.initial_bankroll)
    print(format_summary(summary))

    if args.out:
        out = Path(args.out)
        out.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            "configuration": cfg.to_dict(),
            "summary": summary,
            "cancelled": result.cancelled,
            "final_states": [
                {"bankroll": s.bankroll, "roll_num": s.roll_num, "limit_reached": _limit_value(s)}
                for s in result.states
            ],
        }
        out.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        log.info("wrote batch results to %s", out)
    return 0


def _limit_value(state: GameState) -> Optional[str]:
    reached = state.limit_reached()
    return reached.value if reached else None


def _cmd_defaults(args: argparse.Namespace) -> int:
    sys.stdout.write(dump_configuration(Configuration.default(), fmt=args.format))
    if args.format == "json":
        sys.stdout.write("\n")
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="crapssim-session",
        description="Craps session simulator - validate strategies, play sessions, run batches",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="increase verbosity (use -vv for debug)",
    )
    sub = parser.add_subparsers(dest="subcommand", required=False)

    p_val = sub.add_parser("validate", help="Validate a configuration file (JSON or YAML)")
    p_val.add_argument("config", nargs="?", help="Path to configuration; defaults when omitted")
    p_val.set_defaults(func=_cmd_validate)

    p_run = sub.add_parser("run", help="Play one session and print every roll")
    p_run.add_argument("config", nargs="?", help="Path to configuration; defaults when omitted")
    p_run.add_argument("--seed", type=int, default=None, help="Dice seed for a reproducible session")
    p_run.add_argument("--journal", default=None, help="Write a per-roll CSV journal to this path")
    p_run.add_argument("--json", action="store_true", help="Emit the full roll log as JSON")
    p_run.set_defaults(func=_cmd_run)

    p_batch = sub.add_parser("batch", help="Run many sessions in parallel and summarize")
    p_batch.add_argument("config", nargs="?", help="Path to configuration; defaults when omitted")
    p_batch.add_argument("--count", type=int, default=None, help="Sessions to run (default: simulation_count)")
    p_batch.add_argument("--workers", type=int, default=None, help="Worker threads (default: CPU count)")
    p_batch.add_argument("--seed", type=int, default=None, help="Root seed for worker dice")
    p_batch.add_argument("--out", default=None, help="Write summary and final states as JSON")
    p_batch.set_defaults(func=_cmd_batch)

    p_def = sub.add_parser("defaults", help="Print the default configuration")
    p_def.add_argument("--format", choices=("yaml", "json"), default="yaml")
    p_def.set_defaults(func=_cmd_defaults)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    parser = _build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    if not hasattr(args, "func") or args.func is None:
        parser.print_help()
        return 2

    try:
        return int(args.func(args))
    except ConfigurationError as e:
        return _fail_validation(e.errors)
    except Exception:
        if os.environ.get("CSS_DEBUG", "0").lower() in ("1", "true", "yes"):
            traceback.print_exc()
        raise


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
