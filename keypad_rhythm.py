"""
keypad_rhythm.py

Command line entrypoint for the keypad rhythm engine.

Commands
- check PATTERN       Parse a pattern file and report a summary as JSON.
- simulate PATTERN    Drive the engine headless with a manual clock and an automatic striker.
- config              Print the resolved configuration as JSON.
- --run-tests         Run the inline unit tests of every pure-logic module.

check and simulate accept --source SONG instead of PATTERN to load the cached pattern for a music
file from the configured data directory (storage.data_dir, storage.pattern_suffix).

Every command prints a single JSON payload. Failures print {"ok": false, "error": ...} and exit with 2.
"""

from __future__ import annotations

import argparse
import json
import random
from collections import Counter
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import beat_scheduler
import config as config_module
import game_clock
import judge
import pattern_codec
import pattern_models
import pattern_store

DEFAULT_MAX_TICKS = 1_000_000


@dataclass(frozen=True)
class SimulationSummary:
    beats: int
    activations: int
    ticks: int
    score: int
    hits: int
    misses: int
    too_late: int
    skipped: int
    elapsed_ms: float


def simulate_session(
    sequence: pattern_models.PatternSequence,
    engine_config: config_module.EngineConfig,
    *,
    seed: Optional[int] = None,
    strike_delay_ms: float = 0.0,
    skip_every: int = 0,
    max_ticks: int = DEFAULT_MAX_TICKS,
) -> SimulationSummary:
    """Play a pattern against an automatic striker on a manual clock.

    Each activated cell is struck strike_delay_ms after activation, unless it is every
    skip_every-th activation. A strike that lands at or after the next tick's time is
    judged after that tick has retired the cell.
    """
    if strike_delay_ms < 0.0:
        raise ValueError("strike_delay_ms must be >= 0")

    rng_seed = seed if seed is not None else engine_config.random_seed
    clock = game_clock.ManualClock()
    scheduler = beat_scheduler.BeatScheduler(random.Random(rng_seed))
    engine = judge.JudgeEngine(
        scheduler,
        activation_window_ms=engine_config.activation_window_ms,
        hit_score=engine_config.hit_score,
    )

    start_ms = clock.now_ms()
    scheduler.start(sequence, start_ms)
    tick_interval_ms = float(engine_config.tick_interval_ms)

    pending: List[Tuple[float, pattern_models.GridCell]] = []
    activations = 0
    skipped = 0
    ticks = 0

    def flush_strikes(before_ms: float) -> None:
        while pending and pending[0][0] < before_ms:
            strike_ms, cell = pending.pop(0)
            engine.judge(cell.row, cell.col, strike_ms)

    while ticks < max_ticks:
        now_ms = clock.now_ms()
        flush_strikes(now_ms)
        result = scheduler.tick(now_ms)
        ticks += 1

        if result.kind is pattern_models.TickKind.COMPLETED:
            break

        if result.kind is pattern_models.TickKind.ACTIVATED and result.cell is not None:
            activations += 1
            if skip_every > 0 and activations % skip_every == 0:
                skipped += 1
            else:
                pending.append((now_ms + float(strike_delay_ms), result.cell))

        clock.advance_ms(tick_interval_ms)

    flush_strikes(float("inf"))

    score_state = engine.score_state()
    return SimulationSummary(
        beats=len(sequence),
        activations=activations,
        ticks=ticks,
        score=score_state.score,
        hits=score_state.hit_count,
        misses=score_state.miss_count,
        too_late=score_state.too_late_count,
        skipped=skipped,
        elapsed_ms=clock.now_ms() - start_ms,
    )


def summarize_pattern(sequence: Sequence[pattern_models.BeatEvent]) -> Dict[str, Any]:
    counts = Counter(event.category.value for event in sequence)
    return {
        "beats": len(sequence),
        "last_time_seconds": max((float(event.time) for event in sequence), default=0.0),
        "categories": {category.value: int(counts.get(category.value, 0)) for category in pattern_models.Category},
        "ordering_warnings": pattern_codec.validate_ordering(sequence),
    }


def _print_json(payload: Dict[str, Any]) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2))


def _load_sequence(
    args: argparse.Namespace, storage: config_module.StorageConfig
) -> Tuple[pattern_models.PatternSequence, Path]:
    """Read PATTERN directly, or resolve --source SONG through the pattern cache.

    Cache misses and corrupt cache files surface as PatternNotFoundError and PatternLoadError.
    """
    if (args.pattern is None) == (args.source is None):
        raise ValueError("Give exactly one of PATTERN or --source SONG")
    if args.source is not None:
        store = pattern_store.from_config(storage)
        source_path = Path(args.source)
        return store.load_cached(source_path), store.cache_path_for(source_path)
    pattern_path = Path(args.pattern)
    return pattern_codec.read_pattern_file(pattern_path), pattern_path


def _command_check(args: argparse.Namespace) -> int:
    app_config, _config_path = config_module.get_config()
    sequence, pattern_path = _load_sequence(args, app_config.storage)
    payload: Dict[str, Any] = {"ok": True, "pattern_path": str(pattern_path)}
    payload.update(summarize_pattern(sequence))
    _print_json(payload)
    return 0


def _command_simulate(args: argparse.Namespace) -> int:
    app_config, _config_path = config_module.get_config()
    sequence, pattern_path = _load_sequence(args, app_config.storage)
    summary = simulate_session(
        sequence,
        app_config.engine,
        seed=args.seed,
        strike_delay_ms=float(args.strike_delay_ms),
        skip_every=int(args.skip_every),
        max_ticks=int(args.max_ticks),
    )
    payload: Dict[str, Any] = {"ok": True, "pattern_path": str(pattern_path)}
    payload.update(asdict(summary))
    _print_json(payload)
    return 0


def _command_config(_args: argparse.Namespace) -> int:
    app_config, resolved_path = config_module.get_config()
    _print_json(
        {
            "ok": True,
            "config_path": str(resolved_path) if resolved_path is not None else None,
            "config": json.loads(config_module.to_json(app_config)),
        }
    )
    return 0


def _run_all_unit_tests() -> None:
    game_clock._run_unit_tests()
    pattern_codec._run_unit_tests()
    beat_scheduler._run_unit_tests()
    judge._run_unit_tests()
    pattern_store._run_chunk_tests()


def _add_pattern_arguments(subparser: argparse.ArgumentParser) -> None:
    subparser.add_argument("pattern", nargs="?", default=None, help="Path to a '<time> <category>' pattern file.")
    subparser.add_argument(
        "--source",
        default=None,
        metavar="SONG",
        help="Music or source file whose cached pattern (<data dir>/<name><suffix>) is loaded instead.",
    )


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="keypad-rhythm")
    parser.add_argument(
        "--run-tests",
        action="store_true",
        help="Run pure logic tests (no Qt).",
    )
    subparsers = parser.add_subparsers(dest="command")

    check_parser = subparsers.add_parser("check", help="Parse a pattern file and summarize it.")
    _add_pattern_arguments(check_parser)
    check_parser.set_defaults(handler=_command_check)

    simulate_parser = subparsers.add_parser("simulate", help="Play a pattern headless with an automatic striker.")
    _add_pattern_arguments(simulate_parser)
    simulate_parser.add_argument("--seed", type=int, default=None, help="Seed for cell selection.")
    simulate_parser.add_argument("--strike-delay-ms", type=float, default=0.0, help="Delay between activation and strike.")
    simulate_parser.add_argument("--skip-every", type=int, default=0, help="Leave every Nth activation unstruck (0 = never).")
    simulate_parser.add_argument("--max-ticks", type=int, default=DEFAULT_MAX_TICKS, help="Safety cap on simulated ticks.")
    simulate_parser.set_defaults(handler=_command_simulate)

    config_parser = subparsers.add_parser("config", help="Print the resolved configuration.")
    config_parser.set_defaults(handler=_command_config)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_argument_parser()
    args = parser.parse_args(argv)

    if args.run_tests:
        _run_all_unit_tests()
        print("Unit tests passed.")
        return 0

    handler = getattr(args, "handler", None)
    if handler is None:
        parser.print_help()
        return 2

    try:
        return int(handler(args))
    except Exception as exception:
        _print_json({"ok": False, "error": str(exception)})
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
