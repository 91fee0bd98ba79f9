# -*- coding: utf-8 -*-
########################
# beat_scheduler.py
########################
# Purpose:
# - Advance the playback cursor through a PatternSequence one tick at a time.
# - Decide which single grid cell (if any) is live, and report activation, expiry and completion.
#
# Design notes:
# - No Qt usage. Pure gameplay logic.
# - At most one live cell. Every tick first retires the live cell, judged or not.
# - A scheduler that was never started holds an empty sequence, so it ticks as Completed.
# - The cursor only moves forward, by at most one event per tick. Events before it are never reconsidered.
# - Event times are seconds. Clock readings are milliseconds. _event_due_ms is the only conversion.
# - Random cell choice within a category row uses an injected random.Random so runs are reproducible.
#
########################
# Interfaces:
# Public constants:
# - CATEGORY_ROWS: dict[Category, int]  # HIGH -> 0, MEDIUM -> 1, LOW -> 2
#
# Public functions:
# - resolve_category_cell(category: Category, rng: random.Random) -> GridCell
#
# Public classes:
# - class BeatScheduler
#   - __init__(rng: Optional[random.Random] = None)
#   - start(sequence: PatternSequence, now_ms: float) -> None
#   - tick(now_ms: float) -> TickResult
#   - live_cell() -> Optional[LiveCell]
#   - retire_live(cell: GridCell) -> bool
#   - next_index() -> int
#   - pending_count() -> int
#   - is_started() -> bool
#   - is_completed() -> bool
#   - sequence() -> PatternSequence
#   - start_ms() -> float
#
# Inputs:
# - PatternSequence from pattern_codec.
# - Clock readings in milliseconds from the periodic driver.
#
# Outputs:
# - TickResult per tick. The live slot is read by JudgeEngine.
#
########################

from __future__ import annotations

import random
from typing import Dict, Optional

import pattern_models
from pattern_models import Category, GridCell, LiveCell, TickKind, TickResult

CATEGORY_ROWS: Dict[Category, int] = {
    Category.HIGH: 0,
    Category.MEDIUM: 1,
    Category.LOW: 2,
}


def resolve_category_cell(category: Category, rng: random.Random) -> GridCell:
    row = CATEGORY_ROWS[category]
    col = rng.randrange(pattern_models.GRID_SIZE)
    return GridCell(row=row, col=col)


def _event_due_ms(event: pattern_models.BeatEvent) -> float:
    return float(event.time) * 1000.0


class BeatScheduler:
    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._rng = rng if rng is not None else random.Random()
        self._sequence: pattern_models.PatternSequence = ()
        self._next_index = 0
        self._live: Optional[LiveCell] = None
        self._start_ms = 0.0
        self._is_started = False

    def start(self, sequence: pattern_models.PatternSequence, now_ms: float) -> None:
        self._sequence = tuple(sequence)
        self._next_index = 0
        self._live = None
        self._start_ms = float(now_ms)
        self._is_started = True

    def tick(self, now_ms: float) -> TickResult:
        expired: Optional[GridCell] = None
        if self._live is not None:
            expired = self._live.cell
            self._live = None

        if self._next_index >= len(self._sequence):
            return TickResult(kind=TickKind.COMPLETED, expired=expired)

        elapsed = float(now_ms) - self._start_ms
        event = self._sequence[self._next_index]
        if elapsed < _event_due_ms(event):
            return TickResult(kind=TickKind.IDLE, expired=expired)

        cell = resolve_category_cell(event.category, self._rng)
        self._next_index += 1
        self._live = LiveCell(cell=cell, activated_at_ms=float(now_ms))
        return TickResult(kind=TickKind.ACTIVATED, cell=cell, expired=expired)

    def live_cell(self) -> Optional[LiveCell]:
        return self._live

    def retire_live(self, cell: GridCell) -> bool:
        if self._live is None or self._live.cell != cell:
            return False
        self._live = None
        return True

    def next_index(self) -> int:
        return int(self._next_index)

    def pending_count(self) -> int:
        return max(0, len(self._sequence) - self._next_index)

    def is_started(self) -> bool:
        return bool(self._is_started)

    def is_completed(self) -> bool:
        return self._next_index >= len(self._sequence)

    def sequence(self) -> pattern_models.PatternSequence:
        return self._sequence

    def start_ms(self) -> float:
        return float(self._start_ms)


def _run_unit_tests() -> None:
    sequence = (
        pattern_models.BeatEvent(time=0.0, category=Category.HIGH),
        pattern_models.BeatEvent(time=1.0, category=Category.MEDIUM),
    )
    scheduler = BeatScheduler(random.Random(7))
    scheduler.start(sequence, now_ms=5000.0)

    first = scheduler.tick(5000.0)
    assert first.kind is TickKind.ACTIVATED
    assert first.cell is not None and first.cell.row == 0
    assert scheduler.next_index() == 1

    gap = scheduler.tick(5500.0)
    assert gap.kind is TickKind.IDLE
    assert gap.expired == first.cell
    assert scheduler.live_cell() is None

    second = scheduler.tick(6000.0)
    assert second.kind is TickKind.ACTIVATED
    assert second.cell is not None and second.cell.row == 1

    done = scheduler.tick(6100.0)
    assert done.kind is TickKind.COMPLETED
    assert done.expired == second.cell
    assert scheduler.tick(9999.0).kind is TickKind.COMPLETED

    empty = BeatScheduler(random.Random(1))
    empty.start((), now_ms=0.0)
    assert empty.tick(0.0).kind is TickKind.COMPLETED


if __name__ == "__main__":
    _run_unit_tests()
    print("beat_scheduler.py: ok")
