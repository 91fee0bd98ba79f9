# -*- coding: utf-8 -*-
########################
# judge.py
########################
# Purpose:
# - Hit judgement and scoring engine.
# - Judges a strike on a grid cell against the scheduler's live cell and its activation time.
#
# Design notes:
# - No Qt usage. Pure gameplay logic.
# - Reads the live slot from BeatScheduler. Only touches it to retire a cell on Hit.
# - A Hit retires the cell immediately so the same activation cannot score twice.
#   A TooLate leaves the cell live until the scheduler's next tick.
# - Off-grid and non-matching strikes are Miss, never an exception.
#
########################
# Interfaces:
# Public constants:
# - DEFAULT_ACTIVATION_WINDOW_MS = 500
# - DEFAULT_HIT_SCORE = 10
#
# Public dataclasses:
# - ScoreState(score: int, hit_count: int, miss_count: int, too_late_count: int)
#   - apply(result: JudgmentResult) -> None
#
# Public classes:
# - class JudgeEngine
#   - __init__(scheduler: BeatScheduler, *, activation_window_ms: float = 500, hit_score: int = 10)
#   - judge(row: int, col: int, now_ms: float) -> JudgmentResult
#   - score_state() -> ScoreState
#   - activation_window_ms() -> float
#   - recent_judgements() -> list[JudgmentResult]
#   - clear_recent_judgements() -> None
#   - reset() -> None
#
# Inputs:
# - Strike coordinates and the strike's clock reading in milliseconds.
#
# Outputs:
# - JudgmentResult per strike. Score accumulates only on Hit.
#
########################

from __future__ import annotations

from dataclasses import dataclass
import random
from typing import List

import beat_scheduler
import pattern_models
from pattern_models import GridCell, JudgmentKind, JudgmentResult

DEFAULT_ACTIVATION_WINDOW_MS = 500
DEFAULT_HIT_SCORE = 10


@dataclass
class ScoreState:
    score: int = 0
    hit_count: int = 0
    miss_count: int = 0
    too_late_count: int = 0

    def apply(self, result: JudgmentResult) -> None:
        if result.kind is JudgmentKind.HIT:
            self.score += int(result.score_delta)
            self.hit_count += 1
        elif result.kind is JudgmentKind.TOO_LATE:
            self.too_late_count += 1
        else:
            self.miss_count += 1


class JudgeEngine:
    def __init__(
        self,
        scheduler: beat_scheduler.BeatScheduler,
        *,
        activation_window_ms: float = DEFAULT_ACTIVATION_WINDOW_MS,
        hit_score: int = DEFAULT_HIT_SCORE,
    ) -> None:
        if float(activation_window_ms) < 0.0:
            raise ValueError("activation_window_ms must be >= 0")
        self._scheduler = scheduler
        self._activation_window_ms = float(activation_window_ms)
        self._hit_score = int(hit_score)
        self._score_state = ScoreState()
        self._recent_judgements: List[JudgmentResult] = []

    def score_state(self) -> ScoreState:
        return self._score_state

    def activation_window_ms(self) -> float:
        return float(self._activation_window_ms)

    def recent_judgements(self) -> List[JudgmentResult]:
        return list(self._recent_judgements)

    def clear_recent_judgements(self) -> None:
        self._recent_judgements.clear()

    def reset(self) -> None:
        self._score_state = ScoreState()
        self._recent_judgements.clear()

    def _classify(self, cell: GridCell, now_ms: float) -> JudgmentResult:
        live = self._scheduler.live_cell()
        if live is None or not cell.is_whole() or not cell.is_on_grid() or live.cell != cell:
            return JudgmentResult(kind=JudgmentKind.MISS, score_delta=0, cell=cell, time_ms=now_ms)

        delta_ms = now_ms - float(live.activated_at_ms)
        if delta_ms <= self._activation_window_ms:
            self._scheduler.retire_live(live.cell)
            return JudgmentResult(kind=JudgmentKind.HIT, score_delta=self._hit_score, cell=live.cell, time_ms=now_ms)

        return JudgmentResult(kind=JudgmentKind.TOO_LATE, score_delta=0, cell=live.cell, time_ms=now_ms)

    def judge(self, row: int, col: int, now_ms: float) -> JudgmentResult:
        # Coordinates are compared as given. A fractional strike never matches a grid cell.
        cell = GridCell(row=row, col=col)
        result = self._classify(cell, float(now_ms))
        self._score_state.apply(result)
        self._recent_judgements.append(result)
        return result


def _run_unit_tests() -> None:
    sequence = (pattern_models.BeatEvent(time=0.0, category=pattern_models.Category.LOW),)
    scheduler = beat_scheduler.BeatScheduler(random.Random(3))
    engine = JudgeEngine(scheduler)

    scheduler.start(sequence, now_ms=100.0)
    activated = scheduler.tick(100.0)
    assert activated.cell is not None and activated.cell.row == 2
    row, col = activated.cell.row, activated.cell.col

    hit = engine.judge(row, col, 100.0)
    assert hit.kind is JudgmentKind.HIT
    assert hit.score_delta == 10
    assert engine.score_state().score == 10

    again = engine.judge(row, col, 100.0)
    assert again.kind is JudgmentKind.MISS
    assert engine.score_state().score == 10

    scheduler.start(sequence, now_ms=0.0)
    late_cell = scheduler.tick(0.0).cell
    assert late_cell is not None
    late = engine.judge(late_cell.row, late_cell.col, 600.0)
    assert late.kind is JudgmentKind.TOO_LATE
    assert scheduler.live_cell() is not None

    assert engine.judge(5, -1, 0.0).kind is JudgmentKind.MISS

    scheduler.start(sequence, now_ms=0.0)
    fractional_cell = scheduler.tick(0.0).cell
    assert fractional_cell is not None
    fractional = engine.judge(fractional_cell.row + 0.9, fractional_cell.col + 0.5, 0.0)
    assert fractional.kind is JudgmentKind.MISS
    assert scheduler.live_cell() is not None


if __name__ == "__main__":
    _run_unit_tests()
    print("judge.py: ok")
