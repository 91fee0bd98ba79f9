# -*- coding: utf-8 -*-
########################
# game_session.py
########################
# Purpose:
# - Periodic driver for one play session.
# - Integrates ClockSource + BeatScheduler + JudgeEngine behind a QTimer and Qt signals.
#
# Design notes:
# - The timer callback and strike() both run on the Qt thread. That serializes every call into the
#   scheduler and judge pair, so no lock is needed as long as callers stay on that thread.
# - Input plumbing (key mapping) and rendering live in the host UI. The host connects to the signals below
#   and calls strike(row, col).
# - The timer stops itself when the pattern completes. start() is the only way to re-arm it.
#
########################
# Interfaces:
# Public classes:
# - class GameSession(PyQt6.QtCore.QObject)
#   - Signals:
#     - cellActivated(int, int)
#     - cellExpired(int, int)
#     - patternCompleted()
#     - judged(JudgmentResult)
#     - scoreChanged(int)
#     - statusChanged(str)
#   - Methods:
#     - start(sequence: PatternSequence) -> None
#     - stop() -> None
#     - is_running() -> bool
#     - tick_once() -> TickResult
#     - strike(row: int, col: int) -> JudgmentResult
#     - score() -> int
#     - scheduler() -> BeatScheduler
#     - judge_engine() -> JudgeEngine
#
# Inputs:
# - PatternSequence from pattern_codec or pattern_store.
# - Strikes from the host UI.
#
# Outputs:
# - Qt signals for UI subscribers.
#
########################

from __future__ import annotations

import random
from typing import Optional

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

import beat_scheduler
import game_clock
import judge
import pattern_models
from config import EngineConfig

_STATUS_BY_KIND = {
    pattern_models.JudgmentKind.HIT: "Hit!",
    pattern_models.JudgmentKind.MISS: "Miss!",
    pattern_models.JudgmentKind.TOO_LATE: "Too late!",
}


class GameSession(QObject):
    cellActivated = pyqtSignal(int, int)
    cellExpired = pyqtSignal(int, int)
    patternCompleted = pyqtSignal()
    judged = pyqtSignal(object)
    scoreChanged = pyqtSignal(int)
    statusChanged = pyqtSignal(str)

    def __init__(
        self,
        engine_config: Optional[EngineConfig] = None,
        *,
        clock: Optional[game_clock.ClockSource] = None,
        rng: Optional[random.Random] = None,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._config = engine_config if engine_config is not None else EngineConfig()
        self._clock: game_clock.ClockSource = clock if clock is not None else game_clock.MonotonicClock()

        if rng is None:
            rng = random.Random(self._config.random_seed)
        self._scheduler = beat_scheduler.BeatScheduler(rng)
        self._judge_engine = judge.JudgeEngine(
            self._scheduler,
            activation_window_ms=self._config.activation_window_ms,
            hit_score=self._config.hit_score,
        )

        self._timer = QTimer(self)
        self._timer.setInterval(int(self._config.tick_interval_ms))
        self._timer.timeout.connect(self._on_timer_timeout)

    def scheduler(self) -> beat_scheduler.BeatScheduler:
        return self._scheduler

    def judge_engine(self) -> judge.JudgeEngine:
        return self._judge_engine

    def score(self) -> int:
        return int(self._judge_engine.score_state().score)

    def is_running(self) -> bool:
        return bool(self._timer.isActive())

    def start(self, sequence: pattern_models.PatternSequence) -> None:
        self._timer.stop()
        self._judge_engine.reset()
        self._scheduler.start(sequence, self._clock.now_ms())
        self.scoreChanged.emit(0)
        self.statusChanged.emit(f"Pattern loaded ({len(self._scheduler.sequence())} beats)")
        self._timer.start()

    def stop(self) -> None:
        self._timer.stop()

    def tick_once(self) -> pattern_models.TickResult:
        result = self._scheduler.tick(self._clock.now_ms())

        if result.expired is not None:
            self.cellExpired.emit(result.expired.row, result.expired.col)

        if result.kind is pattern_models.TickKind.ACTIVATED and result.cell is not None:
            self.cellActivated.emit(result.cell.row, result.cell.col)
        elif result.kind is pattern_models.TickKind.COMPLETED:
            self._timer.stop()
            self.patternCompleted.emit()
            self.statusChanged.emit("Pattern Completed!")

        return result

    def strike(self, row: int, col: int) -> pattern_models.JudgmentResult:
        result = self._judge_engine.judge(row, col, self._clock.now_ms())
        if result.is_hit:
            self.cellExpired.emit(result.cell.row, result.cell.col)
            self.scoreChanged.emit(self.score())
        self.judged.emit(result)
        self.statusChanged.emit(_STATUS_BY_KIND[result.kind])
        return result

    def _on_timer_timeout(self) -> None:
        if not self._scheduler.is_started():
            return
        self.tick_once()
