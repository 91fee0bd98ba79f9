# -*- coding: utf-8 -*-
########################
# game_clock.py
########################
# Purpose:
# - Clock sources for the gameplay engine.
# - Supplies millisecond readings that the scheduler and judge compare against a playback start instant.
#
# Design notes:
# - No Qt usage. Keep this module pure and deterministic.
# - Readings are milliseconds as float. Only differences between readings are meaningful.
# - MonotonicClock never goes backwards. ManualClock is driven explicitly by tests and the headless simulator.
#
########################
# Interfaces:
# Public protocols:
# - class ClockSource(Protocol)
#   - now_ms() -> float
#
# Public classes:
# - class MonotonicClock
#   - now_ms() -> float
# - class ManualClock
#   - now_ms() -> float
#   - set_ms(value_ms: float) -> None
#   - advance_ms(delta_ms: float) -> float
#
# Public functions:
# - elapsed_ms(clock: ClockSource, start_ms: float) -> float
#
########################

from __future__ import annotations

import time
from typing import Protocol, runtime_checkable


@runtime_checkable
class ClockSource(Protocol):
    def now_ms(self) -> float:
        ...


class MonotonicClock:
    def now_ms(self) -> float:
        return float(time.monotonic() * 1000.0)


class ManualClock:
    def __init__(self, start_ms: float = 0.0) -> None:
        self._now_ms = float(start_ms)

    def now_ms(self) -> float:
        return float(self._now_ms)

    def set_ms(self, value_ms: float) -> None:
        self._now_ms = float(value_ms)

    def advance_ms(self, delta_ms: float) -> float:
        value = float(delta_ms)
        if value < 0.0:
            raise ValueError("ManualClock cannot move backwards")
        self._now_ms += value
        return float(self._now_ms)


def elapsed_ms(clock: ClockSource, start_ms: float) -> float:
    return float(clock.now_ms()) - float(start_ms)


def _run_unit_tests() -> None:
    manual = ManualClock(start_ms=1000.0)
    assert manual.now_ms() == 1000.0
    assert manual.advance_ms(250.0) == 1250.0
    assert elapsed_ms(manual, 1000.0) == 250.0
    try:
        manual.advance_ms(-1.0)
    except ValueError:
        pass
    else:
        raise AssertionError("Expected ValueError for negative advance")

    monotonic = MonotonicClock()
    first = monotonic.now_ms()
    second = monotonic.now_ms()
    assert second >= first
    assert isinstance(monotonic, ClockSource)
    assert isinstance(manual, ClockSource)


if __name__ == "__main__":
    _run_unit_tests()
    print("game_clock.py: ok")
