# -*- coding: utf-8 -*-
########################
# pattern_models.py
########################
# Purpose:
# - Core data models for the keypad rhythm engine.
# - Defines beat events, the pattern sequence, grid cells and the tick and judgement outcomes.
#
# Design notes:
# - Keep these models stable. Prefer extending with new optional fields rather than breaking changes.
# - No Qt usage. These are plain dataclasses and enums.
# - Grid rows are numbered top to bottom: row 0 is the keypad 7-8-9 row, row 2 is the 1-2-3 row.
#
########################
# Interfaces:
# Public enums:
# - class Category(enum.Enum): LOW | MEDIUM | HIGH
#   - from_token(text: str) -> Category
# - class TickKind(enum.Enum): IDLE | ACTIVATED | COMPLETED
# - class JudgmentKind(enum.Enum): HIT | MISS | TOO_LATE
#
# Public dataclasses:
# - BeatEvent(time: float, category: Category)
# - GridCell(row: int, col: int)
#   - is_whole() -> bool
#   - is_on_grid() -> bool
# - LiveCell(cell: GridCell, activated_at_ms: float)
# - TickResult(kind: TickKind, cell: Optional[GridCell], expired: Optional[GridCell])
# - JudgmentResult(kind: JudgmentKind, score_delta: int, cell: GridCell, time_ms: float)
#
# Public aliases:
# - PatternSequence = Tuple[BeatEvent, ...]
#
# Inputs/Outputs:
# - These types are exchanged between pattern_codec, beat_scheduler, judge, game_session and the CLI.
#
########################

from __future__ import annotations

from dataclasses import dataclass
import enum
import numbers
from typing import Iterable, Optional, Tuple

GRID_SIZE = 3


class Category(enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @classmethod
    def from_token(cls, text: str) -> "Category":
        normalized = str(text or "").strip().lower()
        for category in cls:
            if category.value == normalized:
                return category
        raise ValueError(f"Unknown category token: {text!r}")


@dataclass(frozen=True)
class BeatEvent:
    time: float
    category: Category


PatternSequence = Tuple[BeatEvent, ...]


def make_sequence(events: Iterable[BeatEvent]) -> PatternSequence:
    return tuple(events)


def _is_whole_number(value: object) -> bool:
    return isinstance(value, numbers.Real) and float(value).is_integer()


@dataclass(frozen=True)
class GridCell:
    row: int
    col: int

    def is_whole(self) -> bool:
        return _is_whole_number(self.row) and _is_whole_number(self.col)

    def is_on_grid(self) -> bool:
        return 0 <= self.row < GRID_SIZE and 0 <= self.col < GRID_SIZE


@dataclass(frozen=True)
class LiveCell:
    cell: GridCell
    activated_at_ms: float


class TickKind(enum.Enum):
    IDLE = "idle"
    ACTIVATED = "activated"
    COMPLETED = "completed"


@dataclass(frozen=True)
class TickResult:
    kind: TickKind
    cell: Optional[GridCell] = None
    # Cell retired by this tick's clear step, if one was live.
    expired: Optional[GridCell] = None


class JudgmentKind(enum.Enum):
    HIT = "hit"
    MISS = "miss"
    TOO_LATE = "too_late"


@dataclass(frozen=True)
class JudgmentResult:
    kind: JudgmentKind
    score_delta: int
    cell: GridCell
    time_ms: float

    @property
    def is_hit(self) -> bool:
        return self.kind is JudgmentKind.HIT
