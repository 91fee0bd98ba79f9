# -*- coding: utf-8 -*-
########################
# pattern_codec.py
########################
# Purpose:
# - Parse and write line-oriented pattern files.
# - Convert between "<time> <category>" text lines and pattern_models.PatternSequence.
#
# Design notes:
# - No Qt usage. Pure parsing and serialization.
# - Lines are consumed in file order. No reordering, no deduplication.
# - Unordered and negative times are accepted. validate_ordering reports them without rejecting.
# - Never silently accept a malformed line: raise FormatError with the 1-based line number.
#
########################
# Interfaces:
# Public exceptions:
# - class FormatError(ValueError)
#
# Public functions:
# - parse_pattern(text: str) -> PatternSequence
# - serialize_pattern(sequence: Iterable[BeatEvent]) -> str
# - validate_ordering(sequence: Sequence[BeatEvent]) -> list[int]
# - read_pattern_file(pattern_path: pathlib.Path) -> PatternSequence
# - write_pattern_file(pattern_path: pathlib.Path, sequence: Iterable[BeatEvent]) -> None
#
# Inputs:
# - Pattern text (or a path to it) for parsing.
# - PatternSequence for serialization.
#
# Outputs:
# - PatternSequence for the scheduler.
# - Pattern text, newline-terminated, one event per line.
#
########################

from __future__ import annotations

import math
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

import pattern_models


class FormatError(ValueError):
    """Raised when a pattern line cannot be parsed into a BeatEvent."""

    def __init__(self, message: str, *, line_number: Optional[int] = None, line_text: Optional[str] = None) -> None:
        self.line_number = line_number
        self.line_text = line_text
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)


def _parse_time_seconds(time_text: str, *, line_number: int, line_text: str) -> float:
    try:
        value = float(time_text)
    except ValueError as exc:
        raise FormatError(f"Invalid time value: {time_text!r}", line_number=line_number, line_text=line_text) from exc
    if not math.isfinite(value):
        raise FormatError(f"Time must be finite: {time_text!r}", line_number=line_number, line_text=line_text)
    return value


def _parse_line(line_text: str, *, line_number: int) -> pattern_models.BeatEvent:
    fields = line_text.split()
    if len(fields) != 2:
        raise FormatError(
            f"Expected 2 fields '<time> <category>', got {len(fields)}",
            line_number=line_number,
            line_text=line_text,
        )

    time_text, category_text = fields
    time_seconds = _parse_time_seconds(time_text, line_number=line_number, line_text=line_text)
    try:
        category = pattern_models.Category.from_token(category_text)
    except ValueError as exc:
        raise FormatError(str(exc), line_number=line_number, line_text=line_text) from exc

    return pattern_models.BeatEvent(time=time_seconds, category=category)


def parse_pattern(text: str) -> pattern_models.PatternSequence:
    events: List[pattern_models.BeatEvent] = []
    # Only "\n" ends a line. Other Unicode line breaks stay inside the line and fail as malformed.
    for line_index, raw_line in enumerate(str(text).split("\n")):
        if raw_line.endswith("\r"):
            raw_line = raw_line[:-1]
        if not raw_line.strip():
            continue
        events.append(_parse_line(raw_line, line_number=line_index + 1))
    return pattern_models.make_sequence(events)


def _format_time_seconds(time_seconds: float) -> str:
    # repr keeps the shortest text that round-trips to the same float.
    return repr(float(time_seconds))


def serialize_pattern(sequence: Iterable[pattern_models.BeatEvent]) -> str:
    lines = [f"{_format_time_seconds(event.time)} {event.category.value}\n" for event in sequence]
    return "".join(lines)


def validate_ordering(sequence: Sequence[pattern_models.BeatEvent]) -> List[int]:
    """Return indices of events that start before the event preceding them, or before zero.

    The scheduler never looks back before its cursor, so such events fire late
    (on the first tick that reaches them) rather than at their authored time.
    """
    offenders: List[int] = []
    previous_time: Optional[float] = None
    for index, event in enumerate(sequence):
        event_time = float(event.time)
        if event_time < 0.0 or (previous_time is not None and event_time < previous_time):
            offenders.append(index)
        previous_time = event_time
    return offenders


def read_pattern_file(pattern_path: Path) -> pattern_models.PatternSequence:
    try:
        text = Path(pattern_path).read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise FormatError(f"Pattern file is not valid UTF-8: {pattern_path}") from exc
    return parse_pattern(text)


def write_pattern_file(pattern_path: Path, sequence: Iterable[pattern_models.BeatEvent]) -> None:
    Path(pattern_path).write_text(serialize_pattern(sequence), encoding="utf-8")


def _run_unit_tests() -> None:
    Category = pattern_models.Category
    BeatEvent = pattern_models.BeatEvent

    parsed = parse_pattern("0.5 low\n\n1.25 High\n2.0 medium\n")
    assert parsed == (
        BeatEvent(time=0.5, category=Category.LOW),
        BeatEvent(time=1.25, category=Category.HIGH),
        BeatEvent(time=2.0, category=Category.MEDIUM),
    )
    assert parse_pattern(serialize_pattern(parsed)) == parsed
    assert serialize_pattern(parsed).splitlines()[1] == "1.25 high"

    for bad_text in ("abc low", "1.0 loud", "1.0", "1.0 low extra", "nan low"):
        try:
            parse_pattern(bad_text)
        except FormatError as exc:
            assert exc.line_number == 1
        else:
            raise AssertionError(f"Expected FormatError for {bad_text!r}")

    unordered = parse_pattern("2.0 low\n1.0 low\n-1.0 high\n")
    assert validate_ordering(unordered) == [1, 2]


if __name__ == "__main__":
    _run_unit_tests()
    print("pattern_codec.py: ok")
