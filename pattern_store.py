# -*- coding: utf-8 -*-
########################
# pattern_store.py
########################
# Purpose:
# - Cached pattern resolution for a music or source file.
# - Reuses '<cache dir>/<source name><suffix>' when present, otherwise builds, saves and returns a fresh pattern.
#
########################
# Key Logic:
# - Cache lookup is by source file name only, never by content.
# - Strict contract:
#   - Never generate patterns here. Building is delegated to the injected builder callable.
#   - Missing pattern is a first class outcome (PatternNotFoundError).
#   - A cache file that exists but cannot be read or parsed raises PatternLoadError.
#
########################
# Interfaces:
# Public exceptions:
# - class PatternNotFoundError(Exception)
# - class PatternLoadError(Exception)
#
# Public classes:
# - class PatternStore
#   - __init__(cache_dir: pathlib.Path, *, suffix: str = ".pattern")
#   - cache_path_for(source_path: pathlib.Path) -> pathlib.Path
#   - has_cached(source_path: pathlib.Path) -> bool
#   - load_cached(source_path: pathlib.Path) -> PatternSequence
#   - save(source_path: pathlib.Path, sequence: PatternSequence) -> pathlib.Path
#   - load_or_build(source_path: pathlib.Path, builder: Callable[[Path], PatternSequence]) -> PatternSequence
#
# Public functions:
# - from_config(storage: StorageConfig) -> PatternStore
#
########################
# Smoke Tests:
#   - python pattern_store.py
########################

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Callable

import paths
import pattern_codec
import pattern_models
from config import StorageConfig

PatternBuilder = Callable[[Path], pattern_models.PatternSequence]


class PatternNotFoundError(Exception):
    """Raised when no cached pattern exists for the requested source file."""


class PatternLoadError(Exception):
    """Raised when a cached pattern exists but fails reading or parsing."""


class PatternStore:
    def __init__(self, cache_dir: Path, *, suffix: str = ".pattern") -> None:
        self._cache_dir = Path(cache_dir)
        self._suffix = str(suffix)

    def cache_dir(self) -> Path:
        return self._cache_dir

    def cache_path_for(self, source_path: Path) -> Path:
        name = Path(source_path).name
        if not name:
            raise ValueError("source_path must name a file")
        return self._cache_dir / (name + self._suffix)

    def has_cached(self, source_path: Path) -> bool:
        return self.cache_path_for(source_path).is_file()

    def load_cached(self, source_path: Path) -> pattern_models.PatternSequence:
        pattern_path = self.cache_path_for(source_path)
        if not pattern_path.is_file():
            raise PatternNotFoundError(f"No cached pattern for {Path(source_path).name}: {pattern_path}")
        try:
            return pattern_codec.read_pattern_file(pattern_path)
        except pattern_codec.FormatError as exc:
            raise PatternLoadError(f"Cached pattern is malformed: {pattern_path}. {exc}") from exc
        except OSError as exc:
            raise PatternLoadError(f"Failed to read cached pattern: {pattern_path}. {exc}") from exc

    def save(self, source_path: Path, sequence: pattern_models.PatternSequence) -> Path:
        pattern_path = self.cache_path_for(source_path)
        pattern_path.parent.mkdir(parents=True, exist_ok=True)
        pattern_codec.write_pattern_file(pattern_path, sequence)
        return pattern_path

    def load_or_build(self, source_path: Path, builder: PatternBuilder) -> pattern_models.PatternSequence:
        if self.has_cached(source_path):
            return self.load_cached(source_path)
        sequence = tuple(builder(Path(source_path)))
        self.save(source_path, sequence)
        return sequence


def from_config(storage: StorageConfig) -> PatternStore:
    return PatternStore(paths.data_dir(storage), suffix=storage.pattern_suffix)


def _assert(condition: bool, message: str) -> None:
    if not condition:
        raise AssertionError(message)


def _run_chunk_tests() -> None:
    with tempfile.TemporaryDirectory() as temp_dir_text:
        temp_dir = Path(temp_dir_text)
        store = PatternStore(temp_dir / "data")
        source = temp_dir / "song.wav"

        _assert(store.cache_path_for(source).name == "song.wav.pattern", "Expected '<name>.pattern' cache file")
        _assert(not store.has_cached(source), "Expected empty cache")

        try:
            store.load_cached(source)
        except PatternNotFoundError:
            pass
        else:
            raise AssertionError("Expected PatternNotFoundError for missing cache")

        built_calls = []

        def builder(path: Path) -> pattern_models.PatternSequence:
            built_calls.append(path)
            return (pattern_models.BeatEvent(time=0.25, category=pattern_models.Category.MEDIUM),)

        first = store.load_or_build(source, builder)
        second = store.load_or_build(source, builder)
        _assert(first == second, "Expected cached pattern to match built pattern")
        _assert(len(built_calls) == 1, "Expected builder to run once")

        store.cache_path_for(source).write_text("oops\n", encoding="utf-8")
        try:
            store.load_cached(source)
        except PatternLoadError:
            pass
        else:
            raise AssertionError("Expected PatternLoadError for corrupt cache")


def main() -> int:
    """Chunk test entrypoint."""
    try:
        _run_chunk_tests()
    except Exception as exc:
        print("Pattern cache chunk tests: FAIL")
        print(str(exc))
        return 2

    print("Pattern cache chunk tests: PASS")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
