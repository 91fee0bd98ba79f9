"""
config.py

Typed configuration loading and validation for the keypad rhythm engine.

Design goals
- Load at most one UTF-8 JSON config file
- Validate with pydantic (defaults included)
- Support environment variable overrides
- No other I/O beyond reading the config file (no directory creation)

Config file location
- If KEYPAD_RHYTHM_CONFIG_PATH is set, that file is used.
- Otherwise these paths are searched in order and the first one that exists is used:
  1) ./keypad_rhythm_config.json (current working directory)
  2) <user config dir>/KeypadRhythm/keypad_rhythm_config.json
- If none exists, the defaults below apply.

Example config file (keypad_rhythm_config.json)
{
  "engine": {
    "tick_interval_ms": 100,
    "activation_window_ms": 500,
    "hit_score": 10,
    "random_seed": null
  },
  "storage": {
    "data_dir": "data",
    "pattern_suffix": ".pattern"
  }
}
"""

from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from platformdirs import user_config_dir
from pydantic import BaseModel, Field, ValidationError, field_validator

CONFIG_FILE_NAME = "keypad_rhythm_config.json"


class EngineConfig(BaseModel):
    tick_interval_ms: int = Field(default=100, ge=1, description="Scheduler tick cadence. Drives activation latency.")
    activation_window_ms: int = Field(default=500, ge=0, description="Hit tolerance after activation. Drives judging leniency.")
    hit_score: int = Field(default=10, ge=0, description="Points awarded per Hit.")
    random_seed: Optional[int] = Field(default=None, description="Seed for cell selection. None means nondeterministic.")


class StorageConfig(BaseModel):
    data_dir: Optional[str] = Field(default=None, description="Pattern cache directory. Default: <app root>/data")
    pattern_suffix: str = Field(default=".pattern", description="Suffix appended to the source file name.")

    @field_validator("data_dir")
    @classmethod
    def normalize_data_dir(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        trimmed = value.strip()
        return trimmed or None

    @field_validator("pattern_suffix")
    @classmethod
    def validate_pattern_suffix(cls, value: str) -> str:
        trimmed = (value or "").strip()
        if not trimmed.startswith(".") or len(trimmed) < 2:
            raise ValueError("pattern_suffix must start with '.' and name an extension, e.g. .pattern")
        return trimmed


class AppConfig(BaseModel):
    engine: EngineConfig = Field(default_factory=EngineConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)


def _default_config_candidates() -> List[Path]:
    config_directory = Path(user_config_dir("KeypadRhythm", False))
    return [
        Path.cwd() / CONFIG_FILE_NAME,
        config_directory / CONFIG_FILE_NAME,
    ]


def _resolve_config_path() -> Optional[Path]:
    explicit_path_text = os.environ.get("KEYPAD_RHYTHM_CONFIG_PATH", "").strip()
    if explicit_path_text:
        return Path(explicit_path_text)

    for candidate_path in _default_config_candidates():
        if candidate_path.exists():
            return candidate_path

    return None


def _read_json_file_utf8(config_path: Path) -> Dict[str, Any]:
    try:
        raw_text = config_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise
    except OSError as exception:
        raise OSError(f"Failed to read config file: {config_path}. Error: {exception}") from exception

    try:
        parsed = json.loads(raw_text)
    except json.JSONDecodeError as exception:
        raise ValueError(f"Config file is not valid JSON: {config_path}. Error: {exception}") from exception

    if not isinstance(parsed, dict):
        raise ValueError(f"Config file root must be a JSON object: {config_path}")

    return parsed


def _apply_environment_overrides(config_dict: Dict[str, Any]) -> Dict[str, Any]:
    """
    Environment overrides are optional. The config file is the primary source of truth.

    Override variables:
    - KEYPAD_RHYTHM_TICK_INTERVAL_MS
    - KEYPAD_RHYTHM_ACTIVATION_WINDOW_MS
    - KEYPAD_RHYTHM_HIT_SCORE
    - KEYPAD_RHYTHM_RANDOM_SEED
    - KEYPAD_RHYTHM_DATA_DIR
    """
    def ensure_nested(config_root: Dict[str, Any], section_name: str) -> Dict[str, Any]:
        section = config_root.get(section_name)
        if isinstance(section, dict):
            section = dict(section)
        else:
            section = {}
        config_root[section_name] = section
        return section

    updated_config = dict(config_dict)

    engine_section = ensure_nested(updated_config, "engine")
    storage_section = ensure_nested(updated_config, "storage")

    def override_string(env_name: str, target_dict: Dict[str, Any], key_name: str) -> None:
        value_text = os.environ.get(env_name, "")
        if value_text.strip():
            target_dict[key_name] = value_text.strip()

    def override_int(env_name: str, target_dict: Dict[str, Any], key_name: str) -> None:
        value_text = os.environ.get(env_name, "").strip()
        if not value_text:
            return
        try:
            target_dict[key_name] = int(value_text)
        except ValueError:
            return

    override_int("KEYPAD_RHYTHM_TICK_INTERVAL_MS", engine_section, "tick_interval_ms")
    override_int("KEYPAD_RHYTHM_ACTIVATION_WINDOW_MS", engine_section, "activation_window_ms")
    override_int("KEYPAD_RHYTHM_HIT_SCORE", engine_section, "hit_score")
    override_int("KEYPAD_RHYTHM_RANDOM_SEED", engine_section, "random_seed")

    override_string("KEYPAD_RHYTHM_DATA_DIR", storage_section, "data_dir")

    return updated_config


def load_config(config_path: Optional[Path] = None) -> Tuple[AppConfig, Optional[Path]]:
    resolved_path = config_path if config_path is not None else _resolve_config_path()
    json_dict: Dict[str, Any] = {}
    if resolved_path is not None:
        json_dict = _read_json_file_utf8(resolved_path)
    json_dict = _apply_environment_overrides(json_dict)

    try:
        config = AppConfig.model_validate(json_dict)
    except ValidationError as exception:
        source_text = str(resolved_path) if resolved_path is not None else "(defaults and environment)"
        raise ValueError(f"Config validation failed for {source_text}:\n{exception}") from exception

    return config, resolved_path


@lru_cache(maxsize=1)
def get_config() -> Tuple[AppConfig, Optional[Path]]:
    return load_config()


def to_json(config: AppConfig) -> str:
    return json.dumps(config.model_dump(), ensure_ascii=False, indent=2)
