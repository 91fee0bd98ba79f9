# -*- coding: utf-8 -*-
########################
# paths.py
########################
# Purpose:
# - Central filesystem path helpers for the app.
# - Defines where cached pattern files live relative to the project root.
#
# Design notes:
# - Keep path derivation consistent across modules.
# - No Qt usage. Return pathlib.Path only.
# - Nothing here creates directories. PatternStore.save does that on first write.
#
########################
# Interfaces:
# Public functions:
# - app_root_dir() -> pathlib.Path
# - data_dir(storage: Optional[StorageConfig] = None) -> pathlib.Path
#
# Inputs:
# - StorageConfig from config.py (optional).
#
# Outputs:
# - Cache directory used by pattern_store.from_config.
#
########################

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

from config import StorageConfig

DEFAULT_DATA_DIR_NAME = "data"


def _entrypoint_file_path() -> Optional[Path]:
    """Best-effort resolution of the launched Python entrypoint file."""
    main_module = sys.modules.get("__main__")
    main_file = getattr(main_module, "__file__", None)
    if main_file:
        return Path(str(main_file)).resolve()

    argv0 = str(sys.argv[0] or "").strip()
    if argv0 and argv0 not in {"-c", "-m"}:
        try:
            return Path(argv0).resolve()
        except OSError:
            return None

    return None


def app_root_dir() -> Path:
    """Return the application root directory for local pattern storage.

    The root is the directory containing the launched .py file, else the working directory.
    """
    entrypoint_path = _entrypoint_file_path()
    if entrypoint_path is not None:
        return entrypoint_path.parent

    return Path.cwd().resolve()


def data_dir(storage: Optional[StorageConfig] = None) -> Path:
    """Return the pattern cache directory (not created automatically)."""
    if storage is not None and storage.data_dir:
        configured = Path(storage.data_dir).expanduser()
        if configured.is_absolute():
            return configured
        return app_root_dir() / configured
    return app_root_dir() / DEFAULT_DATA_DIR_NAME

