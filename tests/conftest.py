import random

import pytest

import config as config_module
from pattern_models import BeatEvent, Category


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    """Keep config resolution away from the developer's real files and environment."""
    for name in (
        "KEYPAD_RHYTHM_CONFIG_PATH",
        "KEYPAD_RHYTHM_TICK_INTERVAL_MS",
        "KEYPAD_RHYTHM_ACTIVATION_WINDOW_MS",
        "KEYPAD_RHYTHM_HIT_SCORE",
        "KEYPAD_RHYTHM_RANDOM_SEED",
        "KEYPAD_RHYTHM_DATA_DIR",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(config_module, "_default_config_candidates", lambda: [tmp_path / config_module.CONFIG_FILE_NAME])
    config_module.get_config.cache_clear()
    yield
    config_module.get_config.cache_clear()


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def two_beat_sequence():
    return (
        BeatEvent(time=0.0, category=Category.HIGH),
        BeatEvent(time=1.0, category=Category.MEDIUM),
    )


@pytest.fixture(scope="session")
def qt_core_app():
    QtCore = pytest.importorskip("PyQt6.QtCore")
    app = QtCore.QCoreApplication.instance()
    if app is None:
        app = QtCore.QCoreApplication([])
    return app
