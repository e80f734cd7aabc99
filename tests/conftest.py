"""Shared fixtures."""

import logging

import pytest

from calorie_tracker.services import CalorieStorage, CalorieTracker
from calorie_tracker.utils.config import Settings, get_settings


@pytest.fixture
def settings(tmp_path):
    return Settings(data_dir=tmp_path, default_calorie_limit=2000)


@pytest.fixture
def storage(settings):
    with CalorieStorage(settings) as storage:
        yield storage


@pytest.fixture
def tracker(storage):
    return CalorieTracker(storage)


@pytest.fixture
def cli_env(tmp_path, monkeypatch):
    """Point the CLI at a temporary data directory."""
    monkeypatch.setenv("CALORIE_TRACKER_DATA_DIR", str(tmp_path))
    get_settings.cache_clear()
    yield tmp_path
    get_settings.cache_clear()
    
    # The CLI installs a handler bound to the runner's stderr
    logger = logging.getLogger("calorie_tracker")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True


@pytest.fixture
def fail_writes(monkeypatch):
    """Return a function that makes every write to a storage fail as if the disk were full."""
    def write(data):
        raise OSError(28, "No space left on device")
    
    def apply(storage: CalorieStorage) -> None:
        monkeypatch.setattr(storage.db.storage, "write", write)
    
    return apply
