# Shared fixtures: an isolated data directory per test and a headless Qt platform
# for the optional operation-runner tests.

import os

import pytest

from standstrategist.profiles.storage import ProfileStorage
from standstrategist.services.app_settings import AppSettings


@pytest.fixture(autouse=True, scope="session")
def _set_offscreen():  # ensure headless platform for Qt
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    return True


@pytest.fixture
def storage(tmp_path):
    return ProfileStorage(str(tmp_path / "data"))


@pytest.fixture
def app_settings(storage):
    settings = AppSettings(storage)
    settings.read_settings()
    return settings
