"""Global configuration and constants for the profile data core."""

from __future__ import annotations

import os
from typing import Final

DATA_DIR: Final = os.environ.get(
    "STANDSTRATEGIST_DATA_DIR",
    os.path.join(os.path.expanduser("~"), "Documents", "StandStrategist"),
)

# Minimum spacing between two autosaves of the same profile
AUTOSAVE_DEBOUNCE_MS: Final = int(os.environ.get("STANDSTRATEGIST_AUTOSAVE_DEBOUNCE_MS", "2000"))

DEFAULT_USER_AGENT: Final = "StandStrategist/0.1 (+profile-sync)"
DEFAULT_TIMEOUT: Final = 15  # seconds
DEFAULT_RETRIES: Final = 3
DEFAULT_BACKOFF_FACTOR: Final = 0.6

# Remote (Grosbeak) collaborator; empty means the feature is disabled
GROSBEAK_URL: Final = os.environ.get("STANDSTRATEGIST_GROSBEAK_URL", "")
GROSBEAK_AUTH: Final = os.environ.get("STANDSTRATEGIST_GROSBEAK_AUTH", "")
GROSBEAK_PATH: Final = "stand-strategist"
