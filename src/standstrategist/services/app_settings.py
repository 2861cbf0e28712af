"""Process-wide profile registry (current profile + known profile names).

The registry is small and changes rarely, so every change is persisted
immediately and synchronously (no debounce) using an atomic temp-file replace.

File format (``<data dir>/settings.json``)::

    {"currentProfile": "regional" | null, "profiles": ["regional", ...]}
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import replace
from typing import Any, Dict

from standstrategist.core import filesystem
from standstrategist.domain.models import AppSettingsState
from standstrategist.errors import (
    ConflictError,
    DecodeError,
    InvalidProfileNameError,
    SourceUnselectedError,
)
from standstrategist.profiles.profile import ObservableStore
from standstrategist.profiles.storage import ProfileStorage
from standstrategist.utils import naming

__all__ = ["AppSettings", "MAX_PROFILE_NAME_LENGTH"]

log = logging.getLogger(__name__)

MAX_PROFILE_NAME_LENGTH = 64


def _to_dict(state: AppSettingsState) -> Dict[str, Any]:
    return {"currentProfile": state.current_profile, "profiles": list(state.profiles)}


def _from_dict(data: Any) -> AppSettingsState:
    if not isinstance(data, dict):
        raise DecodeError("Global settings must be a JSON object")
    current = data.get("currentProfile")
    profiles = data.get("profiles", [])
    if current is not None and not isinstance(current, str):
        raise DecodeError("currentProfile must be a string or null")
    if not isinstance(profiles, list) or not all(isinstance(p, str) for p in profiles):
        raise DecodeError("profiles must be a list of strings")
    return AppSettingsState(current_profile=current, profiles=tuple(profiles))


class AppSettings:
    def __init__(self, storage: ProfileStorage, initial: AppSettingsState | None = None) -> None:
        self.storage = storage
        self.settings: ObservableStore[AppSettingsState] = ObservableStore(
            initial or AppSettingsState()
        )

    @property
    def state(self) -> AppSettingsState:
        return self.settings.get()

    @property
    def path(self) -> str:
        return self.storage.global_settings_path

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------
    def read_settings(self) -> AppSettingsState:
        if os.path.exists(self.path):
            try:
                raw = json.loads(filesystem.read_text(self.path))
            except ValueError as e:
                raise DecodeError(f"Global settings are not valid JSON: {e}") from e
            state = _from_dict(raw)
        else:
            state = AppSettingsState()
        self.settings.set(state)
        return state

    def update_settings(self, new_state: AppSettingsState) -> None:
        self.settings.set(new_state)
        filesystem.write_atomic(self.path, json.dumps(_to_dict(new_state)))
        log.debug("Saved global settings: %s", new_state)

    # ------------------------------------------------------------------
    # Profile management
    # ------------------------------------------------------------------
    def validate_new_name(self, raw: str) -> str:
        """Clean ``raw`` into a usable, unused profile name."""
        name = naming.clean_file_name(raw).strip()
        if not name:
            raise SourceUnselectedError("Profile name can't be empty")
        if len(name) > MAX_PROFILE_NAME_LENGTH:
            raise InvalidProfileNameError(
                f"Profile name must be under {MAX_PROFILE_NAME_LENGTH} characters.",
                context={"name": name},
            )
        if name in self.state.profiles or self.storage.exists(name):
            raise ConflictError(f"Profile '{name}' already exists", context={"name": name})
        return name

    def add_profile(self, name: str, *, make_current: bool = False) -> None:
        state = self.state
        self.update_settings(
            AppSettingsState(
                current_profile=name if make_current else state.current_profile,
                profiles=state.profiles + (name,),
            )
        )
        log.info("Registered profile %s", name)

    def create_profile(self, raw_name: str) -> str:
        """Create an empty profile folder and make it the current profile."""
        name = self.validate_new_name(raw_name)
        self.storage.create(name)
        self.add_profile(name, make_current=True)
        return name

    def rename_profile(self, old: str, raw_new: str) -> str:
        new = self.validate_new_name(raw_new)
        self.storage.rename(old, new)
        state = self.state
        self.update_settings(
            AppSettingsState(
                current_profile=new if state.current_profile == old else state.current_profile,
                profiles=tuple(new if p == old else p for p in state.profiles),
            )
        )
        return new

    def delete_profile(self, name: str) -> str:
        """Remove ``name`` after backing it up; returns the backup path."""
        state = self.state
        if state.current_profile == name:
            raise ConflictError(
                f"Profile '{name}' is currently loaded; switch profiles first",
                context={"name": name},
            )
        backup = self.storage.delete(name)
        self.update_settings(replace(state, profiles=tuple(p for p in state.profiles if p != name)))
        return backup

    def switch_profile(self, name: str | None) -> None:
        state = self.state
        if name is not None and name not in state.profiles:
            raise SourceUnselectedError(f"Unknown profile '{name}'", context={"name": name})
        self.update_settings(replace(state, current_profile=name))
