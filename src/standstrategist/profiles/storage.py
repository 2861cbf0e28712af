"""Folder-backed storage for profiles.

Layout under ``base_dir``::

    settings.json                 global registry (see services.app_settings)
    profiles/<name>/<part>.json   the four JSON parts of each profile
    trash/<epoch-ms>.zip          backups of deleted profiles

Parts are written independently, so a profile folder may be missing some of
them; readers treat a missing part as "use defaults". Writers of the same
profile are serialized through a per-profile lock so an autosave cycle and a
pipeline output never interleave their part writes.
"""

from __future__ import annotations

import logging
import os
import shutil
from contextlib import contextmanager
from threading import Lock, RLock
from typing import Dict, Iterator, Mapping

from standstrategist.config import settings
from standstrategist.core import filesystem
from standstrategist.errors import ConflictError, ProfileNotFoundError
from standstrategist.profiles.codec import PART_NAMES, export_files, import_files
from standstrategist.profiles.container import pack_zip
from standstrategist.profiles.profile import Profile
from standstrategist.utils import naming

__all__ = ["ProfileStorage", "GLOBAL_SETTINGS"]

log = logging.getLogger(__name__)

GLOBAL_SETTINGS = "settings.json"


class ProfileStorage:
    """Read/write named parts of named profiles inside one data directory."""

    def __init__(self, base_dir: str | None = None) -> None:
        self.base_dir = base_dir or settings.DATA_DIR
        self.profiles_dir = os.path.join(self.base_dir, "profiles")
        self.trash_dir = os.path.join(self.base_dir, "trash")
        self._locks_guard = Lock()
        self._locks: Dict[str, RLock] = {}

    # ------------------------------------------------------------------
    # Paths / locking
    # ------------------------------------------------------------------
    @property
    def global_settings_path(self) -> str:
        return os.path.join(self.base_dir, GLOBAL_SETTINGS)

    def profile_dir(self, name: str) -> str:
        return os.path.join(self.profiles_dir, name)

    @contextmanager
    def write_lock(self, name: str) -> Iterator[None]:
        with self._locks_guard:
            lock = self._locks.setdefault(name, RLock())
        with lock:
            yield

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def exists(self, name: str) -> bool:
        return os.path.isdir(self.profile_dir(name))

    def list_folders(self) -> list[str]:
        if not os.path.isdir(self.profiles_dir):
            return []
        return sorted(
            entry
            for entry in os.listdir(self.profiles_dir)
            if os.path.isdir(os.path.join(self.profiles_dir, entry))
        )

    def read(self, name: str) -> Dict[str, bytes]:
        """Raw bytes for every part present on disk (absent parts are omitted)."""
        folder = self.profile_dir(name)
        if not os.path.isdir(folder):
            raise ProfileNotFoundError(f"Profile '{name}' does not exist", context={"name": name})
        files = filesystem.read_folder(folder)
        return {part: data for part, data in files.items() if part in PART_NAMES}

    def load_profile(self, name: str, on_update=None) -> Profile:
        return import_files(self.read(name), on_update=on_update)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def write(self, name: str, part: str, data: bytes) -> None:
        with self.write_lock(name):
            filesystem.write_bytes(os.path.join(self.profile_dir(name), part), data)

    def write_files(self, name: str, files: Mapping[str, str]) -> None:
        with self.write_lock(name):
            for part, content in files.items():
                self.write(name, part, content.encode("utf-8"))
        log.debug("Wrote %d part(s) of profile %s", len(files), name)

    def save_profile(self, name: str, profile: Profile) -> None:
        self.write_files(name, export_files(profile))

    def create(self, name: str) -> str:
        folder = self.profile_dir(name)
        if os.path.exists(folder):
            raise ConflictError(f"Profile '{name}' already exists", context={"name": name})
        try:
            os.makedirs(folder)
        except OSError as e:
            raise ConflictError(
                f"Failed creating profile '{name}', try changing the name", context={"name": name}
            ) from e
        log.info("Created profile folder %s", folder)
        return folder

    def rename(self, old: str, new: str) -> None:
        if not self.exists(old):
            raise ProfileNotFoundError(f"Profile '{old}' does not exist", context={"name": old})
        if os.path.exists(self.profile_dir(new)):
            raise ConflictError(f"Profile '{new}' already exists", context={"name": new})
        with self.write_lock(old):
            os.replace(self.profile_dir(old), self.profile_dir(new))
        log.info("Renamed profile %s -> %s", old, new)

    def delete(self, name: str) -> str:
        """Back the profile up into the trash folder as a zip, then remove it.

        Returns the backup path.
        """
        with self.write_lock(name):
            profile = self.load_profile(name)
            backup = os.path.join(self.trash_dir, f"{naming.epoch_millis()}.zip")
            filesystem.write_bytes(backup, pack_zip(profile))
            shutil.rmtree(self.profile_dir(name))
        log.info("Deleted profile %s (backup %s)", name, backup)
        return backup
