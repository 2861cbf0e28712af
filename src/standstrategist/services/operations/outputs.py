"""Output steps: where the merged profile of an operation is written."""

from __future__ import annotations

import logging
import os
import shutil
from typing import Optional

from standstrategist.core import filesystem
from standstrategist.errors import ConflictError, ProfileNotFoundError, SourceUnselectedError
from standstrategist.profiles.codec import export_files
from standstrategist.profiles.container import pack_zip
from standstrategist.profiles.profile import Profile
from standstrategist.profiles.remote import RemoteClient
from standstrategist.profiles.spreadsheet import export_spreadsheet
from standstrategist.profiles.storage import ProfileStorage
from standstrategist.utils import naming

from ..app_settings import AppSettings
from .steps import ProfileOperationOutput

__all__ = [
    "OutputToProfile",
    "OutputToNewProfile",
    "OutputToFolder",
    "OutputToZip",
    "OutputToSpreadsheet",
    "OutputToRemote",
]

log = logging.getLogger(__name__)


class OutputToProfile(ProfileOperationOutput):
    """Overwrite an existing profile. The currently loaded profile is refused."""

    title = "Overwrite existing profile"

    def __init__(
        self, storage: ProfileStorage, app_settings: AppSettings, name: str | None = None
    ) -> None:
        super().__init__()
        self.storage = storage
        self.app_settings = app_settings
        self.name = name

    def validate(self) -> None:
        if not self.name:
            raise SourceUnselectedError("Profile not selected")

    def describe(self) -> str:
        return f"{self.title}: {self.name or '(none)'}"

    def _write(self, profile: Profile) -> None:
        if self.name == self.app_settings.state.current_profile:
            raise ConflictError(
                "Can't overwrite the currently loaded profile", context={"name": self.name}
            )
        if not self.storage.exists(self.name):
            raise ProfileNotFoundError(
                f"Profile '{self.name}' does not exist", context={"name": self.name}
            )
        self.storage.save_profile(self.name, profile)


class OutputToNewProfile(ProfileOperationOutput):
    title = "Write to new profile"

    def __init__(self, storage: ProfileStorage, app_settings: AppSettings, name: str = "") -> None:
        super().__init__()
        self.storage = storage
        self.app_settings = app_settings
        self.name = name

    def validate(self) -> None:
        if not self.name:
            raise SourceUnselectedError("Profile name can't be empty")

    def describe(self) -> str:
        return f"{self.title}: {self.name or '(none)'}"

    def _write(self, profile: Profile) -> None:
        name = self.app_settings.validate_new_name(self.name)
        self.storage.create(name)
        try:
            self.storage.save_profile(name, profile)
            self.app_settings.add_profile(name)
        except Exception:
            # profile folders exist only for registered names
            log.warning("Removing partially written profile %s", name)
            shutil.rmtree(self.storage.profile_dir(name), ignore_errors=True)
            raise


class OutputToFolder(ProfileOperationOutput):
    title = "To folder on device"

    def __init__(self, path: str | None = None) -> None:
        super().__init__()
        self.path = path

    def validate(self) -> None:
        if not self.path:
            raise SourceUnselectedError("Folder not selected")

    def _write(self, profile: Profile) -> None:
        for file_name, content in export_files(profile).items():
            filesystem.write_text(os.path.join(self.path, file_name), content)


class _FileExport(ProfileOperationOutput):
    """Writes one timestamped file into a chosen folder."""

    extension = ""

    def __init__(self, folder: str | None = None) -> None:
        super().__init__()
        self.folder = folder
        self.written_path: Optional[str] = None

    def validate(self) -> None:
        if not self.folder:
            raise SourceUnselectedError("Folder not selected")

    def _encode(self, profile: Profile) -> bytes:  # pragma: no cover - abstract
        raise NotImplementedError

    def _write(self, profile: Profile) -> None:
        path = os.path.join(self.folder, naming.timestamped_export_name(self.extension))
        filesystem.write_bytes(path, self._encode(profile))
        self.written_path = path
        log.info("Exported %s", path)


class OutputToZip(_FileExport):
    title = "To .zip file on device"
    extension = "zip"

    def _encode(self, profile: Profile) -> bytes:
        return pack_zip(profile)


class OutputToSpreadsheet(_FileExport):
    title = "To .xlsx spreadsheet on device"
    extension = "xlsx"

    def __init__(self, folder: str | None = None, profile_name: str | None = None) -> None:
        super().__init__(folder)
        self.profile_name = profile_name

    def _encode(self, profile: Profile) -> bytes:
        return export_spreadsheet(profile, self.profile_name)


class OutputToRemote(ProfileOperationOutput):
    title = "To Grosbeak"

    def __init__(self, client: RemoteClient, username: str | None = None) -> None:
        super().__init__()
        self.client = client
        self.username = username

    def validate(self) -> None:
        if not self.username:
            raise SourceUnselectedError("Username not entered")

    def _write(self, profile: Profile) -> None:
        self.client.push(self.username, profile)
