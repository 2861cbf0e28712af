"""Input steps: where the profiles of an operation come from."""

from __future__ import annotations

import os

from standstrategist.core import filesystem
from standstrategist.errors import SourceUnselectedError
from standstrategist.profiles.codec import import_files
from standstrategist.profiles.container import unpack_zip
from standstrategist.profiles.profile import Profile
from standstrategist.profiles.remote import RemoteClient
from standstrategist.profiles.storage import ProfileStorage

from .steps import ProfileOperationInput

__all__ = ["InputFromProfile", "InputFromFolder", "InputFromZip", "InputFromRemote"]


class InputFromProfile(ProfileOperationInput):
    title = "From existing profile"

    def __init__(self, storage: ProfileStorage, name: str | None = None) -> None:
        super().__init__()
        self.storage = storage
        self.name = name

    def validate(self) -> None:
        if not self.name:
            raise SourceUnselectedError("Profile not selected")

    def describe(self) -> str:
        return f"{self.title}: {self.name or '(none)'}"

    def _read(self) -> Profile:
        return self.storage.load_profile(self.name)


class InputFromFolder(ProfileOperationInput):
    title = "From folder on device"

    def __init__(self, path: str | None = None) -> None:
        super().__init__()
        self.path = path

    def validate(self) -> None:
        if not self.path:
            raise SourceUnselectedError("Folder not selected")

    def _read(self) -> Profile:
        if not os.path.isdir(self.path):
            raise FileNotFoundError(f"No such folder: {self.path}")
        return import_files(filesystem.read_folder(self.path))


class InputFromZip(ProfileOperationInput):
    title = "From .zip file on device"

    def __init__(self, path: str | None = None) -> None:
        super().__init__()
        self.path = path

    def validate(self) -> None:
        if not self.path:
            raise SourceUnselectedError("Zip file not selected")

    def _read(self) -> Profile:
        return unpack_zip(filesystem.read_bytes(self.path))


class InputFromRemote(ProfileOperationInput):
    title = "From Grosbeak"

    def __init__(self, client: RemoteClient, username: str | None = None) -> None:
        super().__init__()
        self.client = client
        self.username = username

    def validate(self) -> None:
        if not self.username:
            raise SourceUnselectedError("Username not entered")

    def _read(self) -> Profile:
        return self.client.fetch(self.username)
