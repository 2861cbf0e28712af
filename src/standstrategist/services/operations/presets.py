"""Named operation layouts for the common profile workflows.

A preset fills in as much of an operation as it knows. Steps it can't
configure (the other profile of a merge, the target folder of an export)
stay unselected; the caller sets them before running, otherwise they fail
with ``SourceUnselectedError`` when run.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from standstrategist.profiles.remote import RemoteClient
from standstrategist.profiles.storage import ProfileStorage

from ..app_settings import AppSettings
from ..event_bus import EventBus
from .inputs import InputFromFolder, InputFromProfile, InputFromRemote, InputFromZip
from .outputs import (
    OutputToFolder,
    OutputToNewProfile,
    OutputToProfile,
    OutputToRemote,
    OutputToSpreadsheet,
    OutputToZip,
)
from .pipeline import ProfileOperation

__all__ = [
    "MergeFrom",
    "MergeInto",
    "Duplicate",
    "ImportZip",
    "ImportFolder",
    "ExportZip",
    "ExportFolder",
    "ExportSpreadsheet",
    "Upload",
    "Download",
    "ProfileOperationPreset",
    "build_operation",
]


@dataclass(frozen=True, slots=True)
class MergeFrom:
    """Merge ``profile`` into another profile, with ``profile`` at lower priority."""

    profile: str


@dataclass(frozen=True, slots=True)
class MergeInto:
    """Merge another profile into ``profile``, with ``profile`` at higher priority."""

    profile: str


@dataclass(frozen=True, slots=True)
class Duplicate:
    profile: str


@dataclass(frozen=True, slots=True)
class ImportZip:
    pass


@dataclass(frozen=True, slots=True)
class ImportFolder:
    pass


@dataclass(frozen=True, slots=True)
class ExportZip:
    profile: str


@dataclass(frozen=True, slots=True)
class ExportFolder:
    profile: str


@dataclass(frozen=True, slots=True)
class ExportSpreadsheet:
    profile: str


@dataclass(frozen=True, slots=True)
class Upload:
    profile: str


@dataclass(frozen=True, slots=True)
class Download:
    pass


ProfileOperationPreset = Union[
    MergeFrom,
    MergeInto,
    Duplicate,
    ImportZip,
    ImportFolder,
    ExportZip,
    ExportFolder,
    ExportSpreadsheet,
    Upload,
    Download,
]


def build_operation(
    preset: ProfileOperationPreset,
    storage: ProfileStorage,
    app_settings: AppSettings,
    *,
    remote: RemoteClient | None = None,
    event_bus: EventBus | None = None,
) -> ProfileOperation:
    def new_profile() -> OutputToNewProfile:
        return OutputToNewProfile(storage, app_settings)

    if isinstance(preset, MergeFrom):
        inputs = [InputFromProfile(storage), InputFromProfile(storage, preset.profile)]
        outputs = [OutputToProfile(storage, app_settings)]
    elif isinstance(preset, MergeInto):
        inputs = [InputFromProfile(storage, preset.profile), InputFromProfile(storage)]
        outputs = [OutputToProfile(storage, app_settings, preset.profile)]
    elif isinstance(preset, Duplicate):
        inputs = [InputFromProfile(storage, preset.profile)]
        outputs = [new_profile()]
    elif isinstance(preset, ImportZip):
        inputs = [InputFromZip()]
        outputs = [new_profile()]
    elif isinstance(preset, ImportFolder):
        inputs = [InputFromFolder()]
        outputs = [new_profile()]
    elif isinstance(preset, ExportZip):
        inputs = [InputFromProfile(storage, preset.profile)]
        outputs = [OutputToZip()]
    elif isinstance(preset, ExportFolder):
        inputs = [InputFromProfile(storage, preset.profile)]
        outputs = [OutputToFolder()]
    elif isinstance(preset, ExportSpreadsheet):
        inputs = [InputFromProfile(storage, preset.profile)]
        outputs = [OutputToSpreadsheet(profile_name=preset.profile)]
    elif isinstance(preset, Upload):
        inputs = [InputFromProfile(storage, preset.profile)]
        outputs = [OutputToRemote(remote or RemoteClient())]
    elif isinstance(preset, Download):
        inputs = [InputFromRemote(remote or RemoteClient())]
        outputs = [new_profile()]
    else:
        raise TypeError(f"Unknown preset: {preset!r}")
    return ProfileOperation(inputs, outputs, event_bus=event_bus)
