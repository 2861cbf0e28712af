"""Structured errors for profile storage, codecs and operations."""

from __future__ import annotations
from typing import Any


class StandStrategistError(Exception):
    """Base class for recoverable profile data issues."""

    def __init__(self, message: str, *, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.context = context or {}


class ConfigurationMissingError(StandStrategistError):
    """Raised when an optional collaborator (remote sync) is not configured."""


class SourceUnselectedError(StandStrategistError):
    """Raised when an operation step runs before its source/target is chosen."""


class DecodeError(StandStrategistError):
    """Raised when persisted or imported bytes cannot be decoded."""


class EncodeError(StandStrategistError):
    """Raised when a profile cannot be encoded into a container format."""


class ConflictError(StandStrategistError):
    """Raised when a target already exists or is currently loaded."""


class ProfileNotFoundError(StandStrategistError):
    """Raised when a named profile has no folder in storage."""


class InvalidProfileNameError(StandStrategistError):
    """Raised when a profile name is too long to be used as a folder name."""


class OperationInProgressError(ConflictError):
    """Raised when a profile operation is started while already running."""


def is_user_facing(exc: BaseException) -> bool:
    """Whether ``exc`` carries a readable message meant for the operator.

    Configuration and selection problems are shown verbatim; anything else is
    treated as an opaque I/O or programming failure.
    """
    return isinstance(
        exc,
        (ConfigurationMissingError, SourceUnselectedError, ConflictError, InvalidProfileNameError),
    )


def describe(exc: BaseException) -> str:
    if is_user_facing(exc):
        return str(exc)
    return f"{type(exc).__name__}: {exc}"
