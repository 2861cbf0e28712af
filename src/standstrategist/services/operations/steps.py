"""Step results, run status and the input/output step contracts."""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Union

from standstrategist.errors import describe
from standstrategist.profiles.profile import Profile

__all__ = [
    "OperationStatus",
    "Success",
    "Error",
    "StepResult",
    "OperationState",
    "ProfileOperationInput",
    "ProfileOperationOutput",
]

_ids = itertools.count(1)


class OperationStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"


@dataclass(frozen=True, slots=True)
class Success:
    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class Error:
    exception: BaseException

    @property
    def ok(self) -> bool:
        return False

    @property
    def message(self) -> str:
        return describe(self.exception)


StepResult = Union[Success, Error]


@dataclass(frozen=True)
class OperationState:
    """Snapshot of one run. Result maps are keyed by step id, in execution order."""

    status: OperationStatus = OperationStatus.IDLE
    input_results: Dict[str, StepResult] = field(default_factory=dict)
    merge_result: Optional[StepResult] = None
    output_results: Dict[str, StepResult] = field(default_factory=dict)


class _Step:
    kind = "step"
    title = ""

    def __init__(self) -> None:
        self.id = f"{self.kind}-{next(_ids)}"

    def validate(self) -> None:
        """Raise ``SourceUnselectedError`` when the step is not configured yet."""

    def describe(self) -> str:
        return self.title

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.id}>"


class ProfileOperationInput(_Step):
    kind = "input"

    def import_profile(self) -> Profile:
        self.validate()
        return self._read()

    def _read(self) -> Profile:  # pragma: no cover - abstract
        raise NotImplementedError


class ProfileOperationOutput(_Step):
    kind = "output"

    def export_profile(self, profile: Profile) -> None:
        self.validate()
        self._write(profile)

    def _write(self, profile: Profile) -> None:  # pragma: no cover - abstract
        raise NotImplementedError
