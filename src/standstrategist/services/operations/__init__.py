"""Staged profile operations (inputs -> merge -> outputs) and their presets."""

from .steps import (  # noqa: F401
    Error,
    OperationState,
    OperationStatus,
    ProfileOperationInput,
    ProfileOperationOutput,
    StepResult,
    Success,
)
from .pipeline import MERGE_STEP_ID, ProfileOperation  # noqa: F401
from .presets import build_operation  # noqa: F401
