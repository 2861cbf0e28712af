"""Profile operation pipeline: inputs -> merge -> outputs.

Execution of one run:

1. Status becomes RUNNING and all previous results are cleared.
2. Inputs run strictly in list order. Each records ``Success`` or
   ``Error(exc)`` under its step id. The first failing input aborts the run:
   later inputs, the merge and every output are skipped.
3. The collected profiles are merged in input order (earlier wins).
4. Outputs run in list order. A failing output is recorded and the remaining
   outputs still run.
5. Status becomes COMPLETED whatever happened above.

Every recorded result is published immediately as a ``step_completed`` event
(payload ``{"step_id", "kind", "result"}``) and each status transition as
``status_changed``, so observers can render progress while the run is going.
A merge exception is a bug, not a step failure: it propagates to the caller
(or the thread's excepthook for ``start()``) after the status is completed.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import replace
from typing import List, Optional, Sequence

from standstrategist.errors import OperationInProgressError
from standstrategist.profiles.merge import merge_profiles
from standstrategist.profiles.profile import Profile

from ..event_bus import EventBus, ProfileEvent
from .steps import (
    Error,
    OperationState,
    OperationStatus,
    ProfileOperationInput,
    ProfileOperationOutput,
    StepResult,
    Success,
)

__all__ = ["ProfileOperation", "MERGE_STEP_ID"]

log = logging.getLogger(__name__)

MERGE_STEP_ID = "merge"


class ProfileOperation:
    def __init__(
        self,
        inputs: Sequence[ProfileOperationInput] = (),
        outputs: Sequence[ProfileOperationOutput] = (),
        *,
        event_bus: EventBus | None = None,
    ) -> None:
        self.inputs: List[ProfileOperationInput] = list(inputs)
        self.outputs: List[ProfileOperationOutput] = list(outputs)
        self.events = event_bus or EventBus()
        self.merged: Optional[Profile] = None
        self._lock = threading.RLock()
        self._state = OperationState()
        self._thread: threading.Thread | None = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    @property
    def state(self) -> OperationState:
        with self._lock:
            return self._state

    @property
    def status(self) -> OperationStatus:
        return self.state.status

    def _set_status(self, status: OperationStatus) -> None:
        with self._lock:
            self._state = replace(self._state, status=status)
        self.events.publish(ProfileEvent.STATUS_CHANGED, status)

    def _record(self, step_id: str, kind: str, result: StepResult) -> None:
        with self._lock:
            if kind == "input":
                results = dict(self._state.input_results)
                results[step_id] = result
                self._state = replace(self._state, input_results=results)
            elif kind == "output":
                results = dict(self._state.output_results)
                results[step_id] = result
                self._state = replace(self._state, output_results=results)
            else:
                self._state = replace(self._state, merge_result=result)
        self.events.publish(
            ProfileEvent.STEP_COMPLETED, {"step_id": step_id, "kind": kind, "result": result}
        )

    # ------------------------------------------------------------------
    # Running
    # ------------------------------------------------------------------
    def _begin(self) -> None:
        with self._lock:
            if self._state.status is OperationStatus.RUNNING:
                raise OperationInProgressError("A profile operation is already running")
            self._state = OperationState(status=OperationStatus.RUNNING)
            self.merged = None
        self.events.publish(ProfileEvent.STATUS_CHANGED, OperationStatus.RUNNING)

    def run(self) -> OperationState:
        """Execute the operation on the calling thread and return the final state."""
        self._begin()
        self._execute()
        return self.state

    def start(self) -> threading.Thread:
        """Execute the operation on a background thread."""
        self._begin()
        thread = threading.Thread(target=self._execute, name="profile-operation", daemon=True)
        self._thread = thread
        thread.start()
        return thread

    def wait(self, timeout: float | None = None) -> OperationState:
        thread = self._thread
        if thread is not None:
            thread.join(timeout)
        return self.state

    def _execute(self) -> None:
        try:
            self._run_steps()
        finally:
            self._set_status(OperationStatus.COMPLETED)

    def _run_steps(self) -> None:
        imported: List[Profile] = []
        for step in list(self.inputs):
            try:
                imported.append(step.import_profile())
            except Exception as exc:  # noqa: BLE001 - every step failure is recorded
                log.warning("Input %s failed: %s", step.describe(), exc)
                self._record(step.id, "input", Error(exc))
                return
            log.info("Input %s imported", step.describe())
            self._record(step.id, "input", Success())

        merged = merge_profiles(imported)
        self.merged = merged
        self._record(MERGE_STEP_ID, "merge", Success())

        for step in list(self.outputs):
            try:
                step.export_profile(merged)
            except Exception as exc:  # noqa: BLE001 - outputs are independent
                log.warning("Output %s failed: %s", step.describe(), exc)
                self._record(step.id, "output", Error(exc))
                continue
            log.info("Output %s written", step.describe())
            self._record(step.id, "output", Success())
