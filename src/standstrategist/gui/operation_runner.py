"""Qt bridge for profile operations.

Runs a :class:`ProfileOperation` on a ``QThread`` so a Qt UI never blocks on
step I/O, and re-emits the operation's event-bus progress as Qt signals
(delivered on the receiver's thread through queued connections).
"""

from __future__ import annotations

from typing import Optional

from PyQt6.QtCore import QObject, QThread, pyqtSignal

from standstrategist.errors import describe
from standstrategist.services.event_bus import Event, ProfileEvent
from standstrategist.services.operations import OperationState, ProfileOperation

__all__ = ["OperationWorker", "OperationRunner"]


class OperationWorker(QThread):
    step_completed = pyqtSignal(str, str, object)  # (step_id, kind, result)
    status_changed = pyqtSignal(str)
    finished_ok = pyqtSignal(object)  # OperationState
    failed = pyqtSignal(str)

    def __init__(self, operation: ProfileOperation):
        super().__init__()
        self._operation = operation

    def run(self):  # noqa: D401
        bus = self._operation.events
        subs = [
            bus.subscribe(ProfileEvent.STEP_COMPLETED, self._on_step),
            bus.subscribe(ProfileEvent.STATUS_CHANGED, self._on_status),
        ]
        try:
            state = self._operation.run()
        except Exception as e:
            self.failed.emit(describe(e))
        else:
            self.finished_ok.emit(state)
        finally:
            for sub in subs:
                bus.unsubscribe(sub)

    def _on_step(self, event: Event) -> None:
        payload = event.payload
        self.step_completed.emit(payload["step_id"], payload["kind"], payload["result"])

    def _on_status(self, event: Event) -> None:
        self.status_changed.emit(str(event.payload.value))


class OperationRunner(QObject):
    """Facade owning the worker thread of one operation run at a time."""

    operation_started = pyqtSignal()
    operation_finished = pyqtSignal(object)
    operation_failed = pyqtSignal(str)
    step_completed = pyqtSignal(str, str, object)

    def __init__(self):
        super().__init__()
        self._worker: Optional[OperationWorker] = None

    def is_running(self) -> bool:
        return self._worker is not None and self._worker.isRunning()

    def start(self, operation: ProfileOperation) -> bool:
        """Start ``operation``; returns False if a run is still in progress."""
        if self.is_running():
            return False
        self._worker = OperationWorker(operation)
        self._worker.step_completed.connect(self.step_completed)
        self._worker.finished_ok.connect(self._on_finished)
        self._worker.failed.connect(self.operation_failed)
        self.operation_started.emit()
        self._worker.start()
        return True

    def wait(self, msecs: int = 5000) -> bool:
        if self._worker is None:
            return True
        return self._worker.wait(msecs)

    def _on_finished(self, state: OperationState) -> None:
        self.operation_finished.emit(state)
