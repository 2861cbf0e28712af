"""Debounced, request-coalescing autosave worker.

``request_save`` only raises a single pending flag, so any number of requests
made before the worker gets to them collapse into one save. After each save
the worker cools down for the debounce interval; a request that arrives during
the cool-down stays pending and is served right after it. The latest request
is never lost.

Failures of ``save_data`` end the worker (call ``start()`` again to resume).
They are handed to ``on_failure`` when one is supplied, otherwise re-raised on
the worker thread so ``threading.excepthook`` (see ErrorHandlingService) sees
them.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

from standstrategist.config import settings

__all__ = ["AutoSaveManager"]

log = logging.getLogger(__name__)


class AutoSaveManager:
    def __init__(
        self,
        save_data: Callable[[], None],
        *,
        debounce_ms: int | None = None,
        on_failure: Optional[Callable[[BaseException], None]] = None,
        name: str = "autosave",
    ) -> None:
        self._save_data = save_data
        self._debounce = (
            debounce_ms if debounce_ms is not None else settings.AUTOSAVE_DEBOUNCE_MS
        ) / 1000.0
        self._on_failure = on_failure
        self._name = name
        self._cond = threading.Condition()
        self._save_lock = threading.Lock()
        self._pending = False
        self._stopping = False
        self._thread: threading.Thread | None = None
        self.failure: BaseException | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start(self) -> None:
        with self._cond:
            if self._thread is not None and self._thread.is_alive():
                return
            self._stopping = False
            self.failure = None
            self._thread = threading.Thread(target=self._run, name=self._name, daemon=True)
            self._thread.start()

    def stop(self) -> None:
        """Cancel the worker, waiting for an in-flight save to finish."""
        with self._cond:
            self._stopping = True
            self._cond.notify_all()
            thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join()
        with self._cond:
            self._thread = None

    @property
    def running(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive()

    @property
    def pending(self) -> bool:
        with self._cond:
            return self._pending

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------
    def request_save(self) -> None:
        with self._cond:
            self._pending = True
            self._cond.notify_all()

    def force_save(self) -> None:
        """Save now on the calling thread, bypassing the debounce."""
        with self._save_lock:
            self._save_data()

    # ------------------------------------------------------------------
    # Worker
    # ------------------------------------------------------------------
    def _run(self) -> None:
        while True:
            with self._cond:
                self._cond.wait_for(lambda: self._pending or self._stopping)
                if self._stopping:
                    return
                self._pending = False
            try:
                with self._save_lock:
                    self._save_data()
            except Exception as exc:
                self.failure = exc
                log.error("Autosave worker %s stopped after a failed save: %s", self._name, exc)
                if self._on_failure is None:
                    raise
                self._on_failure(exc)
                return
            log.debug("Autosave %s completed", self._name)
            with self._cond:
                if self._cond.wait_for(lambda: self._stopping, timeout=self._debounce):
                    return
