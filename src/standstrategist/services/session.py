"""Profile session: loads the current profile and keeps it autosaved.

This is the host of the data core. ``load`` walks the startup flow and
reports which step the user is at:

- SELECTING_PROFILE: no profiles, no current profile, or selection requested
- SELECTING_MATCH_SCHEDULE: the current profile has an empty schedule
- COLLECTION: the profile is loaded and autosaving

Edits made through ``session.profile`` stores reach the autosave worker via
the profile's shared ``on_update`` callback.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from enum import Enum
from typing import Optional

from standstrategist.domain.models import Alliance
from standstrategist.errors import SourceUnselectedError
from standstrategist.profiles.codec import decode_match_schedule
from standstrategist.profiles.fill_gaps import fill_gaps
from standstrategist.profiles.profile import Profile
from standstrategist.profiles.storage import ProfileStorage

from .app_settings import AppSettings
from .autosave import AutoSaveManager
from .error_handling_service import ErrorHandlingService
from .event_bus import EventBus, ProfileEvent

__all__ = ["SessionState", "ProfileSession"]

log = logging.getLogger(__name__)


class SessionState(str, Enum):
    LOADING = "loading"
    SELECTING_PROFILE = "selecting_profile"
    SELECTING_MATCH_SCHEDULE = "selecting_match_schedule"
    COLLECTION = "collection"


class ProfileSession:
    def __init__(
        self,
        storage: ProfileStorage,
        app_settings: AppSettings | None = None,
        *,
        event_bus: EventBus | None = None,
        error_service: ErrorHandlingService | None = None,
        debounce_ms: int | None = None,
    ) -> None:
        self.storage = storage
        self.app_settings = app_settings or AppSettings(storage)
        self.events = event_bus or EventBus()
        self.error_service = error_service
        self.debounce_ms = debounce_ms
        self.profile = Profile()
        self.profile_name: Optional[str] = None
        self.state = SessionState.LOADING
        self.autosave: Optional[AutoSaveManager] = None

    # ------------------------------------------------------------------
    # Startup flow
    # ------------------------------------------------------------------
    def load(self, skip_profile_selection: bool = False) -> SessionState:
        self.state = SessionState.LOADING
        self._stop_autosave(flush=True)
        settings = self.app_settings.read_settings()
        if not settings.profiles or not skip_profile_selection or not settings.current_profile:
            self.state = SessionState.SELECTING_PROFILE
            return self.state

        name = settings.current_profile
        autosave = AutoSaveManager(
            self._save_data,
            debounce_ms=self.debounce_ms,
            on_failure=self._on_autosave_failure,
            name=f"autosave-{name}",
        )
        # gap filling during import already requests a save; it is served once started
        profile = self.storage.load_profile(name, on_update=autosave.request_save)
        self.profile, self.profile_name, self.autosave = profile, name, autosave
        autosave.start()
        log.info("Loaded profile %s", name)
        return self._finish_load()

    def _finish_load(self) -> SessionState:
        if not self.profile.match_schedule.get():
            self.state = SessionState.SELECTING_MATCH_SCHEDULE
            return self.state
        settings = self.profile.settings.get()
        if settings.alliance is None:
            self.profile.settings.update(replace(settings, alliance=Alliance.BLUE))
        self.force_save()
        self.state = SessionState.COLLECTION
        return self.state

    def load_match_schedule(self, raw: bytes) -> SessionState:
        """Install a schedule file into the loaded profile and continue loading."""
        if self.profile_name is None:
            raise SourceUnselectedError("No current profile selected")
        self.profile.match_schedule.update(decode_match_schedule(raw))
        fill_gaps(self.profile)
        return self._finish_load()

    # ------------------------------------------------------------------
    # Saving
    # ------------------------------------------------------------------
    def _save_data(self) -> None:
        name = self.profile_name
        if name is None:
            return
        self.storage.save_profile(name, self.profile)
        self.events.publish(ProfileEvent.PROFILE_SAVED, name)

    def _on_autosave_failure(self, exc: BaseException) -> None:
        self.events.publish(
            ProfileEvent.AUTOSAVE_FAILED, {"profile": self.profile_name, "error": exc}
        )
        if self.error_service is not None:
            self.error_service.report(exc)

    def force_save(self) -> None:
        if self.autosave is not None:
            self.autosave.force_save()

    def _stop_autosave(self, *, flush: bool = False) -> None:
        if self.autosave is not None:
            if flush and self.autosave.failure is None and self.autosave.pending:
                self.autosave.force_save()
            self.autosave.stop()
            self.autosave = None

    def close(self) -> None:
        """Flush the profile to storage and stop autosaving."""
        if self.autosave is not None and self.autosave.failure is None:
            self.force_save()
        self._stop_autosave()
        self.state = SessionState.LOADING
