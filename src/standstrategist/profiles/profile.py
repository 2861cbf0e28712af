"""Profile aggregate and its four observable entity stores.

Each store is a single current-value register: ``set`` replaces the value
(last writer wins), notifies the store's own subscribers and then invokes the
Profile-wide ``on_update`` callback. Store values are treated as immutable
snapshots; mutators always build a new map rather than editing in place.

Thread-safety: the value register is guarded by a re-entrant lock, and
subscribers are invoked while the lock is NOT held (copy-first strategy, as in
the event bus) so a subscriber may read or write the store again.
"""

from __future__ import annotations

from dataclasses import dataclass
from threading import RLock
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar

from standstrategist.domain.datapoints import DataPoint, TeamDataEntry, TimDataEntry
from standstrategist.domain.models import MatchSchedule, ProfileSettings

__all__ = [
    "Subscription",
    "ObservableStore",
    "SettingsStore",
    "MatchScheduleStore",
    "TeamDataStore",
    "TimDataStore",
    "Profile",
    "TeamDataMap",
    "TimDataMap",
]

T = TypeVar("T")

TeamDataMap = Dict[str, TeamDataEntry]
TimDataMap = Dict[str, Dict[str, TimDataEntry]]


def _noop() -> None:
    return None


@dataclass
class Subscription:
    handler: Callable[[Any], None]
    active: bool = True

    def cancel(self) -> None:
        self.active = False


class ObservableStore(Generic[T]):
    """Mutable cell exposing ``get`` / ``set`` / ``subscribe``."""

    def __init__(self, initial: T, on_update: Callable[[], None] | None = None) -> None:
        self._lock = RLock()
        self._value = initial
        self._subs: List[Subscription] = []
        self._on_update = on_update or _noop

    def get(self) -> T:
        with self._lock:
            return self._value

    def set(self, value: T) -> None:
        self._commit(lambda _old: value)

    def _commit(self, transform: Callable[[T], T]) -> None:
        # read-modify-write under the lock, dispatch outside it
        with self._lock:
            value = transform(self._value)
            self._value = value
            self._subs = [s for s in self._subs if s.active]
            subs = list(self._subs)
        try:
            for sub in subs:
                if sub.active:
                    sub.handler(value)
        finally:
            # committed values always reach on_update, even if a subscriber raised
            self._on_update()

    def subscribe(self, handler: Callable[[T], None]) -> Subscription:
        sub = Subscription(handler=handler)
        with self._lock:
            self._subs.append(sub)
        return sub

    @property
    def value(self) -> T:
        return self.get()


class SettingsStore(ObservableStore[ProfileSettings]):
    def update(self, new_settings: ProfileSettings) -> None:
        self.set(new_settings)


class MatchScheduleStore(ObservableStore[MatchSchedule]):
    def update(self, new_schedule: MatchSchedule) -> None:
        self.set(dict(new_schedule))


class TeamDataStore(ObservableStore[TeamDataMap]):
    def update_all(self, new_data: TeamDataMap) -> None:
        self.set(dict(new_data))

    def value_of(self, team: str, data_point: DataPoint[TeamDataEntry]) -> Any:
        return data_point.value_in(self.get().get(team) or TeamDataEntry())

    def set_value(self, team: str, data_point: DataPoint[TeamDataEntry], value: Any) -> None:
        def _apply(current: TeamDataMap) -> TeamDataMap:
            data = dict(current)
            data[team] = data_point.set_value_in(data.get(team) or TeamDataEntry(), value)
            return data

        self._commit(_apply)


class TimDataStore(ObservableStore[TimDataMap]):
    def update_all(self, new_data: TimDataMap) -> None:
        self.set({match: dict(teams) for match, teams in new_data.items()})

    def value_of(self, match: str, team: str, data_point: DataPoint[TimDataEntry]) -> Any:
        entry = self.get().get(match, {}).get(team)
        return data_point.value_in(entry or TimDataEntry())

    def set_value(
        self, match: str, team: str, data_point: DataPoint[TimDataEntry], value: Any
    ) -> None:
        def _apply(current: TimDataMap) -> TimDataMap:
            data = dict(current)
            teams = dict(data.get(match, {}))
            teams[team] = data_point.set_value_in(teams.get(team) or TimDataEntry(), value)
            data[match] = teams
            return data

        self._commit(_apply)


class Profile:
    """A bundle of settings, match schedule, team data and TIM data.

    All four stores share one ``on_update`` callback. It is side-effect only
    (typically ``AutoSaveManager.request_save``) and must never be assumed to
    have persisted anything by the time it returns.
    """

    def __init__(
        self,
        settings: ProfileSettings | None = None,
        match_schedule: MatchSchedule | None = None,
        team_data: TeamDataMap | None = None,
        tim_data: TimDataMap | None = None,
        on_update: Optional[Callable[[], None]] = None,
    ) -> None:
        self._on_update = on_update or _noop
        self.settings = SettingsStore(settings or ProfileSettings(), self._notify)
        self.match_schedule = MatchScheduleStore(dict(match_schedule or {}), self._notify)
        self.team_data = TeamDataStore(dict(team_data or {}), self._notify)
        self.tim_data = TimDataStore(
            {m: dict(t) for m, t in (tim_data or {}).items()}, self._notify
        )

    def _notify(self) -> None:
        self._on_update()

    def set_on_update(self, on_update: Optional[Callable[[], None]]) -> None:
        """Rebind the shared callback (e.g. once an autosave worker exists)."""
        self._on_update = on_update or _noop

    def snapshot(self) -> Dict[str, Any]:
        """Current values of all four stores, for comparisons and logging."""
        return {
            "settings": self.settings.get(),
            "match_schedule": self.match_schedule.get(),
            "team_data": self.team_data.get(),
            "tim_data": self.tim_data.get(),
        }

    def same_data(self, other: "Profile") -> bool:
        """Structural equality of schedule, team data and TIM data (settings ignored)."""
        return (
            self.match_schedule.get() == other.match_schedule.get()
            and self.team_data.get() == other.team_data.get()
            and self.tim_data.get() == other.tim_data.get()
        )

    def __repr__(self) -> str:  # pragma: no cover - debugging aid
        return (
            f"Profile(matches={len(self.match_schedule.get())}, "
            f"teams={len(self.team_data.get())}, tim_matches={len(self.tim_data.get())})"
        )
