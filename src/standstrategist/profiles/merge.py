"""Deterministic merge of several profiles into one.

Profiles earlier in the list take priority:

- Settings are reset to defaults regardless of the inputs.
- The first non-empty match schedule is used verbatim; the rest are ignored.
- Team data and TIM data cover the union of keys from every input. For each
  data point, values are collected in input order from the profiles that
  actually have an entry for that key, and values equal to the type default
  are dropped. Strings are joined with newlines; integers, booleans and
  dropdowns take the first remaining value (or the default when none remain).

The merge is a pure function of the inputs and their order.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple, TypeVar

from standstrategist.domain.datapoints import (
    TEAM_DATA_POINTS,
    TIM_DATA_POINTS,
    DataPoint,
    DataType,
    TeamDataEntry,
    TimDataEntry,
)
from standstrategist.domain.models import MatchSchedule
from standstrategist.profiles.profile import Profile, TeamDataMap, TimDataMap

__all__ = ["merge_profiles", "merge_entries", "merge_team_data", "merge_tim_data"]

E = TypeVar("E")

STRING_SEPARATOR = "\n"


def _union_keys(maps: Iterable[Dict[str, Any]]) -> List[str]:
    # set semantics, first-seen order so output is stable for a given input order
    keys: Dict[str, None] = {}
    for m in maps:
        for key in m:
            keys.setdefault(key, None)
    return list(keys)


def merge_entries(
    entries: Sequence[E],
    data_points: Tuple[DataPoint[E], ...],
    entry_type: Callable[[], E],
) -> E:
    """Merge the entries present for one key, highest priority first."""
    merged = entry_type()
    for data_point in data_points:
        default = data_point.default
        values = [
            value for value in (data_point.value_in(e) for e in entries) if value != default
        ]
        if data_point.type is DataType.STRING:
            merged = data_point.set_value_in(merged, STRING_SEPARATOR.join(values))
        else:
            merged = data_point.set_value_in(merged, values[0] if values else default)
    return merged


def merge_team_data(
    team_maps: Sequence[TeamDataMap],
    data_points: Tuple[DataPoint[TeamDataEntry], ...] = TEAM_DATA_POINTS,
) -> TeamDataMap:
    merged: TeamDataMap = {}
    for team in _union_keys(team_maps):
        present = [m[team] for m in team_maps if team in m]
        merged[team] = merge_entries(present, data_points, TeamDataEntry)
    return merged


def merge_tim_data(
    tim_maps: Sequence[TimDataMap],
    data_points: Tuple[DataPoint[TimDataEntry], ...] = TIM_DATA_POINTS,
) -> TimDataMap:
    merged: TimDataMap = {}
    for match in _union_keys(tim_maps):
        match_maps = [m[match] for m in tim_maps if match in m]
        teams: Dict[str, TimDataEntry] = {}
        for team in _union_keys(match_maps):
            present = [mm[team] for mm in match_maps if team in mm]
            teams[team] = merge_entries(present, data_points, TimDataEntry)
        merged[match] = teams
    return merged


def _first_schedule(profiles: Sequence[Profile]) -> MatchSchedule:
    for profile in profiles:
        schedule = profile.match_schedule.get()
        if schedule:
            return dict(schedule)
    return {}


def merge_profiles(
    profiles: Sequence[Profile], on_update: Optional[Callable[[], None]] = None
) -> Profile:
    """Merge ``profiles`` (priority order) into a new :class:`Profile`."""
    return Profile(
        match_schedule=_first_schedule(profiles),
        team_data=merge_team_data([p.team_data.get() for p in profiles]),
        tim_data=merge_tim_data([p.tim_data.get() for p in profiles]),
        on_update=on_update,
    )
