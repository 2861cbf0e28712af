"""JSON part codec for profiles.

A profile persists as four independent JSON documents. Schema:

settings.json        {"alliance": "blue" | "red" | null, "matchNumber": "1", "page": 0}
match_schedule.json  {"<match>": {"teams": [{"color": "blue", "number": "1678"}, ...]}}
team_data.json       {"<team>": {"strengths": "...", "can_intake_ground": false, ...}}
tim_data.json        {"<match>": {"<team>": {"defense_rating": 3, ...}}}

Missing parts decode to defaults, unknown entry keys are ignored, and
anything structurally wrong raises :class:`~standstrategist.errors.DecodeError`.
"""

from __future__ import annotations

import json
from typing import Any, Callable, Dict, Mapping, Optional

from standstrategist.domain.datapoints import (
    TEAM_DATA_POINTS,
    TIM_DATA_POINTS,
    TeamDataEntry,
    TimDataEntry,
    entry_from_dict,
    entry_to_dict,
)
from standstrategist.domain.models import Alliance, Match, MatchSchedule, ProfileSettings, Team
from standstrategist.errors import DecodeError
from standstrategist.profiles.fill_gaps import fill_gaps
from standstrategist.profiles.profile import Profile, TeamDataMap, TimDataMap

__all__ = [
    "SETTINGS",
    "MATCH_SCHEDULE",
    "TEAM_DATA",
    "TIM_DATA",
    "PART_NAMES",
    "export_files",
    "import_files",
    "decode_match_schedule",
]

SETTINGS = "settings.json"
MATCH_SCHEDULE = "match_schedule.json"
TEAM_DATA = "team_data.json"
TIM_DATA = "tim_data.json"
PART_NAMES = (SETTINGS, MATCH_SCHEDULE, TEAM_DATA, TIM_DATA)


# ----------------------------------------------------------------------
# Encoding
# ----------------------------------------------------------------------
def settings_to_json(settings: ProfileSettings) -> Dict[str, Any]:
    return {
        "alliance": settings.alliance.value if settings.alliance else None,
        "matchNumber": settings.match_number,
        "page": settings.page,
    }


def schedule_to_json(schedule: MatchSchedule) -> Dict[str, Any]:
    return {
        number: {"teams": [{"color": t.color.value, "number": t.number} for t in match.teams]}
        for number, match in schedule.items()
    }


def team_data_to_json(team_data: TeamDataMap) -> Dict[str, Any]:
    return {team: entry_to_dict(entry) for team, entry in team_data.items()}


def tim_data_to_json(tim_data: TimDataMap) -> Dict[str, Any]:
    return {
        match: {team: entry_to_dict(entry) for team, entry in teams.items()}
        for match, teams in tim_data.items()
    }


def export_files(profile: Profile) -> Dict[str, str]:
    """Serialize ``profile`` into its four named JSON parts."""
    return {
        SETTINGS: json.dumps(settings_to_json(profile.settings.get())),
        MATCH_SCHEDULE: json.dumps(schedule_to_json(profile.match_schedule.get())),
        TEAM_DATA: json.dumps(team_data_to_json(profile.team_data.get())),
        TIM_DATA: json.dumps(tim_data_to_json(profile.tim_data.get())),
    }


# ----------------------------------------------------------------------
# Decoding
# ----------------------------------------------------------------------
def _load(part: str, raw: bytes) -> Any:
    try:
        return json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        raise DecodeError(f"{part} is not valid JSON: {e}", context={"part": part}) from e


def _expect_object(part: str, obj: Any, where: str = "document") -> Dict[str, Any]:
    if not isinstance(obj, dict):
        raise DecodeError(
            f"{part}: expected an object for {where}, got {type(obj).__name__}",
            context={"part": part, "where": where},
        )
    return obj


def settings_from_json(obj: Any) -> ProfileSettings:
    data = _expect_object(SETTINGS, obj)
    alliance_raw = data.get("alliance")
    match_number = data.get("matchNumber", "1")
    page = data.get("page", 0)
    if alliance_raw is not None and not isinstance(alliance_raw, str):
        raise DecodeError(f"{SETTINGS}: alliance must be a string", context={"part": SETTINGS})
    if not isinstance(match_number, str) or isinstance(page, bool) or not isinstance(page, int):
        raise DecodeError(
            f"{SETTINGS}: matchNumber must be a string and page an integer",
            context={"part": SETTINGS},
        )
    return ProfileSettings(
        alliance=Alliance.parse(alliance_raw) if alliance_raw is not None else None,
        match_number=match_number,
        page=page,
    )


def schedule_from_json(obj: Any, part: str = MATCH_SCHEDULE) -> MatchSchedule:
    schedule: MatchSchedule = {}
    for number, raw_match in _expect_object(part, obj).items():
        match_obj = _expect_object(part, raw_match, f"match {number}")
        raw_teams = match_obj.get("teams", [])
        if not isinstance(raw_teams, list):
            raise DecodeError(
                f"{part}: teams of match {number} must be a list", context={"part": part}
            )
        teams = []
        for raw_team in raw_teams:
            team_obj = _expect_object(part, raw_team, f"team in match {number}")
            color, team_number = team_obj.get("color"), team_obj.get("number")
            if not isinstance(color, str) or not isinstance(team_number, str):
                raise DecodeError(
                    f"{part}: team in match {number} needs string color and number",
                    context={"part": part, "match": number},
                )
            teams.append(Team(color=Alliance.parse(color), number=team_number))
        schedule[number] = Match.of(teams)
    return schedule


def team_data_from_json(obj: Any) -> TeamDataMap:
    team_data: TeamDataMap = {}
    for team, raw_entry in _expect_object(TEAM_DATA, obj).items():
        entry_obj = _expect_object(TEAM_DATA, raw_entry, f"team {team}")
        try:
            team_data[team] = entry_from_dict(entry_obj, TEAM_DATA_POINTS, TeamDataEntry)
        except TypeError as e:
            raise DecodeError(f"{TEAM_DATA}: team {team}: {e}", context={"team": team}) from e
    return team_data


def tim_data_from_json(obj: Any) -> TimDataMap:
    tim_data: TimDataMap = {}
    for match, raw_teams in _expect_object(TIM_DATA, obj).items():
        teams: Dict[str, TimDataEntry] = {}
        for team, raw_entry in _expect_object(TIM_DATA, raw_teams, f"match {match}").items():
            entry_obj = _expect_object(TIM_DATA, raw_entry, f"team {team} in match {match}")
            try:
                teams[team] = entry_from_dict(entry_obj, TIM_DATA_POINTS, TimDataEntry)
            except TypeError as e:
                raise DecodeError(
                    f"{TIM_DATA}: match {match} team {team}: {e}",
                    context={"match": match, "team": team},
                ) from e
        tim_data[match] = teams
    return tim_data


def import_files(
    files: Mapping[str, bytes], on_update: Optional[Callable[[], None]] = None
) -> Profile:
    """Build a profile from named part contents, then fill schedule gaps.

    Parts that are absent fall back to defaults; unrelated file names are ignored.
    """
    settings = settings_from_json(_load(SETTINGS, files[SETTINGS])) if SETTINGS in files else None
    schedule = (
        schedule_from_json(_load(MATCH_SCHEDULE, files[MATCH_SCHEDULE]))
        if MATCH_SCHEDULE in files
        else {}
    )
    team_data = (
        team_data_from_json(_load(TEAM_DATA, files[TEAM_DATA])) if TEAM_DATA in files else {}
    )
    tim_data = tim_data_from_json(_load(TIM_DATA, files[TIM_DATA])) if TIM_DATA in files else {}
    profile = Profile(settings, schedule, team_data, tim_data, on_update=on_update)
    fill_gaps(profile)
    return profile


def _match_sort_key(item: tuple[str, Match]) -> tuple[int, int, str]:
    number = item[0]
    try:
        return (0, int(number), number)
    except ValueError:
        return (1, 0, number)


def decode_match_schedule(raw: bytes) -> MatchSchedule:
    """Decode a stand-alone schedule file, ordering matches numerically."""
    schedule = schedule_from_json(_load("match schedule", raw), part="match schedule")
    return dict(sorted(schedule.items(), key=_match_sort_key))
