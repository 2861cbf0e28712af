"""Gap-filling: default records for every team and match the schedule implies."""

from __future__ import annotations

from typing import List

from standstrategist.domain.datapoints import TeamDataEntry, TimDataEntry
from standstrategist.domain.models import MatchSchedule
from standstrategist.profiles.profile import Profile


def teams_list(schedule: MatchSchedule) -> List[str]:
    """Every team number in the schedule, in first-appearance order."""
    seen: dict[str, None] = {}
    for match in schedule.values():
        for number in match.team_numbers():
            seen.setdefault(number, None)
    return list(seen)


def fill_gaps(profile: Profile) -> None:
    """Ensure team and TIM entries exist for everything in the match schedule.

    Existing entries are never replaced. The profile's update setters are used,
    so ``on_update`` fires once for team data and once for TIM data.
    """
    schedule = profile.match_schedule.get()

    team_data = dict(profile.team_data.get())
    for team in teams_list(schedule):
        team_data.setdefault(team, TeamDataEntry())
    profile.team_data.update_all(team_data)

    tim_data = {match: dict(teams) for match, teams in profile.tim_data.get().items()}
    for match_number, match in schedule.items():
        teams = tim_data.setdefault(match_number, {})
        for team in match.team_numbers():
            teams.setdefault(team, TimDataEntry())
    profile.tim_data.update_all(tim_data)
