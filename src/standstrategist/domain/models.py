"""Domain models for match schedules, profile cursors and the profile registry."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple


class Alliance(str, Enum):  # str subclass so values serialize directly
    BLUE = "blue"
    RED = "red"

    @property
    def readable(self) -> str:
        return self.value.capitalize()

    @classmethod
    def parse(cls, raw: str) -> "Alliance":
        """Decode a persisted alliance; unknown strings fall back to BLUE."""
        for member in cls:
            if member.value == raw:
                return member
        return cls.BLUE


@dataclass(frozen=True, slots=True)
class Team:
    color: Alliance
    number: str


@dataclass(frozen=True, slots=True)
class Match:
    """Teams in one match, blue x3 then red x3 by convention (not enforced)."""

    teams: Tuple[Team, ...] = ()

    @classmethod
    def of(cls, teams: List[Team]) -> "Match":
        return cls(teams=tuple(teams))

    def team_numbers(self) -> List[str]:
        return [t.number for t in self.teams]


MatchSchedule = Dict[str, Match]


@dataclass(frozen=True, slots=True)
class ProfileSettings:
    """UI cursor for a profile; carries nothing the merge cares about."""

    alliance: Optional[Alliance] = None
    match_number: str = "1"
    page: int = 0


@dataclass(frozen=True, slots=True)
class AppSettingsState:
    current_profile: Optional[str] = None
    profiles: Tuple[str, ...] = field(default_factory=tuple)
