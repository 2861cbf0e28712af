from __future__ import annotations

import json
from typing import Dict, Iterable, Sequence

from standstrategist.domain.models import Alliance, Match, Team
from standstrategist.profiles.codec import schedule_to_json
from standstrategist.profiles.profile import Profile

BLUE = ("1678", "254", "971")
RED = ("118", "148", "2056")


def make_match(blue: Sequence[str] = BLUE, red: Sequence[str] = RED) -> Match:
    return Match.of(
        [Team(Alliance.BLUE, n) for n in blue] + [Team(Alliance.RED, n) for n in red]
    )


def make_schedule(numbers: Iterable[str] = ("1", "2")) -> Dict[str, Match]:
    return {number: make_match() for number in numbers}


def schedule_bytes(schedule: Dict[str, Match]) -> bytes:
    return json.dumps(schedule_to_json(schedule)).encode("utf-8")


def make_profile(**kwargs) -> Profile:
    kwargs.setdefault("match_schedule", make_schedule())
    return Profile(**kwargs)
