from dataclasses import dataclass

from factories import make_match, make_profile

from standstrategist.domain.datapoints import DataPoint, DataType, TeamDataEntry, TimDataEntry
from standstrategist.domain.models import Alliance, ProfileSettings
from standstrategist.profiles.fill_gaps import fill_gaps
from standstrategist.profiles.merge import merge_entries, merge_profiles
from standstrategist.profiles.profile import Profile


def team(**kw):
    return TeamDataEntry(**kw)


def tim(**kw):
    return TimDataEntry(**kw)


def test_merge_single_profile_is_identity():
    p = make_profile(
        settings=ProfileSettings(alliance=Alliance.RED, match_number="4", page=2),
        team_data={"1678": team(strengths="fast", can_intake_ground=True)},
        tim_data={"1": {"1678": tim(defense_rating=3, tim_notes="ok")}},
    )
    fill_gaps(p)
    merged = merge_profiles([p])
    assert merged.same_data(p)
    assert merged.settings.get() == ProfileSettings()


def test_merge_scalar_ties_follow_input_order():
    a = Profile(tim_data={"1": {"254": tim(defense_rating=3, played_defense=True)}})
    b = Profile(tim_data={"1": {"254": tim(defense_rating=5, played_against_defense=True)}})
    ab = merge_profiles([a, b]).tim_data.get()["1"]["254"]
    ba = merge_profiles([b, a]).tim_data.get()["1"]["254"]
    assert ab.defense_rating == 3
    assert ba.defense_rating == 5
    assert ab.played_defense and ab.played_against_defense


def test_merge_joins_strings_in_order_and_drops_defaults():
    a = Profile(team_data={"1678": team(strengths="x")})
    b = Profile(team_data={"1678": team(strengths="y")})
    c = Profile(team_data={"1678": team(strengths="")})
    assert merge_profiles([a, b, c]).team_data.get()["1678"].strengths == "x\ny"


def test_merge_all_default_strings_stay_empty():
    a = Profile(team_data={"1678": team()})
    b = Profile(team_data={"1678": team()})
    assert merge_profiles([a, b]).team_data.get()["1678"] == team()


def test_merge_key_union():
    a = Profile(team_data={"1678": team(strengths="x")})
    b = Profile(team_data={"999": team(weaknesses="slow")})
    merged = merge_profiles([a, b]).team_data.get()
    assert set(merged) == {"1678", "999"}
    assert merged["999"].weaknesses == "slow"


def test_merge_tim_key_union_across_matches_and_teams():
    a = Profile(tim_data={"1": {"1678": tim(tim_notes="a")}})
    b = Profile(tim_data={"1": {"254": tim(tim_notes="b")}, "2": {"971": tim(tim_notes="c")}})
    merged = merge_profiles([a, b]).tim_data.get()
    assert set(merged) == {"1", "2"}
    assert set(merged["1"]) == {"1678", "254"}
    assert merged["2"]["971"].tim_notes == "c"


def test_merge_string_scenario():
    p1 = Profile(team_data={"12345": team(strengths="good driving")})
    p2 = Profile(team_data={"12345": team(strengths="good robot")})
    merged = merge_profiles([p1, p2])
    assert merged.team_data.get()["12345"].strengths == "good driving\ngood robot"


def test_merge_uses_first_non_empty_schedule():
    p1 = Profile(match_schedule={"1": make_match(("1", "2", "3"), ("4", "5", "6"))})
    p2 = Profile(match_schedule={"2": make_match(("7", "8", "9"), ("10", "11", "12"))})
    assert merge_profiles([p1, p2]).match_schedule.get() == p1.match_schedule.get()
    empty = Profile()
    assert merge_profiles([empty, p2]).match_schedule.get() == p2.match_schedule.get()


def test_merge_does_not_repair_defense_fields():
    a = Profile(tim_data={"1": {"254": tim(played_defense=False)}})
    b = Profile(tim_data={"1": {"254": tim(defense_rating=4)}})
    merged = merge_profiles([a, b]).tim_data.get()["1"]["254"]
    assert merged.played_defense is False
    assert merged.defense_rating == 4


def test_merge_is_pure():
    a = Profile(team_data={"1678": team(strengths="x")})
    b = Profile(team_data={"1678": team(strengths="y")})
    first = merge_profiles([a, b]).snapshot()
    second = merge_profiles([a, b]).snapshot()
    assert first == second
    assert a.team_data.get()["1678"].strengths == "x"


def test_merge_of_nothing_is_empty_profile():
    merged = merge_profiles([])
    assert merged.same_data(Profile())


def test_merge_passes_update_callback():
    calls = []
    merged = merge_profiles([Profile()], on_update=lambda: calls.append(1))
    merged.settings.update(ProfileSettings(page=1))
    assert calls == [1]


@dataclass(frozen=True)
class ClimbEntry:
    climb: str = ""


def test_dropdown_takes_first_non_default_value():
    climb = DataPoint("climb", "Climb", DataType.DROPDOWN, ClimbEntry, options=("Shallow", "Deep"))
    entries = [ClimbEntry(""), ClimbEntry("Deep"), ClimbEntry("Shallow")]
    assert merge_entries(entries, (climb,), ClimbEntry) == ClimbEntry("Deep")
