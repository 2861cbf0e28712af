import json

import pytest
from factories import make_match, make_profile, schedule_bytes

from standstrategist.domain.datapoints import TeamDataEntry, TimDataEntry
from standstrategist.domain.models import Alliance, ProfileSettings
from standstrategist.errors import DecodeError
from standstrategist.profiles.codec import (
    MATCH_SCHEDULE,
    PART_NAMES,
    SETTINGS,
    TEAM_DATA,
    TIM_DATA,
    decode_match_schedule,
    export_files,
    import_files,
)


def _encoded(profile):
    return {name: content.encode("utf-8") for name, content in export_files(profile).items()}


def test_export_files_writes_four_parts():
    files = export_files(make_profile())
    assert set(files) == set(PART_NAMES)
    assert json.loads(files[SETTINGS]) == {"alliance": None, "matchNumber": "1", "page": 0}
    schedule = json.loads(files[MATCH_SCHEDULE])
    assert schedule["1"]["teams"][0] == {"color": "blue", "number": "1678"}
    assert schedule["1"]["teams"][3]["color"] == "red"


def test_import_restores_exported_profile():
    profile = make_profile(
        settings=ProfileSettings(alliance=Alliance.RED, match_number="7", page=1),
        team_data={"1678": TeamDataEntry(can_intake_ground=True, strengths="fast")},
        tim_data={"2": {"254": TimDataEntry(played_defense=True, defense_rating=4)}},
    )
    restored = import_files(_encoded(profile))
    assert restored.settings.get() == profile.settings.get()
    expected = TeamDataEntry(can_intake_ground=True, strengths="fast")
    assert restored.team_data.get()["1678"] == expected
    assert restored.tim_data.get()["2"]["254"].defense_rating == 4


def test_missing_parts_use_defaults():
    profile = import_files({})
    assert profile.settings.get() == ProfileSettings()
    assert profile.match_schedule.get() == {}
    assert profile.team_data.get() == {}


def test_import_fills_gaps_from_schedule():
    profile = import_files({MATCH_SCHEDULE: schedule_bytes({"1": make_match()})})
    assert set(profile.team_data.get()) == {"1678", "254", "971", "118", "148", "2056"}
    assert profile.tim_data.get()["1"]["2056"] == TimDataEntry()


def test_unknown_alliance_decodes_to_blue():
    settings = json.dumps({"alliance": "green", "matchNumber": "3", "page": 0}).encode()
    schedule = json.dumps({"1": {"teams": [{"color": "purple", "number": "1"}]}}).encode()
    profile = import_files({SETTINGS: settings, MATCH_SCHEDULE: schedule})
    assert profile.settings.get().alliance is Alliance.BLUE
    assert profile.match_schedule.get()["1"].teams[0].color is Alliance.BLUE


def test_null_alliance_stays_unset():
    settings = json.dumps({"alliance": None, "matchNumber": "3", "page": 2}).encode()
    assert import_files({SETTINGS: settings}).settings.get().alliance is None


def test_unknown_files_and_keys_are_ignored():
    team_data = json.dumps({"1678": {"strengths": "x", "old_field": True}}).encode()
    profile = import_files({TEAM_DATA: team_data, "notes.txt": b"not json"})
    assert profile.team_data.get() == {"1678": TeamDataEntry(strengths="x")}


def test_malformed_json_raises_decode_error():
    with pytest.raises(DecodeError, match="not valid JSON"):
        import_files({TEAM_DATA: b"{broken"})


def test_wrong_value_type_raises_decode_error():
    tim_data = json.dumps({"1": {"254": {"defense_rating": "high"}}}).encode()
    with pytest.raises(DecodeError) as info:
        import_files({TIM_DATA: tim_data})
    assert info.value.context == {"match": "1", "team": "254"}


def test_wrong_document_shape_raises_decode_error():
    with pytest.raises(DecodeError):
        import_files({MATCH_SCHEDULE: b"[]"})
    with pytest.raises(DecodeError):
        import_files({MATCH_SCHEDULE: b'{"1": {"teams": "1678"}}'})


def test_decode_match_schedule_orders_numerically():
    raw = schedule_bytes(
        {"10": make_match(), "2": make_match(), "qual": make_match(), "1": make_match()}
    )
    assert list(decode_match_schedule(raw)) == ["1", "2", "10", "qual"]


def test_out_of_range_rating_raises_decode_error():
    tim_data = json.dumps({"1": {"254": {"defense_rating": 99}}}).encode()
    with pytest.raises(DecodeError) as info:
        import_files({TIM_DATA: tim_data})
    assert info.value.context == {"match": "1", "team": "254"}
