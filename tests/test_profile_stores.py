import threading

import pytest

from standstrategist.domain.datapoints import (
    TEAM_DATA_POINTS,
    TIM_DATA_POINTS,
    TeamDataEntry,
)
from standstrategist.domain.models import Alliance, ProfileSettings
from standstrategist.profiles.profile import Profile

STRENGTHS = TEAM_DATA_POINTS[1]
RATING = next(dp for dp in TIM_DATA_POINTS if dp.key == "defense_rating")


def test_set_notifies_subscribers_then_profile_callback():
    calls = []
    profile = Profile(on_update=lambda: calls.append("profile"))
    profile.team_data.subscribe(lambda value: calls.append(("team", dict(value))))
    profile.team_data.set_value("1678", STRENGTHS, "fast")
    assert calls == [("team", {"1678": TeamDataEntry(strengths="fast")}), "profile"]


def test_every_store_shares_the_profile_callback():
    count = 0

    def bump():
        nonlocal count
        count += 1

    profile = Profile(on_update=bump)
    profile.settings.update(ProfileSettings(alliance=Alliance.RED))
    profile.match_schedule.update({})
    profile.team_data.update_all({})
    profile.tim_data.update_all({})
    assert count == 4


def test_value_of_defaults_for_missing_entries():
    profile = Profile()
    assert profile.team_data.value_of("254", STRENGTHS) == ""
    assert profile.tim_data.value_of("1", "254", RATING) == 0


def test_tim_set_value_creates_entry_on_demand():
    profile = Profile()
    profile.tim_data.set_value("3", "1678", RATING, 4)
    assert profile.tim_data.value_of("3", "1678", RATING) == 4
    assert profile.tim_data.get()["3"]["1678"].defense_rating == 4


def test_mutations_build_new_snapshots():
    profile = Profile(team_data={"1678": TeamDataEntry()})
    before = profile.team_data.get()
    profile.team_data.set_value("254", STRENGTHS, "defense")
    assert set(before) == {"1678"}
    assert set(profile.team_data.get()) == {"1678", "254"}


def test_cancelled_subscription_is_not_called():
    profile = Profile()
    seen = []
    sub = profile.settings.subscribe(seen.append)
    sub.cancel()
    profile.settings.update(ProfileSettings(page=2))
    assert seen == []


def test_subscriber_may_touch_other_stores():
    profile = Profile()

    def mirror(settings):
        profile.team_data.set_value("1678", STRENGTHS, f"page {settings.page}")

    profile.settings.subscribe(mirror)
    profile.settings.update(ProfileSettings(page=3))
    assert profile.team_data.value_of("1678", STRENGTHS) == "page 3"


def test_set_on_update_rebinds_callback():
    first, second = [], []
    profile = Profile(on_update=lambda: first.append(1))
    profile.set_on_update(lambda: second.append(1))
    profile.settings.update(ProfileSettings(page=1))
    assert first == []
    assert second == [1]


def test_concurrent_set_value_keeps_every_write():
    profile = Profile()

    def writer(prefix):
        for i in range(50):
            profile.team_data.set_value(f"{prefix}-{i}", STRENGTHS, "x")

    threads = [threading.Thread(target=writer, args=(n,)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(profile.team_data.get()) == 8 * 50


def test_same_data_ignores_settings():
    a = Profile(settings=ProfileSettings(page=1), team_data={"1": TeamDataEntry(strengths="x")})
    b = Profile(team_data={"1": TeamDataEntry(strengths="x")})
    assert a.same_data(b)
    b.team_data.set_value("1", STRENGTHS, "y")
    assert not a.same_data(b)


def test_failing_subscriber_still_reaches_profile_callback():
    calls = []
    profile = Profile(on_update=lambda: calls.append(1))

    def broken(_value):
        raise RuntimeError("view gone")

    profile.settings.subscribe(broken)
    with pytest.raises(RuntimeError):
        profile.settings.update(ProfileSettings(page=3))
    assert profile.settings.get().page == 3
    assert calls == [1]
