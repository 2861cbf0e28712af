import threading

import pytest

from standstrategist.domain.datapoints import TeamDataEntry
from standstrategist.errors import OperationInProgressError, SourceUnselectedError
from standstrategist.services.event_bus import EventBus, ProfileEvent
from standstrategist.services.operations import (
    MERGE_STEP_ID,
    Error,
    OperationStatus,
    ProfileOperation,
    ProfileOperationInput,
    ProfileOperationOutput,
    Success,
)

from factories import make_profile


class FakeInput(ProfileOperationInput):
    def __init__(self, profile=None, error=None, gate=None):
        super().__init__()
        self.profile = profile if profile is not None else make_profile()
        self.error = error
        self.gate = gate
        self.calls = 0

    def _read(self):
        self.calls += 1
        if self.gate is not None:
            self.gate.wait(2)
        if self.error is not None:
            raise self.error
        return self.profile


class UnselectedInput(ProfileOperationInput):
    def validate(self):
        raise SourceUnselectedError("Profile not selected")


class FakeOutput(ProfileOperationOutput):
    def __init__(self, error=None):
        super().__init__()
        self.error = error
        self.written = []

    def _write(self, profile):
        if self.error is not None:
            raise self.error
        self.written.append(profile)


def test_initial_state_is_idle():
    op = ProfileOperation()
    assert op.status is OperationStatus.IDLE
    assert op.state.input_results == {}
    assert op.state.merge_result is None


def test_happy_path_merges_in_input_order():
    first = FakeInput(make_profile(team_data={"254": TeamDataEntry(strengths="first")}))
    second = FakeInput(make_profile(team_data={"254": TeamDataEntry(strengths="second")}))
    out = FakeOutput()
    op = ProfileOperation([first, second], [out])

    state = op.run()

    assert state.status is OperationStatus.COMPLETED
    assert list(state.input_results) == [first.id, second.id]
    assert all(r == Success() for r in state.input_results.values())
    assert state.merge_result == Success()
    assert state.output_results == {out.id: Success()}
    assert out.written[0].team_data.get()["254"].strengths == "first\nsecond"
    assert op.merged is out.written[0]


def test_failing_input_aborts_the_run():
    boom = RuntimeError("unreadable")
    ok = FakeInput()
    bad = FakeInput(error=boom)
    skipped = FakeInput()
    out = FakeOutput()
    op = ProfileOperation([ok, bad, skipped], [out])

    state = op.run()

    assert state.status is OperationStatus.COMPLETED
    assert state.input_results[ok.id] == Success()
    assert state.input_results[bad.id] == Error(boom)
    assert skipped.id not in state.input_results
    assert skipped.calls == 0
    assert state.merge_result is None
    assert state.output_results == {}
    assert out.written == []


def test_outputs_are_independent():
    failing = FakeOutput(error=OSError("disk full"))
    after = FakeOutput()
    op = ProfileOperation([FakeInput()], [failing, after])

    state = op.run()

    result = state.output_results[failing.id]
    assert not result.ok
    assert result.message == "OSError: disk full"
    assert state.output_results[after.id] == Success()
    assert len(after.written) == 1


def test_unselected_step_records_readable_error():
    step = UnselectedInput()
    state = ProfileOperation([step], [FakeOutput()]).run()
    result = state.input_results[step.id]
    assert isinstance(result.exception, SourceUnselectedError)
    assert result.message == "Profile not selected"


def test_no_inputs_merges_to_empty_profile():
    out = FakeOutput()
    state = ProfileOperation([], [out]).run()
    assert state.merge_result == Success()
    assert out.written[0].match_schedule.get() == {}


def test_events_follow_execution_order():
    bus = EventBus()
    seen = []
    bus.subscribe(ProfileEvent.STATUS_CHANGED, lambda e: seen.append(("status", e.payload)))
    bus.subscribe(
        ProfileEvent.STEP_COMPLETED,
        lambda e: seen.append((e.payload["kind"], e.payload["step_id"])),
    )
    step_in = FakeInput()
    step_out = FakeOutput()
    ProfileOperation([step_in], [step_out], event_bus=bus).run()

    assert seen == [
        ("status", OperationStatus.RUNNING),
        ("input", step_in.id),
        ("merge", MERGE_STEP_ID),
        ("output", step_out.id),
        ("status", OperationStatus.COMPLETED),
    ]


def test_rerun_clears_previous_results():
    step = FakeInput(error=ValueError("first run"))
    op = ProfileOperation([step], [FakeOutput()])
    assert not op.run().input_results[step.id].ok

    step.error = None
    state = op.run()
    assert state.input_results[step.id] == Success()
    assert len(state.output_results) == 1


def test_start_while_running_is_rejected():
    gate = threading.Event()
    op = ProfileOperation([FakeInput(gate=gate)], [FakeOutput()])
    op.start()
    try:
        assert op.status is OperationStatus.RUNNING
        with pytest.raises(OperationInProgressError):
            op.start()
        with pytest.raises(OperationInProgressError):
            op.run()
    finally:
        gate.set()
    state = op.wait(2)
    assert state.status is OperationStatus.COMPLETED
    assert len(state.output_results) == 1


def test_merge_failure_propagates_after_completion(monkeypatch):
    def broken_merge(_profiles):
        raise ZeroDivisionError("bug")

    monkeypatch.setattr(
        "standstrategist.services.operations.pipeline.merge_profiles", broken_merge
    )
    step = FakeInput()
    op = ProfileOperation([step], [FakeOutput()])
    with pytest.raises(ZeroDivisionError):
        op.run()
    assert op.status is OperationStatus.COMPLETED
    assert op.state.input_results[step.id] == Success()
    assert op.state.merge_result is None
