import json
import os

from factories import make_profile, make_schedule, schedule_bytes

from standstrategist.domain.datapoints import TeamDataEntry
from standstrategist.main import main
from standstrategist.profiles.storage import ProfileStorage


def _run(capsys, data_dir, *argv):
    code = main(["--data-dir", data_dir, *argv])
    out, err = capsys.readouterr()
    return code, (json.loads(out) if out.strip() else None), err


def test_create_list_switch(tmp_path, capsys):
    data = str(tmp_path / "data")
    assert _run(capsys, data, "create", "regional")[1] == {"created": "regional"}
    _run(capsys, data, "create", "champs")
    code, listing, _ = _run(capsys, data, "list")
    assert code == 0
    assert listing == {"current": "champs", "profiles": ["regional", "champs"]}

    _run(capsys, data, "switch", "regional")
    assert _run(capsys, data, "list")[1]["current"] == "regional"


def test_user_facing_errors_go_to_stderr(tmp_path, capsys):
    data = str(tmp_path / "data")
    _run(capsys, data, "create", "regional")
    code, out, err = _run(capsys, data, "create", "regional")
    assert code == 1
    assert out is None
    assert json.loads(err) == {"error": "Profile 'regional' already exists"}


def test_rename_and_delete(tmp_path, capsys):
    data = str(tmp_path / "data")
    _run(capsys, data, "create", "a")
    _run(capsys, data, "create", "b")
    assert _run(capsys, data, "rename", "a", "alpha")[1] == {"renamed": "a", "to": "alpha"}

    code, out, _ = _run(capsys, data, "delete", "alpha")
    assert code == 0
    assert os.path.isfile(out["backup"])
    assert _run(capsys, data, "list")[1]["profiles"] == ["b"]


def test_load_schedule(tmp_path, capsys):
    data = str(tmp_path / "data")
    schedule = tmp_path / "schedule.json"
    schedule.write_bytes(schedule_bytes(make_schedule(("1", "2", "3"))))
    _run(capsys, data, "create", "regional")

    code, out, _ = _run(capsys, data, "load-schedule", str(schedule))
    assert code == 0
    assert out == {"profile": "regional", "state": "collection", "matches": 3}


def test_merge_into_new_profile(tmp_path, capsys):
    data = str(tmp_path / "data")
    storage = ProfileStorage(data)
    _run(capsys, data, "create", "a")
    _run(capsys, data, "create", "b")
    storage.save_profile("a", make_profile(team_data={"254": TeamDataEntry(strengths="x")}))
    storage.save_profile("b", make_profile(team_data={"254": TeamDataEntry(strengths="y")}))

    code, out, _ = _run(capsys, data, "merge", "a", "b", "--new", "combined")
    assert code == 0
    assert out["status"] == "completed"
    assert out["merge"] == "ok"
    assert list(out["outputs"].values()) == ["ok"]
    assert storage.load_profile("combined").team_data.get()["254"].strengths == "x\ny"


def test_merge_into_current_profile_fails(tmp_path, capsys):
    data = str(tmp_path / "data")
    _run(capsys, data, "create", "a")
    _run(capsys, data, "create", "b")
    code, out, _ = _run(capsys, data, "merge", "a", "b", "--to", "b")
    assert code == 1
    assert list(out["outputs"].values()) == ["Can't overwrite the currently loaded profile"]


def test_export_zip_and_import(tmp_path, capsys):
    data = str(tmp_path / "data")
    exports = str(tmp_path / "exports")
    _run(capsys, data, "create", "a")

    code, out, _ = _run(capsys, data, "export-zip", "a", "--folder", exports)
    assert code == 0
    (written,) = out["files"]
    assert os.path.dirname(written) == exports

    code, out, _ = _run(capsys, data, "import-zip", written, "--name", "restored")
    assert code == 0
    assert "restored" in _run(capsys, data, "list")[1]["profiles"]


def test_upload_without_configuration_fails(tmp_path, capsys):
    data = str(tmp_path / "data")
    _run(capsys, data, "create", "a")
    code, out, err = _run(
        capsys, data, "upload", "a", "--username", "alice", "--remote-url", "", "--remote-auth", ""
    )
    assert code == 1
    assert out is None
    assert json.loads(err) == {"error": "Grosbeak URL and auth must both be set"}


def test_load_schedule_without_current_profile_fails(tmp_path, capsys):
    data = str(tmp_path / "data")
    schedule = tmp_path / "schedule.json"
    schedule.write_bytes(schedule_bytes(make_schedule()))
    code, out, err = _run(capsys, data, "load-schedule", str(schedule))
    assert code == 1
    assert out is None
    assert "No current profile selected" in json.loads(err)["error"]
