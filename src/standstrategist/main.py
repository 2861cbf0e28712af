"""CLI entry point for managing, merging and exchanging Stand Strategist profiles."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any

from standstrategist.core import filesystem
from standstrategist.errors import (
    ConfigurationMissingError,
    SourceUnselectedError,
    StandStrategistError,
    describe,
)
from standstrategist.profiles.remote import RemoteClient
from standstrategist.profiles.storage import ProfileStorage
from standstrategist.services.app_settings import AppSettings
from standstrategist.services.operations import OperationState, ProfileOperation, Success
from standstrategist.services.operations import presets
from standstrategist.services.operations.inputs import InputFromProfile
from standstrategist.services.operations.outputs import OutputToNewProfile, OutputToProfile
from standstrategist.services.session import ProfileSession, SessionState


def _emit(data: Any) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def _context(args: argparse.Namespace) -> tuple[ProfileStorage, AppSettings]:
    storage = ProfileStorage(args.data_dir)
    app_settings = AppSettings(storage)
    app_settings.read_settings()
    return storage, app_settings


def _summarize(operation: ProfileOperation, state: OperationState) -> dict[str, Any]:
    def _result(result) -> str:
        return "ok" if isinstance(result, Success) else result.message

    steps = {s.id: s.describe() for s in operation.inputs + operation.outputs}
    summary: dict[str, Any] = {
        "status": state.status.value,
        "inputs": {steps[k]: _result(v) for k, v in state.input_results.items()},
        "merge": _result(state.merge_result) if state.merge_result else None,
        "outputs": {steps[k]: _result(v) for k, v in state.output_results.items()},
    }
    written = [getattr(s, "written_path", None) for s in operation.outputs]
    if any(written):
        summary["files"] = [w for w in written if w]
    return summary


def _run_operation(operation: ProfileOperation) -> int:
    state = operation.run()
    _emit(_summarize(operation, state))
    results = list(state.input_results.values()) + list(state.output_results.values())
    return 0 if all(isinstance(r, Success) for r in results) else 1


# ----------------------------------------------------------------------
# Registry commands
# ----------------------------------------------------------------------
def cmd_list(args: argparse.Namespace) -> int:
    _storage, app_settings = _context(args)
    state = app_settings.state
    _emit({"current": state.current_profile, "profiles": list(state.profiles)})
    return 0


def cmd_create(args: argparse.Namespace) -> int:
    _storage, app_settings = _context(args)
    _emit({"created": app_settings.create_profile(args.name)})
    return 0


def cmd_rename(args: argparse.Namespace) -> int:
    _storage, app_settings = _context(args)
    _emit({"renamed": args.old, "to": app_settings.rename_profile(args.old, args.new)})
    return 0


def cmd_delete(args: argparse.Namespace) -> int:
    _storage, app_settings = _context(args)
    _emit({"deleted": args.name, "backup": app_settings.delete_profile(args.name)})
    return 0


def cmd_switch(args: argparse.Namespace) -> int:
    _storage, app_settings = _context(args)
    app_settings.switch_profile(args.name)
    _emit({"current": args.name})
    return 0


def cmd_load_schedule(args: argparse.Namespace) -> int:
    storage, app_settings = _context(args)
    session = ProfileSession(storage, app_settings)
    state = session.load(skip_profile_selection=True)
    if state is SessionState.SELECTING_PROFILE:
        raise SourceUnselectedError("No current profile selected; run 'switch' first")
    try:
        if state is SessionState.SELECTING_MATCH_SCHEDULE or args.replace:
            state = session.load_match_schedule(filesystem.read_bytes(args.file))
    finally:
        session.close()
    _emit(
        {
            "profile": session.profile_name,
            "state": state.value,
            "matches": len(session.profile.match_schedule.get()),
        }
    )
    return 0


# ----------------------------------------------------------------------
# Operation commands
# ----------------------------------------------------------------------
def cmd_merge(args: argparse.Namespace) -> int:
    storage, app_settings = _context(args)
    inputs = [InputFromProfile(storage, name) for name in args.sources]
    if args.new:
        outputs = [OutputToNewProfile(storage, app_settings, args.new)]
    else:
        outputs = [OutputToProfile(storage, app_settings, args.to)]
    return _run_operation(ProfileOperation(inputs, outputs))


def cmd_preset(args: argparse.Namespace) -> int:
    storage, app_settings = _context(args)
    remote = RemoteClient(args.remote_url, args.remote_auth)
    preset = args.make_preset(args)
    if isinstance(preset, (presets.Upload, presets.Download)) and not remote.is_configured:
        raise ConfigurationMissingError("Grosbeak URL and auth must both be set")
    operation = presets.build_operation(preset, storage, app_settings, remote=remote)
    # fill in the steps the preset leaves unselected
    for step in operation.inputs + operation.outputs:
        for attr in ("path", "folder", "username", "name"):
            value = getattr(args, attr, None)
            if value and hasattr(step, attr) and not getattr(step, attr):
                setattr(step, attr, value)
    return _run_operation(operation)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="standstrategist")
    p.add_argument("--data-dir", default=None, help="Data directory (profiles, trash, settings)")
    p.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    sub.add_parser("list", help="List known profiles").set_defaults(func=cmd_list)

    create = sub.add_parser("create", help="Create an empty profile and make it current")
    create.add_argument("name")
    create.set_defaults(func=cmd_create)

    rename = sub.add_parser("rename", help="Rename a profile")
    rename.add_argument("old")
    rename.add_argument("new")
    rename.set_defaults(func=cmd_rename)

    delete = sub.add_parser("delete", help="Delete a profile (backed up to trash)")
    delete.add_argument("name")
    delete.set_defaults(func=cmd_delete)

    switch = sub.add_parser("switch", help="Select the current profile")
    switch.add_argument("name")
    switch.set_defaults(func=cmd_switch)

    schedule = sub.add_parser("load-schedule", help="Install a match schedule file")
    schedule.add_argument("file")
    schedule.add_argument("--replace", action="store_true", help="Replace an existing schedule")
    schedule.set_defaults(func=cmd_load_schedule)

    merge = sub.add_parser("merge", help="Merge profiles (first has highest priority)")
    merge.add_argument("sources", nargs="+")
    target = merge.add_mutually_exclusive_group(required=True)
    target.add_argument("--to", help="Existing profile to overwrite")
    target.add_argument("--new", help="Name of a new profile to create")
    merge.set_defaults(func=cmd_merge)

    def preset_parser(name: str, help_text: str, make_preset) -> argparse.ArgumentParser:
        sp = sub.add_parser(name, help=help_text)
        sp.add_argument("--remote-url", default=None, help=argparse.SUPPRESS)
        sp.add_argument("--remote-auth", default=None, help=argparse.SUPPRESS)
        sp.set_defaults(func=cmd_preset, make_preset=make_preset)
        return sp

    sp = preset_parser("import-zip", "Create a profile from a .zip", lambda a: presets.ImportZip())
    sp.add_argument("path")
    sp.add_argument("--name", required=True)

    sp = preset_parser(
        "import-folder", "Create a profile from a folder", lambda a: presets.ImportFolder()
    )
    sp.add_argument("path")
    sp.add_argument("--name", required=True)

    sp = preset_parser(
        "duplicate", "Copy a profile into a new one", lambda a: presets.Duplicate(a.profile)
    )
    sp.add_argument("profile")
    sp.add_argument("--name", required=True)

    sp = preset_parser(
        "export-zip", "Export a profile as .zip", lambda a: presets.ExportZip(a.profile)
    )
    sp.add_argument("profile")
    sp.add_argument("--folder", required=True)

    sp = preset_parser(
        "export-folder", "Export a profile's JSON parts", lambda a: presets.ExportFolder(a.profile)
    )
    sp.add_argument("profile")
    sp.add_argument("--path", required=True)

    sp = preset_parser(
        "export-spreadsheet",
        "Export a profile as .xlsx",
        lambda a: presets.ExportSpreadsheet(a.profile),
    )
    sp.add_argument("profile")
    sp.add_argument("--folder", required=True)

    sp = preset_parser("upload", "Push a profile to Grosbeak", lambda a: presets.Upload(a.profile))
    sp.add_argument("profile")
    sp.add_argument("--username", required=True)

    sp = preset_parser("download", "Pull data from Grosbeak", lambda a: presets.Download())
    sp.add_argument("--username", required=True)
    sp.add_argument("--name", required=True)

    return p


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        return args.func(args)
    except StandStrategistError as e:
        print(json.dumps({"error": describe(e)}), file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
