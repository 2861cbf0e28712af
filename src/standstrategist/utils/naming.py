"""Centralized profile name and export filename utilities."""

from __future__ import annotations

import time

# Characters rejected by common filesystems (see https://stackoverflow.com/a/2703882/)
_ILLEGAL_CHARS = frozenset("|\\?*<\":>+[]/'")


def clean_file_name(value: str) -> str:
    return "".join(ch for ch in value if ch not in _ILLEGAL_CHARS)


def epoch_millis() -> int:
    return int(time.time() * 1000)


def timestamped_export_name(extension: str) -> str:
    return f"{epoch_millis()}.stand-strategist.{extension.lstrip('.')}"
