"""Filesystem utility helpers."""

from __future__ import annotations
import os
from typing import Dict


def ensure_dir(path: str) -> None:
    os.makedirs(path, exist_ok=True)


def write_text(path: str, content: str, encoding: str = "utf-8") -> None:
    write_bytes(path, content.encode(encoding))


def write_bytes(path: str, content: bytes) -> None:
    dir_part = os.path.dirname(path)
    if dir_part:
        ensure_dir(dir_part)
    with open(path, "wb") as fh:
        fh.write(content)


def write_atomic(path: str, content: str, encoding: str = "utf-8") -> None:
    """Write via a sibling temp file and rename so readers never see a torn file."""
    tmp = path + ".tmp"
    write_text(tmp, content, encoding=encoding)
    os.replace(tmp, path)


def read_text(path: str, encoding: str = "utf-8") -> str:
    with open(path, "r", encoding=encoding) as fh:
        return fh.read()


def read_bytes(path: str) -> bytes:
    with open(path, "rb") as fh:
        return fh.read()


def read_folder(path: str) -> Dict[str, bytes]:
    """Map file name to contents for every regular file directly inside ``path``."""
    files: Dict[str, bytes] = {}
    for name in sorted(os.listdir(path)):
        full = os.path.join(path, name)
        if os.path.isfile(full):
            files[name] = read_bytes(full)
    return files
