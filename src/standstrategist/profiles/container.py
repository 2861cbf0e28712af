"""Zip container codec: the four JSON parts packed into one archive."""

from __future__ import annotations

import io
import zipfile
from typing import Callable, Dict, Optional

from standstrategist.errors import DecodeError, EncodeError
from standstrategist.profiles.codec import export_files, import_files
from standstrategist.profiles.profile import Profile

__all__ = ["pack_zip", "unpack_zip", "read_zip_entries"]


def pack_zip(profile: Profile) -> bytes:
    buffer = io.BytesIO()
    try:
        with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            for name, content in export_files(profile).items():
                zf.writestr(name, content.encode("utf-8"))
    except (OSError, zipfile.LargeZipFile) as e:
        raise EncodeError(f"Failed writing profile archive: {e}") from e
    return buffer.getvalue()


def read_zip_entries(data: bytes) -> Dict[str, bytes]:
    try:
        with zipfile.ZipFile(io.BytesIO(data)) as zf:
            return {
                info.filename: zf.read(info)
                for info in zf.infolist()
                if not info.is_dir()
            }
    except (zipfile.BadZipFile, OSError, EOFError) as e:
        raise DecodeError(f"Not a readable zip archive: {e}") from e


def unpack_zip(data: bytes, on_update: Optional[Callable[[], None]] = None) -> Profile:
    return import_files(read_zip_entries(data), on_update=on_update)
