"""Spreadsheet export (.xlsx) of team and TIM data.

One sheet per entity kind: a header row of readable data point names after
the key columns, then one row per team (team sheet) or per match/team pair
(TIM sheet). Export only; the JSON/zip codecs remain the exchange format.
"""

from __future__ import annotations

import io
from typing import Optional

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from standstrategist.domain.datapoints import TEAM_DATA_POINTS, TIM_DATA_POINTS
from standstrategist.profiles.profile import Profile

__all__ = ["export_spreadsheet", "TEAM_SHEET", "TIM_SHEET"]

TEAM_SHEET = "Team Data"
TIM_SHEET = "TIM Data"

# Excel rejects control chars: 0x00-0x08, 0x0B-0x0C, 0x0E-0x1F
_ILLEGAL_XLSX = {c for c in range(0x20) if c not in (0x09, 0x0A, 0x0D)}


def _clean(value):
    if isinstance(value, str):
        return value.translate({c: None for c in _ILLEGAL_XLSX})
    return value


def _sheet_title(base: str, profile_name: Optional[str]) -> str:
    # sheet titles are capped at 31 characters
    title = f"{base}({profile_name})" if profile_name else base
    return title[:31]


def _finish_sheet(ws) -> None:
    for cell in ws[1]:
        cell.font = Font(bold=True)
    for idx in range(1, ws.max_column + 1):
        ws.column_dimensions[get_column_letter(idx)].width = 18
    ws.freeze_panes = "A2"


def export_spreadsheet(profile: Profile, profile_name: Optional[str] = None) -> bytes:
    wb = Workbook()
    team_ws = wb.active
    team_ws.title = _sheet_title(TEAM_SHEET, profile_name)
    team_ws.append(["Team number"] + [dp.readable_name for dp in TEAM_DATA_POINTS])
    for team, entry in profile.team_data.get().items():
        team_ws.append([team] + [_clean(dp.value_in(entry)) for dp in TEAM_DATA_POINTS])
    _finish_sheet(team_ws)

    tim_ws = wb.create_sheet(_sheet_title(TIM_SHEET, profile_name))
    tim_ws.append(
        ["Match number", "Team number"] + [dp.readable_name for dp in TIM_DATA_POINTS]
    )
    for match, teams in profile.tim_data.get().items():
        for team, entry in teams.items():
            tim_ws.append([match, team] + [_clean(dp.value_in(entry)) for dp in TIM_DATA_POINTS])
    _finish_sheet(tim_ws)

    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()
