"""Data point schema for team and team-in-match (TIM) records.

Each ``DataPoint`` names one typed field of an entry dataclass. Entries are
frozen, so ``set_value_in`` returns a new entry instead of mutating. The
ordered descriptor tuples are built once at import and shared read-only.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Any, Callable, Dict, Generic, Optional, Tuple, Type, TypeVar

__all__ = [
    "DataType",
    "DataPoint",
    "TeamDataEntry",
    "TimDataEntry",
    "TEAM_DATA_POINTS",
    "TIM_DATA_POINTS",
    "for_each_typed",
    "entry_to_dict",
    "entry_from_dict",
]

E = TypeVar("E")


class DataType(str, Enum):
    STRING = "string"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    DROPDOWN = "dropdown"

    @property
    def python_type(self) -> type:
        return _PYTHON_TYPES[self]


_PYTHON_TYPES = {
    DataType.STRING: str,
    DataType.INTEGER: int,
    DataType.BOOLEAN: bool,
    DataType.DROPDOWN: str,
}


@dataclass(frozen=True, slots=True)
class TeamDataEntry:
    can_intake_ground: bool = False
    strengths: str = ""
    weaknesses: str = ""
    team_notes: str = ""


@dataclass(frozen=True, slots=True)
class TimDataEntry:
    played_defense: bool = False
    defense_rating: int = 0
    defense_timestamp: str = ""
    played_against_defense: bool = False
    tim_notes: str = ""
    broken_mechanism: str = ""
    tim_auto_strategies: str = ""


@dataclass(frozen=True)
class DataPoint(Generic[E]):
    """Descriptor for one named, typed field of an entry type.

    Attributes
    ----------
    key: Field / JSON key on the entry dataclass.
    readable_name: Label used in spreadsheets and UIs.
    type: Scalar kind driving merge and validation rules.
    entry_type: The owning entry dataclass.
    options: Allowed values for DROPDOWN points (empty otherwise).
    bounds: Inclusive (min, max) range for INTEGER points, if limited.
    """

    key: str
    readable_name: str
    type: DataType
    entry_type: Type[E]
    options: Tuple[str, ...] = ()
    bounds: Optional[Tuple[int, int]] = None

    def value_in(self, entry: E) -> Any:
        return getattr(entry, self.key)

    def set_value_in(self, entry: E, value: Any) -> E:
        return replace(entry, **{self.key: value})

    @property
    def default(self) -> Any:
        return self.value_in(self.entry_type())

    def accepts(self, value: Any) -> bool:
        # bool is an int subclass; keep the two kinds apart
        if self.type is DataType.INTEGER:
            return isinstance(value, int) and not isinstance(value, bool)
        return isinstance(value, self.type.python_type)


TEAM_DATA_POINTS: Tuple[DataPoint[TeamDataEntry], ...] = (
    DataPoint("can_intake_ground", "Can Intake Ground", DataType.BOOLEAN, TeamDataEntry),
    DataPoint("strengths", "Strengths", DataType.STRING, TeamDataEntry),
    DataPoint("weaknesses", "Weaknesses", DataType.STRING, TeamDataEntry),
    DataPoint("team_notes", "Team Notes", DataType.STRING, TeamDataEntry),
)

TIM_DATA_POINTS: Tuple[DataPoint[TimDataEntry], ...] = (
    DataPoint("tim_auto_strategies", "Auto Strategies", DataType.STRING, TimDataEntry),
    DataPoint("played_defense", "Played Defense", DataType.BOOLEAN, TimDataEntry),
    DataPoint(
        "defense_rating", "Defense Rating", DataType.INTEGER, TimDataEntry, bounds=(0, 5)
    ),
    DataPoint("defense_timestamp", "Defense Timestamp", DataType.STRING, TimDataEntry),
    DataPoint("played_against_defense", "Played Against Defense", DataType.BOOLEAN, TimDataEntry),
    DataPoint("broken_mechanism", "Broken Mechanism", DataType.STRING, TimDataEntry),
    DataPoint("tim_notes", "Match Notes", DataType.STRING, TimDataEntry),
)


def for_each_typed(
    data_points: Tuple[DataPoint[E], ...],
    *,
    on_string: Callable[[DataPoint[E]], None],
    on_int: Callable[[DataPoint[E]], None],
    on_boolean: Callable[[DataPoint[E]], None],
    on_dropdown: Callable[[DataPoint[E]], None],
) -> None:
    """Run the callback matching each data point's type, in schema order."""
    handlers = {
        DataType.STRING: on_string,
        DataType.INTEGER: on_int,
        DataType.BOOLEAN: on_boolean,
        DataType.DROPDOWN: on_dropdown,
    }
    for data_point in data_points:
        handlers[data_point.type](data_point)


def entry_to_dict(entry: Any) -> Dict[str, Any]:
    return {f.name: getattr(entry, f.name) for f in fields(entry)}


def entry_from_dict(
    raw: Dict[str, Any], data_points: Tuple[DataPoint[E], ...], entry_type: Type[E]
) -> E:
    """Build an entry from decoded JSON, defaulting absent keys.

    Unknown keys are ignored. A value of the wrong type raises ``TypeError``
    naming the offending key; callers translate it into a decode error.
    """
    entry = entry_type()
    for data_point in data_points:
        if data_point.key not in raw:
            continue
        value = raw[data_point.key]
        if not data_point.accepts(value):
            raise TypeError(
                f"{data_point.key}: expected {data_point.type.value}, got {type(value).__name__}"
            )
        allowed = data_point.options
        if allowed and value != data_point.default and value not in allowed:
            raise TypeError(f"{data_point.key}: {value!r} is not one of {list(allowed)}")
        if data_point.bounds is not None:
            low, high = data_point.bounds
            if not low <= value <= high:
                raise TypeError(f"{data_point.key}: {value} is outside {low}-{high}")
        entry = data_point.set_value_in(entry, value)
    return entry
