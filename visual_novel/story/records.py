"""
Scene records - one row of the story table.

A record is a read-only mapping from lower-cased header name to trimmed
string value. Unknown columns are preserved. Typed access goes through
accessors that apply an explicit default per field, so "absent" is
always None and never an empty string.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterator


# Known columns, in canonical order
SCENE_FIELDS = (
    "id",
    "text",
    "image",
    "audio",
    "sfx",
    "sfx_vol",
    "option1",
    "target1",
    "option2",
    "target2",
)

# (label column, target column) for each choice slot
CHOICE_FIELDS = (
    ("option1", "target1"),
    ("option2", "target2"),
)

_LEADING_NUMBER = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def parse_percent(value: str | float | int | None) -> float | None:
    """Parse a percentage value.

    Strings are read up to the first non-numeric character, so "150%"
    gives 150.0. Blank, non-numeric and NaN inputs give None.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        match = _LEADING_NUMBER.match(value.strip())
        if not match:
            return None
        number = float(match.group(0))
    if math.isnan(number):
        return None
    return number


def _optional(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


@dataclass(frozen=True)
class Choice:
    """A player choice: button label and destination scene id."""
    label: str
    target: str


@dataclass(frozen=True)
class SceneRecord(Mapping):
    """
    One scene of the story.

    Example:
        record = SceneRecord.from_fields({"id": "start", "text": "Hello"})
        record["text"]          # "Hello"
        record.image            # None
        record.choices          # ()
    """

    columns: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        # Freeze the underlying mapping
        object.__setattr__(self, "columns", MappingProxyType(dict(self.columns)))

    @classmethod
    def from_fields(cls, fields: Mapping[str, str]) -> "SceneRecord":
        """Build a record, normalising names to lower case and trimming values."""
        return cls({
            str(name).strip().lower(): str(value).strip()
            for name, value in fields.items()
        })

    # Mapping interface

    def __getitem__(self, key: str) -> str:
        return self.columns[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self.columns)

    def __len__(self) -> int:
        return len(self.columns)

    def __hash__(self) -> int:
        return hash(tuple(sorted(self.columns.items())))

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SceneRecord):
            return dict(self.columns) == dict(other.columns)
        return NotImplemented

    # Typed accessors

    @property
    def scene_id(self) -> str:
        return self.columns.get("id", "")

    @property
    def text(self) -> str:
        return self.columns.get("text", "")

    @property
    def image(self) -> str | None:
        """Background image file name (relative to the image root)."""
        return _optional(self.columns.get("image"))

    @property
    def audio(self) -> str | None:
        """Background music file name (relative to the audio root)."""
        return _optional(self.columns.get("audio"))

    @property
    def sfx(self) -> str | None:
        """One-shot effect file name (relative to the audio root)."""
        return _optional(self.columns.get("sfx"))

    @property
    def effect_volume_percent(self) -> float | None:
        """Requested effect volume in percent, None when absent or non-numeric."""
        return parse_percent(_optional(self.columns.get("sfx_vol")))

    @property
    def choices(self) -> tuple[Choice, ...]:
        """Choices whose label and target are both present."""
        found = []
        for label_field, target_field in CHOICE_FIELDS:
            label = _optional(self.columns.get(label_field))
            target = _optional(self.columns.get(target_field))
            if label and target:
                found.append(Choice(label=label, target=target))
        return tuple(found)

    @property
    def is_ending(self) -> bool:
        """True for scenes that offer no way forward."""
        return not self.choices

    def __repr__(self) -> str:
        return f"SceneRecord(id={self.scene_id!r}, text={self.text[:30]!r})"


__all__ = [
    "SCENE_FIELDS",
    "CHOICE_FIELDS",
    "Choice",
    "SceneRecord",
    "parse_percent",
]
