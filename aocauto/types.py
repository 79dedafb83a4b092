from __future__ import annotations

from typing import Literal
from typing import Optional
from typing import TypedDict


PartNumber = Literal[1, 2]
"""The part of a given puzzle, 1 or 2"""


class PartProgressDict(TypedDict):
    """Persisted state of one part of a puzzle, as stored in the day's state file"""

    Solved: bool
    Answer: Optional[str]
    Attempts: list[str]
    Low: Optional[int]
    High: Optional[int]


class DayProgressDict(TypedDict):
    """Persisted state of a puzzle day. Key order is the on-disk order."""

    SchemaVersion: str
    Day: int
    First: PartProgressDict
    Second: PartProgressDict
