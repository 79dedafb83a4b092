from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from dataclasses import field
from pathlib import Path

from .responses import Outcome
from .types import DayProgressDict
from .types import PartNumber
from .types import PartProgressDict
from .utils import atomic_write_file


log = logging.getLogger(__name__)

SCHEMA_VERSION = "1"


@dataclass
class PartProgress:
    solved: bool = False
    answer: str | None = None
    attempts: list[str] = field(default_factory=list)
    low: int | None = None
    high: int | None = None

    def to_dict(self) -> PartProgressDict:
        return {
            "Solved": self.solved,
            "Answer": self.answer,
            "Attempts": list(self.attempts),
            "Low": self.low,
            "High": self.high,
        }

    @classmethod
    def from_dict(cls, data: PartProgressDict | None) -> PartProgress:
        if data is None:
            return cls()
        solved = data.get("Solved", False)
        answer = data.get("Answer")
        attempts = data.get("Attempts") or []
        low = data.get("Low")
        high = data.get("High")
        if not isinstance(solved, bool):
            raise ValueError(f"Solved must be a boolean, got {solved!r}")
        if answer is not None and not isinstance(answer, str):
            raise ValueError(f"Answer must be a string, got {answer!r}")
        if not isinstance(attempts, list):
            raise ValueError(f"Attempts must be a list, got {attempts!r}")
        for name, bound in ("Low", low), ("High", high):
            # bool is an int subclass, but never a bound
            if bound is not None and (not isinstance(bound, int) or isinstance(bound, bool)):
                raise ValueError(f"{name} must be an integer, got {bound!r}")
        return cls(
            solved=solved,
            answer=answer,
            attempts=[str(a) for a in attempts],
            low=low,
            high=high,
        )


@dataclass
class DayProgress:
    """
    Everything learned so far about one puzzle day: which parts are solved, with which
    answer, every answer tried, and the tightest known bounds on numeric answers.
    """

    day: int
    schema_version: str = SCHEMA_VERSION
    first: PartProgress = field(default_factory=PartProgress)
    second: PartProgress = field(default_factory=PartProgress)

    def part(self, part: PartNumber) -> PartProgress:
        if part == 1:
            return self.first
        if part == 2:
            return self.second
        raise ValueError(f"part must be 1 or 2, got {part!r}")

    @property
    def solved(self) -> bool:
        return self.first.solved and self.second.solved

    def to_json(self) -> str:
        data: DayProgressDict = {
            "SchemaVersion": self.schema_version,
            "Day": self.day,
            "First": self.first.to_dict(),
            "Second": self.second.to_dict(),
        }
        return json.dumps(data, indent=2)

    @classmethod
    def from_json(cls, txt: str) -> DayProgress:
        data = json.loads(txt)
        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object, got {type(data).__name__}")
        return cls(
            day=int(data.get("Day", 0)),
            schema_version=str(data.get("SchemaVersion", SCHEMA_VERSION)),
            first=PartProgress.from_dict(data.get("First")),
            second=PartProgress.from_dict(data.get("Second")),
        )


class ProgressStore:
    """
    Durable per-day progress, one JSON document per (year, day). The record returned by
    `load` is kept as `self.progress` and is what the bookkeeping methods update.
    """

    def __init__(self, year: int, directory: Path):
        self.year = year
        self.directory = Path(directory)
        self.progress: DayProgress | None = None

    def path_for(self, day: int) -> Path:
        return self.directory / f"{self.year}_{day:02d}_state.json"

    def load(self, day: int) -> DayProgress:
        path = self.path_for(day)
        progress = None
        try:
            progress = DayProgress.from_json(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            log.debug("no saved state at %s", path)
        except (OSError, ValueError, TypeError, AttributeError) as err:
            # UnicodeDecodeError is a ValueError
            log.error("failed to load the saved state %s: %r", path, err)
        else:
            if progress.day != day:
                msg = "failed to restore state, day does not match expectation: %s instead of %s"
                log.warning(msg, progress.day, day)
                progress = None
        if progress is None:
            progress = DayProgress(day=day)
        self.progress = progress
        return progress

    def save(self, progress: DayProgress | None = None) -> None:
        if progress is None:
            progress = self.progress
        if progress is None:
            return
        path = self.path_for(progress.day)
        log.debug("saving state for %d/%02d to %s", self.year, progress.day, path)
        atomic_write_file(path, progress.to_json())

    def record_attempt(self, part: PartNumber, text: str) -> None:
        self.progress.part(part).attempts.append(text)

    def update_bounds(self, part: PartNumber, value: int, outcome: Outcome) -> None:
        state = self.progress.part(part)
        if outcome is Outcome.TOO_HIGH:
            state.high = value if state.high is None else min(state.high, value)
        elif outcome is Outcome.TOO_LOW:
            state.low = value if state.low is None else max(state.low, value)

    def mark_solved(self, part: PartNumber, text: str) -> None:
        state = self.progress.part(part)
        state.solved = True
        state.answer = text
