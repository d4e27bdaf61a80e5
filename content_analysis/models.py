from __future__ import annotations

"""
Plain value types shared by the data source, encoders and report assembler.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterable, Iterator, Mapping, Optional, Sequence


Row = tuple[str, ...]


@dataclass(frozen=True)
class RectangularResult:
    """
    Rows returned by one query; every row has exactly `width` fields.

    Zero rows is a valid result, not an error.
    """

    width: int
    rows: tuple[Row, ...] = ()

    def __post_init__(self) -> None:
        for index, row in enumerate(self.rows):
            if len(row) != self.width:
                raise ValueError(
                    f"Row {index} has {len(row)} field(s), expected {self.width}: {row!r}"
                )

    @classmethod
    def from_rows(cls, width: int, rows: Iterable[Sequence[str]]) -> "RectangularResult":
        return cls(width=width, rows=tuple(tuple(str(value) for value in row) for row in rows))

    @property
    def is_empty(self) -> bool:
        return not self.rows

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[Row]:
        return iter(self.rows)


@dataclass(frozen=True)
class AvailabilityFlags:
    """
    Which optional subsystems (tables) exist in the snapshot being analyzed.
    """

    flags: Mapping[str, bool] = field(default_factory=dict)

    def is_available(self, name: str) -> bool:
        return bool(self.flags.get(name, False))

    def with_flag(self, name: str, value: bool) -> "AvailabilityFlags":
        updated = dict(self.flags)
        updated[name] = value
        return AvailabilityFlags(flags=updated)


class AnalysisState(str, Enum):
    PENDING = "pending"
    SKIPPED = "skipped"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class AnalysisOutcome:
    slug: str
    title: str
    state: AnalysisState = AnalysisState.PENDING
    row_count: int = 0
    artifact: Optional[Path] = None
    message: Optional[str] = None
