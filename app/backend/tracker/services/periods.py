"""Calendar quarter helpers shared by the report and dashboard builders."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime


def quarter_of(value: date | datetime) -> int:
    """Calendar quarter (1..4), i.e. ceil(month / 3)."""

    return (value.month - 1) // 3 + 1


@dataclass(frozen=True, slots=True)
class PeriodFilter:
    year: int
    quarter: int

    def __post_init__(self) -> None:
        if self.quarter not in (1, 2, 3, 4):
            raise ValueError(f"quarter must be within 1..4, got {self.quarter}.")

    @classmethod
    def for_date(cls, value: date | datetime) -> PeriodFilter:
        return cls(year=value.year, quarter=quarter_of(value))

    @property
    def start(self) -> datetime:
        return datetime(self.year, 3 * (self.quarter - 1) + 1, 1)

    @property
    def end(self) -> datetime:
        """Exclusive upper bound: first instant of the following quarter."""

        if self.quarter == 4:
            return datetime(self.year + 1, 1, 1)
        return datetime(self.year, 3 * self.quarter + 1, 1)

    def contains(self, value: date | datetime) -> bool:
        return value.year == self.year and quarter_of(value) == self.quarter
