"""Date parsing and reporting period value objects."""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterator, Union

from .errors import ValidationError

DateLike = Union[date, datetime, str]


def parse_date(value: DateLike, field: str = "date") -> date:
    """Normalize ``value`` to a calendar date with no time-of-day component.

    Accepts ``date``, ``datetime`` and ISO-8601 strings. Anything else,
    including ``None``, raises ``ValidationError``.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            if len(text) > 10:
                return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
            return date.fromisoformat(text)
        except ValueError as exc:
            raise ValidationError(f"Invalid {field}: {value!r}") from exc
    raise ValidationError(f"Invalid {field}: {value!r}")


@dataclass(frozen=True)
class DateRange:
    start: date
    end: date

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValidationError(f"Range end {self.end} is before start {self.start}.")

    @classmethod
    def parse(cls, start: DateLike, end: DateLike) -> "DateRange":
        return cls(parse_date(start, "start_date"), parse_date(end, "end_date"))

    @property
    def days(self) -> int:
        return (self.end - self.start).days + 1

    def __contains__(self, value: object) -> bool:
        if not isinstance(value, date):
            return False
        return self.start <= value <= self.end

    def iter_days(self) -> Iterator[date]:
        current = self.start
        while current <= self.end:
            yield current
            current += timedelta(days=1)

    def previous(self) -> "DateRange":
        """The range of equal length ending the day before this one starts."""
        if (self.start - date.min).days < self.days:
            raise ValidationError(f"No {self.days}-day range precedes {self.start}.")
        end = self.start - timedelta(days=1)
        return DateRange(end - timedelta(days=self.days - 1), end)


@dataclass(frozen=True)
class DREPeriod:
    year: int
    month: int

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise ValidationError(f"Month must be between 1 and 12, got {self.month}.")
        if not 1 <= self.year <= 9999:
            raise ValidationError(f"Invalid year: {self.year}.")

    @property
    def start(self) -> date:
        return date(self.year, self.month, 1)

    @property
    def end(self) -> date:
        return date(self.year, self.month, calendar.monthrange(self.year, self.month)[1])

    @property
    def date_range(self) -> DateRange:
        return DateRange(self.start, self.end)

    @property
    def label(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

    def previous(self) -> "DREPeriod":
        if self.month == 1:
            if self.year == 1:
                raise ValidationError(f"No month precedes {self.label}.")
            return DREPeriod(self.year - 1, 12)
        return DREPeriod(self.year, self.month - 1)
