# -*- coding: utf-8 -*-
from __future__ import annotations

from calendar import monthrange
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable

MONTHS_ES = [
    "Enero", "Febrero", "Marzo", "Abril", "Mayo", "Junio",
    "Julio", "Agosto", "Septiembre", "Octubre", "Noviembre", "Diciembre",
]

FIRST, SECOND = "first", "second"


@dataclass(frozen=True, order=False)
class BiweeklyPeriod:
    """Квинсена: 1–15 или 16–последний день месяца. month: 1..12."""

    year: int
    month: int
    half: str

    def __post_init__(self):
        if not 1 <= int(self.year) <= 9999:
            raise ValueError(f"year must be 1..9999, got {self.year}")
        if not 1 <= int(self.month) <= 12:
            raise ValueError(f"month must be 1..12, got {self.month}")
        if self.half not in (FIRST, SECOND):
            raise ValueError(f"half must be 'first' or 'second', got {self.half!r}")

    @property
    def start_date(self) -> date:
        return date(self.year, self.month, 1 if self.half == FIRST else 16)

    @property
    def end_date(self) -> date:
        if self.half == FIRST:
            return date(self.year, self.month, 15)
        return date(self.year, self.month, monthrange(self.year, self.month)[1])

    @property
    def first_day(self) -> int:
        return self.start_date.day

    @property
    def last_day(self) -> int:
        return self.end_date.day

    @property
    def key(self) -> str:
        return f"{self.year:04d}-{self.month:02d}-{self.half}"

    @property
    def label(self) -> str:
        rng = "1-15" if self.half == FIRST else f"16-{self.last_day}"
        return f"{MONTHS_ES[self.month - 1]} {self.year} ({rng})"

    def days(self) -> list[int]:
        return list(range(self.first_day, self.last_day + 1))

    def contains(self, d: date) -> bool:
        return self.start_date <= d <= self.end_date

    def contains_day(self, day: int) -> bool:
        return self.first_day <= int(day) <= self.last_day

    def previous(self) -> "BiweeklyPeriod":
        return period_for_date(self.start_date - timedelta(days=1))

    def next(self) -> "BiweeklyPeriod":
        return period_for_date(self.end_date + timedelta(days=1))

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "year": self.year,
            "month": self.month,
            "period": self.half,
            "start": self.start_date.isoformat(),
            "end": self.end_date.isoformat(),
            "label": self.label,
        }


def period_for(year: int, month: int, day: int) -> BiweeklyPeriod:
    return BiweeklyPeriod(int(year), int(month), FIRST if int(day) <= 15 else SECOND)


def period_for_date(d: date) -> BiweeklyPeriod:
    return period_for(d.year, d.month, d.day)


def current_period(now: date | datetime | None = None) -> BiweeklyPeriod:
    now = now or date.today()
    return period_for_date(now)


def parse_period_key(qs: str | None, now: date | None = None) -> BiweeklyPeriod:
    """'2025-06-second' -> период; мусор или пусто -> текущий."""
    if qs:
        try:
            y, m, half = qs.split("-")
            return BiweeklyPeriod(int(y), int(m), half)
        except (ValueError, TypeError):
            pass
    return current_period(now)


def available_periods(records: Iterable[dict], now: date | None = None) -> list[BiweeklyPeriod]:
    """Периоды, где есть хоть одна непустая смена; свежие первыми, текущий всегда в списке."""
    found: set[BiweeklyPeriod] = set()
    for r in records:
        code = (r.get("shift_code") or "").strip()
        if not code:
            continue
        found.add(period_for(r["year"], r["month"], r["day"]))

    periods = sorted(found, key=lambda p: p.start_date, reverse=True)
    cur = current_period(now)
    if cur not in found:
        periods.insert(0, cur)
    return periods
