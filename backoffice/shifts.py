# -*- coding: utf-8 -*-
from __future__ import annotations

import logging
from calendar import monthrange
from decimal import Decimal

from .companies import DEFAULT_HOURS_PER_SHIFT, CompanyDirectory
from .money import D, non_finite
from .periods import BiweeklyPeriod
from .store import RecordStore, StoreError

logger = logging.getLogger(__name__)

WORK_CODES = ("D", "N")
SHIFT_CODES = ("D", "N", "L")

INSERT, UPDATE, DELETE, NOOP = "insert", "update", "delete", "noop"


def normalize_code(code) -> str:
    c = str(code if code is not None else "").strip().upper()
    if c and c not in SHIFT_CODES:
        raise ValueError(f"unknown shift code: {code!r}")
    return c


def _check_date(year: int, month: int, day: int) -> None:
    if not 1 <= year <= 9999:
        raise ValueError(f"year out of range: {year}")
    if not 1 <= month <= 12:
        raise ValueError(f"month must be 1..12, got {month}")
    if not 1 <= day <= monthrange(year, month)[1]:
        raise ValueError(f"bad day {day} for {year:04d}-{month:02d}")


class ShiftManager:
    """
    Ячейки графика: одна запись на (компания, сотрудник, год, месяц, день).

    Пустое значение удаляет запись, в хранилище нет пустых смен.
    Ошибки хранилища пробрасываются как есть, повторов нет.
    """

    collection = "schedules"

    def __init__(self, store: RecordStore, directory: CompanyDirectory | None = None):
        self.store = store
        self.directory = directory

    # --- чтение ---
    def find(self, company_key: str, employee_name: str, year: int, month: int, day: int) -> dict | None:
        rows = self.store.query(self.collection, [
            ("company_key", company_key),
            ("employee_name", employee_name),
            ("year", int(year)),
            ("month", int(month)),
            ("day", int(day)),
        ], limit=1)
        return rows[0] if rows else None

    def month_shifts(self, company_key: str, employee_name: str, year: int, month: int) -> list[dict]:
        return self.store.query(self.collection, [
            ("company_key", company_key),
            ("employee_name", employee_name),
            ("year", int(year)),
            ("month", int(month)),
        ], order_by="day")

    def period_shifts(self, period: BiweeklyPeriod, company_key: str | None = None) -> list[dict]:
        cond = [("year", period.year), ("month", period.month)]
        if company_key:
            cond.append(("company_key", company_key))
        rows = self.store.query(self.collection, cond, order_by="day")
        return [r for r in rows if period.contains_day(r["day"]) and (r.get("shift_code") or "").strip()]

    def all_shifts(self) -> list[dict]:
        return self.store.get_all(self.collection)

    def hours_summary(self, rows: list[dict]) -> dict:
        """
        Часы за период: компания -> сотрудник -> {days, worked_days, total_hours}.

        D/N берут часы ячейки, а если их нет, hoursPerShift профиля (8 по умолчанию).
        Ячейка L с часами (почасовой учёт) тоже считается отработанным днём.
        """
        out: dict = {}
        for r in rows:
            code = (r.get("shift_code") or "").strip()
            hours = D(r.get("hours_per_day"))
            if code in WORK_CODES:
                if hours <= 0:
                    hours = self._hours_for(r["company_key"], r["employee_name"])
            elif hours <= 0:
                continue
            emp = out.setdefault(r["company_key"], {}).setdefault(
                r["employee_name"], {"days": {}, "worked_days": 0, "total_hours": Decimal("0")}
            )
            emp["days"][int(r["day"])] = hours
            emp["worked_days"] += 1
            emp["total_hours"] += hours
        return out

    # --- запись ---
    def _hours_for(self, company_key: str, employee_name: str) -> Decimal:
        if self.directory is None:
            return DEFAULT_HOURS_PER_SHIFT
        try:
            emp = self.directory.profile(company_key, employee_name)
        except StoreError as e:
            logger.warning("hoursPerShift lookup failed for %s/%s, using 8: %s", company_key, employee_name, e)
            return DEFAULT_HOURS_PER_SHIFT
        return emp.hours_per_shift if emp else DEFAULT_HOURS_PER_SHIFT

    def set_shift(self, company_key: str, employee_name: str, year: int, month: int, day: int, code: str,
                  hours=None) -> str:
        """hours: часы ячейки для D/N; без них берётся hoursPerShift профиля."""
        year, month, day = int(year), int(month), int(day)
        _check_date(year, month, day)
        code = normalize_code(code)
        existing = self.find(company_key, employee_name, year, month, day)

        if not code:
            if existing:
                self.store.delete(self.collection, existing["id"])
                logger.info("shift deleted %s/%s %04d-%02d-%02d (id=%s)",
                            company_key, employee_name, year, month, day, existing["id"])
                return DELETE
            return NOOP

        data: dict = {"shift_code": code}
        if code in WORK_CODES:
            h = D(hours)
            data["hours_per_day"] = h if h > 0 else self._hours_for(company_key, employee_name)

        if existing:
            self.store.update(self.collection, existing["id"], data)
            logger.info("shift updated %s/%s %04d-%02d-%02d -> %s", company_key, employee_name, year, month, day, code)
            return UPDATE

        self.store.add(self.collection, {
            "company_key": company_key,
            "employee_name": employee_name,
            "year": year,
            "month": month,
            "day": day,
            **data,
        })
        logger.info("shift added %s/%s %04d-%02d-%02d -> %s", company_key, employee_name, year, month, day, code)
        return INSERT

    def set_hours(self, company_key: str, employee_name: str, year: int, month: int, day: int, hours) -> str:
        """Почасовой учёт: 0 часов удаляет запись, иначе ячейка 'L' с числом часов."""
        year, month, day = int(year), int(month), int(day)
        _check_date(year, month, day)
        if non_finite(hours):
            raise ValueError(f"hours must be a finite number: {hours!r}")
        hours = D(hours)
        existing = self.find(company_key, employee_name, year, month, day)

        if hours <= 0:
            if existing:
                self.store.delete(self.collection, existing["id"])
                logger.info("hours cleared %s/%s %04d-%02d-%02d", company_key, employee_name, year, month, day)
                return DELETE
            return NOOP

        data = {"shift_code": "L", "hours_per_day": hours}
        if existing:
            self.store.update(self.collection, existing["id"], data)
            return UPDATE
        self.store.add(self.collection, {
            "company_key": company_key,
            "employee_name": employee_name,
            "year": year,
            "month": month,
            "day": day,
            **data,
        })
        return INSERT
