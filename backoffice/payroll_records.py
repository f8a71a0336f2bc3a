# -*- coding: utf-8 -*-
from __future__ import annotations

import logging

from .money import D
from .periods import BiweeklyPeriod
from .store import RecordStore

logger = logging.getLogger(__name__)


class PayrollRecordService:
    """Сохранённые итоги по сотруднику за квинсену (дни, часы/день, часы)."""

    collection = "payroll_records"

    def __init__(self, store: RecordStore):
        self.store = store

    def _find(self, company_key: str, employee_name: str, period: BiweeklyPeriod) -> dict | None:
        rows = self.store.query(self.collection, [
            ("company_key", company_key),
            ("employee_name", employee_name),
            ("year", period.year),
            ("month", period.month),
            ("half", period.half),
        ], limit=1)
        return rows[0] if rows else None

    def save_record(self, company_key: str, employee_name: str, period: BiweeklyPeriod,
                    worked_days: int, hours_per_day, total_hours) -> int:
        data = {
            "worked_days": int(worked_days),
            "hours_per_day": D(hours_per_day),
            "total_hours": D(total_hours),
        }
        row = self._find(company_key, employee_name, period)
        if row:
            self.store.update(self.collection, row["id"], data)
            rid = int(row["id"])
        else:
            rid = self.store.add(self.collection, {
                "company_key": company_key,
                "employee_name": employee_name,
                "year": period.year,
                "month": period.month,
                "half": period.half,
                **data,
            })
        logger.info("payroll record saved %s/%s %s", company_key, employee_name, period.key)
        return rid

    def get_record(self, company_key: str, employee_name: str) -> list[dict]:
        return self.store.query(self.collection, [
            ("company_key", company_key),
            ("employee_name", employee_name),
        ], order_by="year")

    def records_by_company(self, company_key: str) -> list[dict]:
        return self.store.query(self.collection, {"company_key": company_key}, order_by="employee_name")

    def all_records(self) -> list[dict]:
        return self.store.get_all(self.collection)

    def delete_period(self, company_key: str, employee_name: str, period: BiweeklyPeriod) -> bool:
        row = self._find(company_key, employee_name, period)
        if not row:
            return False
        self.store.delete(self.collection, row["id"])
        logger.info("payroll record deleted %s/%s %s", company_key, employee_name, period.key)
        return True

    def has_record_for_period(self, company_key: str, employee_name: str, period: BiweeklyPeriod) -> bool:
        return self._find(company_key, employee_name, period) is not None
