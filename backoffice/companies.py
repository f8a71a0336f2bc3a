# -*- coding: utf-8 -*-
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal

from .money import D
from .store import RecordStore

logger = logging.getLogger(__name__)

DEFAULT_HOURS_PER_SHIFT = Decimal("8")


@dataclass(frozen=True)
class EmployeeProfile:
    name: str
    ccss_type: str = "TC"  # TC|MT
    hours_per_shift: Decimal = DEFAULT_HOURS_PER_SHIFT
    extra_amount: Decimal = Decimal("0")

    @classmethod
    def from_record(cls, r: dict) -> "EmployeeProfile":
        ccss = (r.get("ccss_type") or "TC").upper()
        hours = D(r.get("hours_per_shift"))
        return cls(
            name=r.get("name") or "",
            ccss_type=ccss if ccss in ("TC", "MT") else "TC",
            # 0/пусто -> 8 часов
            hours_per_shift=hours if hours > 0 else DEFAULT_HOURS_PER_SHIFT,
            extra_amount=D(r.get("extra_amount")),
        )


@dataclass(frozen=True)
class CompanyProfile:
    key: str
    name: str
    employees: tuple[EmployeeProfile, ...] = field(default_factory=tuple)

    @property
    def label(self) -> str:
        return self.name or self.key

    def employee(self, name: str) -> EmployeeProfile | None:
        for e in self.employees:
            if e.name == name:
                return e
        return None


class CompanyDirectory:
    """Компании и их сотрудники (ведутся вне этого модуля)."""

    def __init__(self, store: RecordStore):
        self.store = store

    def _profile(self, row: dict) -> CompanyProfile:
        emps = self.store.query("employees", {"company_key": row["key"]}, order_by="name")
        return CompanyProfile(
            key=row["key"],
            name=row.get("name") or row["key"],
            employees=tuple(EmployeeProfile.from_record(e) for e in emps),
        )

    def all_companies(self) -> list[CompanyProfile]:
        rows = self.store.query("companies", {"is_active": True}, order_by="name")
        return [self._profile(r) for r in rows]

    def get(self, key: str) -> CompanyProfile | None:
        rows = self.store.query("companies", {"key": key}, limit=1)
        return self._profile(rows[0]) if rows else None

    def employees(self, key: str) -> list[EmployeeProfile]:
        c = self.get(key)
        return list(c.employees) if c else []

    def profile(self, key: str, employee_name: str) -> EmployeeProfile | None:
        c = self.get(key)
        return c.employee(employee_name) if c else None

    def save_company(self, company: dict) -> int:
        """Upsert компании и её сотрудников по ключу/имени. Возвращает число сотрудников."""
        key = company["key"]
        data = {"name": company.get("name") or key, "is_active": True}
        if company.get("owner_id") is not None:
            data["owner_id"] = str(company["owner_id"])
        rows = self.store.query("companies", {"key": key}, limit=1)
        if rows:
            self.store.update("companies", rows[0]["id"], data)
        else:
            self.store.add("companies", {"key": key, **data})

        saved = 0
        for emp in company.get("employees") or []:
            name = (emp.get("name") or "").strip()
            if not name:
                continue
            fields = {
                "ccss_type": emp.get("ccss_type") or "TC",
                "hours_per_shift": D(emp.get("hours_per_shift")) or DEFAULT_HOURS_PER_SHIFT,
                "extra_amount": D(emp.get("extra_amount")),
            }
            existing = self.store.query("employees", [("company_key", key), ("name", name)], limit=1)
            if existing:
                self.store.update("employees", existing[0]["id"], fields)
            else:
                self.store.add("employees", {"company_key": key, "name": name, **fields})
            saved += 1
        logger.info("company saved %s (%d employees)", key, saved)
        return saved
