# -*- coding: utf-8 -*-
"""
Расчёт зарплаты за квинсену.

Чистые функции: на входе смены, ставки, профиль сотрудника и удержания,
на выходе строка ведомости. Ничего не пишут, можно вызывать сколько угодно.
"""
from __future__ import annotations

import logging
from collections import OrderedDict, defaultdict
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Callable, Iterable, Mapping

from .companies import DEFAULT_HOURS_PER_SHIFT, CompanyProfile, EmployeeProfile
from .deductions import NO_DEDUCTIONS, Deduction, employee_key
from .money import D, as_float
from .periods import BiweeklyPeriod
from .rates import ResolvedRates
from .shifts import WORK_CODES

logger = logging.getLogger(__name__)

ALL = "all"


@dataclass(frozen=True)
class PayrollLineItem:
    employee_name: str
    ccss_type: str
    days: Mapping[int, str]
    worked_days: int
    hours_per_day: Decimal
    total_hours: Decimal
    regular_hours: Decimal
    overtime_hours: Decimal
    regular_rate: Decimal
    overtime_rate: Decimal
    regular_total: Decimal
    overtime_total: Decimal
    resolved_extra_amount: Decimal
    total_income: Decimal
    ccss_amount: Decimal
    compras_deduction: Decimal
    adelanto_deduction: Decimal
    otros_deduction: Decimal
    total_deductions: Decimal
    net_salary: Decimal  # может быть отрицательной

    def to_dict(self) -> dict:
        out: dict = {
            "employee_name": self.employee_name,
            "ccss_type": self.ccss_type,
            "days": {str(k): v for k, v in sorted(self.days.items())},
            "worked_days": self.worked_days,
        }
        for k in (
            "hours_per_day", "total_hours", "regular_hours", "overtime_hours",
            "regular_rate", "overtime_rate", "regular_total", "overtime_total",
            "resolved_extra_amount", "total_income", "ccss_amount",
            "compras_deduction", "adelanto_deduction", "otros_deduction",
            "total_deductions", "net_salary",
        ):
            out[k] = as_float(getattr(self, k))
        return out


@dataclass(frozen=True)
class CompanyPayroll:
    company: CompanyProfile
    rates: ResolvedRates
    lines: tuple[PayrollLineItem, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {
            "company_key": self.company.key,
            "company_name": self.company.label,
            "rates_default": self.rates.used_default,
            "employees": [ln.to_dict() for ln in self.lines],
        }


def _days_map(shifts) -> dict[int, str]:
    if isinstance(shifts, Mapping):
        items = shifts.items()
    else:
        items = ((r["day"], r.get("shift_code")) for r in shifts)
    days: dict[int, str] = {}
    for day, code in items:
        code = (code or "").strip()
        if code:
            days[int(day)] = code
    return days


def compute_line_item(
    employee: EmployeeProfile,
    shifts,
    rates: ResolvedRates,
    override: Deduction = NO_DEDUCTIONS,
) -> PayrollLineItem:
    """shifts: {день: код} или записи смен за период."""
    days = _days_map(shifts)
    worked_days = sum(1 for c in days.values() if c in WORK_CODES)

    hours_per_day = D(employee.hours_per_shift) or DEFAULT_HOURS_PER_SHIFT
    total_hours = worked_days * hours_per_day
    regular_hours = total_hours
    # правило сверхурочных пока не применяется, ставка только отображается
    overtime_hours = Decimal("0")

    regular_total = rates.horabruta * regular_hours
    overtime_total = rates.overtime * overtime_hours

    extra = override.extra_amount if override.extra_amount > 0 else D(employee.extra_amount)
    total_income = regular_total + overtime_total + extra

    ccss = rates.ccss_for(employee.ccss_type)
    total_deductions = ccss + override.compras + override.adelanto + override.otros

    return PayrollLineItem(
        employee_name=employee.name,
        ccss_type=employee.ccss_type,
        days=days,
        worked_days=worked_days,
        hours_per_day=hours_per_day,
        total_hours=total_hours,
        regular_hours=regular_hours,
        overtime_hours=overtime_hours,
        regular_rate=rates.horabruta,
        overtime_rate=rates.overtime,
        regular_total=regular_total,
        overtime_total=overtime_total,
        resolved_extra_amount=extra,
        total_income=total_income,
        ccss_amount=ccss,
        compras_deduction=override.compras,
        adelanto_deduction=override.adelanto,
        otros_deduction=override.otros,
        total_deductions=total_deductions,
        net_salary=total_income - total_deductions,
    )


def compute_payroll(
    period: BiweeklyPeriod,
    companies: Iterable[CompanyProfile],
    shifts: Iterable[dict],
    resolve_rates: Callable[[str], ResolvedRates],
    overrides: Mapping[str, Deduction] | None = None,
    company_key: str = ALL,
    excluded: Iterable[str] = ("DELIFOOD",),
) -> list[CompanyPayroll]:
    """
    Ведомость по компаниям. Сотрудник без отработанных дней не выводится,
    компания без строк тоже. Итогов по компании нет, каждая строка сама по себе.
    """
    overrides = overrides or {}
    excluded = set(excluded)

    # компания -> сотрудник -> {день: код}
    grid: dict[str, dict[str, dict[int, str]]] = defaultdict(lambda: defaultdict(dict))
    for r in shifts:
        if r["year"] != period.year or r["month"] != period.month or not period.contains_day(r["day"]):
            continue
        code = (r.get("shift_code") or "").strip()
        if code:
            grid[r["company_key"]][r["employee_name"]][int(r["day"])] = code

    result: list[CompanyPayroll] = []
    for company in companies:
        if company.key in excluded:
            continue
        if company_key != ALL and company.key != company_key:
            continue
        by_employee = grid.get(company.key)
        if not by_employee:
            continue
        rates = resolve_rates(company.label)
        lines = []
        for name, days in by_employee.items():
            emp = company.employee(name) or EmployeeProfile(name=name)
            override = overrides.get(employee_key(company.key, name), NO_DEDUCTIONS)
            line = compute_line_item(emp, days, rates, override)
            if line.worked_days > 0:
                lines.append(line)
        if lines:
            result.append(CompanyPayroll(company=company, rates=rates, lines=tuple(lines)))
    return result


def _fingerprint(rows: Iterable[dict]) -> tuple:
    return tuple(sorted(
        (r["company_key"], r["employee_name"], r["year"], r["month"], r["day"], r.get("shift_code") or "")
        for r in rows
    ))


class PayrollCalculator:
    """
    Обёртка над compute_payroll с мемоизацией.

    Входные данные каждый раз читаются заново (чтение после записи всегда свежее),
    кэшируется только сам расчёт по ключу
    (период, компания, версия удержаний, смены, профили, ставки).
    """

    def __init__(self, shifts, directory, resolver, overrides, excluded=("DELIFOOD",), cache_size: int = 32):
        self.shifts = shifts
        self.directory = directory
        self.resolver = resolver
        self.overrides = overrides
        self.excluded = tuple(excluded)
        self.cache_size = cache_size
        self._cache: OrderedDict = OrderedDict()

    def payroll(self, period: BiweeklyPeriod, company_key: str = ALL) -> list[CompanyPayroll]:
        rows = self.shifts.period_shifts(period, None if company_key == ALL else company_key)
        companies = tuple(self.directory.all_companies())
        with_shifts = {r["company_key"] for r in rows}
        rates = {c.label: self.resolver.resolve(c.label) for c in companies if c.key in with_shifts}
        version, snapshot = self.overrides.versioned_snapshot()

        key = (period.key, company_key, version, _fingerprint(rows), companies, tuple(sorted(rates.items())))
        hit = self._cache.get(key)
        if hit is not None:
            self._cache.move_to_end(key)
            return hit

        result = compute_payroll(
            period,
            companies,
            rows,
            rates.__getitem__,
            snapshot,
            company_key=company_key,
            excluded=self.excluded,
        )
        self._cache[key] = result
        while len(self._cache) > self.cache_size:
            self._cache.popitem(last=False)
        logger.debug("payroll computed %s/%s: %d companies", period.key, company_key, len(result))
        return result

    def line_for(self, period: BiweeklyPeriod, company_key: str, employee_name: str) -> PayrollLineItem | None:
        for cp in self.payroll(period, company_key):
            for ln in cp.lines:
                if ln.employee_name == employee_name:
                    return ln
        return None
