# -*- coding: utf-8 -*-
"""
Приведение выгрузок старых форматов к каноническому виду.

Версии схемы смен:
  1: старая выгрузка: locationValue/companieValue, shift, месяц с 0 (январь = 0);
  2: текущая: company_key, employee_name, shift_code, месяц с 1.
Формат определяется явно по номеру версии, а не по набору полей.
"""
from __future__ import annotations

import logging
from typing import Any, Iterable

from .money import D, non_finite
from .shifts import normalize_code

logger = logging.getLogger(__name__)

LEGACY, CURRENT = 1, 2
SCHEMA_VERSIONS = (LEGACY, CURRENT)


def _first(raw: dict, *names, default=None):
    for n in names:
        v = raw.get(n)
        if v not in (None, ""):
            return v
    return default


def normalize_shift(raw: dict, version: int = CURRENT) -> dict:
    """Одна запись смены -> {company_key, employee_name, year, month(1..12), day, shift_code}."""
    if version not in SCHEMA_VERSIONS:
        raise ValueError(f"unknown schedule schema version: {version!r}")
    if version == LEGACY:
        company = _first(raw, "companieValue", "locationValue", default="")
        code = raw.get("shift")
        month = int(raw.get("month", -1)) + 1
    else:
        company = _first(raw, "company_key", default="")
        code = raw.get("shift_code")
        month = int(raw.get("month", 0))
    out = {
        "company_key": str(company).strip(),
        "employee_name": str(_first(raw, "employeeName", "employee_name", default="")).strip(),
        "year": int(raw.get("year", 0)),
        "month": month,
        "day": int(raw.get("day", 0)),
        "shift_code": normalize_code(code),
    }
    hours = _first(raw, "horasPorDia", "hours_per_day")
    if hours is not None:
        if non_finite(hours):
            raise ValueError(f"hours must be a finite number: {hours!r}")
        out["hours_per_day"] = D(hours)
    if not out["company_key"] or not out["employee_name"]:
        raise ValueError("shift record without company or employee")
    return out


def normalize_employee(raw: dict) -> dict:
    ccss = str(_first(raw, "ccssType", "ccss_type", default="TC")).upper()
    hours = D(_first(raw, "hoursPerShift", "hours_per_shift"))
    return {
        "name": str(_first(raw, "Empleado", "name", default="")).strip(),
        "ccss_type": ccss if ccss in ("TC", "MT") else "TC",
        "hours_per_shift": hours if hours > 0 else D(8),
        "extra_amount": D(_first(raw, "extraAmount", "extra_amount")),
    }


def normalize_company(raw: dict) -> dict:
    """Компания: отображаемое имя name→ubicacion→id, ключ ubicacion→name→id."""
    name = str(_first(raw, "name", "ubicacion", "label", "id", default="Empresa")).strip()
    key = str(_first(raw, "ubicacion", "value", "key", "name", "id", default="")).strip()
    emps = _first(raw, "empleados", "employees", default=[])
    return {
        "key": key,
        "name": name,
        "owner_id": _first(raw, "ownerId", "owner_id"),
        "employees": [normalize_employee(e) for e in emps if isinstance(e, dict)] if isinstance(emps, list) else [],
    }


def normalize_ccss(raw: dict) -> list[dict]:
    """Документ настроек {ownerId, companie: [...]} или одна строка -> строки ставок."""
    owner = _first(raw, "ownerId", "owner_id")
    items = raw.get("companie")
    if not isinstance(items, list):
        items = [raw]
    rows = []
    for it in items:
        if not isinstance(it, dict):
            continue
        name = str(_first(it, "ownerCompanie", "company_name", default="")).strip()
        if not name:
            continue
        row = {"company_name": name, "owner_id": owner}
        for f in ("tc", "mt", "horabruta", "valorhora", "overtime"):
            if it.get(f) not in (None, ""):
                row[f] = D(it[f])
        rows.append(row)
    return rows


def _apply_shift(manager, rec: dict) -> str:
    cell = (rec["company_key"], rec["employee_name"], rec["year"], rec["month"], rec["day"])
    # почасовой учёт: 'L' (или пусто) с часами, 0 часов удаляет ячейку
    if "hours_per_day" in rec and rec["shift_code"] in ("", "L"):
        return manager.set_hours(*cell, rec["hours_per_day"])
    return manager.set_shift(*cell, rec["shift_code"], hours=rec.get("hours_per_day"))


def import_shifts(manager, records: Iterable[dict[str, Any]], version: int = CURRENT) -> dict:
    """Прогоняет записи через set_shift/set_hours: пустые коды удаляют, битые строки пропускаются."""
    counts = {"insert": 0, "update": 0, "delete": 0, "noop": 0, "skipped": 0}
    errors: list[str] = []
    for i, raw in enumerate(records):
        try:
            action = _apply_shift(manager, normalize_shift(raw, version))
        except (ValueError, TypeError, KeyError) as e:
            counts["skipped"] += 1
            errors.append(f"#{i}: {e}")
            continue
        counts[action] += 1
    if errors:
        logger.warning("shift import skipped %d rows", len(errors))
    return {"counts": counts, "errors": errors}


def import_companies(directory, records: Iterable[dict[str, Any]]) -> dict:
    """Компании вместе с сотрудниками; запись без ключа пропускается."""
    counts = {"companies": 0, "employees": 0, "skipped": 0}
    errors: list[str] = []
    for i, raw in enumerate(records):
        if not isinstance(raw, dict):
            counts["skipped"] += 1
            errors.append(f"#{i}: not an object")
            continue
        company = normalize_company(raw)
        if not company["key"]:
            counts["skipped"] += 1
            errors.append(f"#{i}: company without key")
            continue
        counts["employees"] += directory.save_company(company)
        counts["companies"] += 1
    if errors:
        logger.warning("company import skipped %d rows", len(errors))
    return {"counts": counts, "errors": errors}


def import_ccss(resolver, doc: dict) -> int:
    """Документ настроек CCSS -> строки ставок (upsert по имени компании)."""
    rows = normalize_ccss(doc)
    for row in rows:
        name = row.pop("company_name")
        resolver.save(name, **row)
    return len(rows)
