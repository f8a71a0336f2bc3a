# -*- coding: utf-8 -*-
from __future__ import annotations

import csv
import io
from collections import defaultdict

from flask import Blueprint, request, jsonify

from ...money import as_float
from ...periods import available_periods, parse_period_key
from ...normalize import CURRENT, LEGACY, import_companies, import_shifts
from ...services import services
from ...store import StoreError

bp = Blueprint("schedule", __name__, url_prefix="/schedule")

# колонки листа импорта (схема v2)
IMPORT_COLUMNS = ("company_key", "employee_name", "year", "month", "day", "shift_code")


def _payload() -> dict:
    return request.get_json(force=True, silent=True) or {}


def _int(v, default: int = 0) -> int:
    try:
        return int(v)
    except (TypeError, ValueError):
        return default


@bp.errorhandler(StoreError)
def _store_failure(e):
    return jsonify({"ok": False, "error": "store_failure"}), 503


@bp.get("/")
def index():
    period = parse_period_key(request.args.get("p"))
    company = (request.args.get("company") or "").strip() or None
    mgr = services().shifts
    rows = mgr.period_shifts(period, company)

    # компания -> сотрудник -> день -> код
    grid: dict[str, dict[str, dict[str, str]]] = defaultdict(lambda: defaultdict(dict))
    for r in rows:
        grid[r["company_key"]][r["employee_name"]][str(r["day"])] = r["shift_code"]

    # часы по дням и итог за период по каждому сотруднику
    summary = mgr.hours_summary(rows)
    hours = {
        c: {e: {str(d): as_float(h) for d, h in s["days"].items()} for e, s in emps.items()}
        for c, emps in summary.items()
    }
    totals = {
        c: {e: {"worked_days": s["worked_days"], "total_hours": as_float(s["total_hours"])} for e, s in emps.items()}
        for c, emps in summary.items()
    }

    return jsonify({
        "ok": True,
        "period": period.to_dict(),
        "days": period.days(),
        "grid": {c: dict(emps) for c, emps in grid.items()},
        "hours": hours,
        "totals": totals,
    })


@bp.get("/periods")
def periods():
    rows = services().shifts.all_shifts()
    return jsonify({"ok": True, "periods": [p.to_dict() for p in available_periods(rows)]})


@bp.post("/save-one")
def save_one():
    payload = _payload()
    company = (payload.get("company") or "").strip()
    employee = (payload.get("employee") or "").strip()
    year = _int(payload.get("year"))
    month = _int(payload.get("month"))
    day = _int(payload.get("day"))
    shift = payload.get("shift") or ""

    if not company or not employee or not year or not month or not day:
        return jsonify({"ok": False, "error": "bad_request"}), 400
    try:
        action = services().shifts.set_shift(company, employee, year, month, day, shift)
    except ValueError as e:
        return jsonify({"ok": False, "error": "bad_request", "detail": str(e)}), 400
    return jsonify({"ok": True, "action": action})


@bp.post("/save-hours")
def save_hours():
    payload = _payload()
    company = (payload.get("company") or "").strip()
    employee = (payload.get("employee") or "").strip()
    year = _int(payload.get("year"))
    month = _int(payload.get("month"))
    day = _int(payload.get("day"))
    if not company or not employee or not year or not month or not day:
        return jsonify({"ok": False, "error": "bad_request"}), 400
    try:
        action = services().shifts.set_hours(company, employee, year, month, day, payload.get("hours") or 0)
    except ValueError as e:
        return jsonify({"ok": False, "error": "bad_request", "detail": str(e)}), 400
    return jsonify({"ok": True, "action": action})


def _rows_from_upload(filename: str, content: bytes) -> list[dict]:
    rows: list[dict] = []
    if filename.endswith(".xlsx"):
        import openpyxl
        wb = openpyxl.load_workbook(io.BytesIO(content), read_only=True, data_only=True)
        ws = wb.active
        it = ws.iter_rows(values_only=True)
        headers = [str(h or "").strip() for h in (next(it, None) or [])]
        for r in it:
            if not r or all(v in (None, "") for v in r):
                continue
            rows.append({headers[i]: r[i] for i in range(min(len(headers), len(r))) if headers[i]})
        wb.close()
        return rows

    try:
        text_data = content.decode("utf-8-sig")
    except UnicodeDecodeError:
        text_data = content.decode(errors="ignore")
    reader = csv.DictReader(io.StringIO(text_data), delimiter=";")
    if not reader.fieldnames or len(reader.fieldnames) < len(IMPORT_COLUMNS):
        reader = csv.DictReader(io.StringIO(text_data))
    for row in reader:
        rows.append({(k or "").strip(): v for k, v in row.items()})
    return rows


@bp.post("/import")
def import_():
    f = request.files.get("file")
    if f:
        filename = (getattr(f, "filename", "") or "").lower()
        try:
            records = _rows_from_upload(filename, f.read())
        except Exception as e:
            return jsonify({"ok": False, "error": "bad_file", "detail": str(e)}), 400
        version = CURRENT
    else:
        payload = request.get_json(force=True, silent=True)
        # голый список: старая выгрузка
        if isinstance(payload, list):
            records, version = payload, LEGACY
        elif isinstance(payload, dict):
            records = payload.get("records") or []
            version = _int(payload.get("version"), CURRENT)
        else:
            return jsonify({"ok": False, "error": "bad_request"}), 400

    if version not in (LEGACY, CURRENT):
        return jsonify({"ok": False, "error": "bad_version"}), 400
    if not records:
        return jsonify({"ok": False, "error": "empty"}), 400

    res = import_shifts(services().shifts, records, version)
    return jsonify({"ok": True, **res})


@bp.post("/companies/import")
def import_companies_():
    payload = request.get_json(force=True, silent=True)
    if isinstance(payload, dict):
        payload = payload.get("records")
    records = payload if isinstance(payload, list) else []
    if not records:
        return jsonify({"ok": False, "error": "empty"}), 400
    res = import_companies(services().directory, records)
    return jsonify({"ok": True, **res})
