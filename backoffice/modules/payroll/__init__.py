# -*- coding: utf-8 -*-
from __future__ import annotations

from flask import Blueprint, request, jsonify

from ...deductions import field_name
from ...engine import ALL
from ...money import as_float
from ...normalize import import_ccss
from ...periods import parse_period_key
from ...services import services
from ...store import StoreError

bp = Blueprint("payroll", __name__, url_prefix="/payroll")


def _payload() -> dict:
    return request.get_json(force=True, silent=True) or {}


@bp.errorhandler(StoreError)
def _store_failure(e):
    return jsonify({"ok": False, "error": "store_failure"}), 503


# ------------ ведомость -------------------------------------------------------
@bp.get("/")
def index():
    period = parse_period_key(request.args.get("p"))
    company = (request.args.get("company") or ALL).strip() or ALL
    data = services().calculator.payroll(period, company)
    return jsonify({
        "ok": True,
        "period": period.to_dict(),
        "companies": [cp.to_dict() for cp in data],
    })


# ------------ удержания -------------------------------------------------------
@bp.post("/deduction")
def deduction():
    p = _payload()
    company = (p.get("company") or "").strip()
    employee = (p.get("employee") or "").strip()
    if not company or not employee:
        return jsonify({"ok": False, "error": "bad_request"}), 400
    try:
        field = field_name(p.get("field") or "")
    except ValueError:
        return jsonify({"ok": False, "error": "bad_field"}), 400
    ov = services().overrides
    key = ov.update(company, employee, field, p.get("value"))
    return jsonify({"ok": True, "key": key, "display": ov.display_value(company, employee, field)})


@bp.post("/deduction/flush")
def deduction_flush():
    flushed = services().overrides.flush_all()
    return jsonify({"ok": True, "flushed": flushed})


@bp.post("/deduction/discard")
def deduction_discard():
    # отменить набранные, но ещё не зафиксированные значения
    ov = services().overrides
    dropped = len(ov.pending())
    ov.cancel_all()
    return jsonify({"ok": True, "discarded": dropped})


@bp.get("/deduction")
def deduction_get():
    company = (request.args.get("company") or "").strip()
    employee = (request.args.get("employee") or "").strip()
    if not company or not employee:
        return jsonify({"ok": False, "error": "bad_request"}), 400
    return jsonify({"ok": True, "deductions": services().overrides.get(company, employee).to_dict()})


# ------------ ставки CCSS -----------------------------------------------------
@bp.get("/rates")
def rates():
    name = (request.args.get("company") or "").strip()
    if not name:
        rows = services().rates.all_rates()
        return jsonify({"ok": True, "rates": [
            {"company_name": r["company_name"], **{k: as_float(r[k]) for k in ("tc", "mt", "horabruta")}}
            for r in rows
        ]})
    r = services().rates.resolve(name)
    return jsonify({
        "ok": True,
        "company_name": name,
        "tc": as_float(r.tc),
        "mt": as_float(r.mt),
        "horabruta": as_float(r.horabruta),
        "overtime": as_float(r.overtime),
        "used_default": r.used_default,
    })


@bp.post("/rates")
def rates_save():
    p = _payload()
    try:
        rid = services().rates.save(
            p.get("company_name") or "",
            owner_id=p.get("owner_id"),
            **{k: p.get(k) for k in ("tc", "mt", "horabruta", "valorhora", "overtime")},
        )
    except ValueError:
        return jsonify({"ok": False, "error": "bad_request"}), 400
    return jsonify({"ok": True, "id": rid})


@bp.post("/rates/import")
def rates_import():
    p = request.get_json(force=True, silent=True)
    if not isinstance(p, dict):
        return jsonify({"ok": False, "error": "bad_request"}), 400
    saved = import_ccss(services().rates, p)
    return jsonify({"ok": True, "saved": saved})


# ------------ сохранённые итоги -----------------------------------------------
@bp.post("/records")
def records_save():
    p = _payload()
    company = (p.get("company") or "").strip()
    employee = (p.get("employee") or "").strip()
    if not company or not employee:
        return jsonify({"ok": False, "error": "bad_request"}), 400
    period = parse_period_key(p.get("p"))
    svc = services()
    line = svc.calculator.line_for(period, company, employee)
    if line is None:
        return jsonify({"ok": False, "error": "no_data"}), 404
    existed = svc.records.has_record_for_period(company, employee, period)
    rid = svc.records.save_record(company, employee, period, line.worked_days, line.hours_per_day, line.total_hours)
    return jsonify({"ok": True, "id": rid, "period": period.key, "action": "update" if existed else "insert"})


@bp.get("/records")
def records_list():
    company = (request.args.get("company") or "").strip()
    employee = (request.args.get("employee") or "").strip()
    svc = services().records
    if company and employee:
        rows = svc.get_record(company, employee)
    elif company:
        rows = svc.records_by_company(company)
    else:
        rows = svc.all_records()
    return jsonify({"ok": True, "records": [
        {
            "company_key": r["company_key"],
            "employee_name": r["employee_name"],
            "year": r["year"],
            "month": r["month"],
            "period": r["half"],
            "worked_days": r["worked_days"],
            "hours_per_day": as_float(r["hours_per_day"]),
            "total_hours": as_float(r["total_hours"]),
        }
        for r in rows
    ]})


@bp.post("/records/delete")
def records_delete():
    p = _payload()
    company = (p.get("company") or "").strip()
    employee = (p.get("employee") or "").strip()
    if not company or not employee or not p.get("p"):
        return jsonify({"ok": False, "error": "bad_request"}), 400
    period = parse_period_key(p.get("p"))
    if not services().records.delete_period(company, employee, period):
        return jsonify({"ok": False, "error": "not_found"}), 404
    return jsonify({"ok": True})
