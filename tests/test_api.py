import io

import openpyxl
import pytest

from backoffice.services import init_services

from .conftest import FlakyStore

P = "2025-06-first"


def _save(client, day, shift, employee="Ana Mora", company="PALMARES", month=6):
    return client.post("/schedule/save-one", json={
        "company": company, "employee": employee, "year": 2025, "month": month, "day": day, "shift": shift,
    })


def test_home_reports_current_period(client):
    body = client.get("/").get_json()
    assert body["ok"] is True
    assert body["current_period"]["period"] in ("first", "second")


def test_save_one_and_grid(client):
    assert _save(client, 1, "D").get_json()["action"] == "insert"
    assert _save(client, 1, "N").get_json()["action"] == "update"
    assert _save(client, 2, "L").get_json()["action"] == "insert"
    assert _save(client, 3, "").get_json()["action"] == "noop"

    body = client.get(f"/schedule/?p={P}&company=PALMARES").get_json()
    assert body["period"]["label"] == "Junio 2025 (1-15)"
    assert body["days"] == list(range(1, 16))
    assert body["grid"] == {"PALMARES": {"Ana Mora": {"1": "N", "2": "L"}}}

    assert _save(client, 1, "").get_json()["action"] == "delete"
    body = client.get(f"/schedule/?p={P}").get_json()
    assert body["grid"] == {"PALMARES": {"Ana Mora": {"2": "L"}}}


@pytest.mark.parametrize("payload", [
    {"company": "PALMARES", "employee": "Ana Mora", "year": 2025, "month": 6, "day": 1, "shift": "X"},
    {"company": "PALMARES", "employee": "Ana Mora", "year": 2025, "month": 2, "day": 30, "shift": "D"},
    {"company": "", "employee": "Ana Mora", "year": 2025, "month": 6, "day": 1, "shift": "D"},
])
def test_save_one_rejects_bad_input(client, payload):
    resp = client.post("/schedule/save-one", json=payload)
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "bad_request"


def test_save_hours(client, svc):
    resp = client.post("/schedule/save-hours", json={
        "company": "PALMARES", "employee": "Ana Mora", "year": 2025, "month": 6, "day": 4, "hours": "5",
    })
    assert resp.get_json()["action"] == "insert"
    assert svc.shifts.find("PALMARES", "Ana Mora", 2025, 6, 4)["shift_code"] == "L"


def test_periods_listing(client):
    _save(client, 20, "D", month=2)
    _save(client, 3, "N", month=1)
    keys = [p["key"] for p in client.get("/schedule/periods").get_json()["periods"]]
    assert keys[1:] == ["2025-02-second", "2025-01-first"]


def test_payroll_view(client, companies):
    for day in range(1, 11):
        _save(client, day, "D")
    _save(client, 1, "D", company="DELIFOOD", employee="Pedro Ruiz")

    body = client.get(f"/payroll/?p={P}").get_json()
    assert [c["company_key"] for c in body["companies"]] == ["PALMARES"]
    palmares = body["companies"][0]
    assert palmares["company_name"] == "Palmares Centro"
    assert palmares["rates_default"] is True
    ana = palmares["employees"][0]
    assert ana["employee_name"] == "Ana Mora"
    assert ana["worked_days"] == 10
    assert ana["net_salary"] == pytest.approx(118697.14)


def test_deduction_debounce_and_flush(client, companies, clock):
    for day in range(1, 11):
        _save(client, day, "D")

    resp = client.post("/payroll/deduction", json={
        "company": "PALMARES", "employee": "Ana Mora", "field": "extraAmount", "value": "5000",
    }).get_json()
    assert resp["key"] == "PALMARES-Ana Mora-extra_amount"
    assert resp["display"] == "5000"

    ded = client.get("/payroll/deduction?company=PALMARES&employee=Ana Mora").get_json()["deductions"]
    assert ded["extra_amount"] == 0

    assert client.post("/payroll/deduction/flush").get_json()["flushed"] == 1
    ana = client.get(f"/payroll/?p={P}&company=PALMARES").get_json()["companies"][0]["employees"][0]
    assert ana["total_income"] == pytest.approx(127369.60)
    assert ana["net_salary"] == pytest.approx(123697.14)


def test_deduction_rejects_unknown_field(client):
    resp = client.post("/payroll/deduction", json={
        "company": "PALMARES", "employee": "Ana Mora", "field": "bono", "value": "1",
    })
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "bad_field"


def test_rates_endpoints(client):
    body = client.get("/payroll/rates?company=Palmares Centro").get_json()
    assert body["used_default"] is True
    assert body["tc"] == pytest.approx(11017.39)

    assert client.post("/payroll/rates", json={"company_name": "Palmares Centro", "horabruta": "1600"}).get_json()["ok"]
    body = client.get("/payroll/rates?company=Palmares Centro").get_json()
    assert body["used_default"] is False
    assert body["horabruta"] == pytest.approx(1600)
    assert body["mt"] == pytest.approx(3672.46)

    listing = client.get("/payroll/rates").get_json()["rates"]
    assert [r["company_name"] for r in listing] == ["Palmares Centro"]

    assert client.post("/payroll/rates", json={"company_name": ""}).status_code == 400


def test_payroll_records_lifecycle(client, companies):
    for day in range(1, 6):
        _save(client, day, "D", company="PALMARES", employee="Luis Soto")

    resp = client.post("/payroll/records", json={"company": "PALMARES", "employee": "Luis Soto", "p": P})
    assert resp.get_json()["period"] == P

    rows = client.get("/payroll/records?company=PALMARES&employee=Luis Soto").get_json()["records"]
    assert len(rows) == 1
    assert rows[0]["worked_days"] == 5
    assert rows[0]["hours_per_day"] == pytest.approx(6)
    assert rows[0]["total_hours"] == pytest.approx(30)

    # повторное сохранение обновляет ту же запись
    _save(client, 6, "N", company="PALMARES", employee="Luis Soto")
    client.post("/payroll/records", json={"company": "PALMARES", "employee": "Luis Soto", "p": P})
    rows = client.get("/payroll/records?company=PALMARES").get_json()["records"]
    assert [r["worked_days"] for r in rows] == [6]

    assert client.post("/payroll/records/delete", json={
        "company": "PALMARES", "employee": "Luis Soto", "p": P,
    }).get_json()["ok"]
    assert client.get("/payroll/records").get_json()["records"] == []
    assert client.post("/payroll/records/delete", json={
        "company": "PALMARES", "employee": "Luis Soto", "p": P,
    }).status_code == 404


def test_payroll_record_without_shifts(client, companies):
    resp = client.post("/payroll/records", json={"company": "PALMARES", "employee": "Ana Mora", "p": P})
    assert resp.status_code == 404
    assert resp.get_json()["error"] == "no_data"


def test_import_legacy_json_list(client, svc):
    resp = client.post("/schedule/import", json=[
        {"companieValue": "PALMARES", "employeeName": "Ana Mora", "year": 2025, "month": 5, "day": 1, "shift": "D"},
        {"companieValue": "PALMARES", "employeeName": "Ana Mora", "year": 2025, "month": 5, "day": 2, "shift": "Q"},
    ])
    body = resp.get_json()
    assert body["counts"]["insert"] == 1
    assert body["counts"]["skipped"] == 1
    assert svc.shifts.find("PALMARES", "Ana Mora", 2025, 6, 1)["shift_code"] == "D"


def test_import_versioned_payload(client):
    resp = client.post("/schedule/import", json={"version": 9, "records": [{}]})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "bad_version"
    assert client.post("/schedule/import", json={"version": 2, "records": []}).get_json()["error"] == "empty"


def test_import_csv_upload(client, svc):
    data = "company_key;employee_name;year;month;day;shift_code\nPALMARES;Ana Mora;2025;6;3;N\n".encode()
    resp = client.post(
        "/schedule/import",
        data={"file": (io.BytesIO(data), "grid.csv")},
        content_type="multipart/form-data",
    )
    assert resp.get_json()["counts"]["insert"] == 1
    assert svc.shifts.find("PALMARES", "Ana Mora", 2025, 6, 3)["shift_code"] == "N"


def test_import_xlsx_upload(client, svc):
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.append(["company_key", "employee_name", "year", "month", "day", "shift_code"])
    ws.append(["SANRAMON", "María Vargas", 2025, 6, 17, "D"])
    ws.append([None, None, None, None, None, None])
    buf = io.BytesIO()
    wb.save(buf)
    buf.seek(0)

    resp = client.post(
        "/schedule/import",
        data={"file": (buf, "grid.xlsx")},
        content_type="multipart/form-data",
    )
    assert resp.get_json()["counts"] == {"insert": 1, "update": 0, "delete": 0, "noop": 0, "skipped": 0}
    assert svc.shifts.find("SANRAMON", "María Vargas", 2025, 6, 17)["shift_code"] == "D"


def test_store_failure_maps_to_503(app, client):
    init_services(app, store=FlakyStore(fail_on={"query", "add", "update", "delete"}))
    resp = _save(client, 1, "D")
    assert resp.status_code == 503
    assert resp.get_json() == {"ok": False, "error": "store_failure"}
    assert client.get(f"/payroll/?p={P}").status_code == 503
    assert client.get(f"/schedule/?p={P}").status_code == 503


def test_infinite_rate_is_rejected_and_payroll_still_renders(client, companies):
    for day in range(1, 3):
        _save(client, day, "D")
    resp = client.post("/payroll/rates", json={"company_name": "Palmares Centro", "horabruta": "Infinity"})
    assert resp.status_code == 400
    resp = client.get(f"/payroll/?p={P}")
    assert resp.status_code == 200
    assert resp.get_json()["companies"][0]["employees"][0]["regular_rate"] == pytest.approx(1529.62)


@pytest.mark.parametrize("hours", ["NaN", "Infinity"])
def test_save_hours_rejects_non_finite(client, hours):
    resp = client.post("/schedule/save-hours", json={
        "company": "DELIFOOD", "employee": "Pedro Ruiz", "year": 2025, "month": 6, "day": 2, "hours": hours,
    })
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "bad_request"


def test_numeric_shift_code_is_a_bad_request(client):
    resp = _save(client, 1, 5)
    assert resp.status_code == 400


def test_out_of_range_period_key_falls_back(client):
    resp = client.get("/schedule/?p=0-06-first")
    assert resp.status_code == 200
    assert resp.get_json()["period"]["year"] >= 1


def test_grid_reports_hours_and_totals(client, companies):
    client.post("/schedule/save-hours", json={
        "company": "DELIFOOD", "employee": "Pedro Ruiz", "year": 2025, "month": 6, "day": 2, "hours": 5,
    })
    client.post("/schedule/save-hours", json={
        "company": "DELIFOOD", "employee": "Pedro Ruiz", "year": 2025, "month": 6, "day": 3, "hours": "2.5",
    })
    _save(client, 1, "D", company="PALMARES", employee="Luis Soto")
    _save(client, 2, "L", company="PALMARES", employee="Luis Soto")

    body = client.get(f"/schedule/?p={P}").get_json()
    assert body["grid"]["DELIFOOD"] == {"Pedro Ruiz": {"2": "L", "3": "L"}}
    assert body["hours"]["DELIFOOD"]["Pedro Ruiz"] == {"2": 5.0, "3": 2.5}
    assert body["totals"]["DELIFOOD"]["Pedro Ruiz"] == {"worked_days": 2, "total_hours": 7.5}
    assert body["hours"]["PALMARES"]["Luis Soto"] == {"1": 6.0}
    assert body["totals"]["PALMARES"]["Luis Soto"] == {"worked_days": 1, "total_hours": 6.0}


def test_company_import_endpoint(client, svc):
    resp = client.post("/schedule/companies/import", json=[
        {"ubicacion": "CARTAGO", "name": "Cartago", "empleados": [{"Empleado": "Eva", "ccssType": "MT"}]},
    ])
    assert resp.get_json()["counts"] == {"companies": 1, "employees": 1, "skipped": 0}
    assert svc.directory.profile("CARTAGO", "Eva").ccss_type == "MT"
    assert client.post("/schedule/companies/import", json={"records": []}).status_code == 400


def test_rates_import_endpoint(client):
    resp = client.post("/payroll/rates/import", json={"ownerId": "u1", "companie": [
        {"ownerCompanie": "Cartago", "tc": "12500"},
    ]})
    assert resp.get_json()["saved"] == 1
    assert client.get("/payroll/rates?company=Cartago").get_json()["tc"] == pytest.approx(12500)
    assert client.post("/payroll/rates/import", json=[1, 2]).status_code == 400


def test_records_report_insert_then_update(client, companies):
    _save(client, 1, "D")
    first = client.post("/payroll/records", json={"company": "PALMARES", "employee": "Ana Mora", "p": P}).get_json()
    second = client.post("/payroll/records", json={"company": "PALMARES", "employee": "Ana Mora", "p": P}).get_json()
    assert (first["action"], second["action"]) == ("insert", "update")
    assert first["id"] == second["id"]


def test_deduction_discard_drops_pending_edits(client, svc, clock):
    client.post("/payroll/deduction", json={
        "company": "PALMARES", "employee": "Ana Mora", "field": "compras", "value": "300",
    })
    assert client.post("/payroll/deduction/discard").get_json()["discarded"] == 1
    clock.fire_all()
    assert svc.overrides.get("PALMARES", "Ana Mora").compras == 0
