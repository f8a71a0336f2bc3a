# -*- coding: utf-8 -*-
from __future__ import annotations

from dataclasses import dataclass

from flask import current_app

from .companies import CompanyDirectory
from .deductions import DeductionOverrides
from .engine import PayrollCalculator
from .payroll_records import PayrollRecordService
from .rates import RateResolver
from .shifts import ShiftManager
from .store import RecordStore, SqlRecordStore

_EXT_KEY = "backoffice"


@dataclass
class Services:
    store: RecordStore
    directory: CompanyDirectory
    rates: RateResolver
    shifts: ShiftManager
    overrides: DeductionOverrides
    records: PayrollRecordService
    calculator: PayrollCalculator


def build_services(store: RecordStore, debounce_ms: int = 1000, excluded=("DELIFOOD",),
                   overrides: DeductionOverrides | None = None) -> Services:
    directory = CompanyDirectory(store)
    rates = RateResolver(store)
    shifts = ShiftManager(store, directory)
    overrides = overrides or DeductionOverrides(delay=debounce_ms / 1000.0)
    return Services(
        store=store,
        directory=directory,
        rates=rates,
        shifts=shifts,
        overrides=overrides,
        records=PayrollRecordService(store),
        calculator=PayrollCalculator(shifts, directory, rates, overrides, excluded=excluded),
    )


def init_services(app, store: RecordStore | None = None, overrides: DeductionOverrides | None = None) -> Services:
    svc = build_services(
        store or SqlRecordStore(),
        debounce_ms=app.config.get("DEDUCTION_DEBOUNCE_MS", 1000),
        excluded=app.config.get("PAYROLL_EXCLUDED_COMPANIES", ("DELIFOOD",)),
        overrides=overrides,
    )
    app.extensions[_EXT_KEY] = svc
    return svc


def services() -> Services:
    return current_app.extensions[_EXT_KEY]
