# -*- coding: utf-8 -*-
"""
Редактируемые удержания по сотруднику за период.

Ввод идёт по нажатиям клавиш: сырое значение сразу кладётся в «набираемое»,
а в расчёт попадает только после паузы (по умолчанию 1 с). У каждого поля
свой таймер; новый ввод в то же поле заменяет его таймер, чужие не трогает.
"""
from __future__ import annotations

import copy
import itertools
import logging
import threading
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Callable

from .money import parse_amount

logger = logging.getLogger(__name__)

FIELDS = ("compras", "adelanto", "otros", "extra_amount")
_ALIASES = {"extraAmount": "extra_amount"}


def field_name(name: str) -> str:
    f = _ALIASES.get(name, name)
    if f not in FIELDS:
        raise ValueError(f"unknown deduction field: {name!r}")
    return f


def employee_key(company_key: str, employee_name: str) -> str:
    return f"{company_key}-{employee_name}"


def field_key(company_key: str, employee_name: str, field: str) -> str:
    return f"{employee_key(company_key, employee_name)}-{field_name(field)}"


@dataclass(frozen=True)
class Deduction:
    compras: Decimal = Decimal("0")
    adelanto: Decimal = Decimal("0")
    otros: Decimal = Decimal("0")
    extra_amount: Decimal = Decimal("0")

    def to_dict(self) -> dict:
        return {f: float(getattr(self, f)) for f in FIELDS}


NO_DEDUCTIONS = Deduction()


class DeductionOverrides:
    def __init__(
        self,
        delay: float = 1.0,
        timer_factory: Callable = threading.Timer,
        on_commit: Callable[[str, str, Decimal], None] | None = None,
    ):
        self.delay = delay
        self.timer_factory = timer_factory
        self.on_commit = on_commit
        self._lock = threading.RLock()
        self._values: dict[str, Deduction] = {}
        self._typing: dict[str, str] = {}
        # field_key -> (employee_key, field, timer, generation)
        self._timers: dict[str, tuple[str, str, object, int]] = {}
        self._gen = itertools.count(1)
        self._version = 0

    # --- чтение ---
    @property
    def version(self) -> int:
        return self._version

    def get(self, company_key: str, employee_name: str) -> Deduction:
        with self._lock:
            return self._values.get(employee_key(company_key, employee_name), NO_DEDUCTIONS)

    def snapshot(self) -> dict[str, Deduction]:
        """Копия на момент вызова: расчёт не видит коммитов, пришедших во время прохода."""
        with self._lock:
            return copy.copy(self._values)

    def versioned_snapshot(self) -> tuple[int, dict[str, Deduction]]:
        with self._lock:
            return self._version, copy.copy(self._values)

    def pending(self) -> list[str]:
        with self._lock:
            return sorted(self._timers)

    def display_value(self, company_key: str, employee_name: str, field: str) -> str:
        fk = field_key(company_key, employee_name, field)
        with self._lock:
            if fk in self._typing:
                return self._typing[fk]
            v = getattr(self.get(company_key, employee_name), field_name(field))
        return str(v) if v > 0 else ""

    # --- запись ---
    def update(self, company_key: str, employee_name: str, field: str, raw) -> str:
        f = field_name(field)
        ek = employee_key(company_key, employee_name)
        fk = f"{ek}-{f}"
        raw = "" if raw is None else str(raw)
        with self._lock:
            self._typing[fk] = raw
            old = self._timers.pop(fk, None)
            if old:
                old[2].cancel()
            gen = next(self._gen)
            t = self.timer_factory(self.delay, self._fire, args=(fk, gen))
            t.daemon = True
            self._timers[fk] = (ek, f, t, gen)
        t.start()
        return fk

    def _fire(self, fk: str, gen: int) -> None:
        with self._lock:
            entry = self._timers.get(fk)
            # таймер уже заменён новым вводом
            if not entry or entry[3] != gen:
                return
            self.commit(fk)

    def commit(self, fk: str, value=None) -> Decimal:
        """
        Зафиксировать поле немедленно. value=None: взять набранное значение.
        Повторный вызов по уже зафиксированному полю без value ничего не меняет.
        """
        with self._lock:
            entry = self._timers.pop(fk, None)
            if entry:
                ek, f, t, _ = entry
                t.cancel()
            else:
                ek, f = self._split(fk)
            if value is None:
                if fk not in self._typing:
                    return getattr(self._values.get(ek, NO_DEDUCTIONS), f)
                value = self._typing[fk]
            self._typing.pop(fk, None)
            amount = parse_amount(value)
            self._values[ek] = replace(self._values.get(ek, NO_DEDUCTIONS), **{f: amount})
            self._version += 1
        logger.debug("deduction committed %s = %s", fk, amount)
        if self.on_commit:
            self.on_commit(ek, f, amount)
        return amount

    def flush_all(self) -> int:
        with self._lock:
            keys = list(self._timers)
        for fk in keys:
            self.commit(fk)
        return len(keys)

    def cancel_all(self) -> None:
        with self._lock:
            for entry in self._timers.values():
                entry[2].cancel()
            self._timers.clear()
            self._typing.clear()

    def clear(self, company_key: str, employee_name: str) -> None:
        ek = employee_key(company_key, employee_name)
        with self._lock:
            for fk in [k for k, v in self._timers.items() if v[0] == ek]:
                self._timers.pop(fk)[2].cancel()
            for f in FIELDS:
                self._typing.pop(f"{ek}-{f}", None)
            if self._values.pop(ek, None) is not None:
                self._version += 1

    def _split(self, fk: str) -> tuple[str, str]:
        for f in FIELDS:
            if fk.endswith("-" + f):
                return fk[: -len(f) - 1], f
        raise ValueError(f"bad field key: {fk!r}")
