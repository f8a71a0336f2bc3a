# -*- coding: utf-8 -*-
from __future__ import annotations

import math
import re
from decimal import Decimal, InvalidOperation

CENTS = Decimal("0.01")

_FLOAT_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def _decimal(v) -> Decimal | None:
    if isinstance(v, Decimal):
        return v
    try:
        return Decimal(str(v).strip())
    except InvalidOperation:
        return None


def D(v) -> Decimal:
    """Число или 0. NaN/Infinity тоже дают 0: в расчёт попадают только конечные суммы."""
    if v is None or v == "":
        return Decimal("0")
    x = _decimal(v)
    if x is None or not x.is_finite():
        return Decimal("0")
    return x


def non_finite(v) -> bool:
    """'NaN', 'Infinity', float('inf') и т.п. Пустое и нечисловое сюда не относится."""
    if v is None or v == "":
        return False
    x = _decimal(v)
    return x is not None and not x.is_finite()


def parse_amount(raw) -> Decimal:
    """
    Как parseFloat(raw) || 0: берём числовой префикс, всё прочее -> 0.
    '12.5abc' -> 12.5, 'abc' -> 0, '' -> 0.
    """
    if raw is None:
        return Decimal("0")
    if isinstance(raw, (int, float, Decimal)) and not isinstance(raw, bool):
        if isinstance(raw, float) and not math.isfinite(raw):
            return Decimal("0")
        return D(raw)
    m = _FLOAT_PREFIX.match(str(raw))
    if not m:
        return Decimal("0")
    val = Decimal(m.group(1))
    return val if val else Decimal("0")


def as_float(v) -> float:
    x = D(v)
    try:
        return float(x.quantize(CENTS))
    except InvalidOperation:
        # слишком большое для квантования: отдаём как есть
        return float(x)
