# -*- coding: utf-8 -*-
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from .money import D, non_finite
from .store import RecordStore, StoreError

logger = logging.getLogger(__name__)

DEFAULT_CCSS_TC = Decimal("11017.39")
DEFAULT_CCSS_MT = Decimal("3672.46")
REGULAR_HOURLY_RATE = Decimal("1529.62")
OVERTIME_HOURLY_RATE = Decimal("2294.43")
DEFAULT_VALORHORA = Decimal("1441")

RATE_FIELDS = ("tc", "mt", "horabruta", "valorhora", "overtime")


@dataclass(frozen=True)
class ResolvedRates:
    tc: Decimal = DEFAULT_CCSS_TC
    mt: Decimal = DEFAULT_CCSS_MT
    horabruta: Decimal = REGULAR_HOURLY_RATE
    overtime: Decimal = OVERTIME_HOURLY_RATE
    # True: строки для компании нет (или хранилище недоступно), взяты значения по умолчанию
    used_default: bool = True

    def ccss_for(self, ccss_type: str) -> Decimal:
        return self.tc if ccss_type == "TC" else self.mt

    def as_dict(self) -> dict:
        return {"tc": self.tc, "mt": self.mt, "horabruta": self.horabruta}


DEFAULT_RATES = ResolvedRates()


def _or_default(v, default: Decimal) -> Decimal:
    x = D(v)
    return x if x > 0 else default


class RateResolver:
    """
    Ставки CCSS по компании.

    Поиск идёт по отображаемому имени компании (так их вводят вручную);
    при двух компаниях с одинаковым именем берётся первая строка.
    Для перехода на поиск по id достаточно переопределить get_rates().
    """

    collection = "ccss_config"

    def __init__(self, store: RecordStore):
        self.store = store

    def get_rates(self, company_name: str) -> dict | None:
        rows = self.store.query(self.collection, {"company_name": company_name}, limit=1)
        return rows[0] if rows else None

    def resolve(self, company_name: str) -> ResolvedRates:
        """Никогда не бросает: расчёт должен получить число, пусть и по умолчанию."""
        try:
            row = self.get_rates(company_name)
        except StoreError as e:
            logger.warning("ccss config unavailable for %r, using defaults: %s", company_name, e)
            return DEFAULT_RATES
        if not row:
            logger.info("no ccss config for %r, using defaults", company_name)
            return DEFAULT_RATES
        return ResolvedRates(
            tc=_or_default(row.get("tc"), DEFAULT_CCSS_TC),
            mt=_or_default(row.get("mt"), DEFAULT_CCSS_MT),
            horabruta=_or_default(row.get("horabruta"), REGULAR_HOURLY_RATE),
            overtime=_or_default(row.get("overtime"), OVERTIME_HOURLY_RATE),
            used_default=False,
        )

    # --- настройка ---
    def all_rates(self) -> list[dict]:
        return self.store.query(self.collection, order_by="company_name")

    def save(self, company_name: str, owner_id: str | None = None, **values) -> int:
        company_name = (company_name or "").strip()
        if not company_name:
            raise ValueError("company_name is required")
        bad = sorted(k for k, v in values.items() if k in RATE_FIELDS and non_finite(v))
        if bad:
            raise ValueError(f"rates must be finite numbers: {', '.join(bad)}")
        data = {k: D(v) for k, v in values.items() if k in RATE_FIELDS and v not in (None, "")}
        if owner_id is not None:
            data["owner_id"] = owner_id
        row = self.get_rates(company_name)
        if row:
            self.store.update(self.collection, row["id"], data)
            logger.info("ccss config updated for %r", company_name)
            return int(row["id"])
        data.setdefault("valorhora", DEFAULT_VALORHORA)
        new_id = self.store.add(self.collection, {"company_name": company_name, **data})
        logger.info("ccss config created for %r", company_name)
        return new_id
