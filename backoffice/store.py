# -*- coding: utf-8 -*-
"""
Хранилище записей: коллекция -> модель, выборки по равенству полей.

Расчёт зарплаты работает только через этот контракт; конкретная БД
подключается в SqlRecordStore.
"""
from __future__ import annotations

import logging
from typing import Any, Iterable

from sqlalchemy.exc import SQLAlchemyError

from .extensions import db
from .models import CcssRate, Company, Employee, PayrollRecord, Shift

logger = logging.getLogger(__name__)

COLLECTIONS = {
    "schedules": Shift,
    "ccss_config": CcssRate,
    "companies": Company,
    "employees": Employee,
    "payroll_records": PayrollRecord,
}


class StoreError(Exception):
    """Сбой чтения/записи в хранилище (сеть, блокировка, диск)."""


class RecordStore:
    def get_all(self, collection: str) -> list[dict]:
        raise NotImplementedError

    def get_by_id(self, collection: str, record_id: int) -> dict | None:
        raise NotImplementedError

    def add(self, collection: str, data: dict) -> int:
        raise NotImplementedError

    def update(self, collection: str, record_id: int, partial: dict) -> None:
        raise NotImplementedError

    def delete(self, collection: str, record_id: int) -> None:
        raise NotImplementedError

    def query(
        self,
        collection: str,
        conditions: Iterable[tuple[str, Any]] | dict[str, Any] = (),
        order_by: str | None = None,
        direction: str = "asc",
        limit: int | None = None,
    ) -> list[dict]:
        raise NotImplementedError


def _as_dict(obj) -> dict:
    return {c.name: getattr(obj, c.name) for c in obj.__table__.columns}


class SqlRecordStore(RecordStore):
    """Записи как dict'ы поверх моделей Flask-SQLAlchemy. Каждая запись коммитится отдельно."""

    def __init__(self, session=None):
        self._session = session

    @property
    def session(self):
        return self._session or db.session

    def _model(self, collection: str):
        try:
            return COLLECTIONS[collection]
        except KeyError:
            raise ValueError(f"unknown collection: {collection}") from None

    def _fail(self, op: str, collection: str, exc: Exception):
        self.session.rollback()
        logger.error("store %s on %s failed: %s", op, collection, exc)
        raise StoreError(f"{op} {collection}: {exc}") from exc

    # --- чтение ---
    def get_all(self, collection):
        model = self._model(collection)
        try:
            rows = self.session.query(model).order_by(model.id.asc()).all()
        except SQLAlchemyError as e:
            self._fail("get_all", collection, e)
        return [_as_dict(r) for r in rows]

    def get_by_id(self, collection, record_id):
        model = self._model(collection)
        try:
            row = self.session.get(model, record_id)
        except SQLAlchemyError as e:
            self._fail("get_by_id", collection, e)
        return _as_dict(row) if row else None

    def query(self, collection, conditions=(), order_by=None, direction="asc", limit=None):
        model = self._model(collection)
        if isinstance(conditions, dict):
            conditions = conditions.items()
        q = self.session.query(model)
        for field, value in conditions:
            q = q.filter(getattr(model, field) == value)
        if order_by:
            col = getattr(model, order_by)
            q = q.order_by(col.desc() if direction == "desc" else col.asc())
        else:
            q = q.order_by(model.id.asc())
        if limit:
            q = q.limit(int(limit))
        try:
            rows = q.all()
        except SQLAlchemyError as e:
            self._fail("query", collection, e)
        return [_as_dict(r) for r in rows]

    # --- запись ---
    def add(self, collection, data):
        model = self._model(collection)
        obj = model(**data)
        try:
            self.session.add(obj)
            self.session.commit()
        except SQLAlchemyError as e:
            self._fail("add", collection, e)
        return int(obj.id)

    def update(self, collection, record_id, partial):
        model = self._model(collection)
        try:
            obj = self.session.get(model, record_id)
            if obj is None:
                raise StoreError(f"update {collection}: no record {record_id}")
            for k, v in partial.items():
                setattr(obj, k, v)
            self.session.commit()
        except SQLAlchemyError as e:
            self._fail("update", collection, e)

    def delete(self, collection, record_id):
        model = self._model(collection)
        try:
            obj = self.session.get(model, record_id)
            if obj is not None:
                self.session.delete(obj)
            self.session.commit()
        except SQLAlchemyError as e:
            self._fail("delete", collection, e)
