"""
Актуализация схемы БД (без удаления данных).

Создаёт недостающие таблицы, объявленные в моделях, не трогая существующие
данные.

Запуск:
  python scripts/ensure_schema.py
"""

from __future__ import annotations

import sys
from pathlib import Path

from sqlalchemy import inspect

# Гарантируем, что корень проекта есть в sys.path
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from backoffice import create_app  # type: ignore
from backoffice.extensions import db  # type: ignore


def _tables() -> set[str]:
    return set(inspect(db.engine).get_table_names())


def main() -> int:
    print("[ensure] Загружаю приложение...")
    app = create_app()
    with app.app_context():
        uri = app.config.get("SQLALCHEMY_DATABASE_URI", "")
        print(f"[ensure] SQLALCHEMY_DATABASE_URI = {uri}")

        before = _tables()
        print(f"[ensure] Таблиц до: {len(before)}")

        print("[ensure] Создание недостающих таблиц (если есть)...")
        db.create_all()

        after = _tables()
        created = sorted(after - before)
        if created:
            print(f"[ensure] Созданы таблицы: {', '.join(created)}")
        else:
            print("[ensure] Новых таблиц не потребовалось.")

        interesting = ["company", "employee", "shift", "ccss_rate", "payroll_record"]
        missing = [t for t in interesting if t not in after]
        if missing:
            print(f"[ensure] ВНИМАНИЕ, нет таблиц: {', '.join(missing)}")
        print("[ensure] Готово.")
        return 0


if __name__ == "__main__":
    sys.exit(main())
