# -*- coding: utf-8 -*-
"""
Полный ресет SQLite-БД и демо-наполнение (компании, сотрудники, ставки CCSS).

Запуск из корня проекта:
  python scripts/recreate_db.py
"""

from __future__ import annotations
import sys, traceback
from pathlib import Path
from typing import Optional
from sqlalchemy import text

# --- путь к проекту ---
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

print(f"[recreate] ROOT={ROOT}")
if not (ROOT / "backoffice" / "__init__.py").exists():
    raise SystemExit("[recreate] ошибка: backoffice/__init__.py отсутствует")

from backoffice import create_app  # type: ignore
from backoffice.extensions import db  # type: ignore
from backoffice.normalize import import_ccss, import_companies  # type: ignore
from backoffice.services import services  # type: ignore


def _db_path_from_uri(uri: str) -> Optional[Path]:
    if uri.startswith("sqlite:///"):
        return Path(uri.replace("sqlite:///", "")).resolve()
    return None


def _cnt(table: str) -> int:
    return int(db.session.execute(text(f'SELECT COUNT(*) FROM "{table}"')).scalar() or 0)


def main() -> int:
    print("[recreate] create_app()…")
    app = create_app()
    with app.app_context():
        uri = app.config.get("SQLALCHEMY_DATABASE_URI", "")
        print(f"[recreate] SQLALCHEMY_DATABASE_URI = {uri}")

        db_path = _db_path_from_uri(uri)
        if db_path:
            db_path.parent.mkdir(parents=True, exist_ok=True)
            if db_path.exists():
                print(f"[recreate] удаляю файл БД: {db_path}")
                db.engine.dispose()
                db_path.unlink()
            else:
                print(f"[recreate] файл БД ещё не существует: {db_path}")
        else:
            print("[recreate] БД не sqlite, пропускаю удаление файла")

        print("[recreate] создаю таблицы по моделям…")
        db.create_all()

        # --- компании и сотрудники (формат старой выгрузки) ---
        print("[recreate] добавляю компании и сотрудников…")
        res = import_companies(services().directory, [
            {"ubicacion": "PALMARES", "name": "Palmares Centro", "empleados": [
                {"Empleado": "Ana Mora", "ccssType": "TC", "hoursPerShift": 8},
                {"Empleado": "Luis Soto", "ccssType": "MT", "hoursPerShift": 6, "extraAmount": 5000},
            ]},
            {"ubicacion": "SANRAMON", "name": "San Ramón", "empleados": [
                {"Empleado": "María Vargas", "ccssType": "TC"},
            ]},
            {"ubicacion": "DELIFOOD", "name": "Delifood"},
        ])
        print(f"[recreate] {res['counts']}")
        print(f"[recreate] company rows={_cnt('company')}, employee rows={_cnt('employee')}")

        # --- ставки ---
        print("[recreate] ставки CCSS для Palmares Centro…")
        import_ccss(services().rates, {"ownerId": "demo", "companie": [
            {"ownerCompanie": "Palmares Centro", "tc": 11017.39, "mt": 3672.46, "horabruta": 1529.62},
        ]})
        print(f"[recreate] ccss_rate rows={_cnt('ccss_rate')}")

        print("\n[recreate] Готово.")
        if db_path:
            print(f"Файл БД: {db_path}")
        return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except Exception:
        print("\n[recreate] ОШИБКА:")
        traceback.print_exc()
        sys.exit(1)
