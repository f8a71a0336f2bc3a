import os
from pathlib import Path
from dotenv import load_dotenv
load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent  # <project>
INSTANCE_DIR = BASE_DIR / "instance"


def _default_sqlite_uri():
    INSTANCE_DIR.mkdir(parents=True, exist_ok=True)
    return f"sqlite:///{(INSTANCE_DIR / 'backoffice.db').as_posix()}"


def _csv(v: str) -> tuple[str, ...]:
    return tuple(x.strip() for x in (v or "").split(",") if x.strip())


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL") or _default_sqlite_uri()
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    # пауза перед фиксацией вводимых удержаний
    DEDUCTION_DEBOUNCE_MS = int(os.getenv("DEDUCTION_DEBOUNCE_MS", "1000"))
    # служебные/тестовые компании не попадают в общий расчёт
    PAYROLL_EXCLUDED_COMPANIES = _csv(os.getenv("PAYROLL_EXCLUDED_COMPANIES", "DELIFOOD"))


def ensure_instance(app):
    # Flask instance path
    os.makedirs(app.instance_path, exist_ok=True)
