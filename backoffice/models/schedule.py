from datetime import datetime
from ..extensions import db


class Shift(db.Model):
    __tablename__ = "shift"

    id = db.Column(db.Integer, primary_key=True)
    company_key = db.Column(db.String(120), nullable=False, index=True)
    employee_name = db.Column(db.String(160), nullable=False, index=True)
    year = db.Column(db.Integer, nullable=False)
    month = db.Column(db.Integer, nullable=False)  # 1..12
    day = db.Column(db.Integer, nullable=False)
    shift_code = db.Column(db.String(1), nullable=False)  # D|N|L
    hours_per_day = db.Column(db.Numeric(6, 2))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        db.UniqueConstraint("company_key", "employee_name", "year", "month", "day", name="uq_shift_cell"),
        db.Index("ix_shift_period", "year", "month"),
    )
