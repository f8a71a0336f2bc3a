from datetime import datetime
from ..extensions import db


class PayrollRecord(db.Model):
    __tablename__ = "payroll_record"

    id = db.Column(db.Integer, primary_key=True)
    company_key = db.Column(db.String(120), nullable=False, index=True)
    employee_name = db.Column(db.String(160), nullable=False, index=True)
    year = db.Column(db.Integer, nullable=False)
    month = db.Column(db.Integer, nullable=False)  # 1..12
    half = db.Column(db.String(8), nullable=False)  # first|second
    worked_days = db.Column(db.Integer, default=0)
    hours_per_day = db.Column(db.Numeric(6, 2), default=0)
    total_hours = db.Column(db.Numeric(8, 2), default=0)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        db.UniqueConstraint("company_key", "employee_name", "year", "month", "half", name="uq_payroll_period"),
    )
