from ..extensions import db


class Company(db.Model):
    __tablename__ = "company"

    id = db.Column(db.Integer, primary_key=True)
    key = db.Column(db.String(120), nullable=False, unique=True)  # значение в сменах
    name = db.Column(db.String(120), nullable=False)              # отображаемое имя
    owner_id = db.Column(db.String(64))
    is_active = db.Column(db.Boolean, default=True)


class Employee(db.Model):
    __tablename__ = "employee"

    id = db.Column(db.Integer, primary_key=True)
    company_key = db.Column(db.String(120), db.ForeignKey("company.key"), nullable=False, index=True)
    name = db.Column(db.String(160), nullable=False)
    ccss_type = db.Column(db.String(2), default="TC")  # TC|MT
    hours_per_shift = db.Column(db.Numeric(6, 2), default=8)
    extra_amount = db.Column(db.Numeric(12, 2), default=0)

    __table_args__ = (db.UniqueConstraint("company_key", "name", name="uq_employee_company"),)
