from datetime import datetime
from ..extensions import db


class CcssRate(db.Model):
    __tablename__ = "ccss_rate"

    id = db.Column(db.Integer, primary_key=True)
    owner_id = db.Column(db.String(64))
    # связь по отображаемому имени компании, не по ключу
    company_name = db.Column(db.String(120), nullable=False, index=True)
    tc = db.Column(db.Numeric(12, 2))         # полная ставка (tiempo completo)
    mt = db.Column(db.Numeric(12, 2))         # половина ставки (medio tiempo)
    horabruta = db.Column(db.Numeric(12, 2))  # брутто за час
    valorhora = db.Column(db.Numeric(12, 2))  # нетто за час, справочно
    overtime = db.Column(db.Numeric(12, 2))
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
