from datetime import datetime, date
from smart_library import db


class Expense(db.Model):
    """Operating expense recorded by staff"""
    __tablename__ = 'expenses'

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    category = db.Column(db.String(100), nullable=False, default='general')
    amount = db.Column(db.Numeric(10, 2), nullable=False)
    expense_date = db.Column(db.Date, nullable=False, default=date.today)
    payment_method = db.Column(db.String(50))
    notes = db.Column(db.Text)
    created_by = db.Column(db.Integer, db.ForeignKey('admins.id'), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'category': self.category,
            'amount': float(self.amount),
            'expense_date': self.expense_date.isoformat(),
            'payment_method': self.payment_method,
            'notes': self.notes,
            'created_by': self.created_by,
            'created_at': self.created_at.isoformat()
        }


class GatewaySettings(db.Model):
    """Single-row payment gateway and tax configuration"""
    __tablename__ = 'payment_gateway_settings'

    DEFAULTS = {
        'gateway_name': 'razorpay',
        'api_key': '',
        'api_secret': '',
        'merchant_id': '',
        'webhook_secret': '',
        'is_test_mode': True,
        'currency': 'INR',
        'gst_percentage': 18.0,
        'service_charge': 0.0,
        'is_active': True
    }

    id = db.Column(db.Integer, primary_key=True)
    gateway_name = db.Column(db.String(50), nullable=False, default='razorpay')
    api_key = db.Column(db.String(255))
    api_secret = db.Column(db.String(255))
    merchant_id = db.Column(db.String(255))
    webhook_secret = db.Column(db.String(255))
    is_test_mode = db.Column(db.Boolean, nullable=False, default=True)
    currency = db.Column(db.String(10), nullable=False, default='INR')
    gst_percentage = db.Column(db.Numeric(5, 2), nullable=False, default=18.0)
    service_charge = db.Column(db.Numeric(10, 2), nullable=False, default=0.0)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    @classmethod
    def current(cls):
        return cls.query.order_by(cls.id.desc()).first()

    @classmethod
    def gst_percentage_or_default(cls, default=18.0):
        settings = cls.current()
        return float(settings.gst_percentage) if settings else default

    def to_dict(self):
        return {
            'id': self.id,
            'gateway_name': self.gateway_name,
            'api_key': self.api_key,
            'api_secret': self.api_secret,
            'merchant_id': self.merchant_id,
            'webhook_secret': self.webhook_secret,
            'is_test_mode': self.is_test_mode,
            'currency': self.currency,
            'gst_percentage': float(self.gst_percentage),
            'service_charge': float(self.service_charge),
            'is_active': self.is_active,
            'updated_at': self.updated_at.isoformat()
        }
