from datetime import datetime, date
from smart_library import db
from enum import Enum


class DiscountType(Enum):
    """How a coupon or offer discounts a price"""
    FLAT = 'flat'
    PERCENTAGE = 'percentage'


class Coupon(db.Model):
    """Coupon code redeemable at checkout"""
    __tablename__ = 'coupons'

    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(50), unique=True, nullable=False, index=True)
    description = db.Column(db.String(255))

    # Discount details
    discount_type = db.Column(db.Enum(DiscountType), nullable=False)
    discount_value = db.Column(db.Numeric(10, 2), nullable=False)
    min_purchase_amount = db.Column(db.Numeric(10, 2), nullable=False, default=0.0)
    max_discount_amount = db.Column(db.Numeric(10, 2), nullable=True)

    # Usage limits
    usage_limit = db.Column(db.Integer, nullable=True)  # None means unlimited
    used_count = db.Column(db.Integer, nullable=False, default=0)

    # Validity
    valid_from = db.Column(db.Date, nullable=False)
    valid_until = db.Column(db.Date, nullable=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def is_valid(self, amount=None, on_date=None):
        """Check if coupon can be redeemed for the given purchase amount"""
        on_date = on_date or date.today()

        if not self.is_active or on_date < self.valid_from or on_date > self.valid_until:
            return False, 'Invalid or expired coupon code'

        if amount is not None and float(amount) < float(self.min_purchase_amount or 0):
            return False, f'Minimum purchase amount is ₹{float(self.min_purchase_amount):.2f}'

        if self.usage_limit and self.used_count >= self.usage_limit:
            return False, 'Coupon usage limit reached'

        return True, 'Coupon is valid'

    def calculate_discount(self, amount):
        """Calculate discount amount for given purchase amount"""
        from smart_library.utils.pricing import calculate_discount
        return calculate_discount(
            amount,
            self.discount_type.value,
            float(self.discount_value),
            float(self.max_discount_amount) if self.max_discount_amount else None
        )

    def to_dict(self):
        return {
            'id': self.id,
            'code': self.code,
            'description': self.description,
            'discount_type': self.discount_type.value,
            'discount_value': float(self.discount_value),
            'min_purchase_amount': float(self.min_purchase_amount or 0),
            'max_discount_amount': float(self.max_discount_amount) if self.max_discount_amount else None,
            'usage_limit': self.usage_limit,
            'used_count': self.used_count,
            'valid_from': self.valid_from.isoformat(),
            'valid_until': self.valid_until.isoformat(),
            'is_active': self.is_active,
            'created_at': self.created_at.isoformat()
        }

    def __repr__(self):
        return f'<Coupon {self.code}>'


class Offer(db.Model):
    """Promotional offer shown to members"""
    __tablename__ = 'offers'

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text)
    discount_type = db.Column(db.Enum(DiscountType), nullable=False)
    discount_value = db.Column(db.Numeric(10, 2), nullable=False)
    code = db.Column(db.String(50), unique=True, nullable=True, index=True)
    min_amount = db.Column(db.Numeric(10, 2), nullable=False, default=0.0)
    max_discount = db.Column(db.Numeric(10, 2), nullable=True)
    valid_from = db.Column(db.Date, nullable=False)
    valid_until = db.Column(db.Date, nullable=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def is_current(self, on_date=None):
        on_date = on_date or date.today()
        return self.is_active and self.valid_from <= on_date <= self.valid_until

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'discount_type': self.discount_type.value,
            'discount_value': float(self.discount_value),
            'code': self.code,
            'min_amount': float(self.min_amount or 0),
            'max_discount': float(self.max_discount) if self.max_discount else None,
            'valid_from': self.valid_from.isoformat(),
            'valid_until': self.valid_until.isoformat(),
            'is_active': self.is_active,
            'created_at': self.created_at.isoformat()
        }

    def __repr__(self):
        return f'<Offer {self.title}>'
