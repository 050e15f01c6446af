from datetime import datetime
from smart_library import db
from enum import Enum


class TransactionType(Enum):
    """Wallet transaction direction"""
    CREDIT = 'credit'
    DEBIT = 'debit'


class ReferenceType(Enum):
    """What caused a wallet movement"""
    BOOKING = 'booking'
    REFUND = 'refund'
    REFERRAL = 'referral'
    RECHARGE = 'recharge'
    ADMIN_CREDIT = 'admin_credit'
    ADMIN_DEBIT = 'admin_debit'


class WalletTransaction(db.Model):
    """Ledger entry for a single wallet balance change"""
    __tablename__ = 'wallet_transactions'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    transaction_type = db.Column(db.Enum(TransactionType), nullable=False)
    amount = db.Column(db.Numeric(10, 2), nullable=False)
    balance_before = db.Column(db.Numeric(10, 2), nullable=False)
    balance_after = db.Column(db.Numeric(10, 2), nullable=False)
    description = db.Column(db.String(255))
    reference_type = db.Column(db.Enum(ReferenceType), nullable=False)
    reference_id = db.Column(db.Integer, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    user = db.relationship('User', back_populates='wallet_transactions')

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'transaction_type': self.transaction_type.value,
            'amount': float(self.amount),
            'balance_before': float(self.balance_before),
            'balance_after': float(self.balance_after),
            'description': self.description,
            'reference_type': self.reference_type.value,
            'reference_id': self.reference_id,
            'created_at': self.created_at.isoformat()
        }

    def __repr__(self):
        return f'<WalletTransaction {self.transaction_type.value} {self.amount}>'
