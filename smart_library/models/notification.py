from datetime import datetime
from smart_library import db
from enum import Enum


class NotificationType(Enum):
    GENERAL = 'general'
    BOOKING = 'booking'
    PAYMENT = 'payment'
    OFFER = 'offer'
    REMINDER = 'reminder'
    SUPPORT = 'support'
    REFUND_REQUEST = 'refund_request'
    REFUND_APPROVED = 'refund_approved'
    REFUND_REJECTED = 'refund_rejected'


class NotificationPriority(Enum):
    LOW = 'low'
    MEDIUM = 'medium'
    HIGH = 'high'


class Notification(db.Model):
    """Member-facing notification, addressed to one user or broadcast"""
    __tablename__ = 'notifications'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True, index=True)
    title = db.Column(db.String(200), nullable=False)
    message = db.Column(db.Text, nullable=False)
    type = db.Column(db.Enum(NotificationType), nullable=False, default=NotificationType.GENERAL)
    priority = db.Column(db.Enum(NotificationPriority), nullable=False, default=NotificationPriority.MEDIUM)
    send_to_all = db.Column(db.Boolean, nullable=False, default=False)
    is_read = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    user = db.relationship('User')

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'title': self.title,
            'message': self.message,
            'type': self.type.value,
            'priority': self.priority.value,
            'send_to_all': self.send_to_all,
            'is_read': self.is_read,
            'created_at': self.created_at.isoformat()
        }

    def __repr__(self):
        return f'<Notification {self.title}>'


class AdminNotification(db.Model):
    """Back-office notification shared by all admins"""
    __tablename__ = 'admin_notifications'

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    message = db.Column(db.Text, nullable=False)
    type = db.Column(db.String(50), nullable=False, default='general')
    related_id = db.Column(db.Integer, nullable=True)
    is_read = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'message': self.message,
            'type': self.type,
            'related_id': self.related_id,
            'is_read': self.is_read,
            'created_at': self.created_at.isoformat()
        }

    def __repr__(self):
        return f'<AdminNotification {self.title}>'
