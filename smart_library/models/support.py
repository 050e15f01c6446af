from datetime import datetime
from smart_library import db
from enum import Enum


class TicketStatus(Enum):
    """Ticket status enumeration"""
    OPEN = 'open'
    IN_PROGRESS = 'in_progress'
    RESOLVED = 'resolved'
    CLOSED = 'closed'


class TicketPriority(Enum):
    """Ticket priority enumeration"""
    LOW = 'low'
    MEDIUM = 'medium'
    HIGH = 'high'


class SenderType(Enum):
    USER = 'user'
    ADMIN = 'admin'


class SupportTicket(db.Model):
    """Support ticket raised by a member"""
    __tablename__ = 'support_tickets'

    id = db.Column(db.Integer, primary_key=True)
    ticket_number = db.Column(db.String(30), unique=True, nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    subject = db.Column(db.String(200), nullable=False)
    category = db.Column(db.String(50), nullable=False, default='general')
    status = db.Column(db.Enum(TicketStatus), nullable=False, default=TicketStatus.OPEN)
    priority = db.Column(db.Enum(TicketPriority), nullable=False, default=TicketPriority.MEDIUM)

    # Timestamps
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
    resolved_at = db.Column(db.DateTime, nullable=True)

    # Relationships
    user = db.relationship('User')
    messages = db.relationship('SupportMessage', back_populates='ticket', lazy='dynamic',
                               order_by='SupportMessage.created_at')

    def to_dict(self, include_user=False):
        """Convert ticket to dictionary"""
        data = {
            'id': self.id,
            'ticket_number': self.ticket_number,
            'user_id': self.user_id,
            'subject': self.subject,
            'category': self.category,
            'status': self.status.value,
            'priority': self.priority.value,
            'created_at': self.created_at.isoformat(),
            'updated_at': self.updated_at.isoformat(),
            'resolved_at': self.resolved_at.isoformat() if self.resolved_at else None
        }

        if include_user:
            data['user_name'] = self.user.name
            data['user_email'] = self.user.email

        return data

    def __repr__(self):
        return f'<SupportTicket {self.ticket_number}: {self.subject}>'


class SupportMessage(db.Model):
    """Message in a support ticket thread"""
    __tablename__ = 'support_messages'

    id = db.Column(db.Integer, primary_key=True)
    ticket_id = db.Column(db.Integer, db.ForeignKey('support_tickets.id'), nullable=False, index=True)
    sender_type = db.Column(db.Enum(SenderType), nullable=False)
    sender_id = db.Column(db.Integer, nullable=False)
    message = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    ticket = db.relationship('SupportTicket', back_populates='messages')

    def to_dict(self):
        return {
            'id': self.id,
            'ticket_id': self.ticket_id,
            'sender_type': self.sender_type.value,
            'sender_id': self.sender_id,
            'message': self.message,
            'created_at': self.created_at.isoformat()
        }

    def __repr__(self):
        return f'<SupportMessage {self.id} on {self.ticket_id}>'
