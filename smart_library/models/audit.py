from datetime import datetime
from smart_library import db


class AdminActionLog(db.Model):
    """Audit trail of admin actions"""
    __tablename__ = 'admin_action_logs'

    id = db.Column(db.Integer, primary_key=True)
    admin_id = db.Column(db.Integer, db.ForeignKey('admins.id'), nullable=False, index=True)
    action_type = db.Column(db.String(50), nullable=False, index=True)
    target_user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True, index=True)
    target_booking_id = db.Column(db.Integer, db.ForeignKey('bookings.id'), nullable=True)
    action_details = db.Column(db.JSON)
    ip_address = db.Column(db.String(45))
    user_agent = db.Column(db.String(255))
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)

    admin = db.relationship('Admin')
    target_user = db.relationship('User')

    def to_dict(self):
        return {
            'id': self.id,
            'admin_id': self.admin_id,
            'admin_name': self.admin.name,
            'admin_email': self.admin.email,
            'action_type': self.action_type,
            'target_user_id': self.target_user_id,
            'target_user_name': self.target_user.name if self.target_user else None,
            'target_user_email': self.target_user.email if self.target_user else None,
            'target_booking_id': self.target_booking_id,
            'action_details': self.action_details,
            'ip_address': self.ip_address,
            'user_agent': self.user_agent,
            'created_at': self.created_at.isoformat()
        }

    def __repr__(self):
        return f'<AdminActionLog {self.action_type} by {self.admin_id}>'


class ImpersonationSession(db.Model):
    """An admin acting as a member"""
    __tablename__ = 'admin_user_sessions'

    id = db.Column(db.Integer, primary_key=True)
    admin_id = db.Column(db.Integer, db.ForeignKey('admins.id'), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    session_token = db.Column(db.Text, nullable=False)
    ip_address = db.Column(db.String(45))
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    started_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    ended_at = db.Column(db.DateTime)

    admin = db.relationship('Admin')
    user = db.relationship('User')

    @property
    def duration_minutes(self):
        end = self.ended_at or datetime.utcnow()
        return int((end - self.started_at).total_seconds() // 60)

    def to_dict(self):
        return {
            'id': self.id,
            'admin_id': self.admin_id,
            'admin_name': self.admin.name,
            'user_id': self.user_id,
            'user_name': self.user.name,
            'user_email': self.user.email,
            'ip_address': self.ip_address,
            'is_active': self.is_active,
            'started_at': self.started_at.isoformat(),
            'ended_at': self.ended_at.isoformat() if self.ended_at else None,
            'duration_minutes': self.duration_minutes
        }

    def __repr__(self):
        return f'<ImpersonationSession admin={self.admin_id} user={self.user_id}>'
