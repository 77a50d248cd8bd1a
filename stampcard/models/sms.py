"""
SMS notification log.
"""
from datetime import datetime
from enum import Enum
from ..extensions import db


class SmsType(str, Enum):
    """Kinds of customer text messages."""
    WELCOME = 'welcome'
    REWARD_EARNED = 'reward_earned'
    REWARD_REMINDER = 'reward_reminder'
    REMINDER = 'reminder'
    PROMOTION = 'promotion'


class SmsStatus(str, Enum):
    PENDING = 'pending'
    SENT = 'sent'
    FAILED = 'failed'


class SmsNotification(db.Model):
    """
    Record of a text message handed to the SMS gateway.
    """
    __tablename__ = 'sms_notifications'

    id = db.Column(db.Integer, primary_key=True)
    customer_id = db.Column(db.Integer, db.ForeignKey('customers.id'))
    business_id = db.Column(db.Integer, db.ForeignKey('businesses.id'), nullable=False)

    phone = db.Column(db.String(50), nullable=False)
    message = db.Column(db.Text, nullable=False)
    type = db.Column(db.String(50), nullable=False)
    status = db.Column(db.String(20), nullable=False, default=SmsStatus.PENDING.value)

    sent_at = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def __repr__(self):
        return f'<SmsNotification {self.id} {self.type} {self.status}>'

    def to_dict(self):
        return {
            'id': self.id,
            'customer_id': self.customer_id,
            'business_id': self.business_id,
            'phone': self.phone,
            'message': self.message,
            'type': self.type,
            'status': self.status,
            'sent_at': self.sent_at.isoformat() if self.sent_at else None,
            'created_at': self.created_at.isoformat() if self.created_at else None
        }
