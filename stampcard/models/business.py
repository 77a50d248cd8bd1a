"""
Business model.
"""
from datetime import datetime
from ..extensions import db
from ..loyalty.records import BusinessPolicy


class Business(db.Model):
    """
    A business running a visit-based loyalty program.
    Every customer, visit and reward is scoped to one business.
    """
    __tablename__ = 'businesses'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(50))
    address = db.Column(db.Text)

    # Reward policy
    visits_required = db.Column(db.Integer, nullable=False, default=10)  # every Nth visit earns a reward
    reward_description = db.Column(db.String(255), nullable=False, default='Free service')
    reward_expiry_days = db.Column(db.Integer, nullable=False, default=30)
    sms_enabled = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    # Relationships
    customers = db.relationship('Customer', backref='business', lazy='dynamic')

    __table_args__ = (
        db.CheckConstraint('visits_required > 0', name='ck_business_visits_required_positive'),
        db.CheckConstraint('reward_expiry_days >= 0', name='ck_business_reward_expiry_non_negative'),
    )

    def __repr__(self):
        return f'<Business {self.id} {self.name}>'

    def policy(self) -> BusinessPolicy:
        """Snapshot of the reward policy for the accrual engine."""
        return BusinessPolicy(
            id=self.id,
            name=self.name,
            visits_required=self.visits_required,
            reward_expiry_days=self.reward_expiry_days,
            sms_enabled=bool(self.sms_enabled),
            reward_description=self.reward_description,
        )

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'phone': self.phone,
            'address': self.address,
            'visits_required': self.visits_required,
            'reward_description': self.reward_description,
            'reward_expiry_days': self.reward_expiry_days,
            'sms_enabled': self.sms_enabled,
            'created_at': self.created_at.isoformat() if self.created_at else None
        }
