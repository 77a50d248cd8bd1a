"""
Customer model.
"""
from datetime import datetime
from ..extensions import db
from ..loyalty.records import CustomerState


class Customer(db.Model):
    """
    Loyalty customer of a business, identified by phone number.

    The counters (visits, rewards_earned, rewards_redeemed, total_spent) only
    ever grow and are written exclusively by the check-in and redemption
    services. ``version`` guards them against lost updates.
    """
    __tablename__ = 'customers'

    id = db.Column(db.Integer, primary_key=True)
    business_id = db.Column(db.Integer, db.ForeignKey('businesses.id'), nullable=False)

    # Contact and profile
    name = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(50), nullable=False)
    email = db.Column(db.String(255))
    date_of_birth = db.Column(db.Date)
    gender = db.Column(db.String(10))
    preferred_services = db.Column(db.JSON, default=list)
    notes = db.Column(db.Text)
    sms_opt_in = db.Column(db.Boolean, nullable=False, default=True)
    email_opt_in = db.Column(db.Boolean, nullable=False, default=True)

    # Loyalty counters
    visits = db.Column(db.Integer, nullable=False, default=0)
    rewards_earned = db.Column(db.Integer, nullable=False, default=0)
    rewards_redeemed = db.Column(db.Integer, nullable=False, default=0)
    total_spent = db.Column(db.Integer, nullable=False, default=0)  # KES cents
    last_visit = db.Column(db.DateTime)

    version = db.Column(db.Integer, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    __table_args__ = (
        db.UniqueConstraint('business_id', 'phone', name='uq_business_customer_phone'),
        db.CheckConstraint('rewards_redeemed <= rewards_earned', name='ck_customer_redeemed_le_earned'),
    )

    __mapper_args__ = {
        'version_id_col': version
    }

    def __repr__(self):
        return f'<Customer {self.id} {self.phone}>'

    def snapshot(self) -> CustomerState:
        """Current counters as an immutable record."""
        return CustomerState(
            id=self.id,
            business_id=self.business_id,
            name=self.name,
            phone=self.phone,
            visits=self.visits or 0,
            rewards_earned=self.rewards_earned or 0,
            rewards_redeemed=self.rewards_redeemed or 0,
            total_spent=self.total_spent or 0,
            last_visit=self.last_visit,
        )

    def apply_state(self, state: CustomerState) -> None:
        """Write counters computed by the loyalty core back onto the row."""
        self.visits = state.visits
        self.rewards_earned = state.rewards_earned
        self.rewards_redeemed = state.rewards_redeemed
        self.total_spent = state.total_spent
        self.last_visit = state.last_visit

    def to_dict(self, progress=None):
        data = {
            'id': self.id,
            'business_id': self.business_id,
            'name': self.name,
            'phone': self.phone,
            'email': self.email,
            'date_of_birth': self.date_of_birth.isoformat() if self.date_of_birth else None,
            'gender': self.gender,
            'preferred_services': self.preferred_services or [],
            'notes': self.notes,
            'visits': self.visits,
            'rewards_earned': self.rewards_earned,
            'rewards_redeemed': self.rewards_redeemed,
            'total_spent': self.total_spent,
            'last_visit': self.last_visit.isoformat() if self.last_visit else None,
            'sms_opt_in': self.sms_opt_in,
            'email_opt_in': self.email_opt_in,
            'created_at': self.created_at.isoformat() if self.created_at else None
        }

        if progress is not None:
            data.update(progress.to_dict())

        return data
