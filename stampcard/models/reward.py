"""
Reward model.
"""
from datetime import datetime
from ..extensions import db
from ..loyalty.records import RewardRecord


class Reward(db.Model):
    """
    Reward minted by the check-in that completed a visit cycle.

    Lifecycle: earned (unredeemed) -> redeemed. Nothing leaves redeemed.
    ``expires_at`` is informational; an expired, unredeemed reward is still
    available.
    """
    __tablename__ = 'rewards'

    id = db.Column(db.Integer, primary_key=True)
    customer_id = db.Column(db.Integer, db.ForeignKey('customers.id'), nullable=False)
    business_id = db.Column(db.Integer, db.ForeignKey('businesses.id'), nullable=False)

    earned = db.Column(db.Boolean, nullable=False, default=True)
    redeemed = db.Column(db.Boolean, nullable=False, default=False)
    earned_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    redeemed_at = db.Column(db.DateTime)
    expires_at = db.Column(db.DateTime)

    version = db.Column(db.Integer, nullable=False)

    # Relationships
    customer = db.relationship('Customer', backref=db.backref('rewards', lazy='dynamic'))

    __table_args__ = (
        db.Index('ix_rewards_customer_available', 'customer_id', 'earned', 'redeemed'),
    )

    __mapper_args__ = {
        'version_id_col': version
    }

    def __repr__(self):
        return f'<Reward {self.id} customer={self.customer_id}>'

    @property
    def is_available(self) -> bool:
        return bool(self.earned) and not self.redeemed

    def is_expired(self, as_of: datetime = None) -> bool:
        return self.snapshot().is_expired(as_of or datetime.utcnow())

    @classmethod
    def from_record(cls, record: RewardRecord) -> 'Reward':
        return cls(
            customer_id=record.customer_id,
            business_id=record.business_id,
            earned=record.earned,
            redeemed=record.redeemed,
            earned_at=record.earned_at,
            redeemed_at=record.redeemed_at,
            expires_at=record.expires_at,
        )

    def snapshot(self) -> RewardRecord:
        return RewardRecord(
            id=self.id,
            customer_id=self.customer_id,
            business_id=self.business_id,
            earned=bool(self.earned),
            redeemed=bool(self.redeemed),
            earned_at=self.earned_at,
            redeemed_at=self.redeemed_at,
            expires_at=self.expires_at,
        )

    def apply_record(self, record: RewardRecord) -> None:
        """Write redemption state computed by the loyalty core back onto the row."""
        self.redeemed = record.redeemed
        self.redeemed_at = record.redeemed_at

    def to_dict(self):
        return {
            'id': self.id,
            'customer_id': self.customer_id,
            'business_id': self.business_id,
            'earned': self.earned,
            'redeemed': self.redeemed,
            'earned_at': self.earned_at.isoformat() if self.earned_at else None,
            'redeemed_at': self.redeemed_at.isoformat() if self.redeemed_at else None,
            'expires_at': self.expires_at.isoformat() if self.expires_at else None,
            'is_available': self.is_available,
            'is_expired': self.is_expired()
        }
