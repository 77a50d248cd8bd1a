"""
Visit model.
"""
from datetime import datetime
from ..extensions import db
from ..loyalty.records import VisitRecord


class Visit(db.Model):
    """
    One customer check-in. Immutable once recorded.
    """
    __tablename__ = 'visits'

    id = db.Column(db.Integer, primary_key=True)
    customer_id = db.Column(db.Integer, db.ForeignKey('customers.id'), nullable=False)
    business_id = db.Column(db.Integer, db.ForeignKey('businesses.id'), nullable=False)

    visit_date = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    reward_earned = db.Column(db.Boolean, nullable=False, default=False)  # this visit minted a reward
    service_type = db.Column(db.String(100))  # haircut, styling, manicure, etc.
    amount_spent = db.Column(db.Integer, nullable=False, default=0)  # KES cents
    notes = db.Column(db.Text)
    rating = db.Column(db.Integer)  # 1-5 stars

    # Relationships
    customer = db.relationship('Customer', backref=db.backref('visit_history', lazy='dynamic'))

    __table_args__ = (
        db.Index('ix_visits_business_date', 'business_id', 'visit_date'),
        db.CheckConstraint('amount_spent >= 0', name='ck_visit_amount_non_negative'),
    )

    def __repr__(self):
        return f'<Visit {self.id} customer={self.customer_id}>'

    @classmethod
    def from_record(cls, record: VisitRecord) -> 'Visit':
        return cls(
            customer_id=record.customer_id,
            business_id=record.business_id,
            visit_date=record.visit_date,
            reward_earned=record.reward_earned,
            service_type=record.service_type,
            amount_spent=record.amount_spent,
            notes=record.notes,
            rating=record.rating,
        )

    def snapshot(self) -> VisitRecord:
        return VisitRecord(
            id=self.id,
            customer_id=self.customer_id,
            business_id=self.business_id,
            visit_date=self.visit_date,
            amount_spent=self.amount_spent or 0,
            service_type=self.service_type,
            reward_earned=bool(self.reward_earned),
            notes=self.notes,
            rating=self.rating,
        )

    def to_dict(self, include_customer=False):
        data = {
            'id': self.id,
            'customer_id': self.customer_id,
            'business_id': self.business_id,
            'visit_date': self.visit_date.isoformat() if self.visit_date else None,
            'reward_earned': self.reward_earned,
            'service_type': self.service_type,
            'amount_spent': self.amount_spent,
            'notes': self.notes,
            'rating': self.rating
        }

        if include_customer and self.customer:
            data['customer'] = self.customer.to_dict()

        return data
