"""
Analytics Service for Stampcard.

Loads a business's history and hands it to the pure aggregator in
``stampcard.loyalty.analytics``:
- Dashboard headline stats (today, this month, all time, retention)
- 30-day visit trend, top customers, service mix, month-over-month growth
"""
from datetime import datetime
from typing import List, Optional

from flask import current_app

from ..extensions import db
from ..loyalty.analytics import compute_analytics, compute_dashboard_stats
from ..loyalty.records import AnalyticsData, CustomerState, DashboardStats, RewardRecord, VisitRecord
from ..models.business import Business
from ..models.customer import Customer
from ..models.reward import Reward
from ..models.visit import Visit
from ..utils.exceptions import BusinessNotFoundError


class AnalyticsService:
    """
    Dashboard metrics for one business.

    Usage:
        service = AnalyticsService(business_id)
        stats = service.get_dashboard_stats()
        analytics = service.get_analytics(as_of=datetime(2026, 3, 31, 18, 0))
    """

    def __init__(self, business_id: int):
        self.business_id = business_id

    def _ensure_business(self) -> Business:
        business = db.session.get(Business, self.business_id)
        if not business:
            raise BusinessNotFoundError(self.business_id)
        return business

    def _customers(self) -> List[CustomerState]:
        return [c.snapshot() for c in Customer.query.filter_by(business_id=self.business_id).all()]

    def _visits(self) -> List[VisitRecord]:
        return [v.snapshot() for v in Visit.query.filter_by(business_id=self.business_id).all()]

    def _rewards(self) -> List[RewardRecord]:
        return [r.snapshot() for r in Reward.query.filter_by(business_id=self.business_id).all()]

    def get_dashboard_stats(self, as_of: Optional[datetime] = None) -> DashboardStats:
        self._ensure_business()
        config = current_app.config

        return compute_dashboard_stats(
            self.business_id,
            customers=self._customers(),
            visits=self._visits(),
            rewards=self._rewards(),
            as_of=as_of or datetime.utcnow(),
            currency=config.get('CURRENCY_CODE', 'KES'),
            retention_days=config.get('RETENTION_WINDOW_DAYS', 30),
        )

    def get_analytics(self, as_of: Optional[datetime] = None) -> AnalyticsData:
        self._ensure_business()
        config = current_app.config

        return compute_analytics(
            self.business_id,
            customers=self._customers(),
            visits=self._visits(),
            as_of=as_of or datetime.utcnow(),
            trend_days=config.get('TREND_WINDOW_DAYS', 30),
            top_limit=config.get('TOP_CUSTOMERS_LIMIT', 10),
        )
