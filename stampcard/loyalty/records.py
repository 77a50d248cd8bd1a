"""
Immutable value records exchanged with the loyalty core.

The accrual engine and analytics aggregator never touch ORM rows. Models
produce these snapshots (``Model.snapshot()``) and services write the
returned snapshots back. All money is in minor units (cents) unless a field
name says otherwise.
"""
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Dict, Optional, Tuple


def _iso(value) -> Optional[str]:
    return value.isoformat() if value else None


# ==================== Entity snapshots ====================

@dataclass(frozen=True)
class BusinessPolicy:
    """Reward policy of a business."""
    id: int
    visits_required: int
    reward_expiry_days: int
    sms_enabled: bool = True
    reward_description: str = 'Free service'
    name: Optional[str] = None


@dataclass(frozen=True)
class CustomerState:
    """Loyalty counters of one customer."""
    id: int
    business_id: int
    visits: int = 0
    rewards_earned: int = 0
    rewards_redeemed: int = 0
    total_spent: int = 0
    last_visit: Optional[datetime] = None
    name: Optional[str] = None
    phone: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'business_id': self.business_id,
            'name': self.name,
            'phone': self.phone,
            'visits': self.visits,
            'rewards_earned': self.rewards_earned,
            'rewards_redeemed': self.rewards_redeemed,
            'total_spent': self.total_spent,
            'last_visit': _iso(self.last_visit),
        }


@dataclass(frozen=True)
class VisitInput:
    """Validated details of a check-in."""
    amount_spent: int = 0
    service_type: Optional[str] = None
    notes: Optional[str] = None
    rating: Optional[int] = None


@dataclass(frozen=True)
class VisitRecord:
    customer_id: int
    business_id: int
    visit_date: datetime
    amount_spent: int = 0
    service_type: Optional[str] = None
    reward_earned: bool = False
    notes: Optional[str] = None
    rating: Optional[int] = None
    id: Optional[int] = None


@dataclass(frozen=True)
class RewardRecord:
    customer_id: int
    business_id: int
    earned_at: datetime
    expires_at: Optional[datetime] = None
    earned: bool = True
    redeemed: bool = False
    redeemed_at: Optional[datetime] = None
    id: Optional[int] = None

    @property
    def is_available(self) -> bool:
        """Earned and not yet redeemed. Expiry does not affect availability."""
        return self.earned and not self.redeemed

    def is_expired(self, as_of: datetime) -> bool:
        return self.expires_at is not None and self.expires_at < as_of


# ==================== Engine results ====================

@dataclass(frozen=True)
class CheckInResult:
    """Outcome of one check-in: new counters, the visit, and an optional reward."""
    customer: CustomerState
    visit: VisitRecord
    reward: Optional[RewardRecord] = None

    @property
    def reward_earned(self) -> bool:
        return self.reward is not None


@dataclass(frozen=True)
class RedemptionResult:
    reward: RewardRecord
    customer: CustomerState


@dataclass(frozen=True)
class CustomerProgress:
    """Progress of a customer toward the next reward."""
    progress_percentage: float
    has_available_reward: bool
    average_spent: float
    visits_until_reward: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            'progress_percentage': self.progress_percentage,
            'has_available_reward': self.has_available_reward,
            'average_spent': self.average_spent,
            'visits_until_reward': self.visits_until_reward,
        }


# ==================== Analytics view models ====================

@dataclass(frozen=True)
class DashboardStats:
    """
    Dashboard headline metrics.

    Currency fields are display strings (``"KES 12.50"``); the ``*_minor``
    fields keep the raw minor-unit numbers they were rendered from.
    """
    today_visits: int
    active_customers: int
    rewards_earned: int
    monthly_revenue: str
    total_revenue: str
    average_visit_value: str
    top_service: str
    customer_retention_rate: int
    monthly_revenue_minor: int = 0
    total_revenue_minor: int = 0
    average_visit_value_minor: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'today_visits': self.today_visits,
            'active_customers': self.active_customers,
            'rewards_earned': self.rewards_earned,
            'monthly_revenue': self.monthly_revenue,
            'total_revenue': self.total_revenue,
            'average_visit_value': self.average_visit_value,
            'top_service': self.top_service,
            'customer_retention_rate': self.customer_retention_rate,
            'raw': {
                'monthly_revenue': self.monthly_revenue_minor,
                'total_revenue': self.total_revenue_minor,
                'average_visit_value': self.average_visit_value_minor,
            },
        }


@dataclass(frozen=True)
class VisitTrendPoint:
    """Visits and revenue (major units) for one calendar day."""
    date: date
    visits: int
    revenue: float

    def to_dict(self) -> Dict[str, Any]:
        return {'date': self.date.isoformat(), 'visits': self.visits, 'revenue': self.revenue}


@dataclass(frozen=True)
class TopCustomer:
    customer: CustomerState
    visits: int
    spent: int

    def to_dict(self) -> Dict[str, Any]:
        return {'customer': self.customer.to_dict(), 'visits': self.visits, 'spent': self.spent}


@dataclass(frozen=True)
class ServicePopularity:
    """Visit count and revenue (major units) for one service type."""
    service: str
    count: int
    revenue: float
    revenue_minor: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {'service': self.service, 'count': self.count, 'revenue': self.revenue}


@dataclass(frozen=True)
class MonthlyGrowth:
    """Month-over-month growth percentages."""
    visits: int
    revenue: int
    customers: int

    def to_dict(self) -> Dict[str, Any]:
        return {'visits': self.visits, 'revenue': self.revenue, 'customers': self.customers}


@dataclass(frozen=True)
class AnalyticsData:
    visit_trends: Tuple[VisitTrendPoint, ...] = field(default_factory=tuple)
    top_customers: Tuple[TopCustomer, ...] = field(default_factory=tuple)
    service_popularity: Tuple[ServicePopularity, ...] = field(default_factory=tuple)
    monthly_growth: MonthlyGrowth = field(default_factory=lambda: MonthlyGrowth(0, 0, 0))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'visit_trends': [point.to_dict() for point in self.visit_trends],
            'top_customers': [entry.to_dict() for entry in self.top_customers],
            'service_popularity': [entry.to_dict() for entry in self.service_popularity],
            'monthly_growth': self.monthly_growth.to_dict(),
        }


def reward_expiry(earned_at: datetime, expiry_days: int) -> datetime:
    """Expiry timestamp of a reward earned at ``earned_at``."""
    return earned_at + timedelta(days=expiry_days)
