"""
Loyalty core: the accrual engine and the analytics aggregator.

Everything in this package is side-effect free and works on the immutable
records in ``records``; persistence lives in ``stampcard.services``.
"""
from .records import (
    AnalyticsData,
    BusinessPolicy,
    CheckInResult,
    CustomerProgress,
    CustomerState,
    DashboardStats,
    MonthlyGrowth,
    RedemptionResult,
    RewardRecord,
    ServicePopularity,
    TopCustomer,
    VisitInput,
    VisitRecord,
    VisitTrendPoint,
)
from .accrual import build_visit_input, cycle_progress, record_visit, redeem_reward
from .analytics import compute_analytics, compute_dashboard_stats, format_currency, growth

__all__ = [
    'AnalyticsData',
    'BusinessPolicy',
    'CheckInResult',
    'CustomerProgress',
    'CustomerState',
    'DashboardStats',
    'MonthlyGrowth',
    'RedemptionResult',
    'RewardRecord',
    'ServicePopularity',
    'TopCustomer',
    'VisitInput',
    'VisitRecord',
    'VisitTrendPoint',
    'build_visit_input',
    'cycle_progress',
    'record_visit',
    'redeem_reward',
    'compute_analytics',
    'compute_dashboard_stats',
    'format_currency',
    'growth',
]
