"""
Dashboard analytics aggregation.

Pure calculation functions over a business's visit, customer and reward
history. No database access; callers pass snapshots and an ``as_of``
timestamp.

Stored timestamps are naive UTC. A naive ``as_of`` is read as UTC too. An
offset-aware ``as_of`` puts every window on the caller's clock: record
timestamps are shifted into its zone before days and months are cut.

Windows:
- "today" is ``as_of``'s calendar day up to ``as_of``.
- "current month" runs from the 1st of ``as_of``'s month to ``as_of``.
- "previous month" is the whole calendar month before that.
- Trend and retention windows are trailing ``N`` days ending at ``as_of``.
"""
import math
from collections import defaultdict
from dataclasses import replace
from datetime import datetime, timedelta, timezone, tzinfo
from decimal import Decimal, ROUND_HALF_UP
from fractions import Fraction
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .records import (
    AnalyticsData,
    CustomerState,
    DashboardStats,
    MonthlyGrowth,
    RewardRecord,
    ServicePopularity,
    TopCustomer,
    VisitRecord,
    VisitTrendPoint,
)

NO_SERVICE = 'N/A'
DEFAULT_CURRENCY = 'KES'
MINOR_UNITS_PER_MAJOR = 100


# ==================== Helpers ====================

def round_half_up(value: Fraction) -> int:
    """Round to the nearest integer, halves toward +infinity."""
    return math.floor(value + Fraction(1, 2))


def growth(current, previous) -> int:
    """
    Period-over-period growth percentage.

    growth(0, 0) == 0, growth(5, 0) == 100, growth(150, 100) == 50,
    growth(50, 100) == -50.
    """
    if previous == 0:
        return 100 if current > 0 else 0
    ratio = (Fraction(current) - Fraction(previous)) / Fraction(previous)
    return round_half_up(ratio * 100)


def to_major_units(minor_units) -> float:
    """Convert cents to a major-unit float for chart payloads."""
    return float(Fraction(minor_units) / MINOR_UNITS_PER_MAJOR)


def format_currency(minor_units, currency: str = DEFAULT_CURRENCY) -> str:
    """Render minor units as a display string, e.g. ``format_currency(1250) == 'KES 12.50'``."""
    amount = (Decimal(str(minor_units)) / MINOR_UNITS_PER_MAJOR).quantize(
        Decimal('0.01'), rounding=ROUND_HALF_UP
    )
    return f'{currency} {amount}'


def month_start(moment: datetime) -> datetime:
    return moment.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def previous_month_start(moment: datetime) -> datetime:
    start = month_start(moment)
    if start.month == 1:
        return start.replace(year=start.year - 1, month=12)
    return start.replace(month=start.month - 1)


def day_start(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def local_clock(as_of: datetime) -> Tuple[datetime, Optional[tzinfo]]:
    """Split ``as_of`` into naive wall-clock time and its zone (None when naive)."""
    if as_of.tzinfo is None or as_of.utcoffset() is None:
        return as_of.replace(tzinfo=None), None
    return as_of.replace(tzinfo=None), as_of.tzinfo


def to_local(moment: Optional[datetime], zone: Optional[tzinfo]) -> Optional[datetime]:
    """Read a stored naive-UTC timestamp on ``zone``'s wall clock."""
    if moment is None or zone is None:
        return moment
    return moment.replace(tzinfo=timezone.utc).astimezone(zone).replace(tzinfo=None)


def _visits_in(visits: Sequence[VisitRecord], zone) -> List[VisitRecord]:
    if zone is None:
        return list(visits)
    return [replace(visit, visit_date=to_local(visit.visit_date, zone)) for visit in visits]


def _rewards_in(rewards: Sequence[RewardRecord], zone) -> List[RewardRecord]:
    if zone is None:
        return list(rewards)
    return [replace(reward, earned_at=to_local(reward.earned_at, zone)) for reward in rewards]


def _customers_in(customers: Sequence[CustomerState], zone) -> List[CustomerState]:
    if zone is None:
        return list(customers)
    return [replace(customer, last_visit=to_local(customer.last_visit, zone)) for customer in customers]


def _in_window(moment: Optional[datetime], start: datetime, end: datetime, inclusive_end: bool = True) -> bool:
    if moment is None:
        return False
    if inclusive_end:
        return start <= moment <= end
    return start <= moment < end


def _scoped(records: Iterable, business_id: int) -> List:
    return [record for record in records if record.business_id == business_id]


def _amount(visit: VisitRecord) -> int:
    return visit.amount_spent or 0


def _service_counts(visits: Sequence[VisitRecord]) -> Dict[str, Tuple[int, int]]:
    """service -> (visit count, revenue in minor units), nulls excluded."""
    counts: Dict[str, List[int]] = defaultdict(lambda: [0, 0])
    for visit in visits:
        if visit.service_type is None:
            continue
        entry = counts[visit.service_type]
        entry[0] += 1
        entry[1] += _amount(visit)
    return {service: (count, revenue) for service, (count, revenue) in counts.items()}


def _by_popularity(item: Tuple[str, Tuple[int, int]]):
    service, (count, _revenue) = item
    return (-count, service)


def retention_rate(customers: Sequence[CustomerState], as_of: datetime, window_days: int = 30) -> int:
    """Percent of customers whose last visit falls in the trailing window; 0 with no customers."""
    if not customers:
        return 0
    cutoff = as_of - timedelta(days=window_days)
    recent = sum(1 for customer in customers if _in_window(customer.last_visit, cutoff, as_of))
    return round_half_up(Fraction(recent * 100, len(customers)))


def top_service(visits: Sequence[VisitRecord]) -> str:
    """Most frequent service type; ties go to the alphabetically first name."""
    counts = _service_counts(visits)
    if not counts:
        return NO_SERVICE
    service, _ = min(counts.items(), key=_by_popularity)
    return service


# ==================== Dashboard ====================

def compute_dashboard_stats(
    business_id: int,
    customers: Iterable[CustomerState],
    visits: Iterable[VisitRecord],
    rewards: Iterable[RewardRecord],
    as_of: datetime,
    currency: str = DEFAULT_CURRENCY,
    retention_days: int = 30,
) -> DashboardStats:
    """Headline dashboard metrics for one business."""
    as_of, zone = local_clock(as_of)
    customers = _customers_in(_scoped(customers, business_id), zone)
    visits = _visits_in(_scoped(visits, business_id), zone)
    rewards = _rewards_in(_scoped(rewards, business_id), zone)

    today = day_start(as_of)
    this_month = month_start(as_of)

    today_visits = sum(1 for visit in visits if _in_window(visit.visit_date, today, as_of))
    rewards_this_month = sum(
        1 for reward in rewards if _in_window(reward.earned_at, this_month, as_of)
    )

    monthly_revenue = sum(
        _amount(visit) for visit in visits if _in_window(visit.visit_date, this_month, as_of)
    )
    total_revenue = sum(_amount(visit) for visit in visits)

    paid_visits = [_amount(visit) for visit in visits if _amount(visit) > 0]
    average_visit = sum(paid_visits) / len(paid_visits) if paid_visits else 0.0

    return DashboardStats(
        today_visits=today_visits,
        active_customers=len(customers),
        rewards_earned=rewards_this_month,
        monthly_revenue=format_currency(monthly_revenue, currency),
        total_revenue=format_currency(total_revenue, currency),
        average_visit_value=format_currency(average_visit, currency),
        top_service=top_service(visits),
        customer_retention_rate=retention_rate(customers, as_of, retention_days),
        monthly_revenue_minor=monthly_revenue,
        total_revenue_minor=total_revenue,
        average_visit_value_minor=average_visit,
    )


# ==================== Analytics ====================

def visit_trends(visits: Sequence[VisitRecord], as_of: datetime, days: int = 30) -> Tuple[VisitTrendPoint, ...]:
    """
    Daily visit counts and revenue over the trailing window.

    Only days with at least one visit appear; quiet days are not zero-filled.
    """
    cutoff = as_of - timedelta(days=days)
    buckets: Dict = defaultdict(lambda: [0, 0])
    for visit in visits:
        if not _in_window(visit.visit_date, cutoff, as_of):
            continue
        bucket = buckets[visit.visit_date.date()]
        bucket[0] += 1
        bucket[1] += _amount(visit)

    return tuple(
        VisitTrendPoint(date=day, visits=count, revenue=to_major_units(revenue))
        for day, (count, revenue) in sorted(buckets.items())
    )


def top_customers(customers: Sequence[CustomerState], limit: int = 10) -> Tuple[TopCustomer, ...]:
    """Biggest spenders first; ties keep the older (lower id) customer first."""
    ranked = sorted(customers, key=lambda customer: (-customer.total_spent, customer.id))
    return tuple(
        TopCustomer(customer=customer, visits=customer.visits, spent=customer.total_spent)
        for customer in ranked[:max(limit, 0)]
    )


def service_popularity(visits: Sequence[VisitRecord]) -> Tuple[ServicePopularity, ...]:
    """Visit count and revenue per service type, most popular first."""
    counts = _service_counts(visits)
    return tuple(
        ServicePopularity(
            service=service,
            count=count,
            revenue=to_major_units(revenue),
            revenue_minor=revenue,
        )
        for service, (count, revenue) in sorted(counts.items(), key=_by_popularity)
    )


def _period_totals(visits: Sequence[VisitRecord], start: datetime, end: datetime, inclusive_end: bool) -> Tuple[int, int, int]:
    in_period = [visit for visit in visits if _in_window(visit.visit_date, start, end, inclusive_end)]
    return (
        len(in_period),
        sum(_amount(visit) for visit in in_period),
        len({visit.customer_id for visit in in_period}),
    )


def monthly_growth(visits: Sequence[VisitRecord], as_of: datetime) -> MonthlyGrowth:
    """Current month-to-date against the full previous calendar month."""
    current_start = month_start(as_of)
    previous_start = previous_month_start(as_of)

    current_visits, current_revenue, current_customers = _period_totals(
        visits, current_start, as_of, inclusive_end=True
    )
    previous_visits, previous_revenue, previous_customers = _period_totals(
        visits, previous_start, current_start, inclusive_end=False
    )

    return MonthlyGrowth(
        visits=growth(current_visits, previous_visits),
        revenue=growth(current_revenue, previous_revenue),
        customers=growth(current_customers, previous_customers),
    )


def compute_analytics(
    business_id: int,
    customers: Iterable[CustomerState],
    visits: Iterable[VisitRecord],
    as_of: datetime,
    trend_days: int = 30,
    top_limit: int = 10,
) -> AnalyticsData:
    """Trend series, leaderboard, service mix and month-over-month growth."""
    as_of, zone = local_clock(as_of)
    customers = _scoped(customers, business_id)
    visits = _visits_in(_scoped(visits, business_id), zone)

    return AnalyticsData(
        visit_trends=visit_trends(visits, as_of, trend_days),
        top_customers=top_customers(customers, top_limit),
        service_popularity=service_popularity(visits),
        monthly_growth=monthly_growth(visits, as_of),
    )
