"""
Tests for dashboard analytics aggregation.
"""
import pytest
from datetime import datetime, date, timedelta, timezone

from stampcard.loyalty.analytics import (
    NO_SERVICE,
    compute_analytics,
    compute_dashboard_stats,
    format_currency,
    growth,
    monthly_growth,
    previous_month_start,
    retention_rate,
    service_popularity,
    top_customers,
    top_service,
    visit_trends,
)
from stampcard.loyalty.records import CustomerState, RewardRecord, VisitRecord

AS_OF = datetime(2026, 3, 15, 18, 0)
NAIROBI = timezone(timedelta(hours=3))


def _visit(customer_id, when, amount=0, service=None, business_id=1):
    return VisitRecord(
        customer_id=customer_id,
        business_id=business_id,
        visit_date=when,
        amount_spent=amount,
        service_type=service
    )


@pytest.fixture
def customers():
    return [
        CustomerState(id=1, business_id=1, name='Amina', visits=2, total_spent=1000,
                      last_visit=datetime(2026, 3, 15, 10, 0)),
        CustomerState(id=2, business_id=1, name='Brian', visits=2, total_spent=5000,
                      last_visit=datetime(2026, 3, 14, 12, 0)),
        CustomerState(id=3, business_id=1, name='Chebet', visits=0, total_spent=0,
                      last_visit=datetime(2026, 1, 1, 9, 0)),
        CustomerState(id=4, business_id=2, name='Other shop', visits=1, total_spent=9999,
                      last_visit=datetime(2026, 3, 15, 11, 0)),
    ]


@pytest.fixture
def visits():
    return [
        _visit(1, datetime(2026, 3, 15, 10, 0), 1000, 'haircut'),
        _visit(1, datetime(2026, 3, 1, 9, 0), 0, 'haircut'),
        _visit(2, datetime(2026, 2, 20, 12, 0), 3000, 'styling'),
        _visit(2, datetime(2026, 3, 14, 12, 0), 2000, 'styling'),
        _visit(4, datetime(2026, 3, 15, 11, 0), 9999, 'massage', business_id=2),
    ]


@pytest.fixture
def rewards():
    return [
        RewardRecord(customer_id=1, business_id=1, earned_at=datetime(2026, 3, 10, 9, 0)),
        RewardRecord(customer_id=2, business_id=1, earned_at=datetime(2026, 2, 28, 9, 0)),
        RewardRecord(customer_id=4, business_id=2, earned_at=datetime(2026, 3, 12, 9, 0)),
    ]


class TestGrowth:
    """Tests for growth percentage."""

    @pytest.mark.parametrize('current,previous,expected', [
        (0, 0, 0),
        (5, 0, 100),
        (150, 100, 50),
        (50, 100, -50),
        (100, 100, 0),
    ])
    def test_growth(self, current, previous, expected):
        assert growth(current, previous) == expected

    def test_halves_round_up(self):
        """Test that .5 results round toward positive infinity."""
        assert growth(3, 2) == 50
        assert growth(1, 8) == -87  # -87.5
        assert growth(17, 8) == 113  # 112.5


class TestFormatCurrency:
    """Tests for minor-unit currency display."""

    def test_cents(self):
        assert format_currency(1250) == 'KES 12.50'

    def test_zero(self):
        assert format_currency(0) == 'KES 0.00'

    def test_fractional_average(self):
        """Test that averages round half up to the cent."""
        assert format_currency(5000 / 3) == 'KES 16.67'

    def test_other_currency(self):
        assert format_currency(99, 'USD') == 'USD 0.99'


class TestDashboardStats:
    """Tests for compute_dashboard_stats."""

    def test_empty_business(self):
        """Test that a business with no data reports zeros and N/A."""
        stats = compute_dashboard_stats(1, [], [], [], AS_OF)

        assert stats.today_visits == 0
        assert stats.active_customers == 0
        assert stats.rewards_earned == 0
        assert stats.customer_retention_rate == 0
        assert stats.top_service == NO_SERVICE
        assert stats.monthly_revenue == 'KES 0.00'
        assert stats.total_revenue == 'KES 0.00'
        assert stats.average_visit_value == 'KES 0.00'

    def test_headline_numbers(self, customers, visits, rewards):
        """Test today, monthly and all-time aggregates for one business."""
        stats = compute_dashboard_stats(1, customers, visits, rewards, AS_OF)

        assert stats.today_visits == 1
        assert stats.active_customers == 3
        assert stats.rewards_earned == 1
        assert stats.monthly_revenue == 'KES 30.00'
        assert stats.total_revenue == 'KES 60.00'
        assert stats.monthly_revenue_minor == 3000
        assert stats.total_revenue_minor == 6000

    def test_average_ignores_free_visits(self, customers, visits, rewards):
        """Test that zero-amount visits are excluded from the average."""
        stats = compute_dashboard_stats(1, customers, visits, rewards, AS_OF)

        assert stats.average_visit_value == 'KES 20.00'

    def test_top_service_tie_breaks_by_name(self, customers, visits, rewards):
        """Test that equally popular services resolve alphabetically."""
        stats = compute_dashboard_stats(1, customers, visits, rewards, AS_OF)

        assert stats.top_service == 'haircut'

    def test_retention(self, customers, visits, rewards):
        """Test that 2 of 3 customers active in 30 days rounds to 67."""
        stats = compute_dashboard_stats(1, customers, visits, rewards, AS_OF)

        assert stats.customer_retention_rate == 67

    def test_other_business_excluded(self, customers, visits, rewards):
        """Test that records of other businesses never leak in."""
        stats = compute_dashboard_stats(2, customers, visits, rewards, AS_OF)

        assert stats.active_customers == 1
        assert stats.total_revenue == 'KES 99.99'
        assert stats.top_service == 'massage'

    def test_to_dict_carries_raw_values(self, customers, visits, rewards):
        data = compute_dashboard_stats(1, customers, visits, rewards, AS_OF).to_dict()

        assert data['monthly_revenue'] == 'KES 30.00'
        assert data['raw']['monthly_revenue'] == 3000


class TestHelpers:
    """Tests for smaller aggregation helpers."""

    def test_top_service_ignores_null(self):
        visits = [_visit(1, AS_OF), _visit(1, AS_OF, service='nails')]
        assert top_service(visits) == 'nails'

    def test_top_service_none(self):
        assert top_service([_visit(1, AS_OF)]) == NO_SERVICE

    def test_retention_no_customers(self):
        assert retention_rate([], AS_OF) == 0

    def test_previous_month_wraps_year(self):
        assert previous_month_start(datetime(2026, 1, 20, 8, 0)) == datetime(2025, 12, 1)


class TestAnalytics:
    """Tests for trends, leaderboard, service mix and growth."""

    def test_trend_is_sparse(self, visits):
        """Test that days without visits are omitted, not zero-filled."""
        scoped = [v for v in visits if v.business_id == 1]
        points = visit_trends(scoped, AS_OF, days=30)

        assert [p.date for p in points] == [
            date(2026, 2, 20),
            date(2026, 3, 1),
            date(2026, 3, 14),
            date(2026, 3, 15),
        ]
        assert all(p.visits > 0 for p in points)
        assert points[0].revenue == 30.0

    def test_trend_window(self, visits):
        """Test that visits older than the window are dropped."""
        scoped = [v for v in visits if v.business_id == 1]
        points = visit_trends(scoped, AS_OF, days=7)

        assert [p.date for p in points] == [date(2026, 3, 14), date(2026, 3, 15)]

    def test_top_customers_by_spend(self, customers):
        ranked = top_customers([c for c in customers if c.business_id == 1], limit=2)

        assert [entry.customer.id for entry in ranked] == [2, 1]
        assert ranked[0].spent == 5000
        assert ranked[0].visits == 2

    def test_top_customers_tie_keeps_lower_id(self):
        tied = [
            CustomerState(id=9, business_id=1, total_spent=500),
            CustomerState(id=5, business_id=1, total_spent=500),
        ]
        assert [entry.customer.id for entry in top_customers(tied)] == [5, 9]

    def test_service_popularity(self, visits):
        """Test counts, major-unit revenue and ordering."""
        scoped = [v for v in visits if v.business_id == 1]
        popularity = service_popularity(scoped)

        assert [(s.service, s.count, s.revenue) for s in popularity] == [
            ('haircut', 2, 10.0),
            ('styling', 2, 50.0),
        ]

    def test_service_revenue_matches_visits(self, visits):
        """Test that per-service revenue sums back to the visit amounts."""
        scoped = [v for v in visits if v.business_id == 1]
        popularity = service_popularity(scoped)

        assert sum(s.revenue_minor for s in popularity) == sum(
            v.amount_spent for v in scoped if v.service_type is not None
        )

    def test_monthly_growth(self, visits):
        """Test month-to-date against the full previous month."""
        scoped = [v for v in visits if v.business_id == 1]
        result = monthly_growth(scoped, AS_OF)

        # March: 3 visits, 3000 cents, 2 customers. February: 1 visit, 3000 cents, 1 customer.
        assert result.visits == 200
        assert result.revenue == 0
        assert result.customers == 100

    def test_compute_analytics(self, customers, visits):
        data = compute_analytics(1, customers, visits, AS_OF).to_dict()

        assert len(data['visit_trends']) == 4
        assert data['top_customers'][0]['customer']['id'] == 2
        assert data['service_popularity'][0]['service'] == 'haircut'
        assert data['monthly_growth'] == {'visits': 200, 'revenue': 0, 'customers': 100}

    def test_empty_analytics(self):
        data = compute_analytics(1, [], [], AS_OF).to_dict()

        assert data == {
            'visit_trends': [],
            'top_customers': [],
            'service_popularity': [],
            'monthly_growth': {'visits': 0, 'revenue': 0, 'customers': 0},
        }


class TestCallerTimezone:
    """Tests that an offset-aware as_of cuts days and months on the caller's clock."""

    def test_today_follows_caller_day(self):
        """Test that 22:30 UTC on the 18th is the 19th in Nairobi."""
        late_visit = [_visit(1, datetime(2026, 10, 18, 22, 30), 500)]

        local = compute_dashboard_stats(1, [], late_visit, [], datetime(2026, 10, 19, 9, 0, tzinfo=NAIROBI))
        utc = compute_dashboard_stats(1, [], late_visit, [], datetime(2026, 10, 19, 6, 0))

        assert local.today_visits == 1
        assert utc.today_visits == 0

    def test_month_follows_caller_month(self):
        visits = [_visit(1, datetime(2026, 9, 30, 22, 0), 1500)]
        rewards = [RewardRecord(customer_id=1, business_id=1, earned_at=datetime(2026, 9, 30, 23, 0))]

        stats = compute_dashboard_stats(1, [], visits, rewards, datetime(2026, 10, 19, 9, 0, tzinfo=NAIROBI))

        assert stats.monthly_revenue == 'KES 15.00'
        assert stats.rewards_earned == 1

    def test_retention_window_in_caller_zone(self):
        """Test that a visit after as_of in real time is outside the window."""
        customer = CustomerState(id=1, business_id=1, last_visit=datetime(2026, 10, 19, 7, 0))

        assert compute_dashboard_stats(
            1, [customer], [], [], datetime(2026, 10, 19, 9, 0, tzinfo=NAIROBI)
        ).customer_retention_rate == 0

    def test_trend_dates_in_caller_zone(self):
        visits = [_visit(1, datetime(2026, 10, 18, 22, 30), 500)]
        customer = CustomerState(id=1, business_id=1, total_spent=500,
                                 last_visit=datetime(2026, 10, 18, 22, 30))

        analytics = compute_analytics(1, [customer], visits, datetime(2026, 10, 19, 9, 0, tzinfo=NAIROBI))

        assert [point.date for point in analytics.visit_trends] == [date(2026, 10, 19)]
        assert analytics.top_customers[0].customer.last_visit == datetime(2026, 10, 18, 22, 30)
