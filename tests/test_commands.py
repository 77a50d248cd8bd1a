"""
Tests for the `flask loyalty` CLI commands.
"""
import json
from datetime import datetime

from stampcard.extensions import db
from stampcard.models import Business, Visit
from stampcard.services.checkin_service import CheckInService


class TestCreateBusinessCommand:

    def test_create_business(self, app):
        runner = app.test_cli_runner()
        result = runner.invoke(args=[
            'loyalty', 'create-business', '--name', 'Glow Spa', '--visits-required', '5'
        ])

        assert result.exit_code == 0
        assert 'Created business' in result.output
        business = Business.query.filter_by(name='Glow Spa').one()
        assert business.visits_required == 5

    def test_invalid_policy(self, app):
        """Test that policy errors exit non-zero with the message."""
        runner = app.test_cli_runner()
        result = runner.invoke(args=[
            'loyalty', 'create-business', '--name', 'Glow Spa', '--visits-required', '0'
        ])

        assert result.exit_code != 0
        assert 'visits_required' in result.output


class TestStatsCommands:

    def test_stats_json(self, app, sample_business, sample_customer):
        CheckInService(sample_business.id).check_in(sample_customer.id, amount_spent=1500)

        result = app.test_cli_runner().invoke(args=[
            'loyalty', 'stats', '--business-id', str(sample_business.id), '--json'
        ])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data['active_customers'] == 1
        assert data['total_revenue'] == 'KES 15.00'

    def test_stats_text(self, app, sample_business):
        result = app.test_cli_runner().invoke(args=[
            'loyalty', 'stats', '--business-id', str(sample_business.id)
        ])

        assert result.exit_code == 0
        assert 'Top service: N/A' in result.output

    def test_analytics_as_of(self, app, sample_business):
        result = app.test_cli_runner().invoke(args=[
            'loyalty', 'analytics', '--business-id', str(sample_business.id),
            '--as-of', '2026-03-05T12:00:00', '--json'
        ])

        assert result.exit_code == 0
        assert json.loads(result.output)['visit_trends'] == []

    def test_unknown_business(self, app):
        result = app.test_cli_runner().invoke(args=['loyalty', 'stats', '--business-id', '99999'])

        assert result.exit_code != 0
        assert 'not found' in result.output

    def test_stats_as_of_with_offset(self, app, sample_business, sample_customer):
        """Test that an offset --as-of counts the visit on the caller's day."""
        db.session.add(Visit(
            customer_id=sample_customer.id,
            business_id=sample_business.id,
            visit_date=datetime(2026, 10, 18, 22, 30),
            amount_spent=500
        ))
        db.session.commit()

        result = app.test_cli_runner().invoke(args=[
            'loyalty', 'stats', '--business-id', str(sample_business.id),
            '--as-of', '2026-10-19T09:00:00+03:00', '--json'
        ])

        assert result.exit_code == 0
        assert json.loads(result.output)['today_visits'] == 1

    def test_invalid_as_of(self, app, sample_business):
        result = app.test_cli_runner().invoke(args=[
            'loyalty', 'stats', '--business-id', str(sample_business.id), '--as-of', 'yesterday'
        ])

        assert result.exit_code != 0
        assert 'not an ISO timestamp' in result.output
