"""
CLI commands for business owners and operators.

The stats commands can be run from cron to snapshot a business's dashboard:

# Nightly dashboard snapshot
55 23 * * * cd /app && flask loyalty stats --business-id=1 --json >> stats.jsonl
"""
import json

import click
from flask.cli import with_appcontext

from ..services.analytics_service import AnalyticsService
from ..services.business_service import BusinessService
from ..utils.exceptions import LoyaltyError, ValidationError
from ..utils.logging_config import get_logger
from ..utils.timestamps import parse_timestamp

logger = get_logger(__name__)


@click.group('loyalty')
def loyalty_cli():
    """Loyalty program commands."""
    pass


def _parse_as_of(value):
    try:
        return parse_timestamp(value, 'as_of')
    except ValidationError:
        raise click.BadParameter(f"'{value}' is not an ISO timestamp", param_hint='--as-of')


@loyalty_cli.command('create-business')
@click.option('--name', required=True, help='Business name')
@click.option('--phone', default=None, help='Contact phone')
@click.option('--visits-required', type=int, default=None, help='Visits per reward')
@click.option('--reward', 'reward_description', default=None, help='Reward description')
@click.option('--expiry-days', 'reward_expiry_days', type=int, default=None,
              help='Days a reward stays valid')
@with_appcontext
def create_business(name, phone, visits_required, reward_description, reward_expiry_days):
    """Create a business with its reward policy."""
    data = {'name': name}
    for key, value in (
        ('phone', phone),
        ('visits_required', visits_required),
        ('reward_description', reward_description),
        ('reward_expiry_days', reward_expiry_days),
    ):
        if value is not None:
            data[key] = value

    try:
        business = BusinessService().create_business(data)
    except LoyaltyError as e:
        raise click.ClickException(e.message)

    click.echo(f"Created business {business.id}: {business.name}")
    click.echo(f"  Reward: {business.reward_description} every {business.visits_required} visits")
    click.echo(f"  Expires after: {business.reward_expiry_days} days")


@loyalty_cli.command('stats')
@click.option('--business-id', type=int, required=True, help='Business ID')
@click.option('--as-of', default=None, help='ISO timestamp (default: now)')
@click.option('--json', 'as_json', is_flag=True, help='Print JSON instead of text')
@with_appcontext
def show_stats(business_id, as_of, as_json):
    """Show dashboard headline stats for a business."""
    try:
        stats = AnalyticsService(business_id).get_dashboard_stats(as_of=_parse_as_of(as_of))
    except LoyaltyError as e:
        raise click.ClickException(e.message)

    if as_json:
        click.echo(json.dumps(stats.to_dict()))
        return

    click.echo(f"\nDashboard for business {business_id}:")
    click.echo(f"  Visits today: {stats.today_visits}")
    click.echo(f"  Active customers: {stats.active_customers}")
    click.echo(f"  Rewards earned: {stats.rewards_earned}")
    click.echo(f"  Revenue this month: {stats.monthly_revenue}")
    click.echo(f"  Revenue all time: {stats.total_revenue}")
    click.echo(f"  Average visit: {stats.average_visit_value}")
    click.echo(f"  Top service: {stats.top_service}")
    click.echo(f"  Retention: {stats.customer_retention_rate}%")


@loyalty_cli.command('analytics')
@click.option('--business-id', type=int, required=True, help='Business ID')
@click.option('--as-of', default=None, help='ISO timestamp (default: now)')
@click.option('--json', 'as_json', is_flag=True, help='Print JSON instead of text')
@with_appcontext
def show_analytics(business_id, as_of, as_json):
    """Show visit trends, top customers, service mix and monthly growth."""
    try:
        analytics = AnalyticsService(business_id).get_analytics(as_of=_parse_as_of(as_of))
    except LoyaltyError as e:
        raise click.ClickException(e.message)

    logger.debug(f"Analytics computed for business {business_id}")

    if as_json:
        click.echo(json.dumps(analytics.to_dict()))
        return

    growth = analytics.monthly_growth
    click.echo(f"\nMonth over month for business {business_id}:")
    click.echo(f"  Visits: {growth.visits:+d}%")
    click.echo(f"  Revenue: {growth.revenue:+d}%")
    click.echo(f"  New customers: {growth.customers:+d}%")

    click.echo(f"\n  Top customers:")
    for entry in analytics.top_customers:
        click.echo(f"    {entry.customer.name} ({entry.customer.phone}): "
                   f"{entry.visits} visits, {entry.spent} spent")

    click.echo(f"\n  Services:")
    for entry in analytics.service_popularity:
        click.echo(f"    {entry.service}: {entry.count} visits, {entry.revenue:.2f}")

    click.echo(f"\n  Daily visits:")
    for point in analytics.visit_trends:
        click.echo(f"    {point.date.isoformat()}: {point.visits} visits, {point.revenue:.2f}")


def init_app(app):
    """Register CLI commands with the Flask app."""
    app.cli.add_command(loyalty_cli)
