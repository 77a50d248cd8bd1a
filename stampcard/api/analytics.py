"""
Analytics API endpoints for the business dashboard.
"""
from flask import Blueprint, jsonify
from ..services.analytics_service import AnalyticsService
from .params import parse_as_of

analytics_bp = Blueprint('analytics', __name__)


@analytics_bp.route('/<int:business_id>/stats', methods=['GET'])
def get_dashboard_stats(business_id):
    """
    Dashboard headline stats.

    Query params:
        as_of: ISO timestamp to compute "today"/"this month" against (default now)
    """
    stats = AnalyticsService(business_id).get_dashboard_stats(as_of=parse_as_of())
    return jsonify(stats.to_dict())


@analytics_bp.route('/<int:business_id>/analytics', methods=['GET'])
def get_analytics(business_id):
    """
    Visit trends, top customers, service popularity and monthly growth.

    Query params:
        as_of: ISO timestamp ending the trailing windows (default now)
    """
    analytics = AnalyticsService(business_id).get_analytics(as_of=parse_as_of())
    return jsonify(analytics.to_dict())
