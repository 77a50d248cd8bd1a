"""
Check-in API endpoints.
"""
from flask import Blueprint, request, jsonify, current_app
from ..services.checkin_service import CheckInService
from ..services.customer_service import CustomerService
from .params import json_body, parse_limit

visits_bp = Blueprint('visits', __name__)


@visits_bp.route('/<int:business_id>/customers/<int:customer_id>/checkin', methods=['POST'])
def check_in_customer(business_id, customer_id):
    """
    Check a customer in.

    JSON body (all optional):
        amount_spent: Spend in cents (integer >= 0)
        service_type: Service received
        notes: Visit notes
        rating: 1-5 stars

    Returns:
        visit, customer, and reward (null unless this visit earned one)
    """
    data = json_body()

    result = CheckInService(business_id).check_in(
        customer_id,
        amount_spent=data.get('amount_spent', 0),
        service_type=data.get('service_type'),
        notes=data.get('notes'),
        rating=data.get('rating')
    )

    reward = result['reward']
    return jsonify({
        'visit': result['visit'].to_dict(),
        'customer': result['customer'].to_dict(),
        'reward': reward.to_dict() if reward else None,
        'reward_earned': reward is not None
    })


@visits_bp.route('/<int:business_id>/visits/recent', methods=['GET'])
def get_recent_visits(business_id):
    """Latest check-ins with the customer embedded."""
    limit = parse_limit(current_app.config.get('RECENT_VISITS_LIMIT', 10))
    visits = CustomerService(business_id).get_recent_visits(limit)
    return jsonify([visit.to_dict(include_customer=True) for visit in visits])
