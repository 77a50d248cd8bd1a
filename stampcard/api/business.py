"""
Business API endpoints.
"""
from flask import Blueprint, request, jsonify
from ..services.business_service import BusinessService
from .params import json_body

business_bp = Blueprint('business', __name__)


@business_bp.route('', methods=['POST'])
def create_business():
    """
    Create a business.

    JSON body:
        name: Business name (required)
        phone, address: Optional contact details
        visits_required: Visits per reward (default from config)
        reward_description: Reward text
        reward_expiry_days: Days a reward stays valid
        sms_enabled: Whether reward texts are sent
    """
    business = BusinessService().create_business(json_body())
    return jsonify(business.to_dict()), 201


@business_bp.route('/<int:business_id>', methods=['GET'])
def get_business(business_id):
    business = BusinessService().get_business(business_id)
    return jsonify(business.to_dict())


@business_bp.route('/<int:business_id>', methods=['PUT'])
def update_business(business_id):
    """Update business details or loyalty settings."""
    business = BusinessService().update_business(business_id, json_body())
    return jsonify(business.to_dict())


@business_bp.route('/<int:business_id>/qr', methods=['GET'])
def get_qr_data(business_id):
    """
    Check-in URL customers reach by scanning the counter QR code.
    Rendering the QR image is left to the client.
    """
    business = BusinessService().get_business(business_id)
    qr_data = f"{request.host_url.rstrip('/')}/checkin/{business.id}"
    return jsonify({'qr_data': qr_data, 'business_name': business.name})
