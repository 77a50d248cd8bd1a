"""
SMS API endpoints.
"""
from flask import Blueprint, request, jsonify, current_app
from ..services.sms_service import SmsService
from .params import json_body, parse_limit

sms_bp = Blueprint('sms', __name__)


@sms_bp.route('/<int:business_id>/sms', methods=['POST'])
def send_sms(business_id):
    """
    Send a text message to a customer.

    JSON body:
        phone: Recipient (required)
        message: Body (required)
        type: welcome, reward_earned, reward_reminder, reminder or promotion
        customer_id: Optional customer reference
    """
    data = json_body()

    notification = SmsService(business_id).send(
        phone=data.get('phone'),
        message=data.get('message'),
        sms_type=data.get('type'),
        customer_id=data.get('customer_id')
    )
    return jsonify(notification.to_dict()), 201


@sms_bp.route('/<int:business_id>/sms', methods=['GET'])
def list_sms(business_id):
    limit = parse_limit(current_app.config.get('SMS_HISTORY_LIMIT', 50))
    notifications = SmsService(business_id).list_notifications(limit)
    return jsonify([n.to_dict() for n in notifications])
