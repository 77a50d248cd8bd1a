"""
Customer API endpoints.
"""
from flask import Blueprint, jsonify
from ..services.customer_service import CustomerService
from .params import json_body

customers_bp = Blueprint('customers', __name__)


@customers_bp.route('/business/<int:business_id>/customers', methods=['GET'])
def list_customers(business_id):
    """
    List a business's customers, most recent visitors first.

    Each entry includes progress_percentage, has_available_reward,
    average_spent and visits_until_reward.
    """
    customers = CustomerService(business_id).list_customers()
    return jsonify(customers)


@customers_bp.route('/business/<int:business_id>/customers', methods=['POST'])
def create_customer(business_id):
    """
    Enroll a customer.

    JSON body:
        name: Customer name (required)
        phone: Phone number, unique per business (required)
        email, date_of_birth, gender, preferred_services, notes,
        sms_opt_in, email_opt_in: Optional profile fields
    """
    customer = CustomerService(business_id).create_customer(json_body())
    return jsonify(customer.to_dict()), 201


@customers_bp.route('/business/<int:business_id>/customer/phone/<path:phone>', methods=['GET'])
def get_customer_by_phone(business_id, phone):
    customer = CustomerService(business_id).get_by_phone(phone)
    return jsonify(customer.to_dict())


@customers_bp.route('/customers/<int:customer_id>', methods=['GET'])
def get_customer(customer_id):
    customer = CustomerService().get_customer(customer_id)
    return jsonify(customer.to_dict())


@customers_bp.route('/customers/<int:customer_id>', methods=['PUT'])
def update_customer(customer_id):
    """Update profile fields. Loyalty counters cannot be set here."""
    customer = CustomerService().update_customer(customer_id, json_body())
    return jsonify(customer.to_dict())


@customers_bp.route('/customers/<int:customer_id>/visits', methods=['GET'])
def get_customer_visits(customer_id):
    visits = CustomerService().get_customer_visits(customer_id)
    return jsonify([visit.to_dict() for visit in visits])
