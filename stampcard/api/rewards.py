"""
Rewards API endpoints.

Handles:
- Available rewards for a customer
- Reward redemption
"""
from flask import Blueprint, jsonify
from ..services.reward_service import RewardService

rewards_bp = Blueprint('rewards', __name__)


@rewards_bp.route('/customers/<int:customer_id>/rewards', methods=['GET'])
def list_available_rewards(customer_id):
    """Earned, unredeemed rewards (expired ones included)."""
    rewards = RewardService().get_available_rewards(customer_id)
    return jsonify([reward.to_dict() for reward in rewards])


@rewards_bp.route('/rewards/<int:reward_id>/redeem', methods=['POST'])
def redeem_reward(reward_id):
    """
    Redeem a reward.

    Returns 404 for an unknown reward and 409 if it was already redeemed.
    """
    reward = RewardService().redeem(reward_id)
    return jsonify(reward.to_dict())
