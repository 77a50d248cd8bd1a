"""
Reward redemption service.
"""
import logging
from datetime import datetime
from typing import List

from ..extensions import db
from ..loyalty.accrual import redeem_reward
from ..models.customer import Customer
from ..models.reward import Reward
from ..utils.exceptions import CustomerNotFoundError, RewardNotFoundError
from ..utils.transactions import run_atomically

logger = logging.getLogger(__name__)


class RewardService:
    """
    Lists and redeems customer rewards.

    Usage:
        service = RewardService()
        available = service.get_available_rewards(customer_id)
        reward = service.redeem(available[0].id)
    """

    def get_available_rewards(self, customer_id: int) -> List[Reward]:
        """
        Earned, unredeemed rewards of a customer, oldest first.

        Expired rewards are included; expiry is not enforced.
        """
        if not db.session.get(Customer, customer_id):
            raise CustomerNotFoundError(customer_id)

        return (
            Reward.query
            .filter_by(customer_id=customer_id, earned=True, redeemed=False)
            .order_by(Reward.earned_at.asc(), Reward.id.asc())
            .all()
        )

    def _apply_redemption(self, reward_id: int) -> Reward:
        reward = Reward.query.filter_by(id=reward_id).with_for_update().first()
        if not reward:
            raise RewardNotFoundError(reward_id)

        customer = (
            Customer.query
            .filter_by(id=reward.customer_id)
            .with_for_update()
            .first()
        )

        result = redeem_reward(
            reward.snapshot(),
            customer.snapshot() if customer else None,
            datetime.utcnow()
        )

        reward.apply_record(result.reward)
        customer.apply_state(result.customer)
        db.session.flush()
        return reward

    def redeem(self, reward_id: int) -> Reward:
        """
        Redeem a reward and count it on the customer, as one transaction.

        Raises:
            RewardNotFoundError: Unknown reward id
            AlreadyRedeemedError: Reward was redeemed before (nothing changes)
            UnexpectedError: Persistence failure (nothing is written)
        """
        reward = run_atomically(
            lambda: self._apply_redemption(reward_id),
            description=f"Redemption of reward {reward_id}"
        )

        logger.info(f"Reward {reward.id} redeemed by customer {reward.customer_id}")
        return reward
