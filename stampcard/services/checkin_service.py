"""
Check-in Service for Stampcard.

A check-in is one atomic unit of work:

1. lock the customer row (SELECT ... FOR UPDATE) and load the business policy
2. run the accrual engine on immutable snapshots
3. write the customer counters, the visit and the optional reward
4. commit all of it, or roll all of it back

Two concurrent check-ins for the same customer are serialized by the row
lock; where the database cannot lock (SQLite) the customer's ``version``
column turns the second writer into a retry instead of a lost update.
"""
import logging
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..loyalty.accrual import build_visit_input, record_visit
from ..loyalty.records import VisitInput
from ..models.business import Business
from ..models.customer import Customer
from ..models.reward import Reward
from ..models.visit import Visit
from ..utils.exceptions import BusinessNotFoundError, CustomerNotFoundError, LoyaltyError
from ..utils.transactions import run_atomically
from .sms_service import SmsService

logger = logging.getLogger(__name__)


class CheckInService:
    """
    Records customer visits for one business and grants rewards.

    Usage:
        service = CheckInService(business_id)
        result = service.check_in(customer_id, amount_spent=50000, service_type='haircut')
        if result['reward']:
            ...
    """

    def __init__(self, business_id: int, sms_service: SmsService = None):
        self.business_id = business_id
        self.sms_service = sms_service or SmsService(business_id)

    def _apply_check_in(self, customer_id: int, visit_input: VisitInput):
        business = db.session.get(Business, self.business_id)
        if not business:
            raise BusinessNotFoundError(self.business_id)

        customer = (
            Customer.query
            .filter_by(id=customer_id, business_id=self.business_id)
            .with_for_update()
            .first()
        )
        if not customer:
            raise CustomerNotFoundError(customer_id)

        result = record_visit(
            customer.snapshot(),
            business.policy(),
            visit_input,
            datetime.utcnow()
        )

        customer.apply_state(result.customer)

        visit = Visit.from_record(result.visit)
        db.session.add(visit)

        reward = None
        if result.reward is not None:
            reward = Reward.from_record(result.reward)
            db.session.add(reward)

        db.session.flush()
        return business, customer, visit, reward

    def check_in(
        self,
        customer_id: int,
        amount_spent: int = 0,
        service_type: Optional[str] = None,
        notes: Optional[str] = None,
        rating: Optional[int] = None
    ) -> Dict[str, Any]:
        """
        Record a visit and mint a reward when the visit completes a cycle.

        Args:
            customer_id: Customer checking in (must belong to this business)
            amount_spent: Spend in minor units (cents), >= 0
            service_type: Optional service name (haircut, styling, ...)
            notes: Optional visit notes
            rating: Optional 1-5 star rating

        Returns:
            Dict with 'customer', 'visit' and 'reward' (None when not earned)

        Raises:
            BusinessNotFoundError / CustomerNotFoundError
            InvalidPolicyError: If the business threshold is not positive
            ValidationError: Malformed visit details
            UnexpectedError: Persistence failure (nothing is written)
        """
        visit_input = build_visit_input(amount_spent, service_type, notes, rating)

        business, customer, visit, reward = run_atomically(
            lambda: self._apply_check_in(customer_id, visit_input),
            description=f"Check-in for customer {customer_id}"
        )

        logger.info(
            f"Check-in: customer {customer.id} at business {business.id} "
            f"visit #{customer.visits} spent {visit.amount_spent}"
            + (f" -> reward {reward.id} earned" if reward else "")
        )

        if reward is not None:
            self._notify_reward_earned(customer, business)

        return {
            'customer': customer,
            'visit': visit,
            'reward': reward,
        }

    def _notify_reward_earned(self, customer: Customer, business: Business) -> None:
        """Text the customer about a new reward. Never undoes the check-in."""
        try:
            self.sms_service.send_reward_earned(customer, business)
        except (LoyaltyError, SQLAlchemyError) as e:
            logger.warning(
                f"Reward SMS for customer {customer.id} not sent: {e}"
            )
