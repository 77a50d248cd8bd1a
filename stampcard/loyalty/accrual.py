"""
Visit-to-reward accrual engine.

Pure functions with no database access. Given a customer's counters and the
business reward policy they decide the new counters and whether a reward is
minted.

Reward rule: every Nth visit earns a reward, where N is the business's
``visits_required``. The visit counter is never reset; a reward is minted
whenever ``visits % visits_required == 0``. A customer can therefore hold
several unredeemed rewards from successive cycles.
"""
from dataclasses import replace
from datetime import datetime
from typing import Optional

from ..utils.exceptions import (
    AlreadyRedeemedError,
    BusinessNotFoundError,
    CustomerNotFoundError,
    InvalidPolicyError,
    RewardNotFoundError,
    ValidationError,
)
from .records import (
    BusinessPolicy,
    CheckInResult,
    CustomerProgress,
    CustomerState,
    RedemptionResult,
    RewardRecord,
    VisitInput,
    VisitRecord,
    reward_expiry,
)

MAX_RATING = 5


def validate_policy(business: BusinessPolicy) -> None:
    """Raise InvalidPolicyError unless the policy can be applied."""
    if business.visits_required is None or business.visits_required <= 0:
        raise InvalidPolicyError(
            f"visits_required must be at least 1 (got {business.visits_required})"
        )
    if business.reward_expiry_days is None or business.reward_expiry_days < 0:
        raise InvalidPolicyError(
            f"reward_expiry_days cannot be negative (got {business.reward_expiry_days})"
        )


def build_visit_input(amount_spent=0, service_type=None, notes=None, rating=None) -> VisitInput:
    """
    Validate raw check-in details.

    Args:
        amount_spent: Minor units (cents), integer >= 0; None means 0
        service_type: Optional service name; blank strings become None
        notes: Optional free text
        rating: Optional 1-5 star rating

    Raises:
        ValidationError: On malformed values
    """
    if amount_spent is None:
        amount_spent = 0
    if isinstance(amount_spent, bool):
        raise ValidationError("amount_spent must be an integer number of cents", "amount_spent")
    if isinstance(amount_spent, float):
        if not amount_spent.is_integer():
            raise ValidationError("amount_spent must be an integer number of cents", "amount_spent")
        amount_spent = int(amount_spent)
    if isinstance(amount_spent, str):
        try:
            amount_spent = int(amount_spent.strip())
        except ValueError:
            raise ValidationError("amount_spent must be an integer number of cents", "amount_spent")
    if not isinstance(amount_spent, int):
        raise ValidationError("amount_spent must be an integer number of cents", "amount_spent")
    if amount_spent < 0:
        raise ValidationError("amount_spent cannot be negative", "amount_spent")

    if service_type is not None:
        if not isinstance(service_type, str):
            raise ValidationError("service_type must be a string", "service_type")
        service_type = service_type.strip() or None

    if rating is not None:
        if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= MAX_RATING:
            raise ValidationError(f"rating must be an integer from 1 to {MAX_RATING}", "rating")

    return VisitInput(
        amount_spent=amount_spent,
        service_type=service_type,
        notes=notes,
        rating=rating,
    )


def is_reward_visit(visit_count: int, visits_required: int) -> bool:
    """True when the ``visit_count``-th visit completes a reward cycle."""
    return visit_count > 0 and visit_count % visits_required == 0


def record_visit(
    customer: Optional[CustomerState],
    business: Optional[BusinessPolicy],
    visit_input: VisitInput,
    now: datetime,
) -> CheckInResult:
    """
    Apply one check-in to a customer.

    Returns the updated customer counters, the new visit, and the reward
    minted by this visit (at most one), or None when no reward is due.

    Raises:
        BusinessNotFoundError / CustomerNotFoundError: Missing snapshots
        InvalidPolicyError: visits_required <= 0
        ValidationError: Negative spend or customer of another business
    """
    if business is None:
        raise BusinessNotFoundError()
    if customer is None:
        raise CustomerNotFoundError()
    validate_policy(business)

    if customer.business_id != business.id:
        raise ValidationError(
            f"Customer {customer.id} does not belong to business {business.id}",
            "customer_id"
        )
    if visit_input.amount_spent < 0:
        raise ValidationError("amount_spent cannot be negative", "amount_spent")

    new_visit_count = customer.visits + 1
    earned = is_reward_visit(new_visit_count, business.visits_required)

    reward = None
    rewards_earned = customer.rewards_earned
    if earned:
        reward = RewardRecord(
            customer_id=customer.id,
            business_id=business.id,
            earned=True,
            redeemed=False,
            earned_at=now,
            expires_at=reward_expiry(now, business.reward_expiry_days),
        )
        rewards_earned += 1

    total_spent = customer.total_spent
    if visit_input.amount_spent > 0:
        total_spent += visit_input.amount_spent

    updated = replace(
        customer,
        visits=new_visit_count,
        rewards_earned=rewards_earned,
        total_spent=total_spent,
        last_visit=now,
    )

    visit = VisitRecord(
        customer_id=customer.id,
        business_id=business.id,
        visit_date=now,
        amount_spent=visit_input.amount_spent,
        service_type=visit_input.service_type,
        reward_earned=earned,
        notes=visit_input.notes,
        rating=visit_input.rating,
    )

    return CheckInResult(customer=updated, visit=visit, reward=reward)


def redeem_reward(
    reward: Optional[RewardRecord],
    customer: Optional[CustomerState],
    now: datetime,
) -> RedemptionResult:
    """
    Redeem an earned reward and bump the owner's redeemed counter.

    Expired rewards can still be redeemed; expiry is informational only.

    Raises:
        RewardNotFoundError / CustomerNotFoundError: Missing snapshots
        AlreadyRedeemedError: Reward was redeemed before
        ValidationError: Reward not earned, owned by someone else, or the
            redeemed counter would exceed the earned counter
    """
    if reward is None:
        raise RewardNotFoundError()
    if reward.redeemed:
        raise AlreadyRedeemedError(reward.id)
    if not reward.earned:
        raise ValidationError("Reward has not been earned", "reward_id")
    if customer is None:
        raise CustomerNotFoundError(reward.customer_id)
    if customer.id != reward.customer_id:
        raise ValidationError(
            f"Reward {reward.id} does not belong to customer {customer.id}",
            "customer_id"
        )
    if customer.rewards_redeemed + 1 > customer.rewards_earned:
        raise ValidationError(
            "Customer has no earned rewards left to redeem",
            "rewards_redeemed"
        )

    return RedemptionResult(
        reward=replace(reward, redeemed=True, redeemed_at=now),
        customer=replace(customer, rewards_redeemed=customer.rewards_redeemed + 1),
    )


def cycle_progress(customer: CustomerState, business: BusinessPolicy) -> CustomerProgress:
    """
    Progress summary shown in the customer list.

    ``progress_percentage`` is the share of the first cycle completed, capped
    at 100. ``visits_until_reward`` counts down within the current cycle.
    """
    validate_policy(business)
    required = business.visits_required

    progress = min(customer.visits / required * 100, 100.0)
    remaining = required - (customer.visits % required)
    average = customer.total_spent / max(customer.visits, 1) if customer.total_spent > 0 else 0.0

    return CustomerProgress(
        progress_percentage=progress,
        has_available_reward=customer.rewards_earned > customer.rewards_redeemed,
        average_spent=average,
        visits_until_reward=remaining,
    )
