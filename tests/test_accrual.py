"""
Tests for the visit-to-reward accrual engine.

Covers:
- Reward minting on every Nth visit
- Counter updates and spend accumulation
- Check-in validation (policy, ownership, visit details)
- Redemption rules
- Customer progress summary
"""
import pytest
from datetime import datetime, timedelta

from stampcard.loyalty.accrual import (
    build_visit_input,
    cycle_progress,
    is_reward_visit,
    record_visit,
    redeem_reward,
)
from stampcard.loyalty.records import BusinessPolicy, CustomerState, RewardRecord, VisitInput
from stampcard.utils.exceptions import (
    AlreadyRedeemedError,
    BusinessNotFoundError,
    CustomerNotFoundError,
    InvalidPolicyError,
    RewardNotFoundError,
    ValidationError,
)

NOW = datetime(2026, 3, 15, 10, 30)


def _policy(visits_required=10, expiry_days=30, business_id=1):
    return BusinessPolicy(id=business_id, visits_required=visits_required, reward_expiry_days=expiry_days)


def _customer(visits=0, **fields):
    fields.setdefault('id', 7)
    fields.setdefault('business_id', 1)
    return CustomerState(visits=visits, **fields)


class TestRecordVisitRewards:
    """Tests for reward minting in record_visit."""

    def test_tenth_visit_earns_reward(self):
        """Test that going from 9 to 10 visits mints exactly one reward."""
        result = record_visit(_customer(visits=9), _policy(10), VisitInput(), NOW)

        assert result.customer.visits == 10
        assert result.customer.rewards_earned == 1
        assert result.reward_earned is True
        assert result.reward.earned is True
        assert result.reward.redeemed is False
        assert result.reward.earned_at == NOW
        assert result.reward.expires_at == NOW + timedelta(days=30)
        assert result.visit.reward_earned is True

    def test_fourth_visit_earns_nothing(self):
        """Test that going from 3 to 4 visits only bumps the visit counter."""
        result = record_visit(_customer(visits=3), _policy(10), VisitInput(), NOW)

        assert result.customer.visits == 4
        assert result.customer.rewards_earned == 0
        assert result.reward is None
        assert result.visit.reward_earned is False

    def test_rewards_equal_completed_cycles(self):
        """Test that after any number of visits, rewards == visits // N."""
        policy = _policy(visits_required=4)
        customer = _customer()
        minted_on = []

        for _ in range(17):
            result = record_visit(customer, policy, VisitInput(), NOW)
            customer = result.customer
            if result.reward_earned:
                minted_on.append(customer.visits)
            assert customer.rewards_earned == customer.visits // 4

        assert minted_on == [4, 8, 12, 16]

    def test_visit_counter_never_resets(self):
        """Test that counting continues past a completed cycle."""
        result = record_visit(_customer(visits=10, rewards_earned=1), _policy(10), VisitInput(), NOW)

        assert result.customer.visits == 11
        assert result.reward is None

    def test_threshold_of_one_rewards_every_visit(self):
        """Test that visits_required=1 mints a reward on each visit."""
        result = record_visit(_customer(visits=5, rewards_earned=5), _policy(1), VisitInput(), NOW)

        assert result.reward_earned is True
        assert result.customer.rewards_earned == 6

    def test_zero_expiry_expires_at_earn_time(self):
        """Test that reward_expiry_days=0 gives expires_at == earned_at."""
        result = record_visit(_customer(visits=9), _policy(10, expiry_days=0), VisitInput(), NOW)

        assert result.reward.expires_at == NOW

    def test_is_reward_visit(self):
        """Test the every-Nth rule directly."""
        assert is_reward_visit(10, 10)
        assert is_reward_visit(20, 10)
        assert not is_reward_visit(9, 10)
        assert not is_reward_visit(0, 10)


class TestRecordVisitCounters:
    """Tests for spend and timestamp updates."""

    def test_spend_accumulates(self):
        """Test that total_spent grows by the visit amount."""
        result = record_visit(
            _customer(visits=2, total_spent=1500),
            _policy(),
            VisitInput(amount_spent=2500, service_type='haircut'),
            NOW
        )

        assert result.customer.total_spent == 4000
        assert result.visit.amount_spent == 2500
        assert result.visit.service_type == 'haircut'

    def test_zero_spend_leaves_total_unchanged(self):
        """Test that a free visit does not change total_spent."""
        result = record_visit(_customer(total_spent=800), _policy(), VisitInput(amount_spent=0), NOW)

        assert result.customer.total_spent == 800

    def test_last_visit_set_to_now(self):
        """Test that last_visit and visit_date use the check-in time."""
        result = record_visit(_customer(), _policy(), VisitInput(), NOW)

        assert result.customer.last_visit == NOW
        assert result.visit.visit_date == NOW

    def test_input_snapshot_not_mutated(self):
        """Test that the caller's snapshot is left untouched."""
        customer = _customer(visits=9)
        record_visit(customer, _policy(), VisitInput(amount_spent=100), NOW)

        assert customer.visits == 9
        assert customer.total_spent == 0


class TestRecordVisitValidation:
    """Tests for record_visit error cases."""

    def test_zero_threshold_rejected(self):
        """Test that visits_required=0 raises InvalidPolicyError."""
        with pytest.raises(InvalidPolicyError):
            record_visit(_customer(), _policy(visits_required=0), VisitInput(), NOW)

    def test_negative_threshold_rejected(self):
        """Test that a negative threshold raises InvalidPolicyError."""
        with pytest.raises(InvalidPolicyError):
            record_visit(_customer(), _policy(visits_required=-3), VisitInput(), NOW)

    def test_missing_business(self):
        """Test that a missing business raises BusinessNotFoundError."""
        with pytest.raises(BusinessNotFoundError):
            record_visit(_customer(), None, VisitInput(), NOW)

    def test_missing_customer(self):
        """Test that a missing customer raises CustomerNotFoundError."""
        with pytest.raises(CustomerNotFoundError):
            record_visit(None, _policy(), VisitInput(), NOW)

    def test_customer_of_other_business(self):
        """Test that a customer cannot check in at another business."""
        with pytest.raises(ValidationError):
            record_visit(_customer(business_id=2), _policy(business_id=1), VisitInput(), NOW)

    def test_negative_amount(self):
        """Test that a negative spend is rejected."""
        with pytest.raises(ValidationError):
            record_visit(_customer(), _policy(), VisitInput(amount_spent=-1), NOW)


class TestBuildVisitInput:
    """Tests for raw check-in detail parsing."""

    def test_defaults(self):
        """Test that no details means a zero-spend visit."""
        visit_input = build_visit_input()

        assert visit_input.amount_spent == 0
        assert visit_input.service_type is None
        assert visit_input.rating is None

    def test_none_amount_is_zero(self):
        assert build_visit_input(amount_spent=None).amount_spent == 0

    def test_numeric_string_amount(self):
        """Test that form-encoded amounts are accepted."""
        assert build_visit_input(amount_spent='1500').amount_spent == 1500

    def test_whole_float_amount(self):
        assert build_visit_input(amount_spent=2000.0).amount_spent == 2000

    @pytest.mark.parametrize('amount', [-100, 12.5, 'abc', True, [100]])
    def test_invalid_amounts(self, amount):
        """Test that malformed or negative amounts raise ValidationError."""
        with pytest.raises(ValidationError) as exc_info:
            build_visit_input(amount_spent=amount)
        assert exc_info.value.field == 'amount_spent'

    def test_blank_service_type_is_none(self):
        assert build_visit_input(service_type='   ').service_type is None

    def test_service_type_trimmed(self):
        assert build_visit_input(service_type=' styling ').service_type == 'styling'

    @pytest.mark.parametrize('rating', [0, 6, '5', True])
    def test_invalid_ratings(self, rating):
        """Test that ratings outside 1-5 are rejected."""
        with pytest.raises(ValidationError):
            build_visit_input(rating=rating)

    def test_valid_rating(self):
        assert build_visit_input(rating=5).rating == 5


class TestRedeemReward:
    """Tests for redeem_reward."""

    def _reward(self, **fields):
        fields.setdefault('id', 3)
        fields.setdefault('customer_id', 7)
        fields.setdefault('business_id', 1)
        fields.setdefault('earned_at', NOW - timedelta(days=2))
        return RewardRecord(**fields)

    def test_redeem(self):
        """Test that redemption marks the reward and bumps the counter."""
        customer = _customer(visits=10, rewards_earned=1)
        result = redeem_reward(self._reward(), customer, NOW)

        assert result.reward.redeemed is True
        assert result.reward.redeemed_at == NOW
        assert result.customer.rewards_redeemed == 1
        assert result.customer.rewards_earned == 1

    def test_redeem_expired_reward(self):
        """Test that expiry does not block redemption."""
        reward = self._reward(expires_at=NOW - timedelta(days=1))
        result = redeem_reward(reward, _customer(rewards_earned=1), NOW)

        assert result.reward.redeemed is True

    def test_double_redeem(self):
        """Test that redeeming twice raises AlreadyRedeemedError."""
        reward = self._reward(redeemed=True, redeemed_at=NOW)

        with pytest.raises(AlreadyRedeemedError):
            redeem_reward(reward, _customer(rewards_earned=1, rewards_redeemed=1), NOW)

    def test_missing_reward(self):
        with pytest.raises(RewardNotFoundError):
            redeem_reward(None, _customer(rewards_earned=1), NOW)

    def test_unearned_reward(self):
        """Test that an unearned reward cannot be redeemed."""
        with pytest.raises(ValidationError):
            redeem_reward(self._reward(earned=False), _customer(rewards_earned=1), NOW)

    def test_reward_of_other_customer(self):
        with pytest.raises(ValidationError):
            redeem_reward(self._reward(customer_id=8), _customer(rewards_earned=1), NOW)

    def test_redeemed_cannot_exceed_earned(self):
        """Test that the counter invariant rewards_redeemed <= rewards_earned holds."""
        with pytest.raises(ValidationError):
            redeem_reward(self._reward(), _customer(rewards_earned=1, rewards_redeemed=1), NOW)


class TestCycleProgress:
    """Tests for cycle_progress."""

    def test_partial_cycle(self):
        """Test progress of a customer 4 visits into a 10-visit cycle."""
        progress = cycle_progress(_customer(visits=4, total_spent=2000), _policy(10))

        assert progress.progress_percentage == 40.0
        assert progress.visits_until_reward == 6
        assert progress.has_available_reward is False
        assert progress.average_spent == 500.0

    def test_progress_capped_at_100(self):
        """Test that progress never exceeds 100 percent."""
        progress = cycle_progress(_customer(visits=25, rewards_earned=2, rewards_redeemed=1), _policy(10))

        assert progress.progress_percentage == 100.0
        assert progress.visits_until_reward == 5
        assert progress.has_available_reward is True

    def test_new_customer(self):
        """Test a customer with no visits."""
        progress = cycle_progress(_customer(), _policy(10))

        assert progress.progress_percentage == 0.0
        assert progress.visits_until_reward == 10
        assert progress.average_spent == 0.0

    def test_invalid_policy(self):
        with pytest.raises(InvalidPolicyError):
            cycle_progress(_customer(), _policy(visits_required=0))
