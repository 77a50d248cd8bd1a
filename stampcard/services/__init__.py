"""
Business logic services for Stampcard.
"""
from .business_service import BusinessService
from .customer_service import CustomerService
from .checkin_service import CheckInService
from .reward_service import RewardService
from .analytics_service import AnalyticsService
from .sms_service import SmsService

__all__ = [
    'BusinessService',
    'CustomerService',
    'CheckInService',
    'RewardService',
    'AnalyticsService',
    'SmsService',
]
