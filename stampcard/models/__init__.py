"""
Database models for Stampcard.
Businesses, their customers, check-in visits, rewards and SMS history.
"""
from .business import Business
from .customer import Customer
from .visit import Visit
from .reward import Reward
from .sms import SmsNotification, SmsType, SmsStatus

__all__ = [
    'Business',
    'Customer',
    'Visit',
    'Reward',
    'SmsNotification',
    'SmsType',
    'SmsStatus',
]
