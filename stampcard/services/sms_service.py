"""
SMS notification service for Stampcard.

Messages are logged in ``sms_notifications`` and handed to the gateway.
No real carrier is integrated: the gateway accepts every message, so each
notification moves pending -> sent immediately. Delivery is fire-and-forget;
nothing downstream waits on it.
"""
import logging
from datetime import datetime
from typing import List, Optional

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models.business import Business
from ..models.customer import Customer
from ..models.sms import SmsNotification, SmsStatus, SmsType
from ..utils.exceptions import BusinessNotFoundError, UnexpectedError, ValidationError

logger = logging.getLogger(__name__)

SMS_TYPES = [sms_type.value for sms_type in SmsType]
MAX_MESSAGE_LENGTH = 640  # four concatenated SMS segments


class SmsService:
    """
    Send and list customer text messages for one business.

    Usage:
        service = SmsService(business_id)
        service.send('+254700000001', 'See you soon!', 'reminder', customer_id=12)
        history = service.list_notifications(limit=20)
    """

    def __init__(self, business_id: int):
        self.business_id = business_id

    def _get_business(self) -> Business:
        business = db.session.get(Business, self.business_id)
        if not business:
            raise BusinessNotFoundError(self.business_id)
        return business

    def _deliver(self, notification: SmsNotification) -> bool:
        """Hand a message to the gateway. The stub gateway always accepts."""
        logger.info(
            f"SMS [{notification.type}] to {notification.phone} "
            f"for business {self.business_id}: {notification.message[:40]}"
        )
        return True

    def send(
        self,
        phone: str,
        message: str,
        sms_type: str,
        customer_id: Optional[int] = None
    ) -> SmsNotification:
        """
        Record and send a text message.

        Args:
            phone: Recipient phone number
            message: Message body
            sms_type: One of SMS_TYPES
            customer_id: Optional customer the message relates to

        Returns:
            The stored SmsNotification (status 'sent' or 'failed')
        """
        for field, value in (('phone', phone), ('message', message), ('type', sms_type)):
            if value is not None and not isinstance(value, str):
                raise ValidationError(f"{field} must be a string", field)
        if customer_id is not None and (isinstance(customer_id, bool) or not isinstance(customer_id, int)):
            raise ValidationError("customer_id must be an integer", "customer_id")

        if not phone or not phone.strip():
            raise ValidationError("phone is required", "phone")
        if not message or not message.strip():
            raise ValidationError("message is required", "message")
        if len(message) > MAX_MESSAGE_LENGTH:
            raise ValidationError(
                f"message cannot exceed {MAX_MESSAGE_LENGTH} characters", "message"
            )
        if sms_type not in SMS_TYPES:
            raise ValidationError(f"type must be one of: {SMS_TYPES}", "type")

        self._get_business()

        if customer_id is not None:
            customer = Customer.query.filter_by(
                id=customer_id, business_id=self.business_id
            ).first()
            if not customer:
                raise ValidationError(
                    f"Customer {customer_id} does not belong to business {self.business_id}",
                    "customer_id"
                )

        notification = SmsNotification(
            business_id=self.business_id,
            customer_id=customer_id,
            phone=phone.strip(),
            message=message,
            type=sms_type,
            status=SmsStatus.PENDING.value
        )

        try:
            db.session.add(notification)
            db.session.flush()

            if self._deliver(notification):
                notification.status = SmsStatus.SENT.value
                notification.sent_at = datetime.utcnow()
            else:
                notification.status = SmsStatus.FAILED.value

            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise UnexpectedError("Failed to record SMS notification", e) from e

        return notification

    def send_reward_earned(self, customer: Customer, business: Business) -> Optional[SmsNotification]:
        """
        Tell a customer they earned a reward.

        Skipped (returns None) when the business has SMS disabled or the
        customer opted out.
        """
        if not business.sms_enabled or not customer.sms_opt_in:
            return None

        message = (
            f"Congratulations {customer.name}! You've earned a reward at "
            f"{business.name}: {business.reward_description}. "
            f"Show this message on your next visit."
        )
        return self.send(
            customer.phone,
            message,
            SmsType.REWARD_EARNED.value,
            customer_id=customer.id
        )

    def list_notifications(self, limit: int = None) -> List[SmsNotification]:
        """Most recent notifications first."""
        if limit is None:
            limit = current_app.config.get('SMS_HISTORY_LIMIT', 50)
        self._get_business()

        return (
            SmsNotification.query
            .filter_by(business_id=self.business_id)
            .order_by(SmsNotification.created_at.desc(), SmsNotification.id.desc())
            .limit(limit)
            .all()
        )
