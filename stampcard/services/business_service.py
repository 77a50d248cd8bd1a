"""
Business settings service.
"""
import logging
from typing import Any, Dict

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models.business import Business
from ..utils.exceptions import (
    BusinessNotFoundError,
    InvalidPolicyError,
    UnexpectedError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Fields a business owner may edit from the settings screen
UPDATABLE_FIELDS = (
    'name', 'phone', 'address', 'visits_required',
    'reward_description', 'reward_expiry_days', 'sms_enabled',
)


def _as_int(value, field: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be an integer", field)
    if isinstance(value, float) and not value.is_integer():
        raise ValidationError(f"{field} must be an integer", field)
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be an integer", field)


def _as_bool(value, field: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ('true', 'false'):
        return value.lower() == 'true'
    raise ValidationError(f"{field} must be true or false", field)


class BusinessService:
    """
    Create, read and update businesses and their reward policy.

    Usage:
        service = BusinessService()
        business = service.create_business({'name': 'Kinyozi Cuts', 'visits_required': 8})
        service.update_business(business.id, {'reward_expiry_days': 60})
    """

    def get_business(self, business_id: int) -> Business:
        business = db.session.get(Business, business_id)
        if not business:
            raise BusinessNotFoundError(business_id)
        return business

    def _clean(self, data: Dict[str, Any]) -> Dict[str, Any]:
        cleaned = {}
        for field in UPDATABLE_FIELDS:
            if field not in data:
                continue
            value = data[field]

            if field == 'name':
                if not value or not str(value).strip():
                    raise ValidationError("name is required", "name")
                value = str(value).strip()
            elif field == 'visits_required':
                value = _as_int(value, field)
                if value < 1:
                    raise InvalidPolicyError(f"visits_required must be at least 1 (got {value})")
            elif field == 'reward_expiry_days':
                value = _as_int(value, field)
                if value < 0:
                    raise InvalidPolicyError(f"reward_expiry_days cannot be negative (got {value})")
            elif field == 'reward_description':
                if not value or not str(value).strip():
                    raise ValidationError("reward_description cannot be empty", field)
                value = str(value).strip()
            elif field == 'sms_enabled':
                value = _as_bool(value, field)

            cleaned[field] = value
        return cleaned

    def create_business(self, data: Dict[str, Any]) -> Business:
        """
        Create a business. Missing policy fields fall back to the
        DEFAULT_* config values.
        """
        data = data or {}
        if 'name' not in data:
            raise ValidationError("name is required", "name")

        config = current_app.config
        values = {
            'visits_required': config.get('DEFAULT_VISITS_REQUIRED', 10),
            'reward_expiry_days': config.get('DEFAULT_REWARD_EXPIRY_DAYS', 30),
            'reward_description': config.get('DEFAULT_REWARD_DESCRIPTION', 'Free service'),
            'sms_enabled': True,
        }
        values.update(self._clean(data))

        business = Business(**values)
        try:
            db.session.add(business)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise UnexpectedError("Failed to create business", e) from e

        logger.info(f"Business created: {business.id} {business.name} "
                    f"(reward every {business.visits_required} visits)")
        return business

    def update_business(self, business_id: int, data: Dict[str, Any]) -> Business:
        """Partially update a business; unknown fields are ignored."""
        business = self.get_business(business_id)
        changes = self._clean(data or {})

        for field, value in changes.items():
            setattr(business, field, value)

        try:
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise UnexpectedError("Failed to update business", e) from e

        if changes:
            logger.info(f"Business {business_id} updated: {sorted(changes)}")
        return business
