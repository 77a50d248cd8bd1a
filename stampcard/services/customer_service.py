"""
Customer profile service for Stampcard.

Handles customer lookup (by id and by phone), enrollment, profile edits and
visit history. Loyalty counters are read-only here; only the check-in and
redemption services change them.
"""
import logging
from datetime import date
from typing import Any, Dict, List, Optional

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..extensions import db
from ..loyalty.accrual import cycle_progress
from ..models.business import Business
from ..models.customer import Customer
from ..models.visit import Visit
from ..utils.exceptions import (
    BusinessNotFoundError,
    CustomerNotFoundError,
    DuplicateError,
    UnexpectedError,
    ValidationError,
)

logger = logging.getLogger(__name__)

PROFILE_FIELDS = (
    'name', 'phone', 'email', 'date_of_birth', 'gender',
    'preferred_services', 'notes', 'sms_opt_in', 'email_opt_in',
)

COUNTER_FIELDS = (
    'visits', 'rewards_earned', 'rewards_redeemed', 'total_spent', 'last_visit',
)


class CustomerService:
    """
    Customer operations, optionally scoped to one business.

    Usage:
        service = CustomerService(business_id)
        customer = service.create_customer({'name': 'Amina', 'phone': '+254700000001'})
        same = service.get_by_phone('+254700000001')
        listing = service.list_customers()
    """

    def __init__(self, business_id: Optional[int] = None):
        self.business_id = business_id

    # ==================== Lookups ====================

    def _query(self):
        query = Customer.query
        if self.business_id is not None:
            query = query.filter(Customer.business_id == self.business_id)
        return query

    def _get_business(self) -> Business:
        business = db.session.get(Business, self.business_id) if self.business_id is not None else None
        if not business:
            raise BusinessNotFoundError(self.business_id)
        return business

    def get_customer(self, customer_id: int) -> Customer:
        customer = self._query().filter(Customer.id == customer_id).first()
        if not customer:
            raise CustomerNotFoundError(customer_id)
        return customer

    def get_by_phone(self, phone: str) -> Customer:
        """Find a business's customer by phone number."""
        self._get_business()
        customer = self._query().filter(Customer.phone == (phone or '').strip()).first()
        if not customer:
            raise CustomerNotFoundError(phone)
        return customer

    def list_customers(self) -> List[Dict[str, Any]]:
        """
        All customers of the business, most recent visitors first, each
        with progress toward the next reward.
        """
        business = self._get_business()
        policy = business.policy()

        customers = self._query().order_by(
            Customer.last_visit.is_(None),
            Customer.last_visit.desc(),
            Customer.id.asc()
        ).all()

        return [
            customer.to_dict(progress=cycle_progress(customer.snapshot(), policy))
            for customer in customers
        ]

    def get_customer_visits(self, customer_id: int, limit: Optional[int] = None) -> List[Visit]:
        """Visit history of one customer, newest first."""
        customer = self.get_customer(customer_id)
        query = customer.visit_history.order_by(Visit.visit_date.desc(), Visit.id.desc())
        if limit:
            query = query.limit(limit)
        return query.all()

    def get_recent_visits(self, limit: Optional[int] = None) -> List[Visit]:
        """Latest check-ins across the business, newest first."""
        self._get_business()
        if limit is None:
            limit = current_app.config.get('RECENT_VISITS_LIMIT', 10)

        return (
            Visit.query
            .join(Customer, Visit.customer_id == Customer.id)
            .filter(Visit.business_id == self.business_id)
            .order_by(Visit.visit_date.desc(), Visit.id.desc())
            .limit(limit)
            .all()
        )

    # ==================== Mutations ====================

    def _clean_profile(self, data: Dict[str, Any]) -> Dict[str, Any]:
        cleaned = {}
        for field in PROFILE_FIELDS:
            if field not in data:
                continue
            value = data[field]

            if field in ('name', 'phone'):
                if not value or not str(value).strip():
                    raise ValidationError(f"{field} is required", field)
                value = str(value).strip()
            elif field == 'date_of_birth' and value is not None:
                if isinstance(value, str):
                    try:
                        value = date.fromisoformat(value[:10])
                    except ValueError:
                        raise ValidationError("date_of_birth must be an ISO date (YYYY-MM-DD)", field)
                elif not isinstance(value, date):
                    raise ValidationError("date_of_birth must be an ISO date (YYYY-MM-DD)", field)
            elif field == 'gender' and value is not None:
                value = str(value)[:10]
            elif field == 'preferred_services' and value is not None:
                if not isinstance(value, list) or not all(isinstance(s, str) for s in value):
                    raise ValidationError("preferred_services must be a list of strings", field)
            elif field in ('sms_opt_in', 'email_opt_in'):
                if not isinstance(value, bool):
                    raise ValidationError(f"{field} must be true or false", field)

            cleaned[field] = value
        return cleaned

    def _ensure_phone_free(self, phone: str, exclude_id: Optional[int] = None) -> None:
        query = Customer.query.filter_by(business_id=self.business_id, phone=phone)
        if exclude_id is not None:
            query = query.filter(Customer.id != exclude_id)
        if query.first():
            raise DuplicateError("Customer", f"phone {phone}")

    def create_customer(self, data: Dict[str, Any]) -> Customer:
        """Enroll a new customer with zeroed loyalty counters."""
        business = self._get_business()
        data = data or {}
        for required in ('name', 'phone'):
            if required not in data:
                raise ValidationError(f"{required} is required", required)

        values = self._clean_profile(data)
        self._ensure_phone_free(values['phone'])

        customer = Customer(business_id=business.id, **values)
        try:
            db.session.add(customer)
            db.session.commit()
        except IntegrityError as e:
            db.session.rollback()
            raise DuplicateError("Customer", f"phone {values['phone']}") from e
        except SQLAlchemyError as e:
            db.session.rollback()
            raise UnexpectedError("Failed to create customer", e) from e

        logger.info(f"Customer enrolled: {customer.id} at business {business.id}")
        return customer

    def update_customer(self, customer_id: int, data: Dict[str, Any]) -> Customer:
        """
        Update profile fields.

        Raises:
            ValidationError: If the payload tries to set a loyalty counter
        """
        data = data or {}
        counters = sorted(field for field in COUNTER_FIELDS if field in data)
        if counters:
            raise ValidationError(
                f"Loyalty counters are read-only: {', '.join(counters)}", counters[0]
            )

        customer = self.get_customer(customer_id)
        changes = self._clean_profile(data)

        if 'phone' in changes and changes['phone'] != customer.phone:
            scoped = CustomerService(customer.business_id)
            scoped._ensure_phone_free(changes['phone'], exclude_id=customer.id)

        for field, value in changes.items():
            setattr(customer, field, value)

        try:
            db.session.commit()
        except IntegrityError as e:
            db.session.rollback()
            raise DuplicateError("Customer", f"phone {changes.get('phone')}") from e
        except SQLAlchemyError as e:
            db.session.rollback()
            raise UnexpectedError("Failed to update customer", e) from e

        return customer
