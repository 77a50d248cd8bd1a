"""
Transactional boundary for read-modify-write loyalty operations.

Check-ins and redemptions read counters, compute new values and write them
back. ``run_atomically`` commits the whole unit or nothing, and re-runs the
unit when the optimistic ``version`` column detects a concurrent writer.
"""
import logging
from typing import Callable, TypeVar

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db
from .exceptions import LoyaltyError, UnexpectedError

logger = logging.getLogger(__name__)

T = TypeVar('T')


def run_atomically(operation: Callable[[], T], description: str, retries: int = None) -> T:
    """
    Run ``operation`` and commit, rolling back on any failure.

    The operation must re-read every row it mutates, since it may be
    invoked again after a rollback.

    Args:
        operation: Callable performing reads and session writes (no commit)
        description: Human-readable name used in logs and errors
        retries: Attempts on version conflicts (default TRANSACTION_MAX_RETRIES)

    Returns:
        Whatever ``operation`` returns

    Raises:
        LoyaltyError: Business errors raised by the operation, after rollback
        UnexpectedError: Persistence failures or exhausted retries
    """
    if retries is None:
        retries = current_app.config.get('TRANSACTION_MAX_RETRIES', 3)
    retries = max(1, retries)

    for attempt in range(1, retries + 1):
        try:
            result = operation()
            db.session.commit()
            return result
        except StaleDataError:
            db.session.rollback()
            logger.warning(
                f"{description}: concurrent update detected (attempt {attempt}/{retries})"
            )
        except LoyaltyError:
            db.session.rollback()
            raise
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"{description} failed: {e}")
            raise UnexpectedError(f"{description} failed", e) from e

    raise UnexpectedError(
        f"{description} failed after {retries} attempts due to concurrent updates"
    )
