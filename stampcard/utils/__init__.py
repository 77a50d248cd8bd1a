"""
Utility modules for Stampcard.
"""
from .logging_config import setup_logging, get_logger
from .errors import (
    ErrorCode,
    error_response,
    loyalty_error_response,
    bad_request,
    not_found,
    internal_error
)
from .exceptions import (
    LoyaltyError,
    NotFoundError,
    BusinessNotFoundError,
    CustomerNotFoundError,
    RewardNotFoundError,
    ValidationError,
    InvalidPolicyError,
    AlreadyRedeemedError,
    DuplicateError,
    UnexpectedError
)
from .transactions import run_atomically
