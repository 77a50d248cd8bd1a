"""
Custom exceptions for Stampcard loyalty logic.

Each exception carries a machine-readable code and maps to one HTTP status
in the API error handler (see ``status_code``).
"""


class LoyaltyError(Exception):
    """Base exception for all loyalty business logic errors."""

    status_code = 400

    def __init__(self, message: str, code: str = "LOYALTY_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class NotFoundError(LoyaltyError):
    """Resource not found."""

    status_code = 404

    def __init__(self, resource: str, identifier=None):
        message = f"{resource} not found"
        if identifier is not None:
            message = f"{resource} with ID {identifier} not found"
        super().__init__(message, f"{resource.upper()}_NOT_FOUND")


class BusinessNotFoundError(NotFoundError):
    """Business not found."""

    def __init__(self, identifier=None):
        super().__init__("Business", identifier)


class CustomerNotFoundError(NotFoundError):
    """Customer not found."""

    def __init__(self, identifier=None):
        super().__init__("Customer", identifier)


class RewardNotFoundError(NotFoundError):
    """Reward not found."""

    def __init__(self, identifier=None):
        super().__init__("Reward", identifier)


class ValidationError(LoyaltyError):
    """Invalid input data."""

    def __init__(self, message: str, field: str = None):
        self.field = field
        code = f"INVALID_{field.upper()}" if field else "VALIDATION_ERROR"
        super().__init__(message, code)


class InvalidPolicyError(LoyaltyError):
    """Business reward policy cannot be applied (e.g. zero visit threshold)."""

    status_code = 422

    def __init__(self, message: str):
        super().__init__(message, "INVALID_POLICY")


class AlreadyRedeemedError(LoyaltyError):
    """Reward has already been redeemed."""

    status_code = 409

    def __init__(self, reward_id=None):
        self.reward_id = reward_id
        message = "Reward already redeemed"
        if reward_id is not None:
            message = f"Reward with ID {reward_id} already redeemed"
        super().__init__(message, "ALREADY_REDEEMED")


class DuplicateError(LoyaltyError):
    """Resource already exists."""

    status_code = 409

    def __init__(self, resource: str, identifier=None):
        message = f"{resource} already exists"
        if identifier:
            message = f"{resource} with {identifier} already exists"
        super().__init__(message, "DUPLICATE_ENTRY")


class UnexpectedError(LoyaltyError):
    """Persistence or collaborator failure."""

    status_code = 500

    def __init__(self, message: str, original_error: Exception = None):
        self.original_error = original_error
        super().__init__(message, "UNEXPECTED_ERROR")
