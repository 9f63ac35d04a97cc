"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class ConfigurationError(DomainException):
    """Credentials for an external collaborator are missing"""

    pass


class CRMAPIError(DomainException):
    """HubSpot returned an error or is unavailable"""

    pass


class CheckoutError(DomainException):
    """Stripe refused or failed to create a checkout session"""

    pass


class ChargeRejected(DomainException):
    """Requested payment cannot be charged; message is shown to the customer"""

    reason = "rejected"


class InvalidAmountError(ChargeRejected):
    """Custom amount is missing or not a number"""

    reason = "invalid_amount"


class AmountBelowMinimumError(InvalidAmountError):
    """Custom amount is below the minimum payment"""

    reason = "below_minimum"


class AmountExceedsBalanceError(InvalidAmountError):
    """Custom amount is larger than what is still owed"""

    reason = "exceeds_balance"


class NoBalanceDueError(ChargeRejected):
    """Resolved charge is zero, negative or unknown"""

    reason = "no_balance_due"
