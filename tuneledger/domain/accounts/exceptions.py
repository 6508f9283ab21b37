"""Account domain specific exceptions."""

from tuneledger.core.errors import DomainError


class AccountError(DomainError):
    """Base class for account domain errors."""


class AccountNotFoundError(AccountError):
    """Raised when the requested account cannot be found."""

    code = "unknown_account"
    status_code = 404


class AccountInactiveError(AccountError):
    """Raised when a disabled account tries to act."""

    code = "account_inactive"
    status_code = 403
