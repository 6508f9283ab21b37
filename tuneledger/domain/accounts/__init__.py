"""Account domain exports"""

from .exceptions import AccountError, AccountInactiveError, AccountNotFoundError
from .models import ADMIN_ROLES, Account, AccountProfile
from .service import AccountService

__all__ = [
    "ADMIN_ROLES",
    "Account",
    "AccountError",
    "AccountInactiveError",
    "AccountNotFoundError",
    "AccountProfile",
    "AccountService",
]
