"""SQLAlchemy-backed repository implementations."""

from .account_repository import SqlAccountRepository
from .catalog_repository import SqlCatalogRepository
from .job_repository import SqlJobRepository
from .ledger_repository import SqlLedgerRepository
from .message_repository import SqlMessageRepository
from .payment_log_repository import SqlPaymentLogRepository

__all__ = [
    "SqlAccountRepository",
    "SqlCatalogRepository",
    "SqlJobRepository",
    "SqlLedgerRepository",
    "SqlMessageRepository",
    "SqlPaymentLogRepository",
]
