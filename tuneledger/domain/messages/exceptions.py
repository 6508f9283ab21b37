"""Message domain specific exceptions."""

from tuneledger.core.errors import DomainError


class MessageError(DomainError):
    """Base class for message errors."""


class EmptyMessage(MessageError):
    code = "empty_message"
    status_code = 422

    def default_detail(self) -> str:
        return "Message body must not be empty"
