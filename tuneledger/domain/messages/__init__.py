"""Message domain exports"""

from .exceptions import EmptyMessage
from .models import Message
from .service import MessageService

__all__ = ["EmptyMessage", "Message", "MessageService"]
