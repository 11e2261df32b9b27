from .user import User
from .message import Message
from .search import SearchResult
from .webhook import Webhook

__all__ = ["User", "Message", "SearchResult", "Webhook"]
