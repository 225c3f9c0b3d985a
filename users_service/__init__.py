"""In-memory users service: CRUD JSON API plus the user-management frontend."""

from .app import create_app
from .store import InvalidUser, UserNotFound, UserStore

__all__ = ["create_app", "InvalidUser", "UserNotFound", "UserStore"]
__version__ = "1.0.0"
