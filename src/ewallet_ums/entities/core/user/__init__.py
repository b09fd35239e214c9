"""User entity module.

- User: domain entity
- UserTable: database persistence model
- UserRepository: data access layer
- UserFilter and request models: query and input models
"""

from .entity import User
from .repository import UserRepository
from .schemas import CreateUserRequest, UpdateUserRequest, UserFilter, UserPage
from .table import UserTable

__all__ = [
    "User",
    "UserTable",
    "UserRepository",
    "UserFilter",
    "UserPage",
    "CreateUserRequest",
    "UpdateUserRequest",
]
