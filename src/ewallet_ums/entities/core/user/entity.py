"""User domain entity."""

from datetime import datetime
from typing import Any

from pydantic import Field

from ewallet_ums.entities.core._base import Entity


class User(Entity):
    """A registered e-wallet user.

    ``password_hash`` is write-only: it is accepted on construction and sent to
    the store, but never serialized outward. A set ``deleted_at`` marks the
    record as soft-deleted.
    """

    email: str = Field(description="Unique e-mail address")
    phone: str = Field(description="Unique phone number")
    full_name: str = Field(default="", description="User's full name")
    password_hash: str = Field(default="", exclude=True, repr=False)
    is_active: bool = Field(default=True)
    is_verified: bool = Field(default=False)
    deleted_at: datetime | None = Field(default=None)

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def __eq__(self, other: Any) -> bool:
        """Compare users by business attributes, ignoring timestamps."""
        if not isinstance(other, User):
            return False

        return (
            self.id == other.id
            and self.email == other.email
            and self.phone == other.phone
            and self.full_name == other.full_name
            and self.is_active == other.is_active
            and self.is_verified == other.is_verified
        )

    def __hash__(self) -> int:
        return hash((self.id, self.email, self.phone))
