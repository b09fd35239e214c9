"""Request, filter and page models for the user repository."""

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from ewallet_ums.entities.core.user.entity import User


class CreateUserRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    email: EmailStr
    phone: str = Field(min_length=1)
    full_name: str = Field(min_length=1)
    password: str = Field(min_length=8)

    def to_user(self, password_hash: str) -> User:
        return User(
            email=str(self.email),
            phone=self.phone,
            full_name=self.full_name,
            password_hash=password_hash,
        )


class UpdateUserRequest(BaseModel):
    """Partial update: only the fields the caller sends are applied."""

    model_config = ConfigDict(str_strip_whitespace=True)

    email: EmailStr | None = None
    phone: str | None = Field(default=None, min_length=1)
    full_name: str | None = Field(default=None, min_length=1)
    is_active: bool | None = None
    is_verified: bool | None = None


class UserFilter(BaseModel):
    """Criteria for listing and counting users.

    ``None`` leaves a field unconstrained; any other value, including an empty
    string, must match exactly. ``limit == 0`` means unbounded and
    ``offset == 0`` means no offset.
    """

    model_config = ConfigDict(frozen=True)

    email: str | None = None
    phone: str | None = None
    is_active: bool | None = None
    is_verified: bool | None = None
    offset: int = Field(default=0, ge=0)
    limit: int = Field(default=0, ge=0)

    def without_pagination(self) -> "UserFilter":
        return self.model_copy(update={"offset": 0, "limit": 0})


class UserPage(BaseModel):
    items: list[User]
    total: int
    limit: int
    offset: int
