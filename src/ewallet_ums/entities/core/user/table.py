"""User database table model."""

from datetime import datetime

import sqlalchemy as sa
from sqlmodel import Field

from ewallet_ums.entities.core._base import EntityTable


class UserTable(EntityTable, table=True):
    """Persistence description of the ``users`` table.

    The schema itself is created by the alembic revisions under ``migrations/``;
    this model is their autogenerate target and must stay in step with them.
    """

    __tablename__ = "users"

    email: str = Field(sa_type=sa.String(255), unique=True, nullable=False)
    phone: str = Field(sa_type=sa.String(32), unique=True, nullable=False)
    full_name: str = Field(default="", sa_type=sa.String(255), nullable=False)
    password_hash: str = Field(sa_type=sa.String(255), nullable=False)
    is_active: bool = Field(
        default=True, nullable=False, sa_column_kwargs={"server_default": sa.true()}
    )
    is_verified: bool = Field(
        default=False, nullable=False, sa_column_kwargs={"server_default": sa.false()}
    )
    deleted_at: datetime | None = Field(
        default=None, sa_type=sa.DateTime(timezone=True), nullable=True
    )
