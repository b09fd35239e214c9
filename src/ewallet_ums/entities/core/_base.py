from datetime import datetime

import sqlalchemy as sa
from pydantic import BaseModel
from pydantic import Field as PydanticField
from sqlmodel import Field, SQLModel


class Entity(BaseModel):
    """Base entity whose identifier and timestamps are assigned by the store."""

    id: int | None = PydanticField(
        default=None, description="Store-assigned identifier"
    )
    created_at: datetime | None = PydanticField(default=None)
    updated_at: datetime | None = PydanticField(default=None)


class EntityTable(SQLModel, table=False):
    """Base table with a serial primary key and server-side timestamps."""

    id: int | None = Field(
        default=None,
        sa_type=sa.BigInteger().with_variant(sa.Integer(), "sqlite"),
        primary_key=True,
    )
    created_at: datetime | None = Field(
        default=None,
        sa_type=sa.DateTime(timezone=True),
        nullable=False,
        sa_column_kwargs={"server_default": sa.func.now()},
    )
    updated_at: datetime | None = Field(
        default=None,
        sa_type=sa.DateTime(timezone=True),
        nullable=False,
        sa_column_kwargs={"server_default": sa.func.now()},
    )
