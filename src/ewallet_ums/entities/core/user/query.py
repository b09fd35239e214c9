"""Parameterised SQL construction for user queries.

Values never reach the statement text: each predicate gets a bind placeholder
``:pN`` whose ordinal follows insertion order, and the value is stored under
the same name. ``list`` and ``count`` share ``filter_predicates`` so the two can
never disagree on which rows match a filter.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ewallet_ums.entities.core.user.schemas import UserFilter
from ewallet_ums.entities.core.user.table import UserTable

# Selected columns, in table order, taken from the table model
USER_COLUMN_NAMES: tuple[str, ...] = tuple(UserTable.__table__.columns.keys())
USER_COLUMNS = ", ".join(USER_COLUMN_NAMES)

NOT_DELETED = "deleted_at IS NULL"
ORDER_NEWEST_FIRST = "ORDER BY created_at DESC, id DESC"

# Filter fields in the order their predicates are appended
_FILTER_COLUMNS = ("email", "phone", "is_active", "is_verified")


@dataclass
class QueryBuilder:
    """Ordered predicate clauses plus the parameters they bind."""

    conditions: list[str] = field(default_factory=list)
    params: dict[str, Any] = field(default_factory=dict)

    def bind(self, value: Any) -> str:
        """Register ``value`` under the next ordinal and return its placeholder."""
        name = f"p{len(self.params) + 1}"
        self.params[name] = value
        return f":{name}"

    def where_equal(self, column: str, value: Any) -> None:
        self.conditions.append(f"{column} = {self.bind(value)}")

    def where_clause(self) -> str:
        return " AND ".join([NOT_DELETED, *self.conditions])


@dataclass(frozen=True)
class BuiltQuery:
    sql: str
    params: dict[str, Any]


def filter_predicates(user_filter: UserFilter) -> QueryBuilder:
    """Equality predicates for every field the filter sets."""
    builder = QueryBuilder()
    for column in _FILTER_COLUMNS:
        value = getattr(user_filter, column)
        if value is not None:
            builder.where_equal(column, value)
    return builder


def build_list_query(user_filter: UserFilter) -> BuiltQuery:
    builder = filter_predicates(user_filter)
    sql = (
        f"SELECT {USER_COLUMNS} FROM users "
        f"WHERE {builder.where_clause()} {ORDER_NEWEST_FIRST}"
    )
    if user_filter.limit > 0:
        sql += f" LIMIT {builder.bind(user_filter.limit)}"
    if user_filter.offset > 0:
        sql += f" OFFSET {builder.bind(user_filter.offset)}"
    return BuiltQuery(sql=sql, params=dict(builder.params))


def build_count_query(user_filter: UserFilter) -> BuiltQuery:
    builder = filter_predicates(user_filter)
    sql = f"SELECT COUNT(*) FROM users WHERE {builder.where_clause()}"
    return BuiltQuery(sql=sql, params=dict(builder.params))
