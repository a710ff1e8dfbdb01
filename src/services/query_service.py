# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""In-memory list queries: filter, sort and paginate a collection snapshot."""

from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from functools import cmp_to_key
from typing import Any, TypeVar

from pydantic import BaseModel

from src.models.enums import SortOrder
from src.schemas.common import Page
from src.services.errors import ValidationError

R = TypeVar("R", bound=BaseModel)

# Returns the searchable text values of a record
TextFields = Callable[[Any], Iterable[str | None]]
# Decides whether a record matches one structured filter value
FilterMatcher = Callable[[Any, Any], bool]


@dataclass
class ListQuery:
    """Parameters of a list request.

    ``sort_by`` may be None to use the collection's default field.
    ``filters`` maps filter names to values; None values are ignored.
    """

    q: str = ""
    sort_by: str | None = None
    sort_order: SortOrder = SortOrder.DESC
    page: int = 1
    page_size: int = 50
    filters: dict[str, Any] = field(default_factory=dict)


def resolve_field(model: type[BaseModel], name: str) -> str:
    """Map a camelCase or snake_case field name to the model attribute.

    Raises:
        ValidationError: If the model has no such field.
    """
    for field_name, info in model.model_fields.items():
        if name in (field_name, info.alias):
            return field_name
    raise ValidationError(f"cannot sort by {name}")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, (list, tuple)):
        return ",".join(_as_text(v) for v in value)
    return str(value)


def compare_values(a: Any, b: Any) -> int:
    """Numbers compare numerically, everything else as strings."""
    if _is_number(a) and _is_number(b):
        return (a > b) - (a < b)
    sa, sb = _as_text(a), _as_text(b)
    return (sa > sb) - (sa < sb)


def matches_text(values: Iterable[str | None], needle: str) -> bool:
    """True if any value contains the (already lowercased) needle."""
    return any(needle in value.lower() for value in values if value)


def filter_records(
    records: Iterable[R],
    query: ListQuery,
    text_fields: TextFields,
    matchers: Mapping[str, FilterMatcher] | None = None,
) -> list[R]:
    """Keep records matching every structured filter and the search text."""
    matchers = matchers or {}
    active = {k: v for k, v in query.filters.items() if v is not None}
    needle = (query.q or "").lower()

    def keep(record: R) -> bool:
        for name, expected in active.items():
            matcher = matchers.get(name)
            if matcher is not None:
                if not matcher(record, expected):
                    return False
            elif getattr(record, name) != expected:
                return False
        if not needle:
            return True
        return matches_text(text_fields(record), needle)

    return [r for r in records if keep(r)]


def sort_records(records: Sequence[R], sort_field: str, order: SortOrder) -> list[R]:
    """Sort by one field; ties are broken by ascending id."""
    sign = -1 if order == SortOrder.DESC else 1

    def compare(a: R, b: R) -> int:
        cmp = compare_values(getattr(a, sort_field), getattr(b, sort_field)) * sign
        if cmp == 0:
            cmp = compare_values(getattr(a, "id", ""), getattr(b, "id", ""))
        return cmp

    return sorted(records, key=cmp_to_key(compare))


def paginate(records: Sequence[R], page: int, page_size: int) -> Page:
    """Slice one 1-based page out of an already sorted list.

    Pages past the end are empty rather than an error.
    """
    if page < 1:
        raise ValidationError("page must be >= 1")
    if page_size < 1:
        raise ValidationError("pageSize must be >= 1")
    start = (page - 1) * page_size
    total = len(records)
    return Page(
        data=list(records[start : start + page_size]),
        total=total,
        page=page,
        page_size=page_size,
        has_next=start + page_size < total,
    )


def run_query(
    records: Iterable[R],
    query: ListQuery,
    *,
    model: type[R],
    default_sort: str,
    text_fields: TextFields,
    matchers: Mapping[str, FilterMatcher] | None = None,
) -> Page:
    """Filter, sort and paginate a collection snapshot.

    Args:
        records: Current records of the collection
        query: List parameters
        model: Record model, used to resolve the sort field name
        default_sort: Field used when the query has no sort_by
        text_fields: Extracts the searchable text of a record
        matchers: Custom predicates for filters that are not plain equality

    Returns:
        The requested page with the total count of matching records
    """
    sort_field = resolve_field(model, query.sort_by or default_sort)
    order = SortOrder(query.sort_order)
    filtered = filter_records(records, query, text_fields, matchers)
    ordered = sort_records(filtered, sort_field, order)
    return paginate(ordered, query.page, query.page_size)
