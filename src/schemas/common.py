# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Common schema types."""
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base model serialized with camelCase field names.

    Both the HTTP API and the persisted JSON files use camelCase, while
    Python code works with snake_case attributes.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Page(CamelModel, Generic[T]):
    """One page of a filtered, sorted collection."""

    data: list[T]
    total: int
    page: int
    page_size: int
    has_next: bool


class HealthResponse(BaseModel):
    """Health check response."""

    status: str


class OkResponse(BaseModel):
    """Acknowledgement for deletions."""

    ok: bool = True


class ErrorResponse(BaseModel):
    """Error body, message is prefixed with the error name."""

    message: str
