# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Contact schemas."""
from pydantic import Field

from src.schemas.common import CamelModel


class ContactCreate(CamelModel):
    """Schema for creating a contact.

    Required fields are checked after trimming by the contact store, so
    blank strings are accepted here and rejected there.
    """

    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str | None = None
    company: str | None = None
    city: str | None = None
    state: str | None = None
    tags: list[str] | None = None


class Contact(CamelModel):
    """A stored contact."""

    id: str
    first_name: str
    last_name: str
    email: str
    phone: str = ""
    company: str = ""
    city: str = ""
    state: str = ""
    tags: list[str] = Field(default_factory=list)
    created_at: int
    last_activity_at: int

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
