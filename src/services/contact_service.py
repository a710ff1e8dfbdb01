# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Contact store."""

from __future__ import annotations

import logging
import random
from collections.abc import Awaitable, Callable, Iterable

from src.database import CONTACTS_COLLECTION, JsonStorage
from src.schemas.contact import Contact, ContactCreate
from src.services.errors import ValidationError
from src.services.record_store import Clock, RecordStore, now_ms
from src.services.seed_service import generate_contacts

logger = logging.getLogger(__name__)

# Called with the id of a deleted contact
CascadeHook = Callable[[str], Awaitable[object]]


def _has_tag(contact: Contact, tag: str) -> bool:
    return tag in contact.tags


class ContactStore(RecordStore[Contact]):
    """Owns the contacts collection.

    Deleting a contact runs every registered cascade hook so dependent
    collections (tasks) drop their records in the same process.
    """

    collection = CONTACTS_COLLECTION
    id_prefix = "C"
    entity_name = "contact"
    model = Contact
    default_sort = "last_activity_at"
    filter_matchers = {"tag": _has_tag}

    def __init__(
        self,
        storage: JsonStorage,
        *,
        seed_count: int = 0,
        clock: Clock = now_ms,
        rng: random.Random | None = None,
    ) -> None:
        super().__init__(storage, clock=clock, rng=rng)
        self.seed_count = seed_count
        self._cascade_hooks: list[CascadeHook] = []

    def register_cascade(self, hook: CascadeHook) -> None:
        """Run ``hook(contact_id)`` after every contact deletion."""
        self._cascade_hooks.append(hook)

    async def _seed(self) -> list[Contact]:
        return generate_contacts(self.seed_count, self._clock(), self._rng)

    def _text_fields(self, record: Contact) -> Iterable[str | None]:
        yield record.full_name
        yield record.email
        yield record.company
        yield record.city
        yield record.state
        yield from record.tags

    async def create(self, data: ContactCreate) -> Contact:
        """Create a contact.

        Raises:
            ValidationError: If a required field is blank or the email is taken.
        """
        records = await self._records_snapshot()
        first_name = (data.first_name or "").strip()
        last_name = (data.last_name or "").strip()
        email = (data.email or "").strip()
        if not first_name or not last_name or not email:
            raise ValidationError("firstName, lastName, email required")
        if any(c.email.lower() == email.lower() for c in records):
            raise ValidationError("email already exists")

        now = self._clock()
        contact = Contact(
            id=self._next_id(),
            first_name=first_name,
            last_name=last_name,
            email=email,
            phone=data.phone or "",
            company=data.company or "",
            city=data.city or "",
            state=data.state or "",
            tags=list(data.tags or []),
            created_at=now,
            last_activity_at=now,
        )
        # Newest contacts go first in storage order
        records.insert(0, contact)
        await self._persist()
        logger.debug(f"Created contact {contact.id}")
        return contact

    async def delete(self, record_id: str) -> bool:
        """Delete a contact and cascade to its dependents.

        Cascade failures are logged and do not fail the deletion.

        Raises:
            NotFoundError: If no contact has that id.
        """
        await super().delete(record_id)
        for hook in self._cascade_hooks:
            try:
                await hook(record_id)
            except Exception as e:
                logger.warning(f"Cascade after deleting contact {record_id} failed: {e}")
        return True
