# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Task store."""

from __future__ import annotations

import logging
import random
from collections.abc import Iterable

from src.database import TASKS_COLLECTION, JsonStorage
from src.schemas.task import Task, TaskCreate, TaskUpdate
from src.services.contact_service import ContactStore
from src.services.errors import ValidationError
from src.services.record_store import Clock, RecordStore, now_ms
from src.services.seed_service import generate_tasks

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 120


class TaskStore(RecordStore[Task]):
    """Owns the tasks collection.

    Task ids are allocated over the whole collection, not per contact.
    """

    collection = TASKS_COLLECTION
    id_prefix = "T"
    entity_name = "task"
    model = Task
    default_sort = "updated_at"

    def __init__(
        self,
        storage: JsonStorage,
        contacts: ContactStore,
        *,
        seed_count: int = 0,
        clock: Clock = now_ms,
        rng: random.Random | None = None,
    ) -> None:
        super().__init__(storage, clock=clock, rng=rng)
        self.contacts = contacts
        self.seed_count = seed_count

    async def _seed(self) -> list[Task]:
        if not self.seed_count:
            return []
        contact_ids = [c.id for c in await self.contacts.all()]
        return generate_tasks(self.seed_count, contact_ids, self._clock(), self._rng)

    def _text_fields(self, record: Task) -> Iterable[str | None]:
        return (record.title, record.notes)

    async def create(self, data: TaskCreate) -> Task:
        """Create a task for an existing contact.

        Raises:
            ValidationError: If the contact does not exist or the title is
                blank or longer than 120 characters.
        """
        records = await self._records_snapshot()
        if not await self.contacts.exists(data.contact_id):
            raise ValidationError("contact does not exist")
        title = (data.title or "").strip()
        if not title:
            raise ValidationError("title required")
        if len(title) > TITLE_MAX_LENGTH:
            raise ValidationError("title too long")

        now = self._clock()
        task = Task(
            id=self._next_id(),
            contact_id=data.contact_id,
            title=title,
            notes=data.notes,
            due_date=data.due_date,
            completed=False,
            priority=data.priority,
            created_at=now,
            updated_at=now,
        )
        records.append(task)
        await self._persist()
        logger.debug(f"Created task {task.id} for contact {task.contact_id}")
        return task

    async def update(self, record_id: str, data: TaskUpdate) -> Task:
        """Apply a partial update.

        Only fields present in the payload change. A title that is blank
        after trimming keeps the previous title. ``updated_at`` is always
        refreshed.

        Raises:
            NotFoundError: If no task has that id.
            ValidationError: If the new title is longer than 120 characters.
        """
        records = await self._records_snapshot()
        index = self._index_of(record_id)
        previous = records[index]

        changes = data.model_dump(exclude_unset=True)
        if "title" in changes:
            title = (changes["title"] or "").strip()
            if len(title) > TITLE_MAX_LENGTH:
                raise ValidationError("title too long")
            changes["title"] = title or previous.title
        if changes.get("completed") is None:
            changes.pop("completed", None)
        if changes.get("priority") is None:
            changes.pop("priority", None)
        changes["updated_at"] = self._clock()

        task = previous.model_copy(update=changes)
        records[index] = task
        await self._persist()
        logger.debug(f"Updated task {record_id}: {sorted(changes)}")
        return task

    async def delete_for_contact(self, contact_id: str) -> int:
        """Remove every task of a contact.

        Returns:
            Number of tasks removed
        """
        records = await self._records_snapshot()
        kept = [t for t in records if t.contact_id != contact_id]
        removed = len(records) - len(kept)
        if removed:
            records[:] = kept
            await self._persist()
            logger.info(f"Removed {removed} tasks of deleted contact {contact_id}")
        return removed
