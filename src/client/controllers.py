# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Client-side list state with cancellable refreshes and optimistic mutations.

Local records are wrapped in :class:`Entry` objects carrying their sync
status. Entries never cross the API boundary; only records do.
"""

from __future__ import annotations

import asyncio
import logging
import random
import uuid
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, replace
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from src.client.api_client import ApiClient
from src.client.retry import RetryPolicy, Sleep, with_retry
from src.models.enums import EntryStatus, TaskPriority
from src.schemas.common import Page
from src.schemas.contact import Contact, ContactCreate
from src.schemas.task import Task, TaskCreate, TaskUpdate
from src.services.errors import (
    NotFoundError,
    ServiceError,
    TransientError,
    ValidationError,
)
from src.services.query_service import ListQuery
from src.services.record_store import Clock, now_ms

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=BaseModel)

TEMP_ID_PREFIX = "TEMP-"

# How far before the local creation time a server record may be stamped and
# still be adopted as the result of an unconfirmed create
CREATE_MATCH_WINDOW_MS = 60_000


def temp_id() -> str:
    """Local id for a record the server has not confirmed yet."""
    return f"{TEMP_ID_PREFIX}{uuid.uuid4().hex[:6]}"


def _cancelling() -> bool:
    """True if the running task itself has been asked to cancel."""
    current = asyncio.current_task()
    return current is not None and current.cancelling() > 0


@dataclass
class Entry(Generic[R]):
    """A locally held record and its sync status.

    ``create_payload`` is kept for creations the server has not confirmed,
    so a failed creation can be resubmitted.
    ``maybe_applied`` marks a failed creation whose last attempt may have
    been stored anyway.
    """

    record: R
    status: EntryStatus = EntryStatus.CONFIRMED
    error: str | None = None
    create_payload: BaseModel | None = None
    maybe_applied: bool = False

    @property
    def id(self) -> str:
        return self.record.id


class ListController(ABC, Generic[R]):
    """Holds one page of a collection and reloads it on demand.

    A new refresh cancels the one in flight. A superseded refresh returns
    None and leaves the state alone.
    """

    def __init__(
        self,
        retry_policy: RetryPolicy | None = None,
        *,
        rng: random.Random | None = None,
        sleep: Sleep = asyncio.sleep,
        clock: Clock = now_ms,
    ) -> None:
        self.retry_policy = retry_policy or RetryPolicy()
        self._rng = rng or random.Random()
        self._sleep = sleep
        self._clock = clock
        self.query = ListQuery()
        self.entries: list[Entry[R]] = []
        self.total = 0
        self.has_next = False
        self.loading = False
        self.error: str | None = None
        self._inflight: asyncio.Task | None = None
        self._background: set[asyncio.Task] = set()

    @abstractmethod
    async def _fetch_page(self, query: ListQuery) -> Page[R]:
        """Request one page from the server."""
        ...

    @property
    def items(self) -> list[R]:
        return [entry.record for entry in self.entries]

    async def _retry(self, operation: Callable[[], Awaitable[Any]]) -> Any:
        return await with_retry(
            operation, self.retry_policy, rng=self._rng, sleep=self._sleep
        )

    def cancel(self) -> None:
        """Abort the refresh in flight, if any."""
        if self._inflight is not None and not self._inflight.done():
            self._inflight.cancel()
            self.loading = False
        self._inflight = None

    async def refresh(self, query: ListQuery | None = None) -> Page[R] | None:
        """Load the page for ``query`` (or the current query).

        Returns:
            The loaded page, or None if the refresh was superseded or failed.
            On failure ``error`` holds the message.
        """
        if query is not None:
            self.query = query
        self.cancel()
        task = asyncio.create_task(self._load(self.query))
        self._inflight = task
        try:
            return await task
        except asyncio.CancelledError:
            if task.cancelled() and not _cancelling():
                return None
            raise
        finally:
            if self._inflight is task:
                self._inflight = None

    async def _load(self, query: ListQuery) -> Page[R] | None:
        self.loading = True
        self.error = None
        try:
            page = await self._retry(lambda: self._fetch_page(query))
        except ServiceError as e:
            logger.warning(f"Loading list failed: {e}")
            self.error = e.message
            self.loading = False
            return None
        # Unconfirmed creations stay on top until they resolve
        unconfirmed = [
            entry for entry in self.entries
            if entry.create_payload is not None
            and entry.status in (EntryStatus.PENDING, EntryStatus.FAILED)
        ]
        self.entries = unconfirmed + [Entry(record) for record in page.data]
        self.total = page.total
        self.has_next = page.has_next
        self.loading = False
        return page

    def _schedule_refresh(self) -> None:
        task = asyncio.create_task(self.refresh())
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def wait_background(self) -> None:
        """Wait for background refreshes started by reconciliation."""
        if self._background:
            await asyncio.gather(*self._background)

    def find(self, record_id: str) -> Entry[R] | None:
        for entry in self.entries:
            if entry.id == record_id:
                return entry
        return None

    def _index(self, record_id: str) -> int:
        for index, entry in enumerate(self.entries):
            if entry.id == record_id:
                return index
        raise NotFoundError(f"no local record {record_id}")

    def _put(self, record_id: str, entry: Entry[R]) -> Entry[R]:
        """Replace the entry for ``record_id`` if it is still held locally."""
        for index, current in enumerate(self.entries):
            if current.id == record_id:
                self.entries[index] = entry
                break
        return entry


class OptimisticListController(ListController[R]):
    """List controller that applies creations and deletions before the server confirms them.

    Terminal failures leave the entry FAILED with the error message. A
    failed creation keeps its payload for :meth:`retry_create`; failed
    updates and deletions are only recovered by a refresh.
    """

    @abstractmethod
    def _optimistic_record(self, local_id: str, payload: BaseModel) -> R:
        ...

    @abstractmethod
    async def _create_remote(self, payload: BaseModel) -> R:
        ...

    @abstractmethod
    async def _delete_remote(self, record_id: str) -> bool:
        ...

    async def _create(self, payload: BaseModel) -> Entry[R]:
        local_id = temp_id()
        entry = Entry(
            self._optimistic_record(local_id, payload),
            status=EntryStatus.PENDING,
            create_payload=payload,
        )
        self.entries.insert(0, entry)
        return await self._submit_create(local_id)

    @abstractmethod
    async def _find_created(self, payload: BaseModel, started_at: int) -> R | None:
        """Look up a record the server may have stored for ``payload``."""
        ...

    async def _reconcile_create(self, payload: BaseModel, started_at: int) -> R | None:
        try:
            return await self._find_created(payload, started_at)
        except ServiceError as e:
            logger.warning(f"Could not check for an applied creation: {e}")
            return None

    async def _submit_create(self, local_id: str, uncertain: bool = False) -> Entry[R]:
        """Send a pending creation, reconciling when an attempt may have been applied.

        A transient failure does not tell whether the server stored the
        record. Before every resubmission, and before giving up, the server
        is searched for a matching record, which is adopted if found.
        """
        pending = self.entries[self._index(local_id)]
        payload = pending.create_payload
        started_at = pending.record.created_at

        async def attempt() -> R:
            nonlocal uncertain
            if uncertain:
                found = await self._reconcile_create(payload, started_at)
                if found is not None:
                    logger.info(f"Creation {local_id} was applied as {found.id}")
                    return found
            try:
                return await self._create_remote(payload)
            except TransientError:
                uncertain = True
                raise

        try:
            created = await self._retry(attempt)
        except ServiceError as e:
            found = None
            if uncertain:
                found = await self._reconcile_create(payload, started_at)
            if found is None:
                logger.warning(f"Creating {local_id} failed: {e}")
                return self._put(
                    local_id,
                    Entry(
                        pending.record,
                        status=EntryStatus.FAILED,
                        error=e.message,
                        create_payload=payload,
                        maybe_applied=uncertain,
                    ),
                )
            logger.info(f"Creation {local_id} was applied as {found.id}")
            created = found
        return self._confirm_create(local_id, created)

    def _confirm_create(self, local_id: str, created: R) -> Entry[R]:
        """Swap the temporary entry for the server record.

        ``total`` only grows when the record was not already loaded by a
        refresh that ran while the creation was pending.
        """
        confirmed = Entry(created)
        if self.find(created.id) is not None:
            self.entries = [entry for entry in self.entries if entry.id != local_id]
            return self._put(created.id, confirmed)
        try:
            self.entries[self._index(local_id)] = confirmed
        except NotFoundError:
            self.entries.insert(0, confirmed)
        self.total += 1
        return confirmed

    async def retry_create(self, local_id: str) -> Entry[R]:
        """Resubmit a failed creation.

        Raises:
            NotFoundError: If no local entry has that id.
            ValidationError: If the entry is not a failed creation.
        """
        entry = self.entries[self._index(local_id)]
        if entry.status != EntryStatus.FAILED or entry.create_payload is None:
            raise ValidationError(f"{local_id} is not a failed creation")
        self._put(
            local_id,
            replace(entry, status=EntryStatus.PENDING, error=None, maybe_applied=False),
        )
        return await self._submit_create(local_id, uncertain=entry.maybe_applied)

    async def _delete(self, record_id: str) -> Entry[R] | None:
        """Remove locally, then on the server.

        A 404 from the server counts as success: an earlier attempt may
        have been applied before it reported a failure.

        Returns:
            None on success, the restored FAILED entry otherwise
        """
        index = self._index(record_id)
        entry = self.entries.pop(index)
        try:
            await self._retry(lambda: self._delete_remote(record_id))
        except NotFoundError:
            logger.info(f"{record_id} was already deleted on the server")
        except ServiceError as e:
            logger.warning(f"Deleting {record_id} failed: {e}")
            failed = Entry(entry.record, status=EntryStatus.FAILED, error=e.message)
            self.entries.insert(min(index, len(self.entries)), failed)
            return failed
        self.total = max(0, self.total - 1)
        return None


class ContactListController(OptimisticListController[Contact]):
    """Contact list with optimistic creation and deletion."""

    def __init__(self, client: ApiClient, retry_policy: RetryPolicy | None = None, **kwargs) -> None:
        super().__init__(retry_policy, **kwargs)
        self.client = client
        self.query = ListQuery(sort_by="lastActivityAt")

    async def _fetch_page(self, query: ListQuery) -> Page[Contact]:
        return await self.client.list_contacts(query)

    def _optimistic_record(self, local_id: str, payload: ContactCreate) -> Contact:
        now = self._clock()
        return Contact(
            id=local_id,
            first_name=payload.first_name.strip(),
            last_name=payload.last_name.strip(),
            email=payload.email.strip(),
            phone=payload.phone or "",
            company=payload.company or "",
            city=payload.city or "",
            state=payload.state or "",
            tags=list(payload.tags or []),
            created_at=now,
            last_activity_at=now,
        )

    async def _create_remote(self, payload: ContactCreate) -> Contact:
        return await self.client.create_contact(payload)

    async def _find_created(self, payload: ContactCreate, started_at: int) -> Contact | None:
        email = payload.email.strip().lower()
        page = await self.client.list_contacts(ListQuery(q=email))
        for contact in page.data:
            if (
                contact.email.lower() == email
                and contact.created_at >= started_at - CREATE_MATCH_WINDOW_MS
            ):
                return contact
        return None

    async def _delete_remote(self, record_id: str) -> bool:
        return await self.client.delete_contact(record_id)

    async def create_contact(self, data: ContactCreate) -> Entry[Contact]:
        """Add a contact locally and create it on the server."""
        return await self._create(data)

    async def delete_contact(self, contact_id: str) -> Entry[Contact] | None:
        """Remove a contact locally and on the server."""
        return await self._delete(contact_id)


class TaskListController(OptimisticListController[Task]):
    """Tasks of one contact, with optimistic create, update and delete."""

    def __init__(
        self,
        client: ApiClient,
        contact_id: str,
        retry_policy: RetryPolicy | None = None,
        **kwargs,
    ) -> None:
        super().__init__(retry_policy, **kwargs)
        self.client = client
        self.contact_id = contact_id
        self.query = ListQuery(sort_by="updatedAt")

    async def _fetch_page(self, query: ListQuery) -> Page[Task]:
        scoped = replace(query, filters={**query.filters, "contact_id": self.contact_id})
        return await self.client.list_tasks(scoped)

    def _optimistic_record(self, local_id: str, payload: TaskCreate) -> Task:
        now = self._clock()
        return Task(
            id=local_id,
            contact_id=payload.contact_id,
            title=payload.title,
            notes=payload.notes,
            due_date=payload.due_date,
            completed=False,
            priority=payload.priority,
            created_at=now,
            updated_at=now,
        )

    async def _create_remote(self, payload: TaskCreate) -> Task:
        return await self.client.create_task(payload)

    async def _find_created(self, payload: TaskCreate, started_at: int) -> Task | None:
        """Newest task of this contact stored recently with the same content."""
        page = await self.client.list_tasks(
            ListQuery(sort_by="createdAt", filters={"contact_id": payload.contact_id})
        )
        for task in page.data:
            if (
                task.title == payload.title.strip()
                and task.notes == payload.notes
                and task.due_date == payload.due_date
                and task.priority == payload.priority
                and task.created_at >= started_at - CREATE_MATCH_WINDOW_MS
            ):
                return task
        return None

    async def _delete_remote(self, record_id: str) -> bool:
        return await self.client.delete_task(record_id)

    async def create_task(
        self,
        title: str,
        *,
        notes: str | None = None,
        due_date: int | None = None,
        priority: TaskPriority = TaskPriority.MEDIUM,
    ) -> Entry[Task]:
        """Add a task locally and create it on the server.

        Raises:
            ValidationError: If the title is blank; nothing is sent.
        """
        title = title.strip()
        if not title:
            raise ValidationError("title required")
        payload = TaskCreate(
            contact_id=self.contact_id,
            title=title,
            notes=notes,
            due_date=due_date,
            priority=priority,
        )
        return await self._create(payload)

    async def update_task(self, task_id: str, changes: TaskUpdate) -> Entry[Task] | None:
        """Apply ``changes`` locally, then on the server.

        If the server no longer has the task it is dropped locally and the
        list is refreshed in the background.

        Returns:
            The confirmed or FAILED entry, or None if the task was dropped
        """
        index = self._index(task_id)
        previous = self.entries[index].record
        self.entries[index] = Entry(
            _apply_changes(previous, changes), status=EntryStatus.PENDING
        )
        try:
            updated = await self._retry(
                lambda: self.client.update_task(task_id, changes)
            )
        except NotFoundError as e:
            logger.info(f"Task {task_id} no longer exists: {e}")
            self.entries = [entry for entry in self.entries if entry.id != task_id]
            self._schedule_refresh()
            return None
        except ServiceError as e:
            logger.warning(f"Updating task {task_id} failed: {e}")
            return self._put(
                task_id, Entry(previous, status=EntryStatus.FAILED, error=e.message)
            )
        return self._put(task_id, Entry(updated))

    async def set_completed(self, task_id: str, completed: bool) -> Entry[Task] | None:
        """Mark a task done or open again."""
        return await self.update_task(task_id, TaskUpdate(completed=completed))

    async def delete_task(self, task_id: str) -> Entry[Task] | None:
        """Remove a task locally and on the server."""
        return await self._delete(task_id)


def _apply_changes(task: Task, changes: TaskUpdate) -> Task:
    """Local preview of a partial update, following the server's rules."""
    update = {
        name: value
        for name, value in changes.model_dump(exclude_unset=True).items()
        if value is not None or name in ("notes", "due_date")
    }
    if "title" in update:
        update["title"] = update["title"].strip() or task.title
    update["updated_at"] = now_ms()
    return task.model_copy(update=update)
