# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Simulated unreliable backend in front of the contact and task stores.

Every operation waits for an artificial delay and may fail with a
:class:`TransientError`. Reads fail before touching the store. Writes run
first and may fail afterwards, so a failed create/update/delete can still
have been applied. Clients must retry with that in mind.
"""

import asyncio
import logging
import random
from abc import ABC, abstractmethod

from src.config import Settings
from src.database import JsonStorage
from src.models.enums import OperationKind
from src.schemas.common import Page
from src.schemas.contact import Contact, ContactCreate
from src.schemas.task import Task, TaskCreate, TaskUpdate
from src.services.contact_service import ContactStore
from src.services.errors import TransientError
from src.services.query_service import ListQuery
from src.services.task_service import TaskStore

logger = logging.getLogger(__name__)


class FaultPolicy(ABC):
    """Decides the latency and failures injected around store operations."""

    @abstractmethod
    async def delay(self, kind: OperationKind) -> None:
        """Wait before the operation."""
        ...

    @abstractmethod
    def should_fail(self, kind: OperationKind) -> bool:
        """Whether this call should raise a transient failure."""
        ...


class NoFaultPolicy(FaultPolicy):
    """No latency, no failures."""

    async def delay(self, kind: OperationKind) -> None:
        return None

    def should_fail(self, kind: OperationKind) -> bool:
        return False


class RandomFaultPolicy(FaultPolicy):
    """Uniform random latency and independent per-call failures."""

    def __init__(
        self,
        *,
        min_delay_ms: int = 100,
        max_delay_ms: int = 400,
        read_failure_rate: float = 0.05,
        write_failure_rate: float = 0.12,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the policy.

        Args:
            min_delay_ms: Lower bound of the injected delay
            max_delay_ms: Upper bound of the injected delay
            read_failure_rate: Failure probability of a read
            write_failure_rate: Failure probability of a write
            rng: Random source, pass a seeded one for reproducible runs
        """
        self.min_delay_ms = min_delay_ms
        self.max_delay_ms = max(min_delay_ms, max_delay_ms)
        self.read_failure_rate = read_failure_rate
        self.write_failure_rate = write_failure_rate
        self._rng = rng or random.Random()

    async def delay(self, kind: OperationKind) -> None:
        delay_ms = self._rng.uniform(self.min_delay_ms, self.max_delay_ms)
        await asyncio.sleep(delay_ms / 1000)

    def should_fail(self, kind: OperationKind) -> bool:
        rate = (
            self.read_failure_rate
            if kind == OperationKind.READ
            else self.write_failure_rate
        )
        return self._rng.random() < rate


class SimulatedBackend:
    """The operations the HTTP layer exposes, wrapped by a fault policy."""

    def __init__(
        self,
        contacts: ContactStore,
        tasks: TaskStore,
        policy: FaultPolicy | None = None,
    ) -> None:
        self.contacts = contacts
        self.tasks = tasks
        self.policy = policy or NoFaultPolicy()

    async def initialize(self) -> None:
        """Load or seed both collections."""
        await self.contacts.initialize()
        await self.tasks.initialize()

    async def _before_read(self, operation: str) -> None:
        await self.policy.delay(OperationKind.READ)
        if self.policy.should_fail(OperationKind.READ):
            logger.info(f"Injected transient failure in {operation}")
            raise TransientError("simulated network failure")

    async def _after_write(self, operation: str) -> None:
        if self.policy.should_fail(OperationKind.WRITE):
            logger.info(f"Injected transient failure after {operation}")
            raise TransientError("simulated mutation failure")

    # -------------------------- contacts --------------------------
    async def list_contacts(self, query: ListQuery) -> Page:
        await self._before_read("list_contacts")
        return await self.contacts.list(query)

    async def get_contact(self, contact_id: str) -> Contact:
        await self._before_read("get_contact")
        return await self.contacts.get(contact_id)

    async def create_contact(self, data: ContactCreate) -> Contact:
        await self.policy.delay(OperationKind.WRITE)
        contact = await self.contacts.create(data)
        await self._after_write("create_contact")
        return contact

    async def delete_contact(self, contact_id: str) -> bool:
        await self.policy.delay(OperationKind.WRITE)
        await self.contacts.delete(contact_id)
        await self._after_write("delete_contact")
        return True

    # -------------------------- tasks --------------------------
    async def list_tasks(self, query: ListQuery) -> Page:
        await self._before_read("list_tasks")
        return await self.tasks.list(query)

    async def get_task(self, task_id: str) -> Task:
        await self._before_read("get_task")
        return await self.tasks.get(task_id)

    async def create_task(self, data: TaskCreate) -> Task:
        await self.policy.delay(OperationKind.WRITE)
        task = await self.tasks.create(data)
        await self._after_write("create_task")
        return task

    async def update_task(self, task_id: str, data: TaskUpdate) -> Task:
        await self.policy.delay(OperationKind.WRITE)
        task = await self.tasks.update(task_id, data)
        await self._after_write("update_task")
        return task

    async def delete_task(self, task_id: str) -> bool:
        await self.policy.delay(OperationKind.WRITE)
        await self.tasks.delete(task_id)
        await self._after_write("delete_task")
        return True


def build_backend(settings: Settings) -> SimulatedBackend:
    """Wire storage, stores, cascade and fault policy from settings."""
    storage = JsonStorage(settings.data_dir)
    contacts = ContactStore(storage, seed_count=settings.seed_contact_count)
    tasks = TaskStore(storage, contacts, seed_count=settings.seed_task_count)
    contacts.register_cascade(tasks.delete_for_contact)
    if settings.simulate_faults:
        policy: FaultPolicy = RandomFaultPolicy(
            min_delay_ms=settings.min_delay_ms,
            max_delay_ms=settings.max_delay_ms,
            read_failure_rate=settings.read_failure_rate,
            write_failure_rate=settings.write_failure_rate,
        )
    else:
        policy = NoFaultPolicy()
    return SimulatedBackend(contacts, tasks, policy)
