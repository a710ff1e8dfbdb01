# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Shared in-memory collection store backed by a JSON file."""

from __future__ import annotations

import asyncio
import logging
import random
import time
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Mapping
from typing import ClassVar, Generic, TypeVar

from pydantic import BaseModel

from src.database import JsonStorage
from src.schemas.common import Page
from src.services.errors import NotFoundError
from src.services.query_service import FilterMatcher, ListQuery, run_query
from src.services.seed_service import pad

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=BaseModel)

Clock = Callable[[], int]


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


def id_number(record_id: str) -> int:
    """Numeric suffix of an id like ``C00042``; 0 if it is not numeric."""
    suffix = record_id[1:]
    return int(suffix) if suffix.isdigit() else 0


class RecordStore(ABC, Generic[R]):
    """Owns one collection: loads it once, seeds it, persists every mutation.

    The store moves from uninitialized to seeded on :meth:`initialize`,
    which every public operation calls. After that the in-memory list is
    the source of truth and the file is rewritten after each mutation.
    """

    collection: ClassVar[str]
    id_prefix: ClassVar[str]
    entity_name: ClassVar[str]
    model: ClassVar[type[BaseModel]]
    default_sort: ClassVar[str]
    filter_matchers: ClassVar[Mapping[str, FilterMatcher]] = {}

    def __init__(
        self,
        storage: JsonStorage,
        *,
        clock: Clock = now_ms,
        rng: random.Random | None = None,
    ) -> None:
        self._storage = storage
        self._clock = clock
        self._rng = rng or random.Random()
        self._records: list[R] | None = None
        self._init_lock = asyncio.Lock()

    @property
    def initialized(self) -> bool:
        return self._records is not None

    async def initialize(self) -> None:
        """Load the collection, seeding and persisting it if absent or empty."""
        if self._records is not None:
            return
        async with self._init_lock:
            if self._records is not None:
                return
            document = await self._storage.aload(self.collection)
            if document:
                self._records = [self.model.model_validate(item) for item in document]
                logger.info(f"Loaded {len(self._records)} {self.collection} from storage")
                return
            self._records = await self._seed()
            await self._persist()
            logger.info(f"Seeded {len(self._records)} {self.collection}")

    @abstractmethod
    async def _seed(self) -> list[R]:
        """Build the initial records for an empty collection."""
        ...

    @abstractmethod
    def _text_fields(self, record: R) -> Iterable[str | None]:
        """Searchable text values of a record."""
        ...

    async def _records_snapshot(self) -> list[R]:
        await self.initialize()
        assert self._records is not None
        return self._records

    async def _persist(self) -> None:
        assert self._records is not None
        document = [
            record.model_dump(by_alias=True, mode="json", exclude_none=True)
            for record in self._records
        ]
        await self._storage.asave(self.collection, document)

    def _index_of(self, record_id: str) -> int:
        assert self._records is not None
        for index, record in enumerate(self._records):
            if record.id == record_id:
                return index
        raise NotFoundError(f"{self.entity_name} not found")

    def _next_id(self) -> str:
        assert self._records is not None
        highest = max((id_number(r.id) for r in self._records), default=0)
        return f"{self.id_prefix}{pad(highest + 1)}"

    async def list(self, query: ListQuery) -> Page:
        """Return one page of records matching the query."""
        records = await self._records_snapshot()
        return run_query(
            records,
            query,
            model=self.model,
            default_sort=self.default_sort,
            text_fields=self._text_fields,
            matchers=self.filter_matchers,
        )

    async def get(self, record_id: str) -> R:
        """Get a record by id.

        Raises:
            NotFoundError: If no record has that id.
        """
        records = await self._records_snapshot()
        return records[self._index_of(record_id)]

    async def exists(self, record_id: str) -> bool:
        records = await self._records_snapshot()
        return any(r.id == record_id for r in records)

    async def delete(self, record_id: str) -> bool:
        """Remove a record and persist the collection.

        Raises:
            NotFoundError: If no record has that id.
        """
        records = await self._records_snapshot()
        del records[self._index_of(record_id)]
        await self._persist()
        logger.debug(f"Deleted {self.entity_name} {record_id}")
        return True

    async def count(self) -> int:
        return len(await self._records_snapshot())

    async def all(self) -> list[R]:
        """Copy of every record, in storage order."""
        return list(await self._records_snapshot())
