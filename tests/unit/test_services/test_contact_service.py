# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Tests for contact_service."""

import re

import pytest

from src.database import CONTACTS_COLLECTION, TASKS_COLLECTION
from src.schemas.contact import ContactCreate
from src.schemas.task import TaskCreate
from src.services.contact_service import ContactStore
from src.services.errors import NotFoundError, ValidationError
from src.services.query_service import ListQuery


def ada() -> ContactCreate:
    return ContactCreate(first_name="Ada", last_name="Lovelace", email="ada@x.com")


class TestInitialization:
    """Tests for loading and seeding."""

    @pytest.mark.asyncio
    async def test_seeds_and_persists_when_file_missing(self, storage, clock):
        store = ContactStore(storage, seed_count=25, clock=clock)

        await store.initialize()

        assert store.initialized
        assert await store.count() == 25
        saved = storage.load(CONTACTS_COLLECTION)
        assert len(saved) == 25
        assert saved[0]["id"] == "C00001"
        assert "firstName" in saved[0]
        assert "lastActivityAt" in saved[0]

    @pytest.mark.asyncio
    async def test_seeds_when_file_is_empty(self, storage, clock):
        storage.save(CONTACTS_COLLECTION, [])
        store = ContactStore(storage, seed_count=3, clock=clock)

        assert await store.count() == 3

    @pytest.mark.asyncio
    async def test_loads_existing_file_without_seeding(self, storage, clock):
        first = ContactStore(storage, seed_count=0, clock=clock)
        created = await first.create(ada())

        second = ContactStore(storage, seed_count=50, clock=clock)
        contacts = await second.all()

        assert [c.id for c in contacts] == [created.id]
        assert contacts[0] == created

    @pytest.mark.asyncio
    async def test_reads_do_not_persist(self, storage, contact_store):
        contact = await contact_store.create(ada())
        path = storage.path_for(CONTACTS_COLLECTION)
        path.write_text("[]", encoding="utf-8")

        await contact_store.list(ListQuery())
        await contact_store.get(contact.id)

        assert path.read_text(encoding="utf-8") == "[]"


class TestCreate:
    """Tests for contact creation."""

    @pytest.mark.asyncio
    async def test_create_scenario(self, contact_store):
        contact = await contact_store.create(ada())

        assert contact.id == "C00001"
        assert contact.created_at == contact.last_activity_at
        assert contact.phone == ""
        assert contact.tags == []

    @pytest.mark.asyncio
    async def test_ids_are_unique_and_formatted(self, contact_store):
        ids = []
        for i in range(12):
            contact = await contact_store.create(
                ContactCreate(first_name="A", last_name="B", email=f"a{i}@x.com")
            )
            ids.append(contact.id)

        assert len(set(ids)) == 12
        assert all(re.fullmatch(r"C\d{5}", i) for i in ids)
        assert ids[-1] == "C00012"

    @pytest.mark.asyncio
    async def test_id_follows_highest_existing_number(self, storage, clock):
        storage.save(
            CONTACTS_COLLECTION,
            [
                {
                    "id": "C00041",
                    "firstName": "Old",
                    "lastName": "Timer",
                    "email": "old@x.com",
                    "createdAt": 1,
                    "lastActivityAt": 1,
                },
                {
                    "id": "Cabc",
                    "firstName": "Odd",
                    "lastName": "Id",
                    "email": "odd@x.com",
                    "createdAt": 1,
                    "lastActivityAt": 1,
                },
            ],
        )
        store = ContactStore(storage, clock=clock)

        contact = await store.create(ada())

        assert contact.id == "C00042"

    @pytest.mark.asyncio
    async def test_numbering_restarts_after_emptying(self, contact_store):
        first = await contact_store.create(ada())
        await contact_store.delete(first.id)

        again = await contact_store.create(ada())

        assert again.id == "C00001"

    @pytest.mark.asyncio
    async def test_fields_are_trimmed(self, contact_store):
        contact = await contact_store.create(
            ContactCreate(first_name="  Ada ", last_name=" Lovelace", email=" ada@x.com ")
        )
        assert contact.first_name == "Ada"
        assert contact.last_name == "Lovelace"
        assert contact.email == "ada@x.com"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload",
        [
            {"first_name": "", "last_name": "L", "email": "a@x.com"},
            {"first_name": "A", "last_name": "   ", "email": "a@x.com"},
            {"first_name": "A", "last_name": "L", "email": ""},
        ],
    )
    async def test_required_fields(self, contact_store, payload):
        with pytest.raises(ValidationError, match="firstName, lastName, email required"):
            await contact_store.create(ContactCreate(**payload))

    @pytest.mark.asyncio
    async def test_email_is_unique_ignoring_case(self, contact_store):
        await contact_store.create(ada())

        with pytest.raises(ValidationError, match="email already exists"):
            await contact_store.create(
                ContactCreate(first_name="Other", last_name="Ada", email="ADA@X.COM")
            )

    @pytest.mark.asyncio
    async def test_newest_contact_is_first_in_storage(self, storage, contact_store):
        await contact_store.create(ada())
        second = await contact_store.create(
            ContactCreate(first_name="Grace", last_name="Hopper", email="grace@x.com")
        )

        saved = storage.load(CONTACTS_COLLECTION)
        assert saved[0]["id"] == second.id


class TestGetAndList:
    """Tests for lookups and listing."""

    @pytest.mark.asyncio
    async def test_get_missing_raises(self, contact_store):
        with pytest.raises(NotFoundError, match="contact not found"):
            await contact_store.get("C99999")

    @pytest.mark.asyncio
    async def test_search_covers_name_and_tags(self, contact_store):
        await contact_store.create(ada())
        await contact_store.create(
            ContactCreate(
                first_name="Grace",
                last_name="Hopper",
                email="grace@navy.mil",
                tags=["vip"],
                city="Arlington",
            )
        )

        by_full_name = await contact_store.list(ListQuery(q="ada lovelace"))
        by_tag = await contact_store.list(ListQuery(q="VIP"))
        by_city = await contact_store.list(ListQuery(q="arling"))

        assert [c.first_name for c in by_full_name.data] == ["Ada"]
        assert [c.first_name for c in by_tag.data] == ["Grace"]
        assert [c.first_name for c in by_city.data] == ["Grace"]

    @pytest.mark.asyncio
    async def test_tag_filter(self, contact_store):
        await contact_store.create(ada())
        await contact_store.create(
            ContactCreate(first_name="G", last_name="H", email="g@x.com", tags=["partner"])
        )

        page = await contact_store.list(ListQuery(filters={"tag": "partner"}))

        assert page.total == 1
        assert page.data[0].email == "g@x.com"

    @pytest.mark.asyncio
    async def test_total_is_stable(self, storage, clock):
        store = ContactStore(storage, seed_count=40, clock=clock)

        first = await store.list(ListQuery(page_size=10))
        second = await store.list(ListQuery(page_size=10))

        assert first.total == second.total == 40
        assert [c.id for c in first.data] == [c.id for c in second.data]

    @pytest.mark.asyncio
    async def test_default_order_is_latest_activity_first(self, storage, clock):
        store = ContactStore(storage, seed_count=30, clock=clock)

        page = await store.list(ListQuery(page_size=30))

        activity = [c.last_activity_at for c in page.data]
        assert activity == sorted(activity, reverse=True)

    @pytest.mark.asyncio
    async def test_page_past_the_end(self, storage, clock):
        store = ContactStore(storage, seed_count=12, clock=clock)

        page = await store.list(ListQuery(page=5, page_size=10))

        assert page.data == []
        assert page.total == 12
        assert page.has_next is False


class TestDelete:
    """Tests for deletion and cascade."""

    @pytest.mark.asyncio
    async def test_delete_removes_contact(self, storage, contact_store):
        contact = await contact_store.create(ada())

        assert await contact_store.delete(contact.id) is True

        with pytest.raises(NotFoundError):
            await contact_store.get(contact.id)
        assert storage.load(CONTACTS_COLLECTION) == []

    @pytest.mark.asyncio
    async def test_delete_missing_raises(self, contact_store):
        with pytest.raises(NotFoundError):
            await contact_store.delete("C00001")

    @pytest.mark.asyncio
    async def test_delete_cascades_to_tasks(self, storage, contact_store, task_store):
        contact = await contact_store.create(ada())
        other = await contact_store.create(
            ContactCreate(first_name="Grace", last_name="Hopper", email="grace@x.com")
        )
        await task_store.create(TaskCreate(contact_id=contact.id, title="Call"))
        await task_store.create(TaskCreate(contact_id=contact.id, title="Write"))
        kept = await task_store.create(TaskCreate(contact_id=other.id, title="Visit"))

        await contact_store.delete(contact.id)

        remaining = await task_store.list(ListQuery(filters={"contact_id": contact.id}))
        assert remaining.total == 0
        assert [t["id"] for t in storage.load(TASKS_COLLECTION)] == [kept.id]
        assert [t.id for t in await task_store.all()] == [kept.id]

    @pytest.mark.asyncio
    async def test_cascade_failure_does_not_fail_delete(self, contact_store):
        calls = []

        async def broken_hook(contact_id: str) -> None:
            calls.append(contact_id)
            raise OSError("disk full")

        contact_store.register_cascade(broken_hook)
        contact = await contact_store.create(ada())

        assert await contact_store.delete(contact.id) is True
        assert calls == [contact.id]
