# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Seed datasets written when a collection has no stored records yet.

The shape of the generated records is fixed; the values are random.
"""

import random
from collections.abc import Sequence

from src.models.enums import TaskPriority
from src.schemas.contact import Contact
from src.schemas.task import Task

DAY_MS = 1000 * 60 * 60 * 24

FIRST_NAMES = [
    "Avery", "Jordan", "Taylor", "Casey", "Riley",
    "Skyler", "Alex", "Morgan", "Jamie", "Quinn",
]
LAST_NAMES = [
    "Chen", "Singh", "Garcia", "Patel", "Kim",
    "Nguyen", "Lopez", "Brown", "Khan", "Ivanov",
]
COMPANIES = [
    "Lumina Labs", "Vertex Systems", "NovaWorks", "BluePeak", "Quantica",
    "Hyperion", "Apexio", "Terranova", "Orchid", "Zennic",
]
# City and state lists are index-aligned
CITIES = [
    "San Francisco", "New York", "Austin", "Seattle", "Chicago",
    "Toronto", "London", "Berlin", "Sydney", "Tokyo",
]
STATES = ["CA", "NY", "TX", "WA", "IL", "ON", "ENG", "BE", "NSW", "TK"]
TAGS = ["vip", "lead", "customer", "partner", "prospect", "churn-risk", "beta"]

TASK_TITLES = [
    "Follow up email",
    "Schedule demo",
    "Prepare quote",
    "Update contract",
    "Check-in call",
    "Share roadmap",
    "Collect feedback",
    "Onboarding session",
    "Invoice review",
    "Bug triage",
]
TASK_NOTES = [
    "Mention new feature release.",
    "Include discount details.",
    "Ask for availability next week.",
    "Confirm billing address.",
    "Record pain points.",
    "Add training materials.",
]
PRIORITIES = [TaskPriority.LOW, TaskPriority.MEDIUM, TaskPriority.HIGH]


def pad(number: int, size: int = 5) -> str:
    """Zero-pad a number to ``size`` digits."""
    return str(number).zfill(size)


def generate_contacts(count: int, now: int, rng: random.Random | None = None) -> list[Contact]:
    """Build ``count`` contacts with ids C00001..C<count>.

    Activity timestamps fall within the year before ``now``.
    """
    rng = rng or random.Random()
    contacts = []
    for i in range(1, count + 1):
        first_name = rng.choice(FIRST_NAMES)
        last_name = rng.choice(LAST_NAMES)
        company = rng.choice(COMPANIES)
        city_index = rng.randrange(len(CITIES))
        domain = "".join(company.lower().split())
        created_at = now - rng.randrange(DAY_MS * 365)
        last_activity_at = created_at + rng.randrange(max(1, now - created_at))
        tags = list(dict.fromkeys([rng.choice(TAGS), rng.choice(TAGS)]))
        contacts.append(
            Contact(
                id=f"C{pad(i)}",
                first_name=first_name,
                last_name=last_name,
                email=f"{first_name.lower()}.{last_name.lower()}{i}@{domain}.com",
                phone=f"+1-({100 + i % 900})-{pad(i % 1000, 3)}-{pad(i * 7 % 10000, 4)}",
                company=company,
                city=CITIES[city_index],
                state=STATES[city_index],
                tags=tags,
                created_at=created_at,
                last_activity_at=last_activity_at,
            )
        )
    return contacts


def generate_tasks(
    count: int,
    contact_ids: Sequence[str],
    now: int,
    rng: random.Random | None = None,
) -> list[Task]:
    """Build ``count`` tasks spread over the given contacts.

    Returns an empty list when there are no contacts to attach tasks to.
    """
    if not contact_ids:
        return []
    rng = rng or random.Random()
    tasks = []
    for i in range(1, count + 1):
        created_at = now - rng.randrange(DAY_MS * 120)
        updated_at = created_at + rng.randrange(max(1, now - created_at))
        tasks.append(
            Task(
                id=f"T{pad(i)}",
                contact_id=contact_ids[(i * 13) % len(contact_ids)],
                title=TASK_TITLES[i % len(TASK_TITLES)],
                notes=TASK_NOTES[i % len(TASK_NOTES)],
                due_date=created_at + rng.randrange(DAY_MS * 30),
                completed=rng.random() < 0.35,
                priority=PRIORITIES[i % len(PRIORITIES)],
                created_at=created_at,
                updated_at=updated_at,
            )
        )
    return tasks
