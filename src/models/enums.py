# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Enumeration types for records and queries."""

from enum import Enum


class TaskPriority(str, Enum):
    """Task priority enumeration."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class SortOrder(str, Enum):
    """Sort direction for list queries."""

    ASC = "asc"
    DESC = "desc"


class OperationKind(str, Enum):
    """Kind of backend operation, used by the fault simulator."""

    READ = "read"
    WRITE = "write"


class EntryStatus(str, Enum):
    """Client-side state of a locally held record.

    Status flow:
        PENDING → CONFIRMED
           ↓
         FAILED → (retry) → PENDING
    """

    CONFIRMED = "confirmed"  # Matches the server
    PENDING = "pending"  # Optimistic, request in flight
    FAILED = "failed"  # Request gave up, see entry.error
