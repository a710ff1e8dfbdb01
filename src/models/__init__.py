# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Enumerations shared by records, queries and client state."""

from src.models.enums import EntryStatus, OperationKind, SortOrder, TaskPriority

__all__ = [
    "EntryStatus",
    "OperationKind",
    "SortOrder",
    "TaskPriority",
]
