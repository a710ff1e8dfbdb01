# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Python client for the contacts and tasks API."""

from src.client.api_client import ApiClient
from src.client.controllers import (
    ContactListController,
    Entry,
    TaskListController,
)
from src.client.retry import RetryPolicy, with_retry

__all__ = [
    "ApiClient",
    "ContactListController",
    "Entry",
    "RetryPolicy",
    "TaskListController",
    "with_retry",
]
