# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Main API router for v1 endpoints."""

from fastapi import APIRouter

from src.api.v1 import contacts, tasks
from src.schemas.common import ErrorResponse

# Every endpoint reports failures as {"message": "<Code>: <text>"}
ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid request"},
    404: {"model": ErrorResponse, "description": "Record not found"},
    503: {"model": ErrorResponse, "description": "Simulated failure"},
}

api_router = APIRouter()

# Contact routes
api_router.include_router(
    contacts.router, prefix="/contacts", tags=["contacts"], responses=ERROR_RESPONSES
)

# Task routes
api_router.include_router(
    tasks.router, prefix="/tasks", tags=["tasks"], responses=ERROR_RESPONSES
)
