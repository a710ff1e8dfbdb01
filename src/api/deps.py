# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""API dependencies for dependency injection."""

from fastapi import Request

from src.config import Settings
from src.services.simulator import SimulatedBackend


def get_backend(request: Request) -> SimulatedBackend:
    """Get the backend built for this application instance."""
    return request.app.state.backend


def get_settings(request: Request) -> Settings:
    """Get the settings this application instance was built with."""
    return request.app.state.settings
