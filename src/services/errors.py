# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Error taxonomy shared by the stores, the HTTP layer and the client."""


class ServiceError(Exception):
    """Base exception for contact and task operations.

    ``code`` is the name used as the message prefix on the wire,
    e.g. ``"NotFoundError: task not found"``.
    """

    code = "ServiceError"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    @property
    def detail(self) -> str:
        """Message with the error code prefix, as sent to API clients."""
        return f"{self.code}: {self.message}"


class ValidationError(ServiceError):
    """Bad or missing input. Never retried."""

    code = "ValidationError"


class NotFoundError(ServiceError):
    """The referenced record does not exist. Never retried."""

    code = "NotFoundError"


class TransientError(ServiceError):
    """Retryable infrastructure failure (real or simulated)."""

    code = "TransientError"


ERRORS_BY_CODE: dict[str, type[ServiceError]] = {
    cls.code: cls for cls in (ValidationError, NotFoundError, TransientError)
}


def strip_code(detail: str) -> str:
    """Remove a leading ``"<Code>: "`` prefix from an error message."""
    code, sep, rest = detail.partition(": ")
    if sep and code in ERRORS_BY_CODE:
        return rest
    return detail
