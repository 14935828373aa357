"""
Error contract surfaced by the engine.

Every rejected or failed operation raises a single exception type,
DomainError, tagged with a closed ErrorKind. Transport layers map
``kind.status`` to their own status codes and ``reason`` to the body.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Classification of a failed operation."""

    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    VALIDATION = "validation"
    CONFLICT = "conflict"
    INTERNAL = "internal"

    @property
    def status(self) -> int:
        """HTTP-style status code for this kind."""
        return _STATUS_BY_KIND[self]


_STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.VALIDATION: 400,
    ErrorKind.CONFLICT: 409,
    ErrorKind.INTERNAL: 500,
}


# Reason strings
NOT_FOUND_REASON = "Tender or bid not found."
VERSION_NOT_FOUND_REASON = "Version not found."
UNAUTHORIZED_REASON = "User does not exist or is invalid."
FORBIDDEN_REASON = "Insufficient rights to perform the action."
CONFLICT_REASON = "The entity was modified concurrently, retry the request."
INTERNAL_REASON = "Internal storage error."


class DomainError(Exception):
    """A classified failure of an engine operation."""

    def __init__(self, kind: ErrorKind, reason: str):
        super().__init__(reason)
        self.kind = kind
        self.reason = reason

    @property
    def status(self) -> int:
        return self.kind.status

    def to_dict(self) -> dict[str, Any]:
        """Error body in the shape clients expect."""
        return {"reason": self.reason}

    def __repr__(self) -> str:
        return f"<DomainError(kind={self.kind.value}, reason='{self.reason}')>"


class StaleVersionError(Exception):
    """The current row changed between read and write.

    Raised by the version manager when the guarded UPDATE matches no row
    or the history slot for the observed version is already taken. The
    orchestrator retries the transaction and reports CONFLICT once its
    attempts are exhausted; it never reaches callers directly.
    """

    def __init__(self, kind: str, entity_id: str, observed_version: int):
        super().__init__(
            f"{kind} {entity_id} is no longer at version {observed_version}"
        )
        self.kind = kind
        self.entity_id = entity_id
        self.observed_version = observed_version


def not_found(reason: str = NOT_FOUND_REASON) -> DomainError:
    return DomainError(ErrorKind.NOT_FOUND, reason)


def version_not_found() -> DomainError:
    return DomainError(ErrorKind.NOT_FOUND, VERSION_NOT_FOUND_REASON)


def unauthorized() -> DomainError:
    return DomainError(ErrorKind.UNAUTHORIZED, UNAUTHORIZED_REASON)


def forbidden() -> DomainError:
    return DomainError(ErrorKind.FORBIDDEN, FORBIDDEN_REASON)


def validation(reason: str) -> DomainError:
    return DomainError(ErrorKind.VALIDATION, reason)


def conflict() -> DomainError:
    return DomainError(ErrorKind.CONFLICT, CONFLICT_REASON)


def internal() -> DomainError:
    return DomainError(ErrorKind.INTERNAL, INTERNAL_REASON)
