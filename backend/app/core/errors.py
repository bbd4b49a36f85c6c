# app/core/errors.py
"""
Service-level error taxonomy.

Services raise these exceptions; the exception handlers registered in
app.main are the single place that turns them into HTTP responses of the
form {"error": "<message>"}.
"""
import logging
import uuid
from contextlib import contextmanager
from typing import Iterator

from tortoise.exceptions import BaseORMException, IntegrityError

logger = logging.getLogger("uvicorn.error")


class ServiceError(Exception):
    """Base class for errors that map onto an HTTP status code."""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ServiceError):
    """Missing or malformed input."""
    status_code = 400


class UnauthorizedError(ServiceError):
    """Acting user does not own (or may not act on) the resource."""
    status_code = 403


class NotFoundError(ServiceError):
    status_code = 404


class ConflictError(ServiceError):
    """Uniqueness violation or lost optimistic-lock race."""
    status_code = 409


class UpstreamError(ServiceError):
    """Email or chat provider failure."""
    status_code = 502


class StorageError(ServiceError):
    status_code = 500


@contextmanager
def storage_guard(context: str) -> Iterator[None]:
    """
    Wrap ORM failures raised inside the block with a context prefix.

    IntegrityError (unique index hit) becomes ConflictError, any other
    ORM failure (lost connection included) becomes StorageError. Service
    errors pass through.
    """
    try:
        yield
    except IntegrityError as e:
        raise ConflictError(f"{context}: {e}") from e
    except BaseORMException as e:
        logger.exception("[storage] %s", context)
        raise StorageError(f"{context}: {e}") from e


def ensure_uuid(value: str, label: str) -> uuid.UUID:
    """Parse an id from a path or body; malformed ids cannot exist, so they are NotFound."""
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        raise NotFoundError(f"{label} not found")
