"""
Error taxonomy shared by the storage layer, services and endpoints.

Services raise these exceptions for every non-success outcome; the API
layer translates them into HTTP errors whose ``detail`` is the
``to_dict()`` payload, so clients always receive a discriminated
``{"error": ..., "message": ...}`` body.
"""

from typing import Any, Dict

# Human readable entity labels used in messages.
REPORT = "Report"
USER = "User"


class AppError(Exception):
    """Base class for all application errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    @property
    def kind(self) -> str:
        return type(self).__name__

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.kind, "message": self.message}


class NotFound(AppError):
    """Lookup, update or delete target does not exist."""

    def __init__(self, entity: str, entity_id: int) -> None:
        super().__init__(f"{entity} with ID {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class AlreadyExists(AppError):
    """Create target already exists.

    Not raised by any current operation; kept for create flows that
    supply their own ID.
    """

    def __init__(self, entity: str, entity_id: int) -> None:
        super().__init__(f"{entity} with ID {entity_id} already exists")
        self.entity = entity
        self.entity_id = entity_id


class OperationFailed(AppError):
    """A durable write could not be completed.  Never retried."""


class RecordTooLargeError(ValueError):
    """An encoded record exceeds its store's declared slot size.

    This signals a programming defect (text bounds not enforced before
    storage) rather than a runtime condition, hence not an ``AppError``.
    """
