"""
Custom exceptions for the labyrinth domain.

These exceptions represent domain-level errors and are independent
of infrastructure concerns (HTTP, templates, sessions).
"""

from typing import Any, List, Optional


class LabyrinthException(Exception):
    """Base exception for all labyrinth errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class CellNotFoundException(LabyrinthException):
    """Raised when an operation references a cell id that is not stored."""

    def __init__(self, cell_id: str):
        super().__init__(
            message=f"Cell not found: {cell_id}", details={"cell_id": cell_id}
        )
        self.cell_id = cell_id


class RoomNotFoundException(LabyrinthException):
    """Raised when a room has no cells."""

    def __init__(self, room: str):
        super().__init__(message=f"Room not found: {room}", details={"room": room})
        self.room = room


class ValidationException(LabyrinthException):
    """Raised when required cell fields are missing or blank."""

    def __init__(
        self,
        field: str,
        value: Any,
        reason: str,
        fields: Optional[List[str]] = None,
    ):
        fields = fields or [field]
        message = f"Validation failed for {', '.join(fields)}: {reason}"
        super().__init__(
            message=message,
            details={
                "field": field,
                "fields": fields,
                "value": str(value),
                "reason": reason,
            },
        )
        self.field = field
        self.fields = fields


class InvalidOperationException(LabyrinthException):
    """Raised for structurally nonsensical requests such as self-links."""

    def __init__(self, operation: str, reason: str):
        message = f"Invalid {operation}: {reason}"
        super().__init__(
            message=message, details={"operation": operation, "reason": reason}
        )
        self.operation = operation
