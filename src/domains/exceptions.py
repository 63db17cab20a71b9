# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Domain exceptions shared by all institute services.

This module defines the exception hierarchy for domain operations:
- InstituteError: Base exception carrying a stable error code
- AuthorizationError: Caller may not perform the operation
- ValidationError: Invalid request or forbidden state-dependent change
- DuplicateResourceError: Unique field collision
- ResourceNotFoundError: Referenced id does not resolve
- CapacityExceededError: Batch enrollment/capacity invariant would break
- LeadConversionError: Lead is not eligible for conversion
- ConcurrentModificationError: Row changed after it was read

Every error is raised before a write is applied, or inside a transaction
that is rolled back, so none of them leave partial state behind. Mapping
codes to transport responses happens outside this package.
"""

from typing import Any


class InstituteError(Exception):
    """Base exception for all domain errors.

    Attributes:
        message: Human-readable error description.
        details: Dictionary with additional error context.
        code: Stable machine-readable error code.
    """

    code = "INSTITUTE_ERROR"

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        code: str | None = None,
    ):
        """Initialize domain error.

        Args:
            message: Human-readable error description.
            details: Optional dictionary with additional error context.
            code: Overrides the class-level error code.
        """
        self.message = message
        self.details = details or {}
        if code is not None:
            self.code = code
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation with details if available."""
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message


class AuthorizationError(InstituteError):
    """Caller is unauthenticated or its role lacks the permission.

    Attributes:
        operation: The operation that was attempted.
        resource_type: The resource type it was attempted on.
        role: The caller's role, None when unauthenticated.
    """

    code = "ACCESS_DENIED"

    def __init__(
        self,
        operation: str,
        resource_type: str,
        role: str | None = None,
    ):
        self.operation = operation
        self.resource_type = resource_type
        self.role = role
        who = f"Role {role}" if role else "Unauthenticated caller"
        super().__init__(
            f"{who} is not allowed to {operation} {resource_type}",
            details={"operation": operation, "resource_type": resource_type, "role": role},
        )


class ValidationError(InstituteError):
    """Invalid input or a mutation forbidden by the entity's current state."""

    code = "VALIDATION_ERROR"


class DuplicateResourceError(InstituteError):
    """A unique field already holds the requested value.

    Attributes:
        resource_type: Kind of entity, e.g. "Lead".
        field: Name of the colliding field.
        value: The colliding value.
    """

    code = "DUPLICATE_RESOURCE"

    def __init__(self, resource_type: str, field: str, value: Any):
        self.resource_type = resource_type
        self.field = field
        self.value = value
        super().__init__(
            f"{resource_type} already exists with {field}: {value}",
            details={"resource_type": resource_type, "field": field, "value": str(value)},
        )


class ResourceNotFoundError(InstituteError):
    """A referenced id does not resolve.

    Attributes:
        resource_type: Kind of entity, e.g. "Batch".
        field: Lookup field, usually "id".
        value: The value that was looked up.
    """

    code = "RESOURCE_NOT_FOUND"

    def __init__(self, resource_type: str, value: Any, field: str = "id"):
        self.resource_type = resource_type
        self.field = field
        self.value = value
        super().__init__(
            f"{resource_type} not found with {field}: {value}",
            details={"resource_type": resource_type, "field": field, "value": str(value)},
        )


class CapacityExceededError(InstituteError):
    """The batch enrollment/capacity invariant would be violated.

    Attributes:
        batch_id: Batch whose capacity is involved.
        capacity: The capacity at the time of the check.
        current_enrollment: The enrollment at the time of the check.
    """

    code = "BATCH_CAPACITY_EXCEEDED"

    def __init__(
        self,
        message: str,
        batch_id: str | None = None,
        capacity: int | None = None,
        current_enrollment: int | None = None,
    ):
        self.batch_id = batch_id
        self.capacity = capacity
        self.current_enrollment = current_enrollment
        super().__init__(
            message,
            details={
                "batch_id": batch_id,
                "capacity": capacity,
                "current_enrollment": current_enrollment,
            },
        )


class LeadConversionError(InstituteError):
    """The lead's status does not allow conversion.

    Attributes:
        lead_id: The lead that was being converted.
        status: Its status at the time.
    """

    code = "LEAD_CONVERSION_ERROR"

    def __init__(self, message: str, lead_id: str, status: str):
        self.lead_id = lead_id
        self.status = status
        super().__init__(message, details={"lead_id": lead_id, "status": status})


class ConcurrentModificationError(InstituteError):
    """Another writer changed the row between read and write.

    Attributes:
        resource_type: Kind of entity, e.g. "Student".
        resource_id: The row that changed.
    """

    code = "CONCURRENT_MODIFICATION"

    def __init__(self, resource_type: str, resource_id: str):
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(
            f"{resource_type} was modified concurrently, reload and retry",
            details={"resource_type": resource_type, "resource_id": resource_id},
        )
