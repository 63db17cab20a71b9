# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Field checks shared by the domain services.

The synchronous helpers raise ValidationError with a message naming the
field and return the (possibly normalized) value so they can be used
inline. ensure_unique checks unique columns against the store.
"""

import re
from decimal import Decimal
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.domains.exceptions import DuplicateResourceError, ValidationError
from src.infrastructure.database.models import Base

PHONE_PATTERN = re.compile(r"^[+]?[0-9]{10,15}$")


def require_non_blank(value: str | None, field: str, max_length: int | None = None) -> str:
    """Strip a required text field and reject it when empty or too long."""
    if value is None or not value.strip():
        raise ValidationError(f"{field} is required", details={"field": field})
    value = value.strip()
    if max_length is not None and len(value) > max_length:
        raise ValidationError(
            f"{field} must not exceed {max_length} characters",
            details={"field": field, "max_length": max_length},
        )
    return value


def require_phone(value: str | None, field: str = "phone") -> str:
    """Require a 10 to 15 digit phone number with an optional leading '+'."""
    value = require_non_blank(value, field)
    if not PHONE_PATTERN.match(value):
        raise ValidationError(
            "Phone number should be valid (10-15 digits, optional leading +)",
            details={"field": field, "value": value},
        )
    return value


def require_range(value: int, field: str, minimum: int, maximum: int) -> int:
    """Require ``minimum <= value <= maximum``."""
    if value < minimum or value > maximum:
        raise ValidationError(
            f"{field} must be between {minimum} and {maximum}",
            details={"field": field, "value": value, "min": minimum, "max": maximum},
        )
    return value


def require_positive(value: Decimal | int | float | None, field: str) -> None:
    """Require a strictly positive number when a value is given."""
    if value is not None and value <= 0:
        raise ValidationError(
            f"{field} must be positive",
            details={"field": field, "value": str(value)},
        )


def normalize_email(value: str | None) -> str | None:
    """Lower-case and strip an optional email; blank becomes None."""
    if value is None:
        return None
    value = value.strip().lower()
    return value or None


async def ensure_unique(
    db: AsyncSession,
    model: type[Base],
    resource_type: str,
    values: dict[str, Any],
    exclude_id: str | None = None,
) -> None:
    """Reject values already held by another row of ``model``.

    Args:
        db: Async database session.
        model: Mapped class to search.
        resource_type: Name used in the error, e.g. "Lead".
        values: Field name to candidate value. None values are skipped.
        exclude_id: Row to ignore, i.e. the one being updated.

    Raises:
        DuplicateResourceError: On the first field whose value is taken.
    """
    for field, value in values.items():
        if value is None:
            continue
        query = select(model.id).where(getattr(model, field) == value)
        if exclude_id is not None:
            query = query.where(model.id != exclude_id)
        if (await db.execute(query)).first() is not None:
            raise DuplicateResourceError(resource_type, field, value)
