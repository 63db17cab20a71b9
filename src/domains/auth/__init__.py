# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authorization domain.

Credentials are checked by an external identity provider, which resolves
the calling employee into a Principal. This package decides what that
principal may do.

Exports:
    Principal: The calling employee's id and role.
    resolve_principal: Principal for an employee record (ACTIVE only).
    authorize: Pure (role, operation, resource type) lookup.
    require_permission: Gate that raises AuthorizationError on denial.
"""

from src.domains.auth.permissions import (
    PERMISSION_MATRIX,
    Operation,
    ResourceType,
    allowed_roles,
    authorize,
    require_permission,
)
from src.domains.auth.principal import Principal, resolve_principal

__all__ = [
    "PERMISSION_MATRIX",
    "Operation",
    "ResourceType",
    "Principal",
    "allowed_roles",
    "authorize",
    "require_permission",
    "resolve_principal",
]
