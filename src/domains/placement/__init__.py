# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Placement domain package."""

from src.domains.placement.service import PlacementService

__all__ = [
    "PlacementService",
]
