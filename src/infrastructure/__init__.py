# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Infrastructure layer for the institute backend.

This package contains:
- Database connections, transactions and models (PostgreSQL or SQLite)
"""
