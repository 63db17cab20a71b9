# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Core package for the institute backend.

This package contains application-wide wiring:
- config: Application configuration and settings
- runtime: Startup and shutdown of logging and the database
"""
