# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pydantic request models and shared enumerations.

Request models describe the shape of incoming data only. Business rules
(ranges, uniqueness, lifecycle checks) are enforced by the domain services
so that they apply the same way to every caller.
"""
