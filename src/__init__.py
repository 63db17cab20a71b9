"""Institute Backend Core.

Domain invariant and authorization engine for a training institute's
administrative backend: leads, students, capacity-limited batches,
placements, and role-gated staff operations.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "1.0.0"
