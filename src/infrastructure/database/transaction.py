# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit-of-work helper for multi-statement domain operations.

Services run every mutating operation inside ``atomic(self.db)`` so that a
failure on any statement (a capacity check on the second batch of a move,
a unique-constraint violation on flush) rolls back everything already
issued in the same operation.

Example:
    async with atomic(self.db):
        await self.batches.adjust_enrollment(new_batch_id, +1)
        await self.batches.adjust_enrollment(old_batch_id, -1)
        student.batch_id = new_batch_id
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession


@asynccontextmanager
async def atomic(session: AsyncSession) -> AsyncIterator[AsyncSession]:
    """Commit on success, roll back and re-raise on any exception.

    Args:
        session: The request's async session.

    Yields:
        The same session.
    """
    try:
        yield session
        await session.commit()
    except Exception:
        await session.rollback()
        raise
