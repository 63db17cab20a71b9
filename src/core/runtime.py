# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Application startup and shutdown.

The HTTP layer that hosts this core calls ``startup`` once before serving
and ``shutdown`` once when stopping.

Example:
    >>> from src.core.runtime import startup, shutdown
    >>> await startup()
    >>> async with get_session() as session:
    ...     ...
    >>> await shutdown()
"""

from src.core.config import Settings, get_settings
from src.infrastructure.database import (
    check_database_connection,
    close_database,
    create_schema,
    init_database,
)
from src.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)


async def startup(settings: Settings | None = None, create_tables: bool = False) -> Settings:
    """Configure logging and open the database pool.

    Args:
        settings: Settings to use. Defaults to the cached application settings.
        create_tables: Create missing tables from the model metadata.
            Meant for SQLite and throwaway development databases.

    Returns:
        The settings in effect.
    """
    settings = settings or get_settings()
    setup_logging(settings)

    await init_database(settings)
    if create_tables:
        await create_schema()

    reachable = await check_database_connection()
    logger.info(
        "Institute core started",
        environment=settings.environment,
        database_reachable=reachable,
    )

    return settings


async def shutdown() -> None:
    """Close the database pool."""
    await close_database()
    logger.info("Institute core stopped")
