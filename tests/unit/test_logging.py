# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for logging configuration."""

import logging

import pytest
import structlog

from src.core.config.settings import DatabaseSettings, Settings
from src.domains.auth import Operation, Principal, ResourceType, require_permission
from src.domains.exceptions import AuthorizationError
from src.models.common import Role
from src.utils.logging import (
    NOISY_LOGGERS,
    bind_context,
    clear_context,
    get_logger,
    setup_logging,
)


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_quiets_noisy_loggers(self) -> None:
        setup_logging(Settings())

        for name in NOISY_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING

    def test_sql_echo_is_opt_in(self) -> None:
        setup_logging(Settings())
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING

        setup_logging(Settings(database=DatabaseSettings(echo=True)))
        assert logging.getLogger("sqlalchemy.engine").level == logging.INFO

    def test_application_logger_follows_log_level(self) -> None:
        setup_logging(Settings(log_level="ERROR"))

        assert logging.getLogger("src").level == logging.ERROR

    def test_get_logger_returns_usable_logger(self) -> None:
        setup_logging(Settings(debug=False, environment="staging"))

        logger = get_logger("tests.logging")
        logger.info("Batch capacity updated", batch_id="b-1", capacity=30)


class TestContext:
    """Tests for bound logging context."""

    def test_bind_and_clear(self) -> None:
        bind_context(employee_id="e-42", role="COUNSELLOR")
        assert structlog.contextvars.get_contextvars() == {
            "employee_id": "e-42",
            "role": "COUNSELLOR",
        }

        clear_context()
        assert structlog.contextvars.get_contextvars() == {}


class TestAccessDeniedLogging:
    """Denials are logged at WARNING before the error is raised."""

    def test_denial_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        principal = Principal(employee_id="e-7", role=Role.FACULTY)

        with caplog.at_level(logging.WARNING, logger="src.domains.auth.permissions"):
            with pytest.raises(AuthorizationError):
                require_permission(principal, Operation.DELETE, ResourceType.BATCH)

        assert "Access denied: DELETE BATCH for employee=e-7 role=FACULTY" in caplog.text
