# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Placement table and its derived employment facts."""

from datetime import date
from decimal import Decimal

from sqlalchemy import CheckConstraint, Date, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.database.models.base import (
    Base,
    TimestampMixin,
    UUIDPrimaryKeyMixin,
    enum_column,
)
from src.models.common import EmploymentType, JobType, PlacementStatus
from src.utils.datetime import add_months, months_between, today


class Placement(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A student's job placement with a partner company.

    Activity, probation and tenure are computed from the stored dates on
    every read and are never persisted. Each accepts an ``as_of`` date
    that defaults to today.
    """

    __tablename__ = "placements"
    __table_args__ = (
        CheckConstraint("salary IS NULL OR salary > 0", name="ck_placements_salary_positive"),
        CheckConstraint(
            "probation_months IS NULL OR (probation_months >= 0 AND probation_months <= 24)",
            name="ck_placements_probation_range",
        ),
    )

    student_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("students.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    company_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("companies.id"),
        nullable=False,
        index=True,
    )
    position: Mapped[str] = mapped_column(String(100), nullable=False)
    salary: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))
    placement_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[PlacementStatus] = mapped_column(
        enum_column(PlacementStatus),
        nullable=False,
        default=PlacementStatus.PLACED,
        index=True,
    )
    job_type: Mapped[JobType | None] = mapped_column(enum_column(JobType))
    employment_type: Mapped[EmploymentType | None] = mapped_column(enum_column(EmploymentType))
    work_location: Mapped[str | None] = mapped_column(String(100))
    joining_date: Mapped[date | None] = mapped_column(Date)
    end_date: Mapped[date | None] = mapped_column(Date)
    probation_months: Mapped[int | None] = mapped_column(Integer)
    notes: Mapped[str | None] = mapped_column(Text)

    def is_active(self, as_of: date | None = None) -> bool:
        """PLACED and either open-ended or ending after ``as_of``."""
        as_of = as_of or today()
        return self.status == PlacementStatus.PLACED and (
            self.end_date is None or self.end_date > as_of
        )

    def is_in_probation(self, as_of: date | None = None) -> bool:
        """Whether the probation window is still running on ``as_of``."""
        if self.joining_date is None or self.probation_months is None:
            return False
        as_of = as_of or today()
        return add_months(self.joining_date, self.probation_months) > as_of

    def tenure_in_months(self, as_of: date | None = None) -> int:
        """Whole months from joining to the end date, or to ``as_of`` if still open."""
        if self.joining_date is None:
            return 0
        until = self.end_date or as_of or today()
        return months_between(self.joining_date, until)

    def __repr__(self) -> str:
        return f"<Placement(id={self.id}, student_id={self.student_id}, status={self.status})>"
