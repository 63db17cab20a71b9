# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Course, batch and company tables."""

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
from src.models.common import BatchStatus, CompanyStatus, CourseStatus


class Course(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A course offering. Its duration drives batch end dates."""

    __tablename__ = "courses"
    __table_args__ = (
        CheckConstraint(
            "duration_months >= 1 AND duration_months <= 60",
            name="ck_courses_duration_range",
        ),
        CheckConstraint("fees > 0", name="ck_courses_fees_positive"),
    )

    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    duration_months: Mapped[int] = mapped_column(Integer, nullable=False)
    fees: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    status: Mapped[CourseStatus] = mapped_column(
        enum_column(CourseStatus),
        nullable=False,
        default=CourseStatus.ACTIVE,
    )

    def __repr__(self) -> str:
        return f"<Course(id={self.id}, name={self.name})>"


class Batch(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A cohort following one course, with a fixed seat capacity.

    ``current_enrollment`` is only ever written through conditional
    UPDATE statements issued by the batch service. The check constraint
    backs the capacity invariant at the store level.
    """

    __tablename__ = "batches"
    __table_args__ = (
        CheckConstraint("capacity >= 1", name="ck_batches_capacity_positive"),
        CheckConstraint(
            "current_enrollment >= 0 AND current_enrollment <= capacity",
            name="ck_batches_enrollment_within_capacity",
        ),
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    course_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("courses.id"),
        nullable=False,
        index=True,
    )
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    current_enrollment: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[BatchStatus] = mapped_column(
        enum_column(BatchStatus),
        nullable=False,
        default=BatchStatus.PLANNED,
        index=True,
    )
    instructor_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("employees.id", ondelete="SET NULL"),
    )

    @property
    def available_slots(self) -> int:
        """Seats left in the batch."""
        return self.capacity - self.current_enrollment

    def __repr__(self) -> str:
        return (
            f"<Batch(id={self.id}, name={self.name}, "
            f"enrollment={self.current_enrollment}/{self.capacity})>"
        )


class Company(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A hiring partner students are placed with."""

    __tablename__ = "companies"

    name: Mapped[str] = mapped_column(String(150), unique=True, nullable=False)
    industry: Mapped[str | None] = mapped_column(String(100))
    contact_person: Mapped[str | None] = mapped_column(String(100))
    email: Mapped[str | None] = mapped_column(String(255), unique=True)
    phone: Mapped[str | None] = mapped_column(String(20))
    address: Mapped[str | None] = mapped_column(Text)
    partnership_date: Mapped[date | None] = mapped_column(Date)
    status: Mapped[CompanyStatus] = mapped_column(
        enum_column(CompanyStatus),
        nullable=False,
        default=CompanyStatus.ACTIVE,
    )

    def __repr__(self) -> str:
        return f"<Company(id={self.id}, name={self.name})>"
