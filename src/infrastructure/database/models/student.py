# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student and student status history tables."""

from datetime import date, datetime

from sqlalchemy import Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.infrastructure.database.models.base import (
    Base,
    TimestampMixin,
    UUIDPrimaryKeyMixin,
    enum_column,
)
from src.models.common import StudentStatus
from src.utils.datetime import utc_now


class Student(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """An enrolled student.

    ``lead_id`` is unique so a lead can be the origin of at most one
    student.
    """

    __tablename__ = "students"

    enrollment_number: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    first_name: Mapped[str] = mapped_column(String(50), nullable=False)
    last_name: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), unique=True)
    phone: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    date_of_birth: Mapped[date | None] = mapped_column(Date)
    address: Mapped[str | None] = mapped_column(Text)
    status: Mapped[StudentStatus] = mapped_column(
        enum_column(StudentStatus),
        nullable=False,
        default=StudentStatus.ACTIVE,
        index=True,
    )
    batch_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("batches.id"),
        index=True,
    )
    lead_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("leads.id", ondelete="SET NULL"),
        unique=True,
    )
    enrollment_date: Mapped[date] = mapped_column(Date, nullable=False)
    graduation_date: Mapped[date | None] = mapped_column(Date)
    final_grade: Mapped[str | None] = mapped_column(String(10))

    status_history: Mapped[list["StudentStatusHistory"]] = relationship(
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="StudentStatusHistory.id",
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self) -> str:
        return f"<Student(id={self.id}, enrollment_number={self.enrollment_number})>"


class StudentStatusHistory(Base):
    """Append-only status change entry owned by a student."""

    __tablename__ = "student_status_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    student_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("students.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    status: Mapped[StudentStatus] = mapped_column(enum_column(StudentStatus), nullable=False)
    changed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )
    notes: Mapped[str | None] = mapped_column(Text)
