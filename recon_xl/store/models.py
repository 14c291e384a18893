"""Database tables backing the SQL record store."""

from datetime import datetime
from typing import Optional, Type

from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )


class DbApplicant(TimestampMixin, Base):
    __tablename__ = "applicants"

    id: Mapped[int] = mapped_column(primary_key=True)
    utorid: Mapped[Optional[str]] = mapped_column(String, unique=True)
    student_number: Mapped[Optional[str]] = mapped_column(String, unique=True)
    first_name: Mapped[Optional[str]] = mapped_column(String)
    last_name: Mapped[Optional[str]] = mapped_column(String)
    email: Mapped[Optional[str]] = mapped_column(String)
    phone: Mapped[Optional[str]] = mapped_column(String)


class DbInstructor(TimestampMixin, Base):
    __tablename__ = "instructors"

    id: Mapped[int] = mapped_column(primary_key=True)
    last_name: Mapped[Optional[str]] = mapped_column(String)
    first_name: Mapped[Optional[str]] = mapped_column(String)
    email: Mapped[Optional[str]] = mapped_column(String)
    utorid: Mapped[Optional[str]] = mapped_column(String, unique=True)


MODELS_BY_SCHEMA: dict[str, Type[Base]] = {
    "applicant": DbApplicant,
    "instructor": DbInstructor,
}
