"""SQLAlchemy models for the TaskSync server.

Timestamps are stored as epoch milliseconds. The ``server_*`` columns are
assigned by the server only and drive incremental pulls.
"""

from __future__ import annotations

from sqlalchemy import BigInteger, Boolean, Index, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""


class Task(Base):
    """A synchronized task."""

    __tablename__ = "tasks"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    icon: Mapped[str] = mapped_column(String(255), nullable=False)
    is_done: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_urgent: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    comment: Mapped[str] = mapped_column(Text, default="", nullable=False)

    # Set by the originating client, passed through untouched
    client_created_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    client_updated_at: Mapped[int] = mapped_column(BigInteger, nullable=False)

    # Watermark columns
    server_created_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    server_updated_at: Mapped[int] = mapped_column(BigInteger, nullable=False)

    # Indexes
    __table_args__ = (
        Index("idx_tasks_server_created", "server_created_at"),
        Index("idx_tasks_server_updated", "server_updated_at"),
    )
