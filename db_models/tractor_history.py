# db_models/tractor_history.py
from datetime import datetime

from sqlalchemy import String, Text, DateTime, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column

from db_base import Base, new_uuid


class TractorHistory(Base):
    """One immutable audit row: a single field's before/after value."""

    __tablename__ = "tractors_history"
    __table_args__ = (
        Index("ix_tractor_history_tractor_changed", "tractor_id", "changed_at"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)

    tractor_id: Mapped[str] = mapped_column(
        ForeignKey("tractors.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    field_name: Mapped[str] = mapped_column(String(50), nullable=False)
    old_value: Mapped[str | None] = mapped_column(Text, nullable=True)
    new_value: Mapped[str | None] = mapped_column(Text, nullable=True)

    changed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    changed_by: Mapped[str | None] = mapped_column(String(36), nullable=True)
