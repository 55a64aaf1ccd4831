# db_models/tractor_comment.py
from datetime import datetime

from sqlalchemy import String, Text, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from db_base import Base, new_uuid


class TractorComment(Base):
    __tablename__ = "tractors_comments"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)

    tractor_id: Mapped[str] = mapped_column(
        ForeignKey("tractors.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    text: Mapped[str] = mapped_column(Text, nullable=False)
    author: Mapped[str] = mapped_column(String(100), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
