# db_models/tractor_issue.py
import enum
from datetime import datetime

from sqlalchemy import String, Text, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from db_base import Base, new_uuid


class IssueSeverity(str, enum.Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class TractorIssue(Base):
    """Maintenance issue; open while time_completed is NULL."""

    __tablename__ = "tractors_maintenance"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)

    tractor_id: Mapped[str] = mapped_column(
        ForeignKey("tractors.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    description: Mapped[str] = mapped_column(Text, nullable=False)

    # Low / Medium / High
    severity: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        default=IssueSeverity.MEDIUM.value,
        server_default=IssueSeverity.MEDIUM.value,
    )

    time_created: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    time_completed: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    @property
    def is_open(self) -> bool:
        return self.time_completed is None
