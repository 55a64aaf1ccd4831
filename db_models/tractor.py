# db_models/tractor.py
import enum
from datetime import datetime

from sqlalchemy import String, Boolean, Integer, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column

from db_base import Base, new_uuid


class TractorStatus(str, enum.Enum):
    ACTIVE = "Active"
    SPARE = "Spare"
    IN_SHOP = "In Shop"
    RETIRED = "Retired"


# Statuses that imply no operator assignment
TERMINAL_STATUSES = frozenset({
    TractorStatus.SPARE.value,
    TractorStatus.IN_SHOP.value,
    TractorStatus.RETIRED.value,
})


class Tractor(Base):
    __tablename__ = "tractors"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)

    truck_number: Mapped[str | None] = mapped_column(String(50), index=True, nullable=True)
    assigned_plant: Mapped[str | None] = mapped_column(String(50), nullable=True)

    # Operator id; NULL when the tractor has nobody assigned
    assigned_operator: Mapped[str | None] = mapped_column(String(36), index=True, nullable=True)

    # Active / Spare / In Shop / Retired
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=TractorStatus.ACTIVE.value,
        server_default=TractorStatus.ACTIVE.value,
    )

    last_service_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # 0-5
    cleanliness_rating: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")

    has_blower: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    vin: Mapped[str | None] = mapped_column(String(50), nullable=True)
    make: Mapped[str | None] = mapped_column(String(100), nullable=True)
    model: Mapped[str | None] = mapped_column(String(100), nullable=True)
    year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    freight: Mapped[str | None] = mapped_column(String(50), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    # Last time someone verified the record on the floor
    updated_last: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    updated_by: Mapped[str | None] = mapped_column(String(36), nullable=True)

    def to_dict(self) -> dict:
        """Column snapshot, used as the baseline for field diffs."""
        return {
            column.name: getattr(self, column.name)
            for column in self.__table__.columns
        }
