from datetime import date, datetime
from enum import Enum

from sqlalchemy import String, Integer, Date, DateTime, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from rental.database import Base


class ReservationStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PICKED_UP = "picked_up"  # Handed over to the customer
    COMPLETED = "completed"
    ARCHIVED = "archived"
    CANCELLED = "cancelled"


# Statuses that keep equipment unavailable on the reserved days
BLOCKING_STATUSES = (
    ReservationStatus.PENDING,
    ReservationStatus.CONFIRMED,
    ReservationStatus.PICKED_UP,
)


class Reservation(Base):
    __tablename__ = "reservations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    equipment_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    equipment_name: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    customer_name: Mapped[str] = mapped_column(String(120), nullable=False, default="")

    # Both days inclusive
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)

    status: Mapped[ReservationStatus] = mapped_column(
        SQLEnum(ReservationStatus, native_enum=False, length=32),
        nullable=False,
        default=ReservationStatus.PENDING,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    @property
    def is_blocking(self) -> bool:
        return self.status in BLOCKING_STATUSES
