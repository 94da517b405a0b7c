import logging
from datetime import date, timedelta
from typing import List, Optional

from sqlalchemy import and_, select
from sqlalchemy.orm import Session

from rental.models import BLOCKING_STATUSES, Reservation, ReservationStatus
from rental.schemas.reservation import ReservationCreate

logger = logging.getLogger(__name__)


class ReservationNotFoundError(LookupError):
    def __init__(self, reservation_id: int):
        super().__init__(f"Reservation {reservation_id} not found")
        self.reservation_id = reservation_id


def expand_days(start: date, end: date) -> List[date]:
    """All days from start to end, both inclusive."""
    return [start + timedelta(days=i) for i in range((end - start).days + 1)]


class ReservationService:
    @staticmethod
    def create_reservation(db: Session, data: ReservationCreate) -> Reservation:
        reservation = Reservation(**data.model_dump())
        db.add(reservation)
        db.commit()
        db.refresh(reservation)
        logger.info(
            "Reservation %s created for %s: %s..%s",
            reservation.id,
            reservation.equipment_id,
            reservation.start_date,
            reservation.end_date,
        )
        return reservation

    @staticmethod
    def get_reservation(db: Session, reservation_id: int) -> Reservation:
        reservation = db.get(Reservation, reservation_id)
        if reservation is None:
            raise ReservationNotFoundError(reservation_id)
        return reservation

    @staticmethod
    def list_reservations(
        db: Session,
        equipment_id: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> List[Reservation]:
        stmt = select(Reservation)
        filters = []
        if equipment_id:
            filters.append(Reservation.equipment_id == equipment_id)
        # Overlap with the window, not containment
        if date_from:
            filters.append(Reservation.end_date >= date_from)
        if date_to:
            filters.append(Reservation.start_date <= date_to)
        if filters:
            stmt = stmt.where(and_(*filters))
        stmt = stmt.order_by(Reservation.start_date, Reservation.id)
        return list(db.execute(stmt).scalars().all())

    @staticmethod
    def update_status(
        db: Session, reservation_id: int, status: ReservationStatus
    ) -> Reservation:
        reservation = ReservationService.get_reservation(db, reservation_id)
        previous = reservation.status
        reservation.status = status
        db.commit()
        db.refresh(reservation)
        logger.info(
            "Reservation %s status %s -> %s", reservation_id, previous.value, status.value
        )
        return reservation

    @staticmethod
    def get_reserved_dates(
        db: Session,
        equipment_id: str,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> List[str]:
        """
        ISO dates on which the equipment is taken by a blocking reservation.

        With a window given, only days inside it are returned.
        """
        stmt = select(Reservation).where(
            and_(
                Reservation.equipment_id == equipment_id,
                Reservation.status.in_(BLOCKING_STATUSES),
            )
        )
        if date_from:
            stmt = stmt.where(Reservation.end_date >= date_from)
        if date_to:
            stmt = stmt.where(Reservation.start_date <= date_to)

        days: set[date] = set()
        for reservation in db.execute(stmt).scalars().all():
            start = max(reservation.start_date, date_from) if date_from else reservation.start_date
            end = min(reservation.end_date, date_to) if date_to else reservation.end_date
            days.update(expand_days(start, end))

        return sorted(d.isoformat() for d in days)
