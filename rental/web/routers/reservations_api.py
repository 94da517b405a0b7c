from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from rental.schemas.reservation import (
    ReservationCreate,
    ReservationOut,
    ReservationStatusUpdate,
    ReservedDatesOut,
)
from rental.services.reservation_service import (
    ReservationNotFoundError,
    ReservationService,
)
from rental.services.reserved_dates import ReservedDatesFeed
from rental.web.deps import get_db, get_feed

router = APIRouter(prefix="/api/reservations", tags=["reservations"])


@router.get("", response_model=list[ReservationOut])
def list_reservations(
    equipment_id: str | None = Query(default=None),
    date_from: date | None = Query(default=None),
    date_to: date | None = Query(default=None),
    db: Session = Depends(get_db),
):
    return ReservationService.list_reservations(db, equipment_id, date_from, date_to)


@router.post("", response_model=ReservationOut, status_code=201)
def create_reservation(
    payload: ReservationCreate,
    db: Session = Depends(get_db),
    feed: ReservedDatesFeed = Depends(get_feed),
):
    reservation = ReservationService.create_reservation(db, payload)
    feed.refresh(reservation.equipment_id)
    return reservation


@router.patch("/{reservation_id}/status", response_model=ReservationOut)
def update_reservation_status(
    reservation_id: int,
    payload: ReservationStatusUpdate,
    db: Session = Depends(get_db),
    feed: ReservedDatesFeed = Depends(get_feed),
):
    try:
        reservation = ReservationService.update_status(db, reservation_id, payload.status)
    except ReservationNotFoundError:
        raise HTTPException(status_code=404, detail="Reservation not found")
    feed.refresh(reservation.equipment_id)
    return reservation


@router.get("/reserved-dates/{equipment_id}", response_model=ReservedDatesOut)
def reserved_dates(
    equipment_id: str,
    date_from: date | None = Query(default=None),
    date_to: date | None = Query(default=None),
    db: Session = Depends(get_db),
):
    dates = ReservationService.get_reserved_dates(db, equipment_id, date_from, date_to)
    return ReservedDatesOut(equipment_id=equipment_id, reserved_dates=dates)
