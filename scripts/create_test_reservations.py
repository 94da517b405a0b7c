"""Create demo reservations for checking the calendar"""
import sys
from datetime import date, timedelta
from pathlib import Path

# Make the repo root importable
sys.path.insert(0, str(Path(__file__).parent.parent))

from rental.database import SessionLocal, init_db
from rental.models import ReservationStatus
from rental.schemas.reservation import ReservationCreate
from rental.services.reservation_service import ReservationService


def main():
    print("Initializing database...")
    init_db()

    today = date.today()

    test_reservations = [
        {
            "equipment_id": "drill-01",
            "equipment_name": "Wiertarka udarowa",
            "customer_name": "Jan Kowalski",
            "start_date": today + timedelta(days=2),
            "end_date": today + timedelta(days=4),
            "status": ReservationStatus.CONFIRMED,
        },
        {
            "equipment_id": "drill-01",
            "equipment_name": "Wiertarka udarowa",
            "customer_name": "Anna Nowak",
            "start_date": today + timedelta(days=10),
            "end_date": today + timedelta(days=10),
            "status": ReservationStatus.PENDING,
        },
        {
            "equipment_id": "mixer-02",
            "equipment_name": "Betoniarka 160 l",
            "customer_name": "Piotr Wiśniewski",
            "start_date": today,
            "end_date": today + timedelta(days=6),
            "status": ReservationStatus.PICKED_UP,
        },
        {
            "equipment_id": "mixer-02",
            "equipment_name": "Betoniarka 160 l",
            "customer_name": "Ewa Wójcik",
            "start_date": today + timedelta(days=20),
            "end_date": today + timedelta(days=22),
            "status": ReservationStatus.CANCELLED,
        },
    ]

    with SessionLocal() as db:
        for data in test_reservations:
            reservation = ReservationService.create_reservation(
                db, ReservationCreate(**data)
            )
            print(
                f"Created #{reservation.id}: {reservation.equipment_id} "
                f"{reservation.start_date}..{reservation.end_date} ({reservation.status.value})"
            )

        for equipment_id in ("drill-01", "mixer-02"):
            dates = ReservationService.get_reserved_dates(db, equipment_id)
            print(f"{equipment_id}: {len(dates)} reserved days")


if __name__ == "__main__":
    main()
