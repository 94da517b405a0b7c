from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from rental.domain.availability import SelectionPhase
from rental.models import ReservationStatus


class ReservationCreate(BaseModel):
    equipment_id: str = Field(min_length=1, max_length=64)
    equipment_name: str = Field(default="", max_length=200)
    customer_name: str = Field(default="", max_length=120)
    start_date: date
    end_date: date
    status: ReservationStatus = ReservationStatus.PENDING

    @field_validator("end_date")
    @classmethod
    def validate_dates(cls, v: date, info):
        start = info.data.get("start_date")
        if start and v < start:
            raise ValueError("end_date must not be before start_date")
        return v


class ReservationStatusUpdate(BaseModel):
    status: ReservationStatus


class ReservationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    equipment_id: str
    equipment_name: str
    customer_name: str
    start_date: date
    end_date: date
    status: ReservationStatus
    created_at: datetime


class ReservedDatesOut(BaseModel):
    equipment_id: str
    reserved_dates: list[str]


class DateSelectRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    day: date = Field(alias="date")


class SelectionOut(BaseModel):
    start: Optional[date] = None
    end: Optional[date] = None
    phase: SelectionPhase
    rental_days: int = 0


class DayCellOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    day: date
    is_today: bool
    is_reserved: bool
    is_selectable: bool
    is_anchor: bool
    is_range_end: bool
    in_range: bool
    disabled: bool


class MonthViewOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    year: int
    month: int
    title: str
    weeks: list[list[Optional[DayCellOut]]]
    selection: SelectionOut
