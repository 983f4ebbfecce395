"""
Vaccination data models for the Child Immunization Tracker.

This module defines the records the schedule engine reads and produces:
1. Visits (what a health worker recorded on a given day)
2. Status (the derived, never-persisted view of where a child stands)
"""

import re
from enum import Enum
from typing import Annotated, List, Optional, Union
from uuid import uuid4
from pydantic import BaseModel, BeforeValidator, Field, ConfigDict, model_validator
from datetime import date as date_type, datetime, timezone


class VaccineCode(str, Enum):
    """The three scheduled doses, in their fixed precedence order."""
    A = "A"
    B = "B"
    C = "C"


class VaccineGiven(str, Enum):
    """Outcome of a single visit."""
    A = "A"
    B = "B"
    C = "C"
    NONE_REQUIRED = "none_required"
    NOT_AVAILABLE = "not_available"  # Stock-out at the time of the visit

    @property
    def is_dose(self) -> bool:
        """True only for visits that actually administered A, B or C."""
        return self.value in {code.value for code in VaccineCode}

    def to_code(self) -> Optional[VaccineCode]:
        return VaccineCode(self.value) if self.is_dose else None


class DueStatus(str, Enum):
    """Where the next outstanding dose sits relative to today."""
    UPCOMING = "upcoming"
    DUE = "due"
    OVERDUE = "overdue"
    COMPLETE = "complete"


_PLAIN_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _keep_plain_dates(value):
    """'YYYY-MM-DD' stays a date instead of becoming midnight UTC."""
    if isinstance(value, str) and _PLAIN_DATE.match(value.strip()):
        return date_type.fromisoformat(value.strip())
    return value


# Timestamps (any offset) or plain civil dates are both accepted.
# Normalisation to the civil calendar happens in immunization.calendar.
DateLike = Annotated[Union[datetime, date_type], BeforeValidator(_keep_plain_dates)]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class VaccinationVisit(BaseModel):
    """
    A single recorded visit for one child.
    Only visits with vaccine_given in {A, B, C} count as a dose.
    """

    id: str = Field(default_factory=lambda: uuid4().hex, description="Unique identifier")
    child_id: str = Field(default="", description="ID of the child this visit belongs to")
    visit_date: DateLike = Field(description="When the visit happened")
    vaccine_given: VaccineGiven = Field(description="Dose administered, or why none was")
    notes: Optional[str] = Field(default=None, description="Free-text remarks from the health worker")
    created_at: datetime = Field(default_factory=_utcnow)

    @property
    def dose(self) -> Optional[VaccineCode]:
        return self.vaccine_given.to_code()

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "child_id": "665f1c2e9b1e8a3d4c2b1a00",
            "visit_date": "2025-11-03",
            "vaccine_given": "A",
            "notes": None
        }
    })


class DueWindow(BaseModel):
    """Inclusive civil-date window in which a dose should be given."""
    start: date_type
    end: date_type

    @model_validator(mode='after')
    def validate_dates(self):
        if self.end < self.start:
            raise ValueError("Window end cannot be before window start")
        return self

    def contains(self, day: date_type) -> bool:
        return self.start <= day <= self.end


class VaccinationStatus(BaseModel):
    """
    Derived view of a child's progress through the A -> B -> C schedule.
    Recomputed on every query; never stored.
    """

    vaccines_given: List[VaccineCode] = Field(
        default_factory=list,
        description="Distinct doses recorded so far, in precedence order"
    )
    next_vaccine_due: Optional[VaccineCode] = Field(
        default=None,
        description="First dose in precedence order that has not been recorded"
    )
    due_status: DueStatus
    due_window: Optional[DueWindow] = Field(
        default=None,
        description="Window of next_vaccine_due (absent once complete)"
    )

    @model_validator(mode='after')
    def validate_completeness(self):
        """next_vaccine_due and due_window exist exactly when the schedule is not complete."""
        if self.due_status == DueStatus.COMPLETE:
            if self.next_vaccine_due is not None or self.due_window is not None:
                raise ValueError("A complete status cannot carry a next dose or window")
        else:
            if self.next_vaccine_due is None or self.due_window is None:
                raise ValueError(f"Status '{self.due_status.value}' requires next_vaccine_due and due_window")

        if len(set(self.vaccines_given)) != len(self.vaccines_given):
            raise ValueError("vaccines_given must not contain duplicates")
        return self

    @property
    def is_complete(self) -> bool:
        return self.due_status == DueStatus.COMPLETE

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "vaccines_given": ["A"],
            "next_vaccine_due": "B",
            "due_status": "due",
            "due_window": {"start": "2025-12-13", "end": "2025-12-27"}
        }
    })
