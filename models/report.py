"""
Report data models for the Child Immunization Tracker.

This module defines the 'Output' of the tracker: per-child status views and
the aggregated reports used for outreach planning.
"""

from typing import List, Dict, Optional
from pydantic import BaseModel, Field, ConfigDict, model_validator
from datetime import date as date_type

from .household import Child
from .vaccination import VaccinationStatus, VaccinationVisit, VaccineCode


class ChildWithStatus(BaseModel):
    """A child together with its computed status and visit history."""
    child: Child
    vaccination_status: VaccinationStatus
    vaccination_history: List[VaccinationVisit] = Field(default_factory=list)
    parent_name: Optional[str] = None
    village_name: Optional[str] = None


class DoseCounts(BaseModel):
    """Number of children needing each dose."""
    A: int = Field(default=0, ge=0)
    B: int = Field(default=0, ge=0)
    C: int = Field(default=0, ge=0)

    def increment(self, code: VaccineCode) -> None:
        setattr(self, code.value, getattr(self, code.value) + 1)

    @property
    def total(self) -> int:
        return self.A + self.B + self.C


class VaccineDemand(BaseModel):
    """
    Forecast of doses a health worker should carry to a village
    for an outreach visit between start_date and end_date.
    """
    village_id: str
    village_name: str
    start_date: date_type
    end_date: date_type
    demand: DoseCounts = Field(default_factory=DoseCounts)
    total_children: int = Field(default=0, ge=0)
    children_needing_vaccines: int = Field(default=0, ge=0)

    @model_validator(mode='after')
    def validate_counts(self):
        if self.children_needing_vaccines > self.total_children:
            raise ValueError("More children need vaccines than live in the village")
        return self

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "village_id": "V001",
            "village_name": "Rampur",
            "start_date": "2025-01-13",
            "end_date": "2025-01-19",
            "demand": {"A": 4, "B": 7, "C": 2},
            "total_children": 103,
            "children_needing_vaccines": 13
        }
    })


class VillageDropoutRate(BaseModel):
    """Share of children who started the schedule (A) but have not finished it (C)."""
    village_id: str
    village_name: str
    children_started: int = Field(ge=0)
    children_completed: int = Field(ge=0)
    dropout_rate: float = Field(ge=0.0, le=1.0)


class MonthlyDropoutReport(BaseModel):
    month: str = Field(pattern=r"^\d{4}-\d{2}$", description="Calendar month, 'YYYY-MM'")
    villages: List[VillageDropoutRate] = Field(default_factory=list)


class VaccineWastageDetails(BaseModel):
    """Doses that were due in a month versus doses actually given."""
    expected: int = Field(default=0, ge=0)
    actual: int = Field(default=0, ge=0)
    wasted: int = Field(default=0, ge=0)
    rate: float = Field(default=0.0, ge=0.0, le=1.0)


class MonthlyWastageReport(BaseModel):
    month: str = Field(pattern=r"^\d{4}-\d{2}$")
    wastage: Dict[VaccineCode, VaccineWastageDetails] = Field(default_factory=dict)
