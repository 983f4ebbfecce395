"""
Village, Parent and Child data models for the Child Immunization Tracker.

This module defines the population the tracker follows:
1. Villages (the unit a health worker visits)
2. Parents (registered by government ID)
3. Children (the people actually being vaccinated)
"""

from typing import Optional
from uuid import uuid4
from pydantic import BaseModel, Field, ConfigDict, field_validator
from datetime import datetime, timezone

from .vaccination import DateLike


def _new_id() -> str:
    return uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Village(BaseModel):
    """A village served by the outreach programme."""
    village_id: str = Field(pattern=r"^V\d{3}$", description="Short code, e.g. 'V001'")
    name: str = Field(min_length=1, description="Village name")
    created_at: datetime = Field(default_factory=_utcnow)

    model_config = ConfigDict(json_schema_extra={
        "example": {"village_id": "V001", "name": "Rampur"}
    })


class Parent(BaseModel):
    """
    Parent or guardian of one or more children.
    """
    id: str = Field(default_factory=_new_id, description="Unique identifier")
    govt_id: str = Field(min_length=1, description="Government-issued ID")
    name: str = Field(min_length=1)
    date_of_birth: DateLike
    village_id: str = Field(pattern=r"^V\d{3}$")
    phone_number: Optional[str] = Field(default=None, description="Optional contact number")
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @field_validator('phone_number')
    @classmethod
    def validate_phone(cls, v):
        if v is not None and not v.isdigit():
            raise ValueError("Phone number must contain digits only")
        return v


class Child(BaseModel):
    """
    A child on the A -> B -> C schedule.
    Vaccination history is stored separately as VaccinationVisit records.
    """
    id: str = Field(default_factory=_new_id, description="Unique identifier")
    govt_id: Optional[str] = Field(default=None, description="Birth certificate number, if issued")
    name: str = Field(min_length=1)
    date_of_birth: DateLike
    parent_id: str = Field(description="ID of the registered parent")
    village_id: str = Field(pattern=r"^V\d{3}$")
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "name": "Diya Sharma",
            "date_of_birth": "2025-11-01",
            "parent_id": "665f1c2e9b1e8a3d4c2b1a00",
            "village_id": "V001",
            "govt_id": "BC7QK2M9XA"
        }
    })
