"""
Data models package for the Child Immunization Tracker.

This package exports the three core pillars of the data architecture:
1. Population (Village, Parent, Child)
2. Vaccination records (VaccinationVisit, VaccinationStatus)
3. Output (ChildWithStatus and the outreach reports)
"""

from .vaccination import (
    VaccineCode,
    VaccineGiven,
    DueStatus,
    DateLike,
    VaccinationVisit,
    DueWindow,
    VaccinationStatus
)

from .household import (
    Village,
    Parent,
    Child
)

from .report import (
    ChildWithStatus,
    DoseCounts,
    VaccineDemand,
    VillageDropoutRate,
    MonthlyDropoutReport,
    VaccineWastageDetails,
    MonthlyWastageReport
)

__all__ = [
    # --- Vaccination Models ---
    "VaccineCode",
    "VaccineGiven",
    "DueStatus",
    "DateLike",
    "VaccinationVisit",
    "DueWindow",
    "VaccinationStatus",

    # --- Population Models ---
    "Village",
    "Parent",
    "Child",

    # --- Output Models ---
    "ChildWithStatus",
    "DoseCounts",
    "VaccineDemand",
    "VillageDropoutRate",
    "MonthlyDropoutReport",
    "VaccineWastageDetails",
    "MonthlyWastageReport",
]
