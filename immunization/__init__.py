"""
Immunization package: schedule engine, registry and outreach reports.
"""

from .calendar import CivilCalendar, IST, IST_OFFSET, add_days
from .schedule import DOSE_SCHEDULE, VACCINE_ORDER, DoseRule, dose_window
from .engine import (
    ScheduleEngine,
    calculate_vaccination_status,
    get_vaccine_due_in_range,
)
from .registry import (
    VaccinationRegistry,
    RegistryError,
    UnknownVillageError,
    UnknownParentError,
    UnknownChildError,
    DuplicateDoseError,
    DuplicateParentError,
)

__all__ = [
    "CivilCalendar",
    "IST",
    "IST_OFFSET",
    "add_days",
    "DOSE_SCHEDULE",
    "VACCINE_ORDER",
    "DoseRule",
    "dose_window",
    "ScheduleEngine",
    "calculate_vaccination_status",
    "get_vaccine_due_in_range",
    "VaccinationRegistry",
    "RegistryError",
    "UnknownVillageError",
    "UnknownParentError",
    "UnknownChildError",
    "DuplicateDoseError",
    "DuplicateParentError",
]
