"""
Static dose schedule for the A -> B -> C series.

Windows are inclusive day offsets from the date of birth and never vary by
child or locale.
"""

from dataclasses import dataclass
from datetime import date as date_type
from types import MappingProxyType
from typing import Mapping, Tuple

from models import DueWindow, VaccineCode
from .calendar import add_days


@dataclass(frozen=True)
class DoseRule:
    """Inclusive window [start_day, end_day] counted in days from birth."""
    start_day: int
    end_day: int


DOSE_SCHEDULE: Mapping[VaccineCode, DoseRule] = MappingProxyType({
    VaccineCode.A: DoseRule(0, 7),     # Birth to 1 week
    VaccineCode.B: DoseRule(42, 56),   # 6-8 weeks
    VaccineCode.C: DoseRule(84, 98),   # 12-14 weeks
})

# A later dose is never considered while an earlier one is outstanding
VACCINE_ORDER: Tuple[VaccineCode, ...] = (VaccineCode.A, VaccineCode.B, VaccineCode.C)


def dose_window(dob: date_type, vaccine: VaccineCode) -> DueWindow:
    """Civil-date window for a dose, given an already normalised date of birth."""
    rule = DOSE_SCHEDULE[vaccine]
    return DueWindow(start=add_days(dob, rule.start_day), end=add_days(dob, rule.end_day))


def window_overlaps(window: DueWindow, range_start: date_type, range_end: date_type) -> bool:
    """Standard interval overlap: StartA <= EndB and EndA >= StartB."""
    return window.start <= range_end and window.end >= range_start
