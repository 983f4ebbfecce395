"""
The Vaccination Schedule Engine.

This module implements the core status logic.
It answers two questions for a single child:
1. Status - which doses are recorded, which comes next, and is it upcoming/due/overdue?
2. Due-in-range - would this child need a dose if a health worker visited during [start, end]?

Both are pure functions of their inputs. Callers fetch the child's date of
birth and visit history and pass them in; nothing is read or written here.
"""

import logging
from typing import Iterable, List, Optional

from models import DueStatus, VaccinationStatus, VaccinationVisit, VaccineCode
from .calendar import CivilCalendar, IST, InstantLike
from .schedule import VACCINE_ORDER, dose_window

logger = logging.getLogger(__name__)


def doses_given(visits: Iterable[VaccinationVisit]) -> List[VaccineCode]:
    """
    Distinct doses among the visits, in precedence order.
    'none_required' and 'not_available' visits are not doses.
    """
    recorded = {visit.dose for visit in visits if visit.dose is not None}
    return [code for code in VACCINE_ORDER if code in recorded]


def next_outstanding(given: Iterable[VaccineCode]) -> Optional[VaccineCode]:
    """First dose in precedence order that has not been recorded."""
    given = set(given)
    for code in VACCINE_ORDER:
        if code not in given:
            return code
    return None


class ScheduleEngine:
    """
    Status and due-in-range queries bound to one civil calendar.
    """

    def __init__(self, calendar: CivilCalendar = IST):
        self.calendar = calendar

    def status(
        self,
        date_of_birth: InstantLike,
        visits: Iterable[VaccinationVisit],
        today: Optional[InstantLike] = None
    ) -> VaccinationStatus:
        """
        Compute the child's current VaccinationStatus.
        `today` defaults to the calendar's current date.
        """
        # 1. Normalise everything onto the civil calendar
        dob = self.calendar.to_local_date(date_of_birth)
        today = self.calendar.to_local_date(today) if today is not None else self.calendar.today()

        # 2. What has actually been given
        given = doses_given(visits)

        # 3. Walk the fixed precedence order
        candidate = next_outstanding(given)
        if candidate is None:
            return VaccinationStatus(vaccines_given=given, due_status=DueStatus.COMPLETE)

        # 4. Classify today against the candidate's window
        window = dose_window(dob, candidate)
        if today > window.end:
            due_status = DueStatus.OVERDUE
        elif today >= window.start:
            due_status = DueStatus.DUE
        else:
            due_status = DueStatus.UPCOMING

        logger.debug(f"Next dose {candidate.value} is {due_status.value} (window {window.start} to {window.end})")
        return VaccinationStatus(
            vaccines_given=given,
            next_vaccine_due=candidate,
            due_status=due_status,
            due_window=window
        )

    def due_in_range(
        self,
        date_of_birth: InstantLike,
        visits: Iterable[VaccinationVisit],
        range_start: InstantLike,
        range_end: InstantLike
    ) -> Optional[VaccineCode]:
        """
        Dose this child would need during [range_start, range_end], if any.

        A dose counts when its window overlaps the range, and also when the
        window already closed before the range began (overdue children still
        need the dose on the visit).
        """
        dob = self.calendar.to_local_date(date_of_birth)
        start = self.calendar.to_local_date(range_start)
        end = self.calendar.to_local_date(range_end)

        given = set(doses_given(visits))

        for code in VACCINE_ORDER:
            if code in given:
                continue

            window = dose_window(dob, code)

            # Overlap (window.start <= end and window.end >= start) OR overdue (window.end < start)
            if window.start <= end or window.end < start:
                return code

            # Window opens after the range; later doses open later still
            return None

        return None


_default_engine = ScheduleEngine()


def calculate_vaccination_status(
    date_of_birth: InstantLike,
    visits: Iterable[VaccinationVisit],
    today: Optional[InstantLike] = None,
    calendar: Optional[CivilCalendar] = None
) -> VaccinationStatus:
    """Status of one child. See ScheduleEngine.status."""
    engine = ScheduleEngine(calendar) if calendar is not None else _default_engine
    return engine.status(date_of_birth, visits, today=today)


def get_vaccine_due_in_range(
    date_of_birth: InstantLike,
    visits: Iterable[VaccinationVisit],
    range_start: InstantLike,
    range_end: InstantLike,
    calendar: Optional[CivilCalendar] = None
) -> Optional[VaccineCode]:
    """Dose needed during a date range, or None. See ScheduleEngine.due_in_range."""
    engine = ScheduleEngine(calendar) if calendar is not None else _default_engine
    return engine.due_in_range(date_of_birth, visits, range_start, range_end)
