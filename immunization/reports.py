"""
Outreach Reports for the Child Immunization Tracker.

This module aggregates per-child schedule logic into the three planning
reports health workers use:
1. Vaccine Demand - doses to carry on a village visit between two dates.
2. Dropout Rate - children who started the series (A) but never finished it (C).
3. Wastage - doses that fell due in a month but were not administered.

All dates are compared on the registry's civil calendar.
"""

import calendar as month_calendar
import logging
from collections import defaultdict
from datetime import date as date_type
from typing import Dict, List, Optional, Set, Tuple

from models import (
    DoseCounts,
    MonthlyDropoutReport,
    MonthlyWastageReport,
    VaccineCode,
    VaccineDemand,
    VaccineWastageDetails,
    VillageDropoutRate,
)
from .calendar import InstantLike
from .registry import VaccinationRegistry
from .schedule import VACCINE_ORDER, dose_window, window_overlaps

logger = logging.getLogger(__name__)

RATE_PRECISION = 4


# --- Month Helpers ---

def month_bounds(year: int, month: int) -> Tuple[date_type, date_type]:
    """First and last civil date of a calendar month."""
    last_day = month_calendar.monthrange(year, month)[1]
    return date_type(year, month, 1), date_type(year, month, last_day)


def recent_months(today: date_type, count: int) -> List[Tuple[int, int]]:
    """
    The `count` most recent (year, month) pairs ending with today's month, oldest first.
    """
    months = []
    year, month = today.year, today.month
    for _ in range(count):
        months.append((year, month))
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return list(reversed(months))


def _rate(numerator: int, denominator: int) -> float:
    return round(numerator / denominator, RATE_PRECISION) if denominator > 0 else 0.0


# --- Reports ---

def vaccine_demand(
    registry: VaccinationRegistry,
    village_id: str,
    start_date: InstantLike,
    end_date: InstantLike
) -> VaccineDemand:
    """
    Forecast doses needed in a village for a visit during [start_date, end_date].
    Each child contributes at most one dose: the first outstanding one.
    """
    village = registry.get_village(village_id)
    start = registry.calendar.to_local_date(start_date)
    end = registry.calendar.to_local_date(end_date)

    children = registry.list_children(village_id=village_id)
    demand = DoseCounts()
    needing = 0

    for child in children:
        due = registry.engine.due_in_range(
            child.date_of_birth,
            registry.visits_by_child.get(child.id, []),
            start,
            end
        )
        if due is not None:
            demand.increment(due)
            needing += 1

    logger.info(f"Demand for {village.name} {start}..{end}: {demand.total} doses across {len(children)} children")

    return VaccineDemand(
        village_id=village.village_id,
        village_name=village.name,
        start_date=start,
        end_date=end,
        demand=demand,
        total_children=len(children),
        children_needing_vaccines=needing
    )


def dropout_rates(
    registry: VaccinationRegistry,
    today: Optional[date_type] = None,
    months: int = 6
) -> List[MonthlyDropoutReport]:
    """
    Per-village dropout for each of the last `months` months (oldest first).

    Started = distinct children with A recorded on or before month end.
    Completed = distinct children with C recorded on or before month end.
    Dropout = (started - completed) / started, or 0 when nobody started.
    """
    today = today or registry.calendar.today()
    villages = registry.list_villages()

    # Dose visits as (village, dose, civil date, child)
    dose_events = []
    for visit in registry.all_visits():
        if visit.dose not in (VaccineCode.A, VaccineCode.C):
            continue
        child = registry.children.get(visit.child_id)
        if child is None:
            continue
        dose_events.append((
            child.village_id,
            visit.dose,
            registry.calendar.to_local_date(visit.visit_date),
            child.id
        ))

    reports = []
    for year, month in recent_months(today, months):
        _, month_end = month_bounds(year, month)

        started: Dict[str, Set[str]] = defaultdict(set)
        completed: Dict[str, Set[str]] = defaultdict(set)
        for village_id, dose, visit_day, child_id in dose_events:
            if visit_day > month_end:
                continue
            if dose == VaccineCode.A:
                started[village_id].add(child_id)
            else:
                completed[village_id].add(child_id)

        village_stats = []
        for village in villages:
            n_started = len(started[village.village_id])
            n_completed = len(completed[village.village_id])
            village_stats.append(VillageDropoutRate(
                village_id=village.village_id,
                village_name=village.name,
                children_started=n_started,
                children_completed=n_completed,
                # C without A would push the rate negative
                dropout_rate=max(0.0, _rate(n_started - n_completed, n_started))
            ))

        reports.append(MonthlyDropoutReport(month=f"{year:04d}-{month:02d}", villages=village_stats))

    return reports


def wastage(
    registry: VaccinationRegistry,
    today: Optional[date_type] = None,
    months: int = 3
) -> List[MonthlyWastageReport]:
    """
    Per-vaccine wastage for each of the last `months` months (oldest first).

    Expected = children whose window for the dose overlaps the month and who
    had not received it before the month started.
    Actual = those expected children who received it during the month.
    """
    today = today or registry.calendar.today()
    to_local = registry.calendar.to_local_date

    # child_id -> [(dose, civil date)]
    doses_by_child: Dict[str, List[Tuple[VaccineCode, date_type]]] = defaultdict(list)
    for visit in registry.all_visits():
        if visit.dose is not None:
            doses_by_child[visit.child_id].append((visit.dose, to_local(visit.visit_date)))

    reports = []
    for year, month in recent_months(today, months):
        month_start, month_end = month_bounds(year, month)
        details = {code: VaccineWastageDetails() for code in VACCINE_ORDER}

        for child in registry.children.values():
            dob = to_local(child.date_of_birth)
            history = doses_by_child.get(child.id, [])
            before = {dose for dose, day in history if day < month_start}
            during = {dose for dose, day in history if month_start <= day <= month_end}

            for code in VACCINE_ORDER:
                if not window_overlaps(dose_window(dob, code), month_start, month_end):
                    continue
                if code in before:
                    continue

                details[code].expected += 1
                if code in during:
                    details[code].actual += 1

        for code, d in details.items():
            d.wasted = d.expected - d.actual
            d.rate = _rate(d.wasted, d.expected)

        reports.append(MonthlyWastageReport(month=f"{year:04d}-{month:02d}", wastage=details))

    return reports
