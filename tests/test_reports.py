from __future__ import annotations

from datetime import date

import pytest

from immunization.registry import UnknownVillageError, VaccinationRegistry
from immunization.reports import (
    dropout_rates,
    month_bounds,
    recent_months,
    vaccine_demand,
    wastage,
)
from models import Child, Parent, VaccinationVisit, VaccineCode, Village


def _registry() -> VaccinationRegistry:
    reg = VaccinationRegistry()
    reg.add_village(Village(village_id="V001", name="Rampur"))
    reg.add_village(Village(village_id="V002", name="Shivgaon"))
    reg.add_parent(Parent(id="p1", govt_id="ABCD1234", name="Priya Sharma",
                          date_of_birth=date(1995, 4, 2), village_id="V001"))
    reg.add_parent(Parent(id="p2", govt_id="WXYZ9876", name="Rahul Nair",
                          date_of_birth=date(1990, 1, 1), village_id="V002"))
    return reg


def _child(reg: VaccinationRegistry, child_id: str, dob: date, village_id: str = "V001") -> None:
    parent_id = "p1" if village_id == "V001" else "p2"
    reg.add_child(Child(id=child_id, name=f"Child {child_id}", date_of_birth=dob,
                        parent_id=parent_id, village_id=village_id))


def _give(reg: VaccinationRegistry, child_id: str, vaccine: str, day: date) -> None:
    reg.record_visit(VaccinationVisit(child_id=child_id, visit_date=day, vaccine_given=vaccine))


# --- Month Helpers ---

def test_month_bounds_handles_leap_years() -> None:
    assert month_bounds(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))
    assert month_bounds(2025, 12) == (date(2025, 12, 1), date(2025, 12, 31))


def test_recent_months_cross_year_oldest_first() -> None:
    assert recent_months(date(2026, 1, 15), 3) == [(2025, 11), (2025, 12), (2026, 1)]


# --- Vaccine Demand ---

def test_vaccine_demand_counts_first_outstanding_dose() -> None:
    reg = _registry()
    _child(reg, "due_b", date(2025, 11, 1))          # B window 12-13..12-27
    _give(reg, "due_b", "A", date(2025, 11, 3))
    _child(reg, "overdue_a", date(2025, 10, 1))      # A long overdue
    _child(reg, "not_born_yet", date(2026, 2, 1))    # A opens after the range
    _child(reg, "finished", date(2025, 9, 1))
    for code, day in (("A", date(2025, 9, 2)), ("B", date(2025, 10, 15)), ("C", date(2025, 11, 26))):
        _give(reg, "finished", code, day)
    _child(reg, "other_village", date(2025, 12, 18), village_id="V002")

    report = vaccine_demand(reg, "V001", "2025-12-15", "2025-12-21")

    assert report.village_name == "Rampur"
    assert report.start_date == date(2025, 12, 15)
    assert report.end_date == date(2025, 12, 21)
    assert (report.demand.A, report.demand.B, report.demand.C) == (1, 1, 0)
    assert report.total_children == 4
    assert report.children_needing_vaccines == 2


def test_vaccine_demand_unknown_village() -> None:
    with pytest.raises(UnknownVillageError):
        vaccine_demand(_registry(), "V042", date(2025, 12, 15), date(2025, 12, 21))


# --- Dropout Rate ---

def test_dropout_rate_per_month_and_village() -> None:
    reg = _registry()
    _child(reg, "c1", date(2025, 11, 1))
    _give(reg, "c1", "A", date(2025, 11, 3))
    _child(reg, "c4", date(2025, 9, 1))
    _give(reg, "c4", "A", date(2025, 9, 2))
    _give(reg, "c4", "B", date(2025, 10, 15))
    _give(reg, "c4", "C", date(2025, 12, 5))
    _child(reg, "c2", date(2026, 1, 2))
    _give(reg, "c2", "A", date(2026, 1, 5))

    reports = dropout_rates(reg, today=date(2026, 1, 15), months=2)

    assert [r.month for r in reports] == ["2025-12", "2026-01"]

    december, january = reports
    rampur_dec, shivgaon_dec = december.villages
    assert (rampur_dec.children_started, rampur_dec.children_completed, rampur_dec.dropout_rate) == (2, 1, 0.5)
    assert (shivgaon_dec.village_id, shivgaon_dec.children_started, shivgaon_dec.dropout_rate) == ("V002", 0, 0.0)

    rampur_jan = january.villages[0]
    assert (rampur_jan.children_started, rampur_jan.children_completed) == (3, 1)
    assert rampur_jan.dropout_rate == 0.6667


def test_dropout_ignores_doses_after_month_end() -> None:
    reg = _registry()
    _child(reg, "c1", date(2025, 9, 1))
    _give(reg, "c1", "A", date(2025, 9, 2))
    _give(reg, "c1", "B", date(2025, 10, 15))
    _give(reg, "c1", "C", date(2026, 1, 2))

    november, december, january = dropout_rates(reg, today=date(2026, 1, 10), months=3)
    assert november.villages[0].dropout_rate == 1.0
    assert december.villages[0].dropout_rate == 1.0
    assert january.villages[0].dropout_rate == 0.0


# --- Wastage ---

def test_wastage_expected_actual_and_rate() -> None:
    reg = _registry()
    _child(reg, "w1", date(2026, 1, 3))       # A window 01-03..01-10, given in month
    _give(reg, "w1", "A", date(2026, 1, 4))
    _child(reg, "w2", date(2025, 12, 28))     # A window overlaps January but given in December
    _give(reg, "w2", "A", date(2025, 12, 29))
    _child(reg, "w3", date(2025, 11, 20))     # B window 01-01..01-15, missed
    _give(reg, "w3", "A", date(2025, 11, 21))
    _child(reg, "w4", date(2025, 10, 15), village_id="V002")  # C window 01-07..01-21, missed
    _give(reg, "w4", "A", date(2025, 10, 16))
    _give(reg, "w4", "B", date(2025, 11, 30))

    (january,) = wastage(reg, today=date(2026, 1, 15), months=1)

    assert january.month == "2026-01"
    a, b, c = (january.wastage[code] for code in (VaccineCode.A, VaccineCode.B, VaccineCode.C))
    assert (a.expected, a.actual, a.wasted, a.rate) == (1, 1, 0, 0.0)
    assert (b.expected, b.actual, b.wasted, b.rate) == (1, 0, 1, 1.0)
    assert (c.expected, c.actual, c.wasted, c.rate) == (1, 0, 1, 1.0)


def test_wastage_reports_each_recent_month() -> None:
    reports = wastage(_registry(), today=date(2026, 3, 1), months=3)
    assert [r.month for r in reports] == ["2026-01", "2026-02", "2026-03"]
    for report in reports:
        assert all(d.expected == 0 and d.rate == 0.0 for d in report.wastage.values())
