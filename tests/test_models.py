from __future__ import annotations

from datetime import date, datetime

import pytest
from pydantic import ValidationError

from models import (
    Child,
    DoseCounts,
    DueStatus,
    DueWindow,
    Parent,
    VaccinationStatus,
    VaccinationVisit,
    VaccineCode,
    VaccineGiven,
    Village,
)


def test_vaccine_given_dose_mapping() -> None:
    assert VaccineGiven.A.is_dose
    assert VaccineGiven.B.to_code() == VaccineCode.B
    assert not VaccineGiven.NOT_AVAILABLE.is_dose
    assert VaccineGiven.NONE_REQUIRED.to_code() is None


def test_visit_accepts_strings_and_rejects_unknown_vaccines() -> None:
    visit = VaccinationVisit(child_id="c1", visit_date="2025-11-03", vaccine_given="not_available")
    assert visit.vaccine_given == VaccineGiven.NOT_AVAILABLE
    assert visit.dose is None

    with pytest.raises(ValidationError):
        VaccinationVisit(child_id="c1", visit_date=date(2025, 11, 3), vaccine_given="D")


def test_visit_keeps_timestamps_and_dates_as_given() -> None:
    stamped = VaccinationVisit(visit_date=datetime(2025, 11, 3, 23, 50), vaccine_given="A")
    plain = VaccinationVisit(visit_date=date(2025, 11, 3), vaccine_given="A")
    assert isinstance(stamped.visit_date, datetime)
    assert type(plain.visit_date) is date


def test_plain_dates_survive_a_json_round_trip() -> None:
    visit = VaccinationVisit(child_id="c1", visit_date=date(2025, 11, 3), vaccine_given="A")
    child = Child(name="Diya Sharma", date_of_birth=date(2025, 11, 1), parent_id="p1", village_id="V001")

    reloaded_visit = VaccinationVisit.model_validate_json(visit.model_dump_json())
    reloaded_child = Child(**child.model_dump(mode="json"))

    assert type(reloaded_visit.visit_date) is date
    assert reloaded_visit.visit_date == date(2025, 11, 3)
    assert type(reloaded_child.date_of_birth) is date


def test_timestamp_strings_stay_timestamps() -> None:
    visit = VaccinationVisit(visit_date="2025-11-03T23:50:00Z", vaccine_given="A")
    assert isinstance(visit.visit_date, datetime)
    assert visit.visit_date.hour == 23


def test_due_window_rejects_inverted_dates() -> None:
    with pytest.raises(ValidationError):
        DueWindow(start=date(2026, 1, 8), end=date(2026, 1, 1))
    assert DueWindow(start=date(2026, 1, 1), end=date(2026, 1, 8)).contains(date(2026, 1, 8))


def test_complete_status_cannot_carry_a_window() -> None:
    with pytest.raises(ValidationError):
        VaccinationStatus(
            vaccines_given=[VaccineCode.A, VaccineCode.B, VaccineCode.C],
            next_vaccine_due=VaccineCode.A,
            due_status=DueStatus.COMPLETE,
        )
    with pytest.raises(ValidationError):
        VaccinationStatus(
            vaccines_given=[VaccineCode.A, VaccineCode.B, VaccineCode.C],
            due_status=DueStatus.COMPLETE,
            due_window=DueWindow(start=date(2026, 1, 1), end=date(2026, 1, 8)),
        )


def test_open_status_requires_next_dose_and_window() -> None:
    with pytest.raises(ValidationError):
        VaccinationStatus(next_vaccine_due=VaccineCode.A, due_status=DueStatus.DUE)


def test_status_rejects_duplicate_given_doses() -> None:
    with pytest.raises(ValidationError):
        VaccinationStatus(
            vaccines_given=[VaccineCode.A, VaccineCode.A],
            next_vaccine_due=VaccineCode.B,
            due_status=DueStatus.UPCOMING,
            due_window=DueWindow(start=date(2026, 2, 12), end=date(2026, 2, 26)),
        )


def test_status_serialises_to_plain_json() -> None:
    status = VaccinationStatus(
        vaccines_given=[VaccineCode.A],
        next_vaccine_due=VaccineCode.B,
        due_status=DueStatus.DUE,
        due_window=DueWindow(start=date(2025, 12, 13), end=date(2025, 12, 27)),
    )
    assert status.model_dump(mode="json") == {
        "vaccines_given": ["A"],
        "next_vaccine_due": "B",
        "due_status": "due",
        "due_window": {"start": "2025-12-13", "end": "2025-12-27"},
    }


def test_village_code_format() -> None:
    assert Village(village_id="V007", name="Motinagar").village_id == "V007"
    with pytest.raises(ValidationError):
        Village(village_id="7", name="Motinagar")


def test_parent_phone_must_be_digits() -> None:
    with pytest.raises(ValidationError):
        Parent(govt_id="ABCD1234", name="Priya Sharma", date_of_birth=date(1995, 4, 2),
               village_id="V001", phone_number="98-765")


def test_child_ids_are_generated() -> None:
    a = Child(name="Diya Sharma", date_of_birth=date(2025, 11, 1), parent_id="p1", village_id="V001")
    b = Child(name="Diya Sharma", date_of_birth=date(2025, 11, 1), parent_id="p1", village_id="V001")
    assert a.id != b.id


def test_dose_counts_increment() -> None:
    counts = DoseCounts()
    counts.increment(VaccineCode.B)
    counts.increment(VaccineCode.B)
    counts.increment(VaccineCode.C)
    assert (counts.A, counts.B, counts.C, counts.total) == (0, 2, 1, 3)
