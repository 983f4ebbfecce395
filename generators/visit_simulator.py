"""
Synthetic population generator for the Child Immunization Tracker.

Builds villages, parents, children (0-16 weeks old) and a plausible visit
history for each child, then loads them into a VaccinationRegistry.
A fixed seed gives a reproducible dataset.
"""

import logging
import random
import string
from datetime import date as date_type
from typing import Dict, List, Optional, Sequence, Tuple

from models import Child, Parent, VaccinationVisit, VaccineGiven, Village
from immunization.calendar import CivilCalendar, IST, add_days
from immunization.registry import VaccinationRegistry

logger = logging.getLogger(__name__)

DEFAULT_VILLAGES: List[Tuple[str, str]] = [
    ("V001", "Rampur"),
    ("V002", "Shivgaon"),
    ("V003", "Lakshminagar"),
    ("V004", "Chandpur"),
    ("V005", "Govindpur"),
    ("V006", "Surajkund"),
    ("V007", "Motinagar"),
]

FIRST_NAMES: List[str] = [
    "Aarav", "Aditi", "Aditya", "Akash", "Ananya", "Arjun", "Diya", "Ishaan",
    "Kavya", "Krishna", "Lakshmi", "Maya", "Neha", "Priya", "Rahul", "Riya",
    "Rohan", "Sakshi", "Sanjay", "Shreya", "Tanvi", "Varun", "Vihaan", "Yash",
    "Amit", "Anjali", "Deepak", "Divya", "Gaurav", "Harini", "Karan", "Meera",
    "Nisha", "Pooja", "Rajesh", "Rekha", "Sunita", "Suresh", "Uma", "Vijay",
]

LAST_NAMES: List[str] = [
    "Sharma", "Patel", "Singh", "Kumar", "Verma", "Gupta", "Reddy", "Rao",
    "Nair", "Menon", "Das", "Chatterjee", "Banerjee", "Mukherjee", "Iyer",
    "Pillai", "Choudhury", "Joshi", "Mehta", "Agarwal", "Mishra", "Pandey",
]

GOVT_ID_CHARS = string.ascii_uppercase + string.digits


class VisitSimulator:
    """
    Generates a seeded population and visit history.
    """

    def __init__(
        self,
        seed: Optional[int] = None,
        today: Optional[date_type] = None,
        calendar: CivilCalendar = IST,
        villages: Optional[Sequence[Tuple[str, str]]] = None,
        first_names: Optional[Sequence[str]] = None,
        last_names: Optional[Sequence[str]] = None
    ):
        self.rng = random.Random(seed)
        self.today = today or calendar.today()
        self.calendar = calendar
        self.villages = list(villages or DEFAULT_VILLAGES)
        self.first_names = list(first_names or FIRST_NAMES)
        self.last_names = list(last_names or LAST_NAMES)
        self._used_govt_ids = set()

    # --- Primitive Helpers ---

    def _govt_id(self) -> str:
        while True:
            candidate = "".join(self.rng.choice(GOVT_ID_CHARS) for _ in range(8))
            if candidate not in self._used_govt_ids:
                self._used_govt_ids.add(candidate)
                return candidate

    def _phone_number(self) -> Optional[str]:
        # 70% of parents have a phone
        if self.rng.random() > 0.7:
            return None
        return f"9{self.rng.randint(100000000, 999999999)}"

    def _visit_day(self, dob: date_type, earliest: int, latest: int) -> date_type:
        """Random visit day in [dob+earliest, dob+latest], never later than today."""
        day = add_days(dob, self.rng.randint(earliest, latest))
        return min(day, self.today)

    # --- Population ---

    def populate(
        self,
        registry: VaccinationRegistry,
        parents_per_village: Tuple[int, int] = (100, 150),
        children_per_village: Tuple[int, int] = (90, 110),
        max_age_days: int = 112
    ) -> Dict[str, int]:
        """
        Fill the registry. Returns counts of what was inserted.
        """
        counts = {"villages": 0, "parents": 0, "children": 0, "vaccination_records": 0}

        for village_id, village_name in self.villages:
            registry.add_village(Village(village_id=village_id, name=village_name))
            counts["villages"] += 1
            logger.info(f"Seeding data for {village_name}...")

            # 1. Parents
            parents = []
            for _ in range(self.rng.randint(*parents_per_village)):
                parent = Parent(
                    govt_id=self._govt_id(),
                    name=f"{self.rng.choice(self.first_names)} {self.rng.choice(self.last_names)}",
                    date_of_birth=date_type(
                        self.today.year - self.rng.randint(20, 44),
                        self.rng.randint(1, 12),
                        self.rng.randint(1, 28)
                    ),
                    village_id=village_id,
                    phone_number=self._phone_number()
                )
                parents.append(registry.add_parent(parent))
            counts["parents"] += len(parents)

            if not parents:
                continue

            # 2. Children (share the parent's family name)
            for _ in range(self.rng.randint(*children_per_village)):
                parent = self.rng.choice(parents)
                age_days = self.rng.randint(0, max_age_days)
                child = Child(
                    name=f"{self.rng.choice(self.first_names)} {parent.name.split(' ')[-1]}",
                    date_of_birth=add_days(self.today, -age_days),
                    parent_id=parent.id,
                    village_id=village_id,
                    # 30% have a birth certificate number
                    govt_id=f"BC{self._govt_id()}" if self.rng.random() < 0.3 else None
                )
                registry.add_child(child)
                counts["children"] += 1

                # 3. Visit history
                for visit in self.simulate_history(child.id, child.date_of_birth, age_days):
                    registry.record_visit(visit)
                    counts["vaccination_records"] += 1

        logger.info(f"Seed complete: {counts}")
        return counts

    def simulate_history(self, child_id: str, dob: date_type, age_days: int) -> List[VaccinationVisit]:
        """
        Visits for one child, following field coverage rates:
        - A: 60% in-window (10% stock-out), 85% once past the window.
        - B: only after A; 50% in-window, 75% once past.
        - C: only after A and B; 40% in-window, 65% once past.
        """
        visits: List[VaccinationVisit] = []
        given = set()

        def record(vaccine: VaccineGiven, day: date_type, notes: Optional[str] = None) -> None:
            visits.append(VaccinationVisit(
                child_id=child_id, visit_date=day, vaccine_given=vaccine, notes=notes
            ))
            if vaccine.is_dose:
                given.add(vaccine)

        # Vaccine A: due days 0-7
        scenario = self.rng.random()
        if age_days <= 7:
            if scenario < 0.6:
                record(VaccineGiven.A, self._visit_day(dob, 0, min(7, age_days)))
            elif scenario < 0.7:
                record(
                    VaccineGiven.NOT_AVAILABLE,
                    self._visit_day(dob, 0, min(7, age_days)),
                    notes="Vaccine stock unavailable"
                )
        elif scenario < 0.85:
            record(VaccineGiven.A, self._visit_day(dob, 0, 10))

        # Vaccine B: due days 42-56
        if age_days >= 42 and VaccineGiven.A in given:
            scenario = self.rng.random()
            if age_days <= 56:
                if scenario < 0.5:
                    record(VaccineGiven.B, self._visit_day(dob, 42, min(56, age_days)))
            elif scenario < 0.75:
                record(VaccineGiven.B, self._visit_day(dob, 42, 60))

        # Vaccine C: due days 84-98
        if age_days >= 84 and {VaccineGiven.A, VaccineGiven.B} <= given:
            scenario = self.rng.random()
            if age_days <= 98:
                if scenario < 0.4:
                    record(VaccineGiven.C, self._visit_day(dob, 84, min(98, age_days)))
            elif scenario < 0.65:
                record(VaccineGiven.C, self._visit_day(dob, 84, 105))

        return visits
