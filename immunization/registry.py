"""
Vaccination Registry.

This module acts as the 'Memory' of the system.
It stands in for the document database the route handlers talk to, and tracks:
1. Villages, Parents and Children (with lookup indices).
2. Vaccination visits per child, enforcing one recorded dose per vaccine.
3. Summary statistics for the final report.
"""

import logging
from collections import defaultdict
from datetime import date as date_type
from typing import Any, Dict, List, Optional

from models import (
    Child,
    ChildWithStatus,
    DueStatus,
    Parent,
    VaccinationVisit,
    Village,
)
from .calendar import CivilCalendar, IST, InstantLike
from .engine import ScheduleEngine

logger = logging.getLogger(__name__)


class RegistryError(Exception):
    """Base class for rejected registry operations."""


class UnknownVillageError(RegistryError, KeyError):
    def __init__(self, village_id: str):
        super().__init__(f"Village not found: {village_id}")
        self.village_id = village_id


class UnknownParentError(RegistryError, KeyError):
    def __init__(self, parent_id: str):
        super().__init__(f"Parent not found: {parent_id}")
        self.parent_id = parent_id


class DuplicateParentError(RegistryError):
    """Raised when a government ID is registered a second time."""

    def __init__(self, govt_id: str):
        super().__init__("A parent with this government ID already exists")
        self.govt_id = govt_id


class UnknownChildError(RegistryError, KeyError):
    def __init__(self, child_id: str):
        super().__init__(f"Child not found: {child_id}")
        self.child_id = child_id


class DuplicateDoseError(RegistryError):
    """Raised when A, B or C is recorded twice for the same child."""

    def __init__(self, child_id: str, vaccine: str):
        super().__init__(f"Vaccine {vaccine} has already been given to this child")
        self.child_id = child_id
        self.vaccine = vaccine


class VaccinationRegistry:
    """
    In-memory store of the tracked population and their visits.
    """

    def __init__(self, calendar: CivilCalendar = IST):
        """Initialize an empty registry."""
        self.calendar = calendar
        self.engine = ScheduleEngine(calendar)

        self.villages: Dict[str, Village] = {}
        self.parents: Dict[str, Parent] = {}
        self.children: Dict[str, Child] = {}

        # Indices
        self.parents_by_govt_id: Dict[str, str] = {}
        self.children_by_parent: Dict[str, List[str]] = defaultdict(list)
        self.children_by_village: Dict[str, List[str]] = defaultdict(list)
        self.visits_by_child: Dict[str, List[VaccinationVisit]] = defaultdict(list)

    # --- Write Methods ---

    def add_village(self, village: Village) -> Village:
        self.villages[village.village_id] = village
        return village

    def add_parent(self, parent: Parent) -> Parent:
        """Register a parent. Government IDs are unique, ignoring case."""
        key = parent.govt_id.strip().casefold()
        if key in self.parents_by_govt_id:
            raise DuplicateParentError(parent.govt_id)
        if parent.village_id not in self.villages:
            logger.warning(f"Parent {parent.id} registered to unknown village {parent.village_id}")
        self.parents[parent.id] = parent
        self.parents_by_govt_id[key] = parent.id
        return parent

    def add_child(self, child: Child) -> Child:
        """Register a child. The parent must already be registered."""
        if child.parent_id not in self.parents:
            raise UnknownParentError(child.parent_id)

        self.children[child.id] = child
        self.children_by_parent[child.parent_id].append(child.id)
        self.children_by_village[child.village_id].append(child.id)
        return child

    def record_visit(self, visit: VaccinationVisit) -> VaccinationVisit:
        """
        Commit a visit to the child's history.
        A/B/C may each be recorded once; 'none_required' and 'not_available' may repeat.
        """
        if visit.child_id not in self.children:
            raise UnknownChildError(visit.child_id)

        if visit.dose is not None:
            history = self.visits_by_child[visit.child_id]
            if any(v.dose == visit.dose for v in history):
                raise DuplicateDoseError(visit.child_id, visit.dose.value)

        self.visits_by_child[visit.child_id].append(visit)
        return visit

    # --- Query Methods ---

    def get_village(self, village_id: str) -> Village:
        try:
            return self.villages[village_id]
        except KeyError:
            raise UnknownVillageError(village_id) from None

    def find_parent(self, govt_id: str) -> Parent:
        """Case-insensitive lookup by government ID."""
        try:
            return self.parents[self.parents_by_govt_id[govt_id.strip().casefold()]]
        except KeyError:
            raise UnknownParentError(govt_id) from None

    def get_child(self, child_id: str) -> Child:
        try:
            return self.children[child_id]
        except KeyError:
            raise UnknownChildError(child_id) from None

    def list_villages(self) -> List[Village]:
        """All villages, sorted by village code."""
        return sorted(self.villages.values(), key=lambda v: v.village_id)

    def list_children(self, parent_id: Optional[str] = None, village_id: Optional[str] = None) -> List[Child]:
        """Children filtered by parent and/or village (all children when neither is given)."""
        if parent_id is not None:
            ids = self.children_by_parent.get(parent_id, [])
        elif village_id is not None:
            ids = self.children_by_village.get(village_id, [])
        else:
            ids = list(self.children)

        children = [self.children[cid] for cid in ids]
        if village_id is not None:
            children = [c for c in children if c.village_id == village_id]
        return children

    def get_history(self, child_id: str, newest_first: bool = True) -> List[VaccinationVisit]:
        """Visit history of one child, sorted by civil visit date."""
        self.get_child(child_id)
        return sorted(
            self.visits_by_child.get(child_id, []),
            key=lambda v: self.calendar.to_local_date(v.visit_date),
            reverse=newest_first
        )

    def all_visits(self) -> List[VaccinationVisit]:
        return [v for visits in self.visits_by_child.values() for v in visits]

    def get_child_with_status(self, child_id: str, today: Optional[InstantLike] = None) -> ChildWithStatus:
        """Child details joined with status, history, parent and village names."""
        child = self.get_child(child_id)
        history = self.get_history(child_id)
        parent = self.parents.get(child.parent_id)
        village = self.villages.get(child.village_id)

        return ChildWithStatus(
            child=child,
            vaccination_status=self.engine.status(child.date_of_birth, history, today=today),
            vaccination_history=history,
            parent_name=parent.name if parent else None,
            village_name=village.name if village else child.village_id
        )

    def list_children_with_status(
        self,
        parent_id: Optional[str] = None,
        village_id: Optional[str] = None,
        today: Optional[InstantLike] = None
    ) -> List[ChildWithStatus]:
        return [
            self.get_child_with_status(child.id, today=today)
            for child in self.list_children(parent_id=parent_id, village_id=village_id)
        ]

    # --- Reporting Methods ---

    def get_statistics(self, today: Optional[date_type] = None) -> Dict[str, Any]:
        """
        Generate headline numbers for the final report.
        """
        status_counts: Dict[str, int] = defaultdict(int)
        for child in self.children.values():
            status = self.engine.status(child.date_of_birth, self.visits_by_child.get(child.id, []), today=today)
            status_counts[status.due_status.value] += 1

        visits = self.all_visits()
        doses = sum(1 for v in visits if v.dose is not None)
        stock_outs = sum(1 for v in visits if v.vaccine_given.value == "not_available")

        return {
            "villages": len(self.villages),
            "parents": len(self.parents),
            "children": len(self.children),
            "vaccination_records": len(visits),
            "doses_given": doses,
            "stock_outs": stock_outs,
            "status_breakdown": {s.value: status_counts.get(s.value, 0) for s in DueStatus},
        }

    def clear(self) -> None:
        """Reset state (useful for testing or re-seeding)."""
        self.villages.clear()
        self.parents.clear()
        self.parents_by_govt_id.clear()
        self.children.clear()
        self.children_by_parent.clear()
        self.children_by_village.clear()
        self.visits_by_child.clear()
