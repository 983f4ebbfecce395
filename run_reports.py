"""
Main Execution Script for the Child Immunization Tracker.
Loads (or generates) a population, runs the outreach reports and exports
dashboard data for the frontend.
"""

import os
import sys
import logging
import json
from datetime import timedelta
from typing import Optional

# Add current directory to path so imports work
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from generators.data_factory import DataGenerator
from generators.visit_simulator import VisitSimulator
from immunization.calendar import IST
from immunization.registry import VaccinationRegistry
from immunization.reports import dropout_rates, vaccine_demand, wastage
from models import Child, Parent, VaccinationVisit, Village

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler()]
)
logger = logging.getLogger("Main")

# --- CONFIGURATION ---
CACHE_FILENAME = "nhdb_data.json"
DASHBOARD_FILENAME = "dashboard_data.json"
USE_CACHE = True  # Set to False to force a fresh population
SEED = 42
OUTREACH_DAYS = 7  # Length of the forecast window for vaccine demand
API_KEY = os.environ.get("GOOGLE_API_KEY")
# ---------------------


def save_debug_data(registry: VaccinationRegistry, filename: str):
    """Helper to save a generated population so runs are reproducible."""
    serializable = {
        "villages": [v.model_dump(mode='json') for v in registry.villages.values()],
        "parents": [p.model_dump(mode='json') for p in registry.parents.values()],
        "children": [c.model_dump(mode='json') for c in registry.children.values()],
        "vaccination_visits": [v.model_dump(mode='json') for v in registry.all_visits()],
    }

    with open(filename, 'w') as f:
        json.dump(serializable, f, indent=2)
    logger.info(f"💾 Saved population to {filename}")


def load_cached_data(filename: str) -> Optional[VaccinationRegistry]:
    """
    Helper to load JSON data and rebuild the registry from Pydantic models.
    """
    try:
        with open(filename, 'r') as f:
            data = json.load(f)
    except (FileNotFoundError, json.JSONDecodeError):
        logger.warning(f"⚠️ Cache file {filename} not found or invalid. Falling back to Generator.")
        return None

    logger.info(f"📂 Loading cached data from {filename}...")
    registry = VaccinationRegistry()
    for item in data.get('villages', []):
        registry.add_village(Village(**item))
    for item in data.get('parents', []):
        registry.add_parent(Parent(**item))
    for item in data.get('children', []):
        registry.add_child(Child(**item))
    for item in data.get('vaccination_visits', []):
        registry.record_visit(VaccinationVisit(**item))

    logger.info(f"✅ Cache Loaded: {len(registry.children)} children, {len(registry.all_visits())} visits.")
    return registry


def generate_population() -> VaccinationRegistry:
    """Seeded population; names come from the LLM when an API key is configured."""
    villages = first_names = last_names = None

    if API_KEY:
        generator = DataGenerator(api_key=API_KEY)
        logger.info("--- Generative AI Roster Fetch ---")
        generated_villages, cost_v = generator.generate_villages(count=7)
        first_names, last_names, cost_n = generator.generate_name_roster(count=40)
        villages = [(v.village_id, v.name) for v in generated_villages] or None
        logger.info(f"💸 Total Estimated LLM Cost: ${cost_v + cost_n:.4f}")

    registry = VaccinationRegistry()
    simulator = VisitSimulator(
        seed=SEED,
        villages=villages,
        first_names=first_names,
        last_names=last_names
    )
    simulator.populate(registry)
    return registry


def export_dashboard_data(registry: VaccinationRegistry, demand, dropout, waste, filename: str = DASHBOARD_FILENAME):
    """
    Serializes the reports into a JSON format for the frontend.
    """
    logger.info(f"💾 Exporting dashboard data to {filename}...")

    data = {
        "statistics": registry.get_statistics(),
        "vaccine_demand": [d.model_dump(mode='json') for d in demand],
        "dropout_rate": [m.model_dump(mode='json') for m in dropout],
        "wastage": [m.model_dump(mode='json') for m in waste],
    }

    with open(filename, 'w') as f:
        json.dump(data, f, indent=2)
    logger.info("✅ Dashboard data exported.")


def main():
    logger.info("🚀 Starting Child Immunization Tracker reports...")
    today = IST.today()

    # --- PHASE 1: DATA ACQUISITION (Cache vs. Generator) ---
    registry = load_cached_data(CACHE_FILENAME) if USE_CACHE else None

    if registry is None:
        logger.info("--- Phase 1: Generating Population ---")
        registry = generate_population()
        save_debug_data(registry, CACHE_FILENAME)

    if not registry.children:
        logger.error("❌ No data available. Exiting.")
        return

    # --- PHASE 2: REPORTS ---
    logger.info("--- Phase 2: Outreach Reports ---")
    window_end = today + timedelta(days=OUTREACH_DAYS - 1)
    demand = [
        vaccine_demand(registry, village.village_id, today, window_end)
        for village in registry.list_villages()
    ]
    dropout = dropout_rates(registry, today=today)
    waste = wastage(registry, today=today)

    # --- PHASE 3: REPORTING ---
    stats = registry.get_statistics(today=today)

    print("\n" + "=" * 50)
    print("📊 FINAL EXECUTION REPORT")
    print("=" * 50)
    print(stats)

    print(f"\n💉 VACCINE DEMAND ({today} to {window_end})")
    for d in demand:
        print(f"  {d.village_id} {d.village_name:<14} A={d.demand.A:<3} B={d.demand.B:<3} C={d.demand.C:<3} "
              f"({d.children_needing_vaccines}/{d.total_children} children)")

    print("\n📉 DROPOUT RATE (latest month)")
    for v in dropout[-1].villages:
        print(f"  {v.village_id} {v.village_name:<14} {v.dropout_rate:.1%} ({v.children_completed}/{v.children_started} completed)")

    print("\n🗑️ WASTAGE")
    for month in waste:
        cells = "  ".join(f"{code.value}: {d.wasted}/{d.expected}" for code, d in month.wastage.items())
        print(f"  {month.month}  {cells}")

    # --- PHASE 4: EXPORT FOR FRONTEND ---
    export_dashboard_data(registry, demand, dropout, waste)

    print("\n✅ Reports Complete.")


if __name__ == "__main__":
    main()
