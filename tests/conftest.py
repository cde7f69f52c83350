"""
Pytest-Fixtures für die Planner-Pioneer-Tests.

Stellt bereit:
- eine flüchtige SQLite-Datenbank (":memory:") mit angelegtem Schema
- einen fertig verdrahteten `PlannerService`
- das Beispielszenario aus Projekt P, Modul M1 und zwei Features
"""

from datetime import datetime, timedelta

import pytest

from planner_pioneer.db import connect, create_schema
from planner_pioneer.logging_config import reset_logging
from planner_pioneer.models import Factor, Feature, Module, PlanningSnapshot, Project
from planner_pioneer.services import PlannerService


@pytest.fixture(autouse=True)
def _clean_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture
def db():
    database = connect(":memory:")
    create_schema(database)
    yield database
    database.close()


@pytest.fixture
def svc(db):
    service = PlannerService.from_db(db)
    yield service
    service.close()


@pytest.fixture
def scenario_snapshot() -> PlanningSnapshot:
    """Projekt P (Risiko +20 %), Modul M1 in P, F1 (1/2/3) und F2 (nur M=4) in M1."""

    project = Project(id="P", title="Projekt P", factors=(Factor(id="fx1", project_id="P", label="Risk", value=20),))
    module = Module(id="M1", title="Modul 1", project_id="P")
    features = (
        Feature(id="F1", title="F1", module_id="M1", pert_optimistic=1, pert_most_likely=2, pert_pessimistic=3),
        Feature(id="F2", title="F2", module_id="M1", pert_most_likely=4),
    )
    return PlanningSnapshot(projects=(project,), modules=(module,), features=features)


@pytest.fixture
def stamp():
    """Erzeugt aufsteigende Zeitstempel für Sortiertests."""

    base = datetime(2024, 1, 1, 12, 0, 0)

    def _at(minutes: int) -> datetime:
        return base + timedelta(minutes=minutes)

    return _at
