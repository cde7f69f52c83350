from __future__ import annotations

# -----------------------------------------------------------------------------
# Service-Schicht (Anwendungsfälle + Schätzungs-Kennzahlen)
# -----------------------------------------------------------------------------
# Diese Schicht kapselt die Anwendungsfälle und stellt eine stabile API für die CLI bereit.
#
# Architektur-Regel:
# - CLI spricht nur mit Services.
# - Services orchestrieren Use-Cases und nutzen Repositories.
# - Kennzahlen (PERT, Summen, Filter) werden auf einem frischen `PlanningSnapshot`
#   berechnet, der pro Aufruf aus `SnapshotRepository.load()` kommt.
#
# `PlannerService.bootstrap()` fungiert als „Composition Root“: Dort werden
# DB-Verbindung/Schema initialisiert und Repositories instanziiert.
# -----------------------------------------------------------------------------


"""Service-Schicht der Projektplanung.

Zweck:
    Kapselt CRUD-Anwendungsfälle für Projekte, Faktoren, Module und Features sowie die
    Auswertungen (erwartete Dauern, Projektsummen, Master-Tabelle, Dashboard-Zahlen).

Architektur:
    - CLI → Services → Repositories → Datenbank
    - Auswertungen: Services → aggregation/filters auf einem Snapshot
"""

import logging
from dataclasses import dataclass, replace
from typing import Optional

from planner_pioneer.aggregation import (
    ColumnTotals,
    DurationAggregator,
    ModuleDuration,
    ProjectDuration,
    UnassignedDuration,
    column_totals,
    feature_duration,
)
from planner_pioneer.db import connect, create_schema
from planner_pioneer.db_protocol import DatabaseProtocol
from planner_pioneer.filters import (
    ACTIVE,
    ALL,
    COMPLETED,
    FeatureFilter,
    ModuleFilter,
    filter_features,
    filter_modules,
    filter_projects,
    recent,
)
from planner_pioneer.models import Factor, Feature, Module, PlanningSnapshot, Project
from planner_pioneer.repositories import (
    FactorRepository,
    FeatureRepository,
    ModuleRepository,
    ProjectRepository,
    SnapshotRepository,
    new_id,
)
from planner_pioneer.validation import (
    ValidationError,
    parse_factor_value,
    parse_optional_hours,
    parse_optional_ref,
    parse_title,
    validate_pert_order,
)

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class MasterTableRow:
    """
    Eine Zeile der Master-Tabelle (Feature mit aufgelöstem Modul/Projekt).

    Hinweise:
        Nicht auflösbare Referenzen werden als `None` geführt (Anzeige: "-").
    """

    feature_id: str
    feature_title: str
    feature_status: str
    module_id: Optional[str]
    module_title: Optional[str]
    module_color: Optional[str]
    project_id: Optional[str]
    project_title: Optional[str]
    project_color: Optional[str]
    optimistic: Optional[float]
    most_likely: Optional[float]
    pessimistic: Optional[float]
    expected: Optional[float]


@dataclass(frozen=True, slots=True)
class MasterTable:
    rows: tuple[MasterTableRow, ...]
    totals: ColumnTotals


@dataclass(frozen=True, slots=True)
class DashboardStats:
    """
    Kennzahlen der Startseite.

    Begriffe:
        - estimated_hours: Summe der erwarteten Dauer aller Features
        - open_hours: Summe der erwarteten Dauer aller noch aktiven Features
        - unestimated_features: Features ohne wahrscheinlichsten Wert
    """

    total_projects: int
    total_modules: int
    total_features: int
    active_projects: int
    completed_projects: int
    active_modules: int
    completed_modules: int
    active_features: int
    completed_features: int
    unestimated_features: int
    estimated_hours: float
    open_hours: float


class PlannerService:
    """
    Fassade für alle Anwendungsfälle der Anwendung.

    Zweck:
        Stellt eine stabile API für die CLI bereit. Die CLI kennt nur diese Klasse und
        greift weder direkt auf Repositories noch auf SQL zu.

    Hinweise:
        - `bootstrap()` erzeugt DB + Repositories (Composition Root).
        - CRUD-Methoden delegieren an Repositories.
        - Auswertungen laden pro Aufruf einen frischen Snapshot.
    """

    def __init__(
        self,
        db: DatabaseProtocol,
        project_repo: ProjectRepository,
        factor_repo: FactorRepository,
        module_repo: ModuleRepository,
        feature_repo: FeatureRepository,
        snapshot_repo: SnapshotRepository,
        *,
        owns_db: bool = False,
    ) -> None:
        """
        Initialisiert den Service.

        Parameter:
            db (DatabaseProtocol): Datenbank-Adapter.
            project_repo (ProjectRepository): Zugriff auf Projekte.
            factor_repo (FactorRepository): Zugriff auf Faktoren.
            module_repo (ModuleRepository): Zugriff auf Module.
            feature_repo (FeatureRepository): Zugriff auf Features.
            snapshot_repo (SnapshotRepository): Lädt konsistente Snapshots.
            owns_db (bool): Wenn True, wird die DB bei `close()` geschlossen.
        """

        self._db = db
        self._owns_db = owns_db

        self.project_repo = project_repo
        self.factor_repo = factor_repo
        self.module_repo = module_repo
        self.feature_repo = feature_repo
        self.snapshot_repo = snapshot_repo

    # -----------------------------
    # Factory helpers
    # -----------------------------
    @classmethod
    def from_db(cls, db: DatabaseProtocol, *, owns_db: bool = False) -> "PlannerService":
        """
        Erzeugt einen Service für ein bereits existierendes DB-Objekt.

        Parameter:
            db (DatabaseProtocol): Geöffnete Datenbank mit angelegtem Schema.
            owns_db (bool): Ob der Service die DB später selbst schließen soll.

        Rückgabe:
            PlannerService: Fertig konfigurierter Service.
        """

        factor_repo = FactorRepository(db)
        return cls(
            db=db,
            project_repo=ProjectRepository(db, factor_repo),
            factor_repo=factor_repo,
            module_repo=ModuleRepository(db),
            feature_repo=FeatureRepository(db),
            snapshot_repo=SnapshotRepository(db),
            owns_db=owns_db,
        )

    @classmethod
    def bootstrap(
        cls,
        *,
        db_path: Optional[str] = None,
        reset_db: bool = False,
    ) -> "PlannerService":
        """
        Bootstrapt die Anwendung (DB öffnen + Schema anlegen).

        Parameter:
            db_path (str | None): Optionaler Pfad zur SQLite-Datei (":memory:" für Tests).
            reset_db (bool): Wenn True, werden Tabellen vor dem Anlegen gelöscht.

        Rückgabe:
            PlannerService: Fertig konfigurierter Service.
        """

        db = connect(db_path)
        create_schema(db, reset_db=reset_db)
        log.info("Planner service ready")
        return cls.from_db(db, owns_db=True)

    def close(self) -> None:
        """Schließt die DB-Verbindung (nur wenn der Service sie besitzt)."""

        if self._owns_db:
            self._db.close()

    # -----------------------------
    # Projekte + Faktoren
    # -----------------------------
    def create_project(
        self,
        title: str,
        *,
        color: Optional[str] = None,
        description: Optional[str] = None,
    ) -> str:
        """
        Legt ein neues Projekt an.

        Parameter:
            title (str): Projekttitel.
            color (str | None): Optionale Farbe (Default aus dem Repository).
            description (str | None): Optionale Beschreibung.

        Rückgabe:
            str: Neue Projekt-ID.
        """

        p = Project(id=new_id(), title=title, color=color, description=description)
        return self.project_repo.create(p)

    def get_project(self, project_id: str) -> Optional[Project]:
        return self.project_repo.get_by_id(project_id)

    def update_project(self, project: Project) -> None:
        self.project_repo.update(project)

    def toggle_project(self, project_id: str) -> bool:
        """
        Schaltet den Abschlussstatus eines Projekts um.

        Rückgabe:
            bool: Neuer Status.

        Ausnahmen:
            LookupError: Wenn das Projekt nicht existiert.
        """

        p = self.project_repo.get_by_id(project_id)
        if p is None:
            raise LookupError(f"Projekt {project_id} nicht gefunden")
        self.project_repo.set_completed(project_id, not p.completed)
        return not p.completed

    def delete_project(self, project_id: str) -> None:
        self.project_repo.delete(project_id)

    def add_factor(self, project_id: str, label: str, value: float) -> str:
        """
        Fügt einem Projekt einen prozentualen Faktor hinzu.

        Parameter:
            project_id (str): Besitzendes Projekt.
            label (str): Bezeichnung, z. B. "Risiko".
            value (float): Prozentwert, vorzeichenbehaftet.

        Rückgabe:
            str: Neue Faktor-ID.

        Ausnahmen:
            LookupError: Wenn das Projekt nicht existiert.
        """

        if self.project_repo.get_by_id(project_id) is None:
            raise LookupError(f"Projekt {project_id} nicht gefunden")
        return self.factor_repo.create(Factor(id=new_id(), project_id=project_id, label=label, value=value))

    def update_factor(self, factor: Factor) -> None:
        self.factor_repo.update(factor)

    def delete_factor(self, factor_id: str) -> None:
        self.factor_repo.delete(factor_id)

    # -----------------------------
    # Module
    # -----------------------------
    def create_module(
        self,
        title: str,
        *,
        project_id: Optional[str] = None,
        color: Optional[str] = None,
        description: Optional[str] = None,
    ) -> str:
        """
        Legt ein Modul an, optional einem Projekt zugeordnet.

        Ausnahmen:
            LookupError: Wenn `project_id` gesetzt ist, aber nicht existiert.
        """

        if project_id is not None and self.project_repo.get_by_id(project_id) is None:
            raise LookupError(f"Projekt {project_id} nicht gefunden")
        m = Module(id=new_id(), title=title, project_id=project_id, color=color, description=description)
        return self.module_repo.create(m)

    def get_module(self, module_id: str) -> Optional[Module]:
        return self.module_repo.get_by_id(module_id)

    def update_module(self, module: Module) -> None:
        self.module_repo.update(module)

    def toggle_module(self, module_id: str) -> bool:
        m = self.module_repo.get_by_id(module_id)
        if m is None:
            raise LookupError(f"Modul {module_id} nicht gefunden")
        self.module_repo.set_completed(module_id, not m.completed)
        return not m.completed

    def delete_module(self, module_id: str) -> None:
        self.module_repo.delete(module_id)

    # -----------------------------
    # Features
    # -----------------------------
    def create_feature(
        self,
        title: str,
        *,
        module_id: Optional[str] = None,
        optimistic: Optional[float] = None,
        most_likely: Optional[float] = None,
        pessimistic: Optional[float] = None,
        color: Optional[str] = None,
        description: Optional[str] = None,
    ) -> str:
        """
        Legt ein Feature mit optionaler PERT-Schätzung an.

        Parameter:
            title (str): Featuretitel.
            module_id (str | None): Optionales Modul.
            optimistic, most_likely, pessimistic (float | None): Schätzwerte in Stunden.

        Rückgabe:
            str: Neue Feature-ID.

        Ausnahmen:
            LookupError: Wenn `module_id` gesetzt ist, aber nicht existiert.
        """

        if module_id is not None and self.module_repo.get_by_id(module_id) is None:
            raise LookupError(f"Modul {module_id} nicht gefunden")
        f = Feature(
            id=new_id(),
            title=title,
            module_id=module_id,
            color=color,
            description=description,
            pert_optimistic=optimistic,
            pert_most_likely=most_likely,
            pert_pessimistic=pessimistic,
        )
        return self.feature_repo.create(f)

    def get_feature(self, feature_id: str) -> Optional[Feature]:
        return self.feature_repo.get_by_id(feature_id)

    def update_feature(self, feature: Feature) -> None:
        self.feature_repo.update(feature)

    def update_estimate(
        self,
        feature_id: str,
        *,
        optimistic: Optional[float],
        most_likely: Optional[float],
        pessimistic: Optional[float],
    ) -> None:
        """Ersetzt die drei PERT-Werte eines Features."""

        f = self.feature_repo.get_by_id(feature_id)
        if f is None:
            raise LookupError(f"Feature {feature_id} nicht gefunden")
        self.feature_repo.update(
            replace(f, pert_optimistic=optimistic, pert_most_likely=most_likely, pert_pessimistic=pessimistic)
        )

    def toggle_feature(self, feature_id: str) -> bool:
        f = self.feature_repo.get_by_id(feature_id)
        if f is None:
            raise LookupError(f"Feature {feature_id} nicht gefunden")
        self.feature_repo.set_completed(feature_id, not f.completed)
        return not f.completed

    def delete_feature(self, feature_id: str) -> None:
        self.feature_repo.delete(feature_id)

    # -----------------------------
    # Formular-Eingaben (Strings)
    # -----------------------------
    def create_project_from_form(self, title: str, *, color: str = "", description: str = "") -> str:
        return self.create_project(
            parse_title(title, field="Projekttitel"),
            color=color.strip() or None,
            description=description.strip() or None,
        )

    def add_factor_from_form(self, project_id: str, label: str, value: str) -> str:
        return self.add_factor(project_id, parse_title(label, field="Bezeichnung"), parse_factor_value(value))

    def create_module_from_form(self, title: str, project_ref: str = "") -> str:
        try:
            return self.create_module(parse_title(title, field="Modultitel"), project_id=parse_optional_ref(project_ref))
        except LookupError as exc:
            raise ValidationError(str(exc)) from exc

    def create_feature_from_form(
        self,
        title: str,
        module_ref: str = "",
        optimistic: str = "",
        most_likely: str = "",
        pessimistic: str = "",
    ) -> str:
        """
        Legt ein Feature aus Formular-Strings an.

        Zweck:
            Parst Titel, Modulreferenz und die drei Stundenwerte (leer = nicht gesetzt) und
            prüft die Reihenfolge O <= M <= P, bevor das Feature gespeichert wird.

        Ausnahmen:
            ValidationError: Bei ungültiger Eingabe oder unbekanntem Modul.
        """

        o = parse_optional_hours(optimistic, field="Optimistisch")
        m = parse_optional_hours(most_likely, field="Wahrscheinlich")
        p = parse_optional_hours(pessimistic, field="Pessimistisch")
        validate_pert_order(o, m, p)
        try:
            return self.create_feature(
                parse_title(title, field="Featuretitel"),
                module_id=parse_optional_ref(module_ref),
                optimistic=o,
                most_likely=m,
                pessimistic=p,
            )
        except LookupError as exc:
            raise ValidationError(str(exc)) from exc

    # -----------------------------
    # Snapshot + Auswertungen
    # -----------------------------
    def snapshot(self) -> PlanningSnapshot:
        """Lädt einen frischen, konsistenten Datenstand."""

        return self.snapshot_repo.load()

    def aggregator(self, snapshot: Optional[PlanningSnapshot] = None) -> DurationAggregator:
        return DurationAggregator(snapshot if snapshot is not None else self.snapshot())

    def expected_duration(self, feature_id: str) -> Optional[float]:
        """
        Erwartete Dauer eines Features.

        Rückgabe:
            float | None: Stunden oder `None` (keine Schätzung bzw. unbekanntes Feature).
        """

        f = self.feature_repo.get_by_id(feature_id)
        return f.expected_duration if f is not None else None

    def module_duration(self, module_id: str) -> float:
        return self.aggregator().module_duration(module_id)

    def module_summaries(self) -> list[ModuleDuration]:
        return self.aggregator().module_summaries()

    def project_summaries(self) -> list[ProjectDuration]:
        return self.aggregator().project_summaries()

    def project_summary(self, project_id: str) -> Optional[ProjectDuration]:
        return next((s for s in self.project_summaries() if s.project_id == project_id), None)

    def unassigned_summary(self) -> UnassignedDuration:
        return self.aggregator().unassigned()

    def list_projects(self, status: str = ALL) -> list[Project]:
        return filter_projects(self.snapshot().projects, status)

    def list_modules(self, *, status: str = ALL, project_id: str = ALL) -> list[Module]:
        return filter_modules(self.snapshot().modules, ModuleFilter(status=status, project_id=project_id))

    def list_features(self, *, status: str = ALL, project_id: str = ALL, module_id: str = ALL) -> list[Feature]:
        snap = self.snapshot()
        return filter_features(
            snap.features,
            snap.modules,
            FeatureFilter(status=status, project_id=project_id, module_id=module_id),
        )

    def master_table(self, project_filter: str = ALL) -> MasterTable:
        """
        Flache Tabelle aller Features mit Modul, Projekt und PERT-Werten.

        Parameter:
            project_filter (str): "all", "unassigned" oder eine Projekt-ID.

        Rückgabe:
            MasterTable: Zeilen in Snapshot-Reihenfolge plus Spaltensummen.
        """

        snap = self.snapshot()
        features = filter_features(snap.features, snap.modules, FeatureFilter(project_id=project_filter))
        rows: list[MasterTableRow] = []
        for f in features:
            module = snap.module_by_id(f.module_id)
            project = snap.project_by_id(module.project_id) if module is not None else None
            rows.append(
                MasterTableRow(
                    feature_id=f.id,
                    feature_title=f.title,
                    feature_status=COMPLETED if f.completed else ACTIVE,
                    module_id=module.id if module else None,
                    module_title=module.title if module else None,
                    module_color=module.color if module else None,
                    project_id=project.id if project else None,
                    project_title=project.title if project else None,
                    project_color=project.color if project else None,
                    optimistic=f.pert_optimistic,
                    most_likely=f.pert_most_likely,
                    pessimistic=f.pert_pessimistic,
                    expected=f.expected_duration,
                )
            )
        return MasterTable(rows=tuple(rows), totals=column_totals(features))

    def dashboard_stats(self) -> DashboardStats:
        snap = self.snapshot()
        active_features = [f for f in snap.features if not f.completed]
        return DashboardStats(
            total_projects=len(snap.projects),
            total_modules=len(snap.modules),
            total_features=len(snap.features),
            active_projects=sum(1 for p in snap.projects if not p.completed),
            completed_projects=sum(1 for p in snap.projects if p.completed),
            active_modules=sum(1 for m in snap.modules if not m.completed),
            completed_modules=sum(1 for m in snap.modules if m.completed),
            active_features=len(active_features),
            completed_features=len(snap.features) - len(active_features),
            unestimated_features=sum(1 for f in snap.features if f.expected_duration is None),
            estimated_hours=sum((feature_duration(f) for f in snap.features), 0.0),
            open_hours=sum((feature_duration(f) for f in active_features), 0.0),
        )

    def recent_projects(self, limit: int = 5) -> list[Project]:
        return recent(self.snapshot().projects, limit)

    def recent_modules(self, limit: int = 5) -> list[Module]:
        return recent(self.snapshot().modules, limit)

    # -----------------------------
    # Plot data (charts.py zeichnet mit Matplotlib)
    # -----------------------------
    def get_series_project_durations(self) -> list[tuple[str, float, float]]:
        """
        Datenserie für das Projekt-Diagramm.

        Rückgabe:
            list[tuple[str, float, float]]: (Titel, Basisdauer, Dauer mit Faktoren) je Projekt.
        """

        return [(s.title, s.total_duration, s.total_with_factors) for s in self.project_summaries()]
