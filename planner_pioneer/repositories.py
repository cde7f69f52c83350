from __future__ import annotations

# -----------------------------------------------------------------------------
# Repository layer (Persistence)
# -----------------------------------------------------------------------------
# Repositories kapseln *sämtliche* SQL-Zugriffe und stellen CRUD-Operationen bereit.
# Sie enthalten keine Schätz- oder Filterlogik; diese arbeitet ausschließlich auf dem
# `PlanningSnapshot`, den `SnapshotRepository.load()` liefert.
#
# Abhängigkeiten:
# - Repositories kennen nur `DatabaseProtocol` (ein kleines Interface/Protocol).
# - Services orchestrieren Anwendungsfälle und verwenden Repositories.
# -----------------------------------------------------------------------------


import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from planner_pioneer.db_protocol import DatabaseProtocol
from planner_pioneer.models import Factor, Feature, Module, PlanningSnapshot, Project

log = logging.getLogger(__name__)

DEFAULT_PROJECT_COLOR = "#2196f3"
DEFAULT_MODULE_COLOR = "#F44336"
DEFAULT_FEATURE_COLOR = "#9C27B0"


def new_id() -> str:
    """Erzeugt eine neue Primärschlüssel-ID (UUID4 als Text)."""

    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _iso(d: Optional[datetime]) -> Optional[str]:
    """
    Konvertiert einen Zeitstempel in das ISO-Format für die Datenbank.

    Parameter:
        d (datetime | None): Zeitstempel oder `None`.

    Rückgabe:
        str | None: ISO-String oder `None`.
    """

    return d.isoformat() if d else None


def _dt(text: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(text) if text else None


def _float_or_none(val: Any) -> Optional[float]:
    return float(val) if val is not None else None


def _require_row(cursor: Any, what: str, ident: str) -> None:
    # UPDATE/DELETE ohne Treffer → unbekannte ID
    if getattr(cursor, "rowcount", 0) == 0:
        raise LookupError(f"{what} {ident} nicht gefunden")


def _factor_from_row(r: Any) -> Factor:
    return Factor(id=r["id"], project_id=r["project_id"], label=r["label"], value=float(r["value"]))


def _project_from_row(r: Any, factors: tuple[Factor, ...]) -> Project:
    return Project(
        id=r["id"],
        title=r["title"],
        color=r["color"],
        completed=bool(r["completed"]),
        description=r["description"],
        factors=factors,
        created_at=_dt(r["created_at"]),
        updated_at=_dt(r["updated_at"]),
    )


def _module_from_row(r: Any) -> Module:
    return Module(
        id=r["id"],
        title=r["title"],
        project_id=r["project_id"],
        completed=bool(r["completed"]),
        description=r["description"],
        color=r["color"],
        created_at=_dt(r["created_at"]),
        updated_at=_dt(r["updated_at"]),
    )


def _feature_from_row(r: Any) -> Feature:
    return Feature(
        id=r["id"],
        title=r["title"],
        module_id=r["module_id"],
        completed=bool(r["completed"]),
        description=r["description"],
        color=r["color"],
        pert_optimistic=_float_or_none(r["pert_optimistic"]),
        pert_most_likely=_float_or_none(r["pert_most_likely"]),
        pert_pessimistic=_float_or_none(r["pert_pessimistic"]),
        created_at=_dt(r["created_at"]),
        updated_at=_dt(r["updated_at"]),
    )


class FactorRepository:
    """
    Repository für `Factor` (Zu-/Abschläge eines Projekts).

    Hinweise:
        Die Reihenfolge der Faktoren wird über die Spalte `position` stabil gehalten.
    """

    def __init__(self, db: DatabaseProtocol) -> None:
        self.db = db

    def create(self, f: Factor) -> str:
        """
        Hängt einen Faktor an das Ende der Faktorliste des Projekts an.

        Parameter:
            f (Factor): Neuer Faktor (ID bereits vergeben).

        Rückgabe:
            str: Primärschlüssel des Faktors.
        """

        cursor = self.db.execute(
            "SELECT COALESCE(MAX(position), -1) + 1 AS pos FROM factors WHERE project_id=?",
            (f.project_id,),
        )
        pos = int(cursor.fetchone()["pos"])
        self.db.execute(
            "INSERT INTO factors(id, project_id, label, value, position) VALUES(?,?,?,?,?)",
            (f.id, f.project_id, f.label, float(f.value), pos),
        )
        self.db.commit()
        log.debug("Created factor %s for project %s", f.id, f.project_id)
        return f.id

    def update(self, f: Factor) -> None:
        cursor = self.db.execute(
            "UPDATE factors SET label=?, value=? WHERE id=? AND project_id=?",
            (f.label, float(f.value), f.id, f.project_id),
        )
        _require_row(cursor, "Faktor", f.id)
        self.db.commit()

    def delete(self, factor_id: str) -> None:
        self.db.execute("DELETE FROM factors WHERE id=?", (factor_id,))
        self.db.commit()

    def list_for_project(self, project_id: str) -> list[Factor]:
        cursor = self.db.execute(
            "SELECT * FROM factors WHERE project_id=? ORDER BY position ASC, id ASC",
            (project_id,),
        )
        return [_factor_from_row(r) for r in cursor.fetchall()]


class ProjectRepository:
    """
    Repository für `Project`.

    Zweck:
        Kapselt SQL-Zugriffe auf die Tabelle `projects`. Faktoren werden beim Laden über
        `FactorRepository` ergänzt, beim Speichern aber separat gepflegt.
    """

    def __init__(self, db: DatabaseProtocol, factor_repo: Optional[FactorRepository] = None) -> None:
        self.db = db
        self.factor_repo = factor_repo or FactorRepository(db)

    def create(self, p: Project) -> str:
        """
        Legt ein Projekt an.

        Parameter:
            p (Project): Projektdaten; fehlende Farbe/Zeitstempel werden ergänzt.

        Rückgabe:
            str: Primärschlüssel des Projekts.
        """

        now = _now()
        self.db.execute(
            """
            INSERT INTO projects(id, title, description, color, completed, created_at, updated_at)
            VALUES(?,?,?,?,?,?,?)
            """,
            (
                p.id,
                p.title,
                p.description or "",
                p.color or DEFAULT_PROJECT_COLOR,
                int(p.completed),
                _iso(p.created_at or now),
                _iso(p.updated_at or now),
            ),
        )
        self.db.commit()
        log.debug("Created project %s", p.id)
        return p.id

    def update(self, p: Project) -> None:
        """
        Aktualisiert Titel, Beschreibung, Farbe und Status eines Projekts.

        Ausnahmen:
            LookupError: Wenn die Projekt-ID unbekannt ist.
        """

        cursor = self.db.execute(
            "UPDATE projects SET title=?, description=?, color=?, completed=?, updated_at=? WHERE id=?",
            (p.title, p.description, p.color, int(p.completed), _iso(_now()), p.id),
        )
        _require_row(cursor, "Projekt", p.id)
        self.db.commit()

    def set_completed(self, project_id: str, completed: bool) -> None:
        cursor = self.db.execute(
            "UPDATE projects SET completed=?, updated_at=? WHERE id=?",
            (int(completed), _iso(_now()), project_id),
        )
        _require_row(cursor, "Projekt", project_id)
        self.db.commit()

    def delete(self, project_id: str) -> None:
        self.db.execute("DELETE FROM projects WHERE id=?", (project_id,))
        self.db.commit()

    def get_by_id(self, project_id: str) -> Optional[Project]:
        cursor = self.db.execute("SELECT * FROM projects WHERE id=?", (project_id,))
        r = cursor.fetchone()
        if not r:
            return None
        return _project_from_row(r, tuple(self.factor_repo.list_for_project(project_id)))


class ModuleRepository:
    """
    Repository für `Module`.

    Hinweise:
        `project_id` darf `None` sein (Modul ohne Projekt).
    """

    def __init__(self, db: DatabaseProtocol) -> None:
        self.db = db

    def create(self, m: Module) -> str:
        now = _now()
        self.db.execute(
            """
            INSERT INTO modules(id, project_id, title, description, color, completed, created_at, updated_at)
            VALUES(?,?,?,?,?,?,?,?)
            """,
            (
                m.id,
                m.project_id,
                m.title,
                m.description or "",
                m.color or DEFAULT_MODULE_COLOR,
                int(m.completed),
                _iso(m.created_at or now),
                _iso(m.updated_at or now),
            ),
        )
        self.db.commit()
        log.debug("Created module %s (project=%s)", m.id, m.project_id)
        return m.id

    def update(self, m: Module) -> None:
        cursor = self.db.execute(
            """
            UPDATE modules SET project_id=?, title=?, description=?, color=?, completed=?, updated_at=?
            WHERE id=?
            """,
            (m.project_id, m.title, m.description, m.color, int(m.completed), _iso(_now()), m.id),
        )
        _require_row(cursor, "Modul", m.id)
        self.db.commit()

    def set_completed(self, module_id: str, completed: bool) -> None:
        cursor = self.db.execute(
            "UPDATE modules SET completed=?, updated_at=? WHERE id=?",
            (int(completed), _iso(_now()), module_id),
        )
        _require_row(cursor, "Modul", module_id)
        self.db.commit()

    def delete(self, module_id: str) -> None:
        self.db.execute("DELETE FROM modules WHERE id=?", (module_id,))
        self.db.commit()

    def get_by_id(self, module_id: str) -> Optional[Module]:
        cursor = self.db.execute("SELECT * FROM modules WHERE id=?", (module_id,))
        r = cursor.fetchone()
        return _module_from_row(r) if r else None


class FeatureRepository:
    """
    Repository für `Feature` inklusive PERT-Werten.

    Hinweise:
        Die erwartete Dauer wird nicht gespeichert, sondern immer aus den drei
        Schätzwerten abgeleitet (`Feature.expected_duration`).
    """

    def __init__(self, db: DatabaseProtocol) -> None:
        self.db = db

    def create(self, f: Feature) -> str:
        """
        Legt ein Feature an.

        Parameter:
            f (Feature): Featuredaten inkl. optionaler PERT-Werte.

        Rückgabe:
            str: Primärschlüssel des Features.
        """

        now = _now()
        self.db.execute(
            """
            INSERT INTO features(
              id, module_id, title, description, color, completed,
              pert_optimistic, pert_most_likely, pert_pessimistic, created_at, updated_at
            )
            VALUES(?,?,?,?,?,?,?,?,?,?,?)
            """,
            (
                f.id,
                f.module_id,
                f.title,
                f.description or "",
                f.color or DEFAULT_FEATURE_COLOR,
                int(f.completed),
                f.pert_optimistic,
                f.pert_most_likely,
                f.pert_pessimistic,
                _iso(f.created_at or now),
                _iso(f.updated_at or now),
            ),
        )
        self.db.commit()
        log.debug("Created feature %s (module=%s)", f.id, f.module_id)
        return f.id

    def update(self, f: Feature) -> None:
        cursor = self.db.execute(
            """
            UPDATE features SET
              module_id=?,
              title=?,
              description=?,
              color=?,
              completed=?,
              pert_optimistic=?,
              pert_most_likely=?,
              pert_pessimistic=?,
              updated_at=?
            WHERE id=?
            """,
            (
                f.module_id,
                f.title,
                f.description,
                f.color,
                int(f.completed),
                f.pert_optimistic,
                f.pert_most_likely,
                f.pert_pessimistic,
                _iso(_now()),
                f.id,
            ),
        )
        _require_row(cursor, "Feature", f.id)
        self.db.commit()

    def set_completed(self, feature_id: str, completed: bool) -> None:
        cursor = self.db.execute(
            "UPDATE features SET completed=?, updated_at=? WHERE id=?",
            (int(completed), _iso(_now()), feature_id),
        )
        _require_row(cursor, "Feature", feature_id)
        self.db.commit()

    def delete(self, feature_id: str) -> None:
        self.db.execute("DELETE FROM features WHERE id=?", (feature_id,))
        self.db.commit()

    def get_by_id(self, feature_id: str) -> Optional[Feature]:
        cursor = self.db.execute("SELECT * FROM features WHERE id=?", (feature_id,))
        r = cursor.fetchone()
        return _feature_from_row(r) if r else None


class SnapshotRepository:
    """
    Liefert einen konsistenten `PlanningSnapshot` aller Ebenen.

    Zweck:
        Ersetzt das „nach jedem Schreiben alles neu laden“-Muster durch einen expliziten
        Lesevorgang. Alle vier Tabellen werden innerhalb einer Lesetransaktion gelesen.
    """

    def __init__(self, db: DatabaseProtocol) -> None:
        self.db = db

    def load(self) -> PlanningSnapshot:
        """
        Liest Projekte (inkl. Faktoren), Module und Features.

        Rückgabe:
            PlanningSnapshot: Unveränderlicher Datenstand, sortiert nach Anlagezeit (neueste zuerst).
        """

        with self.db.read_transaction():
            factor_rows = self.db.execute(
                "SELECT * FROM factors ORDER BY project_id ASC, position ASC, id ASC"
            ).fetchall()
            project_rows = self.db.execute("SELECT * FROM projects ORDER BY created_at DESC, id ASC").fetchall()
            module_rows = self.db.execute("SELECT * FROM modules ORDER BY created_at DESC, id ASC").fetchall()
            feature_rows = self.db.execute("SELECT * FROM features ORDER BY created_at DESC, id ASC").fetchall()

        factors_by_project: dict[str, list[Factor]] = {}
        for r in factor_rows:
            factors_by_project.setdefault(r["project_id"], []).append(_factor_from_row(r))

        snapshot = PlanningSnapshot(
            projects=tuple(_project_from_row(r, tuple(factors_by_project.get(r["id"], ()))) for r in project_rows),
            modules=tuple(_module_from_row(r) for r in module_rows),
            features=tuple(_feature_from_row(r) for r in feature_rows),
        )
        log.debug(
            "Loaded snapshot: %d projects, %d modules, %d features",
            len(snapshot.projects),
            len(snapshot.modules),
            len(snapshot.features),
        )
        return snapshot

