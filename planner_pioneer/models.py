from __future__ import annotations

# -----------------------------------------------------------------------------
# Domain model (Entities)
# -----------------------------------------------------------------------------
# Diese Datei enthält die fachlichen Kernobjekte der Projektplanung:
#   Projekt ⊇ Modul ⊇ Feature, dazu prozentuale Faktoren pro Projekt.
#
# - Die Entities sind unveränderlich (frozen). Änderungen laufen über die
#   Repositories, die danach einen frischen `PlanningSnapshot` liefern.
# - `__post_init__` prüft nur IDs/Titel. PERT-Werte werden bewusst nicht geprüft,
#   das übernimmt `validation.py` beim Parsen der Formulareingaben.
# - Elternreferenzen sind optional: Module ohne Projekt und Features ohne Modul
#   sind gültig („nicht zugeordnet“).
# -----------------------------------------------------------------------------


from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from planner_pioneer.pert import PertEstimate


def _require_non_empty(val: str, field: str) -> None:
    """
    Prüft, ob ein Pflicht-String nicht leer ist.

    Parameter:
        val (str): Zu prüfender Wert.
        field (str): Feldname für die Fehlermeldung.

    Ausnahmen:
        ValueError: Wenn `val` kein String oder leer/whitespace ist.
    """

    if not isinstance(val, str) or not val.strip():
        raise ValueError(f"{field} darf nicht leer sein")


def _optional_ref(val: Optional[str], field: str) -> None:
    # Leere Strings sind keine gültige Referenz, `None` steht für „nicht zugeordnet“.
    if val is not None:
        _require_non_empty(val, field)


@dataclass(frozen=True, slots=True)
class Factor:
    """
    Prozentualer Zu- oder Abschlag auf die Basisdauer eines Projekts.

    Attribute:
        id (str): Primärschlüssel.
        project_id (str): Besitzendes Projekt.
        label (str): Freitext, z. B. „Risiko“ oder „Overhead“.
        value (float): Vorzeichenbehafteter Prozentwert (+15 bedeutet +15 %).
    """

    id: str
    project_id: str
    label: str
    value: float

    def __post_init__(self) -> None:
        _require_non_empty(self.id, "id")
        _require_non_empty(self.project_id, "project_id")


@dataclass(frozen=True, slots=True)
class Project:
    """
    Oberste Ebene der Hierarchie.

    Zweck:
        Bündelt Module und trägt die Faktoren, die auf die aggregierte Basisdauer
        angewendet werden.

    Attribute:
        id (str): Primärschlüssel (UUID als Text).
        title (str): Projekttitel (Pflicht).
        color (str | None): Optionale Hex-Farbe.
        completed (bool): Abschlussstatus.
        description (str | None): Optionale Beschreibung.
        factors (tuple[Factor, ...]): Faktoren in Anlagereihenfolge.
        created_at (datetime | None): Anlagezeitpunkt.
        updated_at (datetime | None): Letzte Änderung.
    """

    id: str
    title: str
    color: Optional[str] = None
    completed: bool = False
    description: Optional[str] = None
    factors: tuple[Factor, ...] = ()
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        _require_non_empty(self.id, "id")
        _require_non_empty(self.title, "title")
        for f in self.factors:
            if f.project_id != self.id:
                raise ValueError(f"Faktor {f.id} gehört nicht zu Projekt {self.id}")

    @property
    def factor_total_percent(self) -> float:
        """Summe aller Faktorwerte in Prozent (additiv, nicht verkettet)."""

        return sum(float(f.value) for f in self.factors)


@dataclass(frozen=True, slots=True)
class Module:
    """
    Mittlere Ebene der Hierarchie.

    Attribute:
        id (str): Primärschlüssel.
        title (str): Modultitel.
        project_id (str | None): Besitzendes Projekt oder `None` (nicht zugeordnet).
        completed (bool): Abschlussstatus.
        description (str | None): Optionale Beschreibung.
        color (str | None): Optionale Hex-Farbe.
        created_at (datetime | None): Anlagezeitpunkt.
        updated_at (datetime | None): Letzte Änderung.
    """

    id: str
    title: str = ""
    project_id: Optional[str] = None
    completed: bool = False
    description: Optional[str] = None
    color: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        _require_non_empty(self.id, "id")
        _optional_ref(self.project_id, "project_id")


@dataclass(frozen=True, slots=True)
class Feature:
    """
    Kleinste planbare Arbeitseinheit mit optionaler PERT-Schätzung.

    Attribute:
        id (str): Primärschlüssel.
        title (str): Featuretitel.
        module_id (str | None): Besitzendes Modul oder `None` (nicht zugeordnet).
        completed (bool): Abschlussstatus.
        description (str | None): Optionale Beschreibung.
        color (str | None): Optionale Hex-Farbe.
        pert_optimistic (float | None): Optimistische Schätzung in Stunden.
        pert_most_likely (float | None): Wahrscheinlichste Schätzung in Stunden.
        pert_pessimistic (float | None): Pessimistische Schätzung in Stunden.
        created_at (datetime | None): Anlagezeitpunkt.
        updated_at (datetime | None): Letzte Änderung.

    Hinweise:
        `expected_duration` ist genau dann definiert, wenn `pert_most_likely` gesetzt ist.
    """

    id: str
    title: str = ""
    module_id: Optional[str] = None
    completed: bool = False
    description: Optional[str] = None
    color: Optional[str] = None
    pert_optimistic: Optional[float] = None
    pert_most_likely: Optional[float] = None
    pert_pessimistic: Optional[float] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        _require_non_empty(self.id, "id")
        _optional_ref(self.module_id, "module_id")

    @property
    def pert(self) -> PertEstimate:
        return PertEstimate(self.pert_optimistic, self.pert_most_likely, self.pert_pessimistic)

    @property
    def expected_duration(self) -> Optional[float]:
        """Erwartete Dauer in Stunden oder `None` ohne wahrscheinlichsten Wert."""

        return self.pert.expected()


@dataclass(frozen=True, slots=True)
class PlanningSnapshot:
    """
    Konsistenter, unveränderlicher Datenstand aller drei Ebenen.

    Zweck:
        Wird von `SnapshotRepository.load()` erzeugt und als Wert an Aggregation und
        Filter übergeben. Es gibt keinen globalen Zustand, jeder Aufruf arbeitet auf
        genau dem Stand, der ihm übergeben wurde.

    Attribute:
        projects (tuple[Project, ...]): Alle Projekte inkl. Faktoren.
        modules (tuple[Module, ...]): Alle Module.
        features (tuple[Feature, ...]): Alle Features.
    """

    projects: tuple[Project, ...] = ()
    modules: tuple[Module, ...] = ()
    features: tuple[Feature, ...] = ()

    def __post_init__(self) -> None:
        # Listen werden akzeptiert, intern aber als Tupel gehalten.
        object.__setattr__(self, "projects", tuple(self.projects))
        object.__setattr__(self, "modules", tuple(self.modules))
        object.__setattr__(self, "features", tuple(self.features))

    def project_by_id(self, project_id: Optional[str]) -> Optional[Project]:
        if project_id is None:
            return None
        return next((p for p in self.projects if p.id == project_id), None)

    def module_by_id(self, module_id: Optional[str]) -> Optional[Module]:
        if module_id is None:
            return None
        return next((m for m in self.modules if m.id == module_id), None)

    def feature_by_id(self, feature_id: Optional[str]) -> Optional[Feature]:
        if feature_id is None:
            return None
        return next((f for f in self.features if f.id == feature_id), None)
