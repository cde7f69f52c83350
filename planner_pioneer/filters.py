"""
Filter für Projekt-, Modul- und Featurelisten.

Zweck:
    Bestimmt die sichtbare Teilmenge einer Liste anhand von Status, Projekt und Modul.
    Dieselbe Logik wird für Anzeige und Aggregation genutzt, damit gefilterte Summen
    zur angezeigten Liste passen.

Filterwerte:
    - status: "all" | "active" | "completed"
    - project_id / module_id: "all" | "unassigned" | <ID>

Hinweise:
    Ein Feature ohne Modul gilt beim Projektfilter als „unassigned“, obwohl es streng
    genommen nur keinem Modul zugeordnet ist. Ebenso zählt eine Modulreferenz, die auf
    kein bekanntes Modul zeigt, als „kein Modul“. Unter einer konkreten Projekt-ID trifft
    ein solches Feature nie zu.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional, Protocol, Sequence, TypeVar

from planner_pioneer.models import Feature, Module, Project

__all__ = [
    "ACTIVE",
    "ALL",
    "COMPLETED",
    "STATUSES",
    "UNASSIGNED",
    "FeatureFilter",
    "ModuleFilter",
    "filter_features",
    "filter_modules",
    "filter_projects",
    "recent",
]

ALL = "all"
UNASSIGNED = "unassigned"
ACTIVE = "active"
COMPLETED = "completed"
STATUSES = (ALL, ACTIVE, COMPLETED)


def _check_status(status: str) -> None:
    if status not in STATUSES:
        raise ValueError(f"status muss einer von {', '.join(STATUSES)} sein")


def _check_ref(value: str, field: str) -> None:
    if not isinstance(value, str) or not value:
        raise ValueError(f"{field} darf nicht leer sein")


def _status_matches(completed: bool, status: str) -> bool:
    if status == ACTIVE:
        return not completed
    if status == COMPLETED:
        return completed
    return True


def _ref_matches(ref: Optional[str], selection: str) -> bool:
    if selection == ALL:
        return True
    if selection == UNASSIGNED:
        return ref is None
    return ref == selection


@dataclass(frozen=True, slots=True)
class FeatureFilter:
    """
    Auswahl für `filter_features`.

    Attribute:
        status (str): "all", "active" oder "completed".
        project_id (str): "all", "unassigned" oder eine Projekt-ID (über das Modul aufgelöst).
        module_id (str): "all", "unassigned" oder eine Modul-ID.
    """

    status: str = ALL
    project_id: str = ALL
    module_id: str = ALL

    def __post_init__(self) -> None:
        _check_status(self.status)
        _check_ref(self.project_id, "project_id")
        _check_ref(self.module_id, "module_id")


@dataclass(frozen=True, slots=True)
class ModuleFilter:
    status: str = ALL
    project_id: str = ALL

    def __post_init__(self) -> None:
        _check_status(self.status)
        _check_ref(self.project_id, "project_id")


def filter_features(
    features: Iterable[Feature],
    modules: Iterable[Module],
    criteria: FeatureFilter = FeatureFilter(),
) -> list[Feature]:
    """
    Filtert Features nach Status, Modul und (transitiv) Projekt.

    Parameter:
        features (Iterable[Feature]): Zu filternde Features.
        modules (Iterable[Module]): Bekannte Module zur Auflösung des Projekts.
        criteria (FeatureFilter): Auswahl. Alle Achsen werden UND-verknüpft.

    Rückgabe:
        list[Feature]: Treffer in Eingabereihenfolge.
    """

    by_id = {m.id: m for m in modules}
    out: list[Feature] = []
    for f in features:
        if not _status_matches(f.completed, criteria.status):
            continue
        if not _ref_matches(f.module_id, criteria.module_id):
            continue
        if criteria.project_id != ALL:
            module = by_id.get(f.module_id) if f.module_id is not None else None
            if criteria.project_id == UNASSIGNED:
                if module is not None and module.project_id is not None:
                    continue
            elif module is None or module.project_id != criteria.project_id:
                continue
        out.append(f)
    return out


def filter_modules(modules: Iterable[Module], criteria: ModuleFilter = ModuleFilter()) -> list[Module]:
    """
    Filtert Module nach Status und Projekt (direkte Referenz, keine Auflösung nötig).
    """

    return [
        m
        for m in modules
        if _status_matches(m.completed, criteria.status) and _ref_matches(m.project_id, criteria.project_id)
    ]


def filter_projects(projects: Iterable[Project], status: str = ALL) -> list[Project]:
    _check_status(status)
    return [p for p in projects if _status_matches(p.completed, status)]


class _Timestamped(Protocol):
    created_at: Optional[datetime]
    updated_at: Optional[datetime]


T = TypeVar("T", bound=_Timestamped)


def recent(items: Sequence[T], limit: int = 5) -> list[T]:
    """
    Liefert die zuletzt bearbeiteten Einträge.

    Zweck:
        Sortiert absteigend nach `updated_at` (Fallback: `created_at`) und schneidet auf
        `limit` Einträge ab. Einträge ohne Zeitstempel landen am Ende.

    Parameter:
        items (Sequence): Projekte oder Module.
        limit (int): Maximale Anzahl.

    Rückgabe:
        list: Neueste Einträge zuerst.
    """

    def _key(item: T) -> float:
        ts = item.updated_at or item.created_at
        return ts.timestamp() if ts is not None else float("-inf")

    return sorted(items, key=_key, reverse=True)[: max(0, limit)]
