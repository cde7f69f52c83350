from __future__ import annotations

# -----------------------------------------------------------------------------
# Dauer-Aggregation (Feature → Modul → Projekt)
# -----------------------------------------------------------------------------
# Rollt die erwarteten Feature-Dauern über die Hierarchie auf:
#   Modul  = Σ erwartete Dauer seiner Features (ohne Schätzung: 0)
#   Projekt (Basis) = Σ Moduldauer seiner Module
#   Projekt (mit Faktoren) = Basis + Σ Basis * Faktor / 100
#
# Faktoren wirken alle auf dieselbe Basis und werden nicht verkettet:
# +10 % und -5 % auf 100 h ergeben 105 h, nicht 100 * 1.10 * 0.95.
#
# Jede Berechnung läuft frisch auf dem übergebenen Snapshot; es gibt keinen Cache.
# -----------------------------------------------------------------------------


"""Aggregation erwarteter Dauern über die Projekt-Hierarchie."""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from planner_pioneer.models import Feature, PlanningSnapshot

log = logging.getLogger(__name__)

__all__ = [
    "ColumnTotals",
    "DurationAggregator",
    "ModuleDuration",
    "ProjectDuration",
    "UnassignedDuration",
    "apply_factors",
    "column_totals",
    "feature_duration",
]


def feature_duration(feature: Feature) -> float:
    """
    Beitrag eines Features zur Summe.

    Rückgabe:
        float: Erwartete Dauer oder 0.0, wenn keine Schätzung vorliegt.
    """

    expected = feature.expected_duration
    return expected if expected is not None else 0.0


def apply_factors(base: float, factor_values: Iterable[float]) -> float:
    """
    Wendet prozentuale Faktoren additiv auf eine Basisdauer an.

    Parameter:
        base (float): Basisdauer in Stunden.
        factor_values (Iterable[float]): Prozentwerte (vorzeichenbehaftet).

    Rückgabe:
        float: `base + Σ base * value / 100`.
    """

    total = base
    for value in factor_values:
        total += base * float(value) / 100
    return total


@dataclass(frozen=True, slots=True)
class ModuleDuration:
    module_id: str
    title: str
    project_id: Optional[str]
    feature_count: int
    total_duration: float


@dataclass(frozen=True, slots=True)
class ProjectDuration:
    """
    Kennzahlen eines Projekts für Karten/Übersichten.

    Attribute:
        project_id (str): Projekt-ID.
        title (str): Projekttitel.
        module_count (int): Anzahl zugeordneter Module.
        total_duration (float): Basisdauer (vor Faktoren).
        total_with_factors (float): Dauer nach Anwendung aller Faktoren.
        factor_adjustments (tuple[tuple[str, float], ...]): (Label, Stunden) je Faktor.
    """

    project_id: str
    title: str
    module_count: int
    total_duration: float
    total_with_factors: float
    factor_adjustments: tuple[tuple[str, float], ...] = ()


@dataclass(frozen=True, slots=True)
class UnassignedDuration:
    """
    Die zwei unabhängigen „nicht zugeordnet“-Töpfe.

    Attribute:
        features_without_module (float): Features ohne Modul oder mit unbekanntem Modulverweis.
        modules_without_project (float): Module ohne Projekt (inkl. ihrer Features).
    """

    features_without_module: float
    modules_without_project: float

    @property
    def total(self) -> float:
        return self.features_without_module + self.modules_without_project


@dataclass(frozen=True, slots=True)
class ColumnTotals:
    """Spaltensummen der Master-Tabelle (leere Zellen zählen als 0)."""

    optimistic: float
    most_likely: float
    pessimistic: float
    expected: float


def column_totals(features: Iterable[Feature]) -> ColumnTotals:
    o = m = p = e = 0.0
    for f in features:
        o += f.pert_optimistic or 0.0
        m += f.pert_most_likely or 0.0
        p += f.pert_pessimistic or 0.0
        e += feature_duration(f)
    return ColumnTotals(optimistic=o, most_likely=m, pessimistic=p, expected=e)


class DurationAggregator:
    """
    Rollt erwartete Dauern über einen `PlanningSnapshot` auf.

    Zweck:
        Liefert Modul-, Projekt- und „nicht zugeordnet“-Summen für die Anzeige.
        Die Klasse hält nur den Snapshot und berechnet jede Kennzahl bei Bedarf neu.

    Hinweise:
        Unbekannte IDs ergeben 0.0 (für Module/Projekte ohne Inhalt gilt dasselbe).
    """

    def __init__(self, snapshot: PlanningSnapshot) -> None:
        self.snapshot = snapshot

    # -----------------------------
    # Modul / Projekt
    # -----------------------------
    def module_duration(self, module_id: str) -> float:
        """
        Summe der erwarteten Dauern aller Features eines Moduls.

        Parameter:
            module_id (str): Modul-ID.

        Rückgabe:
            float: Summe in Stunden, 0.0 für Module ohne Features.
        """

        return sum(
            (feature_duration(f) for f in self.snapshot.features if f.module_id == module_id),
            0.0,
        )

    def project_base_duration(self, project_id: str) -> float:
        """
        Summe der Moduldauern eines Projekts (vor Faktoren).

        Parameter:
            project_id (str): Projekt-ID.

        Rückgabe:
            float: Basisdauer in Stunden.
        """

        return sum(
            (self.module_duration(m.id) for m in self.snapshot.modules if m.project_id == project_id),
            0.0,
        )

    def factor_adjustments(self, project_id: str) -> list[tuple[str, float]]:
        """
        Stundenanteil jedes Faktors eines Projekts.

        Rückgabe:
            list[tuple[str, float]]: (Label, Basis * Wert / 100) in Faktorreihenfolge.
        """

        project = self.snapshot.project_by_id(project_id)
        if project is None:
            return []
        base = self.project_base_duration(project_id)
        return [(f.label, base * float(f.value) / 100) for f in project.factors]

    def project_total_with_factors(self, project_id: str) -> float:
        """
        Basisdauer zuzüglich aller Faktoren des Projekts.

        Parameter:
            project_id (str): Projekt-ID.

        Rückgabe:
            float: `Basis + Σ Basis * Faktor / 100`. Ohne Faktoren gleich der Basis.
        """

        base = self.project_base_duration(project_id)
        project = self.snapshot.project_by_id(project_id)
        if project is None:
            return base
        return apply_factors(base, (f.value for f in project.factors))

    # -----------------------------
    # Nicht zugeordnet
    # -----------------------------
    def unassigned_feature_duration(self) -> float:
        # Verweis auf ein unbekanntes Modul zählt wie „kein Modul“ (analog filter_features)
        known = {m.id for m in self.snapshot.modules}
        return sum(
            (feature_duration(f) for f in self.snapshot.features if f.module_id not in known),
            0.0,
        )

    def unassigned_module_duration(self) -> float:
        return sum(
            (self.module_duration(m.id) for m in self.snapshot.modules if m.project_id is None),
            0.0,
        )

    def unassigned(self) -> UnassignedDuration:
        return UnassignedDuration(
            features_without_module=self.unassigned_feature_duration(),
            modules_without_project=self.unassigned_module_duration(),
        )

    def unassigned_duration(self) -> float:
        """
        Gesamtdauer ohne Projektbezug.

        Zweck:
            Features ohne Modul plus Module ohne Projekt. Ein Feature ohne Modul kann in
            keinem Modul-Topf landen, daher wird nichts doppelt gezählt.
        """

        return self.unassigned().total

    # -----------------------------
    # Übersichten
    # -----------------------------
    def module_summaries(self) -> list[ModuleDuration]:
        out: list[ModuleDuration] = []
        for m in self.snapshot.modules:
            count = sum(1 for f in self.snapshot.features if f.module_id == m.id)
            out.append(
                ModuleDuration(
                    module_id=m.id,
                    title=m.title,
                    project_id=m.project_id,
                    feature_count=count,
                    total_duration=self.module_duration(m.id),
                )
            )
        return out

    def project_summaries(self) -> list[ProjectDuration]:
        """
        Kennzahlen aller Projekte in Snapshot-Reihenfolge.

        Rückgabe:
            list[ProjectDuration]: Modulanzahl, Basisdauer und Dauer mit Faktoren je Projekt.
        """

        out: list[ProjectDuration] = []
        for p in self.snapshot.projects:
            module_count = sum(1 for m in self.snapshot.modules if m.project_id == p.id)
            base = self.project_base_duration(p.id)
            out.append(
                ProjectDuration(
                    project_id=p.id,
                    title=p.title,
                    module_count=module_count,
                    total_duration=base,
                    total_with_factors=apply_factors(base, (f.value for f in p.factors)),
                    factor_adjustments=tuple(self.factor_adjustments(p.id)),
                )
            )
        log.debug("Aggregated %d projects", len(out))
        return out
