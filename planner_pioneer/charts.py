from __future__ import annotations

# -----------------------------------------------------------------------------
# Diagramme (Matplotlib)
# -----------------------------------------------------------------------------
# Zeichnet die Datenserien der Service-Schicht. Es wird direkt mit `Figure`
# gearbeitet (ohne pyplot), damit kein globaler Zustand und kein GUI-Backend nötig ist.
# -----------------------------------------------------------------------------


import os
from typing import Sequence

from matplotlib.figure import Figure

from planner_pioneer.pert import format_duration

__all__ = ["build_duration_figure", "save_duration_chart"]


def _clear_ax_with_message(ax, msg: str) -> None:
    """
    Zeigt statt eines Diagramms einen Hinweistext an.

    Parameter:
        ax: Matplotlib-Achse.
        msg (str): Anzuzeigender Text.
    """

    ax.clear()
    ax.text(0.5, 0.5, msg, ha="center", va="center", transform=ax.transAxes)
    ax.set_xticks([])
    ax.set_yticks([])


def build_duration_figure(series: Sequence[tuple[str, float, float]]) -> Figure:
    """
    Gruppiertes Balkendiagramm: Basisdauer vs. Dauer mit Faktoren je Projekt.

    Parameter:
        series (Sequence[tuple[str, float, float]]): Ausgabe von
            `PlannerService.get_series_project_durations()`.

    Rückgabe:
        Figure: Fertige Figur (eine Achse).
    """

    fig = Figure(figsize=(8, 4.5))
    ax = fig.add_subplot(111)
    if not series:
        _clear_ax_with_message(ax, "Keine Projekte vorhanden")
        return fig

    labels = [s[0] for s in series]
    base = [s[1] for s in series]
    with_factors = [s[2] for s in series]
    xs = list(range(len(series)))
    width = 0.38

    bars_base = ax.bar([x - width / 2 for x in xs], base, width, label="Basis")
    bars_total = ax.bar([x + width / 2 for x in xs], with_factors, width, label="mit Faktoren")
    ax.bar_label(bars_base, labels=[format_duration(v) for v in base], fontsize=8)
    ax.bar_label(bars_total, labels=[format_duration(v) for v in with_factors], fontsize=8)

    ax.set_xticks(xs)
    ax.set_xticklabels(labels, rotation=20, ha="right")
    ax.set_ylabel("Stunden")
    ax.set_title("Erwartete Dauer je Projekt")
    ax.legend()
    fig.tight_layout()
    return fig


def save_duration_chart(series: Sequence[tuple[str, float, float]], path: str | os.PathLike[str]) -> None:
    """Rendert das Projekt-Diagramm in eine Bilddatei (Format aus der Endung)."""

    build_duration_figure(series).savefig(path)
