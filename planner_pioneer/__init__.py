"""
Planner Pioneer – Projektplanung mit PERT-Schätzung.

Zweck:
    Dieses Paket bündelt die Schichtenarchitektur der Anwendung
    (CLI → Service → Repository → Model) und den rein rechnenden Kern.

Inhalt:
    - Kern: `pert` (Drei-Punkt-Schätzung), `aggregation` (Summen über die Hierarchie),
      `filters` (Status-/Projekt-/Modulfilter)
    - Service-Schicht: Use-Cases und Auswertungen (`services`)
    - Repository-Schicht: SQL/CRUD auf SQLite (`repositories`, `db`)
    - Model-Schicht: Datenklassen (`models`)
"""

from planner_pioneer.pert import compute_expected_duration

__all__ = ["compute_expected_duration"]
