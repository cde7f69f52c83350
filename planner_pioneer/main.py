"""
Startpunkt der Anwendung (Projektplanung mit PERT-Schätzung).

Zweck:
    Kommandozeile für Anlegen von Projekten/Modulen/Features/Faktoren und für die
    Auswertungen (Projektsummen, Master-Tabelle, Diagramm). Alle Befehle laufen
    ausschließlich über `PlannerService`.

Ausführung:
    python -m planner_pioneer.main [--db PFAD] [--log-level LEVEL] <befehl> ...
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, Sequence

from planner_pioneer.filters import ALL, STATUSES
from planner_pioneer.logging_config import configure_logging
from planner_pioneer.pert import format_duration
from planner_pioneer.services import PlannerService
from planner_pioneer.validation import ValidationError

log = logging.getLogger(__name__)


def _hours(value: Optional[float]) -> str:
    return format_duration(value) if value is not None else "-"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="planner_pioneer", description="Projektplanung mit PERT-Schätzung")
    parser.add_argument("--db", default=None, help="Pfad zur SQLite-Datei (Default: $PLANNER_PIONEER_DB)")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ...")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("summary", help="Projektsummen inkl. Faktoren")

    p_table = sub.add_parser("table", help="Master-Tabelle aller Features")
    p_table.add_argument("--project", default=ALL, help="all | unassigned | <Projekt-ID>")

    p_features = sub.add_parser("features", help="Features filtern")
    p_features.add_argument("--status", default=ALL, choices=STATUSES)
    p_features.add_argument("--project", default=ALL)
    p_features.add_argument("--module", default=ALL)

    p_project = sub.add_parser("add-project", help="Projekt anlegen")
    p_project.add_argument("title")
    p_project.add_argument("--color", default="")
    p_project.add_argument("--description", default="")

    p_factor = sub.add_parser("add-factor", help="Faktor zu Projekt hinzufügen")
    p_factor.add_argument("project_id")
    p_factor.add_argument("label")
    p_factor.add_argument("value", help="Prozent, z. B. 20 oder -5")

    p_module = sub.add_parser("add-module", help="Modul anlegen")
    p_module.add_argument("title")
    p_module.add_argument("--project", default="")

    p_feature = sub.add_parser("add-feature", help="Feature anlegen")
    p_feature.add_argument("title")
    p_feature.add_argument("--module", default="")
    p_feature.add_argument("-o", "--optimistic", default="")
    p_feature.add_argument("-m", "--most-likely", default="")
    p_feature.add_argument("-p", "--pessimistic", default="")

    p_toggle = sub.add_parser("toggle-feature", help="Feature erledigt/offen umschalten")
    p_toggle.add_argument("feature_id")

    p_chart = sub.add_parser("chart", help="Diagramm der Projektdauern speichern")
    p_chart.add_argument("--out", required=True)

    return parser


def _print_summary(svc: PlannerService) -> None:
    for s in svc.project_summaries():
        print(
            f"{s.title} [{s.project_id}]: {s.module_count} Module, "
            f"Basis {_hours(s.total_duration)}, mit Faktoren {_hours(s.total_with_factors)}"
        )
        for label, hours in s.factor_adjustments:
            print(f"  {label}: {hours:+.1f}h")
    unassigned = svc.unassigned_summary()
    print(
        f"Ohne Projekt: {_hours(unassigned.total)} "
        f"(Features ohne Modul {_hours(unassigned.features_without_module)}, "
        f"Module ohne Projekt {_hours(unassigned.modules_without_project)})"
    )


def _print_table(svc: PlannerService, project_filter: str) -> None:
    table = svc.master_table(project_filter)
    for r in table.rows:
        print(
            "\t".join(
                [
                    r.project_title or "-",
                    r.module_title or "-",
                    r.feature_title,
                    r.feature_status,
                    _hours(r.optimistic),
                    _hours(r.most_likely),
                    _hours(r.pessimistic),
                    _hours(r.expected),
                ]
            )
        )
    t = table.totals
    print(
        "\t".join(
            ["Summe", "", "", "", _hours(t.optimistic), _hours(t.most_likely), _hours(t.pessimistic), _hours(t.expected)]
        )
    )


def _dispatch(svc: PlannerService, args: argparse.Namespace) -> None:
    if args.command == "summary":
        _print_summary(svc)
    elif args.command == "table":
        _print_table(svc, args.project)
    elif args.command == "features":
        for f in svc.list_features(status=args.status, project_id=args.project, module_id=args.module):
            print(f"{f.id}\t{f.title}\t{_hours(f.expected_duration)}")
    elif args.command == "add-project":
        print(svc.create_project_from_form(args.title, color=args.color, description=args.description))
    elif args.command == "add-factor":
        print(svc.add_factor_from_form(args.project_id, args.label, args.value))
    elif args.command == "add-module":
        print(svc.create_module_from_form(args.title, args.project))
    elif args.command == "add-feature":
        print(
            svc.create_feature_from_form(
                args.title, args.module, args.optimistic, args.most_likely, args.pessimistic
            )
        )
    elif args.command == "toggle-feature":
        done = svc.toggle_feature(args.feature_id)
        print("erledigt" if done else "offen")
    elif args.command == "chart":
        from planner_pioneer.charts import save_duration_chart

        save_duration_chart(svc.get_series_project_durations(), args.out)
        print(args.out)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Führt einen CLI-Befehl aus.

    Rückgabe:
        int: Exit-Code (0 = ok, 2 = Eingabe-/Referenzfehler).
    """

    args = _build_parser().parse_args(argv)
    try:
        configure_logging(args.log_level)
    except ValueError as exc:
        print(f"Fehler: {exc}", file=sys.stderr)
        return 2

    svc = PlannerService.bootstrap(db_path=args.db)
    try:
        _dispatch(svc, args)
    except (ValidationError, LookupError, ValueError) as exc:
        log.debug("Command %s failed", args.command, exc_info=True)
        print(f"Fehler: {exc}", file=sys.stderr)
        return 2
    finally:
        svc.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
