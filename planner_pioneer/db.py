from __future__ import annotations

# -----------------------------------------------------------------------------
# Infrastructure: SQLite DB
# -----------------------------------------------------------------------------
# Enthält:
# - SQLiteDatabase: dünner Adapter um sqlite3.Connection (für DatabaseProtocol)
# - connect(): öffnet DB (Default-Pfad: $PLANNER_PIONEER_DB oder ~/.planner_pioneer/planner.db)
# - create_schema(): legt Tabellen/Indizes an (optional reset_db für Demo/Test)
#
# Repositories typisieren gegen `DatabaseProtocol`, nicht gegen sqlite3.
# -----------------------------------------------------------------------------


"""SQLite-Infrastruktur der Projektplanung."""

import logging
import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Optional, Sequence

from planner_pioneer.db_protocol import DatabaseProtocol

__all__ = [
    "DB_PATH_ENV",
    "DatabaseProtocol",
    "SQLiteDatabase",
    "connect",
    "create_schema",
]

log = logging.getLogger(__name__)

DB_PATH_ENV = "PLANNER_PIONEER_DB"


class SQLiteDatabase:
    """
    SQLite-Adapter passend zu `DatabaseProtocol`.

    Zweck:
        Kapselt eine `sqlite3.Connection` und bietet nur die Methoden an, die in
        Repository-/Service-Schicht benötigt werden.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    # --- DatabaseProtocol ---
    def execute(self, sql: str, params: Sequence[Any] = ()) -> Any:
        """
        Führt ein einzelnes SQL-Statement aus.

        Parameter:
            sql (str): SQL-Statement (ggf. mit Platzhaltern `?`).
            params (Sequence[Any]): Parameterwerte für die Platzhalter.

        Rückgabe:
            Any: Cursor-ähnliches Objekt (bei sqlite3: `sqlite3.Cursor`).
        """

        return self._conn.execute(sql, params)

    def executescript(self, sql_script: str) -> None:
        self._conn.executescript(sql_script)

    @contextmanager
    def read_transaction(self) -> Iterator[None]:
        """
        Klammert mehrere Lesezugriffe in eine Transaktion.

        Zweck:
            Unter SQLite sieht eine mit `BEGIN` geöffnete Transaktion ab dem ersten SELECT
            einen festen Datenstand. So entsteht kein „zerrissener“ Snapshot, falls eine
            zweite Verbindung zwischen den Abfragen schreibt.

        Hinweise:
            Läuft bereits eine Transaktion, wird sie mitbenutzt und nicht beendet.
        """

        if self._conn.in_transaction:
            yield
            return
        self._conn.execute("BEGIN")
        try:
            yield
        finally:
            self._conn.rollback()

    def commit(self) -> None:
        self._conn.commit()

    def close(self) -> None:
        """
        Schließt die Datenbankverbindung.

        Hinweise:
            Die Service-Schicht (`PlannerService.close`) übernimmt das kontrollierte Schließen.
        """

        self._conn.close()


def _default_db_path() -> Path:
    """
    Ermittelt den Standardpfad der SQLite-Datenbank.

    Zweck:
        Nutzt `$PLANNER_PIONEER_DB`, falls gesetzt, sonst
        `~/.planner_pioneer/planner.db`.

    Rückgabe:
        Path: Vollständiger Pfad zur Datenbankdatei.

    Hinweise:
        Das Zielverzeichnis wird bei Bedarf automatisch erstellt.
    """

    env = os.getenv(DB_PATH_ENV)
    path = Path(env).expanduser() if env else Path.home() / ".planner_pioneer" / "planner.db"
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def connect(db_path: Optional[str | os.PathLike[str]] = None) -> SQLiteDatabase:
    """
    Öffnet eine SQLite-Verbindung und gibt einen `SQLiteDatabase`-Adapter zurück.

    Zweck:
        Erstellt eine Verbindung zur Datenbankdatei, aktiviert Foreign Keys und setzt
        `row_factory` auf `sqlite3.Row`, damit Repositories spaltenbasiert zugreifen können.

    Parameter:
        db_path (str | PathLike | None): Optionaler Pfad; ":memory:" für eine flüchtige DB.

    Rückgabe:
        SQLiteDatabase: Adapter-Objekt, das `DatabaseProtocol` erfüllt.
    """

    if db_path is not None and str(db_path) == ":memory:":
        target: str | Path = ":memory:"
    else:
        target = Path(db_path) if db_path is not None else _default_db_path()
    log.info("Opening database %s", target)
    # Transaktionen werden explizit gesteuert (BEGIN in read_transaction, commit in Repositories).
    conn = sqlite3.connect(target, isolation_level=None)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return SQLiteDatabase(conn)


def create_schema(db: DatabaseProtocol, reset_db: bool = False) -> None:
    """
    Legt das Datenbankschema (Tabellen/Indizes) an.

    Zweck:
        Erstellt die Tabellen `projects`, `factors`, `modules` und `features`.
        Optional kann das Schema für einen reproduzierbaren Demo-Lauf vorher zurückgesetzt
        werden.

    Parameter:
        db (DatabaseProtocol): Datenbank-Adapter.
        reset_db (bool): Wenn True, werden bestehende Tabellen vorher gelöscht.

    Hinweise:
        Wird ein Projekt gelöscht, verlieren seine Module nur die Zuordnung
        (`ON DELETE SET NULL`); Faktoren werden mitgelöscht. Analog für Modul → Features.
    """

    if reset_db:
        log.info("Resetting database schema")
        db.executescript(
            """
            DROP TABLE IF EXISTS features;
            DROP TABLE IF EXISTS modules;
            DROP TABLE IF EXISTS factors;
            DROP TABLE IF EXISTS projects;
            """
        )

    db.executescript(
        """
        CREATE TABLE IF NOT EXISTS projects(
            id TEXT PRIMARY KEY,
            title TEXT NOT NULL,
            description TEXT,
            color TEXT,
            completed INTEGER NOT NULL DEFAULT 0,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );

        -- Faktoren: prozentuale Zu-/Abschläge je Projekt
        CREATE TABLE IF NOT EXISTS factors(
            id TEXT PRIMARY KEY,
            project_id TEXT NOT NULL,
            label TEXT NOT NULL,
            value REAL NOT NULL,
            position INTEGER NOT NULL DEFAULT 0,
            FOREIGN KEY(project_id) REFERENCES projects(id) ON DELETE CASCADE
        );

        CREATE TABLE IF NOT EXISTS modules(
            id TEXT PRIMARY KEY,
            project_id TEXT,
            title TEXT NOT NULL,
            description TEXT,
            color TEXT,
            completed INTEGER NOT NULL DEFAULT 0,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL,
            FOREIGN KEY(project_id) REFERENCES projects(id) ON DELETE SET NULL
        );

        -- Features: PERT-Werte in Stunden, alle optional
        CREATE TABLE IF NOT EXISTS features(
            id TEXT PRIMARY KEY,
            module_id TEXT,
            title TEXT NOT NULL,
            description TEXT,
            color TEXT,
            completed INTEGER NOT NULL DEFAULT 0,
            pert_optimistic REAL,
            pert_most_likely REAL,
            pert_pessimistic REAL,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL,
            FOREIGN KEY(module_id) REFERENCES modules(id) ON DELETE SET NULL
        );

        CREATE INDEX IF NOT EXISTS idx_factors_project ON factors(project_id);
        CREATE INDEX IF NOT EXISTS idx_modules_project ON modules(project_id);
        CREATE INDEX IF NOT EXISTS idx_features_module ON features(module_id);
        """
    )
    db.commit()
