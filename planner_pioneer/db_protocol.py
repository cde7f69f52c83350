"""
Datenbank-Vertrag der Repositories.

Die Repositories schreiben mit `execute` + `commit` und lesen einen Snapshot
innerhalb von `read_transaction`. `SQLiteDatabase` in `db.py` erfüllt diesen Vertrag.
"""

from __future__ import annotations

from typing import Any, ContextManager, Protocol, Sequence


class CursorProtocol(Protocol):
    # rowcount == 0 nach UPDATE → unbekannte ID
    rowcount: int

    def fetchone(self) -> Any: ...
    def fetchall(self) -> list[Any]: ...


class DatabaseProtocol(Protocol):
    """
    Von Repositories und `PlannerService` genutzte Datenbankoperationen.

    Hinweise:
        `read_transaction()` klammert die SELECTs eines Snapshots, damit Projekte,
        Module und Features denselben Datenstand sehen.
    """

    def execute(self, sql: str, params: Sequence[Any] = ()) -> CursorProtocol: ...
    def executescript(self, sql_script: str) -> None: ...
    def read_transaction(self) -> ContextManager[None]: ...
    def commit(self) -> None: ...
    def close(self) -> None: ...
