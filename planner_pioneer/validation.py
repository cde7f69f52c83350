"""
Validierung und Parsing von Benutzereingaben.

Zweck:
    Formulare und CLI nehmen Eingaben als Strings entgegen. Dieses Modul wandelt diese
    Strings in passende Python-Typen um und prüft einfache Wertebereiche, damit keine
    ungültigen Daten in Service/Repository-Schicht gelangen.

Hinweise:
    Der PERT-Rechner selbst prüft keine Werte. Negative Stunden oder eine
    unplausible Reihenfolge (O > M) werden daher hier abgefangen.
"""

from __future__ import annotations

import math
from typing import Optional


class ValidationError(ValueError):
    """
    Fehlerklasse für ungültige Benutzereingaben.

    Zweck:
        Wird in der CLI abgefangen, um eine verständliche Fehlermeldung anzuzeigen,
        ohne einen technischen Traceback zu präsentieren.
    """


def parse_title(text: str, *, field: str = "Titel") -> str:
    """
    Parst einen Pflicht-Titel.

    Parameter:
        text (str): Eingabetext.
        field (str): Feldname für Fehlermeldungen.

    Rückgabe:
        str: Getrimmter Titel.

    Ausnahmen:
        ValidationError: Bei leerer Eingabe.
    """

    t = (text or "").strip()
    if not t:
        raise ValidationError(f"{field} darf nicht leer sein")
    return t


def parse_float(text: str, *, field: str, min_value: Optional[float] = None, max_value: Optional[float] = None) -> float:
    """
    Parst eine Fließkommazahl (Komma oder Punkt).

    Zweck:
        Wandelt den Text in `float` um (`,` wird als Dezimaltrennzeichen akzeptiert) und
        prüft optional einen Wertebereich.

    Parameter:
        text (str): Eingabetext.
        field (str): Feldname für Fehlermeldungen.
        min_value (float | None): Untere Schranke (optional).
        max_value (float | None): Obere Schranke (optional).

    Rückgabe:
        float: Geparste Zahl.

    Ausnahmen:
        ValidationError: Bei ungültiger Eingabe oder Verletzung des Wertebereichs.
    """

    try:
        v = float(str(text).strip().replace(",", "."))
    except ValueError as exc:
        raise ValidationError(f"{field} muss eine Zahl sein") from exc
    if not math.isfinite(v):
        raise ValidationError(f"{field} muss eine endliche Zahl sein")
    if min_value is not None and v < min_value:
        raise ValidationError(f"{field} muss >= {min_value} sein")
    if max_value is not None and v > max_value:
        raise ValidationError(f"{field} muss <= {max_value} sein")
    return v


def parse_optional_hours(text: Optional[str], *, field: str) -> Optional[float]:
    """
    Parst eine optionale Stundenangabe.

    Zweck:
        Leere Eingaben werden als `None` interpretiert (z. B. fehlender optimistischer
        Wert). Nicht-leere Eingaben müssen >= 0 sein.

    Parameter:
        text (str | None): Eingabetext.
        field (str): Feldname für Fehlermeldungen.

    Rückgabe:
        float | None: Stunden oder `None`.
    """

    t = (text or "").strip()
    if not t:
        return None
    return parse_float(t, field=field, min_value=0.0)


def parse_factor_value(text: str, *, field: str = "Faktor") -> float:
    """
    Parst einen Faktor in Prozent (vorzeichenbehaftet, z. B. "+15" oder "-5,5").

    Ausnahmen:
        ValidationError: Bei leerer oder nicht numerischer Eingabe.
    """

    t = (text or "").strip().removesuffix("%").strip()
    if not t:
        raise ValidationError(f"{field} darf nicht leer sein")
    return parse_float(t, field=field)


def parse_optional_ref(text: Optional[str]) -> Optional[str]:
    # "-" ist die Anzeige für „keine Zuordnung“ in Tabellen.
    t = (text or "").strip()
    if not t or t == "-":
        return None
    return t


def validate_pert_order(
    optimistic: Optional[float],
    most_likely: Optional[float],
    pessimistic: Optional[float],
) -> None:
    """
    Prüft die Reihenfolge O <= M <= P, soweit Werte vorhanden sind.

    Zweck:
        Ohne wahrscheinlichsten Wert ergibt sich keine Schätzung. Optimistische oder
        pessimistische Werte allein werden daher als Eingabefehler gemeldet.

    Ausnahmen:
        ValidationError: Bei fehlendem M trotz O/P oder verletzter Reihenfolge.
    """

    if most_likely is None:
        if optimistic is not None or pessimistic is not None:
            raise ValidationError("Wahrscheinlichster Wert fehlt")
        return
    if optimistic is not None and optimistic > most_likely:
        raise ValidationError("Optimistischer Wert muss <= wahrscheinlichster Wert sein")
    if pessimistic is not None and pessimistic < most_likely:
        raise ValidationError("Pessimistischer Wert muss >= wahrscheinlichster Wert sein")
