"""
PERT-Rechner (Drei-Punkt-Schätzung).

Zweck:
    Berechnet die erwartete Dauer eines Features aus optimistischer, wahrscheinlichster
    und pessimistischer Schätzung (alle Werte in Stunden):

        erwartet = (O + 4 * M + P) / 6

Hinweise:
    - Ohne `most_likely` ist keine Schätzung möglich → Ergebnis `None` (nicht 0).
    - Fehlende O/P-Werte werden durch `most_likely` ersetzt. Sind beide leer, gilt
      `erwartet == most_likely`.
    - Das Ergebnis wird auf eine Nachkommastelle gerundet (kaufmännisch, also
      „halb weg von Null“).
    - Es findet keine Wertebereichsprüfung statt. Negative Eingaben werden unverändert
      verrechnet, nicht-endliche Werte (inf/nan) werden ungerundet durchgereicht.
      Eingabeprüfung ist Aufgabe von `validation.py`.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Optional

__all__ = [
    "PertEstimate",
    "compute_expected_duration",
    "format_duration",
    "round_one_decimal",
]

_TENTH = Decimal("0.1")


def round_one_decimal(value: float) -> float:
    """
    Rundet auf eine Nachkommastelle (halb weg von Null).

    Zweck:
        `round()` rundet in Python zur geraden Ziffer (Banker's Rounding). Für die Anzeige
        von Stunden wird dagegen die übliche Festkomma-Rundung erwartet (2.25 → 2.3).

    Parameter:
        value (float): Zu rundender Wert.

    Rückgabe:
        float: Gerundeter Wert. inf/nan werden unverändert zurückgegeben.
    """

    if not math.isfinite(value):
        return value
    # str() liefert die kürzeste Dezimaldarstellung des floats
    d = Decimal(str(value))
    with localcontext() as ctx:
        # quantize braucht alle Vorkommastellen plus eine Nachkommastelle
        ctx.prec = max(ctx.prec, d.adjusted() + 3)
        return float(d.quantize(_TENTH, rounding=ROUND_HALF_UP))


def compute_expected_duration(
    optimistic: Optional[float],
    most_likely: Optional[float],
    pessimistic: Optional[float],
) -> Optional[float]:
    """
    Berechnet die erwartete Dauer nach PERT.

    Parameter:
        optimistic (float | None): Optimistische Schätzung (optional).
        most_likely (float | None): Wahrscheinlichste Schätzung (Pflicht für ein Ergebnis).
        pessimistic (float | None): Pessimistische Schätzung (optional).

    Rückgabe:
        float | None: Erwartete Dauer in Stunden (1 Nachkommastelle) oder `None`,
        wenn `most_likely` fehlt.
    """

    return PertEstimate(optimistic, most_likely, pessimistic).expected()


@dataclass(frozen=True, slots=True)
class PertEstimate:
    """
    Drei-Punkt-Schätzung eines Features.

    Zweck:
        Macht die Vorbelegungsregel explizit: O und P sind unabhängig voneinander optional
        und fallen jeweils auf M zurück. M selbst hat keinen Ersatzwert.

    Attribute:
        optimistic (float | None): Optimistischer Wert in Stunden.
        most_likely (float | None): Wahrscheinlichster Wert in Stunden.
        pessimistic (float | None): Pessimistischer Wert in Stunden.
    """

    optimistic: Optional[float] = None
    most_likely: Optional[float] = None
    pessimistic: Optional[float] = None

    @property
    def is_estimated(self) -> bool:
        return self.most_likely is not None

    def resolved(self) -> Optional[tuple[float, float, float]]:
        """
        Liefert das Tripel (O, M, P) nach Anwendung der Vorbelegungsregel.

        Rückgabe:
            tuple[float, float, float] | None: Aufgelöste Werte oder `None` ohne M.
        """

        if self.most_likely is None:
            return None
        m = float(self.most_likely)
        o = float(self.optimistic) if self.optimistic is not None else m
        p = float(self.pessimistic) if self.pessimistic is not None else m
        return o, m, p

    def expected(self) -> Optional[float]:
        values = self.resolved()
        if values is None:
            return None
        o, m, p = values
        return round_one_decimal((o + 4 * m + p) / 6)


def format_duration(hours: float) -> str:
    """
    Formatiert eine Stundenangabe für die Anzeige.

    Beispiele:
        1.5 → "1.5h", 2.0 → "2h", 0.04 → "0h"

    Parameter:
        hours (float): Dauer in Stunden.

    Rückgabe:
        str: Text mit einer Nachkommastelle (ohne überflüssige ",0") und Suffix „h“.
    """

    rounded = round_one_decimal(float(hours))
    if math.isfinite(rounded) and rounded == int(rounded):
        return f"{int(rounded)}h"
    return f"{rounded}h"
