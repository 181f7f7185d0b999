"""
Cálculo del nivel de complejidad de una receta.

El catálogo normalmente entrega la complejidad ya calculada. Cuando no viene,
se deriva de la cantidad de ingredientes, la cantidad de pasos y la
preparación anticipada:

    score = ingredientes * 0.3 + pasos * 0.4 + factor_prep_anticipada * 0.3

    factor_prep_anticipada = 0   (sin prep anticipada)
                           = 50  (menos de 4 horas)
                           = 100 (4 horas o más)

    score < 30   -> simple
    score <= 60  -> moderate
    resto        -> complex
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class Complexity(str, Enum):
    """Nivel de complejidad de una receta."""

    SIMPLE = "simple"
    MODERATE = "moderate"
    COMPLEX = "complex"

    @classmethod
    def parse(cls, value: str) -> "Complexity":
        """Valores desconocidos se interpretan como `moderate`."""
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.MODERATE


SIMPLE_THRESHOLD = 30.0
MODERATE_THRESHOLD = 60.0


def advance_prep_factor(advance_prep_hours: Optional[int]) -> float:
    if not advance_prep_hours:
        return 0.0
    if advance_prep_hours < 4:
        return 50.0
    return 100.0


def complexity_score(
    ingredients_count: int,
    steps_count: int,
    advance_prep_hours: Optional[int] = None,
) -> float:
    return (
        ingredients_count * 0.3
        + steps_count * 0.4
        + advance_prep_factor(advance_prep_hours) * 0.3
    )


def calculate_complexity(
    ingredients_count: int,
    steps_count: int,
    advance_prep_hours: Optional[int] = None,
) -> Complexity:
    """
    Devuelve el nivel de complejidad para los conteos dados.

    Args:
        ingredients_count: Cantidad de ingredientes de la receta.
        steps_count: Cantidad de pasos de instrucciones.
        advance_prep_hours: Horas de preparación anticipada (None o 0 si no aplica).
    """
    score = complexity_score(ingredients_count, steps_count, advance_prep_hours)
    if score < SIMPLE_THRESHOLD:
        return Complexity.SIMPLE
    if score <= MODERATE_THRESHOLD:
        return Complexity.MODERATE
    return Complexity.COMPLEX
