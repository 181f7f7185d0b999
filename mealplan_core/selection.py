"""
Selección de recetas por slot.

- `MainCourseSelector`: unicidad hasta agotamiento, espaciado de comidas
  complejas y puntaje de variedad de cocina.
- `RotatingCourseSelector`: entradas y postres; misma regla de agotamiento
  con su propio used-set, sin puntaje de variedad ni espaciado.
- `AccompanimentPairer`: acompañamiento opcional para un principal; nunca
  se registra en ningún used-set.

Todas las elecciones aleatorias (desempates, acompañamientos) usan el
`random.Random` sembrado que recibe cada selector, de modo que una semilla
fija reproduce exactamente el mismo plan.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from datetime import date
from typing import Collection, List, Optional, Sequence, Tuple

from .complexity import Complexity
from .domain_models import CourseType, CycleReset, Recipe, UserPreferences
from .rotation import RotationState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Selection:
    """
    Resultado de una selección para un slot.

    Attributes:
        recipe: Receta elegida, o None si el slot queda vacío.
        score: Puntaje de variedad del elegido (solo principales).
        cycle_reset: Reinicio de ciclo ocurrido antes de elegir (si hubo).
        candidates: Cantidad de candidatos que llegaron a la etapa de puntaje.
        removed_for_spacing: Principales complejos descartados por el
            espaciado de comidas complejas.
        cuisine_was_new: La cocina elegida no se había usado antes.
    """

    recipe: Optional[Recipe]
    score: Optional[float] = None
    cycle_reset: Optional[CycleReset] = None
    candidates: int = 0
    removed_for_spacing: int = 0
    cuisine_was_new: bool = False


def variety_score(recipe: Recipe, state: RotationState, weight: float) -> float:
    """score = peso * (1 / (uso_de_la_cocina + 1))"""
    return weight * (1.0 / (state.cuisine_usage(recipe.cuisine) + 1.0))


def exclude_used(
    course_type: CourseType,
    candidates: Sequence[Recipe],
    state: RotationState,
    favorite_ids: Collection[str],
    day: date,
) -> Tuple[List[Recipe], Optional[CycleReset]]:
    """
    Quita los candidatos ya usados en el ciclo actual del curso.

    Reglas de agotamiento:
    - Si el used-set ya cubre todos los favoritos del curso, se vacía antes
      de elegir.
    - Si excluir los usados vacía un pool que no estaba vacío (y hay
      favoritos), se vacía el used-set y se reintenta.
    """
    reset = state.reset_if_exhausted(course_type, favorite_ids, on=day)

    available = [r for r in candidates if not state.is_used(course_type, r.id)]
    if not available and candidates and favorite_ids:
        reset = state.reset_course(course_type, favorite_count=len(favorite_ids), on=day)
        available = list(candidates)

    return available, reset


def pick_best(scored: Sequence[Tuple[float, Recipe]], rng: random.Random) -> Tuple[float, Recipe]:
    """
    Elige el de mayor puntaje; los empates se resuelven con `rng`.

    Los empatados se ordenan por id antes de sortear para que el resultado
    dependa solo de la semilla y no del orden del catálogo.
    """
    best = max(score for score, _ in scored)
    tied = sorted((item for item in scored if item[0] == best), key=lambda item: item[1].id)
    return rng.choice(tied)


class MainCourseSelector:
    def __init__(self, preferences: UserPreferences, rng: random.Random):
        self.preferences = preferences
        self.rng = rng

    def select(
        self,
        candidates: Sequence[Recipe],
        state: RotationState,
        day: date,
        favorite_ids: Collection[str],
    ) -> Selection:
        """
        Elige un principal para `day` y actualiza `state` si hubo elección.

        Args:
            candidates: Principales que pasaron el pipeline de filtrado.
            state: Estado de rotación (se muta al elegir).
            day: Día destino.
            favorite_ids: Ids de TODOS los principales favoritos (para la
                regla de agotamiento).
        """
        available, reset = exclude_used(
            CourseType.MAIN_COURSE, candidates, state, favorite_ids, day
        )

        removed = 0
        if self.preferences.avoid_consecutive_complex and state.had_complex_meal_day_before(day):
            kept = [r for r in available if r.complexity != Complexity.COMPLEX]
            removed = len(available) - len(kept)
            available = kept

        if not available:
            return Selection(recipe=None, cycle_reset=reset, removed_for_spacing=removed)

        weight = self.preferences.cuisine_variety_weight
        scored = [(variety_score(r, state, weight), r) for r in available]
        score, chosen = pick_best(scored, self.rng)

        cuisine_was_new = state.cuisine_usage(chosen.cuisine) == 0
        state.mark_used(CourseType.MAIN_COURSE, chosen.id)
        state.increment_cuisine_usage(chosen.cuisine)
        if chosen.complexity == Complexity.COMPLEX:
            state.record_complex_meal(day)

        logger.debug(
            "Principal %s para %s (score=%.3f, candidatos=%s)",
            chosen.id, day.isoformat(), score, len(available),
        )
        return Selection(
            recipe=chosen,
            score=score,
            cycle_reset=reset,
            candidates=len(available),
            removed_for_spacing=removed,
            cuisine_was_new=cuisine_was_new,
        )


class RotatingCourseSelector:
    """Selector de entradas / postres."""

    def __init__(self, course_type: CourseType, rng: random.Random):
        if course_type not in (CourseType.APPETIZER, CourseType.DESSERT):
            raise ValueError(f"RotatingCourseSelector no soporta '{course_type.value}'")
        self.course_type = course_type
        self.rng = rng

    def select(
        self,
        candidates: Sequence[Recipe],
        state: RotationState,
        day: date,
        favorite_ids: Collection[str],
    ) -> Selection:
        available, reset = exclude_used(self.course_type, candidates, state, favorite_ids, day)
        if not available:
            return Selection(recipe=None, cycle_reset=reset)

        # Sin puntaje: todos empatan y decide la semilla
        _, chosen = pick_best([(0.0, r) for r in available], self.rng)
        state.mark_used(self.course_type, chosen.id)
        return Selection(recipe=chosen, cycle_reset=reset, candidates=len(available))


class AccompanimentPairer:
    def __init__(self, rng: random.Random):
        self.rng = rng

    def pair(self, main_course: Recipe, accompaniments: Sequence[Recipe]) -> Optional[Recipe]:
        """
        Devuelve un acompañamiento para `main_course`, o None.

        - Si el principal no acepta acompañamiento -> None.
        - Si tiene categorías preferidas, solo se consideran esas (un
          acompañamiento sin categoría no matchea).
        - Elección uniforme con la semilla de la generación.
        """
        if not main_course.accepts_accompaniment:
            return None

        preferred = main_course.preferred_accompaniments
        if preferred:
            eligible = [
                a for a in accompaniments
                if a.accompaniment_category is not None and a.accompaniment_category in preferred
            ]
        else:
            eligible = list(accompaniments)

        if not eligible:
            return None
        return self.rng.choice(sorted(eligible, key=lambda a: a.id))
