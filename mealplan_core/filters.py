"""
Pipeline de filtrado de recetas candidatas.

Reduce el catálogo de favoritos al subconjunto elegible para un usuario y un
día. Todos los pasos se combinan con AND:

1) Tipo de curso
2) Restricciones dietarias (todas deben cumplirse)
3) Tiempo total (prep + cocción) dentro del máximo de semana o fin de semana
4) Nivel de habilidad (beginner: simple; intermediate: simple+moderate; advanced: todo)

Un resultado vacío es válido: se traduce en un slot vacío, no en un error.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, FrozenSet, Iterable, List

from .complexity import Complexity
from .domain_models import CourseType, DietaryRestriction, Recipe, SkillLevel, UserPreferences

ALLOWED_COMPLEXITY: Dict[SkillLevel, FrozenSet[Complexity]] = {
    SkillLevel.BEGINNER: frozenset({Complexity.SIMPLE}),
    SkillLevel.INTERMEDIATE: frozenset({Complexity.SIMPLE, Complexity.MODERATE}),
    SkillLevel.ADVANCED: frozenset(Complexity),
}

# Nombres de etapa usados en FilterResult.excluded
STAGE_DIETARY = "dietary"
STAGE_TIME = "time"
STAGE_SKILL = "skill"


def is_weekend(day: date) -> bool:
    return day.weekday() >= 5


def max_minutes_for(day: date, preferences: UserPreferences) -> int:
    if is_weekend(day):
        return preferences.max_prep_time_weekend
    return preferences.max_prep_time_weeknight


def satisfies_restriction(recipe: Recipe, restriction: DietaryRestriction) -> bool:
    if restriction.tag is not None:
        return restriction.tag in recipe.dietary_tags
    needle = (restriction.custom_text or "").lower()
    return not any(needle in ingredient.lower() for ingredient in recipe.ingredients)


def satisfies_dietary(recipe: Recipe, restrictions: Iterable[DietaryRestriction]) -> bool:
    return all(satisfies_restriction(recipe, r) for r in restrictions)


def fits_time(recipe: Recipe, day: date, preferences: UserPreferences) -> bool:
    return recipe.total_time_min <= max_minutes_for(day, preferences)


def fits_skill(recipe: Recipe, skill_level: SkillLevel) -> bool:
    return recipe.complexity in ALLOWED_COMPLEXITY[skill_level]


@dataclass
class FilterResult:
    """
    Candidatos que pasaron el pipeline y cuántas recetas descartó cada etapa.

    `excluded` cuenta cada receta descartada solo en la primera etapa que la
    rechazó (útil para explicar un slot vacío).
    """

    candidates: List[Recipe]
    considered: int = 0
    excluded: Dict[str, int] = field(default_factory=dict)

    def main_exclusion(self) -> str | None:
        if not self.excluded:
            return None
        return max(self.excluded.items(), key=lambda item: item[1])[0]


class RecipeFilterPipeline:
    """
    Filtro de candidatos para un usuario (preferencias fijas durante la llamada).
    """

    def __init__(self, preferences: UserPreferences):
        self.preferences = preferences

    def run(self, recipes: Iterable[Recipe], course_type: CourseType, day: date) -> FilterResult:
        prefs = self.preferences
        candidates: List[Recipe] = []
        excluded: Dict[str, int] = {}
        considered = 0

        for recipe in recipes:
            if recipe.course_type != course_type:
                continue
            considered += 1

            if not satisfies_dietary(recipe, prefs.dietary_restrictions):
                stage = STAGE_DIETARY
            elif not fits_time(recipe, day, prefs):
                stage = STAGE_TIME
            elif not fits_skill(recipe, prefs.skill_level):
                stage = STAGE_SKILL
            else:
                candidates.append(recipe)
                continue
            excluded[stage] = excluded.get(stage, 0) + 1

        return FilterResult(candidates=candidates, considered=considered, excluded=excluded)

    def eligible(self, recipes: Iterable[Recipe], course_type: CourseType, day: date) -> List[Recipe]:
        return self.run(recipes, course_type, day).candidates


def filter_recipes(
    recipes: Iterable[Recipe],
    course_type: CourseType,
    day: date,
    preferences: UserPreferences,
) -> List[Recipe]:
    """Atajo funcional de `RecipeFilterPipeline.eligible`."""
    return RecipeFilterPipeline(preferences).eligible(recipes, course_type, day)
