"""
Textos de explicación de cada asignación.

Cada asignación no vacía lleva una frase corta con el factor decisivo, en el
orden de prioridad:

1) Preparación anticipada ("requires 8-hour advance prep - start Tuesday")
2) Fin de semana con receta exigente ("weekend: more prep time available")
3) Día de semana con receta rápida ("weeknight: quick meal")
4) Ajuste general al día

Los slots vacíos también llevan texto, explicando por qué quedaron vacíos.
Estos textos los consume la capa de presentación tal cual (en inglés).
"""

from __future__ import annotations

import math
from datetime import date, timedelta
from typing import Optional

from .complexity import Complexity
from .domain_models import CourseType, Recipe, UserPreferences, cuisine_label
from .filters import STAGE_DIETARY, STAGE_SKILL, STAGE_TIME, FilterResult, is_weekend, max_minutes_for
from .selection import Selection

DAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


def day_name(day: date) -> str:
    return DAY_NAMES[day.weekday()]


def advance_prep_start(recipe: Recipe, day: date) -> Optional[date]:
    """Día en que hay que empezar la preparación anticipada (None si no aplica)."""
    if not recipe.requires_advance_prep:
        return None
    lead_days = max(1, math.ceil(recipe.advance_prep_hours / 24))
    return day - timedelta(days=lead_days)


def _details(recipe: Recipe) -> str:
    return f"{recipe.complexity.value}, {recipe.total_time_min} min total"


def describe_recipe(recipe: Recipe, day: date, preferences: UserPreferences) -> str:
    start = advance_prep_start(recipe, day)
    if start is not None:
        return f"requires {recipe.advance_prep_hours}-hour advance prep - start {day_name(start)}"

    if is_weekend(day):
        if recipe.complexity != Complexity.SIMPLE:
            return f"weekend: more prep time available ({_details(recipe)})"
        return f"weekend: easy {day_name(day)} pick ({_details(recipe)})"

    if recipe.complexity == Complexity.SIMPLE:
        return f"weeknight: quick meal ({_details(recipe)})"
    return (
        f"weeknight: fits your {max_minutes_for(day, preferences)}-minute limit "
        f"({_details(recipe)})"
    )


def describe_assignment(
    course_type: CourseType,
    recipe: Recipe,
    selection: Selection,
    day: date,
    preferences: UserPreferences,
    accompaniment: Optional[Recipe] = None,
) -> str:
    parts = [describe_recipe(recipe, day, preferences)]
    if course_type == CourseType.MAIN_COURSE:
        if preferences.cuisine_variety_weight > 0 and selection.cuisine_was_new:
            parts.append(f"new cuisine: {cuisine_label(recipe.cuisine)}")
        if selection.removed_for_spacing:
            parts.append("lighter pick after yesterday's complex meal")
        if accompaniment is not None:
            parts.append(f"served with {accompaniment.name or accompaniment.id}")
    if selection.cycle_reset is not None:
        parts.append(f"{course_type.label} rotation restarted")
    return "; ".join(parts)


def describe_empty(
    course_type: CourseType,
    day: date,
    filtered: FilterResult,
    selection: Optional[Selection] = None,
) -> str:
    label = course_type.label
    when = day_name(day)
    if filtered.considered == 0:
        return f"no favorited {label} recipes yet - browse recipes to add some"
    if selection is not None and selection.removed_for_spacing:
        return f"no {label} left for {when} after yesterday's complex meal"

    stage = filtered.main_exclusion()
    if stage == STAGE_DIETARY:
        return f"no {label} matches your dietary restrictions"
    if stage == STAGE_TIME:
        limit = "weekend" if is_weekend(day) else "weeknight"
        return f"no {label} fits your {limit} time limit on {when}"
    if stage == STAGE_SKILL:
        return f"no {label} matches your skill level"
    return f"no {label} available for {when}"
