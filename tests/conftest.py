"""
Fixtures compartidas: fábricas de recetas y catálogos de prueba.

Todas las pruebas pasan `today` explícito; 2026-08-01 es sábado y el mes
tiene 5 lunes posteriores a la semana actual (3, 10, 17, 24 y 31).
"""

from datetime import date

import pytest

from mealplan_core.complexity import Complexity
from mealplan_core.domain_models import (
    AccompanimentCategory,
    CourseType,
    Cuisine,
    DietaryTag,
    Recipe,
    UserPreferences,
)

TODAY = date(2026, 8, 1)
CUISINES = list(Cuisine)


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def make_recipe():
    """Fábrica de recetas con valores por defecto que pasan todos los filtros."""

    def _make(
        recipe_id,
        course_type=CourseType.MAIN_COURSE,
        *,
        cuisine=Cuisine.ITALIAN.value,
        complexity=Complexity.SIMPLE,
        prep=10,
        cook=10,
        tags=(),
        ingredients=(),
        advance_prep_hours=None,
        accepts_accompaniment=False,
        preferred=(),
        category=None,
    ):
        return Recipe(
            id=recipe_id,
            name=recipe_id.replace("-", " ").title(),
            course_type=course_type,
            cuisine=cuisine,
            complexity=complexity,
            prep_time_min=prep,
            cook_time_min=cook,
            dietary_tags=frozenset(DietaryTag(t) for t in tags),
            ingredients=tuple(ingredients),
            advance_prep_hours=advance_prep_hours,
            accepts_accompaniment=accepts_accompaniment,
            preferred_accompaniments=frozenset(AccompanimentCategory(c) for c in preferred),
            accompaniment_category=AccompanimentCategory(category) if category else None,
        )

    return _make


@pytest.fixture
def make_catalog(make_recipe):
    """Catálogo con `n` recetas por tipo principal (cocinas distintas por receta)."""

    def _make(appetizers=7, mains=7, desserts=7):
        recipes = []
        for i in range(appetizers):
            recipes.append(make_recipe(f"app-{i}", CourseType.APPETIZER, cuisine=CUISINES[i % len(CUISINES)].value))
        for i in range(mains):
            recipes.append(make_recipe(f"main-{i}", CourseType.MAIN_COURSE, cuisine=CUISINES[i % len(CUISINES)].value))
        for i in range(desserts):
            recipes.append(make_recipe(f"dessert-{i}", CourseType.DESSERT, cuisine=CUISINES[i % len(CUISINES)].value))
        return recipes

    return _make


@pytest.fixture
def no_variety_prefs():
    return UserPreferences(cuisine_variety_weight=0.0)
