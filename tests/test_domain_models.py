from datetime import date

import pytest

from mealplan_core.complexity import Complexity, calculate_complexity, complexity_score
from mealplan_core.domain_models import (
    CourseType,
    DietaryRestriction,
    DietaryTag,
    MealAssignment,
    Recipe,
    UserPreferences,
    WeekPlan,
    WeekStatus,
    cuisine_key,
)


def test_complexity_thresholds():
    assert calculate_complexity(10, 5) == Complexity.SIMPLE
    assert calculate_complexity(20, 40, 8) == Complexity.MODERATE
    assert calculate_complexity(50, 60, 8) == Complexity.COMPLEX


def test_complexity_advance_prep_factor():
    assert complexity_score(0, 0, None) == 0
    assert complexity_score(0, 0, 2) == pytest.approx(15.0)
    assert complexity_score(0, 0, 4) == pytest.approx(30.0)


def test_unknown_complexity_parses_as_moderate():
    assert Complexity.parse("extreme") == Complexity.MODERATE
    assert Complexity.parse(" Complex ") == Complexity.COMPLEX


def test_cuisine_key_normalization():
    assert cuisine_key("Italian") == "italian"
    assert cuisine_key("Nordic Fusion") == "custom:nordic fusion"
    assert cuisine_key("custom:nordic fusion") == "custom:nordic fusion"


def test_dietary_restriction_parse():
    assert DietaryRestriction.parse("Gluten-Free") == DietaryRestriction.standard(DietaryTag.GLUTEN_FREE)
    assert DietaryRestriction.parse("custom:peanut") == DietaryRestriction.custom("peanut")
    assert DietaryRestriction.parse("shellfish").is_custom


def test_dietary_restriction_requires_exactly_one_variant():
    with pytest.raises(ValueError):
        DietaryRestriction()
    with pytest.raises(ValueError):
        DietaryRestriction(tag=DietaryTag.VEGAN, custom_text="x")


def test_preferences_defaults_and_validation():
    prefs = UserPreferences()
    assert prefs.max_prep_time_weeknight == 30
    assert prefs.max_prep_time_weekend == 90
    assert prefs.cuisine_variety_weight == 0.7
    with pytest.raises(ValueError):
        UserPreferences(cuisine_variety_weight=1.5)


def test_preferences_from_dict():
    prefs = UserPreferences.from_dict({
        "skill_level": "Advanced",
        "dietary_restrictions": ["vegetarian", "custom:peanut"],
    })
    assert prefs.skill_level.value == "advanced"
    assert DietaryRestriction.custom("peanut") in prefs.dietary_restrictions
    assert UserPreferences.from_dict(prefs.to_dict()) == prefs


def test_recipe_from_dict_computes_complexity():
    recipe = Recipe.from_dict({
        "id": "r1",
        "course_type": "Main Course",
        "cuisine": "Thai",
        "ingredients_count": 50,
        "steps_count": 60,
        "advance_prep_hours": 8,
    })
    assert recipe.course_type == CourseType.MAIN_COURSE
    assert recipe.cuisine == "thai"
    assert recipe.complexity == Complexity.COMPLEX
    assert recipe.requires_advance_prep
    assert Recipe.from_dict(recipe.to_dict()) == recipe


def test_week_plan_recipe_ids_include_accompaniments():
    day = date(2026, 8, 3)
    week = WeekPlan(
        id="w1",
        user_id="u1",
        start_date=day,
        end_date=date(2026, 8, 9),
        status=WeekStatus.FUTURE,
        is_locked=False,
        generation_batch_id="b1",
        assignments=(
            MealAssignment(day, CourseType.APPETIZER, "a1", reasoning="x"),
            MealAssignment(day, CourseType.MAIN_COURSE, "m1", "side1", reasoning="x"),
            MealAssignment(day, CourseType.DESSERT, None, reasoning="empty"),
        ),
    )
    assert week.recipe_ids() == ["a1", "m1", "side1"]
    assert len(week.empty_slots()) == 1
    assert WeekPlan.from_dict(week.to_dict()) == week


def test_week_plan_day_and_course_views():
    monday, tuesday = date(2026, 8, 3), date(2026, 8, 4)
    week = WeekPlan(
        id="w1",
        user_id="u1",
        start_date=monday,
        end_date=date(2026, 8, 9),
        status=WeekStatus.FUTURE,
        is_locked=False,
        generation_batch_id="b1",
        assignments=(
            MealAssignment(monday, CourseType.MAIN_COURSE, "m1", "side1", reasoning="x"),
            MealAssignment(monday, CourseType.DESSERT, "d1", reasoning="x"),
            MealAssignment(tuesday, CourseType.MAIN_COURSE, None, reasoning="empty"),
            MealAssignment(tuesday, CourseType.DESSERT, "d2", reasoning="x"),
        ),
    )

    assert [a.course_type for a in week.assignments_for(monday)] == [CourseType.MAIN_COURSE, CourseType.DESSERT]
    assert week.assignments_for(date(2026, 8, 5)) == []
    assert week.course_recipe_ids(CourseType.MAIN_COURSE) == ["m1"]
    assert week.course_recipe_ids(CourseType.DESSERT) == ["d1", "d2"]
