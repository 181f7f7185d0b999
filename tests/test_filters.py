from datetime import date

from mealplan_core.complexity import Complexity
from mealplan_core.domain_models import CourseType, DietaryRestriction, DietaryTag, SkillLevel, UserPreferences
from mealplan_core.filters import STAGE_DIETARY, STAGE_TIME, RecipeFilterPipeline, filter_recipes

WEDNESDAY = date(2026, 8, 5)
SATURDAY = date(2026, 8, 8)


def ids(recipes):
    return [r.id for r in recipes]


def test_course_type_and_catalog_order(make_recipe):
    recipes = [
        make_recipe("m2"),
        make_recipe("a1", CourseType.APPETIZER),
        make_recipe("m1"),
    ]
    assert ids(filter_recipes(recipes, CourseType.MAIN_COURSE, WEDNESDAY, UserPreferences())) == ["m2", "m1"]


def test_every_restriction_must_be_satisfied(make_recipe):
    recipes = [
        make_recipe("veg", tags=["vegetarian"]),
        make_recipe("veg-gf", tags=["vegetarian", "gluten_free"]),
        make_recipe("meat"),
    ]
    prefs = UserPreferences(
        dietary_restrictions=frozenset({
            DietaryRestriction.standard(DietaryTag.VEGETARIAN),
            DietaryRestriction.standard(DietaryTag.GLUTEN_FREE),
        })
    )
    assert ids(filter_recipes(recipes, CourseType.MAIN_COURSE, WEDNESDAY, prefs)) == ["veg-gf"]


def test_custom_restriction_matches_ingredients_case_insensitively(make_recipe):
    recipes = [
        make_recipe("satay", ingredients=["2 tbsp Peanut butter", "chicken"]),
        make_recipe("pasta", ingredients=["pasta", "tomato"]),
    ]
    prefs = UserPreferences(dietary_restrictions=frozenset({DietaryRestriction.custom("peanut")}))
    assert ids(filter_recipes(recipes, CourseType.MAIN_COURSE, WEDNESDAY, prefs)) == ["pasta"]


def test_time_limit_depends_on_weekend(make_recipe):
    slow = make_recipe("slow", prep=30, cook=30)
    prefs = UserPreferences(max_prep_time_weeknight=30, max_prep_time_weekend=90)
    assert filter_recipes([slow], CourseType.MAIN_COURSE, WEDNESDAY, prefs) == []
    assert filter_recipes([slow], CourseType.MAIN_COURSE, SATURDAY, prefs) == [slow]


def test_skill_level(make_recipe):
    recipes = [
        make_recipe("s", complexity=Complexity.SIMPLE),
        make_recipe("m", complexity=Complexity.MODERATE),
        make_recipe("c", complexity=Complexity.COMPLEX),
    ]

    def run(level):
        prefs = UserPreferences(skill_level=level)
        return ids(filter_recipes(recipes, CourseType.MAIN_COURSE, SATURDAY, prefs))

    assert run(SkillLevel.BEGINNER) == ["s"]
    assert run(SkillLevel.INTERMEDIATE) == ["s", "m"]
    assert run(SkillLevel.ADVANCED) == ["s", "m", "c"]


def test_exclusions_are_counted_by_first_failing_stage(make_recipe):
    recipes = [
        make_recipe("meat-slow", prep=60),
        make_recipe("veg-slow", tags=["vegetarian"], prep=60),
        make_recipe("veg-slow-2", tags=["vegetarian"], prep=60),
    ]
    prefs = UserPreferences(dietary_restrictions=frozenset({DietaryRestriction.standard(DietaryTag.VEGETARIAN)}))
    result = RecipeFilterPipeline(prefs).run(recipes, CourseType.MAIN_COURSE, WEDNESDAY)

    assert result.candidates == []
    assert result.considered == 3
    assert result.excluded == {STAGE_DIETARY: 1, STAGE_TIME: 2}
    assert result.main_exclusion() == STAGE_TIME
