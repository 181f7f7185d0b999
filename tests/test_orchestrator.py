"""
Tests del orquestador multi-semana.

Prueba:
- Unicidad hasta agotamiento y reinicios de ciclo a lo largo de 5 semanas
- Ciclos independientes de entradas / postres
- Restricciones dietarias en todas las asignaciones
- Espaciado de comidas complejas entre días consecutivos
- Cantidad de semanas por lote (siempre max_weeks) y tope de semanas
- Bloqueo de semanas y modos de regeneración
"""

from datetime import date, timedelta

import pytest

from mealplan_core.complexity import Complexity
from mealplan_core.domain_models import (
    CourseType,
    DietaryRestriction,
    DietaryTag,
    SkillLevel,
    UserPreferences,
    WeekStatus,
)
from mealplan_core.errors import InsufficientRecipes, InvalidWeekStart, WeekLocked
from mealplan_core.orchestrator import MultiWeekOrchestrator, compute_max_weeks, course_counts
from mealplan_core.rotation import RotationState
from mealplan_core.week_calendar import coverage_target, future_mondays_in_month, next_week_start

NEXT_WEDNESDAY = date(2026, 8, 5)


def course_ids(batch, course):
    return [rid for week in batch.weeks for rid in week.course_recipe_ids(course)]


def orchestrator(recipes, prefs, today, seed=42, **kwargs):
    return MultiWeekOrchestrator(recipes, prefs, user_id="u1", today=today, seed=seed, **kwargs)


# ============================================================
# Calendario y límites
# ============================================================

def test_calendar_helpers():
    assert next_week_start(date(2026, 8, 1)) == date(2026, 8, 3)
    assert next_week_start(date(2026, 8, 3)) == date(2026, 8, 10)
    assert future_mondays_in_month(date(2026, 8, 1)) == 5
    assert future_mondays_in_month(date(2026, 10, 18)) == 2


def test_coverage_target_keeps_rolling_minimum():
    assert coverage_target(date(2026, 8, 1)) == 5
    assert coverage_target(date(2026, 10, 18)) == 4
    assert coverage_target(date(2026, 10, 18), rolling_minimum=6) == 6


def test_max_weeks_never_exceeds_five(make_catalog):
    counts = course_counts(make_catalog(10, 12, 9))
    assert counts == {"appetizer": 10, "main_course": 12, "dessert": 9}
    assert compute_max_weeks(counts) == 5
    assert compute_max_weeks(counts, cap=8) == 5
    assert compute_max_weeks(counts, cap=3) == 3
    assert compute_max_weeks({"appetizer": 2, "main_course": 4, "dessert": 3}) == 2
    assert compute_max_weeks({"appetizer": 0, "main_course": 4, "dessert": 3}) == 0


def test_short_month_still_generates_max_weeks(make_catalog, no_variety_prefs):
    batch = orchestrator(make_catalog(), no_variety_prefs, date(2026, 10, 18)).generate(RotationState())

    assert [w.start_date for w in batch.weeks] == [
        date(2026, 10, 19), date(2026, 10, 26), date(2026, 11, 2), date(2026, 11, 9), date(2026, 11, 16),
    ]
    assert batch.rotation_state.cycle_number == 5
    main_resets = [r for r in batch.cycle_resets if r.course_type == CourseType.MAIN_COURSE]
    assert len(main_resets) == 4


def test_plan_shorter_than_coverage_target_is_logged(make_catalog, no_variety_prefs, caplog):
    with caplog.at_level("INFO", logger="mealplan_core.orchestrator"):
        batch = orchestrator(make_catalog(3, 3, 3), no_variety_prefs, date(2026, 10, 18)).generate(RotationState())

    assert len(batch.weeks) == 3
    assert any("horizonte" in r.getMessage() for r in caplog.records)


# ============================================================
# Rotación
# ============================================================

def test_seven_per_course_over_five_weeks_resets_four_times(make_catalog, no_variety_prefs, today):
    state = RotationState()
    batch = orchestrator(make_catalog(), no_variety_prefs, today).generate(state)

    assert len(batch.weeks) == 5
    assert {w.generation_batch_id for w in batch.weeks} == {batch.generation_batch_id}
    assert [w.start_date for w in batch.weeks] == [date(2026, 8, 3) + timedelta(weeks=i) for i in range(5)]

    mains = course_ids(batch, CourseType.MAIN_COURSE)
    assert len(mains) == 35
    for start in range(0, 35, 7):
        assert len(set(mains[start:start + 7])) == 7

    assert batch.rotation_state.cycle_number == 5
    assert batch.rotation_state.appetizer_cycle_number == 5
    assert batch.rotation_state.dessert_cycle_number == 5
    main_resets = [r for r in batch.cycle_resets if r.course_type == CourseType.MAIN_COURSE]
    assert [(r.old_cycle_number, r.new_cycle_number) for r in main_resets] == [(1, 2), (2, 3), (3, 4), (4, 5)]
    assert all(r.favorite_count == 7 for r in main_resets)


def test_main_reset_does_not_reset_appetizers(make_catalog, no_variety_prefs, today):
    recipes = make_catalog(appetizers=30, mains=7, desserts=30)
    batch = orchestrator(recipes, no_variety_prefs, today).generate(RotationState())

    assert batch.rotation_state.cycle_number == 5
    assert batch.rotation_state.appetizer_cycle_number == 2
    appetizers = course_ids(batch, CourseType.APPETIZER)
    assert len(set(appetizers[:30])) == 30


def test_same_seed_reproduces_the_plan(make_catalog, today):
    prefs = UserPreferences()
    first = orchestrator(make_catalog(), prefs, today, seed=123).generate(RotationState())
    second = orchestrator(make_catalog(), prefs, today, seed=123).generate(RotationState())

    assert first.seed == second.seed == 123
    assert [a.recipe_id for w in first.weeks for a in w.assignments] == [
        a.recipe_id for w in second.weeks for a in w.assignments
    ]


def test_seed_is_chosen_and_recorded_when_missing(make_catalog, today):
    batch = orchestrator(make_catalog(), UserPreferences(), today, seed=None).generate(RotationState())
    assert isinstance(batch.seed, int)


def test_snapshot_is_detached_from_working_state(make_catalog, no_variety_prefs, today):
    state = RotationState()
    batch = orchestrator(make_catalog(), no_variety_prefs, today).generate(state)
    state.used_main_course_ids.add("ghost")
    assert "ghost" not in batch.rotation_state.used_main_course_ids
    assert batch.rotation_state.pending_resets == []


def test_every_assignment_honors_dietary_restrictions(make_recipe, today):
    recipes = []
    for course in (CourseType.APPETIZER, CourseType.MAIN_COURSE, CourseType.DESSERT):
        sides = course == CourseType.MAIN_COURSE
        recipes += [
            make_recipe(f"{course.value}-veg-{i}", course, tags=["vegetarian"], accepts_accompaniment=sides)
            for i in range(5)
        ]
        recipes += [make_recipe(f"{course.value}-meat-{i}", course, accepts_accompaniment=sides) for i in range(5)]
    recipes += [
        make_recipe("side-veg", CourseType.ACCOMPANIMENT, tags=["vegetarian"]),
        make_recipe("side-bacon", CourseType.ACCOMPANIMENT),
    ]
    prefs = UserPreferences(dietary_restrictions=frozenset({DietaryRestriction.standard(DietaryTag.VEGETARIAN)}))
    by_id = {r.id: r for r in recipes}

    batch = orchestrator(recipes, prefs, today).generate(RotationState())

    for week in batch.weeks:
        for a in week.assignments:
            assert a.recipe_id is not None
            assert DietaryTag.VEGETARIAN in by_id[a.recipe_id].dietary_tags
            if a.accompaniment_recipe_id:
                assert a.accompaniment_recipe_id == "side-veg"


def test_no_complex_main_the_day_after_a_complex_main(make_recipe, make_catalog, today):
    recipes = [r for r in make_catalog() if r.course_type != CourseType.MAIN_COURSE]
    recipes += [make_recipe(f"complex-{i}", complexity=Complexity.COMPLEX, cuisine=f"c{i}") for i in range(4)]
    recipes += [make_recipe(f"simple-{i}", cuisine=f"s{i}") for i in range(4)]
    prefs = UserPreferences(skill_level=SkillLevel.ADVANCED, avoid_consecutive_complex=True)
    complexity = {r.id: r.complexity for r in recipes}

    batch = orchestrator(recipes, prefs, today).generate(RotationState())

    mains = {
        a.date: a.recipe_id
        for week in batch.weeks
        for a in week.assignments
        if a.course_type == CourseType.MAIN_COURSE
    }
    for day, recipe_id in mains.items():
        following = mains.get(day + timedelta(days=1))
        if recipe_id and following and complexity[recipe_id] == Complexity.COMPLEX:
            assert complexity[following] != Complexity.COMPLEX


# ============================================================
# Recetas insuficientes
# ============================================================

def test_fresh_batch_without_desserts_is_rejected(make_catalog, today):
    with pytest.raises(InsufficientRecipes) as exc:
        orchestrator(make_catalog(desserts=0), UserPreferences(), today).generate(RotationState())
    assert exc.value.missing == ["dessert"]
    assert exc.value.user_id == "u1"


def test_partial_plan_leaves_dessert_slots_empty(make_catalog, today):
    batch = orchestrator(make_catalog(desserts=0), UserPreferences(), today).generate(
        RotationState(), allow_partial=True
    )

    assert len(batch.weeks) == 1
    week = batch.weeks[0]
    assert all(a.is_empty for a in week.assignments if a.course_type == CourseType.DESSERT)
    assert all(not a.is_empty for a in week.assignments if a.course_type != CourseType.DESSERT)


def test_partial_plan_needs_at_least_one_favorite(today):
    with pytest.raises(InsufficientRecipes):
        orchestrator([], UserPreferences(), today).generate(RotationState(), allow_partial=True)


# ============================================================
# Bloqueo y regeneración
# ============================================================

@pytest.fixture
def planned(make_catalog, no_variety_prefs, today):
    """Plan de 5 semanas generado el sábado 2026-08-01."""
    recipes = make_catalog(10, 10, 10)
    batch = orchestrator(recipes, no_variety_prefs, today).generate(RotationState())
    return recipes, batch


def test_generated_future_weeks_are_not_locked(planned):
    _, batch = planned
    assert all(w.status == WeekStatus.FUTURE and not w.is_locked for w in batch.weeks)


def test_regenerate_all_future_keeps_locked_week(planned, no_variety_prefs):
    recipes, first = planned
    existing = first.weeks

    batch = orchestrator(recipes, no_variety_prefs, NEXT_WEDNESDAY, seed=7).regenerate_all_future(
        first.rotation_state.copy(), existing
    )

    assert [w.start_date for w in batch.carried_weeks] == [date(2026, 8, 3)]
    locked = batch.carried_weeks[0]
    assert locked.is_locked and locked.status == WeekStatus.CURRENT
    assert locked.id == existing[0].id
    assert locked.assignments == existing[0].assignments

    assert [w.start_date for w in batch.weeks] == [date(2026, 8, 10) + timedelta(weeks=i) for i in range(4)]
    assert {w.id for w in batch.superseded_weeks} == {w.id for w in existing[1:]}
    assert all(w.status == WeekStatus.ARCHIVED for w in batch.superseded_weeks)
    assert [w.start_date for w in batch.all_weeks()] == [w.start_date for w in existing]


def test_regeneration_threads_rotation_across_weeks(planned, no_variety_prefs):
    recipes, first = planned
    batch = orchestrator(recipes, no_variety_prefs, NEXT_WEDNESDAY).regenerate_all_future(
        RotationState(), first.weeks
    )
    mains = course_ids(batch, CourseType.MAIN_COURSE)
    for start in range(0, len(mains) - 10, 10):
        assert len(set(mains[start:start + 10])) == 10


def test_regenerate_single_week(planned, no_variety_prefs):
    recipes, first = planned
    target = date(2026, 8, 17)

    batch = orchestrator(recipes, no_variety_prefs, NEXT_WEDNESDAY).regenerate_week(
        first.rotation_state.copy(), first.weeks, target
    )

    assert [w.start_date for w in batch.weeks] == [target]
    assert len(batch.carried_weeks) == 4
    assert [w.start_date for w in batch.superseded_weeks] == [target]
    assert batch.week_starting(target).id == batch.weeks[0].id


def test_regenerate_locked_week_is_rejected(planned, no_variety_prefs):
    recipes, first = planned
    with pytest.raises(WeekLocked) as exc:
        orchestrator(recipes, no_variety_prefs, NEXT_WEDNESDAY).regenerate_week(
            RotationState(), first.weeks, date(2026, 8, 3)
        )
    assert exc.value.week_start == date(2026, 8, 3)


def test_regenerate_week_requires_a_monday_in_the_plan(planned, no_variety_prefs):
    recipes, first = planned
    orch = orchestrator(recipes, no_variety_prefs, NEXT_WEDNESDAY)
    with pytest.raises(InvalidWeekStart):
        orch.regenerate_week(RotationState(), first.weeks, date(2026, 8, 18))
    with pytest.raises(InvalidWeekStart):
        orch.regenerate_week(RotationState(), first.weeks, date(2026, 9, 14))


def test_regenerate_all_future_without_future_weeks_generates(make_catalog, no_variety_prefs, today):
    batch = orchestrator(make_catalog(), no_variety_prefs, today).regenerate_all_future(RotationState(), [])
    assert len(batch.weeks) == 5
    assert batch.superseded_weeks == []


def test_generate_supersedes_existing_future_weeks(planned, no_variety_prefs, today):
    recipes, first = planned
    batch = orchestrator(recipes, no_variety_prefs, today).generate(RotationState(), first.weeks)
    assert len(batch.superseded_weeks) == 5
    assert batch.carried_weeks == []
