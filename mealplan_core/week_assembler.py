"""
Armado de una semana (7 días × 3 cursos).

Para cada día (lunes a domingo) y cada curso en orden fijo (entrada,
principal, postre):

1) Pipeline de filtrado sobre los favoritos del usuario
2) Selector del curso (actualiza el `RotationState` compartido)
3) Para un principal asignado: acompañamiento opcional
4) Texto de explicación (reasoning)

Siempre produce 21 asignaciones; los slots sin candidato quedan vacíos de
forma explícita.
"""

from __future__ import annotations

import logging
import random
import uuid
from datetime import date, timedelta
from typing import Dict, FrozenSet, Iterable, List, Optional

from .domain_models import (
    PRIMARY_COURSES,
    CourseType,
    MealAssignment,
    Recipe,
    UserPreferences,
    WeekPlan,
    group_by_course,
)
from .errors import InvalidWeekStart
from .filters import RecipeFilterPipeline
from .reasoning import describe_assignment, describe_empty
from .rotation import RotationState
from .selection import AccompanimentPairer, MainCourseSelector, RotatingCourseSelector
from .week_calendar import is_locked_week, is_monday, week_status

logger = logging.getLogger(__name__)

DAYS_PER_WEEK = 7


class WeekAssembler:
    def __init__(
        self,
        recipes: Iterable[Recipe],
        preferences: UserPreferences,
        rng: random.Random,
        user_id: str,
    ):
        self.recipes: List[Recipe] = list(recipes)
        self.preferences = preferences
        self.rng = rng
        self.user_id = user_id

        self.by_course = group_by_course(self.recipes)
        self.favorite_ids: Dict[CourseType, FrozenSet[str]] = {
            course: frozenset(r.id for r in self.by_course[course]) for course in CourseType
        }

        self.pipeline = RecipeFilterPipeline(preferences)
        self.selectors = {
            CourseType.APPETIZER: RotatingCourseSelector(CourseType.APPETIZER, rng),
            CourseType.MAIN_COURSE: MainCourseSelector(preferences, rng),
            CourseType.DESSERT: RotatingCourseSelector(CourseType.DESSERT, rng),
        }
        self.pairer = AccompanimentPairer(rng)

    def assemble(
        self,
        start_date: date,
        state: RotationState,
        batch_id: str,
        *,
        today: date,
        week_id: Optional[str] = None,
    ) -> WeekPlan:
        """
        Arma la semana que empieza en `start_date` mutando `state`.

        Raises:
            InvalidWeekStart: si `start_date` no es lunes.
        """
        if not is_monday(start_date):
            raise InvalidWeekStart(
                f"La semana debe empezar en lunes (recibido {start_date.isoformat()})",
                user_id=self.user_id,
                batch_id=batch_id,
                week_start=start_date,
            )

        assignments: List[MealAssignment] = []
        for offset in range(DAYS_PER_WEEK):
            day = start_date + timedelta(days=offset)
            for course in PRIMARY_COURSES:
                assignments.append(self._assign_slot(course, day, state))

        empty = sum(1 for a in assignments if a.is_empty)
        logger.debug(
            "Semana %s armada para usuario %s (%s slots vacíos)",
            start_date.isoformat(), self.user_id, empty,
        )

        return WeekPlan(
            id=week_id or str(uuid.uuid4()),
            user_id=self.user_id,
            start_date=start_date,
            end_date=start_date + timedelta(days=DAYS_PER_WEEK - 1),
            status=week_status(start_date, today),
            is_locked=is_locked_week(start_date, today),
            generation_batch_id=batch_id,
            assignments=tuple(assignments),
        )

    def _assign_slot(self, course: CourseType, day: date, state: RotationState) -> MealAssignment:
        filtered = self.pipeline.run(self.by_course[course], course, day)
        selection = self.selectors[course].select(
            filtered.candidates, state, day, self.favorite_ids[course]
        )

        recipe = selection.recipe
        if recipe is None:
            return MealAssignment(
                date=day,
                course_type=course,
                reasoning=describe_empty(course, day, filtered, selection),
            )

        accompaniment: Optional[Recipe] = None
        if course == CourseType.MAIN_COURSE:
            sides = self.pipeline.eligible(
                self.by_course[CourseType.ACCOMPANIMENT], CourseType.ACCOMPANIMENT, day
            )
            accompaniment = self.pairer.pair(recipe, sides)

        return MealAssignment(
            date=day,
            course_type=course,
            recipe_id=recipe.id,
            accompaniment_recipe_id=accompaniment.id if accompaniment else None,
            reasoning=describe_assignment(course, recipe, selection, day, self.preferences, accompaniment),
            prep_required=recipe.requires_advance_prep,
        )
