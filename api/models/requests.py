"""
Modelos de request/response para la API.

Estos modelos definen la estructura esperada de los requests HTTP,
validando tipos y valores antes de pasarlos al core.
"""

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from mealplan_core.domain_models import CycleReset, MealAssignment, MultiWeekBatch, WeekPlan


class GenerationRequest(BaseModel):
    """
    Parámetros opcionales de una generación/regeneración.

    Todos los campos son opcionales: sin body se usa la fecha del servidor y
    una semilla aleatoria.
    """

    seed: Optional[int] = Field(
        default=None,
        description="Semilla para desempates y acompañamientos (resultado reproducible)",
    )
    today: Optional[date] = Field(
        default=None,
        description="Fecha de referencia (YYYY-MM-DD); por defecto, hoy",
    )
    allow_partial: bool = Field(
        default=False,
        description="Permite un plan de una semana con slots vacíos si faltan favoritos",
    )


class MealAssignmentResponse(BaseModel):
    date: date
    course_type: str
    recipe_id: Optional[str] = None
    accompaniment_recipe_id: Optional[str] = None
    reasoning: Optional[str] = None
    prep_required: bool = False

    @classmethod
    def from_domain(cls, a: MealAssignment) -> "MealAssignmentResponse":
        return cls(
            date=a.date,
            course_type=a.course_type.value,
            recipe_id=a.recipe_id,
            accompaniment_recipe_id=a.accompaniment_recipe_id,
            reasoning=a.reasoning,
            prep_required=a.prep_required,
        )


class WeekPlanResponse(BaseModel):
    id: str
    start_date: date
    end_date: date
    status: str = Field(..., description="future|current|past|archived")
    is_locked: bool
    generation_batch_id: str
    created_at: datetime
    assignments: List[MealAssignmentResponse] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, week: WeekPlan) -> "WeekPlanResponse":
        return cls(
            id=week.id,
            start_date=week.start_date,
            end_date=week.end_date,
            status=week.status.value,
            is_locked=week.is_locked,
            generation_batch_id=week.generation_batch_id,
            created_at=week.created_at,
            assignments=[MealAssignmentResponse.from_domain(a) for a in week.assignments],
        )


class CycleResetResponse(BaseModel):
    course_type: str
    old_cycle_number: int
    new_cycle_number: int
    favorite_count: int
    reset_on: date

    @classmethod
    def from_domain(cls, reset: CycleReset) -> "CycleResetResponse":
        return cls(
            course_type=reset.course_type.value,
            old_cycle_number=reset.old_cycle_number,
            new_cycle_number=reset.new_cycle_number,
            favorite_count=reset.favorite_count,
            reset_on=reset.reset_on,
        )


class MealPlanBatchResponse(BaseModel):
    """
    Response de una generación/regeneración.

    `weeks` son las semanas nuevas; `carried_weeks` las que se mantuvieron.
    """

    generation_batch_id: str
    user_id: str
    seed: Optional[int] = None
    cycle_number: int = Field(..., description="Ciclo actual de platos principales")
    weeks: List[WeekPlanResponse] = Field(default_factory=list)
    carried_weeks: List[WeekPlanResponse] = Field(default_factory=list)
    archived_week_ids: List[str] = Field(default_factory=list)
    cycle_resets: List[CycleResetResponse] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, batch: MultiWeekBatch) -> "MealPlanBatchResponse":
        return cls(
            generation_batch_id=batch.generation_batch_id,
            user_id=batch.user_id,
            seed=batch.seed,
            cycle_number=batch.rotation_state.cycle_number,
            weeks=[WeekPlanResponse.from_domain(w) for w in batch.weeks],
            carried_weeks=[WeekPlanResponse.from_domain(w) for w in batch.carried_weeks],
            archived_week_ids=[w.id for w in batch.superseded_weeks],
            cycle_resets=[CycleResetResponse.from_domain(r) for r in batch.cycle_resets],
        )


class WeekListResponse(BaseModel):
    user_id: str
    weeks: List[WeekPlanResponse] = Field(default_factory=list)
