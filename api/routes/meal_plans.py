"""
Endpoints de planes de comidas por usuario.

Este módulo maneja:
- GET    /api/v1/users/{user_id}/meal-plans
- POST   /api/v1/users/{user_id}/meal-plans/generate
- POST   /api/v1/users/{user_id}/meal-plans/regenerate
- POST   /api/v1/users/{user_id}/meal-plans/weeks/{week_start}/regenerate
- DELETE /api/v1/users/{user_id}/rotation

Los handlers son sincrónicos (`def`): FastAPI los corre en su threadpool y
el lock por usuario del engine serializa las generaciones concurrentes.
"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from mealplan_core.engine import MealPlanEngine
from mealplan_core.errors import (
    ConcurrentGenerationInProgress,
    InsufficientRecipes,
    InvalidRotationState,
    InvalidWeekStart,
    MealPlanningError,
    WeekLocked,
)

from ..dependencies import get_engine
from ..models.requests import GenerationRequest, MealPlanBatchResponse, WeekListResponse, WeekPlanResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/users/{user_id}", tags=["meal-plans"])


def _http_error(e: MealPlanningError) -> HTTPException:
    """Traduce un error del motor a HTTPException (sin estructuras internas)."""
    if isinstance(e, InvalidRotationState):
        logger.error("Estado de rotación inválido para usuario %s (campo %s)", e.user_id, e.field)
        return HTTPException(
            status_code=500,
            detail={
                "error": "invalid_rotation_state",
                "message": "El estado de rotación guardado es inválido",
                "user_id": e.user_id,
                "field": e.field,
            },
        )

    if isinstance(e, InsufficientRecipes):
        status_code, code = 422, "insufficient_recipes"
    elif isinstance(e, ConcurrentGenerationInProgress):
        status_code, code = 409, "generation_in_progress"
    elif isinstance(e, WeekLocked):
        status_code, code = 409, "week_locked"
    elif isinstance(e, InvalidWeekStart):
        status_code, code = 400, "invalid_week_start"
    else:
        status_code, code = 500, "meal_planning_error"

    detail = {"error": code, "message": e.message, **e.context()}
    if isinstance(e, InsufficientRecipes):
        detail["counts"] = e.counts
    return HTTPException(status_code=status_code, detail=detail)


@router.get("/meal-plans", response_model=WeekListResponse)
def list_meal_plans(
    user_id: str,
    today: Optional[date] = None,
    include_archived: bool = False,
    engine: MealPlanEngine = Depends(get_engine),
):
    """
    Lista las semanas del usuario con estado y bloqueo recalculados.

    Args:
        user_id: Dueño del plan
        today: Fecha de referencia (query, opcional)
        include_archived: Incluir semanas reemplazadas
    """
    weeks = engine.list_weeks(user_id, today=today, include_archived=include_archived)
    return WeekListResponse(
        user_id=user_id,
        weeks=[WeekPlanResponse.from_domain(w) for w in weeks],
    )


@router.post("/meal-plans/generate", response_model=MealPlanBatchResponse)
def generate_meal_plan(
    user_id: str,
    request: Optional[GenerationRequest] = None,
    engine: MealPlanEngine = Depends(get_engine),
):
    """
    Genera un lote nuevo a partir del lunes siguiente.

    Raises:
        422: Faltan favoritos de algún tipo de curso
        409: Ya hay una generación en curso para el usuario
        500: Estado de rotación inválido
    """
    request = request or GenerationRequest()
    try:
        batch = engine.generate(
            user_id, today=request.today, seed=request.seed, allow_partial=request.allow_partial
        )
    except MealPlanningError as e:
        raise _http_error(e) from e
    return MealPlanBatchResponse.from_domain(batch)


@router.post("/meal-plans/regenerate", response_model=MealPlanBatchResponse)
def regenerate_all_future(
    user_id: str,
    request: Optional[GenerationRequest] = None,
    engine: MealPlanEngine = Depends(get_engine),
):
    """Regenera todas las semanas futuras no bloqueadas."""
    request = request or GenerationRequest()
    try:
        batch = engine.regenerate_all_future(
            user_id, today=request.today, seed=request.seed, allow_partial=request.allow_partial
        )
    except MealPlanningError as e:
        raise _http_error(e) from e
    return MealPlanBatchResponse.from_domain(batch)


@router.post("/meal-plans/weeks/{week_start}/regenerate", response_model=MealPlanBatchResponse)
def regenerate_week(
    user_id: str,
    week_start: date,
    request: Optional[GenerationRequest] = None,
    engine: MealPlanEngine = Depends(get_engine),
):
    """
    Regenera una única semana.

    Raises:
        400: `week_start` no es lunes o no existe en el plan
        409: Semana bloqueada o generación en curso
    """
    request = request or GenerationRequest()
    try:
        batch = engine.regenerate_week(user_id, week_start, today=request.today, seed=request.seed)
    except MealPlanningError as e:
        raise _http_error(e) from e
    return MealPlanBatchResponse.from_domain(batch)


@router.delete("/rotation")
def reset_rotation(user_id: str, engine: MealPlanEngine = Depends(get_engine)):
    """Reinicio explícito del estado de rotación del usuario."""
    try:
        engine.reset_rotation(user_id)
    except MealPlanningError as e:
        raise _http_error(e) from e
    return {"status": "ok", "user_id": user_id}
