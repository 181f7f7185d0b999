"""
Funciones helper para trabajar con los modelos ORM de planificación.

Todas reciben una `Session` como primer argumento (la transacción la maneja
el llamador) y hablan en tipos de dominio (`mealplan_core.domain_models`):
- Catálogo de favoritos
- Preferencias del usuario
- Estado de rotación (documento JSON validado)
- Semanas generadas y sus asignaciones
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from .. import domain_models as dm
from ..rotation import RotationState
from .models import MealAssignment, Recipe, RotationStateDocument, UserPreference, WeekPlan


# ============================================================
# Recetas
# ============================================================

def recipe_from_row(row: Recipe) -> dm.Recipe:
    return dm.Recipe.from_dict({
        "id": row.recipe_id,
        "name": row.name,
        "course_type": row.course_type,
        "cuisine": row.cuisine,
        "complexity": row.complexity,
        "dietary_tags": json.loads(row.dietary_tags_json or "[]"),
        "ingredients": json.loads(row.ingredients_json or "[]"),
        "prep_time_min": row.prep_time_min,
        "cook_time_min": row.cook_time_min,
        "advance_prep_hours": row.advance_prep_hours,
        "accepts_accompaniment": row.accepts_accompaniment,
        "preferred_accompaniments": json.loads(row.preferred_accompaniments_json or "[]"),
        "accompaniment_category": row.accompaniment_category,
    })


def upsert_recipe(
    session: Session,
    user_id: str,
    recipe: dm.Recipe,
    is_favorite: bool = True,
) -> Recipe:
    """
    Crea o actualiza una receta del usuario.

    Args:
        session: Sesión de base de datos
        user_id: Dueño del catálogo
        recipe: Receta de dominio
        is_favorite: Marca de favorito

    Returns:
        Fila ORM (creada o actualizada)
    """
    row = session.execute(
        select(Recipe).where(Recipe.user_id == user_id, Recipe.recipe_id == recipe.id)
    ).scalar_one_or_none()
    if row is None:
        row = Recipe(user_id=user_id, recipe_id=recipe.id)
        session.add(row)

    data = recipe.to_dict()
    row.name = recipe.name
    row.course_type = recipe.course_type.value
    row.cuisine = recipe.cuisine
    row.complexity = recipe.complexity.value
    row.prep_time_min = recipe.prep_time_min
    row.cook_time_min = recipe.cook_time_min
    row.advance_prep_hours = recipe.advance_prep_hours
    row.dietary_tags_json = json.dumps(data["dietary_tags"])
    row.ingredients_json = json.dumps(data["ingredients"], ensure_ascii=False)
    row.accepts_accompaniment = recipe.accepts_accompaniment
    row.preferred_accompaniments_json = json.dumps(data["preferred_accompaniments"])
    row.accompaniment_category = data["accompaniment_category"]
    row.is_favorite = is_favorite
    session.flush()
    return row


def set_favorite(session: Session, user_id: str, recipe_id: str, is_favorite: bool) -> bool:
    """Marca/desmarca favorito. Devuelve False si la receta no existe."""
    row = session.execute(
        select(Recipe).where(Recipe.user_id == user_id, Recipe.recipe_id == recipe_id)
    ).scalar_one_or_none()
    if row is None:
        return False
    row.is_favorite = is_favorite
    return True


def list_favorite_recipes(session: Session, user_id: str) -> List[dm.Recipe]:
    rows = session.execute(
        select(Recipe)
        .where(Recipe.user_id == user_id, Recipe.is_favorite.is_(True))
        .order_by(Recipe.recipe_id)
    ).scalars()
    return [recipe_from_row(row) for row in rows]


# ============================================================
# Preferencias
# ============================================================

def get_user_preferences(session: Session, user_id: str) -> dm.UserPreferences:
    """Preferencias del usuario, o los valores por defecto si no tiene fila."""
    row = session.get(UserPreference, user_id)
    if row is None:
        return dm.UserPreferences()
    return dm.UserPreferences.from_dict({
        "max_prep_time_weeknight": row.max_prep_time_weeknight,
        "max_prep_time_weekend": row.max_prep_time_weekend,
        "skill_level": row.skill_level,
        "avoid_consecutive_complex": row.avoid_consecutive_complex,
        "cuisine_variety_weight": row.cuisine_variety_weight,
        "dietary_restrictions": json.loads(row.dietary_restrictions_json or "[]"),
    })


def save_user_preferences(session: Session, user_id: str, preferences: dm.UserPreferences) -> UserPreference:
    row = session.get(UserPreference, user_id)
    if row is None:
        row = UserPreference(user_id=user_id)
        session.add(row)

    data = preferences.to_dict()
    row.max_prep_time_weeknight = data["max_prep_time_weeknight"]
    row.max_prep_time_weekend = data["max_prep_time_weekend"]
    row.skill_level = data["skill_level"]
    row.avoid_consecutive_complex = data["avoid_consecutive_complex"]
    row.cuisine_variety_weight = data["cuisine_variety_weight"]
    row.dietary_restrictions_json = json.dumps(data["dietary_restrictions"], ensure_ascii=False)
    session.flush()
    return row


# ============================================================
# Estado de rotación
# ============================================================

def load_rotation_state(session: Session, user_id: str) -> Optional[RotationState]:
    """
    Carga y valida el estado de rotación.

    Returns:
        None si el usuario no tiene estado.

    Raises:
        InvalidRotationState: documento corrupto o inválido.
    """
    row = session.get(RotationStateDocument, user_id)
    if row is None:
        return None
    return RotationState.from_json(row.state_json, user_id=user_id)


def save_rotation_state(session: Session, user_id: str, state: RotationState) -> None:
    row = session.get(RotationStateDocument, user_id)
    if row is None:
        row = RotationStateDocument(user_id=user_id, state_json=state.to_json())
        session.add(row)
    else:
        row.state_json = state.to_json()
        row.updated_at = datetime.utcnow()


def save_raw_rotation_state(session: Session, user_id: str, state_json: str) -> None:
    """Guarda un documento sin validar (importaciones / reparaciones manuales)."""
    row = session.get(RotationStateDocument, user_id)
    if row is None:
        session.add(RotationStateDocument(user_id=user_id, state_json=state_json))
    else:
        row.state_json = state_json


def delete_rotation_state(session: Session, user_id: str) -> bool:
    row = session.get(RotationStateDocument, user_id)
    if row is None:
        return False
    session.delete(row)
    return True


# ============================================================
# Semanas
# ============================================================

def week_plan_from_row(row: WeekPlan) -> dm.WeekPlan:
    return dm.WeekPlan(
        id=row.id,
        user_id=row.user_id,
        start_date=row.start_date,
        end_date=row.end_date,
        status=dm.WeekStatus(row.status),
        is_locked=row.is_locked,
        generation_batch_id=row.generation_batch_id,
        created_at=row.created_at,
        assignments=tuple(
            dm.MealAssignment(
                date=a.day,
                course_type=dm.CourseType(a.course_type),
                recipe_id=a.recipe_id,
                accompaniment_recipe_id=a.accompaniment_recipe_id,
                reasoning=a.reasoning,
                prep_required=a.prep_required,
            )
            for a in row.assignments
        ),
    )


def _week_plan_row(week: dm.WeekPlan) -> WeekPlan:
    row = WeekPlan(
        id=week.id,
        user_id=week.user_id,
        start_date=week.start_date,
        end_date=week.end_date,
        status=week.status.value,
        is_locked=week.is_locked,
        generation_batch_id=week.generation_batch_id,
        created_at=week.created_at.replace(tzinfo=None),
    )
    row.assignments = [
        MealAssignment(
            position=position,
            day=a.date,
            course_type=a.course_type.value,
            recipe_id=a.recipe_id,
            accompaniment_recipe_id=a.accompaniment_recipe_id,
            reasoning=a.reasoning,
            prep_required=a.prep_required,
        )
        for position, a in enumerate(week.assignments)
    ]
    return row


def list_week_plans(session: Session, user_id: str, include_archived: bool = False) -> List[dm.WeekPlan]:
    query = (
        select(WeekPlan)
        .options(selectinload(WeekPlan.assignments))
        .where(WeekPlan.user_id == user_id)
        .order_by(WeekPlan.start_date, WeekPlan.created_at)
    )
    if not include_archived:
        query = query.where(WeekPlan.status != dm.WeekStatus.ARCHIVED.value)
    return [week_plan_from_row(row) for row in session.execute(query).scalars()]


def save_week_batch(session: Session, user_id: str, batch: dm.MultiWeekBatch) -> None:
    """
    Persiste un lote de generación.

    - Semanas reemplazadas: pasan a `archived` (se conserva el historial).
    - Semanas nuevas: se insertan con sus 21 asignaciones.
    - Semanas mantenidas: no se tocan.
    """
    now = datetime.utcnow()
    for week in batch.superseded_weeks:
        row = session.get(WeekPlan, week.id)
        if row is None or row.user_id != user_id:
            continue
        row.status = dm.WeekStatus.ARCHIVED.value
        row.is_locked = False
        row.archived_at = now

    for week in batch.weeks:
        session.add(_week_plan_row(week))
    session.flush()


def save_generation(session: Session, user_id: str, batch: dm.MultiWeekBatch) -> None:
    """
    Lote + snapshot de rotación en la misma sesión.

    El llamador maneja el commit: si cualquiera de las dos escrituras falla,
    el rollback descarta ambas.
    """
    save_week_batch(session, user_id, batch)
    save_rotation_state(session, user_id, batch.rotation_state)
    session.flush()
