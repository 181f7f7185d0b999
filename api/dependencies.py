"""
Dependencias de FastAPI para el motor de planificación.

- `get_lock_registry`: registro de locks por usuario, compartido por todo el
  proceso (todas las requests de un usuario compiten por el mismo lock).
- `get_store`: adaptador SQLAlchemy de catálogo, preferencias, rotación y semanas.
- `get_engine`: `MealPlanEngine` armado con los anteriores.

Los tests reemplazan `get_store` / `get_engine` con `app.dependency_overrides`.
"""

import logging

from fastapi import Depends

from mealplan_core.config import get_settings
from mealplan_core.db.stores import SqlMealPlanStore
from mealplan_core.engine import MealPlanEngine
from mealplan_core.locks import UserLockRegistry

logger = logging.getLogger(__name__)

_lock_registry = UserLockRegistry()


def get_lock_registry() -> UserLockRegistry:
    return _lock_registry


def get_store() -> SqlMealPlanStore:
    return SqlMealPlanStore()


def get_engine(
    store: SqlMealPlanStore = Depends(get_store),
    locks: UserLockRegistry = Depends(get_lock_registry),
) -> MealPlanEngine:
    return MealPlanEngine(
        catalog=store,
        preferences=store,
        rotation_store=store,
        week_store=store,
        locks=locks,
        settings=get_settings(),
    )
