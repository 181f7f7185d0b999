"""
Adaptador SQLAlchemy de los colaboradores del motor.

Cada método abre su propia transacción corta con `session_scope`.
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy.orm import sessionmaker

from ..domain_models import MultiWeekBatch, Recipe, UserPreferences, WeekPlan
from ..rotation import RotationState
from . import helpers
from .database import get_session_factory, session_scope


class SqlMealPlanStore:
    """
    Implementa `RecipeCatalog`, `PreferencesProvider`, `RotationStateStore`
    y `WeekPlanStore` sobre la base configurada.

    Args:
        session_factory: sessionmaker a usar; por defecto el global de
            `database.py` (tests pasan uno sobre SQLite en memoria).
    """

    def __init__(self, session_factory: Optional[sessionmaker] = None):
        self._session_factory = session_factory

    @property
    def session_factory(self) -> sessionmaker:
        if self._session_factory is None:
            self._session_factory = get_session_factory()
        return self._session_factory

    def list_favorites(self, user_id: str) -> List[Recipe]:
        with session_scope(self.session_factory) as session:
            return helpers.list_favorite_recipes(session, user_id)

    def get_preferences(self, user_id: str) -> UserPreferences:
        with session_scope(self.session_factory) as session:
            return helpers.get_user_preferences(session, user_id)

    def load(self, user_id: str) -> Optional[RotationState]:
        with session_scope(self.session_factory) as session:
            return helpers.load_rotation_state(session, user_id)

    def save(self, user_id: str, state: RotationState) -> None:
        with session_scope(self.session_factory) as session:
            helpers.save_rotation_state(session, user_id, state)

    def delete(self, user_id: str) -> None:
        with session_scope(self.session_factory) as session:
            helpers.delete_rotation_state(session, user_id)

    def list_weeks(self, user_id: str, include_archived: bool = False) -> List[WeekPlan]:
        with session_scope(self.session_factory) as session:
            return helpers.list_week_plans(session, user_id, include_archived=include_archived)

    def save_generation(self, user_id: str, batch: MultiWeekBatch) -> None:
        with session_scope(self.session_factory) as session:
            helpers.save_generation(session, user_id, batch)
