"""
Implementación en memoria de los colaboradores del motor.

Útil para tests, la CLI y demos. El estado de rotación se guarda serializado
(igual que en DB), así que `load` pasa por la misma validación que el backend
SQLAlchemy.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from .domain_models import MultiWeekBatch, Recipe, UserPreferences, WeekPlan, WeekStatus
from .rotation import RotationState


class InMemoryMealPlanStore:
    """
    Catálogo, preferencias, estado de rotación y semanas en diccionarios.

    Implementa `RecipeCatalog`, `PreferencesProvider`, `RotationStateStore` y
    `WeekPlanStore`.
    """

    def __init__(self) -> None:
        self._favorites: Dict[str, List[Recipe]] = {}
        self._preferences: Dict[str, UserPreferences] = {}
        self._states: Dict[str, Any] = {}
        self._weeks: Dict[str, List[WeekPlan]] = {}

    # Carga de datos ----------------------------------------------------

    def set_favorites(self, user_id: str, recipes: Iterable[Recipe]) -> None:
        self._favorites[user_id] = list(recipes)

    def set_preferences(self, user_id: str, preferences: UserPreferences) -> None:
        self._preferences[user_id] = preferences

    def put_raw_state(self, user_id: str, document: Any) -> None:
        """Guarda un documento de estado tal cual (sin validar)."""
        self._states[user_id] = document

    def raw_state(self, user_id: str) -> Any:
        return self._states.get(user_id)

    # RecipeCatalog / PreferencesProvider ------------------------------

    def list_favorites(self, user_id: str) -> List[Recipe]:
        return list(self._favorites.get(user_id, []))

    def get_preferences(self, user_id: str) -> UserPreferences:
        return self._preferences.get(user_id, UserPreferences())

    # RotationStateStore -----------------------------------------------

    def load(self, user_id: str) -> Optional[RotationState]:
        if user_id not in self._states:
            return None
        return RotationState.from_dict(self._states[user_id], user_id=user_id)

    def save(self, user_id: str, state: RotationState) -> None:
        self._states[user_id] = state.to_dict()

    def delete(self, user_id: str) -> None:
        self._states.pop(user_id, None)

    # WeekPlanStore ----------------------------------------------------

    def list_weeks(self, user_id: str, include_archived: bool = False) -> List[WeekPlan]:
        weeks = self._weeks.get(user_id, [])
        if not include_archived:
            weeks = [w for w in weeks if w.status != WeekStatus.ARCHIVED]
        return sorted(weeks, key=lambda w: w.start_date)

    def save_generation(self, user_id: str, batch: MultiWeekBatch) -> None:
        # Todo se arma antes de asignar: si algo falla no queda nada a medias.
        document = batch.rotation_state.to_dict()
        archived = {w.id: w for w in batch.superseded_weeks}
        weeks = [archived.get(w.id, w) for w in self._weeks.get(user_id, [])]
        weeks.extend(batch.weeks)

        self._weeks[user_id] = weeks
        self._states[user_id] = document

