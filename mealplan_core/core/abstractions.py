"""
Abstracciones (Protocols) para los colaboradores del motor de planificación.

Estos protocols definen las interfaces que cada backend (SQLAlchemy, memoria,
servicios externos) debe implementar para que el motor pueda trabajar con
cualquier fuente de recetas, preferencias y persistencia.
"""

from __future__ import annotations

from typing import List, Optional, Protocol

from ..domain_models import MultiWeekBatch, Recipe, UserPreferences, WeekPlan
from ..rotation import RotationState


class RecipeCatalog(Protocol):
    """
    Catálogo de recetas favoritas del usuario.
    """

    def list_favorites(self, user_id: str) -> List[Recipe]:
        """
        Devuelve las recetas favoritas del usuario (todos los tipos de curso).

        Args:
            user_id: Dueño de los favoritos.

        Returns:
            Lista de recetas inmutables. El orden no afecta el resultado del
            algoritmo (los desempates ordenan por id).
        """
        ...


class PreferencesProvider(Protocol):
    """
    Fuente de preferencias del usuario.
    """

    def get_preferences(self, user_id: str) -> UserPreferences:
        """
        Devuelve las preferencias del usuario, o los valores por defecto si
        nunca las configuró.
        """
        ...


class RotationStateStore(Protocol):
    """
    Persistencia del estado de rotación (uno por usuario).
    """

    def load(self, user_id: str) -> Optional[RotationState]:
        """
        Carga el estado persistido.

        Returns:
            El estado, o None si el usuario todavía no tiene uno.

        Raises:
            InvalidRotationState: si el documento existe pero no valida.
        """
        ...

    def save(self, user_id: str, state: RotationState) -> None:
        ...

    def delete(self, user_id: str) -> None:
        """Borra el estado (reinicio explícito de la rotación)."""
        ...


class WeekPlanStore(Protocol):
    """
    Persistencia de semanas generadas.
    """

    def list_weeks(self, user_id: str, include_archived: bool = False) -> List[WeekPlan]:
        """
        Semanas del usuario ordenadas por fecha de inicio.

        Args:
            include_archived: Si es True incluye las semanas reemplazadas.
        """
        ...

    def save_generation(self, user_id: str, batch: MultiWeekBatch) -> None:
        """
        Persiste un lote en un solo paso: las semanas reemplazadas quedan
        archivadas, se insertan las nuevas y se guarda `batch.rotation_state`.
        Las semanas mantenidas no se tocan.

        Si falla, no debe quedar ninguna de las escrituras aplicada (semanas
        y estado de rotación siempre avanzan juntos).
        """
        ...
