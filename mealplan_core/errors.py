"""
mealplan_core.errors
====================

Taxonomía de errores del motor de planificación.

Todos los errores heredan de `MealPlanningError` y llevan contexto suficiente
para que la capa llamadora (API, CLI, scheduler) pueda actuar:
- `user_id`: dueño del plan / estado de rotación
- `batch_id`: lote de generación involucrado (si aplica)
- `week_start`: semana involucrada (si aplica)

Un slot vacío (sin receta elegible) NO es un error: es un estado válido
marcado explícitamente en la asignación.

Los mensajes no incluyen estructuras internas (sets de ids, dicts de estado),
solo identificadores y nombres de campo.
"""

from __future__ import annotations

from datetime import date
from typing import Dict, Optional


class MealPlanningError(Exception):
    """Error base del motor de planificación."""

    def __init__(
        self,
        message: str,
        *,
        user_id: Optional[str] = None,
        batch_id: Optional[str] = None,
        week_start: Optional[date] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.user_id = user_id
        self.batch_id = batch_id
        self.week_start = week_start

    def context(self) -> Dict[str, str]:
        """Contexto identificatorio serializable (para logs y respuestas HTTP)."""
        ctx: Dict[str, str] = {}
        if self.user_id is not None:
            ctx["user_id"] = self.user_id
        if self.batch_id is not None:
            ctx["batch_id"] = self.batch_id
        if self.week_start is not None:
            ctx["week_start"] = self.week_start.isoformat()
        return ctx


class InsufficientRecipes(MealPlanningError):
    """
    No se puede generar ninguna semana: al menos uno de los tres tipos
    principales (entrada, plato principal, postre) no tiene favoritos y el
    llamador pidió un lote nuevo. No se reintenta.
    """

    def __init__(
        self,
        *,
        user_id: Optional[str],
        counts: Dict[str, int],
        batch_id: Optional[str] = None,
    ) -> None:
        missing = sorted(course for course, count in counts.items() if count < 1)
        message = (
            "No hay suficientes recetas favoritas para generar un plan "
            f"(faltan favoritos de: {', '.join(missing) or 'ninguno'})"
        )
        super().__init__(message, user_id=user_id, batch_id=batch_id)
        self.counts = dict(counts)
        self.missing = missing


class ConcurrentGenerationInProgress(MealPlanningError):
    """Ya hay una generación/regeneración en curso para este usuario."""

    def __init__(self, *, user_id: str) -> None:
        super().__init__(
            "Ya hay una generación de plan en curso para este usuario; reintentá más tarde",
            user_id=user_id,
        )


class InvalidRotationState(MealPlanningError):
    """
    El estado de rotación persistido no pudo parsearse o validarse.

    Es fatal para la llamada: nunca se reemplaza silenciosamente por un estado
    por defecto. `field` indica qué campo falló para que el llamador decida si
    resetear el estado.
    """

    def __init__(self, *, user_id: Optional[str], field: str, reason: str = "") -> None:
        message = f"Estado de rotación inválido en el campo '{field}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, user_id=user_id)
        self.field = field
        self.reason = reason


class InvalidWeekStart(MealPlanningError):
    """La fecha de inicio de semana no es un lunes o no es una semana futura."""


class WeekLocked(MealPlanningError):
    """Se intentó regenerar una semana bloqueada (en curso o pasada)."""


class InvalidCatalog(MealPlanningError):
    """
    El catálogo de entrada (archivo JSON de la CLI) no se pudo leer o tiene
    una receta / preferencias mal formadas.
    """

    def __init__(self, source: str, reason: str, *, entry: Optional[int] = None) -> None:
        where = source if entry is None else f"{source} (receta #{entry})"
        super().__init__(f"Catálogo inválido en {where}: {reason}")
        self.source = source
        self.entry = entry
        self.reason = reason
