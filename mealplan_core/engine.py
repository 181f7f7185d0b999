from __future__ import annotations

"""
mealplan_core.engine
====================

Servicio de alto nivel del motor de planificación.

Este módulo expone una **API interna** y estable para correr el flujo completo
(cargar → calcular → persistir) sin preocuparse por:

- HTTP
- frameworks web
- detalles de CLI

Flujo de cada operación:
------------------------
1) Se toma el lock del usuario (sin bloquear; ver `locks.py`).
2) Se cargan favoritos, preferencias, estado de rotación y semanas existentes.
3) El orquestador trabaja sobre una COPIA del estado de rotación: si algo
   falla, el estado persistido no cambia.
4) Se persisten el lote y el snapshot de rotación en un solo paso
   (`WeekPlanStore.save_generation`): nunca queda uno sin el otro.
5) Se loguea el tiempo de la llamada (warning si supera el presupuesto).
"""

import logging
import time
from datetime import date
from typing import Callable, List, Optional, TypedDict

from .config import Settings, get_settings
from .core.abstractions import PreferencesProvider, RecipeCatalog, RotationStateStore, WeekPlanStore
from .domain_models import CycleReset, MultiWeekBatch, WeekPlan
from .locks import UserLockRegistry
from .orchestrator import MultiWeekOrchestrator
from .rotation import RotationState
from .week_calendar import refresh_week_states

logger = logging.getLogger(__name__)

CycleResetHook = Callable[[str, CycleReset], None]


class GenerationTiming(TypedDict):
    """Métricas de la última llamada (para logs y tests)."""

    operation: str
    user_id: str
    elapsed_s: float
    over_budget: bool


class MealPlanEngine:
    """
    Orquestador de alto nivel: colaboradores + lock por usuario + orquestador.

    Args:
        catalog: Fuente de favoritos.
        preferences: Fuente de preferencias.
        rotation_store: Persistencia del estado de rotación.
        week_store: Persistencia de semanas; guarda también el snapshot de
            rotación de cada lote.
        locks: Registro de locks compartido entre requests. Debe ser el mismo
            objeto para todas las instancias que atienden al mismo usuario.
        settings: Configuración (tope de semanas, mínimo rodante, presupuesto).
        on_cycle_reset: Callback opcional por cada reinicio de ciclo
            (auditoría / analytics).
    """

    def __init__(
        self,
        *,
        catalog: RecipeCatalog,
        preferences: PreferencesProvider,
        rotation_store: RotationStateStore,
        week_store: WeekPlanStore,
        locks: Optional[UserLockRegistry] = None,
        settings: Optional[Settings] = None,
        on_cycle_reset: Optional[CycleResetHook] = None,
    ):
        self.catalog = catalog
        self.preferences = preferences
        self.rotation_store = rotation_store
        self.week_store = week_store
        self.locks = locks or UserLockRegistry()
        self.settings = settings or get_settings()
        self.on_cycle_reset = on_cycle_reset
        self.last_timing: Optional[GenerationTiming] = None

    # ------------------------------------------------------------
    # Operaciones públicas
    # ------------------------------------------------------------

    def generate(
        self,
        user_id: str,
        *,
        today: Optional[date] = None,
        seed: Optional[int] = None,
        allow_partial: bool = False,
    ) -> MultiWeekBatch:
        """Genera un lote nuevo a partir del lunes siguiente."""
        return self._run(
            "generate",
            user_id,
            today,
            seed,
            lambda orch, state, weeks: orch.generate(state, weeks, allow_partial=allow_partial),
        )

    def regenerate_week(
        self,
        user_id: str,
        week_start: date,
        *,
        today: Optional[date] = None,
        seed: Optional[int] = None,
    ) -> MultiWeekBatch:
        """Regenera una única semana futura no bloqueada."""
        return self._run(
            "regenerate_week",
            user_id,
            today,
            seed,
            lambda orch, state, weeks: orch.regenerate_week(state, weeks, week_start),
        )

    def regenerate_all_future(
        self,
        user_id: str,
        *,
        today: Optional[date] = None,
        seed: Optional[int] = None,
        allow_partial: bool = False,
    ) -> MultiWeekBatch:
        """Regenera todas las semanas futuras no bloqueadas."""
        return self._run(
            "regenerate_all_future",
            user_id,
            today,
            seed,
            lambda orch, state, weeks: orch.regenerate_all_future(
                state, weeks, allow_partial=allow_partial
            ),
        )

    def reset_rotation(self, user_id: str) -> None:
        """
        Reinicio explícito: borra el estado de rotación del usuario.

        Es la única forma de recrear el estado (un estado inválido nunca se
        reemplaza automáticamente).
        """
        with self.locks.hold(user_id):
            self.rotation_store.delete(user_id)
        logger.info("Estado de rotación reiniciado para usuario %s", user_id)

    def list_weeks(
        self,
        user_id: str,
        *,
        today: Optional[date] = None,
        include_archived: bool = False,
    ) -> List[WeekPlan]:
        """Semanas del usuario con estado/bloqueo recalculados para `today`."""
        weeks = self.week_store.list_weeks(user_id, include_archived=include_archived)
        return refresh_week_states(weeks, today or date.today())

    def load_rotation_state(self, user_id: str) -> Optional[RotationState]:
        return self.rotation_store.load(user_id)

    # ------------------------------------------------------------
    # Flujo común
    # ------------------------------------------------------------

    def _run(self, operation: str, user_id: str, today: Optional[date], seed: Optional[int], compute):
        today = today or date.today()
        with self.locks.hold(user_id):
            started = time.perf_counter()

            recipes = self.catalog.list_favorites(user_id)
            preferences = self.preferences.get_preferences(user_id)
            loaded = self.rotation_store.load(user_id)
            state = loaded.copy() if loaded is not None else RotationState()
            existing = self.week_store.list_weeks(user_id)

            orchestrator = MultiWeekOrchestrator(
                recipes,
                preferences,
                user_id=user_id,
                today=today,
                seed=seed,
                max_weeks_cap=self.settings.max_weeks_cap,
                rolling_weeks_minimum=self.settings.rolling_weeks_minimum,
            )
            batch: MultiWeekBatch = compute(orchestrator, state, existing)

            self.week_store.save_generation(user_id, batch)

            elapsed = time.perf_counter() - started

        self._notify_resets(user_id, batch)
        self._record_timing(operation, user_id, elapsed, batch)
        return batch

    def _notify_resets(self, user_id: str, batch: MultiWeekBatch) -> None:
        if self.on_cycle_reset is None:
            return
        for reset in batch.cycle_resets:
            self.on_cycle_reset(user_id, reset)

    def _record_timing(self, operation: str, user_id: str, elapsed: float, batch: MultiWeekBatch) -> None:
        budget = self.settings.generation_time_budget_s
        timing = GenerationTiming(
            operation=operation,
            user_id=user_id,
            elapsed_s=elapsed,
            over_budget=elapsed > budget,
        )
        self.last_timing = timing

        logger.info(
            "%s usuario=%s batch=%s semanas=%s reinicios=%s seed=%s (%.3fs)",
            operation, user_id, batch.generation_batch_id, len(batch.weeks),
            len(batch.cycle_resets), batch.seed, elapsed,
        )
        if timing["over_budget"]:
            logger.warning(
                "%s para usuario %s tardó %.2fs (presupuesto %.2fs)",
                operation, user_id, elapsed, budget,
            )
