"""
mealplan_core.orchestrator
==========================

Orquestación multi-semana: qué semanas se generan, cuáles quedan bloqueadas
y cómo se reemplazan en una regeneración.

Reglas
------
- La semana actual es el lunes–domingo que contiene `today`. Un lote nuevo
  empieza el lunes siguiente.
- `max_weeks = min(5, min(#entradas, #principales, #postres))`.
- Un lote nuevo genera `max_weeks` semanas. El horizonte del mes (con un
  mínimo rodante de 4 semanas) solo se usa para avisar cuando faltan
  favoritos para cubrirlo; nunca recorta el lote.
- Semanas que empiezan antes o dentro de la semana actual están bloqueadas:
  se mantienen sin cambios en toda regeneración.
- Un único `RotationState` se encadena por todas las semanas del lote, en
  orden ascendente, para que la unicidad valga a través del lote.

El orquestador muta el `RotationState` que recibe; el llamador (ver
`engine.py`) le pasa una copia y persiste el snapshot del lote.
"""

from __future__ import annotations

import logging
import random
import uuid
from dataclasses import replace
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Sequence

from .domain_models import (
    PRIMARY_COURSES,
    MultiWeekBatch,
    Recipe,
    UserPreferences,
    WeekPlan,
    WeekStatus,
)
from .errors import InsufficientRecipes, InvalidWeekStart, WeekLocked
from .rotation import RotationState
from .week_assembler import WeekAssembler
from .week_calendar import (
    coverage_target,
    is_locked_week,
    is_monday,
    next_week_start,
    refresh_week_states,
)

logger = logging.getLogger(__name__)

MAX_WEEKS = 5


def course_counts(recipes: Iterable[Recipe]) -> Dict[str, int]:
    """Favoritos por tipo de curso principal (entrada, principal, postre)."""
    counts = {course.value: 0 for course in PRIMARY_COURSES}
    for recipe in recipes:
        if recipe.course_type.value in counts:
            counts[recipe.course_type.value] += 1
    return counts


def compute_max_weeks(counts: Dict[str, int], cap: int = MAX_WEEKS) -> int:
    """min(tope, min(conteos)), nunca mayor a 5 ni menor a 0."""
    limit = min(cap, MAX_WEEKS)
    return max(0, min(limit, min(counts.values()) if counts else 0))


def _archived(week: WeekPlan) -> WeekPlan:
    return replace(week, status=WeekStatus.ARCHIVED, is_locked=False)


class MultiWeekOrchestrator:
    """
    Genera y regenera lotes de semanas para un usuario.

    Args:
        recipes: Favoritos del usuario (snapshot inmutable durante la llamada).
        preferences: Preferencias del usuario.
        user_id: Dueño del plan.
        today: Fecha de referencia (semana actual, bloqueo, horizonte).
        seed: Semilla de desempates y acompañamientos. Si es None se elige
            una al azar y queda registrada en el lote.
        max_weeks_cap: Tope de semanas por lote (nunca más de 5).
        rolling_weeks_minimum: Mínimo rodante del horizonte que el plan
            debería cubrir (solo para el aviso de cobertura).
    """

    def __init__(
        self,
        recipes: Sequence[Recipe],
        preferences: UserPreferences,
        *,
        user_id: str,
        today: date,
        seed: Optional[int] = None,
        max_weeks_cap: int = MAX_WEEKS,
        rolling_weeks_minimum: int = 4,
    ):
        self.recipes = list(recipes)
        self.preferences = preferences
        self.user_id = user_id
        self.today = today
        self.seed = seed if seed is not None else random.SystemRandom().randrange(2**32)
        self.rng = random.Random(self.seed)
        self.max_weeks_cap = max_weeks_cap
        self.rolling_weeks_minimum = rolling_weeks_minimum

        self.counts = course_counts(self.recipes)
        self.max_weeks = compute_max_weeks(self.counts, max_weeks_cap)
        self.assembler = WeekAssembler(self.recipes, preferences, self.rng, user_id)

    # ------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------

    def _active(self, existing_weeks: Iterable[WeekPlan]) -> List[WeekPlan]:
        weeks = [w for w in existing_weeks if w.status != WeekStatus.ARCHIVED]
        return refresh_week_states(weeks, self.today)

    def _has_any_primary(self) -> bool:
        return any(count > 0 for count in self.counts.values())

    def _build_batch(
        self,
        batch_id: str,
        starts: Sequence[date],
        state: RotationState,
        *,
        carried: List[WeekPlan],
        superseded: List[WeekPlan],
    ) -> MultiWeekBatch:
        weeks = [
            self.assembler.assemble(start, state, batch_id, today=self.today)
            for start in sorted(starts)
        ]
        resets = state.drain_resets()
        for reset in resets:
            logger.info(
                "Reinicio de ciclo (%s) para usuario %s: %s -> %s (%s favoritos)",
                reset.course_type.value, self.user_id,
                reset.old_cycle_number, reset.new_cycle_number, reset.favorite_count,
            )

        return MultiWeekBatch(
            generation_batch_id=batch_id,
            user_id=self.user_id,
            weeks=weeks,
            rotation_state=state.copy(),
            carried_weeks=sorted(carried, key=lambda w: w.start_date),
            superseded_weeks=[_archived(w) for w in superseded],
            cycle_resets=resets,
            seed=self.seed,
        )

    # ------------------------------------------------------------
    # Operaciones
    # ------------------------------------------------------------

    def generate(
        self,
        state: RotationState,
        existing_weeks: Iterable[WeekPlan] = (),
        *,
        allow_partial: bool = False,
    ) -> MultiWeekBatch:
        """
        Lote nuevo a partir del lunes siguiente a la semana actual.

        Las semanas bloqueadas existentes se mantienen; las futuras se
        reemplazan (y se devuelven archivadas).

        Raises:
            InsufficientRecipes: `max_weeks < 1` y no corresponde un plan
                parcial (no hay plan activo ni `allow_partial`, o no hay
                ningún favorito de entrada/principal/postre).
        """
        batch_id = str(uuid.uuid4())
        active = self._active(existing_weeks)
        carried = [w for w in active if w.is_locked]
        superseded = [w for w in active if not w.is_locked]

        weeks_count = self.max_weeks
        if self.max_weeks < 1:
            has_active_plan = any(w.status != WeekStatus.PAST for w in active)
            if not ((has_active_plan or allow_partial) and self._has_any_primary()):
                raise InsufficientRecipes(
                    user_id=self.user_id, counts=self.counts, batch_id=batch_id
                )
            weeks_count = 1
            logger.info(
                "Plan parcial para usuario %s: faltan favoritos de %s",
                self.user_id,
                ", ".join(c for c, n in sorted(self.counts.items()) if n < 1),
            )

        target = coverage_target(self.today, self.rolling_weeks_minimum)
        if weeks_count < target:
            logger.info(
                "Plan de %s semana(s) para usuario %s no llega a las %s del horizonte (favoritos: %s)",
                weeks_count, self.user_id, target, self.counts,
            )

        first = next_week_start(self.today)
        starts = [first + timedelta(weeks=i) for i in range(weeks_count)]
        return self._build_batch(batch_id, starts, state, carried=carried, superseded=superseded)

    def regenerate_week(
        self,
        state: RotationState,
        existing_weeks: Iterable[WeekPlan],
        week_start: date,
    ) -> MultiWeekBatch:
        """
        Reemplaza exactamente una semana futura no bloqueada.

        Raises:
            InvalidWeekStart: `week_start` no es lunes o no existe en el plan.
            WeekLocked: la semana está en curso o ya pasó.
        """
        batch_id = str(uuid.uuid4())
        if not is_monday(week_start):
            raise InvalidWeekStart(
                f"La semana debe empezar en lunes (recibido {week_start.isoformat()})",
                user_id=self.user_id,
                batch_id=batch_id,
                week_start=week_start,
            )
        if is_locked_week(week_start, self.today):
            raise WeekLocked(
                f"La semana del {week_start.isoformat()} está bloqueada y no puede regenerarse",
                user_id=self.user_id,
                batch_id=batch_id,
                week_start=week_start,
            )

        active = self._active(existing_weeks)
        target = next((w for w in active if w.start_date == week_start), None)
        if target is None:
            raise InvalidWeekStart(
                f"No hay una semana del {week_start.isoformat()} en el plan actual",
                user_id=self.user_id,
                batch_id=batch_id,
                week_start=week_start,
            )
        if not self._has_any_primary():
            raise InsufficientRecipes(user_id=self.user_id, counts=self.counts, batch_id=batch_id)

        carried = [w for w in active if w is not target]
        return self._build_batch(batch_id, [week_start], state, carried=carried, superseded=[target])

    def regenerate_all_future(
        self,
        state: RotationState,
        existing_weeks: Iterable[WeekPlan],
        *,
        allow_partial: bool = False,
    ) -> MultiWeekBatch:
        """
        Reemplaza todas las semanas futuras no bloqueadas en un solo lote.

        Sin semanas futuras en el plan se comporta como `generate`.
        """
        active = self._active(existing_weeks)
        future = [w for w in active if not w.is_locked]
        if not future:
            return self.generate(state, active, allow_partial=allow_partial)

        batch_id = str(uuid.uuid4())
        if not self._has_any_primary():
            raise InsufficientRecipes(user_id=self.user_id, counts=self.counts, batch_id=batch_id)

        carried = [w for w in active if w.is_locked]
        starts = [w.start_date for w in future]
        return self._build_batch(batch_id, starts, state, carried=carried, superseded=future)
