"""
mealplan_core.rotation
======================

Estado de rotación de recetas por usuario.

`RotationState` es la única entidad mutable del motor. Registra qué recetas
ya se usaron en el ciclo actual, por tipo de curso:

- Platos principales: únicos hasta agotar todos los favoritos; al agotarse se
  vacía el set y se incrementa `cycle_number`.
- Entradas y postres: misma regla de agotamiento, pero cada uno con su propio
  set y su propio contador de ciclo (no dependen del ciclo de principales).
- Acompañamientos: NO se registran (pueden repetirse libremente).
- `cuisine_usage_count`: conteo acumulado por cocina (nunca se resetea).
- `last_complex_meal_date`: último día con un principal complejo.

Persistencia
------------
El estado se serializa como documento JSON (`to_dict` / `to_json`). Al
cargarlo se valida con un schema pydantic; cualquier error se reporta como
`InvalidRotationState` indicando usuario y campo. Nunca se reemplaza en
silencio por un estado por defecto.
"""

from __future__ import annotations

import copy
import json
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Any, Collection, Dict, List, Optional, Set

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, ValidationError

from .domain_models import CourseType, CycleReset
from .errors import InvalidRotationState

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class RotationState:
    cycle_number: int = 1
    cycle_started_at: datetime = field(default_factory=_utcnow)
    used_main_course_ids: Set[str] = field(default_factory=set)
    used_appetizer_ids: Set[str] = field(default_factory=set)
    used_dessert_ids: Set[str] = field(default_factory=set)
    cuisine_usage_count: Dict[str, int] = field(default_factory=dict)
    last_complex_meal_date: Optional[date] = None
    appetizer_cycle_number: int = 1
    dessert_cycle_number: int = 1

    # Señales emitidas desde que el estado se cargó (no se persisten)
    pending_resets: List[CycleReset] = field(default_factory=list, compare=False, repr=False)

    # ------------------------------------------------------------
    # Used-sets por curso
    # ------------------------------------------------------------

    def used_ids(self, course_type: CourseType) -> Set[str]:
        if course_type == CourseType.MAIN_COURSE:
            return self.used_main_course_ids
        if course_type == CourseType.APPETIZER:
            return self.used_appetizer_ids
        if course_type == CourseType.DESSERT:
            return self.used_dessert_ids
        raise ValueError(f"El curso '{course_type.value}' no participa de la rotación")

    def cycle_for(self, course_type: CourseType) -> int:
        if course_type == CourseType.MAIN_COURSE:
            return self.cycle_number
        if course_type == CourseType.APPETIZER:
            return self.appetizer_cycle_number
        if course_type == CourseType.DESSERT:
            return self.dessert_cycle_number
        raise ValueError(f"El curso '{course_type.value}' no participa de la rotación")

    def is_used(self, course_type: CourseType, recipe_id: str) -> bool:
        return recipe_id in self.used_ids(course_type)

    def mark_used(self, course_type: CourseType, recipe_id: str) -> None:
        self.used_ids(course_type).add(recipe_id)

    def is_exhausted(self, course_type: CourseType, favorite_ids: Collection[str]) -> bool:
        """
        True si el used-set cubre todos los favoritos actuales del curso.

        Ids usados que ya no son favoritos no cuentan.
        """
        if not favorite_ids:
            return False
        used = self.used_ids(course_type)
        return all(fid in used for fid in favorite_ids)

    def reset_course(
        self,
        course_type: CourseType,
        *,
        favorite_count: int,
        on: date,
    ) -> CycleReset:
        """
        Vacía el used-set del curso y avanza su contador de ciclo.

        Solo afecta al curso indicado. Devuelve (y acumula en
        `pending_resets`) la señal de reinicio.
        """
        old = self.cycle_for(course_type)
        new = old + 1
        self.used_ids(course_type).clear()
        if course_type == CourseType.MAIN_COURSE:
            self.cycle_number = new
            self.cycle_started_at = _utcnow()
        elif course_type == CourseType.APPETIZER:
            self.appetizer_cycle_number = new
        else:
            self.dessert_cycle_number = new

        signal = CycleReset(
            course_type=course_type,
            old_cycle_number=old,
            new_cycle_number=new,
            favorite_count=favorite_count,
            reset_on=on,
        )
        self.pending_resets.append(signal)
        logger.debug(
            "Reinicio de ciclo %s: %s -> %s (%s favoritos)",
            course_type.value, old, new, favorite_count,
        )
        return signal

    def reset_if_exhausted(
        self,
        course_type: CourseType,
        favorite_ids: Collection[str],
        *,
        on: date,
    ) -> Optional[CycleReset]:
        if self.is_exhausted(course_type, favorite_ids):
            return self.reset_course(course_type, favorite_count=len(favorite_ids), on=on)
        return None

    def drain_resets(self) -> List[CycleReset]:
        resets, self.pending_resets = self.pending_resets, []
        return resets

    # ------------------------------------------------------------
    # Variedad y complejidad
    # ------------------------------------------------------------

    def cuisine_usage(self, cuisine: str) -> int:
        return self.cuisine_usage_count.get(cuisine, 0)

    def increment_cuisine_usage(self, cuisine: str) -> None:
        self.cuisine_usage_count[cuisine] = self.cuisine_usage(cuisine) + 1

    def record_complex_meal(self, day: date) -> None:
        self.last_complex_meal_date = day

    def had_complex_meal_day_before(self, day: date) -> bool:
        return self.last_complex_meal_date == day - timedelta(days=1)

    # ------------------------------------------------------------
    # Copia y serialización
    # ------------------------------------------------------------

    def copy(self) -> "RotationState":
        return copy.deepcopy(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cycle_number": self.cycle_number,
            "cycle_started_at": self.cycle_started_at.isoformat(),
            "used_main_course_ids": sorted(self.used_main_course_ids),
            "used_appetizer_ids": sorted(self.used_appetizer_ids),
            "used_dessert_ids": sorted(self.used_dessert_ids),
            "cuisine_usage_count": dict(sorted(self.cuisine_usage_count.items())),
            "last_complex_meal_date": (
                self.last_complex_meal_date.isoformat() if self.last_complex_meal_date else None
            ),
            "appetizer_cycle_number": self.appetizer_cycle_number,
            "dessert_cycle_number": self.dessert_cycle_number,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)

    @classmethod
    def from_dict(cls, data: Any, *, user_id: Optional[str] = None) -> "RotationState":
        """
        Valida y construye un estado desde su documento persistido.

        Raises:
            InvalidRotationState: si el documento no es un objeto o algún campo
                no valida. `field` indica el primer campo con error.
        """
        if not isinstance(data, dict):
            raise InvalidRotationState(
                user_id=user_id, field="<document>", reason="se esperaba un objeto JSON"
            )
        try:
            parsed = _RotationStateSchema.model_validate(data)
        except ValidationError as e:
            first = e.errors()[0]
            field_name = ".".join(str(part) for part in first.get("loc", ())) or "<document>"
            raise InvalidRotationState(
                user_id=user_id, field=field_name, reason=first.get("msg", "")
            ) from e

        return cls(
            cycle_number=parsed.cycle_number,
            cycle_started_at=parsed.cycle_started_at or _utcnow(),
            used_main_course_ids=set(parsed.used_main_course_ids),
            used_appetizer_ids=set(parsed.used_appetizer_ids),
            used_dessert_ids=set(parsed.used_dessert_ids),
            cuisine_usage_count=dict(parsed.cuisine_usage_count),
            last_complex_meal_date=parsed.last_complex_meal_date,
            appetizer_cycle_number=parsed.appetizer_cycle_number,
            dessert_cycle_number=parsed.dessert_cycle_number,
        )

    @classmethod
    def from_json(cls, payload: str, *, user_id: Optional[str] = None) -> "RotationState":
        try:
            data = json.loads(payload)
        except (TypeError, ValueError) as e:
            raise InvalidRotationState(
                user_id=user_id, field="<document>", reason="JSON mal formado"
            ) from e
        return cls.from_dict(data, user_id=user_id)


class _RotationStateSchema(BaseModel):
    """Schema de validación del documento persistido."""

    model_config = ConfigDict(extra="ignore")

    cycle_number: int = Field(default=1, ge=1)
    cycle_started_at: Optional[datetime] = None
    used_main_course_ids: List[str] = Field(default_factory=list)
    used_appetizer_ids: List[str] = Field(default_factory=list)
    used_dessert_ids: List[str] = Field(default_factory=list)
    cuisine_usage_count: Dict[str, NonNegativeInt] = Field(default_factory=dict)
    last_complex_meal_date: Optional[date] = None
    appetizer_cycle_number: int = Field(default=1, ge=1)
    dessert_cycle_number: int = Field(default=1, ge=1)
