from __future__ import annotations

"""
mealplan_core.domain_models
===========================

Modelos de dominio (dataclasses) usados a lo largo del motor de planificación.

Objetivo
--------
Este módulo define las estructuras de datos "neutras" del sistema:

- Recetas del catálogo (`Recipe`) y sus enumeraciones (curso, cocina, etiquetas
  dietarias, categoría de acompañamiento)
- Restricciones dietarias del usuario (`DietaryRestriction`)
- Preferencias del usuario (`UserPreferences`)
- Resultado del algoritmo: asignaciones (`MealAssignment`), semanas
  (`WeekPlan`) y lotes multi-semana (`MultiWeekBatch`)
- Señal de reinicio de ciclo de rotación (`CycleReset`)

Principios de diseño
--------------------
- Recetas, preferencias, asignaciones y semanas son inmutables (`frozen`):
  el algoritmo solo lee snapshots y la regeneración reemplaza semanas, no las muta.
- El único estado mutable es `RotationState` (ver `rotation.py`).
- Este módulo NO habla con DB ni hace IO.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, FrozenSet, Iterable, List, Optional, Tuple

from .complexity import Complexity, calculate_complexity

if TYPE_CHECKING:
    from .rotation import RotationState


# ============================================================
# Enumeraciones
# ============================================================

class CourseType(str, Enum):
    APPETIZER = "appetizer"
    MAIN_COURSE = "main_course"
    DESSERT = "dessert"
    ACCOMPANIMENT = "accompaniment"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ")


PRIMARY_COURSES: Tuple[CourseType, ...] = (
    CourseType.APPETIZER,
    CourseType.MAIN_COURSE,
    CourseType.DESSERT,
)
"""Orden fijo de los cursos dentro de un día."""


class Cuisine(str, Enum):
    ITALIAN = "italian"
    INDIAN = "indian"
    MEXICAN = "mexican"
    CHINESE = "chinese"
    JAPANESE = "japanese"
    FRENCH = "french"
    AMERICAN = "american"
    MEDITERRANEAN = "mediterranean"
    THAI = "thai"
    KOREAN = "korean"
    VIETNAMESE = "vietnamese"
    GREEK = "greek"
    SPANISH = "spanish"
    CARIBBEAN = "caribbean"


CUSTOM_CUISINE_PREFIX = "custom:"


def cuisine_key(value: Any) -> str:
    """
    Normaliza una cocina a una clave estable para el conteo de variedad.

    - Cocinas conocidas -> valor del enum ("Italian" -> "italian")
    - Texto libre -> "custom:<texto en minúsculas>"
    - Una clave ya normalizada se devuelve tal cual.
    """
    if isinstance(value, Cuisine):
        return value.value
    text = " ".join(str(value or "").split()).lower()
    if text.startswith(CUSTOM_CUISINE_PREFIX):
        return text
    try:
        return Cuisine(text.replace(" ", "_").replace("-", "_")).value
    except ValueError:
        return f"{CUSTOM_CUISINE_PREFIX}{text or 'unspecified'}"


def cuisine_label(key: str) -> str:
    if key.startswith(CUSTOM_CUISINE_PREFIX):
        return key[len(CUSTOM_CUISINE_PREFIX):]
    return key.replace("_", " ").title()


class DietaryTag(str, Enum):
    VEGETARIAN = "vegetarian"
    VEGAN = "vegan"
    GLUTEN_FREE = "gluten_free"
    DAIRY_FREE = "dairy_free"
    NUT_FREE = "nut_free"
    HALAL = "halal"
    KOSHER = "kosher"
    LOW_CARB = "low_carb"

    @classmethod
    def parse(cls, value: str) -> "DietaryTag":
        return cls(_slug(value))


class AccompanimentCategory(str, Enum):
    PASTA = "pasta"
    RICE = "rice"
    FRIES = "fries"
    SALAD = "salad"
    BREAD = "bread"
    VEGETABLE = "vegetable"
    OTHER = "other"


class SkillLevel(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class WeekStatus(str, Enum):
    FUTURE = "future"
    CURRENT = "current"
    PAST = "past"
    ARCHIVED = "archived"


def _slug(value: str) -> str:
    return "_".join(str(value).strip().lower().replace("-", " ").split())


# ============================================================
# Restricciones dietarias
# ============================================================

@dataclass(frozen=True)
class DietaryRestriction:
    """
    Restricción dietaria del usuario.

    Es un conjunto cerrado de variantes:
    - `tag` definido: restricción estándar; la receta debe tener esa etiqueta.
    - `custom_text` definido: restricción libre; la receta no puede mencionar
      ese texto en sus ingredientes (comparación sin distinguir mayúsculas).
    """

    tag: Optional[DietaryTag] = None
    custom_text: Optional[str] = None

    def __post_init__(self) -> None:
        if (self.tag is None) == (self.custom_text is None):
            raise ValueError("DietaryRestriction requiere exactamente uno de: tag, custom_text")
        if self.custom_text is not None and not self.custom_text.strip():
            raise ValueError("Una restricción personalizada no puede estar vacía")

    @classmethod
    def standard(cls, tag: DietaryTag) -> "DietaryRestriction":
        return cls(tag=tag)

    @classmethod
    def custom(cls, text: str) -> "DietaryRestriction":
        return cls(custom_text=text.strip())

    @classmethod
    def parse(cls, value: str) -> "DietaryRestriction":
        """
        "vegetarian", "Gluten-Free" -> estándar; "custom:maní" o cualquier
        texto no reconocido -> personalizada.
        """
        raw = str(value).strip()
        if raw.lower().startswith("custom:"):
            return cls.custom(raw[len("custom:"):])
        try:
            return cls.standard(DietaryTag.parse(raw))
        except ValueError:
            return cls.custom(raw)

    @property
    def is_custom(self) -> bool:
        return self.custom_text is not None

    def to_str(self) -> str:
        if self.tag is not None:
            return self.tag.value
        return f"custom:{self.custom_text}"


# ============================================================
# Recetas y preferencias
# ============================================================

@dataclass(frozen=True)
class Recipe:
    """
    Entrada inmutable del catálogo de recetas favoritas.

    Attributes:
        id: Identificador estable de la receta.
        name: Nombre humano (solo para presentación / logs).
        course_type: Tipo de curso.
        cuisine: Clave normalizada de cocina (ver `cuisine_key`).
        dietary_tags: Etiquetas dietarias que la receta cumple.
        complexity: Nivel de complejidad precalculado.
        prep_time_min / cook_time_min: Tiempos en minutos (0 si se desconocen).
        advance_prep_hours: Horas de preparación anticipada (None si no requiere).
        ingredients: Texto de ingredientes (para restricciones personalizadas).
        accepts_accompaniment: Solo platos principales.
        preferred_accompaniments: Solo platos principales; vacío = cualquiera.
        accompaniment_category: Solo acompañamientos.
    """

    id: str
    course_type: CourseType
    name: str = ""
    cuisine: str = f"{CUSTOM_CUISINE_PREFIX}unspecified"
    dietary_tags: FrozenSet[DietaryTag] = frozenset()
    complexity: Complexity = Complexity.MODERATE
    prep_time_min: int = 0
    cook_time_min: int = 0
    advance_prep_hours: Optional[int] = None
    ingredients: Tuple[str, ...] = ()
    accepts_accompaniment: bool = False
    preferred_accompaniments: FrozenSet[AccompanimentCategory] = frozenset()
    accompaniment_category: Optional[AccompanimentCategory] = None

    @property
    def total_time_min(self) -> int:
        return (self.prep_time_min or 0) + (self.cook_time_min or 0)

    @property
    def requires_advance_prep(self) -> bool:
        return bool(self.advance_prep_hours and self.advance_prep_hours > 0)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Recipe":
        """
        Construye una receta desde un dict (JSON del catálogo o fila de DB).

        Si `complexity` no viene, se calcula con `ingredients_count` /
        `steps_count` (o el largo de `ingredients` / `instructions`).
        """
        ingredients = tuple(str(i) for i in data.get("ingredients", []) or [])
        advance = data.get("advance_prep_hours")
        advance_hours = int(advance) if advance not in (None, "") else None

        raw_complexity = data.get("complexity")
        if raw_complexity:
            complexity = Complexity.parse(raw_complexity)
        else:
            complexity = calculate_complexity(
                int(data.get("ingredients_count", len(ingredients))),
                int(data.get("steps_count", len(data.get("instructions", []) or []))),
                advance_hours,
            )

        category = data.get("accompaniment_category")
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", "")),
            course_type=CourseType(_slug(data["course_type"])),
            cuisine=cuisine_key(data.get("cuisine")),
            dietary_tags=frozenset(DietaryTag.parse(t) for t in data.get("dietary_tags", []) or []),
            complexity=complexity,
            prep_time_min=int(data.get("prep_time_min") or 0),
            cook_time_min=int(data.get("cook_time_min") or 0),
            advance_prep_hours=advance_hours,
            ingredients=ingredients,
            accepts_accompaniment=bool(data.get("accepts_accompaniment", False)),
            preferred_accompaniments=frozenset(
                AccompanimentCategory(_slug(c)) for c in data.get("preferred_accompaniments", []) or []
            ),
            accompaniment_category=AccompanimentCategory(_slug(category)) if category else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "course_type": self.course_type.value,
            "cuisine": self.cuisine,
            "dietary_tags": sorted(t.value for t in self.dietary_tags),
            "complexity": self.complexity.value,
            "prep_time_min": self.prep_time_min,
            "cook_time_min": self.cook_time_min,
            "advance_prep_hours": self.advance_prep_hours,
            "ingredients": list(self.ingredients),
            "accepts_accompaniment": self.accepts_accompaniment,
            "preferred_accompaniments": sorted(c.value for c in self.preferred_accompaniments),
            "accompaniment_category": (
                self.accompaniment_category.value if self.accompaniment_category else None
            ),
        }


@dataclass(frozen=True)
class UserPreferences:
    """
    Preferencias del usuario para una llamada de generación (inmutables
    durante toda la llamada).
    """

    max_prep_time_weeknight: int = 30
    max_prep_time_weekend: int = 90
    skill_level: SkillLevel = SkillLevel.INTERMEDIATE
    avoid_consecutive_complex: bool = True
    cuisine_variety_weight: float = 0.7
    dietary_restrictions: FrozenSet[DietaryRestriction] = frozenset()

    def __post_init__(self) -> None:
        if not 0.0 <= self.cuisine_variety_weight <= 1.0:
            raise ValueError("cuisine_variety_weight debe estar entre 0 y 1")
        if self.max_prep_time_weeknight < 0 or self.max_prep_time_weekend < 0:
            raise ValueError("Los tiempos máximos de preparación no pueden ser negativos")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserPreferences":
        defaults = cls()
        return cls(
            max_prep_time_weeknight=int(data.get("max_prep_time_weeknight", defaults.max_prep_time_weeknight)),
            max_prep_time_weekend=int(data.get("max_prep_time_weekend", defaults.max_prep_time_weekend)),
            skill_level=SkillLevel(_slug(data.get("skill_level", defaults.skill_level.value))),
            avoid_consecutive_complex=bool(
                data.get("avoid_consecutive_complex", defaults.avoid_consecutive_complex)
            ),
            cuisine_variety_weight=float(data.get("cuisine_variety_weight", defaults.cuisine_variety_weight)),
            dietary_restrictions=frozenset(
                DietaryRestriction.parse(r) for r in data.get("dietary_restrictions", []) or []
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "max_prep_time_weeknight": self.max_prep_time_weeknight,
            "max_prep_time_weekend": self.max_prep_time_weekend,
            "skill_level": self.skill_level.value,
            "avoid_consecutive_complex": self.avoid_consecutive_complex,
            "cuisine_variety_weight": self.cuisine_variety_weight,
            "dietary_restrictions": sorted(r.to_str() for r in self.dietary_restrictions),
        }


# ============================================================
# Resultado del algoritmo
# ============================================================

@dataclass(frozen=True)
class CycleReset:
    """
    Señal de reinicio de ciclo: un used-set se vació por agotamiento.

    Se emite para auditoría/analytics; no cambia el flujo del algoritmo.
    """

    course_type: CourseType
    old_cycle_number: int
    new_cycle_number: int
    favorite_count: int
    reset_on: date


@dataclass(frozen=True)
class MealAssignment:
    """
    Un slot (día × curso) de una semana.

    `recipe_id=None` marca un slot vacío de forma explícita; en ese caso
    `reasoning` explica por qué quedó vacío.
    """

    date: date
    course_type: CourseType
    recipe_id: Optional[str] = None
    accompaniment_recipe_id: Optional[str] = None
    reasoning: Optional[str] = None
    prep_required: bool = False

    @property
    def is_empty(self) -> bool:
        return self.recipe_id is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "course_type": self.course_type.value,
            "recipe_id": self.recipe_id,
            "accompaniment_recipe_id": self.accompaniment_recipe_id,
            "reasoning": self.reasoning,
            "prep_required": self.prep_required,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MealAssignment":
        return cls(
            date=date.fromisoformat(data["date"]),
            course_type=CourseType(data["course_type"]),
            recipe_id=data.get("recipe_id"),
            accompaniment_recipe_id=data.get("accompaniment_recipe_id"),
            reasoning=data.get("reasoning"),
            prep_required=bool(data.get("prep_required", False)),
        )


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class WeekPlan:
    """
    Una semana (lunes a domingo) con sus 21 asignaciones.

    Las semanas bloqueadas (`is_locked`) nunca se regeneran; la regeneración
    produce semanas nuevas y archiva las reemplazadas.
    """

    id: str
    user_id: str
    start_date: date
    end_date: date
    status: WeekStatus
    is_locked: bool
    generation_batch_id: str
    assignments: Tuple[MealAssignment, ...]
    created_at: datetime = field(default_factory=_utcnow)

    def assignments_for(self, day: date) -> List[MealAssignment]:
        return [a for a in self.assignments if a.date == day]

    def assignment(self, day: date, course_type: CourseType) -> Optional[MealAssignment]:
        for a in self.assignments:
            if a.date == day and a.course_type == course_type:
                return a
        return None

    def recipe_ids(self) -> List[str]:
        """
        Ids de recetas asignadas (incluye acompañamientos), en orden de slot.

        Es la entrada del agregador de lista de compras.
        """
        ids: List[str] = []
        for a in self.assignments:
            if a.recipe_id is not None:
                ids.append(a.recipe_id)
            if a.accompaniment_recipe_id is not None:
                ids.append(a.accompaniment_recipe_id)
        return ids

    def course_recipe_ids(self, course_type: CourseType) -> List[str]:
        return [
            a.recipe_id
            for a in self.assignments
            if a.course_type == course_type and a.recipe_id is not None
        ]

    def empty_slots(self) -> List[MealAssignment]:
        return [a for a in self.assignments if a.is_empty]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "status": self.status.value,
            "is_locked": self.is_locked,
            "generation_batch_id": self.generation_batch_id,
            "created_at": self.created_at.isoformat(),
            "assignments": [a.to_dict() for a in self.assignments],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WeekPlan":
        start = date.fromisoformat(data["start_date"])
        return cls(
            id=str(data["id"]),
            user_id=str(data["user_id"]),
            start_date=start,
            end_date=date.fromisoformat(data["end_date"]) if data.get("end_date") else start + timedelta(days=6),
            status=WeekStatus(data["status"]),
            is_locked=bool(data["is_locked"]),
            generation_batch_id=str(data["generation_batch_id"]),
            assignments=tuple(MealAssignment.from_dict(a) for a in data.get("assignments", [])),
            created_at=datetime.fromisoformat(data["created_at"]) if data.get("created_at") else _utcnow(),
        )


@dataclass
class MultiWeekBatch:
    """
    Resultado de una llamada de generación/regeneración.

    Attributes:
        generation_batch_id: Id compartido por todas las semanas nuevas.
        user_id: Dueño del plan.
        weeks: Semanas nuevas, en orden ascendente de fecha.
        rotation_state: Snapshot del estado de rotación resultante (a persistir).
        carried_weeks: Semanas existentes que se mantienen sin cambios
            (bloqueadas, pasadas o no alcanzadas por una regeneración puntual).
        superseded_weeks: Semanas futuras reemplazadas, ya marcadas como archivadas.
        cycle_resets: Reinicios de ciclo ocurridos durante esta llamada.
        seed: Semilla usada para desempates y acompañamientos.
    """

    generation_batch_id: str
    user_id: str
    weeks: List[WeekPlan]
    rotation_state: "RotationState"
    carried_weeks: List[WeekPlan] = field(default_factory=list)
    superseded_weeks: List[WeekPlan] = field(default_factory=list)
    cycle_resets: List[CycleReset] = field(default_factory=list)
    seed: Optional[int] = None

    def all_weeks(self) -> List[WeekPlan]:
        """Semanas vigentes (mantenidas + nuevas) ordenadas por fecha."""
        return sorted([*self.carried_weeks, *self.weeks], key=lambda w: w.start_date)

    def week_starting(self, start: date) -> Optional[WeekPlan]:
        for week in self.all_weeks():
            if week.start_date == start:
                return week
        return None


def group_by_course(recipes: Iterable[Recipe]) -> Dict[CourseType, List[Recipe]]:
    """Agrupa recetas por tipo de curso (manteniendo el orden del catálogo)."""
    groups: Dict[CourseType, List[Recipe]] = {course: [] for course in CourseType}
    for recipe in recipes:
        groups[recipe.course_type].append(recipe)
    return groups
