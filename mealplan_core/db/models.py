"""
Modelos ORM de la planificación de comidas.

Tablas:
- recipes: catálogo de recetas por usuario (con marca de favorito)
- user_preferences: una fila por usuario
- rotation_states: documento JSON del estado de rotación por usuario
- week_plans / meal_assignments: semanas generadas y sus 21 slots

Las colecciones (etiquetas, ingredientes, categorías) se guardan como JSON en
columnas Text.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from sqlalchemy import Boolean, Date, DateTime, Float, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .database import Base


class Recipe(Base):
    __tablename__ = "recipes"
    __table_args__ = (UniqueConstraint("user_id", "recipe_id", name="uq_recipes_user_recipe"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), index=True)
    recipe_id: Mapped[str] = mapped_column(String(64))

    name: Mapped[str] = mapped_column(String(200), default="")
    course_type: Mapped[str] = mapped_column(String(20))  # appetizer|main_course|dessert|accompaniment
    cuisine: Mapped[str] = mapped_column(String(100), default="")
    complexity: Mapped[str] = mapped_column(String(20), default="moderate")  # simple|moderate|complex

    prep_time_min: Mapped[int] = mapped_column(Integer, default=0)
    cook_time_min: Mapped[int] = mapped_column(Integer, default=0)
    advance_prep_hours: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    dietary_tags_json: Mapped[str] = mapped_column(Text, default="[]")
    ingredients_json: Mapped[str] = mapped_column(Text, default="[]")

    # Solo principales
    accepts_accompaniment: Mapped[bool] = mapped_column(Boolean, default=False)
    preferred_accompaniments_json: Mapped[str] = mapped_column(Text, default="[]")
    # Solo acompañamientos
    accompaniment_category: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    is_favorite: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class UserPreference(Base):
    __tablename__ = "user_preferences"

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    max_prep_time_weeknight: Mapped[int] = mapped_column(Integer, default=30)
    max_prep_time_weekend: Mapped[int] = mapped_column(Integer, default=90)
    skill_level: Mapped[str] = mapped_column(String(20), default="intermediate")
    avoid_consecutive_complex: Mapped[bool] = mapped_column(Boolean, default=True)
    cuisine_variety_weight: Mapped[float] = mapped_column(Float, default=0.7)
    dietary_restrictions_json: Mapped[str] = mapped_column(Text, default="[]")
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class RotationStateDocument(Base):
    """
    Estado de rotación serializado (ver `RotationState.to_dict`).

    Se guarda como documento para poder validarlo completo al cargarlo.
    """
    __tablename__ = "rotation_states"

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    state_json: Mapped[str] = mapped_column(Text)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class WeekPlan(Base):
    __tablename__ = "week_plans"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), index=True)
    start_date: Mapped[date] = mapped_column(Date, index=True)
    end_date: Mapped[date] = mapped_column(Date)
    status: Mapped[str] = mapped_column(String(20), default="future")  # future|current|past|archived
    is_locked: Mapped[bool] = mapped_column(Boolean, default=False)
    generation_batch_id: Mapped[str] = mapped_column(String(36), index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    archived_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    assignments: Mapped[list["MealAssignment"]] = relationship(
        back_populates="week_plan",
        cascade="all, delete-orphan",
        order_by="MealAssignment.position",
    )


class MealAssignment(Base):
    __tablename__ = "meal_assignments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    week_plan_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("week_plans.id", ondelete="CASCADE"), index=True
    )
    position: Mapped[int] = mapped_column(Integer)  # orden día × curso (0..20)

    day: Mapped[date] = mapped_column("date", Date)
    course_type: Mapped[str] = mapped_column(String(20))
    recipe_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    accompaniment_recipe_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    reasoning: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    prep_required: Mapped[bool] = mapped_column(Boolean, default=False)

    week_plan: Mapped["WeekPlan"] = relationship(back_populates="assignments")
