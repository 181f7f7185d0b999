"""Rutas de la API."""

from . import meal_plans

__all__ = ["meal_plans"]
