"""
Cálculos de calendario para semanas de plan (lunes a domingo).
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date, timedelta
from typing import Iterable, List

from .domain_models import WeekPlan, WeekStatus


def week_start_of(day: date) -> date:
    """Lunes de la semana que contiene `day`."""
    return day - timedelta(days=day.weekday())


def week_end_of(day: date) -> date:
    """Domingo de la semana que contiene `day`."""
    return week_start_of(day) + timedelta(days=6)


def next_week_start(today: date) -> date:
    """Lunes siguiente a la semana actual (si hoy es lunes, +7 días)."""
    return week_start_of(today) + timedelta(days=7)


def is_monday(day: date) -> bool:
    return day.weekday() == 0


def future_mondays_in_month(today: date) -> int:
    """Cantidad de lunes posteriores a la semana actual dentro del mes de `today`."""
    count = 0
    monday = next_week_start(today)
    while monday.month == today.month and monday.year == today.year:
        count += 1
        monday += timedelta(days=7)
    return count


def coverage_target(today: date, rolling_minimum: int = 4) -> int:
    """
    Semanas que un plan debería cubrir desde el lunes siguiente.

    Lo que resta del mes y, si el mes es corto, se extiende al siguiente para
    mantener un mínimo rodante. Solo informa: el lote siempre genera
    `max_weeks` semanas.
    """
    return max(rolling_minimum, future_mondays_in_month(today))


def week_status(start_date: date, today: date) -> WeekStatus:
    current = week_start_of(today)
    if start_date == current:
        return WeekStatus.CURRENT
    if start_date < current:
        return WeekStatus.PAST
    return WeekStatus.FUTURE


def is_locked_week(start_date: date, today: date) -> bool:
    """Bloqueada = empieza antes o dentro de la semana actual."""
    return start_date <= week_end_of(today)


def refresh_week_states(weeks: Iterable[WeekPlan], today: date) -> List[WeekPlan]:
    """
    Recalcula `status` / `is_locked` a medida que avanza el calendario.

    Las semanas archivadas quedan como están. Devuelve copias, ordenadas
    por fecha de inicio.
    """
    refreshed: List[WeekPlan] = []
    for week in weeks:
        if week.status == WeekStatus.ARCHIVED:
            refreshed.append(week)
            continue
        status = week_status(week.start_date, today)
        locked = is_locked_week(week.start_date, today)
        if status != week.status or locked != week.is_locked:
            week = replace(week, status=status, is_locked=locked)
        refreshed.append(week)
    return sorted(refreshed, key=lambda w: w.start_date)
