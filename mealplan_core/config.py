# mealplan_core/config.py
from dataclasses import dataclass, field
from functools import lru_cache
import os
from typing import List

from dotenv import load_dotenv

"""
mealplan_core.config
====================

Gestión centralizada de configuración de la aplicación.

Este módulo define:
- La estructura de configuración (`Settings`)
- El mecanismo para cargar variables desde entorno (.env)
- Un acceso único y cacheado a la configuración (`get_settings`)

Objetivos de diseño
-------------------
1. **Fuente única de verdad**
   Toda la app obtiene configuración solo a través de `get_settings()`.

2. **Inmutabilidad práctica**
   `Settings` se crea una sola vez y luego se reutiliza (cache LRU).

3. **Separación de responsabilidades**
   - Este módulo NO decide lógica de planificación
   - Solo expone valores ya resueltos desde el entorno

Convenciones
------------
- Las variables de entorno se cargan desde un archivo `.env` si existe.
- Los defaults están pensados para desarrollo local.
- El algoritmo recibe los límites (tope de semanas, mínimo rodante) como
  parámetros explícitos; acá solo se resuelven sus valores por defecto.
"""

# Cargar variables de entorno desde .env (si existe)
load_dotenv()


def _split_csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass
class Settings:
    """
    Contenedor tipado de configuración global de la aplicación.

    Attributes
    ----------
    database_url:
        URL SQLAlchemy para la persistencia (recetas, preferencias, rotación, semanas).
    max_weeks_cap:
        Tope absoluto de semanas por lote de generación.
    rolling_weeks_minimum:
        Mínimo rodante de semanas que el plan debería cubrir cuando el mes en
        curso tiene menos semanas restantes. Solo se usa para avisar en logs
        cuando los favoritos no alcanzan; el lote no se recorta.
    generation_time_budget_s:
        Presupuesto de tiempo por generación. Solo se usa para monitoreo
        (warning en logs), nunca corta la ejecución.
    log_level:
        Nivel de logging para los puntos de entrada (API, CLI).
    environment:
        Nombre del ambiente ("local", "staging", "production").
    cors_origins:
        Orígenes permitidos por la API HTTP.
    """

    database_url: str = "sqlite:///data/mealplan_core.sqlite"

    # Algoritmo
    max_weeks_cap: int = 5
    rolling_weeks_minimum: int = 4
    generation_time_budget_s: float = 5.0

    # Runtime
    log_level: str = "INFO"
    environment: str = "local"
    cors_origins: List[str] = field(default_factory=lambda: ["http://localhost:3000"])


@lru_cache
def get_settings() -> Settings:
    """
    Devuelve una instancia única y cacheada de `Settings`.

    Variables de entorno utilizadas
    -------------------------------
    - DATABASE_URL (default: "sqlite:///data/mealplan_core.sqlite")
    - MEALPLAN_MAX_WEEKS (default: 5)
    - MEALPLAN_ROLLING_WEEKS (default: 4)
    - MEALPLAN_TIME_BUDGET_S (default: 5.0)
    - LOG_LEVEL (default: "INFO")
    - ENVIRONMENT (default: "local")
    - CORS_ORIGINS (lista separada por comas)

    Notas
    -----
    - Valores numéricos inválidos fallan acá con `ValueError`: es preferible
      un error al arrancar que un plan generado con límites incorrectos.
    """
    return Settings(
        database_url=os.getenv("DATABASE_URL", "sqlite:///data/mealplan_core.sqlite"),
        max_weeks_cap=int(os.getenv("MEALPLAN_MAX_WEEKS", "5")),
        rolling_weeks_minimum=int(os.getenv("MEALPLAN_ROLLING_WEEKS", "4")),
        generation_time_budget_s=float(os.getenv("MEALPLAN_TIME_BUDGET_S", "5.0")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        environment=os.getenv("ENVIRONMENT", "local"),
        cors_origins=_split_csv(
            os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:3001")
        ),
    )
