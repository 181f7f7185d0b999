"""
API HTTP principal para mealplan-core.

Esta aplicación FastAPI expone endpoints REST que usan el core interno
(mealplan_core.engine) para generar y regenerar planes de comidas.

Uso:
    uvicorn api.main:app --reload --port 8000
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mealplan_core.config import get_settings

from .routes import meal_plans

settings = get_settings()

# Configurar logging según ambiente
log_level = getattr(logging, settings.log_level, logging.INFO)
logging.basicConfig(
    level=log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)
logger.info(f"🚀 Iniciando API en ambiente: {settings.environment}")

app = FastAPI(
    title="Meal Plan Core API",
    description="API de rotación de recetas y planes de comidas multi-semana",
    version="0.1.0",
)

logger.info(f"🌐 CORS origins configurados: {settings.cors_origins}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Registrar rutas
app.include_router(meal_plans.router)


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "mealplan-core-api"}


@app.get("/health")
async def health():
    """Health check detallado."""
    return {
        "status": "ok",
        "service": "mealplan-core-api",
        "version": "0.1.0",
        "environment": settings.environment,
    }
