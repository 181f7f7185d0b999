"""
mealplan_core
=============

Motor de rotación de recetas y generación de planes de comidas multi-semana.

El paquete se divide en:
- Núcleo puro (sin I/O): `domain_models`, `rotation`, `filters`, `selection`,
  `week_assembler`, `orchestrator`.
- Servicio con lock por usuario: `engine`.
- Adaptadores de persistencia: `db` (SQLAlchemy) y `stores` (memoria).
"""
