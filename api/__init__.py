"""
API HTTP para mealplan-core.

Esta capa expone endpoints REST que usan el core interno (mealplan_core.engine)
para generar, regenerar y consultar planes de comidas.

La API está diseñada para ser consumida por:
- UI web
- Clientes externos
- Jobs programados (regeneración semanal)
"""
