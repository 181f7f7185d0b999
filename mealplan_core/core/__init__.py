"""
Contratos genéricos del motor de planificación.

Este paquete contiene las interfaces (Protocols) que deben implementar los
colaboradores externos para que el motor pueda trabajar con cualquier backend:
- Catálogo de recetas favoritas
- Preferencias del usuario
- Persistencia del estado de rotación
- Persistencia de semanas generadas
"""
