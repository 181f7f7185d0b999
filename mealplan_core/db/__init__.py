"""
Persistencia SQLAlchemy del motor de planificación.

- `database`: engine, sesiones y `Base` declarativa.
- `models`: tablas (recetas, preferencias, rotación, semanas, asignaciones).
- `helpers`: funciones que reciben una `Session` y hablan en tipos de dominio.
- `stores`: adaptador a los Protocols de `core.abstractions`.
"""
