"""Modelos y entidades del dominio.

Por qué:
- Aquí viven las estructuras de datos puras (Pydantic v2 / dataclasses) y los errores.
- El dominio no conoce HTTP, CLI, ni almacenamiento: solo conceptos del catálogo.
"""
