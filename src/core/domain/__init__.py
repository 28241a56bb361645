"""Modelos del dominio Enso.

Por qué:
- DTOs estrictos (Pydantic v2) para cada respuesta del API y el builder de bundles.
- El dominio no conoce HTTP ni CLI: solo conceptos del API.
"""
