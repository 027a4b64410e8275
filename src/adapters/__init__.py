"""Adaptadores de I/O: backend REST (httpx) y almacenamiento local."""
