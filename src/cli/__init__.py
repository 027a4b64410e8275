"""Front-end de línea de comandos (Typer + Rich)."""
