"""CLI principal (Typer).

Cada comando abre un `AppContext`, restaura la sesión persistida y delega en
`InteractionController`. Las notificaciones del controlador se imprimen a
medida que se emiten.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import typer
from rich.console import Console

from cli.doctor import app as doctor_app
from cli.ui_components import (
    build_books_table,
    build_draft_panel,
    build_session_panel,
    print_banner,
    print_notification,
    render_empty,
)
from core.config import AppSettings, write_user_env_vars
from core.domain.models import BookId, BookRecord
from core.logging_setup import configure_logging
from core.services import ActionResult, InteractionController, open_context

app = typer.Typer(no_args_is_help=True, help="Biblioteca Nube: catálogo de libros desde la terminal.")
config_app = typer.Typer(no_args_is_help=True, help="Configuración persistente del cliente.")
app.add_typer(doctor_app, name="doctor")
app.add_typer(config_app, name="config")

_console = Console()


def _settings() -> AppSettings:
    settings = AppSettings()
    configure_logging(settings.log_level)
    return settings


@asynccontextmanager
async def _controller() -> AsyncIterator[InteractionController]:
    async with open_context(_settings()) as ctx:
        ctx.notifier.subscribe(lambda n: print_notification(_console, n))
        yield InteractionController(ctx)


def _exit_unless_ok(result: ActionResult) -> None:
    if not result.ok and not result.cancelled:
        raise typer.Exit(code=1)


async def _start(controller: InteractionController) -> None:
    """Restaura la sesión; sin sesión válida el comando termina con error."""

    result = await controller.startup()
    if controller.session is None:
        _exit_unless_ok(await controller.refresh())
    _exit_unless_ok(result)


def _print_books(controller: InteractionController) -> None:
    books = controller.visible_books
    if not books:
        render_empty(_console, query=controller.query)
        return
    session = controller.session
    _console.print(
        build_books_table(
            books,
            role=session.role if session else None,
            total=len(controller.books),
            query=controller.query,
        )
    )


def _find_book(controller: InteractionController, book_id: str) -> Optional[BookRecord]:
    for book in controller.books:
        if str(book.id) == book_id:
            return book
    return None


def _coerce_id(book_id: str) -> BookId:
    return int(book_id) if book_id.isdigit() else book_id


@app.command()
def login(
    username: str = typer.Option(..., "--username", "-u", prompt="Usuario"),
    password: str = typer.Option(..., "--password", "-p", prompt="Contraseña", hide_input=True),
) -> None:
    """Inicia sesión y guarda token/rol para los siguientes comandos."""

    async def _run() -> None:
        async with _controller() as controller:
            result = await controller.submit_login(username, password)
            if not result.ok:
                _console.print(f"[red]{controller.login_error}[/red]")
                raise typer.Exit(code=1)
            _print_books(controller)

    print_banner(_console)
    asyncio.run(_run())


@app.command()
def logout() -> None:
    """Cierra la sesión y borra las credenciales guardadas."""

    async def _run() -> None:
        async with _controller() as controller:
            controller.context.session_store.restore()
            controller.logout()

    asyncio.run(_run())


@app.command()
def whoami() -> None:
    """Muestra la sesión guardada (sin validarla contra el backend)."""

    async def _run() -> None:
        async with _controller() as controller:
            session = controller.context.session_store.restore()
            _console.print(build_session_panel(session))
            if session is None:
                raise typer.Exit(code=1)

    asyncio.run(_run())


@app.command()
def books(
    search: str = typer.Option("", "--search", "-s", help="Filtra por título o autor."),
) -> None:
    """Lista los libros del catálogo."""

    async def _run() -> None:
        async with _controller() as controller:
            await _start(controller)
            controller.search(search)
            _print_books(controller)

    asyncio.run(_run())


@app.command()
def add(
    title: str = typer.Argument(..., help="Título del libro."),
    author: str = typer.Argument(..., help="Autor del libro."),
) -> None:
    """Agrega un libro (solo admin)."""

    async def _run() -> None:
        async with _controller() as controller:
            await _start(controller)
            controller.draft.title = title
            controller.draft.author = author
            _exit_unless_ok(await controller.submit_form())
            _print_books(controller)

    asyncio.run(_run())


@app.command()
def edit(
    book_id: str = typer.Argument(..., help="ID del libro a editar."),
    title: Optional[str] = typer.Option(None, "--title", "-t", help="Nuevo título."),
    author: Optional[str] = typer.Option(None, "--author", "-a", help="Nuevo autor."),
) -> None:
    """Edita título y/o autor de un libro (solo admin)."""

    async def _run() -> None:
        async with _controller() as controller:
            await _start(controller)
            record = _find_book(controller, book_id)
            if record is None:
                _console.print(f"[red]No existe el libro {book_id}[/red]")
                raise typer.Exit(code=1)

            _exit_unless_ok(controller.request_edit(record))
            if title is not None:
                controller.draft.title = title
            if author is not None:
                controller.draft.author = author
            _console.print(build_draft_panel(controller.draft))

            _exit_unless_ok(await controller.submit_form())
            _print_books(controller)

    asyncio.run(_run())


@app.command()
def delete(
    book_id: str = typer.Argument(..., help="ID del libro a eliminar."),
    yes: bool = typer.Option(False, "--yes", "-y", help="No pedir confirmación."),
) -> None:
    """Elimina un libro (solo admin)."""

    def _confirm(_: BookId) -> bool:
        return yes or typer.confirm("¿Estás seguro de que deseas eliminar este libro?")

    async def _run() -> None:
        async with _controller() as controller:
            await _start(controller)
            record = _find_book(controller, book_id)
            target = record.id if record is not None else _coerce_id(book_id)
            result = await controller.request_delete(target, _confirm)
            _exit_unless_ok(result)
            if result.ok:
                _print_books(controller)

    asyncio.run(_run())


@config_app.command(name="set-api")
def set_api(url: str = typer.Argument(..., help="Base URL del backend, p.ej. http://host:3001/api")) -> None:
    """Guarda la URL del backend en el .env del usuario."""

    if not url.startswith(("http://", "https://")):
        raise typer.BadParameter("url must start with http:// or https://")
    env_path = write_user_env_vars({"BIBLIOTECA_API_URL": url.rstrip("/")})
    _console.print(f"[green]Saved API URL to:[/green] {env_path}")


def run() -> None:
    app()


if __name__ == "__main__":
    run()
