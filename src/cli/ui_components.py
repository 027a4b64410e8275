"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en múltiples comandos.
"""

from __future__ import annotations

from typing import Sequence

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.models import BookRecord, FormDraft, Notification, Role, Session


def print_banner(console: Console) -> None:
    title = Text("📚 Biblioteca Nube", style="bold cyan")
    subtitle = Text("Catálogo de libros", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def build_books_table(
    books: Sequence[BookRecord],
    *,
    role: Role | None = None,
    total: int | None = None,
    query: str = "",
) -> Table:
    """Tabla de libros; la columna ID solo se muestra a administradores."""

    caption = f"Total: {len(books)}"
    if query and total is not None:
        caption += f" (filtrados de {total})"

    table = Table(title="Libros", caption=caption)
    if role is Role.ADMIN:
        table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Título", style="bold white")
    table.add_column("Autor", style="cyan")
    table.add_column("Fecha", style="dim")

    for book in books:
        created = book.created_at.strftime("%d/%m/%Y") if book.created_at else "N/A"
        row = [book.title, book.author, created]
        if role is Role.ADMIN:
            row.insert(0, str(book.id))
        table.add_row(*row)
    return table


def render_empty(console: Console, *, query: str = "") -> None:
    if query:
        console.print("[yellow]🔍 No se encontraron libros que coincidan con tu búsqueda[/yellow]")
    else:
        console.print("[yellow]📚 No hay libros en la biblioteca[/yellow]")


def build_session_panel(session: Session | None) -> Panel:
    if session is None:
        return Panel(Text("Sin sesión", style="dim"), title="Sesión", border_style="red")
    style = "bold magenta" if session.role is Role.ADMIN else "bold green"
    body = Text.assemble("Rol: ", Text(session.role.value, style=style))
    return Panel(body, title="Sesión", border_style="green")


def build_draft_panel(draft: FormDraft) -> Panel:
    title = "✏️ Editar libro" if draft.is_editing else "➕ Nuevo libro"
    body = Text()
    body.append(f"Título: {draft.title or '-'}\n")
    body.append(f"Autor: {draft.author or '-'}")
    return Panel(body, title=title, border_style="blue")


def print_notification(console: Console, notification: Notification) -> None:
    style = "red" if notification.kind == "error" else "green"
    console.print(f"[{style}]{notification.message}[/{style}]")
