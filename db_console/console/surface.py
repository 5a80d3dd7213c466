"""Rich terminal implementation of the render surface."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from db_console.session.types import Database, NavigationControls, Tab, TabularModel


def model_table(model: TabularModel, *, title: str | None = None) -> Table:
    """Build a Rich table from a model.

    Cells are wrapped in ``Text`` so square brackets in user data are never
    parsed as console markup.
    """
    table = Table(
        box=box.SIMPLE_HEAVY,
        show_header=bool(model.columns),
        header_style="bold",
        title=Text(title) if title else None,
    )
    for column in model.columns or ("",):
        table.add_column(Text(column))
    if model.placeholder is not None:
        width = max(len(model.columns), 1)
        table.add_row(Text(model.placeholder, style="dim"), *[Text("")] * (width - 1))
        return table
    for row in model.rows:
        table.add_row(*[Text(cell) for cell in row])
    return table


class RichSurface:
    """Render surface printing to a Rich console.

    The catalog list and query history are kept rather than reprinted on every
    change; the shell prints them on request.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console(highlight=False)
        self.databases: tuple[Database, ...] = ()
        self.selected_db_id: str | None = None
        self.history: tuple[str, ...] = ()
        self.query_text = ""
        self.connected: bool | None = None
        self.table_content_visible = False
        self.tab = Tab.INFO

    def show_databases(self, databases: Sequence[Database], selected_id: str | None) -> None:
        changed = tuple(databases) != self.databases
        self.databases = tuple(databases)
        self.selected_db_id = selected_id
        if changed:
            self.print_databases()

    def print_databases(self) -> None:
        if not self.databases:
            self.console.print(Text("No databases configured", style="dim"))
            return
        table = Table(box=box.SIMPLE, show_header=True, header_style="bold")
        table.add_column("")
        table.add_column("Database")
        table.add_column("Path")
        for database in self.databases:
            marker = "●" if database.id == self.selected_db_id else ""
            table.add_row(marker, Text(database.label), Text(database.path))
        self.console.print(table)

    def show_database_info(self, database: Database) -> None:
        self.console.print(Text.assemble(("Using ", "bold"), database.label, ("  ", ""), (database.path, "dim")))

    def show_tables(self, heading: str, tables: Sequence[str]) -> None:
        self.console.print(Text(heading, style="bold"))
        for position, name in enumerate(tables, start=1):
            self.console.print(Text.assemble((f"{position:>4}  ", "dim"), name))

    def show_tables_message(self, message: str) -> None:
        self.console.print(Text(message, style="dim"))

    def set_table_content_visible(self, visible: bool) -> None:
        self.table_content_visible = visible

    def show_tab(self, tab: Tab) -> None:
        self.tab = tab
        self.console.print(Text(f"[{tab.value}]", style="bold"))

    def show_schema(self, columns: TabularModel, indexes: TabularModel, ddl: str) -> None:
        self.console.print(model_table(columns, title="Columns"))
        self.console.print(model_table(indexes, title="Indexes"))
        self.console.print(Text("CREATE TABLE", style="bold"))
        self.console.print(Text(ddl))

    def show_data(self, model: TabularModel) -> None:
        self.console.print(model_table(model))

    def show_pagination(self, text: str, controls: NavigationControls) -> None:
        parts = [
            (label, "bold" if enabled else "dim strike")
            for label, enabled in (
                ("first", controls.first),
                ("prev", controls.prev),
                ("next", controls.next),
                ("last", controls.last),
            )
        ]
        line = Text(text + "   ")
        for label, style in parts:
            line.append(f" {label} ", style=style)
        self.console.print(line)

    def show_query_error(self, message: str) -> None:
        self.console.print(Text(message, style="bold red"))

    def show_query_result(self, timing: str | None, model: TabularModel | None) -> None:
        if timing:
            self.console.print(Text(timing, style="green"))
        if model is not None:
            self.console.print(model_table(model))

    def show_history(self, labels: Sequence[str]) -> None:
        self.history = tuple(labels)

    def print_history(self) -> None:
        if not self.history:
            self.console.print(Text("No queries yet", style="dim"))
            return
        for position, label in enumerate(self.history, start=1):
            self.console.print(Text.assemble((f"{position:>4}  ", "dim"), label))

    def set_query_text(self, text: str) -> None:
        self.query_text = text
        self.console.print(Text.assemble(("editor> ", "dim"), text))

    def set_connection_status(self, connected: bool) -> None:
        if connected == self.connected:
            return
        self.connected = connected
        if connected:
            self.console.print(Text("● Connected", style="green"))
        else:
            self.console.print(Text("● Disconnected", style="red"))

    def show_download(self, path: Path) -> None:
        self.console.print(Text(f"Exported to {path}", style="green"))

    def alert(self, message: str) -> None:
        self.console.print(Text(f"! {message}", style="bold yellow"))
