"""Interface between the session controller and whatever displays it."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, Sequence

from .types import Database, NavigationControls, Tab, TabularModel


class RenderSurface(Protocol):
    """Display capabilities the controller drives.

    Implementations must show every string as plain text; values come from
    arbitrary user databases and may contain markup.
    """

    def show_databases(self, databases: Sequence[Database], selected_id: str | None) -> None: ...

    def show_database_info(self, database: Database) -> None: ...

    def show_tables(self, heading: str, tables: Sequence[str]) -> None: ...

    def show_tables_message(self, message: str) -> None: ...

    def set_table_content_visible(self, visible: bool) -> None: ...

    def show_tab(self, tab: Tab) -> None: ...

    def show_schema(self, columns: TabularModel, indexes: TabularModel, ddl: str) -> None: ...

    def show_data(self, model: TabularModel) -> None: ...

    def show_pagination(self, text: str, controls: NavigationControls) -> None: ...

    def show_query_error(self, message: str) -> None: ...

    def show_query_result(self, timing: str | None, model: TabularModel | None) -> None: ...

    def show_history(self, labels: Sequence[str]) -> None: ...

    def set_query_text(self, text: str) -> None: ...

    def set_connection_status(self, connected: bool) -> None: ...

    def show_download(self, path: Path) -> None: ...

    def alert(self, message: str) -> None: ...
