"""Session controller: the single owner of navigation state.

Operator actions arrive through :meth:`SessionController.dispatch` or the
method it maps to. They update ``SessionState`` and pass loader results to the
render surface. Load failures are logged and leave the previous display in
place. Input problems raise an alert before any request is made.
"""

from __future__ import annotations

import time
from dataclasses import replace
from enum import Enum
from pathlib import Path
from typing import Any, Callable

from db_console.api.client import ApiClient
from db_console.shared.config import AppConfig
from db_console.shared.exceptions import ApiError, ExportError, InputValidationError
from db_console.shared.logging import Logger, get_logger

from . import export, query, schema
from .catalog import NO_TABLES_TEXT, TABLES_FAILED_TEXT, CatalogLoader
from .connectivity import ConnectivityMonitor
from .paging import PaginatedDataFetcher, page_info_text
from .query import QueryRunner
from .schema import SchemaInspector
from .surface import RenderSurface
from .types import (
    NavigationControls,
    QueryFailure,
    QueryOutcome,
    SessionState,
    Tab,
    TabularModel,
)

NO_TABLE_MESSAGE = "Please select a table first"
PAGE_SIZE_MESSAGE = "Page size must be a positive integer"


class Action(str, Enum):
    """Discrete operator actions understood by the controller."""

    LOAD_DATABASES = "load_databases"
    SELECT_DATABASE = "select_database"
    REFRESH_TABLES = "refresh_tables"
    SELECT_TABLE = "select_table"
    SWITCH_TAB = "switch_tab"
    SET_PAGE_SIZE = "set_page_size"
    FIRST_PAGE = "first_page"
    PREV_PAGE = "prev_page"
    NEXT_PAGE = "next_page"
    LAST_PAGE = "last_page"
    RUN_QUERY = "run_query"
    RECALL_QUERY = "recall_query"
    EXPORT = "export"


class SessionController:
    def __init__(
        self,
        *,
        catalog: CatalogLoader,
        inspector: SchemaInspector,
        fetcher: PaginatedDataFetcher,
        runner: QueryRunner,
        surface: RenderSurface,
        downloader: export.Downloader,
        monitor: ConnectivityMonitor | None = None,
        page_size: int = 25,
        logger: Logger | None = None,
        clock: Callable[[], float] = time.time,
        closeables: tuple[ApiClient, ...] = (),
    ) -> None:
        if page_size < 1:
            raise ValueError("page_size must be positive")
        self._state = SessionState(page_size=page_size)
        self._catalog = catalog
        self._inspector = inspector
        self._fetcher = fetcher
        self._runner = runner
        self._surface = surface
        self._downloader = downloader
        self._monitor = monitor
        self._logger = logger or get_logger()
        self._clock = clock
        self._closeables = closeables

        self._tables: tuple[str, ...] = ()
        self._total_pages: int | None = None
        self._controls = NavigationControls()
        self._visible_data: TabularModel | None = None

        self._handlers: dict[Action, Callable[..., Any]] = {
            Action.LOAD_DATABASES: self.load_databases,
            Action.SELECT_DATABASE: self.select_database,
            Action.REFRESH_TABLES: self.refresh_tables,
            Action.SELECT_TABLE: self.select_table,
            Action.SWITCH_TAB: self.switch_tab,
            Action.SET_PAGE_SIZE: self.set_page_size,
            Action.FIRST_PAGE: self.first_page,
            Action.PREV_PAGE: self.prev_page,
            Action.NEXT_PAGE: self.next_page,
            Action.LAST_PAGE: self.last_page,
            Action.RUN_QUERY: self.run_query,
            Action.RECALL_QUERY: self.recall_query,
            Action.EXPORT: self.export_visible_table,
        }

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        surface: RenderSurface,
        *,
        logger: Logger | None = None,
    ) -> SessionController:
        """Wire a controller to the configured backend.

        The connectivity monitor gets its own client, which it closes itself
        once its background thread ends.
        """
        logger = logger or get_logger()
        api = ApiClient.from_settings(config.api)
        monitor = None
        if config.monitor.enabled:
            monitor = ConnectivityMonitor(
                ApiClient.from_settings(config.api),
                surface.set_connection_status,
                interval=config.monitor.poll_interval,
                logger=logger,
                owns_api=True,
            )
        return cls(
            catalog=CatalogLoader(api),
            inspector=SchemaInspector(api),
            fetcher=PaginatedDataFetcher(api),
            runner=QueryRunner(api),
            surface=surface,
            downloader=export.DirectoryDownloader(config.export.directory),
            monitor=monitor,
            page_size=config.browser.page_size,
            logger=logger,
            closeables=(api,),
        )

    # ------------------------------------------------------------------ lifecycle

    def start(self) -> None:
        self.load_databases()
        if self._monitor is not None:
            self._monitor.start()

    def close(self) -> None:
        if self._monitor is not None:
            self._monitor.stop()
        for client in self._closeables:
            client.close()

    def __enter__(self) -> SessionController:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------ read-only views

    @property
    def state(self) -> SessionState:
        """A copy of the current state; changes to it are not applied."""
        return replace(self._state)

    @property
    def tables(self) -> tuple[str, ...]:
        return self._tables

    @property
    def controls(self) -> NavigationControls:
        return self._controls

    @property
    def total_pages(self) -> int | None:
        return self._total_pages

    @property
    def visible_data(self) -> TabularModel | None:
        return self._visible_data

    def dispatch(self, action: Action | str, *args: Any) -> Any:
        return self._handlers[Action(action)](*args)

    # ------------------------------------------------------------------ catalog

    def load_databases(self) -> None:
        try:
            databases = self._catalog.load_databases()
        except ApiError as exc:
            self._logger.error(f"Failed to load databases: {exc}")
            self._surface.set_connection_status(False)
            return

        self._state.databases = tuple(databases)
        self._surface.show_databases(self._state.databases, self._state.current_db_id)
        if self._state.databases and self._state.current_db_id is None:
            self.select_database(self._state.databases[0].id)

    def select_database(self, db_id: str) -> None:
        if not db_id:
            return
        state = self._state
        state.current_db_id = db_id
        state.current_table = None
        state.current_page = 1
        self._reset_data_view()

        database = state.find_database(db_id)
        if database is not None:
            self._surface.show_databases(state.databases, db_id)
            self._surface.show_database_info(database)
        else:
            self._logger.warning(f"Database '{db_id}' is not in the loaded catalog.")

        try:
            self._catalog.load_database_info(db_id)
        except ApiError as exc:
            self._logger.error(f"Failed to load database info: {exc}")
        self.refresh_tables()
        self._surface.set_table_content_visible(False)

    def refresh_tables(self) -> None:
        db_id = self._state.current_db_id
        if not db_id:
            return
        try:
            tables = self._catalog.load_tables(db_id)
        except ApiError as exc:
            self._logger.error(f"Failed to load tables: {exc}")
            self._tables = ()
            self._surface.show_tables_message(TABLES_FAILED_TEXT)
            return

        self._tables = tuple(tables)
        if not tables:
            self._surface.show_tables_message(NO_TABLES_TEXT)
            return
        database = self._state.find_database(db_id)
        self._surface.show_tables(database.name if database else db_id, self._tables)

    # ------------------------------------------------------------------ table view

    def select_table(self, table: str) -> None:
        if not self._state.current_db_id:
            self._surface.alert(query.NO_DATABASE_MESSAGE)
            return
        self._state.current_table = table
        self._state.current_page = 1
        self._reset_data_view()
        self._surface.set_table_content_visible(True)
        self._load_current_tab()

    def switch_tab(self, tab: Tab | str) -> None:
        self._state.current_tab = Tab(tab)
        self._surface.show_tab(self._state.current_tab)
        if self._has_table():
            self._load_current_tab()

    def set_page_size(self, page_size: int | str) -> None:
        try:
            size = int(page_size)
        except (TypeError, ValueError):
            size = 0
        if size < 1:
            self._surface.alert(PAGE_SIZE_MESSAGE)
            return
        self._state.page_size = size
        self._state.current_page = 1
        if self._has_table():
            self.load_data()

    def first_page(self) -> None:
        if not self._controls.first:
            self._logger.debug("Already on the first page.")
            return
        self._state.current_page = 1
        self.load_data()

    def prev_page(self) -> None:
        if not self._controls.prev or self._state.current_page <= 1:
            self._logger.debug("Already on the first page.")
            return
        self._state.current_page -= 1
        self.load_data()

    def next_page(self) -> None:
        if not self._controls.next:
            self._logger.debug("Already on the last page.")
            return
        self._state.current_page += 1
        self.load_data()

    def last_page(self) -> None:
        # Targets the total reported by the most recent fetch, not the first one.
        if not self._controls.last or self._total_pages is None:
            self._logger.debug("Already on the last page.")
            return
        self._state.current_page = self._total_pages
        self.load_data()

    def load_info(self) -> None:
        db_id, table = self._state.current_db_id, self._state.current_table
        if not db_id or not table:
            return
        try:
            table_schema = self._inspector.load_table_info(db_id, table)
        except ApiError as exc:
            self._logger.error(f"Failed to load table info: {exc}")
            return
        self._surface.show_schema(
            schema.column_grid(table_schema),
            schema.index_grid(table_schema),
            schema.ddl_text(table_schema),
        )

    def load_data(self) -> None:
        db_id, table = self._state.current_db_id, self._state.current_table
        if not db_id or not table:
            return
        try:
            page = self._fetcher.load_page(db_id, table, self._state.current_page, self._state.page_size)
        except ApiError as exc:
            self._logger.error(f"Failed to load table data: {exc}")
            return

        self._visible_data = page.model
        self._surface.show_data(page.model)
        if page.pagination is None:
            return
        # The backend may clamp out-of-range requests, so its page number wins.
        self._state.current_page = page.pagination.page
        self._total_pages = page.pagination.total_pages
        self._controls = NavigationControls.for_page(self._state.current_page, self._total_pages)
        self._surface.show_pagination(page_info_text(page.pagination), self._controls)

    # ------------------------------------------------------------------ queries

    def run_query(self, query_text: str) -> QueryOutcome | None:
        try:
            db_id = query.check_preconditions(self._state.current_db_id, query_text)
        except InputValidationError as exc:
            self._surface.alert(str(exc))
            return None

        history = query.remember(self._state.query_history, query_text)
        if history != self._state.query_history:
            self._state.query_history = history
            self._surface.show_history([query.history_label(entry) for entry in history])

        self._logger.debug(f"Running query against {db_id}")
        result = self._runner.execute(db_id, query_text)
        outcome = query.outcome(result)
        if isinstance(result, QueryFailure):
            self._surface.show_query_error(result.error_message)
        else:
            self._surface.show_query_result(outcome.timing, outcome.model)
        return outcome

    def recall_query(self, index: int) -> str | None:
        history = self._state.query_history
        if not 0 <= index < len(history):
            self._surface.alert(f"No query at history position {index + 1}")
            return None
        text = history[index]
        self._surface.set_query_text(text)
        return text

    # ------------------------------------------------------------------ export

    def export_visible_table(self) -> Path | None:
        """Export the data table as currently shown; only the visible page is included."""
        table = self._state.current_table
        if not self._state.current_db_id or not table:
            self._surface.alert(NO_TABLE_MESSAGE)
            return None
        model = self._visible_data or TabularModel(columns=(), rows=())
        filename = export.export_filename(table, int(self._clock() * 1000))
        try:
            path = self._downloader.deliver(filename, export.to_csv(model).encode("utf-8"))
        except ExportError as exc:
            self._logger.error(f"Export failed: {exc}")
            self._surface.alert(str(exc))
            return None
        self._surface.show_download(path)
        return path

    # ------------------------------------------------------------------ helpers

    def _has_table(self) -> bool:
        return bool(self._state.current_db_id and self._state.current_table)

    def _load_current_tab(self) -> None:
        if self._state.current_tab is Tab.INFO:
            self.load_info()
        else:
            self.load_data()

    def _reset_data_view(self) -> None:
        self._total_pages = None
        self._controls = NavigationControls()
        self._visible_data = None
