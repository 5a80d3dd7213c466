"""db-console CLI entrypoint."""

from __future__ import annotations

import json
import sys
import time
from typing import Sequence

import click
from rich.console import Console

from db_console.api.client import ApiClient
from db_console.shared.cli import CLIContext, common_cli_options, handle_cli_errors, pass_cli_context
from db_console.session import export, render, schema
from db_console.session.catalog import NO_TABLES_TEXT, CatalogLoader
from db_console.session.connectivity import ConnectivityMonitor
from db_console.session.controller import SessionController
from db_console.session.paging import PaginatedDataFetcher, page_info_text
from db_console.session.query import QueryRunner, check_preconditions, outcome
from db_console.session.types import QueryFailure, Row, TabularModel

from .shell import Shell
from .surface import RichSurface

OUTPUT_FORMAT_CHOICES = ("table", "csv", "json", "html")


@click.group(help="Browse databases exposed by a database browser API.")
@common_cli_options
@handle_cli_errors
def cli(cli_ctx: CLIContext) -> None:
    """Primary Click group for db-console commands."""
    cli_ctx.logger.debug(f"db-console using API at {cli_ctx.api_url}")


@cli.command("databases")
@pass_cli_context
@handle_cli_errors
def list_databases(cli_ctx: CLIContext) -> None:
    """List the configured databases."""
    with _api(cli_ctx) as api:
        databases = CatalogLoader(api).load_databases()
    surface = _surface()
    surface.databases = tuple(databases)
    surface.print_databases()


@cli.command("tables")
@click.argument("db_id", type=str)
@pass_cli_context
@handle_cli_errors
def list_tables(cli_ctx: CLIContext, db_id: str) -> None:
    """List tables in a database."""
    with _api(cli_ctx) as api:
        tables = CatalogLoader(api).load_tables(db_id)
    surface = _surface()
    if not tables:
        surface.show_tables_message(NO_TABLES_TEXT)
        return
    surface.show_tables(db_id, tables)


@cli.command("schema")
@click.argument("db_id", type=str)
@click.argument("table", type=str)
@pass_cli_context
@handle_cli_errors
def show_schema(cli_ctx: CLIContext, db_id: str, table: str) -> None:
    """Show columns, indexes and DDL for a table."""
    with _api(cli_ctx) as api:
        table_schema = schema.SchemaInspector(api).load_table_info(db_id, table)
    _surface().show_schema(
        schema.column_grid(table_schema),
        schema.index_grid(table_schema),
        schema.ddl_text(table_schema),
    )


@cli.command("data")
@click.argument("db_id", type=str)
@click.argument("table", type=str)
@click.option("--page", type=click.IntRange(min=1), default=1, show_default=True)
@click.option("--limit", type=click.IntRange(min=1), help="Rows per page (defaults to config).")
@click.option(
    "--format",
    "output_format",
    default="table",
    show_default=True,
    type=click.Choice(OUTPUT_FORMAT_CHOICES),
)
@pass_cli_context
@handle_cli_errors
def show_data(
    cli_ctx: CLIContext,
    db_id: str,
    table: str,
    page: int,
    limit: int | None,
    output_format: str,
) -> None:
    """Print one page of table rows."""
    page_size = limit or cli_ctx.config.browser.page_size
    with _api(cli_ctx) as api:
        data_page = PaginatedDataFetcher(api).load_page(db_id, table, page, page_size)
    _emit(data_page.model, output_format, data_page.rows)
    if data_page.pagination is not None:
        cli_ctx.logger.info(page_info_text(data_page.pagination))


@cli.command("query")
@click.argument("db_id", type=str)
@click.argument("sql", type=str)
@click.option(
    "--format",
    "output_format",
    default="table",
    show_default=True,
    type=click.Choice(OUTPUT_FORMAT_CHOICES),
)
@pass_cli_context
@handle_cli_errors
def run_query(cli_ctx: CLIContext, db_id: str, sql: str, output_format: str) -> None:
    """Run an ad-hoc query against a database."""
    check_preconditions(db_id, sql)
    with _api(cli_ctx) as api:
        result = QueryRunner(api).execute(db_id, sql)
    if isinstance(result, QueryFailure):
        raise click.ClickException(result.error_message)
    shown = outcome(result)
    if shown.model is not None:
        _emit(shown.model, output_format, result.rows)
    if shown.timing:
        cli_ctx.logger.info(shown.timing)


@cli.command("export")
@click.argument("db_id", type=str)
@click.argument("table", type=str)
@click.option("--page", type=click.IntRange(min=1), default=1, show_default=True)
@click.option("--limit", type=click.IntRange(min=1), help="Rows per page (defaults to config).")
@click.option(
    "--output-dir",
    type=click.Path(file_okay=False, path_type=str),
    help="Directory to write the CSV into (defaults to config).",
)
@pass_cli_context
@handle_cli_errors
def export_page(
    cli_ctx: CLIContext,
    db_id: str,
    table: str,
    page: int,
    limit: int | None,
    output_dir: str | None,
) -> None:
    """Export one page of table rows to CSV."""
    config = cli_ctx.config.with_export_dir(output_dir) if output_dir else cli_ctx.config
    page_size = limit or config.browser.page_size
    with _api(cli_ctx) as api:
        data_page = PaginatedDataFetcher(api).load_page(db_id, table, page, page_size)
    filename = export.export_filename(table, int(time.time() * 1000))
    downloader = export.DirectoryDownloader(config.export.directory)
    path = downloader.deliver(filename, export.to_csv(data_page.model).encode("utf-8"))
    cli_ctx.logger.success(f"Exported to {path}")


@cli.command("status")
@pass_cli_context
def status(cli_ctx: CLIContext) -> None:
    """Check whether the backend is reachable."""
    surface = _surface()
    with _api(cli_ctx) as api:
        connected = ConnectivityMonitor(api, surface.set_connection_status, logger=cli_ctx.logger).poll()
    if not connected:
        sys.exit(1)


@cli.command("shell")
@pass_cli_context
def shell(cli_ctx: CLIContext) -> None:
    """Start an interactive browsing session."""
    surface = _surface()
    controller = SessionController.from_config(cli_ctx.config, surface, logger=cli_ctx.logger)
    repl = Shell(controller, surface)
    with controller:
        controller.start()
        surface.console.print("Type 'help' for commands.", markup=False)
        while True:
            try:
                line = click.prompt(repl.prompt(), default="", show_default=False, prompt_suffix="")
            except click.Abort:
                click.echo()
                break
            if not repl.execute_line(line):
                break


def _api(cli_ctx: CLIContext) -> ApiClient:
    cli_ctx.logger.debug(f"Connecting to {cli_ctx.api_url}")
    return ApiClient.from_settings(cli_ctx.config.api)


def _surface() -> RichSurface:
    return RichSurface(Console(highlight=False))


def _emit(model: TabularModel, output_format: str, rows: Sequence[Row] = ()) -> None:
    fmt = (output_format or "table").lower()
    if fmt == "table":
        _surface().show_data(model)
    elif fmt == "csv":
        click.echo(export.to_csv(model), nl=False)
    elif fmt == "json":
        click.echo(json.dumps(render.records(rows), indent=2, ensure_ascii=False))
    elif fmt == "html":
        click.echo(render.to_html(model))
    else:  # pragma: no cover - Click validation should prevent this
        raise ValueError(f"Unsupported output format '{output_format}'.")


def main() -> None:
    """Entry point for console_scripts."""
    cli()


if __name__ == "__main__":  # pragma: no cover
    main()
