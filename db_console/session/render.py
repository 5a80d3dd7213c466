"""Turn heterogeneous row sets into display-ready tables."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable, Sequence

from jinja2 import Environment, FileSystemLoader, select_autoescape

from .types import Row, TabularModel

NULL_TEXT = "NULL"
NO_DATA_TEXT = "No data"

TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"
TABLE_TEMPLATE_NAME = "table.html.j2"

_environment = Environment(
    loader=FileSystemLoader(str(TEMPLATE_DIR)),
    autoescape=select_autoescape(default_for_string=True, default=True),
    trim_blocks=True,
    lstrip_blocks=True,
)


def render(rows: Sequence[Row]) -> TabularModel:
    """Build a tabular model whose columns come from the first row's keys.

    Later rows are laid out against that column list; keys they lack show as
    ``NULL`` and keys the first row lacks are dropped.
    """
    if not rows:
        return TabularModel(columns=(), rows=())
    columns = tuple(str(key) for key in rows[0].keys())
    body = tuple(tuple(cell_text(row.get(column)) for column in columns) for row in rows)
    return TabularModel(columns=columns, rows=body)


def placeholder(message: str = NO_DATA_TEXT) -> TabularModel:
    return TabularModel(columns=(), rows=(), placeholder=message)


def grid(headers: Iterable[str], rows: Iterable[Iterable[Any]], *, empty: str) -> TabularModel:
    """Build a fixed-column model, falling back to ``empty`` when there are no rows."""
    body = tuple(tuple(_plain(value) for value in row) for row in rows)
    if not body:
        return placeholder(empty)
    return TabularModel(columns=tuple(headers), rows=body)


def cell_text(value: Any) -> str:
    if value is None:
        return NULL_TEXT
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def records(rows: Sequence[Row]) -> list[dict[str, Any]]:
    """Row mappings with native values, keyed in the first row's column order."""
    if not rows:
        return []
    columns = list(rows[0].keys())
    return [{column: row.get(column) for column in columns} for row in rows]


def to_html(model: TabularModel, *, css_class: str = "data-table") -> str:
    """Render a model as an HTML table; every cell is autoescaped."""
    template = _environment.get_template(TABLE_TEMPLATE_NAME)
    return template.render(model=model, css_class=css_class)


def _plain(value: Any) -> str:
    if value is None:
        return ""
    return str(value)
