"""CSV export of the visible data table."""

from __future__ import annotations

import csv
import io
from pathlib import Path
from typing import Protocol

from db_console.shared.exceptions import ExportError

from .types import TabularModel


class Downloader(Protocol):
    def deliver(self, filename: str, payload: bytes) -> Path: ...


class DirectoryDownloader:
    """Deliver downloads by writing them into a directory."""

    def __init__(self, directory: Path) -> None:
        self.directory = directory

    def deliver(self, filename: str, payload: bytes) -> Path:
        target = self.directory / Path(filename).name
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            target.write_bytes(payload)
        except OSError as exc:
            raise ExportError(f"Could not write {target}: {exc}") from exc
        return target


def to_csv(model: TabularModel) -> str:
    """Serialize exactly what the table shows: header, rows, or the placeholder row.

    Every field is quoted regardless of content.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    if model.columns:
        writer.writerow(model.columns)
    if model.placeholder is not None:
        writer.writerow([model.placeholder])
    else:
        writer.writerows(model.rows)
    return buffer.getvalue()


def export_filename(table: str, timestamp_ms: int) -> str:
    safe_table = table.replace("/", "_").replace("\\", "_")
    return f"{safe_table}_{timestamp_ms}.csv"
