"""Result listeners: CSV writer and in-memory collector."""

from __future__ import annotations

import csv
import logging
import sys
from pathlib import Path
from typing import IO, Any, Dict, List

from benchsweep.accessors import FieldRegistry
from benchsweep.components import register_component
from benchsweep.experiments.protocol import ResultListener, ResultProducer, ResultRow

logger = logging.getLogger("benchsweep.listeners")


@register_component("csv")
class CSVResultListener(ResultListener):
    """Writes one CSV line per result row.

    The header is taken from the keys of the first row; ``output_file`` of
    ``""`` or ``"-"`` writes to standard output. Missing values are written
    as ``?``.
    """

    def __init__(self, output_file: str = "") -> None:
        self.output_file = output_file
        self._stream: IO[str] | None = None
        self._writer: csv.DictWriter | None = None
        self.rows_written = 0

    def fields(self) -> FieldRegistry:
        registry = FieldRegistry("csv")
        registry.register(
            "output_file",
            str,
            lambda: self.output_file,
            lambda v: setattr(self, "output_file", v),
            doc="destination path, empty for stdout",
        )
        return registry

    @property
    def to_stdout(self) -> bool:
        return self.output_file in ("", "-")

    def pre_process(self, producer: ResultProducer) -> None:
        self.close()
        if self.to_stdout:
            self._stream = sys.stdout
        else:
            path = Path(self.output_file)
            path.parent.mkdir(parents=True, exist_ok=True)
            self._stream = open(path, "w", newline="", encoding="utf-8")
        self._writer = None
        self.rows_written = 0

    def accept_result_row(self, row: ResultRow) -> None:
        if self._stream is None:
            raise RuntimeError("CSV listener used before pre_process()")
        if self._writer is None:
            self._writer = csv.DictWriter(
                self._stream, fieldnames=list(row), restval="?", extrasaction="ignore"
            )
            self._writer.writeheader()
        self._writer.writerow({k: ("?" if v is None else v) for k, v in row.items()})
        self.rows_written += 1

    def post_process(self, producer: ResultProducer) -> None:
        if self._stream is not None:
            self._stream.flush()
        if not self.to_stdout:
            logger.info("Wrote %d result row(s) to %s", self.rows_written, self.output_file)
        self.close()

    def close(self) -> None:
        if self._stream is not None and self._stream is not sys.stdout:
            self._stream.close()
        self._stream = None
        self._writer = None


@register_component("memory")
class InMemoryResultListener(ResultListener):
    """Keeps every row in ``rows``."""

    def __init__(self) -> None:
        self.rows: List[Dict[str, Any]] = []

    def pre_process(self, producer: ResultProducer) -> None:
        self.rows = []

    def accept_result_row(self, row: ResultRow) -> None:
        self.rows.append(dict(row))
