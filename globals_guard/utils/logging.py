"""Logging configuration for globals-guard."""

import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from rich.console import Console
from rich.errors import MarkupError
from rich.logging import RichHandler
from rich.text import Text

# Log output goes to stderr so reports on stdout stay machine readable
console = Console(stderr=True)


class PlainFormatter(logging.Formatter):
    """File formatter which renders rich markup as plain text."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        try:
            return Text.from_markup(line).plain
        except MarkupError:
            return line


def setup_logging(
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO",
    log_file: Path | None = None,
) -> logging.Logger:
    """Configure the `globals_guard` logger.

    The terminal handler writes to stderr at `level`. When `log_file` is
    given, everything down to DEBUG is also written there without markup.
    """
    terminal_level = getattr(logging, level)
    logger = logging.getLogger("globals_guard")
    logger.setLevel(logging.DEBUG if log_file else terminal_level)
    logger.handlers.clear()

    rich_handler = RichHandler(
        console=console,
        show_time=terminal_level <= logging.DEBUG,
        show_path=False,
        markup=True,
        rich_tracebacks=True,
    )
    rich_handler.setLevel(terminal_level)
    rich_handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(rich_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(PlainFormatter("%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"))
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    """Logger under the `globals_guard` namespace."""
    if name:
        return logging.getLogger(f"globals_guard.{name}")
    return logging.getLogger("globals_guard")


@dataclass
class ScanPhase:
    """Counts and timing for one scan run."""

    name: str
    total_files: int = 0
    failed_files: int = 0
    start_time: float = 0.0
    end_time: float | None = None

    @property
    def duration_seconds(self) -> float:
        if self.end_time is None:
            return 0.0
        return self.end_time - self.start_time


@contextmanager
def scan_phase(
    name: str,
    total_files: int,
    logger: logging.Logger | None = None,
) -> Iterator[ScanPhase]:
    """Log the start and outcome of a scan run and time it.

    The caller fills in `failed_files` before the block ends.
    """
    logger = logger or get_logger()
    phase = ScanPhase(name=name, total_files=total_files, start_time=time.perf_counter())
    logger.info(f"[bold blue]>>>[/bold blue] {name}: {total_files} files")
    try:
        yield phase
    except Exception:
        phase.end_time = time.perf_counter()
        logger.error(f"[bold red]<<<[/bold red] {name} failed after {phase.duration_seconds:.2f}s")
        raise
    phase.end_time = time.perf_counter()
    logger.info(
        f"[bold green]<<<[/bold green] {name}: {phase.total_files} files,"
        f" {phase.failed_files} failed, {phase.duration_seconds:.2f}s"
    )
