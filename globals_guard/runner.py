"""Dispatching sniffs over token streams and orchestrating file scans."""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .config import AppConfig, get_config
from .sniffs import Diagnostic, DiagnosticCollector, Sniff, create_global_override_sniff
from .tokens.stream import TokenStream
from .tokens.tokenizer import PHPTokenizer
from .utils.logging import get_logger, scan_phase

logger = get_logger("runner")


@dataclass
class FileReport:
    """Diagnostics found in a single file."""

    file_path: Path | None
    diagnostics: list[Diagnostic] = field(default_factory=list)
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def diagnostic_count(self) -> int:
        return len(self.diagnostics)


@dataclass
class ScanReport:
    """Result of scanning one or more files."""

    files: list[FileReport] = field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def diagnostics(self) -> list[Diagnostic]:
        return [d for report in self.files for d in report.diagnostics]

    @property
    def total_diagnostics(self) -> int:
        return sum(report.diagnostic_count for report in self.files)

    @property
    def failed_files(self) -> list[FileReport]:
        return [report for report in self.files if report.failed]

    def to_dict(self) -> dict[str, Any]:
        return {
            "files_scanned": len(self.files),
            "total_diagnostics": self.total_diagnostics,
            "diagnostics": [d.to_dict() for d in self.diagnostics],
            "failed_files": {str(r.file_path): r.error for r in self.failed_files},
            "duration_seconds": round(self.duration_seconds, 3),
        }


class FileScanner:
    """Feeds the tokens of one file to every listening sniff, in order.

    A sniff returning a position is not called again for tokens before it.
    """

    def __init__(self, sniffs: list[Sniff]):
        self.sniffs = sniffs

    def scan(self, stream: TokenStream, file_path: Path | None = None) -> list[Diagnostic]:
        listeners = [
            (sniff, sniff.register(), DiagnosticCollector(stream, sniff.name, file_path))
            for sniff in self.sniffs
        ]
        skip_to = [0] * len(listeners)

        for token in stream:
            for i, (sniff, kinds, collector) in enumerate(listeners):
                if token.kind not in kinds or token.position < skip_to[i]:
                    continue
                resume = sniff.process_token(stream, token.position, collector)
                if resume is not None:
                    skip_to[i] = resume

        diagnostics = [d for _, _, collector in listeners for d in collector.diagnostics]
        return sorted(diagnostics, key=lambda d: (d.position, d.full_code))


class Scanner:
    """Orchestrates scanning of PHP files.

    Responsible for:
    - Discovering PHP files
    - Tokenizing them
    - Running the configured sniffs
    """

    def __init__(self, config: AppConfig | None = None, sniffs: list[Sniff] | None = None):
        self.config = config or get_config()
        if sniffs is None:
            sniffs = [create_global_override_sniff(self.config.sniff)]
        self.file_scanner = FileScanner(sniffs)

    def discover_files(self, paths: list[Path]) -> list[Path]:
        """Expand directories into the PHP files they contain."""
        files: list[Path] = []
        for path in paths:
            if path.is_file():
                files.append(path)
                continue
            for pattern in self.config.scan.include_patterns:
                for file_path in sorted(path.glob(pattern)):
                    if not file_path.is_file() or self._should_exclude(file_path):
                        continue
                    if self._is_file_too_large(file_path):
                        logger.debug(f"Skipping large file: {file_path}")
                        continue
                    files.append(file_path)

        # Patterns may overlap
        unique = list(dict.fromkeys(files))
        logger.info(f"Discovered {len(unique)} PHP files")
        return unique

    def _should_exclude(self, file_path: Path) -> bool:
        """Check if a file should be excluded based on patterns."""
        path_str = file_path.as_posix()
        for pattern in self.config.scan.exclude_patterns:
            if "*" in pattern:
                pattern_parts = pattern.replace("**", "*").split("*")
                if all(part in path_str for part in pattern_parts if part):
                    return True
            elif pattern in path_str:
                return True
        return False

    def _is_file_too_large(self, file_path: Path) -> bool:
        try:
            size_mb = file_path.stat().st_size / (1024 * 1024)
            return size_mb > self.config.scan.max_file_size_mb
        except OSError:
            return True

    def scan_source(self, content: str, file_path: Path | None = None) -> FileReport:
        """Scan PHP source held in memory."""
        stream = PHPTokenizer().tokenize(content)
        return FileReport(file_path=file_path, diagnostics=self.file_scanner.scan(stream, file_path))

    def scan_file(self, file_path: Path) -> FileReport:
        """Scan a single file; read failures are reported, not raised.

        Undecodable bytes are replaced and syntax errors are tolerated by
        the tokenizer, so only I/O problems mark a file as failed.
        """
        try:
            content = file_path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logger.warning(f"Failed to read {file_path}: {e}")
            return FileReport(file_path=file_path, error=str(e))
        return self.scan_source(content, file_path)

    def scan_paths(self, paths: list[Path]) -> ScanReport:
        """Scan files and directories."""
        files = self.discover_files(paths)
        workers = self.config.scan.parallel_workers

        with scan_phase("Scanning", len(files), logger) as phase:
            if len(files) > 1 and workers > 1:
                with ThreadPoolExecutor(max_workers=workers) as executor:
                    reports = list(executor.map(self.scan_file, files))
            else:
                reports = [self.scan_file(file_path) for file_path in files]
            phase.failed_files = sum(1 for r in reports if r.failed)

        report = ScanReport(files=reports, duration_seconds=phase.duration_seconds)
        logger.info(f"Found {report.total_diagnostics} problems in {len(files)} files")
        return report


def scan_source(content: str, config: AppConfig | None = None) -> list[Diagnostic]:
    """Convenience function: diagnostics for a PHP snippet."""
    return Scanner(config).scan_source(content).diagnostics
