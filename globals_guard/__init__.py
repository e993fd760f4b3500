"""globals-guard - Detects code overriding WordPress native global variables."""

__version__ = "0.1.0"

from .config import AppConfig, get_config, load_config
from .registry import ReservedGlobals, build_registry, get_wp_globals
from .runner import FileReport, FileScanner, ScanReport, Scanner, scan_source

__all__ = [
    "AppConfig",
    "get_config",
    "load_config",
    "ReservedGlobals",
    "build_registry",
    "get_wp_globals",
    "FileReport",
    "FileScanner",
    "ScanReport",
    "Scanner",
    "scan_source",
    "__version__",
]
