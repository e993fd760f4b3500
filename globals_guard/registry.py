"""Registry of protected WordPress global variable names."""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

import yaml

from .utils.logging import get_logger

logger = get_logger("registry")

WP_GLOBALS_FILE = Path(__file__).parent / "data" / "wp_globals.yaml"


@dataclass(frozen=True)
class ReservedGlobals:
    """Immutable set of reserved global names.

    Names are stored without the `$` sigil and matched case-sensitively.
    Instances are shared read-only between scans.
    """

    names: frozenset[str]

    def __contains__(self, name: object) -> bool:
        return name in self.names

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self.names))

    def __len__(self) -> int:
        return len(self.names)

    def contains(self, name: str) -> bool:
        return name in self.names

    def contains_variable(self, variable: str) -> bool:
        """Check a variable token text such as `$wpdb`."""
        return variable.startswith("$") and variable[1:] in self.names

    def with_names(self, extra: Iterable[str]) -> "ReservedGlobals":
        """Return a new registry extended with additional names."""
        cleaned = {name.lstrip("$") for name in extra if name.strip("$ ")}
        if not cleaned:
            return self
        return ReservedGlobals(self.names | frozenset(cleaned))

    @classmethod
    def from_yaml(cls, path: Path) -> "ReservedGlobals":
        """Load names from a YAML file.

        The file is either a flat list of names or a mapping of group name
        to list of names.
        """
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or []

        if isinstance(data, dict):
            groups = data.values()
        else:
            groups = [data]

        names: set[str] = set()
        for group in groups:
            for name in group or []:
                names.add(str(name).lstrip("$"))

        logger.debug(f"Loaded {len(names)} reserved globals from {path}")
        return cls(frozenset(names))


@lru_cache(maxsize=1)
def get_wp_globals() -> ReservedGlobals:
    """Get the bundled WordPress globals registry (loaded once)."""
    return ReservedGlobals.from_yaml(WP_GLOBALS_FILE)


def build_registry(extra_names: Iterable[str] = ()) -> ReservedGlobals:
    """Bundled WordPress globals plus any configured extras."""
    return get_wp_globals().with_names(extra_names)
