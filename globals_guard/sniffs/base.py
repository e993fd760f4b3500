"""Base sniff class, capability protocols and diagnostics."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from ..tokens.models import TokenKind
from ..tokens.stream import TokenStream


@dataclass(frozen=True)
class Diagnostic:
    """A single reported violation."""

    sniff: str
    code: str
    message: str
    position: int
    line: int
    column: int
    data: tuple[str, ...] = ()
    file_path: Path | None = None

    @property
    def full_code(self) -> str:
        return f"{self.sniff}.{self.code}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "file": str(self.file_path) if self.file_path else None,
            "line": self.line,
            "column": self.column,
            "code": self.full_code,
            "message": self.message,
        }

    def __str__(self) -> str:
        location = f"{self.file_path}:" if self.file_path else ""
        return f"{location}{self.line}:{self.column} {self.message} ({self.full_code})"


@runtime_checkable
class DiagnosticEmitter(Protocol):
    """Sink for diagnostics raised by a sniff."""

    def emit(self, position: int, template: str, code: str, data: list[str]) -> None:
        ...


@runtime_checkable
class SuppressionMatcher(Protocol):
    """Decides whether an inline comment exempts a position from a check."""

    def is_suppressed(self, stream: TokenStream, position: int, tag: str) -> bool:
        ...


@runtime_checkable
class ScopeClassifier(Protocol):
    """Decides whether a class/trait is test support code."""

    def is_test_class(self, stream: TokenStream, position: int) -> bool:
        ...


def format_message(template: str, data: list[str] | tuple[str, ...]) -> str:
    """Substitute `%s` placeholders in a message template."""
    if not data:
        return template
    return template % tuple(data[: template.count("%s")])


@dataclass
class DiagnosticCollector:
    """Emitter which stores diagnostics for one sniff on one file."""

    stream: TokenStream
    sniff: str
    file_path: Path | None = None
    diagnostics: list[Diagnostic] = field(default_factory=list)

    def emit(self, position: int, template: str, code: str, data: list[str]) -> None:
        token = self.stream[position]
        self.diagnostics.append(
            Diagnostic(
                sniff=self.sniff,
                code=code,
                message=format_message(template, data),
                position=position,
                line=token.line,
                column=token.column,
                data=tuple(data),
                file_path=self.file_path,
            )
        )


class Sniff(ABC):
    """Abstract base class for token based checks.

    A sniff registers the token kinds it wants to see. The runner calls
    process_token() for each such token in file order. Returning a position
    makes the runner skip every token before it for this sniff.
    """

    #: Dotted sniff name used as diagnostic code prefix
    name: str = ""

    @abstractmethod
    def register(self) -> frozenset[TokenKind]:
        """Token kinds this sniff listens for."""
        ...

    @abstractmethod
    def process_token(
        self,
        stream: TokenStream,
        position: int,
        emitter: DiagnosticEmitter,
    ) -> int | None:
        """Process a registered token.

        Returns:
            Position to skip forward to, or None to continue normally
        """
        ...


# Sniff registry
_sniffs: dict[str, type[Sniff]] = {}


def register_sniff(name: str):
    """Decorator to register a sniff under its dotted name."""

    def decorator(cls: type[Sniff]) -> type[Sniff]:
        cls.name = name
        _sniffs[name] = cls
        return cls

    return decorator


def get_sniff_class(name: str) -> type[Sniff] | None:
    """Get a registered sniff class by name."""
    return _sniffs.get(name)


def available_sniffs() -> list[str]:
    return sorted(_sniffs)
