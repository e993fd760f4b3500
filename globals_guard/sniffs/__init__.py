"""Sniff implementations, registered by name via the @register_sniff decorator."""

from ..config import SniffConfig
from ..registry import build_registry
from .base import (
    Diagnostic,
    DiagnosticCollector,
    DiagnosticEmitter,
    ScopeClassifier,
    Sniff,
    SuppressionMatcher,
    available_sniffs,
    get_sniff_class,
    register_sniff,
)
from .global_override import GlobalVariablesOverrideSniff
from .suppression import CommentSuppressionMatcher
from .test_classes import WhitelistTestClassifier


def create_global_override_sniff(config: SniffConfig | None = None) -> GlobalVariablesOverrideSniff:
    """Wire the override sniff with its default capabilities."""
    config = config or SniffConfig()
    return GlobalVariablesOverrideSniff(
        registry=build_registry(config.extra_reserved_globals),
        suppression=CommentSuppressionMatcher(ignore_annotations=config.ignore_annotations),
        test_classifier=WhitelistTestClassifier(config.custom_test_classes),
    )


__all__ = [
    "Diagnostic",
    "DiagnosticCollector",
    "DiagnosticEmitter",
    "ScopeClassifier",
    "Sniff",
    "SuppressionMatcher",
    "available_sniffs",
    "get_sniff_class",
    "register_sniff",
    "GlobalVariablesOverrideSniff",
    "CommentSuppressionMatcher",
    "WhitelistTestClassifier",
    "create_global_override_sniff",
]
