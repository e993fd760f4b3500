"""Sniff warning about overwriting WordPress native global variables.

Two patterns are reported:

- assignment to a reserved key of the `$GLOBALS` superglobal using a literal
  key, e.g. `$GLOBALS['wpdb'] = new Foo();`
- reassignment of a variable imported with `global $wpdb;` within the scope
  the import applies to, including binding it as a `foreach` key or value

Code inside unit test classes is skipped.
"""

from dataclasses import dataclass

from ..registry import ReservedGlobals
from ..tokens.models import (
    ASSIGNMENT_TOKENS,
    EMPTY_TOKENS,
    TokenKind,
)
from ..tokens.stream import TokenStream
from ..utils.logging import get_logger
from .base import (
    DiagnosticEmitter,
    ScopeClassifier,
    Sniff,
    SuppressionMatcher,
    register_sniff,
)

logger = get_logger("sniffs.global_override")

ERROR_MESSAGE = "Overriding WordPress globals is prohibited. Found assignment to %s"
ERROR_CODE = "OverrideProhibited"
SUPPRESSION_TAG = "override"

SUPERGLOBAL = "$GLOBALS"

# Constructs skipped when a `global` statement sits in the global scope.
_NESTED_SCOPES = frozenset(
    {
        TokenKind.FUNCTION,
        TokenKind.CLOSURE,
        TokenKind.CLASS,
        TokenKind.ANON_CLASS,
        TokenKind.INTERFACE,
        TokenKind.TRAIT,
    }
)

# Class-like constructs registered only to skip over test classes.
_CLASS_TOKENS = frozenset({TokenKind.CLASS, TokenKind.ANON_CLASS, TokenKind.TRAIT})

_ASSIGNABLE = frozenset({TokenKind.VARIABLE, TokenKind.CLOSE_SQUARE_BRACKET})

_FOREACH_BINDINGS = frozenset({TokenKind.DOUBLE_ARROW, TokenKind.AS})


@dataclass(frozen=True)
class ScopeWindow:
    """Half-open token range [start, end) a `global` import applies to."""

    start: int
    end: int
    is_global_scope: bool


def is_assignment(stream: TokenStream, position: int) -> bool:
    """Check whether the token at `position` is the target of an assignment.

    The token must be a variable or the closing bracket of an array access.
    `$var['key']['sub'] = ...` is followed through the chained subscripts.
    """
    if stream[position].kind not in _ASSIGNABLE:
        return False

    nxt = stream.find_next(EMPTY_TOKENS, position + 1, exclude=True, local=True)
    if nxt is None:
        return False

    token = stream[nxt]
    if token.kind in ASSIGNMENT_TOKENS:
        return True

    if token.kind is TokenKind.OPEN_SQUARE_BRACKET and token.bracket_closer is not None:
        return is_assignment(stream, token.bracket_closer)

    return False


def is_foreach_binding(stream: TokenStream, position: int, previous: int | None) -> bool:
    """Check whether a variable is the key or value bound by a foreach()."""
    chain = stream[position].nested_parenthesis
    if not chain or previous is None:
        return False

    _, close_parenthesis = chain[-1]
    owner = stream[close_parenthesis].parenthesis_owner
    if owner is None or stream[owner].kind is not TokenKind.FOREACH:
        return False

    return stream[previous].kind in _FOREACH_BINDINGS


def resolve_window(stream: TokenStream, global_ptr: int) -> ScopeWindow | None:
    """Work out which tokens a `global` statement applies to.

    Returns None when the enclosing function is unterminated (live coding).
    """
    start = stream.find_end_of_statement(global_ptr) + 1

    function_ptr = stream.get_condition(global_ptr, TokenKind.FUNCTION)
    if function_ptr is None:
        function_ptr = stream.get_condition(global_ptr, TokenKind.CLOSURE)

    if function_ptr is None:
        return ScopeWindow(start=start, end=len(stream), is_global_scope=True)

    closer = stream[function_ptr].scope_closer
    if closer is None:
        return None
    return ScopeWindow(start=start, end=closer, is_global_scope=False)


def literal_array_key(stream: TokenStream, opener: int, closer: int) -> str:
    """Concatenate the constant string literals between two brackets.

    Adjacent literal fragments such as `'wp' . 'db'` are joined; anything
    else between the brackets is ignored.
    """
    return "".join(
        strip_quotes(stream[ptr].text)
        for ptr in range(opener + 1, closer)
        if stream[ptr].kind is TokenKind.CONSTANT_ENCAPSED_STRING
    )


def strip_quotes(text: str) -> str:
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "'\"":
        return text[1:-1]
    return text


@register_sniff("WordPress.WP.GlobalVariablesOverride")
class GlobalVariablesOverrideSniff(Sniff):
    """Warns about overwriting WordPress native global variables."""

    def __init__(
        self,
        registry: ReservedGlobals,
        suppression: SuppressionMatcher,
        test_classifier: ScopeClassifier,
    ):
        self.registry = registry
        self.suppression = suppression
        self.test_classifier = test_classifier

    def register(self) -> frozenset[TokenKind]:
        return frozenset({TokenKind.GLOBAL, TokenKind.VARIABLE}) | _CLASS_TOKENS

    def process_token(
        self,
        stream: TokenStream,
        position: int,
        emitter: DiagnosticEmitter,
    ) -> int | None:
        token = stream[position]

        # Ignore variable overrides in test classes.
        if token.kind in _CLASS_TOKENS:
            if (
                token.scope_condition == position
                and token.scope_closer is not None
                and self.test_classifier.is_test_class(stream, position)
            ):
                logger.debug(f"Skipping test class at line {token.line}")
                return token.scope_closer
            # Class tokens are only registered to enable skipping test classes.
            return None

        if token.kind is TokenKind.VARIABLE and token.text == SUPERGLOBAL:
            self.process_variable_assignment(stream, position, emitter)
        elif token.kind is TokenKind.GLOBAL:
            self.process_global_statement(stream, position, emitter)
        return None

    def process_variable_assignment(
        self,
        stream: TokenStream,
        position: int,
        emitter: DiagnosticEmitter,
    ) -> None:
        """Check assignments to `$GLOBALS['reserved_name']`."""
        if self.suppression.is_suppressed(stream, position, SUPPRESSION_TAG):
            return

        bracket_ptr = stream.next_non_empty(position + 1)
        if bracket_ptr is None:
            return
        bracket = stream[bracket_ptr]
        if bracket.kind is not TokenKind.OPEN_SQUARE_BRACKET or bracket.bracket_closer is None:
            return
        closer = bracket.bracket_closer

        # Bow out if the array key contains a variable.
        if stream.find_next({TokenKind.VARIABLE}, bracket_ptr + 1, closer) is not None:
            return

        key = literal_array_key(stream, bracket_ptr, closer)
        if key not in self.registry:
            return

        if is_assignment(stream, closer):
            emitter.emit(position, ERROR_MESSAGE, ERROR_CODE, [f"{SUPERGLOBAL}['{key}']"])

    def process_global_statement(
        self,
        stream: TokenStream,
        position: int,
        emitter: DiagnosticEmitter,
    ) -> None:
        """Check that variables imported with `global` are not overruled."""
        search: set[str] = set()
        for ptr in range(position + 1, len(stream)):
            var = stream[ptr]
            if var.kind is TokenKind.SEMICOLON:
                break
            if var.kind is TokenKind.VARIABLE and self.registry.contains_variable(var.text):
                search.add(var.text)

        if not search:
            return

        window = resolve_window(stream, position)
        if window is None:
            logger.debug(f"Unterminated function around global statement at line {stream[position].line}")
            return

        ptr = window.start
        while ptr < window.end:
            token = stream[ptr]

            # In the global scope, skip over functions, classes and the likes.
            if window.is_global_scope and token.kind in _NESTED_SCOPES:
                if token.scope_closer is None:
                    # Live coding, skip the rest of the file.
                    return
                ptr = token.scope_closer + 1
                continue

            if token.kind is TokenKind.VARIABLE and token.text in search:
                self._check_tracked_variable(stream, ptr, emitter)
            ptr += 1

    def _check_tracked_variable(
        self,
        stream: TokenStream,
        position: int,
        emitter: DiagnosticEmitter,
    ) -> None:
        # Static class properties such as `Foo::$wpdb` are not the global.
        previous = stream.previous_non_empty(position - 1)
        if previous is not None and stream[previous].kind is TokenKind.DOUBLE_COLON:
            return

        if is_assignment(stream, position) or is_foreach_binding(stream, position, previous):
            self.maybe_add_error(stream, position, emitter)

    def maybe_add_error(
        self,
        stream: TokenStream,
        position: int,
        emitter: DiagnosticEmitter,
    ) -> None:
        """Report unless a suppression comment is present."""
        if not self.suppression.is_suppressed(stream, position, SUPPRESSION_TAG):
            emitter.emit(position, ERROR_MESSAGE, ERROR_CODE, [stream[position].text])
