"""Indexable token stream with scope and bracket information."""

from collections.abc import Iterable, Iterator, Sequence
from typing import NamedTuple

from .models import (
    EMPTY_TOKENS,
    PARENTHESIS_OWNERS,
    SCOPE_OWNERS,
    Token,
    TokenKind,
)

_BRACKET_PAIRS = {
    TokenKind.OPEN_PARENTHESIS: TokenKind.CLOSE_PARENTHESIS,
    TokenKind.OPEN_SQUARE_BRACKET: TokenKind.CLOSE_SQUARE_BRACKET,
    TokenKind.OPEN_CURLY_BRACKET: TokenKind.CLOSE_CURLY_BRACKET,
}
_CLOSER_TO_OPENER = {closer: opener for opener, closer in _BRACKET_PAIRS.items()}

# Tokens which terminate a statement, see find_end_of_statement().
_END_OF_STATEMENT = frozenset(
    {
        TokenKind.SEMICOLON,
        TokenKind.COMMA,
        TokenKind.DOUBLE_ARROW,
        TokenKind.CLOSE_PARENTHESIS,
        TokenKind.CLOSE_SQUARE_BRACKET,
        TokenKind.CLOSE_CURLY_BRACKET,
        TokenKind.OPEN_TAG,
        TokenKind.CLOSE_TAG,
    }
)
_END_BEFORE = frozenset(
    {
        TokenKind.CLOSE_PARENTHESIS,
        TokenKind.CLOSE_SQUARE_BRACKET,
        TokenKind.CLOSE_CURLY_BRACKET,
        TokenKind.OPEN_TAG,
        TokenKind.CLOSE_TAG,
    }
)

# Tokens which end a scope owner's header before any `{` was found.
_NO_SCOPE = frozenset(
    {
        TokenKind.SEMICOLON,
        TokenKind.CLOSE_PARENTHESIS,
        TokenKind.CLOSE_SQUARE_BRACKET,
        TokenKind.CLOSE_CURLY_BRACKET,
        TokenKind.CLOSE_TAG,
    }
)


class Lexeme(NamedTuple):
    """Raw token as produced by a lexer, before structural linking."""

    kind: TokenKind
    text: str
    line: int = 1
    column: int = 0


class TokenStream(Sequence[Token]):
    """Flat sequence of tokens for a single file.

    Positions are indices into the stream. Scope and bracket relations are
    computed once on construction; unterminated constructs simply have no
    closer.
    """

    def __init__(self, lexemes: Iterable[Lexeme], source: str = ""):
        self.source = source
        self._tokens: list[Token] = _link(list(lexemes))

    def __getitem__(self, index):  # type: ignore[override]
        return self._tokens[index]

    def __len__(self) -> int:
        return len(self._tokens)

    def __iter__(self) -> Iterator[Token]:
        return iter(self._tokens)

    @property
    def num_tokens(self) -> int:
        return len(self._tokens)

    def find_next(
        self,
        kinds: Iterable[TokenKind],
        start: int,
        end: int | None = None,
        exclude: bool = False,
        local: bool = False,
    ) -> int | None:
        """Find the next token of one of the given kinds.

        Args:
            kinds: Token kinds to look for
            start: First position to check
            end: Position to stop at (exclusive), defaults to end of file
            exclude: If True, find the first token NOT of the given kinds
            local: If True, stop at the end of the current statement

        Returns:
            Position of the token, or None if not found
        """
        wanted = frozenset(kinds)
        stop = len(self._tokens) if end is None else min(end, len(self._tokens))
        for i in range(max(start, 0), stop):
            kind = self._tokens[i].kind
            if (kind in wanted) != exclude:
                return i
            if local and kind is TokenKind.SEMICOLON:
                break
        return None

    def find_previous(
        self,
        kinds: Iterable[TokenKind],
        start: int,
        end: int = 0,
        exclude: bool = False,
    ) -> int | None:
        """Find the previous token of one of the given kinds.

        Searches backwards from `start` down to `end` (inclusive).
        """
        wanted = frozenset(kinds)
        for i in range(min(start, len(self._tokens) - 1), max(end, 0) - 1, -1):
            if (self._tokens[i].kind in wanted) != exclude:
                return i
        return None

    def next_non_empty(self, start: int, end: int | None = None) -> int | None:
        return self.find_next(EMPTY_TOKENS, start, end, exclude=True)

    def previous_non_empty(self, start: int) -> int | None:
        return self.find_previous(EMPTY_TOKENS, start, exclude=True)

    def find_end_of_statement(self, start: int) -> int:
        """Return the position of the last token of the statement at `start`.

        Nested scopes and bracket groups are skipped over. When the statement
        is closed by a bracket or tag, the last non-empty token before it is
        returned instead.
        """
        last_not_empty = start
        i = start
        while i < len(self._tokens):
            token = self._tokens[i]
            if i != start and token.kind in _END_OF_STATEMENT:
                if token.kind in _END_BEFORE:
                    return last_not_empty
                return i

            if token.scope_closer is not None and i in (token.scope_opener, token.scope_condition):
                i = token.scope_closer
            elif token.bracket_closer is not None and token.bracket_opener == i:
                i = token.bracket_closer

            if self._tokens[i].kind not in EMPTY_TOKENS:
                last_not_empty = i
            i += 1

        return len(self._tokens) - 1

    def get_condition(self, position: int, kind: TokenKind) -> int | None:
        """Return the outermost enclosing scope owner of the given kind."""
        for owner in self._tokens[position].conditions:
            if self._tokens[owner].kind is kind:
                return owner
        return None

    def has_condition(self, position: int, kinds: Iterable[TokenKind]) -> bool:
        wanted = frozenset(kinds)
        return any(self._tokens[owner].kind in wanted for owner in self._tokens[position].conditions)


def _previous_meaningful(kinds: list[TokenKind], start: int) -> int | None:
    for i in range(start, -1, -1):
        if kinds[i] not in EMPTY_TOKENS:
            return i
    return None


def _find_parenthesis_owner(kinds: list[TokenKind], opener: int) -> int | None:
    prev = _previous_meaningful(kinds, opener - 1)
    if prev is None:
        return None
    if kinds[prev] in PARENTHESIS_OWNERS:
        return prev

    # Named function declaration: `function &name(`
    if kinds[prev] is TokenKind.STRING:
        before = _previous_meaningful(kinds, prev - 1)
        while before is not None and kinds[before] is TokenKind.BITWISE_AND:
            before = _previous_meaningful(kinds, before - 1)
        if before is not None and kinds[before] is TokenKind.FUNCTION:
            return before
    return None


def _find_scope_opener(
    kinds: list[TokenKind],
    bracket_closer: list[int | None],
    owner: int,
) -> int | None:
    i = owner + 1
    while i < len(kinds):
        kind = kinds[i]
        if kind is TokenKind.OPEN_CURLY_BRACKET:
            return i
        if kind is TokenKind.OPEN_PARENTHESIS:
            if bracket_closer[i] is None:
                return None
            i = bracket_closer[i]
        elif kind in _NO_SCOPE:
            # Abstract/interface method, `namespace Foo;` or broken code.
            return None
        i += 1
    return None


def _link(lexemes: list[Lexeme]) -> list[Token]:
    """Resolve brackets, parenthesis owners, scopes and conditions."""
    n = len(lexemes)
    kinds = [lexeme.kind for lexeme in lexemes]

    bracket_opener: list[int | None] = [None] * n
    bracket_closer: list[int | None] = [None] * n
    stacks: dict[TokenKind, list[int]] = {opener: [] for opener in _BRACKET_PAIRS}
    for i, kind in enumerate(kinds):
        if kind in _BRACKET_PAIRS:
            stacks[kind].append(i)
        elif kind in _CLOSER_TO_OPENER:
            stack = stacks[_CLOSER_TO_OPENER[kind]]
            if stack:
                opener = stack.pop()
                bracket_opener[opener] = bracket_opener[i] = opener
                bracket_closer[opener] = bracket_closer[i] = i

    parenthesis_owner: list[int | None] = [None] * n
    nested: list[list[tuple[int, int]]] = [[] for _ in range(n)]
    for i, kind in enumerate(kinds):
        closer = bracket_closer[i]
        if kind is not TokenKind.OPEN_PARENTHESIS or closer is None:
            continue
        owner = _find_parenthesis_owner(kinds, i)
        parenthesis_owner[i] = parenthesis_owner[closer] = owner
        for p in range(i + 1, closer):
            nested[p].append((i, closer))

    scope_condition: list[int | None] = [None] * n
    scope_opener: list[int | None] = [None] * n
    scope_closer: list[int | None] = [None] * n
    conditions: list[list[int]] = [[] for _ in range(n)]
    for i, kind in enumerate(kinds):
        if kind not in SCOPE_OWNERS:
            continue
        opener = _find_scope_opener(kinds, bracket_closer, i)
        if opener is None:
            continue
        closer = bracket_closer[opener]
        for p in (i, opener) if closer is None else (i, opener, closer):
            scope_condition[p] = i
            scope_opener[p] = opener
            scope_closer[p] = closer
        # An unterminated scope runs to the end of the file.
        for p in range(opener + 1, n if closer is None else closer):
            conditions[p].append(i)

    return [
        Token(
            position=i,
            kind=lexeme.kind,
            text=lexeme.text,
            line=lexeme.line,
            column=lexeme.column,
            scope_condition=scope_condition[i],
            scope_opener=scope_opener[i],
            scope_closer=scope_closer[i],
            bracket_opener=bracket_opener[i],
            bracket_closer=bracket_closer[i],
            parenthesis_owner=parenthesis_owner[i],
            nested_parenthesis=tuple(nested[i]),
            conditions=tuple(conditions[i]),
        )
        for i, lexeme in enumerate(lexemes)
    ]
