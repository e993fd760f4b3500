"""Inline comment based suppression, e.g. `// WPCS: override ok.`"""

import re
from functools import lru_cache

from ..tokens.models import TokenKind
from ..tokens.stream import TokenStream

_COMMENTS = frozenset({TokenKind.COMMENT, TokenKind.DOC_COMMENT})

_STATEMENT_END = frozenset({TokenKind.SEMICOLON, TokenKind.CLOSE_TAG})

_STATEMENT_START_AFTER = frozenset(
    {
        TokenKind.SEMICOLON,
        TokenKind.OPEN_CURLY_BRACKET,
        TokenKind.CLOSE_CURLY_BRACKET,
        TokenKind.OPEN_TAG,
        TokenKind.CLOSE_TAG,
    }
)


@lru_cache(maxsize=32)
def _tag_pattern(tag: str) -> re.Pattern[str]:
    return re.compile(rf"\b{re.escape(tag)}\b", re.IGNORECASE)


class CommentSuppressionMatcher:
    """Looks for a comment containing the tag around the flagged statement.

    A comment suppresses a position when it is
    - inside the same statement, after the position
    - inside the same statement, before the position and on the same line
    - directly after the statement's semicolon, on the same line
    """

    def __init__(self, ignore_annotations: bool = False):
        self.ignore_annotations = ignore_annotations

    def is_suppressed(self, stream: TokenStream, position: int, tag: str) -> bool:
        if self.ignore_annotations:
            return False

        pattern = _tag_pattern(tag)
        line = stream[position].line

        boundary = stream.find_previous(_STATEMENT_START_AFTER, position - 1)
        start = 0 if boundary is None else boundary + 1
        for i in range(start, position):
            token = stream[i]
            if token.kind in _COMMENTS and token.line == line and pattern.search(token.text):
                return True

        end = stream.find_next(_STATEMENT_END, position)
        stop = len(stream) if end is None else end
        for i in range(position + 1, stop):
            token = stream[i]
            if token.kind in _COMMENTS and pattern.search(token.text):
                return True

        if end is not None and stream[end].kind is TokenKind.SEMICOLON:
            trailing = stream.find_next({TokenKind.WHITESPACE}, end + 1, exclude=True)
            if trailing is not None:
                token = stream[trailing]
                if (
                    token.kind in _COMMENTS
                    and token.line == stream[end].line
                    and pattern.search(token.text)
                ):
                    return True

        return False
