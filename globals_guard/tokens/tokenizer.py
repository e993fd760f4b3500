"""PHP tokenizer built on the tree-sitter PHP grammar."""

from collections.abc import Iterator
from functools import lru_cache
from pathlib import Path

import tree_sitter_php
from tree_sitter import Language, Node, Parser

from ..utils.logging import get_logger
from .models import EMPTY_TOKENS, TokenKind
from .stream import Lexeme, TokenStream

logger = get_logger("tokenizer")


# Named nodes which become a single token instead of being split into leaves.
_ATOMIC_NODES = {
    "variable_name": TokenKind.VARIABLE,
    "string": TokenKind.CONSTANT_ENCAPSED_STRING,
    "encapsed_string": TokenKind.CONSTANT_ENCAPSED_STRING,
    "heredoc": TokenKind.HEREDOC,
    "nowdoc": TokenKind.HEREDOC,
    "comment": TokenKind.COMMENT,
    "shell_command_expression": TokenKind.OTHER,
}

# Children of a double quoted string which do not make it interpolated.
_PLAIN_STRING_PARTS = {"string", "string_content", "string_value", "escape_sequence"}

_NAMED_LEAVES = {
    "name": TokenKind.STRING,
    "primitive_type": TokenKind.STRING,
    "integer": TokenKind.NUMBER,
    "float": TokenKind.NUMBER,
    "php_tag": TokenKind.OPEN_TAG,
    "text": TokenKind.INLINE_HTML,
    "boolean": TokenKind.KEYWORD,
    "null": TokenKind.KEYWORD,
}

_PUNCTUATION = {
    "[": TokenKind.OPEN_SQUARE_BRACKET,
    "]": TokenKind.CLOSE_SQUARE_BRACKET,
    "(": TokenKind.OPEN_PARENTHESIS,
    ")": TokenKind.CLOSE_PARENTHESIS,
    "{": TokenKind.OPEN_CURLY_BRACKET,
    "}": TokenKind.CLOSE_CURLY_BRACKET,
    ";": TokenKind.SEMICOLON,
    ",": TokenKind.COMMA,
    "::": TokenKind.DOUBLE_COLON,
    "=>": TokenKind.DOUBLE_ARROW,
    "->": TokenKind.OBJECT_OPERATOR,
    "?->": TokenKind.OBJECT_OPERATOR,
    "\\": TokenKind.NS_SEPARATOR,
    "&": TokenKind.BITWISE_AND,
    "?>": TokenKind.CLOSE_TAG,
}

_ASSIGNMENT_OPERATORS = {
    "=", "+=", "-=", "*=", "/=", ".=", "%=", "**=",
    "&=", "|=", "^=", "<<=", ">>=", "??=",
}

_KEYWORDS = {
    "global": TokenKind.GLOBAL,
    "function": TokenKind.FUNCTION,
    "fn": TokenKind.FN,
    "class": TokenKind.CLASS,
    "interface": TokenKind.INTERFACE,
    "trait": TokenKind.TRAIT,
    "enum": TokenKind.ENUM,
    "namespace": TokenKind.NAMESPACE,
    "extends": TokenKind.EXTENDS,
    "new": TokenKind.NEW,
    "foreach": TokenKind.FOREACH,
    "for": TokenKind.FOR,
    "if": TokenKind.IF,
    "elseif": TokenKind.ELSEIF,
    "while": TokenKind.WHILE,
    "switch": TokenKind.SWITCH,
    "catch": TokenKind.CATCH,
    "match": TokenKind.MATCH,
    "declare": TokenKind.DECLARE,
    "array": TokenKind.ARRAY,
    "list": TokenKind.LIST,
    "as": TokenKind.AS,
    "use": TokenKind.USE,
    "static": TokenKind.STATIC,
}


@lru_cache(maxsize=1)
def _php_language() -> Language:
    return Language(tree_sitter_php.language_php())


class PHPTokenizer:
    """Turns PHP source into a TokenStream.

    tree-sitter does the lexing; the flat structure (brackets, scopes,
    conditions) is rebuilt by TokenStream so that partially written code
    yields missing closers instead of errors.
    """

    def __init__(self):
        self._parser: Parser | None = None

    def get_parser(self) -> Parser:
        """Get or create the tree-sitter parser."""
        if self._parser is None:
            self._parser = Parser()
            self._parser.language = _php_language()
        return self._parser

    def tokenize_file(self, file_path: Path) -> TokenStream:
        content = file_path.read_text(encoding="utf-8", errors="replace")
        return self.tokenize(content)

    def tokenize(self, content: str) -> TokenStream:
        """Tokenize PHP source code.

        Args:
            content: PHP source code

        Returns:
            TokenStream for the whole file. Syntax errors never raise; the
            affected region is still tokenized from the recovered tree.
        """
        source = content.encode("utf-8")
        tree = self.get_parser().parse(source)

        if tree.root_node.has_error:
            logger.debug("Source contains syntax errors, tokenizing what we can")

        lexemes = list(self._lex(tree.root_node, source))
        return TokenStream(_reclassify(lexemes), source=content)

    def _lex(self, root: Node, source: bytes) -> Iterator[Lexeme]:
        prev_end = 0
        prev_point = (0, 0)

        for node in _leaves(root):
            if node.start_byte > prev_end:
                gap = source[prev_end:node.start_byte].decode("utf-8", errors="replace")
                kind = TokenKind.WHITESPACE if not gap.strip() else TokenKind.OTHER
                yield Lexeme(kind, gap, prev_point[0] + 1, prev_point[1])

            text = source[node.start_byte:node.end_byte].decode("utf-8", errors="replace")
            yield Lexeme(_classify(node, text), text, node.start_point[0] + 1, node.start_point[1])

            prev_end = node.end_byte
            prev_point = node.end_point

        if prev_end < len(source):
            tail = source[prev_end:].decode("utf-8", errors="replace")
            kind = TokenKind.WHITESPACE if not tail.strip() else TokenKind.INLINE_HTML
            yield Lexeme(kind, tail, prev_point[0] + 1, prev_point[1])


def _leaves(root: Node) -> Iterator[Node]:
    """Yield token-level nodes in source order, skipping MISSING nodes."""
    stack = [root]
    while stack:
        node = stack.pop()
        if node.is_missing or node.start_byte == node.end_byte:
            continue
        if node.type in _ATOMIC_NODES or node.child_count == 0:
            yield node
        else:
            stack.extend(reversed(node.children))


def _classify(node: Node, text: str) -> TokenKind:
    if node.type in _ATOMIC_NODES:
        if node.type == "encapsed_string" and _is_interpolated(node):
            return TokenKind.DOUBLE_QUOTED_STRING
        if node.type == "comment" and text.startswith("/**"):
            return TokenKind.DOC_COMMENT
        return _ATOMIC_NODES[node.type]

    if node.is_named:
        return _NAMED_LEAVES.get(node.type, TokenKind.OTHER)

    if node.type in _PUNCTUATION:
        return _PUNCTUATION[node.type]
    if node.type in _ASSIGNMENT_OPERATORS:
        return TokenKind.ASSIGNMENT
    if node.type in _KEYWORDS:
        return _KEYWORDS[node.type]
    if node.type.isalpha():
        return TokenKind.KEYWORD
    return TokenKind.OPERATOR


def _is_interpolated(node: Node) -> bool:
    return any(
        child.is_named and child.type not in _PLAIN_STRING_PARTS
        for child in node.children
    )


def _reclassify(lexemes: list[Lexeme]) -> list[Lexeme]:
    """Resolve keywords whose meaning depends on their neighbours.

    - `function` directly followed by `(` (or `&(`) is a closure
    - `class` after `new` is an anonymous class
    - `class` after `::` is the `Foo::class` name resolution
    """
    result = list(lexemes)
    for i, lexeme in enumerate(result):
        if lexeme.kind is TokenKind.FUNCTION:
            nxt = _next_meaningful(result, i + 1)
            while nxt is not None and result[nxt].kind is TokenKind.BITWISE_AND:
                nxt = _next_meaningful(result, nxt + 1)
            if nxt is not None and result[nxt].kind is TokenKind.OPEN_PARENTHESIS:
                result[i] = lexeme._replace(kind=TokenKind.CLOSURE)
        elif lexeme.kind is TokenKind.CLASS:
            prev = _previous_meaningful(result, i - 1)
            if prev is not None and result[prev].kind is TokenKind.NEW:
                result[i] = lexeme._replace(kind=TokenKind.ANON_CLASS)
            elif prev is not None and result[prev].kind is TokenKind.DOUBLE_COLON:
                result[i] = lexeme._replace(kind=TokenKind.STRING)
    return result


def _next_meaningful(lexemes: list[Lexeme], start: int) -> int | None:
    for i in range(start, len(lexemes)):
        if lexemes[i].kind not in EMPTY_TOKENS:
            return i
    return None


def _previous_meaningful(lexemes: list[Lexeme], start: int) -> int | None:
    for i in range(start, -1, -1):
        if lexemes[i].kind not in EMPTY_TOKENS:
            return i
    return None
