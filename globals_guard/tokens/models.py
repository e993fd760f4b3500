"""Data models for PHP tokens produced by the tokenizer."""

from dataclasses import dataclass
from enum import Enum


class TokenKind(str, Enum):
    """Closed set of token kinds the sniffs dispatch on."""

    # Trivia
    WHITESPACE = "whitespace"
    COMMENT = "comment"
    DOC_COMMENT = "doc_comment"

    # Markup
    OPEN_TAG = "open_tag"
    CLOSE_TAG = "close_tag"
    INLINE_HTML = "inline_html"

    # Operands
    VARIABLE = "variable"
    STRING = "string"  # bare identifier, e.g. a class or function name
    CONSTANT_ENCAPSED_STRING = "constant_encapsed_string"
    DOUBLE_QUOTED_STRING = "double_quoted_string"  # with interpolation
    HEREDOC = "heredoc"
    NUMBER = "number"

    # Brackets
    OPEN_SQUARE_BRACKET = "open_square_bracket"
    CLOSE_SQUARE_BRACKET = "close_square_bracket"
    OPEN_PARENTHESIS = "open_parenthesis"
    CLOSE_PARENTHESIS = "close_parenthesis"
    OPEN_CURLY_BRACKET = "open_curly_bracket"
    CLOSE_CURLY_BRACKET = "close_curly_bracket"

    # Punctuation and operators
    SEMICOLON = "semicolon"
    COMMA = "comma"
    DOUBLE_COLON = "double_colon"
    DOUBLE_ARROW = "double_arrow"
    OBJECT_OPERATOR = "object_operator"
    NS_SEPARATOR = "ns_separator"
    BITWISE_AND = "bitwise_and"
    ASSIGNMENT = "assignment"  # =, +=, .=, ??= and friends
    OPERATOR = "operator"

    # Keywords
    GLOBAL = "global"
    FUNCTION = "function"
    CLOSURE = "closure"
    FN = "fn"
    CLASS = "class"
    ANON_CLASS = "anon_class"
    INTERFACE = "interface"
    TRAIT = "trait"
    ENUM = "enum"
    NAMESPACE = "namespace"
    EXTENDS = "extends"
    NEW = "new"
    FOREACH = "foreach"
    FOR = "for"
    IF = "if"
    ELSEIF = "elseif"
    WHILE = "while"
    SWITCH = "switch"
    CATCH = "catch"
    MATCH = "match"
    DECLARE = "declare"
    ARRAY = "array"
    LIST = "list"
    AS = "as"
    USE = "use"
    STATIC = "static"
    KEYWORD = "keyword"  # any other reserved word

    OTHER = "other"


# Tokens skipped when looking for the "next/previous meaningful" token.
EMPTY_TOKENS = frozenset({TokenKind.WHITESPACE, TokenKind.COMMENT, TokenKind.DOC_COMMENT})

ASSIGNMENT_TOKENS = frozenset({TokenKind.ASSIGNMENT, TokenKind.DOUBLE_ARROW})

# Constructs which own a `{ ... }` scope.
SCOPE_OWNERS = frozenset(
    {
        TokenKind.FUNCTION,
        TokenKind.CLOSURE,
        TokenKind.CLASS,
        TokenKind.ANON_CLASS,
        TokenKind.INTERFACE,
        TokenKind.TRAIT,
        TokenKind.ENUM,
        TokenKind.NAMESPACE,
    }
)

OO_SCOPE_TOKENS = frozenset(
    {
        TokenKind.CLASS,
        TokenKind.ANON_CLASS,
        TokenKind.INTERFACE,
        TokenKind.TRAIT,
        TokenKind.ENUM,
    }
)

# Keywords which own the parenthesis group directly following them.
PARENTHESIS_OWNERS = frozenset(
    {
        TokenKind.FUNCTION,
        TokenKind.CLOSURE,
        TokenKind.FN,
        TokenKind.FOREACH,
        TokenKind.FOR,
        TokenKind.IF,
        TokenKind.ELSEIF,
        TokenKind.WHILE,
        TokenKind.SWITCH,
        TokenKind.CATCH,
        TokenKind.MATCH,
        TokenKind.DECLARE,
        TokenKind.ARRAY,
        TokenKind.LIST,
        TokenKind.USE,
        TokenKind.ANON_CLASS,
    }
)

STRING_LITERALS = frozenset(
    {
        TokenKind.CONSTANT_ENCAPSED_STRING,
        TokenKind.DOUBLE_QUOTED_STRING,
        TokenKind.HEREDOC,
    }
)


@dataclass(frozen=True)
class Token:
    """A single token in a PHP source file.

    Structural fields are filled in by the token stream once the whole file
    has been lexed. Positions are indices into the stream.
    """

    position: int
    kind: TokenKind
    text: str
    line: int = 1
    column: int = 0

    # Scope information (scope owners, their `{` and their `}`)
    scope_condition: int | None = None
    scope_opener: int | None = None
    scope_closer: int | None = None

    # Bracket matching for (), [] and {}
    bracket_opener: int | None = None
    bracket_closer: int | None = None
    parenthesis_owner: int | None = None

    # Enclosing (opener, closer) parenthesis pairs, outermost first
    nested_parenthesis: tuple[tuple[int, int], ...] = ()
    # Enclosing scope owner positions, outermost first
    conditions: tuple[int, ...] = ()

    @property
    def is_empty(self) -> bool:
        return self.kind in EMPTY_TOKENS

    def __str__(self) -> str:
        return f"{self.kind.value}({self.text!r})@{self.position}"
