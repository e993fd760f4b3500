"""Tokenization layer: PHP source to an indexable token stream.

Provides:
- PHPTokenizer: tree-sitter backed lexer
- TokenStream: flat token sequence with scope and bracket information
- Token, TokenKind: token model
"""

from .models import (
    ASSIGNMENT_TOKENS,
    EMPTY_TOKENS,
    OO_SCOPE_TOKENS,
    Token,
    TokenKind,
)
from .stream import Lexeme, TokenStream
from .tokenizer import PHPTokenizer

__all__ = [
    # Model
    "Token",
    "TokenKind",
    "EMPTY_TOKENS",
    "ASSIGNMENT_TOKENS",
    "OO_SCOPE_TOKENS",
    # Stream
    "Lexeme",
    "TokenStream",
    # Tokenizer
    "PHPTokenizer",
]
