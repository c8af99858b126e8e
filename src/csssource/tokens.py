"""Token kinds and token representation for the CSS tokenizer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TokenKind(Enum):
    # Runs of text
    SPACE = "space"
    WORD = "word"
    STRING = "string"
    AT_WORD = "at-word"
    COMMENT = "comment"

    # A whole parenthesized group, e.g. `(min-width: 10px)` or `url(a.png)`
    BRACKETS = "brackets"

    # Punctuation
    LPAREN = "("
    RPAREN = ")"
    LBRACKET = "["
    RBRACKET = "]"
    LBRACE = "{"
    RBRACE = "}"
    COLON = ":"
    SEMICOLON = ";"


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    value: str
    start: int
    end: int


PUNCTUATION: dict[str, TokenKind] = {
    "[": TokenKind.LBRACKET,
    "]": TokenKind.RBRACKET,
    "{": TokenKind.LBRACE,
    "}": TokenKind.RBRACE,
    ":": TokenKind.COLON,
    ";": TokenKind.SEMICOLON,
    ")": TokenKind.RPAREN,
}

# Token kinds that, seen right after a token, make that token a function call.
CALL_OPENERS: frozenset[TokenKind] = frozenset({
    TokenKind.BRACKETS,
    TokenKind.LPAREN,
})
