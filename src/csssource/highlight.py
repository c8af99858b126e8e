"""Terminal syntax highlighting for CSS."""

from __future__ import annotations

import re
from enum import Enum

from pygments.console import colorize

from csssource.source import Source, SourceOptions
from csssource.tokenizer import Tokenizer, TokenStream
from csssource.tokens import CALL_OPENERS, Token, TokenKind

_LINE_BREAK_RE = re.compile(r"(\r?\n)")
_ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")


class HighlightCategory(Enum):
    CLASS = "class"
    HASH = "hash"
    CALL = "call"
    COMMENT = "comment"
    STRING = "string"
    AT_WORD = "at-word"
    BRACKETS = "brackets"
    LPAREN = "("
    RPAREN = ")"
    LBRACE = "{"
    RBRACE = "}"
    LBRACKET = "["
    RBRACKET = "]"
    COLON = ":"
    SEMICOLON = ";"
    NONE = "none"


_CATEGORY_BY_KIND: dict[TokenKind, HighlightCategory] = {
    TokenKind.COMMENT: HighlightCategory.COMMENT,
    TokenKind.STRING: HighlightCategory.STRING,
    TokenKind.AT_WORD: HighlightCategory.AT_WORD,
    TokenKind.BRACKETS: HighlightCategory.BRACKETS,
    TokenKind.LPAREN: HighlightCategory.LPAREN,
    TokenKind.RPAREN: HighlightCategory.RPAREN,
    TokenKind.LBRACE: HighlightCategory.LBRACE,
    TokenKind.RBRACE: HighlightCategory.RBRACE,
    TokenKind.LBRACKET: HighlightCategory.LBRACKET,
    TokenKind.RBRACKET: HighlightCategory.RBRACKET,
    TokenKind.COLON: HighlightCategory.COLON,
    TokenKind.SEMICOLON: HighlightCategory.SEMICOLON,
}

# pygments.console colour names
THEME: dict[HighlightCategory, str] = {
    HighlightCategory.CLASS: "cyan",
    HighlightCategory.AT_WORD: "cyan",
    HighlightCategory.CALL: "cyan",
    HighlightCategory.BRACKETS: "cyan",
    HighlightCategory.LPAREN: "cyan",
    HighlightCategory.RPAREN: "cyan",
    HighlightCategory.COMMENT: "brightblack",
    HighlightCategory.STRING: "green",
    HighlightCategory.HASH: "magenta",
    HighlightCategory.LBRACE: "yellow",
    HighlightCategory.RBRACE: "yellow",
    HighlightCategory.LBRACKET: "yellow",
    HighlightCategory.RBRACKET: "yellow",
    HighlightCategory.COLON: "yellow",
    HighlightCategory.SEMICOLON: "yellow",
}


def classify(token: Token, stream: TokenStream) -> HighlightCategory:
    """Pick the display category of a token, looking one token ahead.

    `.name` and `#name` words are class and id selectors; any token directly
    followed by a parenthesized group is a function call.
    """
    if token.kind is TokenKind.WORD:
        if token.value.startswith("."):
            return HighlightCategory.CLASS
        if token.value.startswith("#"):
            return HighlightCategory.HASH

    if not stream.end_of_file():
        following = stream.peek()
        if following is not None and following.kind in CALL_OPENERS:
            return HighlightCategory.CALL

    return _CATEGORY_BY_KIND.get(token.kind, HighlightCategory.NONE)


def _paint(color: str, text: str) -> str:
    # Each line is wrapped on its own so no colour spans a line break.
    return "".join(
        part if not part or _LINE_BREAK_RE.fullmatch(part) else colorize(color, part)
        for part in _LINE_BREAK_RE.split(text)
    )


def render(stream: TokenStream) -> str:
    """Colour every token of the stream for a terminal."""
    out: list[str] = []
    while not stream.end_of_file():
        token = stream.next_token()
        if token is None:
            break
        color = THEME.get(classify(token, stream))
        out.append(_paint(color, token.value) if color else token.value)
    return "".join(out)


def highlight(css: str) -> str:
    """Highlight CSS text, tolerating malformed input."""
    source = Source(css, SourceOptions(map=False))
    bom = css[:1] if source.has_bom else ""
    return bom + render(Tokenizer(source, ignore_errors=True))


def strip_ansi(text: str) -> str:
    """Remove colour sequences, leaving the plain text."""
    return _ANSI_RE.sub("", text)
