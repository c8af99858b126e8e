"""Lossless tokenizer for CSS text.

Produces the token stream consumed by the highlighter. Every character of the
input lands in exactly one token, so joining token values gives back the
original text, including whitespace, comments and malformed regions.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Protocol

from csssource.tokens import PUNCTUATION, Token, TokenKind

if TYPE_CHECKING:
    from csssource.source import Source

log = logging.getLogger(__name__)

_SPACE = frozenset(" \n\t\r\f")
_AT_END_RE = re.compile(r"[\t\n\f\r \"#'()/;\[\\\]{}]")
_WORD_END_RE = re.compile(r"[\t\n\f\r !\"#'():;@\[\\\]{}]|/(?=\*)")
_BAD_BRACKET_RE = re.compile(r".[\r\n\"'(/\\]")
_HEX_RE = re.compile(r"[0-9a-fA-F]")


class TokenStream(Protocol):
    """What the highlighter needs from a tokenizer."""

    def next_token(self) -> Token | None: ...

    def back(self, token: Token) -> None: ...

    def peek(self) -> Token | None: ...

    def end_of_file(self) -> bool: ...


class Tokenizer:
    """Tokenizes the text of a Source one token at a time.

    With ``ignore_errors`` set, unclosed strings, comments and ``url(``
    brackets are recovered from instead of raising CssSyntaxError.
    """

    def __init__(self, source: Source, *, ignore_errors: bool = False) -> None:
        self.source = source
        self.css = source.css
        self.ignore_errors = ignore_errors
        self.pos = 0
        self._returned: list[Token] = []
        # Last unconsumed word token, used to recognise `url(`.
        self._last_word: Token | None = None

    def position(self) -> int:
        return self.pos

    def end_of_file(self) -> bool:
        return not self._returned and self.pos >= len(self.css)

    def back(self, token: Token) -> None:
        self._returned.append(token)

    def peek(self) -> Token | None:
        """Return the next token without consuming it."""
        if self._returned:
            return self._returned[-1]
        token = self.next_token()
        if token is not None:
            self._returned.append(token)
        return token

    def __iter__(self):
        while not self.end_of_file():
            token = self.next_token()
            if token is None:
                return
            yield token

    def next_token(self, *, ignore_unclosed: bool = False) -> Token | None:
        if self._returned:
            return self._returned.pop()
        if self.pos >= len(self.css):
            return None

        ch = self.css[self.pos]
        if ch in _SPACE:
            token = self._lex_space()
        elif ch in PUNCTUATION:
            token = Token(PUNCTUATION[ch], ch, self.pos, self.pos)
        elif ch == "(":
            token = self._lex_paren(ignore_unclosed)
        elif ch in ("'", '"'):
            token = self._lex_string(ch, ignore_unclosed)
        elif ch == "@":
            token = self._lex_at_word()
        elif ch == "\\":
            token = self._lex_escape()
        elif ch == "/" and self._char(self.pos + 1) == "*":
            token = self._lex_comment(ignore_unclosed)
        else:
            token = self._lex_word()

        self.pos = token.end + 1
        return token

    # ── Helpers ───────────────────────────────────────────────────

    def _char(self, index: int) -> str:
        if 0 <= index < len(self.css):
            return self.css[index]
        return ""

    def _emit(self, kind: TokenKind, start: int, end: int) -> Token:
        return Token(kind, self.css[start:end + 1], start, end)

    def _unclosed(self, what: str, ignore_unclosed: bool) -> None:
        """Raise CssSyntaxError for an unclosed construct unless recovering."""
        if self.ignore_errors or ignore_unclosed:
            log.debug("recovering from unclosed %s at offset %d", what, self.pos)
            return
        line, column = self.source.from_offset(self.pos) or (None, None)
        raise self.source.error(f"Unclosed {what}", line, column)

    def _closing(self, char: str, start: int) -> int:
        """Find the next unescaped `char` after `start`, or -1."""
        nxt = start
        while True:
            nxt = self.css.find(char, nxt + 1)
            if nxt == -1:
                return -1
            escape_pos = nxt
            escaped = False
            while self._char(escape_pos - 1) == "\\":
                escape_pos -= 1
                escaped = not escaped
            if not escaped:
                return nxt

    # ── Tokens ───────────────────────────────────────────────────

    def _lex_space(self) -> Token:
        nxt = self.pos
        while self._char(nxt + 1) in _SPACE:
            nxt += 1
        return self._emit(TokenKind.SPACE, self.pos, nxt)

    def _lex_paren(self, ignore_unclosed: bool) -> Token:
        prev = self._last_word.value if self._last_word else ""
        self._last_word = None
        following = self._char(self.pos + 1)

        if prev == "url" and following not in ("'", '"') and following not in _SPACE:
            nxt = self._closing(")", self.pos)
            if nxt == -1:
                self._unclosed("bracket", ignore_unclosed)
                nxt = self.pos
            return self._emit(TokenKind.BRACKETS, self.pos, nxt)

        nxt = self.css.find(")", self.pos + 1)
        content = self.css[self.pos:nxt + 1]
        if nxt == -1 or _BAD_BRACKET_RE.search(content):
            return Token(TokenKind.LPAREN, "(", self.pos, self.pos)
        return self._emit(TokenKind.BRACKETS, self.pos, nxt)

    def _lex_string(self, quote: str, ignore_unclosed: bool) -> Token:
        nxt = self._closing(quote, self.pos)
        if nxt == -1:
            self._unclosed("string", ignore_unclosed)
            nxt = self.pos + 1
        return self._emit(TokenKind.STRING, self.pos, min(nxt, len(self.css) - 1))

    def _lex_at_word(self) -> Token:
        match = _AT_END_RE.search(self.css, self.pos + 1)
        nxt = match.start() - 1 if match else len(self.css) - 1
        return self._emit(TokenKind.AT_WORD, self.pos, nxt)

    def _lex_escape(self) -> Token:
        nxt = self.pos
        escape = True
        while self._char(nxt + 1) == "\\":
            nxt += 1
            escape = not escape
        following = self._char(nxt + 1)
        if escape and following and following != "/" and following not in _SPACE:
            nxt += 1
            if _HEX_RE.match(self._char(nxt)):
                while _HEX_RE.match(self._char(nxt + 1)):
                    nxt += 1
                if self._char(nxt + 1) == " ":
                    nxt += 1
        return self._emit(TokenKind.WORD, self.pos, nxt)

    def _lex_comment(self, ignore_unclosed: bool) -> Token:
        nxt = self.css.find("*/", self.pos + 2) + 1
        if nxt == 0:
            self._unclosed("comment", ignore_unclosed)
            nxt = len(self.css) - 1
        return self._emit(TokenKind.COMMENT, self.pos, nxt)

    def _lex_word(self) -> Token:
        match = _WORD_END_RE.search(self.css, self.pos + 1)
        nxt = match.start() - 1 if match else len(self.css) - 1
        token = self._emit(TokenKind.WORD, self.pos, nxt)
        self._last_word = token
        return token


def tokenize(source: Source, *, ignore_errors: bool = False) -> list[Token]:
    """Tokenize the whole source and return the token list."""
    return list(Tokenizer(source, ignore_errors=ignore_errors))
