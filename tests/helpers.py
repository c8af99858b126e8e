"""Shared test helpers for the csssource test suite."""

from __future__ import annotations

import base64
import json

from csssource.source import Source, SourceOptions
from csssource.tokenizer import tokenize

# Generated line 2, column 5 -> a.sass line 10, column 3 (all 1-based).
SASS_MAPPINGS = ";IASE"


def inline_annotation(data: dict) -> str:
    """Build a base64 `sourceMappingURL` comment embedding a map."""
    encoded = base64.b64encode(json.dumps(data).encode("utf-8")).decode("ascii")
    return f"/*# sourceMappingURL=data:application/json;base64,{encoded} */"


def lex(css: str, *, ignore_errors: bool = False) -> list[tuple[str, str]]:
    """Tokenize css and return (kind value, token value) pairs."""
    source = Source(css, SourceOptions(map=False))
    return [(t.kind.value, t.value) for t in tokenize(source, ignore_errors=ignore_errors)]
