"""Source position tracking and terminal highlighting for CSS."""

from csssource.errors import CssSyntaxError, GeneratedPosition, InvalidInputError, SourceMapError
from csssource.highlight import HighlightCategory, classify, highlight, render
from csssource.previous_map import MapOptions, PreviousMap
from csssource.source import (
    IdSequence,
    OriginResult,
    Source,
    SourceFactory,
    SourceOptions,
    create,
)
from csssource.source_map import MapConsumer, OriginalPosition, SourceMapConsumer
from csssource.tokenizer import Tokenizer, TokenStream, tokenize
from csssource.tokens import Token, TokenKind

__version__ = "0.1.0"

__all__ = [
    "CssSyntaxError",
    "GeneratedPosition",
    "HighlightCategory",
    "IdSequence",
    "InvalidInputError",
    "MapConsumer",
    "MapOptions",
    "OriginResult",
    "OriginalPosition",
    "PreviousMap",
    "Source",
    "SourceFactory",
    "SourceMapConsumer",
    "SourceMapError",
    "SourceOptions",
    "Token",
    "TokenKind",
    "TokenStream",
    "Tokenizer",
    "classify",
    "create",
    "highlight",
    "render",
    "tokenize",
]
