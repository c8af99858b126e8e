"""Source CSS representation and position tracking for diagnostics."""

from __future__ import annotations

import logging
import threading
from bisect import bisect_right
from dataclasses import dataclass, replace
from typing import Literal

from csssource.errors import CssSyntaxError, GeneratedPosition, InvalidInputError
from csssource.paths import resolve_path
from csssource.previous_map import MapOptions, PreviousMap

log = logging.getLogger(__name__)

_BOMS = ("\ufeff", "\ufffe")


@dataclass(frozen=True)
class OriginResult:
    """A position in the authored source, found through the previous map."""

    file: str
    line: int
    column: int
    source: str | None = None

    def __str__(self) -> str:
        return f"{self.file}:{self.line}:{self.column}"


@dataclass
class SourceOptions:
    """Construction options: the `from` file name and previous map settings.

    `map=False` skips looking for a previous map altogether.
    """

    from_: str | None = None
    map: MapOptions | Literal[False] | None = None


class IdSequence:
    """Hands out `<input css N>` identifiers for sources without a file."""

    def __init__(self) -> None:
        self._value = 0
        self._lock = threading.Lock()

    def next_id(self) -> str:
        with self._lock:
            self._value += 1
            value = self._value
        return f"<input css {value}>"


_default_sequence = IdSequence()


def _to_text(css: object) -> str:
    if css is None:
        raise InvalidInputError("received None instead of CSS string")
    if isinstance(css, str):
        return css
    if isinstance(css, (bytes, bytearray)):
        try:
            return bytes(css).decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidInputError(f"received bytes that are not UTF-8 text: {e}") from e
    if type(css).__str__ is object.__str__:
        raise InvalidInputError(f"received {css!r} instead of CSS string")
    return str(css)


class Source:
    """The CSS being processed, with its file identity and previous map."""

    def __init__(
        self,
        css: object,
        options: SourceOptions | None = None,
        *,
        sequence: IdSequence | None = None,
    ) -> None:
        options = options or SourceOptions()
        self.css = _to_text(css)

        if self.css[:1] in _BOMS:
            self.has_bom = True
            self.css = self.css[1:]
        else:
            self.has_bom = False

        self.file: str | None = None
        self.id: str | None = None
        self.map: PreviousMap | None = None
        self._line_starts: list[int] | None = None

        if options.from_:
            self.file = resolve_path(options.from_)

        if options.map is not False:
            prev = PreviousMap(self.css, options.from_, options.map or MapOptions())
            if prev.text:
                self.map = prev
                declared = prev.consumer().file
                if not self.file and declared:
                    self.file = self.map_resolve(declared)

        if not self.file:
            self.id = (sequence or _default_sequence).next_id()
            log.debug("assigned %s to anonymous CSS input", self.id)
        if self.map:
            self.map.file = self.from_

    @property
    def from_(self) -> str:
        """The file path if known, otherwise the synthetic id."""
        return self.file or self.id or ""

    def __repr__(self) -> str:
        return f"Source({self.from_!r})"

    def error(
        self,
        message: str,
        line: int | None,
        column: int | None,
        *,
        plugin: str | None = None,
    ) -> CssSyntaxError:
        """Build a diagnostic for a position in this CSS.

        The primary location is the authored one when the previous map knows
        it; the processed-CSS location is always kept on `generated`.
        """
        origin = False
        if line is not None and column is not None:
            origin = self.origin(line, column)
        if origin:
            result = CssSyntaxError(
                message, origin.line, origin.column, origin.source, origin.file, plugin,
            )
        else:
            result = CssSyntaxError(message, line, column, self.css, self.file, plugin)
        result.generated = GeneratedPosition(line, column, self.css, self.file)
        return result

    def origin(self, line: int, column: int) -> OriginResult | Literal[False]:
        """Position in the authored source (e.g. a Sass file) for a CSS position.

        Returns False when there is no previous map or nothing maps there.
        """
        if self.map is None:
            return False
        consumer = self.map.consumer()

        found = consumer.original_position_for(line, column)
        if not found.source or found.line is None or found.column is None:
            return False

        result = OriginResult(
            file=self.map_resolve(found.source),
            line=found.line,
            column=found.column,
        )
        content = consumer.source_content_for(found.source)
        if content:
            result = replace(result, source=content)
        return result

    def map_resolve(self, file: str) -> str:
        """Resolve a path named in the previous map against its sourceRoot."""
        root = self.map.consumer().source_root if self.map else None
        return resolve_path(file, root or ".")

    def from_offset(self, offset: int) -> tuple[int, int] | None:
        """Convert a 0-based offset into a 1-based (line, column)."""
        if not 0 <= offset <= len(self.css):
            return None
        if self._line_starts is None:
            starts = [0]
            for index, ch in enumerate(self.css):
                if ch == "\n":
                    starts.append(index + 1)
            self._line_starts = starts
        line = bisect_right(self._line_starts, offset)
        return line, offset - self._line_starts[line - 1] + 1


class SourceFactory:
    """Builds sources that share one id sequence."""

    def __init__(self, sequence: IdSequence | None = None) -> None:
        self.sequence = sequence or IdSequence()

    def create(self, css: object, options: SourceOptions | None = None) -> Source:
        return Source(css, options, sequence=self.sequence)


_default_factory = SourceFactory(_default_sequence)


def create(css: object, options: SourceOptions | None = None) -> Source:
    """Build a Source numbered from the process-wide id sequence."""
    return _default_factory.create(css, options)
