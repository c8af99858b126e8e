"""Reading of version 3 source maps.

Only consumption is supported: a map emitted by an earlier compiler (Sass,
Less, a minifier) is decoded so positions in the generated CSS can be traced
back to the authored file. Lines and columns are 1-based on the public API.
"""

from __future__ import annotations

import json
from bisect import bisect_right
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from csssource.errors import SourceMapError

_BASE64 = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
_BASE64_VALUES = {ch: i for i, ch in enumerate(_BASE64)}
_VLQ_CONTINUATION = 0b100000
_VLQ_MASK = 0b011111
_XSSI_PREFIX = ")]}'"


@dataclass(frozen=True)
class OriginalPosition:
    """Result of a lookup; `source` is None when nothing maps there."""

    source: str | None = None
    line: int | None = None
    column: int | None = None
    name: str | None = None


@dataclass(frozen=True)
class _Segment:
    column: int
    source: int | None = None
    line: int = 0
    source_column: int = 0
    name: int | None = None


@runtime_checkable
class MapConsumer(Protocol):
    """Position lookups over a decoded source map."""

    file: str | None
    source_root: str | None
    sources: list[str]

    def original_position_for(self, line: int, column: int) -> OriginalPosition: ...

    def source_content_for(self, source: str) -> str | None: ...


def decode_vlq(segment: str) -> list[int]:
    """Decode one comma-separated field of `mappings` into integers."""
    values: list[int] = []
    shift = 0
    value = 0
    for ch in segment:
        try:
            digit = _BASE64_VALUES[ch]
        except KeyError:
            raise SourceMapError(f"invalid base64 digit {ch!r} in mappings") from None
        value += (digit & _VLQ_MASK) << shift
        if digit & _VLQ_CONTINUATION:
            shift += 5
            continue
        negative = value & 1
        value >>= 1
        values.append(-value if negative else value)
        value = 0
        shift = 0
    if shift:
        raise SourceMapError(f"truncated VLQ segment {segment!r}")
    return values


class SourceMapConsumer:
    """Decoded version 3 source map answering original-position queries."""

    def __init__(self, raw: str | bytes | dict[str, Any]) -> None:
        data = self._load(raw)
        if "sections" in data:
            raise SourceMapError("indexed source maps are not supported")
        if data.get("version") != 3:
            raise SourceMapError(f"unsupported source map version: {data.get('version')!r}")

        self.raw = data
        self.file: str | None = data.get("file") or None
        self.source_root: str | None = data.get("sourceRoot") or None
        self.sources: list[str] = list(data.get("sources") or [])
        self.sources_content: list[str | None] = list(data.get("sourcesContent") or [])
        self.names: list[str] = list(data.get("names") or [])
        self._lines = self._parse_mappings(data.get("mappings") or "")
        self._columns = [[seg.column for seg in line] for line in self._lines]

    @staticmethod
    def _load(raw: str | bytes | dict[str, Any]) -> dict[str, Any]:
        if isinstance(raw, dict):
            return raw
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        if raw.startswith(_XSSI_PREFIX):
            raw = raw.split("\n", 1)[1] if "\n" in raw else ""
        try:
            data = json.loads(raw)
        except ValueError as e:
            raise SourceMapError(f"source map is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise SourceMapError("source map must be a JSON object")
        return data

    def _parse_mappings(self, mappings: str) -> list[list[_Segment]]:
        lines: list[list[_Segment]] = []
        source = line = column = name = 0
        for encoded_line in mappings.split(";"):
            segments: list[_Segment] = []
            generated_column = 0
            for encoded in encoded_line.split(","):
                if not encoded:
                    continue
                fields = decode_vlq(encoded)
                generated_column += fields[0]
                if len(fields) == 1:
                    segments.append(_Segment(generated_column))
                    continue
                if len(fields) not in (4, 5):
                    raise SourceMapError(f"segment {encoded!r} has {len(fields)} fields")
                source += fields[1]
                line += fields[2]
                column += fields[3]
                name_index = None
                if len(fields) == 5:
                    name += fields[4]
                    name_index = name
                segments.append(_Segment(generated_column, source, line, column, name_index))
            segments.sort(key=lambda seg: seg.column)
            lines.append(segments)
        return lines

    def original_position_for(self, line: int, column: int) -> OriginalPosition:
        """Find the authored position of a generated (line, column).

        Uses the closest segment starting at or before the column on the same
        generated line. Misses come back with `source` set to None.
        """
        if not 1 <= line <= len(self._lines):
            return OriginalPosition()
        index = bisect_right(self._columns[line - 1], column - 1) - 1
        if index < 0:
            return OriginalPosition()
        seg = self._lines[line - 1][index]
        if seg.source is None or not 0 <= seg.source < len(self.sources):
            return OriginalPosition()
        name = None
        if seg.name is not None and 0 <= seg.name < len(self.names):
            name = self.names[seg.name]
        return OriginalPosition(
            source=self.sources[seg.source],
            line=seg.line + 1,
            column=seg.source_column + 1,
            name=name,
        )

    def source_content_for(self, source: str) -> str | None:
        """Return the embedded text of an original source, if the map has it."""
        try:
            index = self.sources.index(source)
        except ValueError:
            return None
        if index < len(self.sources_content):
            return self.sources_content[index]
        return None

    def to_json(self) -> str:
        return json.dumps(self.raw)
