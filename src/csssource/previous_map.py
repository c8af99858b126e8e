"""Discovery of a source map left behind by an earlier compilation step."""

from __future__ import annotations

import base64
import binascii
import json
import logging
import os
import re
from dataclasses import dataclass
from typing import Any, Callable, Optional, Union
from urllib.parse import unquote

from csssource.errors import SourceMapError
from csssource.source_map import SourceMapConsumer

log = logging.getLogger(__name__)

_ANNOTATION_RE = re.compile(r"/\*\s*# sourceMappingURL=")
_CHARSET_URI_RE = re.compile(r"^data:application/json;charset=utf-?8,")
_URI_RE = re.compile(r"^data:application/json,")
_BASE64_CHARSET_URI_RE = re.compile(r"^data:application/json;charset=utf-?8;base64,")
_BASE64_URI_RE = re.compile(r"^data:application/json;base64,")
_ENCODING_RE = re.compile(r"data:application/json;([^,]+),")

PrevMap = Union[
    str,
    bool,
    dict[str, Any],
    SourceMapConsumer,
    os.PathLike,
    Callable[[Optional[str]], Optional[str]],
    None,
]


@dataclass
class MapOptions:
    """How to find the previous map.

    `prev` overrides discovery: map JSON text, a map dict, a consumer, a path,
    a callable taking the `from` file and returning a map path, or False to
    ignore annotations entirely.
    """

    prev: PrevMap = None


class PreviousMap:
    """The source map of the CSS as it came in, if there is one."""

    def __init__(
        self,
        css: str,
        from_: str | None = None,
        options: MapOptions | None = None,
    ) -> None:
        options = options or MapOptions()
        self.annotation: str | None = None
        self.inline = False
        self.map_file: str | None = None
        self.root: str | None = None
        self.text: str | None = None
        self.file: str | None = None
        self._consumer: SourceMapConsumer | None = None

        self._load_annotation(css)
        self.inline = bool(self.annotation and self.annotation.startswith("data:"))

        text = self._load_map(from_, options.prev)
        if not self.map_file and from_:
            self.map_file = from_
        if self.map_file:
            self.root = os.path.dirname(self.map_file)
        if text:
            self.text = text

    def consumer(self) -> SourceMapConsumer:
        if self._consumer is None:
            if self.text is None:
                raise SourceMapError("no previous source map was found")
            self._consumer = SourceMapConsumer(self.text)
        return self._consumer

    def with_content(self) -> bool:
        """Whether the map embeds the text of its original sources."""
        return len(self.consumer().sources_content) > 0

    # ── Discovery ────────────────────────────────────────────────

    def _load_annotation(self, css: str) -> None:
        matches = list(_ANNOTATION_RE.finditer(css))
        if not matches:
            return
        start = matches[-1].start()
        end = css.find("*/", start)
        if end > -1:
            comment = css[start:end]
            self.annotation = _ANNOTATION_RE.sub("", comment, count=1).strip()

    def _decode_inline(self, text: str) -> str:
        match = _CHARSET_URI_RE.match(text) or _URI_RE.match(text)
        if match:
            return unquote(text[match.end():])

        match = _BASE64_CHARSET_URI_RE.match(text) or _BASE64_URI_RE.match(text)
        if match:
            try:
                return base64.b64decode(text[match.end():]).decode("utf-8")
            except (binascii.Error, UnicodeDecodeError) as e:
                raise SourceMapError(f"cannot decode inline source map: {e}") from e

        encoding = _ENCODING_RE.search(text)
        raise SourceMapError(
            f"Unsupported source map encoding {encoding.group(1) if encoding else text!r}"
        )

    def _load_file(self, path: str) -> str | None:
        self.root = os.path.dirname(path)
        if os.path.isfile(path):
            self.map_file = path
            log.debug("loading previous source map from %s", path)
            with open(path, encoding="utf-8") as f:
                return f.read().strip()
        return None

    def _load_map(self, file: str | None, prev: PrevMap) -> str | None:
        if prev is False:
            return None

        if prev is not None and prev is not True:
            if isinstance(prev, str):
                return prev
            if isinstance(prev, os.PathLike):
                path = os.fspath(prev)
                text = self._load_file(path)
                if text is None:
                    raise SourceMapError(f"Unable to load previous source map: {path}")
                return text
            if isinstance(prev, dict):
                if isinstance(prev.get("mappings"), str) or isinstance(prev.get("sections"), list):
                    return json.dumps(prev)
                raise SourceMapError(f"Unsupported previous source map format: {prev!r}")
            if isinstance(prev, SourceMapConsumer):
                return prev.to_json()
            if callable(prev):
                prev_path = prev(file)
                if not prev_path:
                    return None
                text = self._load_file(prev_path)
                if text is None:
                    raise SourceMapError(f"Unable to load previous source map: {prev_path}")
                return text
            raise SourceMapError(f"Unsupported previous source map format: {prev!r}")

        if self.inline:
            log.debug("decoding inline source map annotation")
            return self._decode_inline(self.annotation or "")
        if self.annotation:
            path = self.annotation
            if file:
                path = os.path.join(os.path.dirname(file), path)
            return self._load_file(path)
        return None
