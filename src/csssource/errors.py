"""Errors and the CSS diagnostic with its source excerpt rendering."""

from __future__ import annotations

import re
from dataclasses import dataclass

from pygments.console import ansiformat, colorize

_LINE_BREAK_RE = re.compile(r"\r?\n")


class InvalidInputError(TypeError):
    """Raised when a Source is built from something that is not CSS text."""


class SourceMapError(ValueError):
    """A previous source map that cannot be loaded or decoded."""


@dataclass(frozen=True)
class GeneratedPosition:
    """Where a diagnostic sits in the CSS that was actually processed."""

    line: int | None
    column: int | None
    source: str
    file: str | None = None


class CssSyntaxError(Exception):
    """A diagnostic pointing at a position in CSS.

    `line`, `column`, `source` and `file` describe the authored location when
    a previous source map could resolve it, and the processed CSS otherwise;
    `generated` always holds the processed CSS location.
    """

    def __init__(
        self,
        reason: str,
        line: int | None = None,
        column: int | None = None,
        source: str | None = None,
        file: str | None = None,
        plugin: str | None = None,
    ) -> None:
        self.reason = reason
        self.line = line
        self.column = column
        self.source = source
        self.file = file
        self.plugin = plugin
        self.generated: GeneratedPosition | None = None
        self.message = self._format_message()
        super().__init__(self.message)

    def _format_message(self) -> str:
        message = f"{self.plugin}: " if self.plugin else ""
        message += self.file or "<css input>"
        if self.line is not None:
            message += f":{self.line}:{self.column}"
        return f"{message}: {self.reason}"

    def show_source_code(self, color: bool = False) -> str:
        """Render the lines around the error with a caret under the column."""
        if not self.source or self.line is None:
            return ""

        if color:
            from csssource.highlight import highlight

            def mark(text: str) -> str:
                return ansiformat("*red*", text)

            def aside(text: str) -> str:
                return colorize("brightblack", text)

            # Highlight the whole text once so multi-line tokens keep colour.
            painted = _LINE_BREAK_RE.split(highlight(self.source))
        else:
            def mark(text: str) -> str:
                return text

            aside = mark
            painted = None

        lines = _LINE_BREAK_RE.split(self.source)
        start = max(self.line - 3, 0)
        end = min(self.line + 2, len(lines))
        width = len(str(end))
        column = self.column or 1

        out: list[str] = []
        for number, line in enumerate(lines[start:end], start + 1):
            gutter = f" {number:>{width}} | "
            shown = line if painted is None else painted[number - 1]
            if number == self.line:
                spacing = aside(re.sub(r"\d", " ", gutter)) + re.sub(
                    r"[^\t]", " ", line[: column - 1]
                )
                out.append(
                    mark(">") + aside(gutter) + shown
                    + "\n " + spacing + mark("^")
                )
            else:
                out.append(" " + aside(gutter) + shown)
        return "\n".join(out)

    def __str__(self) -> str:
        code = self.show_source_code()
        if code:
            return f"{self.message}\n\n{code}\n"
        return self.message
