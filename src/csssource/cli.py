"""csssource command line interface."""

from __future__ import annotations

import logging
from pathlib import Path

import click

from csssource import __version__
from csssource.config import CssSourceConfig, discover_config
from csssource.errors import CssSyntaxError, InvalidInputError, SourceMapError
from csssource.highlight import render
from csssource.previous_map import MapOptions
from csssource.source import Source, SourceOptions, create
from csssource.tokenizer import Tokenizer, tokenize


def _read(file: str) -> str:
    if file == "-":
        return click.get_text_stream("stdin").read()
    return Path(file).read_text(encoding="utf-8")


def _config_for(file: str) -> CssSourceConfig:
    return discover_config(None if file == "-" else Path(file))


def _source(file: str, config: CssSourceConfig, *, from_: str | None = None,
            map_path: str | None = None, css: str | None = None) -> Source:
    if map_path:
        map_options: MapOptions | bool = MapOptions(prev=Path(map_path))
    elif config.map.enabled:
        map_options = MapOptions()
    else:
        map_options = False
    name = from_ or (None if file == "-" else file)
    if css is None:
        css = _read(file)
    return create(css, SourceOptions(from_=name, map=map_options))


def _fail(error: CssSyntaxError, *, color: bool) -> None:
    click.echo(f"error: {error.message}", err=True)
    code = error.show_source_code(color=color)
    if code:
        click.echo(code, err=True)
    generated = error.generated
    if generated and (generated.line, generated.file) != (error.line, error.file):
        where = generated.file or "<css input>"
        click.echo(
            f"  (generated: {where}:{generated.line}:{generated.column})", err=True
        )
    raise SystemExit(1)


@click.group()
@click.version_option(__version__, prog_name="csssource")
@click.option("--verbose", "-v", is_flag=True, help="Log map discovery and tokenizer recovery.")
def main(verbose: bool) -> None:
    """Source tracking and terminal highlighting for CSS."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s:%(name)s:%(message)s")


@main.command(name="highlight")
@click.argument("file", default="-")
@click.option("--color/--no-color", default=None, help="Force colour on or off.")
def highlight_cmd(file: str, color: bool | None) -> None:
    """Print a CSS file with syntax colours."""
    config = _config_for(file)
    use_color = config.highlight.color if color is None else color
    try:
        css = _read(file)
        source = _source(file, config, css=css)
        bom = css[:1] if source.has_bom else ""
        if not use_color:
            click.echo(bom + source.css, nl=False)
            return
        tokens = Tokenizer(source, ignore_errors=config.highlight.ignore_errors)
        click.echo(bom + render(tokens), nl=False, color=True)
    except CssSyntaxError as e:
        _fail(e, color=use_color)
    except (FileNotFoundError, InvalidInputError, SourceMapError) as e:
        click.echo(f"error: {e}", err=True)
        raise SystemExit(1)


@main.command()
@click.argument("file", default="-")
@click.option("--from", "from_", default=None, help="File name to report instead of FILE.")
@click.option("--color/--no-color", default=None, help="Force colour on or off.")
def check(file: str, from_: str | None, color: bool | None) -> None:
    """Tokenize a CSS file strictly and report the first syntax error."""
    config = _config_for(file)
    use_color = config.highlight.color if color is None else color
    try:
        source = _source(file, config, from_=from_)
        tokens = tokenize(source)
    except CssSyntaxError as e:
        _fail(e, color=use_color)
    except (FileNotFoundError, InvalidInputError, SourceMapError) as e:
        click.echo(f"error: {e}", err=True)
        raise SystemExit(1)
    click.echo(f"checked {source.from_}: {len(tokens)} tokens, no errors")


@main.command()
@click.argument("file")
@click.argument("line", type=click.IntRange(min=1))
@click.argument("column", type=click.IntRange(min=1))
@click.option("--map", "map_path", default=None, type=click.Path(exists=True),
              help="Previous source map to use instead of the annotation.")
def origin(file: str, line: int, column: int, map_path: str | None) -> None:
    """Trace LINE:COLUMN of a generated CSS file back to its authored source."""
    try:
        source = _source(file, _config_for(file), map_path=map_path)
    except (FileNotFoundError, InvalidInputError, SourceMapError) as e:
        click.echo(f"error: {e}", err=True)
        raise SystemExit(1)

    found = source.origin(line, column)
    if found:
        click.echo(str(found))
    else:
        click.echo(f"{source.from_}:{line}:{column} (generated)")
