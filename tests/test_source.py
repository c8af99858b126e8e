"""Tests for Source: BOM handling, file identity, ids, origin and diagnostics."""

from __future__ import annotations

import json
import os
import re
from concurrent.futures import ThreadPoolExecutor

import pytest

from csssource.errors import CssSyntaxError, InvalidInputError
from csssource.previous_map import MapOptions
from csssource.source import IdSequence, OriginResult, Source, SourceOptions, create
from tests.helpers import inline_annotation

GENERATED = "a {}\nb {  color: red }\n"


def with_map(data: dict, *, from_: str | None = None, css: str = GENERATED, sequence=None) -> Source:
    return Source(css, SourceOptions(from_=from_, map=MapOptions(prev=data)), sequence=sequence)


class TestSourceText:
    def test_plain_text_kept(self):
        source = Source("a{}")
        assert source.css == "a{}"
        assert source.has_bom is False

    @pytest.mark.parametrize("bom", ["\ufeff", "\ufffe"])
    def test_bom_stripped(self, bom):
        source = Source(bom + "a{}")
        assert source.css == "a{}"
        assert source.has_bom is True

    def test_only_one_bom_stripped(self):
        source = Source("\ufeff\ufeffa{}")
        assert source.css == "\ufeffa{}"
        assert source.has_bom is True

    def test_bom_elsewhere_kept(self):
        source = Source("a\ufeff{}")
        assert source.css == "a\ufeff{}"
        assert source.has_bom is False

    def test_empty_text(self):
        source = Source("")
        assert source.css == ""
        assert source.has_bom is False

    def test_bytes_decoded(self):
        assert Source(b"a{}").css == "a{}"

    def test_object_with_str(self):
        class Css:
            def __str__(self):
                return "a{}"

        assert Source(Css()).css == "a{}"

    def test_none_rejected(self):
        with pytest.raises(InvalidInputError):
            Source(None)

    def test_plain_object_rejected(self):
        with pytest.raises(InvalidInputError):
            Source(object())

    def test_undecodable_bytes_rejected(self):
        with pytest.raises(InvalidInputError):
            Source(b"\xff\xfe\xfa")


class TestSourceFrom:
    def test_absolute_kept(self, tmp_path):
        path = str(tmp_path / "a.css")
        source = Source("a{}", SourceOptions(from_=path))
        assert source.file == path
        assert source.from_ == path
        assert source.id is None

    def test_relative_resolved(self):
        source = Source("a{}", SourceOptions(from_="styles/a.css"))
        assert source.file == os.path.abspath("styles/a.css")

    def test_url_kept(self):
        source = Source("a{}", SourceOptions(from_="https://example.com/a.css"))
        assert source.file == "https://example.com/a.css"

    def test_known_file_takes_no_id(self, factory, tmp_path):
        factory.create("a{}", SourceOptions(from_=str(tmp_path / "a.css")))
        assert factory.create("a{}").id == "<input css 1>"


class TestSourceIds:
    def test_ids_in_construction_order(self, factory):
        ids = [factory.create("a{}").id for _ in range(5)]
        assert ids == [f"<input css {n}>" for n in range(1, 6)]

    def test_from_falls_back_to_id(self, factory):
        source = factory.create("a{}")
        assert source.file is None
        assert source.from_ == "<input css 1>"

    def test_process_wide_ids_are_unique(self):
        first = create("a{}").id
        second = Source("b{}").id
        n = int(re.fullmatch(r"<input css (\d+)>", first).group(1))
        assert second == f"<input css {n + 1}>"

    def test_sequence_is_thread_safe(self):
        sequence = IdSequence()
        with ThreadPoolExecutor(max_workers=8) as pool:
            ids = list(pool.map(lambda _: sequence.next_id(), range(500)))
        assert len(set(ids)) == 500
        assert sequence.next_id() == "<input css 501>"


class TestSourceMapLinking:
    def test_no_map(self):
        assert Source("a{}").map is None

    def test_map_from_prev(self, sass_map):
        source = with_map(sass_map)
        assert source.map is not None
        assert source.map.consumer().sources == ["a.sass"]

    def test_map_declared_file_adopted(self, sass_map, factory):
        sass_map["file"] = "out.css"
        source = with_map(sass_map, sequence=factory.sequence)
        assert source.file == os.path.abspath("out.css")
        assert source.id is None
        assert factory.create("x{}").id == "<input css 1>"

    def test_declared_file_resolved_against_source_root(self, sass_map, tmp_path):
        sass_map["file"] = "out.css"
        sass_map["sourceRoot"] = str(tmp_path)
        assert with_map(sass_map).file == str(tmp_path / "out.css")

    def test_from_wins_over_declared_file(self, sass_map, tmp_path):
        sass_map["file"] = "out.css"
        path = str(tmp_path / "app.css")
        assert with_map(sass_map, from_=path).file == path

    def test_late_bound_map_file_uses_from(self, sass_map, tmp_path):
        path = str(tmp_path / "app.css")
        source = with_map(sass_map, from_=path)
        assert source.map.file == path

    def test_late_bound_map_file_uses_id(self, sass_map, factory):
        source = with_map(sass_map, sequence=factory.sequence)
        assert source.map.file == "<input css 1>"

    def test_inline_annotation(self, sass_map):
        source = Source(GENERATED + inline_annotation(sass_map))
        assert source.map is not None
        assert source.map.inline is True

    def test_map_disabled(self, sass_map):
        source = Source(GENERATED + inline_annotation(sass_map), SourceOptions(map=False))
        assert source.map is None

    def test_annotation_file_next_to_from(self, sass_map, tmp_path):
        (tmp_path / "app.css.map").write_text(json.dumps(sass_map))
        css = GENERATED + "/*# sourceMappingURL=app.css.map */"
        source = Source(css, SourceOptions(from_=str(tmp_path / "app.css")))
        assert source.map is not None
        assert source.map.map_file == str(tmp_path / "app.css.map")

    def test_missing_annotation_file_is_ignored(self, tmp_path):
        css = "a{}\n/*# sourceMappingURL=missing.css.map */"
        source = Source(css, SourceOptions(from_=str(tmp_path / "app.css")))
        assert source.map is None


class TestSourceOrigin:
    def test_false_without_map(self):
        source = Source(GENERATED)
        for line in range(1, 4):
            for column in range(1, 10):
                assert source.origin(line, column) is False

    def test_mapped_position(self, sass_map):
        result = with_map(sass_map).origin(2, 5)
        assert result == OriginResult(file=os.path.abspath("a.sass"), line=10, column=3)

    def test_later_column_uses_closest_segment(self, sass_map):
        result = with_map(sass_map).origin(2, 12)
        assert (result.line, result.column) == (10, 3)

    def test_unmapped_position(self, sass_map):
        source = with_map(sass_map)
        assert source.origin(1, 1) is False
        assert source.origin(2, 1) is False
        assert source.origin(40, 1) is False

    def test_source_root(self, sass_map, tmp_path):
        sass_map["sourceRoot"] = str(tmp_path)
        assert with_map(sass_map).origin(2, 5).file == str(tmp_path / "a.sass")

    def test_url_source_kept(self, sass_map):
        sass_map["sources"] = ["https://example.com/a.sass"]
        assert with_map(sass_map).origin(2, 5).file == "https://example.com/a.sass"

    def test_source_content_attached(self, sass_map):
        sass_map["sourcesContent"] = ["a\n  color: red\n"]
        assert with_map(sass_map).origin(2, 5).source == "a\n  color: red\n"

    def test_missing_source_content(self, sass_map):
        sass_map["sourcesContent"] = [None]
        assert with_map(sass_map).origin(2, 5).source is None


class TestSourceError:
    def test_error_without_map(self, tmp_path):
        path = str(tmp_path / "a.css")
        source = Source("a{", SourceOptions(from_=path))
        error = source.error("Unknown word", 1, 2)
        assert isinstance(error, CssSyntaxError)
        assert (error.line, error.column) == (1, 2)
        assert error.source == "a{"
        assert error.file == path
        assert error.reason == "Unknown word"
        assert error.message == f"{path}:1:2: Unknown word"
        assert (error.generated.line, error.generated.column) == (1, 2)
        assert error.generated.file == path

    def test_error_anonymous(self):
        error = Source("a{").error("Unknown word", 1, 1)
        assert error.file is None
        assert error.message == "<css input>:1:1: Unknown word"
        assert error.generated.file is None

    def test_error_plugin(self):
        error = Source("a{").error("Bad", 1, 1, plugin="autoprefixer")
        assert error.plugin == "autoprefixer"
        assert error.message.startswith("autoprefixer: <css input>:1:1")

    def test_error_mapped(self, sass_map, tmp_path):
        path = str(tmp_path / "app.css")
        source = with_map(sass_map, from_=path)
        error = source.error("Unknown word", 2, 5)
        assert (error.line, error.column) == (10, 3)
        assert error.file == os.path.abspath("a.sass")
        assert error.source is None
        assert (error.generated.line, error.generated.column) == (2, 5)
        assert error.generated.source == GENERATED
        assert error.generated.file == path

    def test_error_mapped_with_content(self, sass_map):
        sass_map["sourcesContent"] = ["original"]
        error = with_map(sass_map).error("Unknown word", 2, 5)
        assert error.source == "original"

    def test_error_unmapped_position_falls_back(self, sass_map):
        error = with_map(sass_map).error("Unknown word", 1, 1)
        assert (error.line, error.column) == (1, 1)
        assert error.source == GENERATED

    def test_error_mapped_without_column(self, sass_map):
        error = with_map(sass_map).error("Unknown word", 2, None)
        assert (error.line, error.column) == (2, None)
        assert error.source == GENERATED

    def test_error_is_returned_not_raised(self):
        error = Source("a{").error("Unknown word", 1, 1)
        with pytest.raises(CssSyntaxError):
            raise error


class TestSourceMapResolve:
    def test_relative_without_root(self, sass_map):
        assert with_map(sass_map).map_resolve("a.sass") == os.path.abspath("a.sass")

    def test_url_unchanged(self, sass_map):
        assert with_map(sass_map).map_resolve("http://x.org/a.sass") == "http://x.org/a.sass"

    def test_idempotent(self, sass_map, tmp_path):
        sass_map["sourceRoot"] = str(tmp_path)
        source = with_map(sass_map)
        once = source.map_resolve("a.sass")
        assert source.map_resolve(once) == once


class TestSourceOffsets:
    def test_first_char(self):
        assert Source("a\nbc").from_offset(0) == (1, 1)

    def test_second_line(self):
        assert Source("a\nbc").from_offset(3) == (2, 2)

    def test_newline_belongs_to_its_line(self):
        assert Source("a\nbc").from_offset(1) == (1, 2)

    def test_end_of_text(self):
        assert Source("a\nbc").from_offset(4) == (2, 3)

    def test_out_of_range(self):
        assert Source("a").from_offset(5) is None
