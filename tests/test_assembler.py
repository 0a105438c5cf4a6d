# tests/test_assembler.py
"""Tests for merging \\input{} directives and reading documents and data files."""

import io
import pytest
from pathlib import Path

from manus.core.assembler import merge_document, resolve_input_path
from manus.core.io import get_data_from_str, parse_filepath, read_data, read_document, split_lines
from manus.core.pipeline import get_lines_and_output_path
from manus.exceptions import DataFormatError, InputError, MergeError


@pytest.fixture
def manuscript(tmp_path: Path):
    """Creates a main document including a section, which includes a table."""
    (tmp_path / "sections").mkdir()
    (tmp_path / "main.tex").write_text(
        "\\documentclass{article}\n"
        "\\begin{document}\n"
        "\\input{sections/intro}\n"
        "\\end{document}\n"
    )
    (tmp_path / "sections" / "intro.tex").write_text(
        "Intro line one\n"
        "\\input{table.tex}\n"
        "Intro line two\n"
    )
    (tmp_path / "sections" / "table.tex").write_text("a & b \\\\\nc & d \\\\\n")
    return tmp_path


class TestMergeDocument:
    def test_merged_lines_in_order(self, manuscript):
        lines = merge_document(manuscript / "main.tex")
        assert lines == [
            "\\documentclass{article}",
            "\\begin{document}",
            "Intro line one",
            "a & b \\\\",
            "c & d \\\\",
            "Intro line two",
            "\\end{document}",
        ]

    def test_document_without_inputs(self, tmp_path):
        doc = tmp_path / "plain.tex"
        doc.write_text("one\ntwo\n")
        assert merge_document(doc) == ["one", "two"]

    def test_same_file_can_be_included_twice(self, tmp_path):
        (tmp_path / "part.tex").write_text("part")
        doc = tmp_path / "main.tex"
        doc.write_text("\\input{part}\n\\input{part}\n")
        assert merge_document(doc) == ["part", "part"]

    def test_circular_input(self, tmp_path):
        (tmp_path / "a.tex").write_text("\\input{b}\n")
        (tmp_path / "b.tex").write_text("\\input{a}\n")
        with pytest.raises(MergeError, match="Circular"):
            merge_document(tmp_path / "a.tex")

    def test_unclosed_directive(self, tmp_path):
        doc = tmp_path / "main.tex"
        doc.write_text("first\n\\input{missing\n")
        with pytest.raises(MergeError, match="Unclosed delimiter at line 2"):
            merge_document(doc)

    @pytest.mark.parametrize("argument", ["", "  ", "."])
    def test_input_without_file_name(self, tmp_path, argument):
        doc = tmp_path / "main.tex"
        doc.write_text(f"first\n\\input{{{argument}}}\n")
        with pytest.raises(MergeError, match="No file name given to \\\\input at line 2"):
            merge_document(doc)

    def test_missing_included_file(self, tmp_path):
        doc = tmp_path / "main.tex"
        doc.write_text("\\input{nowhere}\n")
        with pytest.raises(MergeError, match="File not found"):
            merge_document(doc)

    def test_resolve_input_path_relative_to_including_file(self, manuscript):
        resolved = resolve_input_path("table", manuscript / "sections" / "intro.tex")
        assert resolved == manuscript / "sections" / "table.tex"


class TestDocuments:
    def test_split_lines(self):
        assert split_lines("a\r\nb\nc") == ["a", "b", "c"]
        assert split_lines("a\n") == ["a"]
        assert split_lines("") == []

    def test_parse_filepath_adds_extension(self, manuscript):
        assert parse_filepath(str(manuscript / "main"), "tex") == manuscript / "main.tex"

    def test_parse_filepath_wrong_extension(self, tmp_path):
        with pytest.raises(InputError, match="Incorrect extension"):
            parse_filepath(str(tmp_path / "main.txt"), "tex")

    def test_parse_filepath_missing_file(self, tmp_path):
        with pytest.raises(InputError, match="File not found"):
            parse_filepath(str(tmp_path / "absent.tex"), "tex")

    def test_read_document(self, tmp_path):
        doc = tmp_path / "doc.tex"
        doc.write_text("x\ny\n")
        assert read_document(doc) == ["x", "y"]

    def test_get_lines_and_output_path(self, manuscript):
        lines, output_path = get_lines_and_output_path(str(manuscript / "main.tex"))
        assert len(lines) == 7
        assert output_path == Path("main.pdf")

    def test_get_lines_and_explicit_output_path(self, manuscript):
        _, output_path = get_lines_and_output_path(str(manuscript / "main"), "out/paper.pdf")
        assert output_path == Path("out/paper.pdf")

    def test_get_lines_from_stdin(self, monkeypatch):
        monkeypatch.setattr("sys.stdin", io.StringIO("from\nstdin\n"))
        lines, output_path = get_lines_and_output_path("-")
        assert lines == ["from", "stdin"]
        assert output_path == Path("main.pdf")


class TestDataFiles:
    def test_read_json(self, tmp_path):
        data_file = tmp_path / "data.json"
        data_file.write_text('{"a": 1, "b": {"c": "expr: a"}}')
        assert read_data(data_file) == {"a": 1, "b": {"c": "expr: a"}}

    def test_read_toml(self, tmp_path):
        data_file = tmp_path / "data.toml"
        data_file.write_text('a = 1\n[b]\nc = "text"\n')
        assert read_data(data_file) == {"a": 1, "b": {"c": "text"}}

    def test_unknown_data_type(self, tmp_path):
        data_file = tmp_path / "data.yaml"
        data_file.write_text("a: 1")
        with pytest.raises(DataFormatError, match="Could not read data type: yaml"):
            read_data(data_file)

    def test_invalid_json(self, tmp_path):
        data_file = tmp_path / "data.json"
        data_file.write_text("{not json")
        with pytest.raises(DataFormatError, match="Could not parse"):
            read_data(data_file)

    def test_data_from_stdin_is_json(self, monkeypatch):
        monkeypatch.setattr("sys.stdin", io.StringIO('{"x": 2}'))
        assert get_data_from_str("-") == {"x": 2}
