from pathlib import Path

import pytest

from assetpack.errors import SourceReadError, E_SOURCE_READ
from assetpack.parsing import Tokenizer, iter_lines, strip_comment
from assetpack.parsing.tokenizer import read_source_text


def test_collapses_runs_of_whitespace():
    assert Tokenizer("  a \t b   c ").rest() == ["a", "b", "c"]


def test_keep_empty_preserves_blank_tokens():
    assert Tokenizer("a\n\nb", "\n", keep_empty=True).rest() == ["a", "", "b"]
    assert Tokenizer("a\n", "\n", keep_empty=True).rest() == ["a"]


def test_next_returns_none_at_end():
    t = Tokenizer("x")
    assert t.next() == "x"
    assert t.at_end()
    assert t.next() is None
    assert t.next() is None


def test_position_can_resume_in_new_tokenizer():
    t = Tokenizer("v 1 2 3")
    assert t.next() == "v"
    resumed = Tokenizer(t.text, position=t.position)
    assert resumed.rest() == ["1", "2", "3"]
    # Original cursor unaffected
    assert t.rest() == ["1", "2", "3"]


def test_iterates_tokens():
    assert list(Tokenizer("f 1/2/3 4//5")) == ["f", "1/2/3", "4//5"]


def test_strip_comment():
    assert strip_comment("Kd 1 1 1 # white") == "Kd 1 1 1 "
    assert strip_comment("# only") == ""
    assert strip_comment("no comment") == "no comment"


def test_iter_lines_numbers_and_cleans_lines():
    text = "v 1 2 3 # c\r\n\nf 1 2 3"
    assert list(iter_lines(text)) == [(1, "v 1 2 3 "), (2, ""), (3, "f 1 2 3")]


def test_read_source_text_missing_file(tmp_path: Path):
    with pytest.raises(SourceReadError) as ei:
        read_source_text(tmp_path / "nope.obj")
    assert ei.value.code == E_SOURCE_READ


def test_read_source_text_replaces_bad_bytes(tmp_path: Path):
    p = tmp_path / "bad.mtl"
    p.write_bytes(b"newmtl \xff\n")
    assert read_source_text(p) == "newmtl \ufffd\n"
