"""
Tests for guji.ingest and guji.models - chapter loading.
"""

import pytest

from guji.errors import MissingChapterError
from guji.ingest import load_corpus
from guji.pdf.pdf_settings import BookSettings


def _write(directory, name, text):
    (directory / name).write_text(text, encoding="utf-8")


def test_loads_numeric_files_and_flags(tmp_path):
    _write(tmp_path, "000.txt", "序文")
    _write(tmp_path, "001.TXT", "子曰")
    _write(tmp_path, "999.txt", "附錄")
    _write(tmp_path, "notes.txt", "skip me")
    _write(tmp_path, "002.md", "not text")

    corpus = load_corpus(text_dir=tmp_path, book=BookSettings(row_num=4))

    assert sorted(corpus.entries) == [0, 1, 999]
    assert corpus.has_prologue
    assert corpus.has_appendix
    assert corpus.highest_ordinal() == 999
    assert corpus.entry(1).data == "子曰  "
    assert corpus.entry(1).name == "001.TXT"


def test_sparse_ordinals_without_prologue(tmp_path):
    _write(tmp_path, "3.txt", "甲")
    _write(tmp_path, "10.txt", "乙")

    corpus = load_corpus(text_dir=tmp_path, book=BookSettings(row_num=1))

    assert not corpus.has_prologue
    assert not corpus.has_appendix
    assert corpus.highest_ordinal() == 10
    with pytest.raises(MissingChapterError) as exc:
        corpus.entry(4)
    assert exc.value.ordinal == 4
    assert "4" in str(exc.value)


def test_empty_directory_is_an_error(tmp_path):
    with pytest.raises(MissingChapterError):
        load_corpus(text_dir=tmp_path, book=BookSettings())


def test_missing_directory_is_an_error(tmp_path):
    with pytest.raises(MissingChapterError):
        load_corpus(text_dir=tmp_path / "absent", book=BookSettings())
