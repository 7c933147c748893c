"""
Tests for scripts/build_pdf.py - command line handling.
"""

import importlib.util
from pathlib import Path

import pytest

_SCRIPT = Path(__file__).resolve().parents[1] / "scripts" / "build_pdf.py"


@pytest.fixture
def script():
    module_spec = importlib.util.spec_from_file_location("build_pdf_script", _SCRIPT)
    module = importlib.util.module_from_spec(module_spec)
    module_spec.loader.exec_module(module)
    return module


def test_defaults(script):
    args = script._parse_args(["--book", "lunyu"])
    assert args.book == "lunyu"
    assert args.from_ == 1
    assert args.to is None
    assert args.test_pages is None
    assert args.books_dir == Path("books")
    assert not args.verbose


def test_short_flags(script):
    args = script._parse_args(["-b", "lunyu", "-f", "2", "-t", "4", "-z", "3", "-v"])
    assert (args.from_, args.to, args.test_pages, args.verbose) == (2, 4, 3, True)


def test_to_before_from_is_rejected(script):
    with pytest.raises(SystemExit):
        script._parse_args(["--book", "lunyu", "--from", "5", "--to", "2"])


def test_missing_book_reports_error(script, tmp_path, capsys):
    code = script.main(["--book", "absent", "--books-dir", str(tmp_path)])
    assert code == 1
    assert "book directory not found" in capsys.readouterr().err
