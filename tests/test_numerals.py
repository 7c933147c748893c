"""
Tests for guji.numerals - chapter and page numeral rendering.
"""

from guji.numerals import NumeralTable, fallback_digits


def test_table_value_wins():
    table = NumeralTable.parse("12|十二\n20|二十\n")
    assert table.render(12) == "十二"
    assert table.render(20) == "二十"


def test_missing_entry_falls_back_to_digit_substitution():
    table = NumeralTable()
    assert table.render(12) == "一二"
    assert table.render(0) == "〇"
    assert fallback_digits(2024) == "二〇二四"


def test_parse_skips_comments_blanks_and_bad_keys():
    table = NumeralTable.parse("# 數字\n\n  3|三  \nabc|甲\n4\n５|五\n")
    assert table.entries == {3: "三"}


def test_load_reads_utf8_file(tmp_path):
    path = tmp_path / "num2zh_jid.txt"
    path.write_text("1|一\n100|一百\n", encoding="utf-8")
    table = NumeralTable.load(path)
    assert table.get(100) == "一百"
    assert table.get(2) is None
    assert table.render(2) == "二"
