import math

import pytest

from cinema_explorer.core.csv_parser import parse_csv, parse_number, serialize_csv


def test_parse_simple_table_drops_trailing_newline_artifact():
    assert parse_csv("a,b\n1,2\n3,4\n") == [["a", "b"], ["1", "2"], ["3", "4"]]


def test_quoted_field_keeps_embedded_comma():
    rows = parse_csv('a,b\n"x,y",2\n"z",4\n')
    assert rows[1] == ["x,y", "2"]
    assert rows[2] == ["z", "4"]


def test_empty_unquoted_is_missing_but_empty_quoted_is_empty_string():
    assert parse_csv('a,b,c\n,"",x\n') == [["a", "b", "c"], [None, "", "x"]]


def test_doubled_quotes_and_embedded_newlines():
    rows = parse_csv('a,b\n"he said ""hi""","line1\nline2"\n')
    assert rows == [["a", "b"], ['he said "hi"', "line1\nline2"]]


def test_crlf_and_cr_line_endings():
    assert parse_csv("a,b\r\n1,2\r\n") == [["a", "b"], ["1", "2"]]
    assert parse_csv("a,b\r1,2") == [["a", "b"], ["1", "2"]]


def test_trailing_missing_field_in_wider_row_is_kept():
    assert parse_csv("a,b\n1,\n") == [["a", "b"], ["1", None]]


def test_empty_text_gives_no_rows():
    assert parse_csv("") == []


def test_parser_does_not_validate_shape():
    assert parse_csv("a,b\n1\n") == [["a", "b"], ["1"]]


@pytest.mark.parametrize(
    "text",
    [
        "a,b\n1,2\n3,4\n",
        'a,b\n"x,y",2\n"z",4\n',
        'a,b,c\n,"",x\n',
        'h1,h2\n"say ""hi""","multi\nline"\n',
        'a"b,c\n1,2',
        "a\n\n",
        "\n",
        "a,b\r\n1,\r\n",
    ],
)
def test_parse_serialize_round_trip(text):
    parsed = parse_csv(text)
    assert parse_csv(serialize_csv(parsed)) == parsed


def test_parse_number():
    assert parse_number("1") == 1.0
    assert parse_number(" 2.5 ") == 2.5
    assert parse_number("1e3") == 1000.0
    assert math.isnan(parse_number("NaN"))
    assert math.isnan(parse_number("nan"))
    assert parse_number("abc") is None
    assert parse_number("") is None
    assert parse_number(None) is None
    assert parse_number("inf") is None
    assert parse_number("1e999") is None


@pytest.mark.parametrize("text", ["1_000", "0x10", "1.2.3", "--1", "Infinity", "nan1"])
def test_parse_number_rejects_non_decimal_spellings(text):
    assert parse_number(text) is None


def test_parse_number_accepts_signs_and_bare_fractions():
    assert parse_number("-3") == -3.0
    assert parse_number("+.5") == 0.5
    assert parse_number("5.") == 5.0
    assert parse_number("2E-2") == 0.02
