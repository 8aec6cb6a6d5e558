from datetime import date

import pytest

from consume_alert.parsing import (
    ConsumeParseError,
    add_days,
    add_months,
    levenshtein,
    parse_consume_time,
    parse_prodt_money,
    parse_prodt_name,
    split_without,
)


def test_split_without_documented_example():
    assert split_without("289,545원 일시불", [",", "원"]) == ["289545", "일시불"]


def test_split_without_no_replacements_is_plain_split():
    text = "  a  b\tc\n"
    assert split_without(text, []) == text.split()


def test_split_without_keeps_emptied_tokens():
    assert split_without("원 x", ["원"]) == ["", "x"]


def test_parse_prodt_money_from_notification():
    parts = split_without("5,500원 일시불", [",", "원"])
    assert parse_prodt_money(parts, 0) == 5500


@pytest.mark.parametrize("bad", ["", "일시불", "5.5", " 12", "1_000"])
def test_parse_prodt_money_rejects_non_integers(bad):
    with pytest.raises(ConsumeParseError):
        parse_prodt_money([bad], 0)


def test_parse_prodt_money_out_of_range():
    with pytest.raises(ConsumeParseError):
        parse_prodt_money([str(2**63)], 0)


def test_parse_prodt_money_index_error():
    with pytest.raises(ConsumeParseError):
        parse_prodt_money(["1"], 1)


def test_parse_consume_time_format():
    assert parse_consume_time(["11/25", "10:02"], 2023) == "2023-11-25T10:02:00Z"


def test_parse_consume_time_missing_time():
    with pytest.raises(ConsumeParseError):
        parse_consume_time(["11/25"], 2023)


@pytest.mark.parametrize("parts", [["13/01", "10:00"], ["11/25", "25:00"], ["x", "10:00"]])
def test_parse_consume_time_invalid(parts):
    with pytest.raises(ConsumeParseError):
        parse_consume_time(parts, 2023)


def test_parse_consume_time_is_value_error():
    with pytest.raises(ValueError):
        parse_consume_time([], 2023)


def test_parse_prodt_name_trims():
    assert parse_prodt_name(["a", "  메가엠지씨커피 선릉 "], 1) == "메가엠지씨커피 선릉"


def test_parse_prodt_name_index_error():
    with pytest.raises(ConsumeParseError):
        parse_prodt_name(["a"], 3)


@pytest.mark.parametrize("a,b", [("커피", "커피숍"), ("abc", ""), ("flaw", "lawn"), ("", "")])
def test_levenshtein_invariants(a, b):
    d = levenshtein(a, b)
    assert d == levenshtein(b, a)
    assert abs(len(a) - len(b)) <= d <= max(len(a), len(b))
    assert levenshtein(a, a) == 0


def test_levenshtein_empty_is_length():
    assert levenshtein("", "메가커피") == len("메가커피")


def test_levenshtein_single_substitution():
    assert levenshtein("cat", "cut") == 1


def test_levenshtein_triangle():
    x, y, z = "starbucks", "stardust", "buckets"
    assert levenshtein(x, z) <= levenshtein(x, y) + levenshtein(y, z)


def test_add_months_round_trip():
    start = date(2023, 11, 27)
    assert add_months(add_months(start, 3), -3) == start
    assert add_months(start, 12) == start.replace(year=2024)


def test_add_months_clamps_to_month_end():
    assert add_months(date(2023, 1, 31), 1) == date(2023, 2, 28)


def test_add_months_zero_is_identity():
    day = date(2024, 2, 29)
    assert add_months(day, 0) == day


def test_add_months_out_of_range():
    with pytest.raises(ConsumeParseError):
        add_months(date(9999, 12, 1), 1)


def test_add_days_round_trip():
    start = date(2023, 11, 27)
    assert add_days(add_days(start, 40), -40) == start
    assert add_days(start, 0) == start


def test_add_days_out_of_range():
    with pytest.raises(ConsumeParseError):
        add_days(date(1, 1, 1), -1)