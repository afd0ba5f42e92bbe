"""Tests for the heuristic salary range parser."""

import pytest

from hireflow.utils.salary_parser import SalaryRange, parse_salary_range


@pytest.mark.parametrize(
    "text,expected",
    [
        ("Rp 5.000.000 - Rp 10.000.000", SalaryRange(5_000_000, 10_000_000)),
        ("$80,000 - $120,000", SalaryRange(80_000, 120_000)),
        ("10k - 15k", SalaryRange(10_000, 15_000)),
        ("10K-15K per month", SalaryRange(10_000, 15_000)),
        ("Rp 5jt - 8jt", SalaryRange(5_000_000, 8_000_000)),
        ("IDR 7 juta - 9 juta", SalaryRange(7_000_000, 9_000_000)),
        ("5 - 10 juta", SalaryRange(5, 10_000_000)),
    ],
)
def test_parses_ranges(text, expected):
    assert parse_salary_range(text) == expected


@pytest.mark.parametrize(
    "text",
    ["Competitive", "5 juta", "$90,000", "", None, "Negotiable, depends on skills"],
)
def test_returns_none_without_two_numbers(text):
    assert parse_salary_range(text) is None


def test_only_first_two_numbers_count():
    assert parse_salary_range("3 - 5 years, 100k - 200k") == SalaryRange(3, 5)


def test_decimal_point_is_read_as_thousands_separator():
    # Lossy by nature of the input: "1.5" becomes 15
    assert parse_salary_range("1.5 - 2.5") == SalaryRange(15, 25)
