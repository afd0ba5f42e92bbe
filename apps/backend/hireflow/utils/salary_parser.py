"""Heuristic salary range parsing for free-text job data.

Salary ranges are entered by admins as free text ("$80,000 - $120,000",
"Rp 5jt - 8jt", "10k-15k"). This module recovers a numeric interval for
range filtering and salary sorting. Both ``,`` and ``.`` are treated as
thousands separators, so decimal amounts are misread.
"""

import re
from typing import NamedTuple

_CURRENCY_TOKENS = ("$", "rp", "idr")
_SEPARATORS = (",", ".")

# A magnitude suffix attaches to the number in front of it: "5 juta" is one
# number (5000000), not two.
_MAGNITUDE_SUFFIX = re.compile(r"(\d)\s*(juta|jt|k)")
_MAGNITUDE_ZEROS = {"juta": "000000", "jt": "000000", "k": "000"}

_DIGIT_RUN = re.compile(r"\d+")


class SalaryRange(NamedTuple):
    min: int
    max: int


def _expand_suffix(match: re.Match) -> str:
    return match.group(1) + _MAGNITUDE_ZEROS[match.group(2)]


def parse_salary_range(text: str | None) -> SalaryRange | None:
    """Parse a salary range out of free text.

    Args:
        text: Raw salary text as stored on the job position

    Returns:
        SalaryRange built from the first two digit runs, or None when fewer
        than two runs are present. None means "exclude from range filtering",
        never zero.

    Examples:
        >>> parse_salary_range("Rp 5.000.000 - Rp 10.000.000")
        SalaryRange(min=5000000, max=10000000)
        >>> parse_salary_range("10k - 15k")
        SalaryRange(min=10000, max=15000)
        >>> parse_salary_range("5 juta") is None
        True
    """
    if not text:
        return None

    cleaned = text.lower()
    for token in _CURRENCY_TOKENS:
        cleaned = cleaned.replace(token, "")
    cleaned = _MAGNITUDE_SUFFIX.sub(_expand_suffix, cleaned)
    for separator in _SEPARATORS:
        cleaned = cleaned.replace(separator, "")

    numbers = _DIGIT_RUN.findall(cleaned)
    if len(numbers) < 2:
        return None

    return SalaryRange(min=int(numbers[0]), max=int(numbers[1]))
