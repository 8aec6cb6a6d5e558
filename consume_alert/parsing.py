"""Parsing helpers for card payment notifications and date arithmetic."""

from __future__ import annotations

import calendar
import re
from datetime import date, datetime, timedelta
from typing import Iterable, Sequence

_I64_MIN = -(2**63)
_I64_MAX = 2**63 - 1
_INTEGER = re.compile(r"[+-]?[0-9]+")


class ConsumeParseError(ValueError):
    """Raised when a payment notification cannot be parsed."""


def _item(parts: Sequence[str], idx: int, func: str, name: str) -> str:
    if idx < 0 or idx >= len(parts):
        raise ConsumeParseError(
            f"[Index Out Of Range Error][{func}()] Invalid index '{idx}' "
            f"of '{name}' vector was accessed."
        )
    return parts[idx]


def levenshtein(a: str, b: str) -> int:
    """Return the edit distance between two strings, counted in characters."""
    if len(a) < len(b):
        a, b = b, a
    if not b:
        return len(a)
    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i]
        for j, char_b in enumerate(b, start=1):
            cost = 0 if char_a == char_b else 1
            current.append(
                min(previous[j] + 1, current[j - 1] + 1, previous[j - 1] + cost)
            )
        previous = current
    return previous[-1]


def split_without(text: str, replacements: Iterable[str]) -> list[str]:
    """Split ``text`` on whitespace and drop every replacement string from each token.

    ``split_without("289,545원 일시불", [",", "원"])`` gives ``["289545", "일시불"]``.
    """
    removals = list(replacements)
    tokens = []
    for token in text.split():
        for removal in removals:
            token = token.replace(removal, "")
        tokens.append(token)
    return tokens


def parse_consume_time(parts: Sequence[str], year: int) -> str:
    """Build a timestamp from ``["MM/DD", "HH:MM"]`` in the given year.

    The result has the form ``%Y-%m-%dT%H:%M:%SZ``.
    """
    day_text = _item(parts, 0, "get_consume_time", "consume_time_name_vec")
    time_text = _item(parts, 1, "get_consume_time", "consume_time_name_vec")
    try:
        day = datetime.strptime(f"{year}/{day_text}", "%Y/%m/%d").date()
        moment = datetime.strptime(time_text, "%H:%M").time()
    except ValueError as exc:
        raise ConsumeParseError(
            f"[Parsing Error][get_consume_time()] Invalid date or time: {list(parts)!r}"
        ) from exc
    return datetime.combine(day, moment).strftime("%Y-%m-%dT%H:%M:%SZ")


def parse_prodt_name(parts: Sequence[str], idx: int) -> str:
    """Return the trimmed product name at ``idx``."""
    return _item(parts, idx, "get_consume_prodt_name", "consume_time_name_vec").strip()


def parse_prodt_money(parts: Sequence[str], idx: int) -> int:
    """Return the amount at ``idx`` as a signed 64-bit integer."""
    text = _item(parts, idx, "get_consume_prodt_money", "consume_price_vec")
    if not _INTEGER.fullmatch(text):
        raise ConsumeParseError(
            f"[Parsing Error][get_consume_prodt_money()] Not an integer: {text!r}"
        )
    value = int(text)
    if not _I64_MIN <= value <= _I64_MAX:
        raise ConsumeParseError(
            f"[Parsing Error][get_consume_prodt_money()] Out of range: {text!r}"
        )
    return value


def add_months(day: date, months: int) -> date:
    """Shift ``day`` by ``months``, clamping to the last day of the target month."""
    index = day.year * 12 + (day.month - 1) + months
    year, month0 = divmod(index, 12)
    if not 1 <= year <= 9999:
        raise ConsumeParseError(
            f"[Error][add_months()] Date out of range: {day} + {months} months"
        )
    month = month0 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def add_days(day: date, days: int) -> date:
    """Shift ``day`` by ``days``."""
    try:
        return day + timedelta(days=days)
    except OverflowError as exc:
        raise ConsumeParseError(
            f"[Error][add_days()] Date out of range: {day} + {days} days"
        ) from exc