"""Builders for the search queries sent to the document store."""

from __future__ import annotations

from datetime import date
from typing import Any, Union

DateLike = Union[date, str]

_PERIOD_QUERY_SIZE = 10000


def _date_text(day: DateLike) -> str:
    if isinstance(day, date):
        return day.strftime("%Y-%m-%d")
    if isinstance(day, str):
        return day
    raise TypeError(f"expected a date or a date string, got {day!r}")


def _timestamp_range(start: DateLike, end: DateLike) -> dict[str, Any]:
    return {
        "range": {
            "@timestamp": {
                "gte": _date_text(start),
                "lte": _date_text(end),
            }
        }
    }


def period_query(start_date: DateLike, end_date: DateLike) -> dict[str, Any]:
    """Query for all payments in a date range, with their summed amount.

    Hits are sorted by timestamp, oldest first, and the sum of
    ``prodt_money`` is returned under ``aggregations.total_prodt_money``.
    """
    return {
        "size": _PERIOD_QUERY_SIZE,
        "query": _timestamp_range(start_date, end_date),
        "aggs": {
            "total_prodt_money": {
                "sum": {"field": "prodt_money"},
            }
        },
        "sort": {
            "@timestamp": {"order": "asc"},
        },
    }


def recent_query(order_by: str, size: int) -> dict[str, Any]:
    """Query for the ``size`` most recent documents, newest first by ``order_by``."""
    if size < 0:
        raise ValueError(f"size must not be negative, got {size}")
    return {
        "sort": {order_by: "desc"},
        "size": size,
    }


def mealtime_query(query_size: int, day: DateLike) -> dict[str, Any]:
    """Query for up to ``query_size`` meal records of one day, newest first."""
    if query_size < 0:
        raise ValueError(f"query_size must not be negative, got {query_size}")
    return {
        "size": query_size,
        "query": _timestamp_range(day, day),
        "sort": [
            {"@timestamp": {"order": "desc"}},
        ],
    }


def keyword_match_query(field: str, prodt_name: str) -> dict[str, Any]:
    """Full-text match query of ``prodt_name`` against ``field``."""
    return {"query": {"match": {field: prodt_name}}}