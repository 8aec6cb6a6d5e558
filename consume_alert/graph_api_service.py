"""Client for the chart-drawing HTTP service and per-type cost summaries."""

from __future__ import annotations

import dataclasses
import math
from datetime import date
from typing import Any, Iterable, Optional, Sequence, Union

import requests

from consume_alert.models import ConsumeInfo, ConsumeTypeInfo, ToPythonGraphCircle

DEFAULT_BASE_URL = "http://localhost:5800"
CATEGORY_ENDPOINT = "/api/category"
CONSUME_DETAIL_ENDPOINT = "/api/consume_detail"

DateLike = Union[date, str]


class GraphApiError(RuntimeError):
    """Raised when the chart service cannot be reached or rejects a request."""


def _round_one_decimal(value: float) -> float:
    if not math.isfinite(value):
        return value
    scaled = value * 10.0
    rounded = math.copysign(math.floor(abs(scaled) + 0.5), scaled)
    return rounded / 10.0


def _share_percent(cost: int, total_cost: float) -> float:
    if total_cost == 0:
        return math.copysign(math.inf, cost) if cost else math.nan
    return _round_one_decimal(cost / total_cost * 100.0)


def summarize_consume_types(
    consume_list: Iterable[ConsumeInfo], total_cost: float
) -> list[ConsumeTypeInfo]:
    """Sum payments per type and give each type's share of ``total_cost``.

    Types whose summed cost is zero are left out. The shares are rounded to one
    decimal place and the result is ordered by cost, largest first.
    """
    type_costs: dict[str, int] = {}
    for info in consume_list:
        type_costs[info.prodt_type] = type_costs.get(info.prodt_type, 0) + info.prodt_money

    summary = [
        ConsumeTypeInfo(prodt_type, cost, _share_percent(cost, total_cost))
        for prodt_type, cost in type_costs.items()
        if cost != 0
    ]
    summary.sort(key=lambda item: item.prodt_cost, reverse=True)
    return summary


def _jsonable(payload: Any) -> Any:
    to_payload = getattr(payload, "to_payload", None)
    if callable(to_payload):
        return to_payload()
    if isinstance(payload, (list, tuple)):
        return [_jsonable(item) for item in payload]
    if dataclasses.is_dataclass(payload) and not isinstance(payload, type):
        return dataclasses.asdict(payload)
    return payload


class GraphApiService:
    """Asks the chart service to draw graphs and returns the image paths it reports."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url
        self.session = session if session is not None else requests.Session()

    def post_api(self, uri: str, payload: Any) -> str:
        """POST ``payload`` as JSON to ``uri`` and return the response body."""
        url = f"{self.base_url}{uri}"
        try:
            response = self.session.post(url, json=_jsonable(payload))
        except requests.RequestException as exc:
            raise GraphApiError(f"[Error][post_api()] Request for '{url}' failed.") from exc
        if not 200 <= response.status_code < 300:
            raise GraphApiError(f"[Error][post_api()] Request for '{url}' failed.")
        return response.text

    def draw_consume_type_chart(
        self,
        consume_type_list: Sequence[ConsumeTypeInfo],
        start_dt: DateLike,
        end_dt: DateLike,
        total_cost: float,
    ) -> str:
        """Request a pie chart of the consumption types; return the image path."""
        circle = ToPythonGraphCircle(
            title_vec=[item.prodt_type for item in consume_type_list],
            cost_vec=[item.prodt_cost for item in consume_type_list],
            start_dt=str(start_dt),
            end_dt=str(end_dt),
            total_cost=total_cost,
        )
        return self.post_api(CATEGORY_ENDPOINT, circle)

    def draw_consume_detail_chart(self, comparison_info: Sequence[Any]) -> str:
        """Request a line chart of the given series; return the image path."""
        return self.post_api(CONSUME_DETAIL_ENDPOINT, list(comparison_info))

    def consume_type_graph(
        self,
        total_cost: float,
        start_dt: DateLike,
        end_dt: DateLike,
        consume_list: Iterable[ConsumeInfo],
    ) -> tuple[list[ConsumeTypeInfo], str]:
        """Summarize payments per type and draw them; return summary and image path."""
        summary = summarize_consume_types(consume_list, total_cost)
        path = self.draw_consume_type_chart(summary, start_dt, end_dt, total_cost)
        return summary, path