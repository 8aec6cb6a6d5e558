"""Turning card payment notifications into stored, classified consumption records."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Callable, Optional, Sequence, Union

from consume_alert.models import (
    CONSUME_DETAIL,
    CONSUME_TYPE,
    ConsumeIndexProdNew,
    ConsumingIndexProdType,
    DocumentStore,
    PerDatetime,
    hit_sources,
)
from consume_alert.parsing import (
    ConsumeParseError,
    add_days,
    add_months,
    levenshtein,
    parse_consume_time,
    parse_prodt_money,
    split_without,
)

_KST = timezone(timedelta(hours=9))
_PRICE_REMOVALS = (",", "원")
_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

Clock = Callable[[], Union[datetime, date]]


def _korean_now() -> datetime:
    return datetime.now(_KST).replace(tzinfo=None)


def _arg(split_args: Sequence[str], idx: int, name: str) -> str:
    if idx >= len(split_args):
        raise ConsumeParseError(
            f"[Index Out Of Range Error][process_by_consume_type()] Invalid index "
            f"'{idx}' of '{name}' vector was accessed. : {list(split_args)!r}"
        )
    return split_args[idx]


class CommandService:
    """Parses payment notifications and classifies them against stored keywords."""

    def __init__(self, store: DocumentStore, today: Optional[Clock] = None) -> None:
        self.store = store
        self.today: Clock = today if today is not None else _korean_now

    def _now(self) -> datetime:
        moment = self.today()
        if isinstance(moment, datetime):
            return moment
        return datetime.combine(moment, datetime.min.time())

    def process_by_consume_type(self, split_args: Sequence[str]) -> ConsumeIndexProdNew:
        """Parse one notification, classify it, store it and return the record.

        ``split_args`` are the notification lines, e.g.
        ``["nh카드3*3*승인", "신*환", "5,500원 일시불", "11/25 10:02", "메가엠지씨커피 선릉"]``.
        """
        if not split_args:
            raise ConsumeParseError(
                "[Parameter Error][process_by_consume_type()] Invalid format of "
                f"'text' variable entered as parameter : {list(split_args)!r}"
            )
        consume_type = split_args[0]
        now = self._now()
        reg_dt = now.strftime(_TIMESTAMP_FORMAT)

        if "nh" in consume_type:
            price_parts = split_without(
                _arg(split_args, 2, "consume_price_vec"), _PRICE_REMOVALS
            )
            consume_price = parse_prodt_money(price_parts, 0)
            time_parts = [
                part.strip()
                for part in _arg(split_args, 3, "consume_time_vec").split(" ")
            ]
            consume_time = parse_consume_time(time_parts, now.year)
            consume_name = _arg(split_args, 4, "split_args_vec")
        elif "삼성" in consume_type:
            price_parts = split_without(
                _arg(split_args, 1, "consume_price_vec"), _PRICE_REMOVALS
            )
            consume_price = parse_prodt_money(price_parts, 0)
            time_parts = _arg(split_args, 2, "consume_time_vec").split(" ")
            consume_time = parse_consume_time(time_parts, now.year)
            consume_name = _arg(time_parts, 2, "consume_time_vec")
        else:
            raise ConsumeParseError(
                "[Error][process_by_consume_type()] Variable 'consume_type' "
                "contains an undefined string."
            )

        record = ConsumeIndexProdNew(
            timestamp=consume_time,
            reg_dt=reg_dt,
            prodt_name=consume_name,
            prodt_money=consume_price,
            prodt_type=self.judge_consume_type(consume_name),
        )
        self.store.post(record.to_document(), CONSUME_DETAIL)
        return record

    def judge_consume_type(self, prodt_name: str) -> str:
        """Return the consumption type whose keyword is closest to ``prodt_name``.

        Returns ``"etc"`` when no keyword matches.
        """
        query = {"query": {"match": {"consume_keyword": prodt_name}}}
        response = self.store.search(query, CONSUME_TYPE)
        candidates = [
            ConsumingIndexProdType.from_document(source)
            for source in hit_sources(response)
        ]
        if not candidates:
            return "etc"
        best = min(
            candidates,
            key=lambda candidate: levenshtein(candidate.consume_keyword, prodt_name),
        )
        return best.consume_keyword_type

    def nmonth_period(self, date_start: date, date_end: date, nmonth: int) -> PerDatetime:
        """Return the range together with the same range shifted by ``nmonth`` months."""
        return PerDatetime(
            date_start,
            date_end,
            add_months(date_start, nmonth),
            add_months(date_end, nmonth),
        )

    def nday_period(self, date_start: date, date_end: date, nday: int) -> PerDatetime:
        """Return the range together with the same range shifted by ``nday`` days."""
        return PerDatetime(
            date_start,
            date_end,
            add_days(date_start, nday),
            add_days(date_end, nday),
        )