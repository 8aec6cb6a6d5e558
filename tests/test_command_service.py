from datetime import date, datetime

import pytest

from consume_alert.command_service import CommandService
from consume_alert.models import CONSUME_DETAIL, CONSUME_TYPE, ConsumeIndexProdNew
from consume_alert.parsing import ConsumeParseError, add_days, add_months


class FakeStore:
    def __init__(self, type_hits=None):
        self.type_hits = type_hits if type_hits is not None else []
        self.posted = []
        self.searches = []

    def search(self, query, index_name):
        self.searches.append((query, index_name))
        return {"hits": {"hits": [{"_source": src} for src in self.type_hits]}}

    def post(self, document, index_name):
        self.posted.append((document, index_name))

    def delete(self, doc_id, index_name):
        raise AssertionError("delete should not be called")


def fixed_clock():
    return datetime(2024, 6, 1, 12, 0, 0)


NH_ARGS = [
    "nh카드3*3*승인",
    "신*환",
    "5,500원 일시불",
    "11/25 10:02",
    "메가엠지씨커피 선릉",
    "총누적469,743원",
]


def test_nh_notification_is_parsed_and_posted():
    store = FakeStore()
    service = CommandService(store, fixed_clock)
    record = service.process_by_consume_type(NH_ARGS)
    assert record.prodt_money == 5500
    assert record.timestamp == "2024-11-25T10:02:00Z"
    assert record.prodt_name == "메가엠지씨커피 선릉"
    assert record.prodt_type == "etc"
    assert store.posted == [(record.to_document(), CONSUME_DETAIL)]


def test_samsung_notification_takes_name_from_time_line():
    store = FakeStore(
        [{"consume_keyword_type": "cafe", "consume_keyword": "스타벅스"}]
    )
    service = CommandService(store, fixed_clock)
    record = service.process_by_consume_type(
        ["삼성1234승인", "12,000원 일시불", "03/05 14:30 스타벅스"]
    )
    assert record.prodt_money == 12000
    assert record.timestamp == "2024-03-05T14:30:00Z"
    assert record.prodt_name == "스타벅스"
    assert record.prodt_type == "cafe"
    posted_doc, index = store.posted[0]
    assert index == CONSUME_DETAIL
    assert ConsumeIndexProdNew.from_document(posted_doc) == record


def test_reg_dt_comes_from_clock():
    service = CommandService(FakeStore(), fixed_clock)
    record = service.process_by_consume_type(NH_ARGS)
    assert record.reg_dt == fixed_clock().strftime("%Y-%m-%dT%H:%M:%SZ")


def test_unknown_card_type_raises_and_posts_nothing():
    store = FakeStore()
    service = CommandService(store, fixed_clock)
    with pytest.raises(ConsumeParseError):
        service.process_by_consume_type(["kb카드승인", "1,000원"])
    assert store.posted == []


def test_empty_args_raise():
    with pytest.raises(ConsumeParseError):
        CommandService(FakeStore(), fixed_clock).process_by_consume_type([])


def test_missing_line_raises():
    store = FakeStore()
    service = CommandService(store, fixed_clock)
    with pytest.raises(ConsumeParseError):
        service.process_by_consume_type(NH_ARGS[:4])
    assert store.posted == []


def test_bad_price_raises():
    args = list(NH_ARGS)
    args[2] = "오천원 일시불"
    with pytest.raises(ConsumeParseError):
        CommandService(FakeStore(), fixed_clock).process_by_consume_type(args)


def test_judge_picks_closest_keyword():
    store = FakeStore(
        [
            {"consume_keyword_type": "meal", "consume_keyword": "피자헛 강남점"},
            {"consume_keyword_type": "cafe", "consume_keyword": "메가커피"},
        ]
    )
    service = CommandService(store, fixed_clock)
    assert service.judge_consume_type("메가커피 선릉") == "cafe"
    query, index = store.searches[0]
    assert index == CONSUME_TYPE
    assert query == {"query": {"match": {"consume_keyword": "메가커피 선릉"}}}


def test_judge_returns_etc_without_hits():
    assert CommandService(FakeStore(), fixed_clock).judge_consume_type("x") == "etc"


def test_judge_rejects_hit_without_source():
    class BrokenStore(FakeStore):
        def search(self, query, index_name):
            return {"hits": {"hits": [{"_id": "1"}]}}

    with pytest.raises(ValueError):
        CommandService(BrokenStore(), fixed_clock).judge_consume_type("x")


def test_date_clock_is_accepted():
    service = CommandService(FakeStore(), lambda: date(2023, 1, 1))
    record = service.process_by_consume_type(NH_ARGS)
    assert record.timestamp.startswith("2023-11-25")
    assert record.reg_dt == "2023-01-01T00:00:00Z"


def test_nmonth_period_shifts_both_ends():
    service = CommandService(FakeStore(), fixed_clock)
    start, end = date(2024, 1, 31), date(2024, 3, 31)
    period = service.nmonth_period(start, end, -1)
    assert (period.date_start, period.date_end) == (start, end)
    assert period.n_date_start == add_months(start, -1)
    assert period.n_date_end == add_months(end, -1)
    assert period.n_date_end.month == 2


def test_nday_period_shifts_both_ends():
    service = CommandService(FakeStore(), fixed_clock)
    start, end = date(2024, 2, 27), date(2024, 3, 2)
    period = service.nday_period(start, end, 3)
    assert (period.date_start, period.date_end) == (start, end)
    assert period.n_date_start == add_days(start, 3)
    assert (period.n_date_end - end).days == 3


def test_nmonth_period_out_of_range_raises():
    service = CommandService(FakeStore(), fixed_clock)
    with pytest.raises(ConsumeParseError):
        service.nmonth_period(date(9999, 12, 1), date(9999, 12, 31), 1)