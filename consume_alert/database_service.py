"""Reading and writing consumption and meal records in the document store."""

from __future__ import annotations

import dataclasses
import logging
from datetime import date, datetime, timedelta, timezone
from typing import Any, Callable, Mapping, MutableSequence, Optional, Union

from consume_alert.models import (
    CONSUME_DETAIL,
    CONSUME_TYPE,
    MEAL_CHECK,
    ConsumeGraphInfo,
    ConsumeIndexProd,
    ConsumeIndexProdNew,
    ConsumingIndexProdType,
    DocumentStore,
    MealCheckIndex,
    hit_sources,
)
from consume_alert.queries import (
    keyword_match_query,
    mealtime_query,
    period_query,
    recent_query,
)

logger = logging.getLogger(__name__)

_KST = timezone(timedelta(hours=9))

Clock = Callable[[], Union[datetime, date]]


def _korean_today() -> date:
    return datetime.now(_KST).date()


def _model_document(model: Any) -> dict[str, Any]:
    to_document = getattr(model, "to_document", None)
    if callable(to_document):
        return dict(to_document())
    if isinstance(model, Mapping):
        return dict(model)
    if dataclasses.is_dataclass(model) and not isinstance(model, type):
        return dataclasses.asdict(model)
    raise TypeError(f"cannot serialize {type(model).__name__} into a document")


class DBService:
    """Queries and updates the consumption and meal indices."""

    def __init__(self, store: DocumentStore, today: Optional[Clock] = None) -> None:
        self.store = store
        self.today: Clock = today if today is not None else _korean_today

    def _today(self) -> date:
        moment = self.today()
        if isinstance(moment, datetime):
            return moment.date()
        return moment

    def delete_doc(self, index_name: str, doc_id: str) -> None:
        """Remove one document from an index."""
        self.store.delete(doc_id, index_name)
        logger.info("Delete success - index: %s, doc_id: %s", index_name, doc_id)

    def recent_consume_info(
        self, order_by: str, size: int
    ) -> list[tuple[str, ConsumeIndexProdNew]]:
        """Return up to ``size`` newest payments by ``order_by``, with their ids."""
        response = self.store.search(recent_query(order_by, size), CONSUME_DETAIL)
        hits = response.get("hits", {}) if isinstance(response, Mapping) else {}
        hit_list = hits.get("hits") if isinstance(hits, Mapping) else None
        if not isinstance(hit_list, list):
            return []

        records = []
        for hit in hit_list:
            if not isinstance(hit, Mapping) or "_id" not in hit:
                raise ValueError(
                    "[Error][get_recent_consume_info_order_by()] Missing 'doc_id' field"
                )
            if "_source" not in hit:
                raise ValueError(
                    "[Error][get_recent_consume_info_order_by()] Missing '_source' field"
                )
            doc_id = str(hit["_id"]).strip('"')
            records.append((doc_id, ConsumeIndexProdNew.from_document(hit["_source"])))
        return records

    def consume_detail_for_period(
        self, start_date: date, end_date: date
    ) -> ConsumeGraphInfo:
        """Return all payments between two dates, inclusive, and their total."""
        response = self.store.search(period_query(start_date, end_date), CONSUME_DETAIL)
        try:
            total = response["aggregations"]["total_prodt_money"]["value"]
        except (KeyError, TypeError):
            total = None
        if isinstance(total, bool) or not isinstance(total, (int, float)):
            raise ValueError(
                "[Error][get_consume_detail_specific_period()] 'total_cost' error"
            )
        consume_list = [
            ConsumeIndexProdNew.from_document(source)
            for source in hit_sources(response)
        ]
        return ConsumeGraphInfo(float(total), consume_list, start_date, end_date)

    def recent_mealtimes(self, query_size: int) -> list[MealCheckIndex]:
        """Return up to ``query_size`` of today's meal records, newest first."""
        query = mealtime_query(query_size, self._today())
        response = self.store.search(query, MEAL_CHECK)
        return [MealCheckIndex.from_document(source) for source in hit_sources(response)]

    def post_model(self, index_name: str, model: Any) -> None:
        """Store a model, a mapping or a dataclass as a new document."""
        self.store.post(_model_document(model), index_name)

    def classify_consume_details(
        self, consume_details: MutableSequence[ConsumeIndexProd]
    ) -> MutableSequence[ConsumeIndexProd]:
        """Attach matching keyword types to each payment, or mark it ``"etc"``.

        The payments are updated in place and the same sequence is returned.
        """
        for detail in consume_details:
            query = keyword_match_query("keyword", detail.prodt_name)
            response = self.store.search(query, CONSUME_TYPE)
            results = [
                ConsumingIndexProdType.from_document(source)
                for source in hit_sources(response)
            ]
            if results:
                detail.prodt_type_query_res = results
            else:
                detail.prodt_type = "etc"
        return consume_details