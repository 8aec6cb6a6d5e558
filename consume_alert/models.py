"""Data models for consumption records and the document store they live in."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Iterator, Mapping, Optional, Protocol, runtime_checkable

CONSUME_DETAIL = "consuming_index_prod_new"
CONSUME_TYPE = "consuming_index_prod_type"
MEAL_CHECK = "meal_check_index"


@runtime_checkable
class DocumentStore(Protocol):
    """A search-engine style document store, addressed by index name."""

    def search(self, query: Mapping[str, Any], index_name: str) -> dict[str, Any]:
        """Run a search query and return the raw response body."""
        ...

    def post(self, document: Mapping[str, Any], index_name: str) -> None:
        """Index a new document."""
        ...

    def delete(self, doc_id: str, index_name: str) -> None:
        """Delete the document with the given id."""
        ...


def _require_str(source: Mapping[str, Any], key: str, model: str) -> str:
    try:
        value = source[key]
    except KeyError:
        raise ValueError(f"{model}: missing field {key!r}") from None
    if not isinstance(value, str):
        raise ValueError(f"{model}: field {key!r} must be a string, got {value!r}")
    return value


def _require_int(source: Mapping[str, Any], key: str, model: str) -> int:
    try:
        value = source[key]
    except KeyError:
        raise ValueError(f"{model}: missing field {key!r}") from None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{model}: field {key!r} must be an integer, got {value!r}")
    return value


def _optional_str(source: Mapping[str, Any], key: str, model: str) -> Optional[str]:
    if source.get(key) is None:
        return None
    return _require_str(source, key, model)


def _as_mapping(source: Any, model: str) -> Mapping[str, Any]:
    if not isinstance(source, Mapping):
        raise ValueError(f"{model}: document must be an object, got {source!r}")
    return source


def hit_sources(response: Mapping[str, Any]) -> Iterator[Mapping[str, Any]]:
    """Yield the ``_source`` of every hit in a search response.

    Raises ValueError if the response has no hit list or a hit lacks ``_source``.
    """
    hits = response.get("hits", {}) if isinstance(response, Mapping) else None
    hit_list = hits.get("hits") if isinstance(hits, Mapping) else None
    if not isinstance(hit_list, list):
        raise ValueError("search response has no 'hits.hits' list")
    for hit in hit_list:
        if not isinstance(hit, Mapping) or "_source" not in hit:
            raise ValueError("search hit is missing the '_source' field")
        yield hit["_source"]


@dataclass
class ConsumeIndexProdNew:
    """A single payment record as stored in the consumption index."""

    timestamp: str
    reg_dt: str
    prodt_name: str
    prodt_money: int
    prodt_type: str

    def to_document(self) -> dict[str, Any]:
        return {
            "@timestamp": self.timestamp,
            "reg_dt": self.reg_dt,
            "prodt_name": self.prodt_name,
            "prodt_money": self.prodt_money,
            "prodt_type": self.prodt_type,
        }

    @classmethod
    def from_document(cls, source: Mapping[str, Any]) -> ConsumeIndexProdNew:
        name = cls.__name__
        source = _as_mapping(source, name)
        return cls(
            timestamp=_require_str(source, "@timestamp", name),
            reg_dt=_require_str(source, "reg_dt", name),
            prodt_name=_require_str(source, "prodt_name", name),
            prodt_money=_require_int(source, "prodt_money", name),
            prodt_type=_require_str(source, "prodt_type", name),
        )


@dataclass
class ConsumeIndexProd:
    """A payment record whose type may still have to be classified."""

    timestamp: str
    prodt_name: str
    prodt_money: int
    prodt_type: Optional[str] = None
    prodt_type_query_res: Optional[list[ConsumingIndexProdType]] = None

    @classmethod
    def from_document(cls, source: Mapping[str, Any]) -> ConsumeIndexProd:
        name = cls.__name__
        source = _as_mapping(source, name)
        return cls(
            timestamp=_require_str(source, "@timestamp", name),
            prodt_name=_require_str(source, "prodt_name", name),
            prodt_money=_require_int(source, "prodt_money", name),
            prodt_type=_optional_str(source, "prodt_type", name),
        )


@dataclass(frozen=True)
class ConsumingIndexProdType:
    """A keyword and the consumption type it belongs to."""

    consume_keyword_type: str
    consume_keyword: str

    @classmethod
    def from_document(cls, source: Mapping[str, Any]) -> ConsumingIndexProdType:
        name = cls.__name__
        source = _as_mapping(source, name)
        return cls(
            consume_keyword_type=_require_str(source, "consume_keyword_type", name),
            consume_keyword=_require_str(source, "consume_keyword", name),
        )


@dataclass
class ConsumeInfo:
    """A classified payment used to build per-type summaries."""

    timestamp: str
    prodt_name: str
    prodt_money: int
    prodt_type: str


@dataclass(frozen=True)
class ConsumeTypeInfo:
    """Total cost and share of one consumption type."""

    prodt_type: str
    prodt_cost: int
    prodt_per: float


@dataclass
class ConsumeGraphInfo:
    """Payments and their total over a date range."""

    total_cost: float
    consume_list: list[ConsumeIndexProdNew] = field(default_factory=list)
    start_date: Optional[date] = None
    end_date: Optional[date] = None


@dataclass(frozen=True)
class MealCheckIndex:
    """A recorded meal time."""

    timestamp: str
    laststamp: int
    alarminfo: int

    @classmethod
    def from_document(cls, source: Mapping[str, Any]) -> MealCheckIndex:
        name = cls.__name__
        source = _as_mapping(source, name)
        return cls(
            timestamp=_require_str(source, "@timestamp", name),
            laststamp=_require_int(source, "laststamp", name),
            alarminfo=_require_int(source, "alarminfo", name),
        )


@dataclass(frozen=True)
class PerDatetime:
    """A date range together with the same range shifted by some offset."""

    date_start: date
    date_end: date
    n_date_start: date
    n_date_end: date


@dataclass(frozen=True)
class ToPythonGraphCircle:
    """Request body for the pie-chart drawing endpoint."""

    title_vec: list[str]
    cost_vec: list[int]
    start_dt: str
    end_dt: str
    total_cost: float

    def to_payload(self) -> dict[str, Any]:
        return {
            "title_vec": list(self.title_vec),
            "cost_vec": list(self.cost_vec),
            "start_dt": self.start_dt,
            "end_dt": self.end_dt,
            "total_cost": self.total_cost,
        }