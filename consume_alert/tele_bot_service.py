"""Sending consumption reports through a chat bot, with retries."""

from __future__ import annotations

import dataclasses
import json
import logging
import math
import time
from datetime import date
from typing import (
    Any,
    Callable,
    Iterator,
    Mapping,
    Optional,
    Protocol,
    Sequence,
    TypeVar,
    Union,
    runtime_checkable,
)

from consume_alert.models import ConsumeIndexProdNew, ConsumeTypeInfo

logger = logging.getLogger(__name__)

T = TypeVar("T")
DateLike = Union[date, str]

DEFAULT_MAX_RETRIES = 6
DEFAULT_RETRY_DELAY = 40.0
CHUNK_SIZE = 10
SEPARATOR = "---------------------------------\n"

_I32_MIN = -(2**31)
_I32_MAX = 2**31 - 1
_I64_MIN = -(2**63)
_I64_MAX = 2**63 - 1


@runtime_checkable
class BotClient(Protocol):
    """The chat bot operations the service relies on."""

    def send_message(self, chat_id: int, text: str) -> Any:
        """Send a text message to a chat."""
        ...

    def send_photo(self, chat_id: int, image_path: str) -> Any:
        """Send the image stored at ``image_path`` to a chat."""
        ...


def format_ko_number(value: int) -> str:
    """Format an integer with comma thousands separators, e.g. ``1,234``."""
    return f"{int(value):,}"


def _to_i32(value: float) -> int:
    if math.isnan(value):
        return 0
    if value >= _I32_MAX:
        return _I32_MAX
    if value <= _I32_MIN:
        return _I32_MIN
    return int(value)


def _format_float(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    if value.is_integer():
        return str(int(value))
    return repr(value)


def retry_operation(
    operation: Callable[[], T],
    max_retries: int = DEFAULT_MAX_RETRIES,
    retry_delay: float = DEFAULT_RETRY_DELAY,
    sleep: Callable[[float], Any] = time.sleep,
) -> T:
    """Call ``operation`` until it succeeds, at most ``max_retries + 1`` times.

    Between failed attempts it waits ``retry_delay`` seconds. The last error is
    raised when every attempt fails.
    """
    if max_retries < 0:
        raise ValueError(f"max_retries must not be negative, got {max_retries}")
    for attempt in range(max_retries + 1):
        try:
            return operation()
        except Exception as exc:
            if attempt == max_retries:
                logger.error(
                    "[Telebot Error][try_send_operation()] Max attempts reached. : %r", exc
                )
                raise
            logger.error("%r", exc)
            sleep(retry_delay)
    raise AssertionError("unreachable")


def chunk_messages(
    items: Sequence[T],
    builder: Callable[[T], str],
    title: str = "",
    chunk_size: int = CHUNK_SIZE,
) -> Iterator[str]:
    """Yield message texts of at most ``chunk_size`` items each.

    The first message starts with ``title``; every item is preceded by a
    separator line.
    """
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    for start in range(0, len(items), chunk_size):
        parts = [title] if start == 0 else []
        for item in items[start : start + chunk_size]:
            parts.append(SEPARATOR)
            parts.append(builder(item))
        yield "".join(parts)


def _struct_document(obj: Any) -> Mapping[str, Any]:
    to_document = getattr(obj, "to_document", None)
    if callable(to_document):
        obj = to_document()
    elif dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        obj = dataclasses.asdict(obj)
    if not isinstance(obj, Mapping):
        raise TypeError("Parsed JSON is not an object")
    return obj


def _struct_value(value: Any) -> str:
    if isinstance(value, bool) or value is None:
        return json.dumps(value)
    if isinstance(value, int):
        return format_ko_number(value) if _I64_MIN <= value <= _I64_MAX else ""
    if isinstance(value, float):
        return ""
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"), default=str)


class TelebotService:
    """Sends text and photos to one chat, retrying failed sends."""

    def __init__(
        self,
        bot: BotClient,
        chat_id: int,
        input_text: Optional[str] = "",
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        sleep: Callable[[float], Any] = time.sleep,
    ) -> None:
        if input_text is None:
            logger.error("[Error][TelebotService()] The entered value does not exist.")
            input_text = ""
        self.bot = bot
        self.chat_id = chat_id
        self.input_text = input_text.lower()
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.sleep = sleep

    def _retry(self, operation: Callable[[], Any]) -> None:
        retry_operation(operation, self.max_retries, self.retry_delay, self.sleep)

    def send_message_confirm(self, msg: str) -> None:
        """Send a text message, retrying on failure."""
        self._retry(lambda: self.bot.send_message(self.chat_id, msg))

    def send_photo_confirm(self, image_path: str) -> None:
        """Send a photo, retrying on failure."""
        self._retry(lambda: self.bot.send_photo(self.chat_id, image_path))

    def send_consumption_message(
        self,
        items: Sequence[T],
        builder: Callable[[T], str],
        empty_flag: bool,
        empty_msg: str,
        msg_title: str,
    ) -> None:
        """Send ``empty_msg`` if ``empty_flag`` is set, else the items in chunks of ten."""
        if empty_flag:
            self.send_message_confirm(empty_msg)
            return
        for text in chunk_messages(items, builder, msg_title):
            self.send_message_confirm(text)

    @staticmethod
    def _headers(total_cost: float, start_dt: DateLike, end_dt: DateLike) -> tuple[str, str]:
        head = (
            f"The money you spent from [{start_dt} ~ {end_dt}] is "
            f"[ {format_ko_number(_to_i32(total_cost))} won ]\n"
        )
        empty_msg = head + "There is no consumption history to be viewed during that period."
        title = head + "=========[DETAIL]=========\n"
        return empty_msg, title

    def send_message_consume_split(
        self,
        consume_list: Sequence[ConsumeIndexProdNew],
        total_cost: float,
        start_dt: DateLike,
        end_dt: DateLike,
        empty_flag: bool,
    ) -> None:
        """Send the payments of a period, ten per message."""
        empty_msg, title = self._headers(total_cost, start_dt, end_dt)
        self.send_consumption_message(
            consume_list,
            lambda item: (
                f"name : {item.prodt_name}\n"
                f"date : {item.timestamp}\n"
                f"cost : {format_ko_number(item.prodt_money)}\n"
            ),
            empty_flag,
            empty_msg,
            title,
        )

    def send_message_consume_type(
        self,
        consume_type_list: Sequence[ConsumeTypeInfo],
        total_cost: float,
        start_dt: DateLike,
        end_dt: DateLike,
        empty_flag: bool,
    ) -> None:
        """Send the per-type totals of a period, ten per message."""
        empty_msg, title = self._headers(total_cost, start_dt, end_dt)
        self.send_consumption_message(
            consume_type_list,
            lambda item: (
                f"category name : {item.prodt_type}\n"
                f"cost : {format_ko_number(item.prodt_cost)}\n"
                f"cost(%) : {_format_float(item.prodt_per)}%\n"
            ),
            empty_flag,
            empty_msg,
            title,
        )

    def send_message_consume_type_list(
        self, consume_type_list: Sequence[str], empty_flag: bool
    ) -> None:
        """Send the list of known consumption types."""
        self.send_consumption_message(
            consume_type_list,
            lambda item: f"{item}\n",
            empty_flag,
            "'consume_type' does not exist.",
            "ConsumeType List\n=========[DETAIL]=========\n",
        )

    def send_message_struct_info(self, obj: Any) -> None:
        """Send the fields of a record as ``key: value`` lines, keys sorted."""
        document = _struct_document(obj)
        lines = [f"{key}: {_struct_value(document[key])}" for key in sorted(document)]
        self.send_message_confirm(", \n".join(lines))