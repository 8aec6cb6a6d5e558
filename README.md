# consume_alert

A library for keeping track of card spending. It reads the lines of a card
payment notice and turns them into a consumption record. Each record gets a
spending type, taken from the stored keyword that is closest to the product
name. The library can also fetch the spending for a period, ask an HTTP chart
service to draw graphs, and send the results as chat messages.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Modules

- `consume_alert.models` holds the record types: `ConsumeIndexProdNew`,
  `ConsumeIndexProd`, `ConsumingIndexProdType`, `ConsumeInfo`,
  `ConsumeTypeInfo`, `ConsumeGraphInfo`, `MealCheckIndex`, `PerDatetime` and
  `ToPythonGraphCircle`. It also has `hit_sources`, which yields the `_source`
  of each hit in a search response. `DocumentStore` is a protocol with three
  methods, `search(query, index_name)`, `post(document, index_name)` and
  `delete(doc_id, index_name)`, and storage backends implement it.
- `consume_alert.parsing` has the helpers for reading notices:
  - `split_without` splits text on whitespace and removes the given strings
    from each token.
  - `parse_consume_time` turns `["MM/DD", "HH:MM"]` and a year into a
    `%Y-%m-%dT%H:%M:%SZ` timestamp.
  - `parse_prodt_money` reads a signed 64-bit amount, and `parse_prodt_name`
    reads a name.
  - `add_months` shifts a date by months and clamps the day to the end of the
    month. `add_days` shifts a date by days.
  - `levenshtein` gives the edit distance between two strings.

  Input that cannot be read raises `ConsumeParseError`, which is a subclass of
  `ValueError`.
- `consume_alert.command_service.CommandService` handles notices.
  `process_by_consume_type` reads a notice whose first line contains `nh` or
  `삼성`. It stores the classified record in the `consuming_index_prod_new`
  index and returns it. `judge_consume_type` returns the type of the closest
  keyword, or `"etc"` when no keyword matches. `nmonth_period` and
  `nday_period` return a `PerDatetime` that holds a date range and the same
  range shifted.
- `consume_alert.queries` builds the search queries: `period_query`,
  `recent_query`, `mealtime_query` and `keyword_match_query`.
- `consume_alert.database_service.DBService` reads and writes the store:
  - `consume_detail_for_period` returns the payments in a period and their
    total.
  - `recent_consume_info` returns the newest payments together with their
    document ids.
  - `recent_mealtimes` returns today's meal records.
  - `post_model` and `delete_doc` store and remove documents.
  - `classify_consume_details` finds the matching keyword types for a list
    of payments.
- `consume_alert.graph_api_service` has `summarize_consume_types`, which sums
  payments per type and gives each type's share rounded to one decimal place,
  largest first. `GraphApiService` sends JSON to the chart service
  (`http://localhost:5800` by default) at `/api/category` and
  `/api/consume_detail`, and returns the body of the response. If the request
  fails, it raises `GraphApiError`.
- `consume_alert.tele_bot_service` sends reports through a `BotClient`, a
  protocol with `send_message` and `send_photo`. `TelebotService` splits item
  lists into messages of ten items each and retries failed sends with
  `retry_operation`, by default up to 6 retries with 40 seconds between them.
  `send_message_struct_info` sends the fields of a record as `key: value`
  lines. `format_ko_number` adds thousands separators.

## Example

```python
from datetime import date
from consume_alert.command_service import CommandService

service = CommandService(store, today=lambda: date(2024, 11, 25))
record = service.process_by_consume_type([
    "nh card approval",
    "customer",
    "5,500원 일시불",
    "11/25 10:02",
    "coffee shop",
    "total 469,743원",
])
print(record.prodt_name, record.prodt_money, record.prodt_type)
```

`store` can be any object that implements `DocumentStore`. Its `search` must
return a response with a `hits.hits` list. `today` is a callable that returns a
date or a datetime. If you leave it out, the current time in Korea is used.

## What the package does not do

- It has no storage backend of its own. You provide the `DocumentStore`, for
  example a wrapper around a search engine client.
- It has no chat bot client of its own. You provide the `BotClient`.
- It does not draw charts itself. It only sends requests to an external chart
  service.
- It has no command-line program, and it does not read chat commands. There
  is nothing to run. You call the classes from your own code.