"""Per-endpoint query parameters for TheNewsAPI and their query-string encoding."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, fields
from datetime import UTC, date, datetime
from typing import Any, Union

# A single value or several, sent as a comma-separated list (e.g. "us,ca").
Multi = Union[str, Sequence[str]]
DateLike = Union[str, date, datetime]

_DATE_FIELDS: frozenset[str] = frozenset({"published_on", "published_before", "published_after"})


@dataclass(frozen=True, slots=True)
class HeadlinesParams:
    locale: Multi | None = None
    domains: Multi | None = None
    exclude_domains: Multi | None = None
    source_ids: Multi | None = None
    exclude_source_ids: Multi | None = None
    language: Multi | None = None
    published_on: DateLike | None = None
    headlines_per_category: int | None = None
    include_similar: bool | None = None


@dataclass(frozen=True, slots=True)
class TopStoriesParams:
    search: str | None = None
    search_fields: Multi | None = None
    locale: Multi | None = None
    categories: Multi | None = None
    exclude_categories: Multi | None = None
    domains: Multi | None = None
    exclude_domains: Multi | None = None
    source_ids: Multi | None = None
    exclude_source_ids: Multi | None = None
    language: Multi | None = None
    published_before: DateLike | None = None
    published_after: DateLike | None = None
    published_on: DateLike | None = None
    sort: str | None = None
    limit: int | None = None
    page: int | None = None


@dataclass(frozen=True, slots=True)
class AllNewsParams:
    search: str | None = None
    search_fields: Multi | None = None
    locale: Multi | None = None
    categories: Multi | None = None
    exclude_categories: Multi | None = None
    domains: Multi | None = None
    exclude_domains: Multi | None = None
    source_ids: Multi | None = None
    exclude_source_ids: Multi | None = None
    language: Multi | None = None
    published_before: DateLike | None = None
    published_after: DateLike | None = None
    published_on: DateLike | None = None
    sort: str | None = None
    limit: int | None = None
    page: int | None = None


@dataclass(frozen=True, slots=True)
class SimilarNewsParams:
    categories: Multi | None = None
    exclude_categories: Multi | None = None
    domains: Multi | None = None
    exclude_domains: Multi | None = None
    source_ids: Multi | None = None
    exclude_source_ids: Multi | None = None
    language: Multi | None = None
    published_before: DateLike | None = None
    published_after: DateLike | None = None
    published_on: DateLike | None = None
    limit: int | None = None
    page: int | None = None


@dataclass(frozen=True, slots=True)
class SourcesParams:
    categories: Multi | None = None
    exclude_categories: Multi | None = None
    language: Multi | None = None
    page: int | None = None


def build_query(params: Any, api_token: str) -> dict[str, str]:
    """Encode a params record as query-string pairs, adding the API token.

    Fields left as None are omitted so the API applies its own defaults.
    `params` may be None for endpoints that take no filters.
    """
    query: dict[str, str] = {}
    if params is not None:
        for field in fields(params):
            value = getattr(params, field.name)
            if value is None:
                continue
            query[field.name] = encode_value(field.name, value)

    query["api_token"] = api_token
    return query


def encode_value(name: str, value: Any) -> str:
    """Render one parameter value the way TheNewsAPI expects it on the wire."""
    # bool before int: bool is a subclass of int.
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if name in _DATE_FIELDS and isinstance(value, (date, datetime)):
        return _format_date(value)
    if isinstance(value, str):
        return value
    if isinstance(value, Sequence):
        return ",".join(str(item).strip() for item in value if str(item).strip())
    raise TypeError(f"Unsupported value for parameter {name!r}: {value!r}")


def _format_date(value: date | datetime) -> str:
    if isinstance(value, datetime):
        # The API reads timestamps as UTC; naive values are assumed to be UTC already.
        if value.tzinfo is not None:
            value = value.astimezone(UTC)
        return value.strftime("%Y-%m-%dT%H:%M:%S")
    return value.isoformat()
