"""Typed records mirroring TheNewsAPI JSON responses."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any


class NewsApiError(RuntimeError):
    """Raised when a TheNewsAPI call fails or returns an unexpected payload."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        code: str | None = None,
        body: str = "",
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.body = body


@dataclass(frozen=True, slots=True)
class Article:
    """One news article as returned by the news endpoints."""

    uuid: str
    title: str
    description: str
    snippet: str
    url: str
    language: str
    published_at: datetime
    source: str
    categories: tuple[str, ...] = ()
    keywords: str | None = None
    image_url: str | None = None
    locale: str | None = None
    relevance_score: float | None = None
    similar: tuple[Article, ...] | None = None


# Nested entries under `similar` carry the same fields as a top-level article.
SimilarArticle = Article
ArticleByUuidResponse = Article


@dataclass(frozen=True, slots=True)
class Meta:
    found: int
    returned: int
    limit: int
    page: int


@dataclass(frozen=True, slots=True)
class Source:
    source_id: str
    domain: str
    language: str
    locale: str | None = None
    categories: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class HeadlinesResponse:
    """Headlines grouped by category name."""

    data: dict[str, tuple[Article, ...]]


@dataclass(frozen=True, slots=True)
class ArticlePage:
    """A page of articles plus pagination meta."""

    meta: Meta
    data: tuple[Article, ...]


TopStoriesResponse = ArticlePage
AllNewsResponse = ArticlePage
SimilarNewsResponse = ArticlePage


@dataclass(frozen=True, slots=True)
class SourcesResponse:
    meta: Meta
    data: tuple[Source, ...]


def parse_headlines(payload: Any) -> HeadlinesResponse:
    body = _as_object(payload, "headlines")
    data = body.get("data")
    if not isinstance(data, dict):
        raise NewsApiError("Unexpected headlines response shape: expected an object under 'data'")

    grouped = {
        str(category): tuple(parse_article(item) for item in _as_list(items, "headlines"))
        for category, items in data.items()
    }
    return HeadlinesResponse(data=grouped)


def parse_article_page(payload: Any) -> ArticlePage:
    body = _as_object(payload, "news")
    return ArticlePage(
        meta=parse_meta(body.get("meta")),
        data=tuple(parse_article(item) for item in _as_list(body.get("data"), "news")),
    )


def parse_sources(payload: Any) -> SourcesResponse:
    body = _as_object(payload, "sources")
    return SourcesResponse(
        meta=parse_meta(body.get("meta")),
        data=tuple(parse_source(item) for item in _as_list(body.get("data"), "sources")),
    )


def parse_article(item: Any, *, nested: bool = False) -> Article:
    """Map one article object into an Article.

    Entries under `similar` are parsed one level deep; their own `similar` is
    always None.
    """
    block = _as_object(item, "article")

    similar_raw = block.get("similar")
    similar = (
        tuple(parse_article(entry, nested=True) for entry in similar_raw)
        if isinstance(similar_raw, list) and not nested
        else None
    )

    return Article(
        uuid=_required_str(block, "uuid", "article"),
        title=_required_str(block, "title", "article"),
        description=_as_text(block.get("description")),
        snippet=_as_text(block.get("snippet")),
        url=_required_str(block, "url", "article"),
        language=_as_str(block.get("language")) or "",
        published_at=_parse_datetime(_required_str(block, "published_at", "article")),
        source=_required_str(block, "source", "article"),
        categories=_as_str_tuple(block.get("categories")),
        keywords=_as_str(block.get("keywords")),
        image_url=_as_str(block.get("image_url")),
        locale=_as_str(block.get("locale")),
        relevance_score=_as_float(block.get("relevance_score")),
        similar=similar,
    )


def parse_source(item: Any) -> Source:
    block = _as_object(item, "source")
    return Source(
        source_id=_required_str(block, "source_id", "source"),
        domain=_required_str(block, "domain", "source"),
        language=_as_str(block.get("language")) or "",
        locale=_as_str(block.get("locale")),
        categories=_as_str_tuple(block.get("categories")),
    )


def parse_meta(value: Any) -> Meta:
    block = _as_object(value, "meta")
    return Meta(
        found=_as_int(block.get("found")),
        returned=_as_int(block.get("returned")),
        limit=_as_int(block.get("limit")),
        page=_as_int(block.get("page")),
    )


def _parse_datetime(raw: str) -> datetime:
    # The API returns RFC3339 timestamps, usually with microseconds and a trailing Z.
    value = raw.replace("Z", "+00:00")
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError as exc:
        raise NewsApiError(f"Unexpected published_at value: {raw!r}") from exc

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def _as_object(value: Any, what: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise NewsApiError(f"Unexpected {what} response shape: expected an object")
    return value


def _as_list(value: Any, what: str) -> list[Any]:
    if not isinstance(value, list):
        raise NewsApiError(f"Unexpected {what} response shape: expected a list under 'data'")
    return value


def _required_str(block: dict[str, Any], key: str, what: str) -> str:
    value = block.get(key)
    if not isinstance(value, str) or not value.strip():
        raise NewsApiError(f"Unexpected {what} response shape: missing '{key}'")
    return value


def _as_str(value: Any) -> str | None:
    return value.strip() if isinstance(value, str) and value.strip() else None


def _as_text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _as_str_tuple(value: Any) -> tuple[str, ...]:
    if not isinstance(value, list):
        return ()
    return tuple(item for item in value if isinstance(item, str))


def _as_int(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.isdigit():
        return int(value)
    return 0


def _as_float(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)
