"""TheNewsAPI client: one typed method per endpoint."""

from __future__ import annotations

import logging
import os
from typing import Any, Callable, TypeVar
from urllib.parse import quote

import requests

from models import (
    AllNewsResponse,
    ArticleByUuidResponse,
    HeadlinesResponse,
    NewsApiError,
    SimilarNewsResponse,
    SourcesResponse,
    TopStoriesResponse,
    parse_article,
    parse_article_page,
    parse_headlines,
    parse_sources,
)
from params import (
    AllNewsParams,
    HeadlinesParams,
    SimilarNewsParams,
    SourcesParams,
    TopStoriesParams,
    build_query,
)

DEFAULT_BASE_URL = "https://api.thenewsapi.com/v1"
DEFAULT_TIMEOUT_SECONDS = 30.0

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

__all__ = ["NewsApiClient", "NewsApiError"]


class NewsApiClient:
    """Client for TheNewsAPI (https://www.thenewsapi.com/documentation).

    Each method issues a single GET with the parameters serialized as a query
    string and returns the decoded response as immutable records. Failures of
    any kind (transport, non-2xx status, malformed body) raise NewsApiError.

    Usage:
        with NewsApiClient("your_api_token") as client:
            headlines = client.get_headlines(HeadlinesParams(locale="us"))
    """

    def __init__(
        self,
        api_token: str | None = None,
        *,
        base_url: str | None = None,
        timeout: float | None = None,
        session: requests.Session | None = None,
    ) -> None:
        token = api_token or os.getenv("THENEWSAPI_TOKEN")
        if not token:
            raise RuntimeError("THENEWSAPI_TOKEN environment variable is required")

        self._api_token = token
        self._base_url = (base_url or os.getenv("THENEWSAPI_BASE_URL") or DEFAULT_BASE_URL).rstrip("/")
        if timeout is None:
            timeout = float(os.getenv("THENEWSAPI_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS))
        self._timeout = timeout
        self._session = session or requests.Session()

    def __enter__(self) -> NewsApiClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        self._session.close()

    def get_headlines(self, params: HeadlinesParams | None = None) -> HeadlinesResponse:
        """Latest headlines, grouped by category."""
        return self._get("/news/headlines", params or HeadlinesParams(), parse_headlines)

    def get_top_stories(self, params: TopStoriesParams | None = None) -> TopStoriesResponse:
        return self._get("/news/top", params or TopStoriesParams(), parse_article_page)

    def get_all_news(self, params: AllNewsParams | None = None) -> AllNewsResponse:
        """Search across all articles, optionally filtered by the given params."""
        return self._get("/news/all", params or AllNewsParams(), parse_article_page)

    def get_similar_news(
        self,
        uuid: str,
        params: SimilarNewsParams | None = None,
    ) -> SimilarNewsResponse:
        """Articles similar to the article identified by `uuid`."""
        return self._get(
            f"/news/similar/{_quote_uuid(uuid)}",
            params or SimilarNewsParams(),
            parse_article_page,
        )

    def get_article_by_uuid(self, uuid: str) -> ArticleByUuidResponse:
        return self._get(f"/news/uuid/{_quote_uuid(uuid)}", None, parse_article)

    def get_sources(self, params: SourcesParams | None = None) -> SourcesResponse:
        """Sources available to the news endpoints' domain/source_id filters."""
        return self._get("/sources", params or SourcesParams(), parse_sources)

    def _get(self, path: str, params: Any, parse: Callable[[Any], T]) -> T:
        query = build_query(params, self._api_token)
        url = f"{self._base_url}{path}"
        LOGGER.info(
            "TheNewsAPI GET %s params=%s",
            path,
            sorted(key for key in query if key != "api_token"),
        )

        try:
            response = self._session.get(url, params=query, timeout=self._timeout)
        except requests.RequestException as exc:
            LOGGER.warning("TheNewsAPI request failed for %s: %s", path, exc)
            raise NewsApiError(f"TheNewsAPI request failed for {path}: {exc}") from exc

        if not response.ok:
            raise _error_from_response(path, response)

        try:
            body = response.json()
        except ValueError as exc:
            raise NewsApiError(
                f"TheNewsAPI returned a non-JSON body for {path}",
                status_code=response.status_code,
                body=response.text,
            ) from exc

        return parse(body)


def _error_from_response(path: str, response: requests.Response) -> NewsApiError:
    """Build a NewsApiError from a non-2xx response, preferring the API's error envelope."""
    text = response.text or ""
    code: str | None = None
    message = text

    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        error = body["error"]
        code = error.get("code") if isinstance(error.get("code"), str) else None
        if isinstance(error.get("message"), str):
            message = error["message"]

    LOGGER.warning(
        "TheNewsAPI error for %s: status=%s code=%s",
        path,
        response.status_code,
        code,
    )
    return NewsApiError(
        f"HTTP {response.status_code}: {message}",
        status_code=response.status_code,
        code=code,
        body=text,
    )


def _quote_uuid(uuid: str) -> str:
    if not uuid or not uuid.strip():
        raise ValueError("uuid must be a non-empty string")
    return quote(uuid.strip(), safe="")
