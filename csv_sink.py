"""CSV export for fetched articles and sources."""

from __future__ import annotations

import csv
import logging
import os
from collections.abc import Callable, Iterable
from pathlib import Path

from models import Article, Source

DEFAULT_ARTICLES_CSV_PATH = "news_articles.csv"
DEFAULT_SOURCES_CSV_PATH = "news_sources.csv"

LOGGER = logging.getLogger(__name__)

ARTICLE_COLUMNS = [
    "uuid",
    "title",
    "description",
    "keywords",
    "snippet",
    "url",
    "image_url",
    "language",
    "published_at",
    "source",
    "categories",       # comma-joined
    "locale",
    "relevance_score",  # only set by search endpoints
    "similar_uuids",    # comma-joined uuids of nested similar articles
]

SOURCE_COLUMNS = [
    "source_id",
    "domain",
    "language",
    "locale",
    "categories",
]


def article_already_exists(uuid: str, path: str | Path | None = None) -> bool:
    """Return True if a row with this article uuid already exists in the CSV."""
    return uuid in _existing_keys(_resolve(path, articles_csv_path), "uuid")


def write_articles(articles: Iterable[Article], path: str | Path | None = None) -> int:
    """Append one row per article, skipping uuids already present.

    Creates the file with a header if it is missing or empty. Returns the
    number of rows written.
    """
    target = _resolve(path, articles_csv_path)
    seen = _existing_keys(target, "uuid")
    rows = []
    for article in articles:
        if article.uuid in seen:
            LOGGER.info("Skipping existing article uuid=%s", article.uuid)
            continue
        seen.add(article.uuid)
        rows.append(_article_row(article))

    _append_rows(target, ARTICLE_COLUMNS, rows)
    LOGGER.info("Wrote %s article rows to %s", len(rows), target)
    return len(rows)


def write_sources(sources: Iterable[Source], path: str | Path | None = None) -> int:
    """Append one row per source, skipping source_ids already present.

    Sources go to SOURCES_CSV_OUTPUT_PATH, separate from the article export.
    """
    target = _resolve(path, sources_csv_path)
    seen = _existing_keys(target, "source_id")
    rows = []
    for source in sources:
        if source.source_id in seen:
            continue
        seen.add(source.source_id)
        rows.append(
            {
                "source_id": source.source_id,
                "domain": source.domain,
                "language": source.language,
                "locale": source.locale or "",
                "categories": ",".join(source.categories),
            }
        )

    _append_rows(target, SOURCE_COLUMNS, rows)
    LOGGER.info("Wrote %s source rows to %s", len(rows), target)
    return len(rows)


def _article_row(article: Article) -> dict[str, str]:
    return {
        "uuid": article.uuid,
        "title": article.title,
        "description": article.description,
        "keywords": article.keywords or "",
        "snippet": article.snippet,
        "url": article.url,
        "image_url": article.image_url or "",
        "language": article.language,
        "published_at": article.published_at.isoformat(),
        "source": article.source,
        "categories": ",".join(article.categories),
        "locale": article.locale or "",
        "relevance_score": "" if article.relevance_score is None else str(article.relevance_score),
        "similar_uuids": ",".join(s.uuid for s in article.similar or ()),
    }


def articles_csv_path() -> Path:
    return Path(os.getenv("CSV_OUTPUT_PATH", DEFAULT_ARTICLES_CSV_PATH))


def sources_csv_path() -> Path:
    return Path(os.getenv("SOURCES_CSV_OUTPUT_PATH", DEFAULT_SOURCES_CSV_PATH))


def _append_rows(path: Path, columns: list[str], rows: list[dict[str, str]]) -> None:
    if not rows:
        return
    write_header = not path.exists() or path.stat().st_size == 0
    if not write_header:
        with path.open(newline="", encoding="utf-8") as fh:
            header = next(csv.reader(fh), [])
        if header != columns:
            raise ValueError(
                f"CSV header mismatch in {path}: expected {columns[:3]}..., found {header[:3]}..."
            )

    with path.open("a", newline="", encoding="utf-8") as fh:
        writer = csv.DictWriter(fh, fieldnames=columns)
        if write_header:
            writer.writeheader()
        writer.writerows(rows)


def _existing_keys(path: Path, column: str) -> set[str]:
    if not path.exists():
        return set()
    with path.open(newline="", encoding="utf-8") as fh:
        return {row[column] for row in csv.DictReader(fh) if row.get(column)}


def _resolve(path: str | Path | None, default: Callable[[], Path]) -> Path:
    return Path(path) if path is not None else default()
