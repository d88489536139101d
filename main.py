"""CLI entrypoint for querying TheNewsAPI."""

from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import sys
from collections.abc import Sequence
from datetime import date, datetime
from typing import Any

from dotenv import find_dotenv, load_dotenv

from csv_sink import write_articles, write_sources
from models import Article, ArticlePage, HeadlinesResponse, SourcesResponse
from news_client import NewsApiClient
from params import AllNewsParams, HeadlinesParams, SimilarNewsParams, SourcesParams, TopStoriesParams

# command -> (params record, takes a uuid positional)
COMMANDS: dict[str, tuple[type | None, bool]] = {
    "headlines": (HeadlinesParams, False),
    "top": (TopStoriesParams, False),
    "all": (AllNewsParams, False),
    "similar": (SimilarNewsParams, True),
    "article": (None, True),
    "sources": (SourcesParams, False),
}

LOGGER = logging.getLogger(__name__)

_INT_FIELDS: frozenset[str] = frozenset({"limit", "page", "headlines_per_category"})
_BOOL_FIELDS: frozenset[str] = frozenset({"include_similar"})


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command-line flags; filter options mirror the params record fields.

    --api-token and --csv are accepted before or after the command name.
    """
    parser = argparse.ArgumentParser(description="Query TheNewsAPI and print the response as JSON")
    _add_common_flags(parser, default_token=None, default_csv=False)
    # Subcommand copies default to SUPPRESS so they only override when given.
    common = argparse.ArgumentParser(add_help=False)
    _add_common_flags(common, default_token=argparse.SUPPRESS, default_csv=argparse.SUPPRESS)
    subparsers = parser.add_subparsers(dest="command", required=True)

    for command, (params_cls, takes_uuid) in COMMANDS.items():
        sub = subparsers.add_parser(command, parents=[common])
        if takes_uuid:
            sub.add_argument("uuid", help="Article UUID")
        if params_cls is None:
            continue
        for field in dataclasses.fields(params_cls):
            flag = f"--{field.name.replace('_', '-')}"
            if field.name in _BOOL_FIELDS:
                sub.add_argument(flag, dest=field.name, action="store_true", default=None)
            elif field.name in _INT_FIELDS:
                sub.add_argument(flag, dest=field.name, type=int, default=None)
            else:
                sub.add_argument(flag, dest=field.name, default=None)

    return parser.parse_args(argv)


def _add_common_flags(parser: argparse.ArgumentParser, default_token: Any, default_csv: Any) -> None:
    parser.add_argument("--api-token", default=default_token, help="API token (defaults to THENEWSAPI_TOKEN)")
    parser.add_argument(
        "--csv",
        action="store_true",
        default=default_csv,
        help="Append returned articles to CSV_OUTPUT_PATH (sources to SOURCES_CSV_OUTPUT_PATH) instead of printing",
    )


def build_params(args: argparse.Namespace) -> Any:
    params_cls, _ = COMMANDS[args.command]
    if params_cls is None:
        return None
    values = {field.name: getattr(args, field.name) for field in dataclasses.fields(params_cls)}
    return params_cls(**values)


def run(args: argparse.Namespace, client: NewsApiClient) -> Any:
    """Dispatch one command to the client and return the decoded response."""
    params = build_params(args)
    if args.command == "headlines":
        return client.get_headlines(params)
    if args.command == "top":
        return client.get_top_stories(params)
    if args.command == "all":
        return client.get_all_news(params)
    if args.command == "similar":
        return client.get_similar_news(args.uuid, params)
    if args.command == "article":
        return client.get_article_by_uuid(args.uuid)
    return client.get_sources(params)


def export_csv(result: Any) -> int:
    """Append the articles or sources in a response to the CSV sink."""
    if isinstance(result, SourcesResponse):
        return write_sources(result.data)
    if isinstance(result, HeadlinesResponse):
        return write_articles(a for group in result.data.values() for a in group)
    if isinstance(result, ArticlePage):
        return write_articles(result.data)
    if isinstance(result, Article):
        return write_articles([result])
    raise TypeError(f"Cannot export {type(result).__name__} to CSV")


def to_json(result: Any) -> str:
    return json.dumps(dataclasses.asdict(result), indent=2, default=_json_default, ensure_ascii=False)


def _json_default(value: Any) -> str:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


def main(argv: Sequence[str] | None = None) -> None:
    """Load config, run one command, and print or export the result."""
    load_dotenv(find_dotenv(usecwd=True))
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    args = parse_args(argv)

    # RuntimeError covers NewsApiError and a missing token; ValueError a blank
    # uuid or a CSV file whose header belongs to another export.
    try:
        with NewsApiClient(args.api_token) as client:
            result = run(args, client)
        if args.csv:
            written = export_csv(result)
            LOGGER.info("Exported %s rows for command=%s", written, args.command)
        else:
            sys.stdout.write(to_json(result) + "\n")
    except (RuntimeError, ValueError) as exc:
        LOGGER.error("TheNewsAPI %s failed: %s", args.command, exc)
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
