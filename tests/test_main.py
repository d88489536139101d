import json
import os
from dataclasses import replace
from datetime import UTC, datetime
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

import main
from models import Article, ArticlePage, HeadlinesResponse, Meta, NewsApiError
from params import AllNewsParams, HeadlinesParams

SAMPLE_ARTICLE = Article(
    uuid="a1b2c3",
    title="Markets rally",
    description="Stocks closed higher.",
    snippet="Stocks closed higher on Friday after",
    url="https://example.com/markets-rally",
    language="en",
    published_at=datetime(2024, 5, 3, 14, 20, 11, tzinfo=UTC),
    source="example.com",
)

SAMPLE_PAGE = ArticlePage(meta=Meta(found=1, returned=1, limit=3, page=1), data=(SAMPLE_ARTICLE,))


def test_parse_args_maps_flags_to_param_fields() -> None:
    args = main.parse_args(["all", "--search", "climate", "--exclude-domains", "a.com,b.com", "--limit", "5"])

    params = main.build_params(args)

    assert params == AllNewsParams(search="climate", exclude_domains="a.com,b.com", limit=5)


def test_parse_args_bool_flag_defaults_to_unset() -> None:
    assert main.build_params(main.parse_args(["headlines"])) == HeadlinesParams()
    with_flag = main.build_params(main.parse_args(["headlines", "--include-similar"]))
    assert with_flag.include_similar is True


def test_article_command_takes_uuid_and_no_params() -> None:
    args = main.parse_args(["article", "a1b2c3"])

    assert args.uuid == "a1b2c3"
    assert main.build_params(args) is None


def test_run_dispatches_similar() -> None:
    client = MagicMock()
    client.get_similar_news.return_value = SAMPLE_PAGE

    result = main.run(main.parse_args(["similar", "a1b2c3", "--limit", "2"]), client)

    assert result is SAMPLE_PAGE
    uuid, params = client.get_similar_news.call_args.args
    assert uuid == "a1b2c3"
    assert params.limit == 2


def test_to_json_serializes_datetimes() -> None:
    decoded = json.loads(main.to_json(SAMPLE_PAGE))

    assert decoded["meta"]["found"] == 1
    assert decoded["data"][0]["published_at"] == "2024-05-03T14:20:11+00:00"


def test_export_csv_flattens_headlines(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CSV_OUTPUT_PATH", str(tmp_path / "out.csv"))
    other = replace(SAMPLE_ARTICLE, uuid="x9")
    headlines = HeadlinesResponse(data={"general": (SAMPLE_ARTICLE,), "tech": (other,)})

    assert main.export_csv(headlines) == 2


def test_main_prints_json(capsys: pytest.CaptureFixture[str]) -> None:
    client = MagicMock()
    client.__enter__.return_value = client
    client.get_top_stories.return_value = SAMPLE_PAGE

    with patch("main.load_dotenv"), patch("main.NewsApiClient", return_value=client):
        main.main(["top", "--locale", "us"])

    out = json.loads(capsys.readouterr().out)
    assert out["data"][0]["uuid"] == "a1b2c3"


def test_main_exits_nonzero_on_api_error() -> None:
    client = MagicMock()
    client.__enter__.return_value = client
    client.get_sources.side_effect = NewsApiError("HTTP 401: bad token", status_code=401)

    with patch("main.load_dotenv"), patch("main.NewsApiClient", return_value=client):
        with pytest.raises(SystemExit) as excinfo:
            main.main(["sources"])

    assert excinfo.value.code == 1


@pytest.mark.parametrize(
    "argv",
    [
        ["--csv", "--api-token", "tok", "top"],
        ["top", "--csv", "--api-token", "tok"],
    ],
)
def test_common_flags_accepted_before_or_after_command(argv: list[str]) -> None:
    args = main.parse_args(argv)

    assert args.csv is True
    assert args.api_token == "tok"


def test_common_flags_default_when_absent() -> None:
    args = main.parse_args(["sources"])

    assert args.csv is False
    assert args.api_token is None


def test_main_reads_csv_path_from_dotenv(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (tmp_path / ".env").write_text("CSV_OUTPUT_PATH=from_dotenv.csv\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    client = MagicMock()
    client.__enter__.return_value = client
    client.get_top_stories.return_value = SAMPLE_PAGE

    with patch.dict("os.environ", {}), patch("main.NewsApiClient", return_value=client):
        os.environ.pop("CSV_OUTPUT_PATH", None)
        main.main(["top", "--csv"])

    rows = (tmp_path / "from_dotenv.csv").read_text(encoding="utf-8").splitlines()
    assert rows[0].startswith("uuid,title")
    assert len(rows) == 2


def test_main_exits_nonzero_on_missing_token() -> None:
    with patch("main.load_dotenv"), patch.dict("os.environ", {}, clear=True):
        with pytest.raises(SystemExit) as excinfo:
            main.main(["sources"])

    assert excinfo.value.code == 1


def test_main_exits_nonzero_on_blank_uuid() -> None:
    with patch("main.load_dotenv"), patch("requests.Session"):
        with pytest.raises(SystemExit) as excinfo:
            main.main(["--api-token", "tok", "article", " "])

    assert isinstance(excinfo.value.__cause__, ValueError)
