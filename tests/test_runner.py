import asyncio
import json

import httpx
import pytest

from helpers import mock_client
from top_headlines import runner
from top_headlines.models import FeedStatus
from top_headlines.runner import RunConfig, execute, run_session

NEWS_URL = "https://news.test/{category}.json"


def _payload(category, count=2):
    return {
        "articles": [
            {
                "title": f"{category} story {i}",
                "url": f"https://example.com/{category}/{i}",
                "urlToImage": f"https://img.test/{category}/{i}.png",
                "publishedAt": f"2024-01-0{i + 1}T00:00:00Z",
                "source": {"name": "Wire"},
            }
            for i in range(count)
        ]
    }


def _handler(png_bytes, requests=None):
    def handler(request):
        if requests is not None:
            requests.append(str(request.url))
        if request.url.host == "news.test":
            category = request.url.path.strip("/").split(".")[0]
            return httpx.Response(200, json=_payload(category))
        return httpx.Response(
            200, content=png_bytes, headers={"content-type": "image/png"}
        )

    return handler


def _run(config, handler):
    async def go():
        async with mock_client(handler) as client:
            return await run_session(config, client)

    return asyncio.run(go())


def test_session_renders_merged_feed_and_saves_thumbnails(png_bytes, tmp_path):
    requests = []
    config = RunConfig(
        news_url=NEWS_URL,
        initial_categories=["technology", "business"],
        thumbnails_dir=str(tmp_path / "thumbs"),
    )

    result = _run(config, _handler(png_bytes, requests))

    assert result.status is FeedStatus.READY
    assert result.article_count == 4
    assert "1. technology story 1" in result.output_text
    assert "2. business story 1" in result.output_text
    assert "[remote image 100x50]" in result.output_text
    assert sorted(p.name for p in (tmp_path / "thumbs").iterdir()) == [
        "001-remote.png",
        "002-remote.png",
        "003-remote.png",
        "004-remote.png",
    ]
    assert sum("news.test" in url for url in requests) == 2


def test_session_without_images_skips_image_requests(png_bytes):
    requests = []
    config = RunConfig(news_url=NEWS_URL, load_images=False, output_format="json")

    result = _run(config, _handler(png_bytes, requests))

    payload = json.loads(result.output_text)
    assert requests == ["https://news.test/general.json"]
    assert all(article["image"] is None for article in payload["articles"])


def test_category_override_is_not_persisted(png_bytes, tmp_path):
    connection = f"sqlite:///{tmp_path / 'settings.db'}"
    requests = []
    override = RunConfig(
        news_url=NEWS_URL,
        categories=["sports"],
        load_images=False,
        database_enabled=True,
        database_connection_string=connection,
    )
    _run(override, _handler(png_bytes, requests))

    stored = RunConfig(
        news_url=NEWS_URL,
        show_settings=True,
        database_enabled=True,
        database_connection_string=connection,
    )
    result = _run(stored, _handler(png_bytes, requests))

    assert requests == ["https://news.test/sports.json"]
    assert "[ ] Sports (sports)" in result.output_text


def test_toggles_persist_between_sessions(png_bytes, tmp_path):
    connection = f"sqlite:///{tmp_path / 'settings.db'}"
    first = RunConfig(
        news_url=NEWS_URL,
        toggles=["science", "health"],
        show_settings=True,
        database_enabled=True,
        database_connection_string=connection,
    )
    result = _run(first, _handler(png_bytes))
    assert "[x] Science (science)" in result.output_text
    assert result.output_text.startswith("Settings")

    requests = []
    second = RunConfig(
        news_url=NEWS_URL,
        load_images=False,
        database_enabled=True,
        database_connection_string=connection,
    )
    _run(second, _handler(png_bytes, requests))

    assert sorted(requests) == [
        "https://news.test/health.json",
        "https://news.test/science.json",
    ]


def test_open_launches_browser(png_bytes, monkeypatch):
    opened = []
    monkeypatch.setattr("top_headlines.cards.webbrowser.open", opened.append)
    config = RunConfig(news_url=NEWS_URL, load_images=False, open_index=1)

    _run(config, _handler(png_bytes))

    assert opened == ["https://example.com/general/1"]


def test_open_out_of_range_raises(png_bytes):
    config = RunConfig(news_url=NEWS_URL, load_images=False, open_index=9)

    with pytest.raises(RuntimeError):
        _run(config, _handler(png_bytes))


def test_database_without_connection_string_falls_back_to_memory():
    store = runner._build_store(RunConfig(database_enabled=True))
    assert isinstance(store, runner.MemorySettingsStore)


def test_execute_rejects_unknown_format():
    with pytest.raises(ValueError):
        execute(RunConfig(output_format="pdf"))


def test_malformed_thumbnail_url_keeps_every_card(png_bytes):
    payload = _payload("technology")
    payload["articles"][0]["urlToImage"] = "https://img/bad\tname.png"

    def handler(request):
        if request.url.host == "news.test":
            return httpx.Response(200, json=payload)
        return httpx.Response(
            200, content=png_bytes, headers={"content-type": "image/png"}
        )

    config = RunConfig(news_url=NEWS_URL, initial_categories=["technology"])

    result = _run(config, handler)

    assert result.status is FeedStatus.READY
    assert result.article_count == 2
    assert "[remote image 100x50]" in result.output_text
    assert "[default image" in result.output_text
