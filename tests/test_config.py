import textwrap

import pytest

from top_headlines.config import AppConfig, parse_app_config
from top_headlines.feeds import DEFAULT_NEWS_URL


def _write(tmp_path, body):
    path = tmp_path / "config.xml"
    path.write_text(textwrap.dedent(body), encoding="utf-8")
    return str(path)


def test_defaults():
    config = AppConfig()
    assert config.news_url == DEFAULT_NEWS_URL
    assert config.request_timeout is None
    assert (config.images.max_width, config.images.max_height) == (100, 70)
    assert not config.database.enabled


def test_parse_full_config(tmp_path):
    path = _write(
        tmp_path,
        """\
        <config>
          <news-url>https://news.test/{category}.json</news-url>
          <user-agent>agent/9</user-agent>
          <request-timeout>12.5</request-timeout>
          <categories>
            <category>technology</category>
            <category> science </category>
          </categories>
          <images>
            <enabled>false</enabled>
            <max-width>120</max-width>
            <max-height>80</max-height>
            <default-image>img/fallback.png</default-image>
          </images>
          <logging>
            <level>DEBUG</level>
            <file>logs/app.log</file>
          </logging>
          <database>
            <enabled>true</enabled>
            <connection-string>sqlite:///settings.db</connection-string>
          </database>
        </config>
        """,
    )

    config = parse_app_config(path)

    assert config.news_url == "https://news.test/{category}.json"
    assert config.user_agent == "agent/9"
    assert config.request_timeout == 12.5
    assert config.categories == ["technology", "science"]
    assert not config.images.enabled
    assert (config.images.max_width, config.images.max_height) == (120, 80)
    assert config.images.default_image == str(tmp_path / "img" / "fallback.png")
    assert config.logging.level == "DEBUG"
    assert config.logging.file == str(tmp_path / "logs" / "app.log")
    assert config.database.enabled
    assert config.database.connection_string == "sqlite:///settings.db"


def test_minimal_config_uses_defaults(tmp_path):
    config = parse_app_config(_write(tmp_path, "<config/>"))
    assert config == AppConfig()


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        parse_app_config(str(tmp_path / "absent.xml"))


@pytest.mark.parametrize(
    "body",
    [
        "<config><news-url>https://news.test/static.json</news-url></config>",
        "<config><request-timeout>soon</request-timeout></config>",
        "<config><request-timeout>-1</request-timeout></config>",
        "<config><images><max-width>0</max-width></images></config>",
        "<config>",
    ],
)
def test_invalid_values_raise_value_error(tmp_path, body):
    with pytest.raises(ValueError):
        parse_app_config(_write(tmp_path, body))
