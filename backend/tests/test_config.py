import pytest

from news_api.config import Config, settings


def test_wildcard_cors_from_environment():
    assert settings.CORS_ORIGINS == ["*"]


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("*", ["*"]),
        ("http://a.test, http://b.test", ["http://a.test", "http://b.test"]),
        ('["http://a.test", "http://b.test"]', ["http://a.test", "http://b.test"]),
    ],
)
def test_cors_origins_accepts_plain_comma_and_json_lists(monkeypatch, raw, expected):
    monkeypatch.setenv("CORS_ORIGINS", raw)

    assert Config(_env_file=None).CORS_ORIGINS == expected
