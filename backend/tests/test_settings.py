from decimal import Decimal

from settings import DEFAULT_PROXY_PREFIXES, Settings, _as_bool, _as_decimal, _as_list


def test_as_helpers():
    assert _as_bool("yes") is True
    assert _as_bool(None, True) is True
    assert _as_decimal("22.50") == Decimal("22.50")
    assert _as_decimal("abc") is None
    assert _as_list(" https://a/ , ,https://b/ ", ()) == ("https://a/", "https://b/")
    assert _as_list("", DEFAULT_PROXY_PREFIXES) == DEFAULT_PROXY_PREFIXES


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("MEDIA_PUBLIC_BASE_URL", "https://cdn.example.test/media/")
    monkeypatch.setenv("DEFAULT_HOURLY_RATE", "20")
    monkeypatch.delenv("MAPBOX_TOKEN", raising=False)

    s = Settings()

    assert s.MEDIA_PUBLIC_BASE_URL == "https://cdn.example.test/media"
    assert s.DEFAULT_HOURLY_RATE == Decimal("20")
    assert s.MAPBOX_TOKEN is None
    assert s.MAPBOX_STYLE == "mapbox/streets-v12"
