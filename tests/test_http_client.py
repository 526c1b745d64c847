from adapters.http_client import ACCESS_KEY_HEADER, build_async_client
from core.config import AppSettings


def test_client_sends_access_key_when_configured(settings):
    client = build_async_client(settings)
    assert client.headers[ACCESS_KEY_HEADER] == "secret-key"
    assert client.headers["User-Agent"] == settings.user_agent
    assert str(client.base_url).startswith("http://hydrus.test:45869")


def test_client_without_access_key():
    settings = AppSettings()
    client = build_async_client(settings)
    assert ACCESS_KEY_HEADER not in client.headers
    assert str(client.base_url).startswith("http://127.0.0.1:45869")


def test_extra_headers_override(settings):
    client = build_async_client(settings, extra_headers={"Accept": "image/*"})
    assert client.headers["Accept"] == "image/*"
