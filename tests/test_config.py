import pytest
from pydantic import ValidationError

from licence_admin.core.config import Settings
from licence_admin.core.errors import ConfigurationError
from licence_admin.services.http_client import ApiClient


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("API_BASE_URL", " https://licences.example.gov/api ")
    monkeypatch.setenv("HTTP_RETRIES", "5")
    monkeypatch.setenv("HTTP_BACKOFF_MS", "250")
    s = Settings(_env_file=None)
    assert s.api_base_url == "https://licences.example.gov/api"
    assert (s.http_retries, s.http_backoff_ms) == (5, 250)


def test_invalid_retries(monkeypatch):
    monkeypatch.setenv("HTTP_RETRIES", "0")
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


async def test_client_from_settings():
    s = Settings(api_base_url="https://licences.example.gov/api/", http_retries=4, http_backoff_ms=10)
    async with ApiClient.from_settings(s) as client:
        assert client.base_url == "https://licences.example.gov/api"
        assert client.retries == 4
        assert client.backoff_ms == 10


def test_client_requires_base_url(monkeypatch):
    monkeypatch.delenv("API_BASE_URL", raising=False)
    with pytest.raises(ConfigurationError):
        ApiClient.from_settings(Settings(_env_file=None))


async def test_independent_clients_coexist():
    async with ApiClient("http://one.test") as a, ApiClient("http://two.test", retries=1) as b:
        assert str(a.build_url("/x")) == "http://one.test/x"
        assert str(b.build_url("/x")) == "http://two.test/x"
        assert (a.retries, b.retries) == (3, 1)
