import pytest
from pydantic import ValidationError

from akeneo_client.core.config import DEFAULT_USER_AGENT, ClientSettings, get_settings


def test_settings_read_prefixed_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("AKENEO_BASE_URL", "https://pim.example.test")
    monkeypatch.setenv("AKENEO_CLIENT_ID", "env-client")
    monkeypatch.setenv("AKENEO_PIM_VERSION", "5")
    monkeypatch.setenv("AKENEO_RATE_LIMIT", "3")
    get_settings.cache_clear()

    try:
        settings = get_settings()
        assert settings.base_url == "https://pim.example.test"
        assert settings.client_id == "env-client"
        assert settings.rate_limit == 3
        assert settings.version_string == "5.0"
        assert get_settings() is settings
    finally:
        get_settings.cache_clear()


def test_defaults() -> None:
    settings = ClientSettings(_env_file=None)

    assert settings.pim_version == 6
    assert settings.version_string == "6.0"
    assert settings.rate_limit == 5
    assert settings.rate_period_seconds == 1.0
    assert settings.retry_count == 2
    assert settings.user_agent == DEFAULT_USER_AGENT


@pytest.mark.parametrize(
    ("field", "value", "fragment"),
    [
        ("rate_limit", 0, "AKENEO_RATE_LIMIT"),
        ("rate_period_seconds", 0, "AKENEO_RATE_PERIOD_SECONDS"),
        ("retry_count", -1, "AKENEO_RETRY_COUNT"),
        ("retry_wait_seconds", 5.0, "AKENEO_RETRY_WAIT_SECONDS"),
        ("http_timeout_seconds", 0, "AKENEO_HTTP_TIMEOUT_SECONDS"),
    ],
)
def test_limit_validation(field: str, value: object, fragment: str) -> None:
    with pytest.raises(ValidationError) as exc_info:
        ClientSettings(**{field: value})

    assert fragment in str(exc_info.value)


def test_connection_problems_cover_url_credentials_and_version() -> None:
    settings = ClientSettings(base_url="ftp://pim", client_id="id", secret="s", username="u", password="", pim_version=8)

    problems = settings.connection_problems()

    assert problems == [
        "AKENEO_BASE_URL must be an absolute http(s) URL",
        "missing credentials: AKENEO_PASSWORD",
        "unsupported AKENEO_PIM_VERSION 8",
    ]
    assert settings.version_string == ""


def test_complete_settings_have_no_problems() -> None:
    settings = ClientSettings(
        base_url="http://localhost:8080",
        client_id="id",
        secret="s",
        username="u",
        password="p",
        pim_version=7,
    )

    assert settings.connection_problems() == []
