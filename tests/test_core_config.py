import pytest

from promptpay.core.config import get_settings


def test_loads_environment_values(monkeypatch) -> None:
    monkeypatch.setenv("ENV", "development")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setenv("CHECKOUT_AMOUNT", "50")
    monkeypatch.setenv("CHECKOUT_REQUIRED_CUSTOMER_FIELDS", "email, name")
    monkeypatch.setenv("FULFILLMENT_ALLOW_REGENERATION", "true")
    get_settings.cache_clear()

    settings = get_settings()
    assert settings.openai_api_key == "sk-test"
    assert settings.checkout_amount == 50
    assert settings.required_customer_fields == ["email", "name"]
    assert settings.fulfillment_allow_regeneration is True
    assert settings.max_prompt_length == 400


def test_missing_credential_does_not_fail_startup(monkeypatch) -> None:
    monkeypatch.setenv("OPENAI_API_KEY", "")
    get_settings.cache_clear()

    assert get_settings().openai_api_key == ""


def test_rejects_unknown_checkout_provider(monkeypatch) -> None:
    monkeypatch.setenv("CHECKOUT_PROVIDER", "paypal")
    get_settings.cache_clear()

    with pytest.raises(ValueError, match="CHECKOUT_PROVIDER"):
        get_settings()


def test_http_checkout_requires_base_url(monkeypatch) -> None:
    monkeypatch.setenv("CHECKOUT_PROVIDER", "http")
    monkeypatch.setenv("CHECKOUT_API_BASE_URL", "")
    get_settings.cache_clear()

    with pytest.raises(ValueError, match="CHECKOUT_API_BASE_URL"):
        get_settings()


@pytest.mark.parametrize(
    "name, value",
    [
        ("CHECKOUT_AMOUNT", "0"),
        ("PAYMENT_POLL_INTERVAL_SECONDS", "0"),
        ("PAYMENT_POLL_MAX_CHECKS", "0"),
        ("FULFILLMENT_MAX_SESSIONS", "0"),
        ("MAX_PROMPT_LENGTH", "0"),
        ("IMAGE_SIZE", "999x999"),
        ("MOCK_CHECKOUT_STATUS", "refunded"),
    ],
)
def test_rejects_invalid_values(monkeypatch, name, value) -> None:
    monkeypatch.setenv(name, value)
    get_settings.cache_clear()

    with pytest.raises(ValueError, match=name):
        get_settings()


def test_requires_public_base_url_in_production(monkeypatch) -> None:
    monkeypatch.setenv("ENV", "production")
    monkeypatch.setenv("APP_PUBLIC_BASE_URL", "")
    get_settings.cache_clear()

    with pytest.raises(ValueError, match="APP_PUBLIC_BASE_URL"):
        get_settings()
