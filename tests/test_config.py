import pytest

from config import Settings

ENV = {
    "MPESA_CONSUMER_KEY": "key",
    "MPESA_CONSUMER_SECRET": "secret",
    "MPESA_SHORTCODE": "174379",
    "MPESA_PASSKEY": "passkey",
    "MPESA_CALLBACK_URL": "https://example.ngrok.io/callback",
    "NGROK_AUTHTOKEN": "ngrok-token",
}

OPTIONAL = [
    "MPESA_ENVIRONMENT", "MPESA_TIMEZONE", "MPESA_ACCOUNT_REFERENCE", "MPESA_TRANSACTION_DESC",
    "PORT", "HTTP_TIMEOUT", "LOG_LEVEL", "TUNNEL_ENABLED", "NGROK_DOMAIN",
]


@pytest.fixture
def env(monkeypatch):
    for name in OPTIONAL:
        monkeypatch.delenv(name, raising=False)
    for name, value in ENV.items():
        monkeypatch.setenv(name, value)
    return monkeypatch


@pytest.fixture
def no_dotenv(tmp_path):
    return str(tmp_path / ".env")


def test_from_env_defaults(env, no_dotenv):
    settings = Settings.from_env(no_dotenv)

    assert settings.consumer_key == "key"
    assert settings.shortcode == "174379"
    assert settings.port == 3000
    assert settings.http_timeout == 30
    assert settings.environment == "sandbox"
    assert settings.base_url == "https://sandbox.safaricom.co.ke"
    assert settings.timezone == "Africa/Nairobi"
    assert settings.tunnel_enabled is True
    assert settings.ngrok_authtoken == "ngrok-token"
    assert settings.ngrok_domain is None


def test_from_env_overrides(env, no_dotenv):
    env.setenv("PORT", "8080")
    env.setenv("MPESA_ENVIRONMENT", "production")
    env.setenv("NGROK_DOMAIN", "pay.ngrok.app")
    env.setenv("LOG_LEVEL", "debug")

    settings = Settings.from_env(no_dotenv)

    assert settings.port == 8080
    assert settings.base_url == "https://api.safaricom.co.ke"
    assert settings.ngrok_domain == "pay.ngrok.app"
    assert settings.log_level == "DEBUG"


@pytest.mark.parametrize("name", sorted(ENV.keys() - {"NGROK_AUTHTOKEN"}))
def test_from_env_missing_required(env, no_dotenv, name):
    env.delenv(name)
    with pytest.raises(ValueError, match=name):
        Settings.from_env(no_dotenv)


def test_from_env_invalid_environment(env, no_dotenv):
    env.setenv("MPESA_ENVIRONMENT", "staging")
    with pytest.raises(ValueError, match="MPESA_ENVIRONMENT"):
        Settings.from_env(no_dotenv)


def test_from_env_invalid_timezone_fails_at_startup(env, no_dotenv):
    env.setenv("MPESA_TIMEZONE", "Mars/Olympus_Mons")
    with pytest.raises(ValueError, match="Unknown timezone: Mars/Olympus_Mons"):
        Settings.from_env(no_dotenv)


def test_from_env_custom_timezone(env, no_dotenv):
    env.setenv("MPESA_TIMEZONE", "UTC")
    assert Settings.from_env(no_dotenv).timezone == "UTC"


def test_ngrok_token_required_only_with_tunnel(env, no_dotenv):
    env.delenv("NGROK_AUTHTOKEN")
    with pytest.raises(ValueError, match="NGROK_AUTHTOKEN"):
        Settings.from_env(no_dotenv)

    env.setenv("TUNNEL_ENABLED", "false")
    assert Settings.from_env(no_dotenv).tunnel_enabled is False


def test_from_env_reads_dotenv_file(env, tmp_path):
    env.delenv("MPESA_PASSKEY")
    dotenv_file = tmp_path / ".env"
    dotenv_file.write_text("MPESA_PASSKEY=from-file\n")

    assert Settings.from_env(str(dotenv_file)).passkey == "from-file"
