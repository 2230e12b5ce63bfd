import os
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator


BASE_URLS = {
    "sandbox": "https://sandbox.safaricom.co.ke",
    "production": "https://api.safaricom.co.ke",
}

REQUIRED_ENV = {
    "consumer_key": "MPESA_CONSUMER_KEY",
    "consumer_secret": "MPESA_CONSUMER_SECRET",
    "shortcode": "MPESA_SHORTCODE",
    "passkey": "MPESA_PASSKEY",
    "callback_url": "MPESA_CALLBACK_URL",
}


def _as_bool(value: str) -> bool:
    return value.strip().lower() not in ("0", "false", "no", "off", "")


class Settings(BaseModel):
    """Runtime configuration, built once at startup and handed to the app."""

    # Daraja credentials
    consumer_key: str
    consumer_secret: str
    shortcode: str
    passkey: str
    callback_url: str
    environment: str = "sandbox"
    timezone: str = Field(default="Africa/Nairobi", description="Timezone used for the STK push timestamp")
    account_reference: str = "WebForm"
    transaction_desc: str = "Payment via Web Form"

    # Server
    port: int = 3000
    http_timeout: float = Field(default=30.0, gt=0, description="Seconds to wait on each gateway call")
    log_level: str = "INFO"

    # Tunnel
    tunnel_enabled: bool = True
    ngrok_authtoken: Optional[str] = None
    ngrok_domain: Optional[str] = None

    @field_validator("timezone")
    @classmethod
    def check_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown timezone: {value}")
        return value

    @property
    def base_url(self) -> str:
        return BASE_URLS[self.environment]

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "Settings":
        load_dotenv(env_file)

        missing = [name for name in REQUIRED_ENV.values() if not os.getenv(name)]
        if missing:
            raise ValueError(f"Missing required environment variables: {', '.join(missing)}")

        environment = os.getenv("MPESA_ENVIRONMENT", "sandbox")
        if environment not in BASE_URLS:
            raise ValueError("Invalid MPESA_ENVIRONMENT")

        tunnel_enabled = _as_bool(os.getenv("TUNNEL_ENABLED", "true"))
        if tunnel_enabled and not os.getenv("NGROK_AUTHTOKEN"):
            raise ValueError("NGROK_AUTHTOKEN is required when the tunnel is enabled")

        return cls(
            **{field: os.getenv(name) for field, name in REQUIRED_ENV.items()},
            environment=environment,
            timezone=os.getenv("MPESA_TIMEZONE", "Africa/Nairobi"),
            account_reference=os.getenv("MPESA_ACCOUNT_REFERENCE", "WebForm"),
            transaction_desc=os.getenv("MPESA_TRANSACTION_DESC", "Payment via Web Form"),
            port=int(os.getenv("PORT") or 3000),
            http_timeout=float(os.getenv("HTTP_TIMEOUT") or 30),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            tunnel_enabled=tunnel_enabled,
            ngrok_authtoken=os.getenv("NGROK_AUTHTOKEN") or None,
            ngrok_domain=os.getenv("NGROK_DOMAIN") or None,
        )
