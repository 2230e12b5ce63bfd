import base64
import logging
from datetime import datetime
from typing import Any, Optional, Union
from zoneinfo import ZoneInfo

import requests

from config import Settings
from errors import AuthError, SubmissionError
from models import StkPushRequest

logger = logging.getLogger(__name__)

TOKEN_PATH = "/oauth/v1/generate?grant_type=client_credentials"
STK_PUSH_PATH = "/mpesa/stkpush/v1/processrequest"


def generate_timestamp(timezone: str, now: Optional[datetime] = None) -> str:
    """Return ``now`` (default: current time) as YYYYMMDDHHmmss in ``timezone``."""
    tz = ZoneInfo(timezone)
    now = now.astimezone(tz) if now else datetime.now(tz)
    return now.strftime("%Y%m%d%H%M%S")


def generate_password(shortcode: str, passkey: str, timestamp: str) -> str:
    return base64.b64encode(f"{shortcode}{passkey}{timestamp}".encode()).decode()


def _coerce_amount(amount: Union[int, str]) -> Union[int, str]:
    if isinstance(amount, str) and amount.isdecimal():
        return int(amount)
    return amount


def _response_payload(response: Optional[requests.Response]) -> Any:
    if response is None:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text or None


def _raise_gateway_error(error_cls: type, exc: requests.exceptions.RequestException) -> None:
    payload = _response_payload(exc.response)
    message = None
    if isinstance(payload, dict):
        message = payload.get("errorMessage")
    raise error_cls(message or str(exc) or None, payload=payload) from exc


class GatewayClient:
    """Daraja client: one fresh OAuth token, then one STK push, per payment."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def acquire_token(self) -> str:
        try:
            response = requests.get(
                f"{self.settings.base_url}{TOKEN_PATH}",
                auth=(self.settings.consumer_key, self.settings.consumer_secret),
                timeout=self.settings.http_timeout,
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            logger.error(f"Error getting access token: {_response_payload(e.response) or e}")
            _raise_gateway_error(AuthError, e)

        payload = _response_payload(response)
        token = payload.get("access_token") if isinstance(payload, dict) else None
        if not token:
            logger.error(f"Token response without access_token: {payload}")
            raise AuthError(payload=payload)
        return token

    def build_submission(self, phone: str, amount: Union[int, str], timestamp: Optional[str] = None) -> StkPushRequest:
        settings = self.settings
        timestamp = timestamp or generate_timestamp(settings.timezone)
        return StkPushRequest(
            business_short_code=settings.shortcode,
            password=generate_password(settings.shortcode, settings.passkey, timestamp),
            timestamp=timestamp,
            amount=_coerce_amount(amount),
            party_a=phone,
            party_b=settings.shortcode,
            phone_number=phone,
            callback_url=settings.callback_url,
            account_reference=settings.account_reference,
            transaction_desc=settings.transaction_desc,
        )

    def submit_push_payment(self, phone: str, amount: Union[int, str], token: str) -> dict:
        submission = self.build_submission(phone, amount)
        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }
        try:
            response = requests.post(
                f"{self.settings.base_url}{STK_PUSH_PATH}",
                json=submission.model_dump(by_alias=True),
                headers=headers,
                timeout=self.settings.http_timeout,
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            logger.error(f"STK Push Error: {_response_payload(e.response) or e}")
            _raise_gateway_error(SubmissionError, e)

        payload = _response_payload(response)
        logger.info(f"STK Push Response: {payload}")
        return payload if isinstance(payload, dict) else {}

    def initiate_payment(self, phone: str, amount: Union[int, str]) -> dict:
        token = self.acquire_token()
        return self.submit_push_payment(phone, amount, token)
