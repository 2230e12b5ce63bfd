import json
from unittest.mock import Mock

import pytest
import requests

from config import Settings


def mock_response(json_data=None, status_code=200):
    """Return a mock requests.Response whose .json() returns json_data."""
    resp = Mock()
    resp.status_code = status_code
    if json_data is None:
        resp.json.side_effect = ValueError("No JSON object could be decoded")
        resp.text = ""
    else:
        resp.json.return_value = json_data
        resp.text = json.dumps(json_data)
    if status_code >= 400:
        resp.raise_for_status.side_effect = requests.exceptions.HTTPError(
            f"{status_code} Client Error", response=resp
        )
    return resp


@pytest.fixture
def settings():
    return Settings(
        consumer_key="test_consumer_key",
        consumer_secret="test_consumer_secret",
        shortcode="174379",
        passkey="test_passkey",
        callback_url="https://example.ngrok.io/callback",
        tunnel_enabled=False,
    )
