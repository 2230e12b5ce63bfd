from typing import Any, Optional


class PaymentError(Exception):
    """Base class for errors raised while handling a payment."""


class ValidationError(PaymentError):
    """Required form fields are missing."""


class GatewayError(PaymentError):
    """The payment gateway rejected a call or could not be reached.

    ``message`` is what the user sees; ``payload`` is the provider's response
    body when one was returned.
    """

    default_message = "Payment gateway request failed"

    def __init__(self, message: Optional[str] = None, payload: Any = None):
        self.message = message or self.default_message
        self.payload = payload
        super().__init__(self.message)


class AuthError(GatewayError):
    default_message = "Failed to retrieve access token"


class SubmissionError(GatewayError):
    default_message = "Failed to send payment request"


class TunnelError(Exception):
    """The public tunnel could not be established."""
