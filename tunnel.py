import logging
from typing import Optional

import ngrok

from config import Settings
from errors import TunnelError

logger = logging.getLogger(__name__)


class Tunnel:
    """ngrok tunnel exposing the local server so Daraja can reach /callback."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.url: Optional[str] = None

    @property
    def callback_url(self) -> Optional[str]:
        return f"{self.url}/callback" if self.url else None

    def open(self) -> str:
        options = {"authtoken": self.settings.ngrok_authtoken}
        if self.settings.ngrok_domain:
            options["domain"] = self.settings.ngrok_domain
        try:
            listener = ngrok.forward(self.settings.port, **options)
        except Exception as e:
            raise TunnelError(f"Error creating ngrok tunnel: {e}") from e

        self.url = listener.url()
        logger.info(f"ngrok tunnel created at: {self.url}")
        logger.info(f"Update your M-Pesa callback URL with: {self.callback_url}")
        return self.url

    def close(self) -> None:
        logger.info("Shutting down ngrok tunnel...")
        ngrok.kill()
        self.url = None
