import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import Depends, FastAPI, Form, Request
from fastapi.responses import FileResponse, HTMLResponse, PlainTextResponse
from starlette.concurrency import run_in_threadpool

from config import Settings
from errors import GatewayError, TunnelError, ValidationError
from gateway import GatewayClient
from models import CallbackAck, PaymentRequest
from pages import render_error, render_success
from tunnel import Tunnel

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

INDEX_PATH = Path(__file__).resolve().parent / "index.html"


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    tunnel: Optional[Tunnel] = app.state.tunnel
    logger.info(f"Starting server on port {settings.port}")

    if tunnel is not None:
        try:
            await run_in_threadpool(tunnel.open)
        except TunnelError as e:
            # Without a public URL Daraja cannot deliver callbacks; abort startup.
            logger.error(str(e))
            raise

    yield

    if tunnel is not None:
        await run_in_threadpool(tunnel.close)
    logger.info("Application is shutting down...")


def get_gateway(request: Request) -> GatewayClient:
    return request.app.state.gateway


def create_app(
    settings: Optional[Settings] = None,
    gateway: Optional[GatewayClient] = None,
    tunnel: Optional[Tunnel] = None,
) -> FastAPI:
    settings = settings or Settings.from_env()
    if tunnel is None and settings.tunnel_enabled:
        tunnel = Tunnel(settings)

    app = FastAPI(
        title="M-Pesa STK Push Form",
        description="Web form that sends M-Pesa STK push requests through Daraja",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.gateway = gateway or GatewayClient(settings)
    app.state.tunnel = tunnel

    # Exception handlers
    @app.exception_handler(ValidationError)
    async def validation_exception_handler(request: Request, exc: ValidationError):
        return PlainTextResponse(str(exc), status_code=400)

    @app.exception_handler(GatewayError)
    async def gateway_exception_handler(request: Request, exc: GatewayError):
        # Provider rejections are shown on a normal page, not as an HTTP error.
        return HTMLResponse(render_error(exc.message), status_code=200)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return HTMLResponse(
            render_error("An unexpected error occurred", title="Internal Server Error"),
            status_code=500,
        )

    # Routes
    @app.get("/")
    async def index():
        """Serve the payment form"""
        return FileResponse(INDEX_PATH, media_type="text/html")

    @app.post("/pay", response_class=HTMLResponse)
    async def pay(
        phone: Optional[str] = Form(None),
        amount: Optional[str] = Form(None),
        gateway: GatewayClient = Depends(get_gateway),
    ):
        """Send an STK push for the submitted phone number and amount"""
        if not phone or not amount:
            raise ValidationError("Phone number and amount are required")

        payment = PaymentRequest(phone=phone, amount=amount)
        response = await run_in_threadpool(gateway.initiate_payment, payment.phone, payment.amount)
        return HTMLResponse(render_success(response.get("CustomerMessage", "")))

    @app.post("/callback", response_model=CallbackAck)
    async def callback(request: Request):
        """Acknowledge a Daraja result notification"""
        body = await request.body()
        logger.info(f"Callback received: {body.decode('utf-8', errors='replace')}")
        return CallbackAck()

    return app


def run():
    settings = Settings.from_env()
    logging.getLogger().setLevel(settings.log_level)

    import uvicorn
    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    run()
