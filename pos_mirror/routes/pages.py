from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse

from ..config import Settings
from ..templates.home import HOME_HTML
from ..templates.cashier import CASHIER_HTML
from ..templates.customer_display import CUSTOMER_DISPLAY_HTML

router = APIRouter()


def _ms(seconds: float) -> str:
    return str(int(seconds * 1000))


def render(template: str, settings: Settings) -> str:
    return (
        template
        .replace("__WS_PATH__", settings.ws_path)
        .replace("__RECONNECT_MS__", _ms(settings.reconnect_delay))
        .replace("__QR_TIMEOUT_MS__", _ms(settings.qr_timeout))
        .replace("__COMPLETED_CLEAR_MS__", _ms(settings.completed_clear_delay))
        .replace("__TAX_RATE__", str(settings.tax_rate))
    )


@router.get("/", response_class=HTMLResponse)
def home() -> HTMLResponse:
    return HTMLResponse(HOME_HTML)


@router.get("/cashier", response_class=HTMLResponse)
def cashier_page(request: Request) -> HTMLResponse:
    return HTMLResponse(render(CASHIER_HTML, request.app.state.settings))


@router.get("/customer-display", response_class=HTMLResponse)
def customer_display_page(request: Request) -> HTMLResponse:
    return HTMLResponse(render(CUSTOMER_DISPLAY_HTML, request.app.state.settings))
