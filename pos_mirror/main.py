from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from .config import Settings, settings as default_settings
from .logs import setup_json_logging
from .registry import ConnectionRegistry
from .relay import BroadcastRelay

from .routes.pages import router as pages_router
from .routes.payment_api import router as payment_router

from .websockets.relay_ws import make_router as make_relay_router

BASE_DIR = Path(__file__).resolve().parent.parent
STATIC_DIR = BASE_DIR / "static"


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings
    setup_json_logging(settings.log_level)

    app = FastAPI(title="POS Cart Mirror (Cashier to Customer Display Relay)")

    # One registry per process, owned by the relay
    app.state.settings = settings
    app.state.registry = ConnectionRegistry()
    app.state.relay = BroadcastRelay(app.state.registry)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials="*" not in settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Static
    STATIC_DIR.mkdir(parents=True, exist_ok=True)
    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

    # Routers
    app.include_router(pages_router)
    app.include_router(payment_router)

    # WebSocket routers
    app.include_router(make_relay_router(settings.ws_path))

    @app.get("/health")
    def health(request: Request):
        registry: ConnectionRegistry = request.app.state.registry
        return {
            "status": "ok",
            "env": settings.env,
            "connections": len(registry),
            "displays": len(registry.displays()),
        }

    return app


app = create_app()
