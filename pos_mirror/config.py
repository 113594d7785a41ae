import os
from decimal import Decimal, InvalidOperation
from typing import List, Optional


class Settings:
    def _split_csv(self, raw: str, *, default: List[str]) -> List[str]:
        parts = [p.strip() for p in (raw or "").split(",")]
        return [p for p in parts if p] or default

    def _float(self, name: str, default: str) -> float:
        raw = os.getenv(name, default).strip() or default
        try:
            value = float(raw)
        except ValueError:
            raise ValueError(f"{name} must be a number, got {raw!r}")
        if value < 0:
            raise ValueError(f"{name} must be >= 0")
        return value

    def _int(self, name: str, default: str) -> int:
        raw = os.getenv(name, default).strip() or default
        try:
            value = int(raw)
        except ValueError:
            raise ValueError(f"{name} must be an integer, got {raw!r}")
        if value < 0:
            raise ValueError(f"{name} must be >= 0")
        return value

    def __init__(self) -> None:
        self.env = os.getenv("APP_ENV", "local")
        self.log_level = os.getenv("LOG_LEVEL", "INFO")
        self.host = os.getenv("HOST", "0.0.0.0")
        self.port = self._int("PORT", "5000")
        self.ws_path = os.getenv("WS_PATH", "/ws").strip() or "/ws"
        self.relay_url = os.getenv("RELAY_URL", "ws://localhost:5000/ws").strip()
        # Comma-separated list of allowed CORS origins for the cashier/display pages
        # when they are served from a separate frontend dev server.
        self.cors_origins = self._split_csv(
            os.getenv("CORS_ORIGINS", "").strip(),
            default=["http://localhost:3000", "http://127.0.0.1:3000"],
        )

        self.reconnect_delay = self._float("RECONNECT_DELAY_SECONDS", "3")
        # 0 = retry forever
        self.reconnect_max_attempts = self._int("RECONNECT_MAX_ATTEMPTS", "0")
        self.qr_timeout = self._float("QR_DISPLAY_TIMEOUT_SECONDS", "300")
        self.completed_clear_delay = self._float("PAYMENT_COMPLETED_CLEAR_SECONDS", "3")

        raw_tax = os.getenv("TAX_RATE", "0.0825").strip() or "0.0825"
        try:
            self.tax_rate = Decimal(raw_tax)
        except InvalidOperation:
            raise ValueError(f"TAX_RATE must be a decimal, got {raw_tax!r}")

    @property
    def max_attempts(self) -> Optional[int]:
        return self.reconnect_max_attempts or None


settings = Settings()
