import asyncio
import logging
from typing import Any, Callable, Optional, Tuple

import websockets

from ..config import Settings, settings as default_settings
from ..envelope import Envelope
from ..logs import setup_json_logging
from .cashier import CashierSession
from .display import DisplaySession
from .scheduler import LoopScheduler, Scheduler
from .transport import RelayClient

logger = logging.getLogger(__name__)


def display_client(
    settings: Optional[Settings] = None,
    scheduler: Optional[Scheduler] = None,
    connect: Callable[[str], Any] = websockets.connect,
) -> Tuple[RelayClient, DisplaySession]:
    settings = settings or default_settings
    session = DisplaySession(
        scheduler or LoopScheduler(),
        qr_timeout=settings.qr_timeout,
        completed_clear_delay=settings.completed_clear_delay,
    )
    client = RelayClient(
        settings.relay_url,
        on_message=session.handle,
        on_open=session.on_connect,
        on_close=session.on_disconnect,
        reconnect_delay=settings.reconnect_delay,
        max_attempts=settings.max_attempts,
        connect=connect,
    )
    return client, session


def cashier_client(
    settings: Optional[Settings] = None,
    connect: Callable[[str], Any] = websockets.connect,
) -> Tuple[RelayClient, CashierSession]:
    settings = settings or default_settings
    client = RelayClient(
        settings.relay_url,
        on_message=lambda e: None,
        reconnect_delay=settings.reconnect_delay,
        max_attempts=settings.max_attempts,
        connect=connect,
    )
    session = CashierSession(client, tax_rate=settings.tax_rate)
    client.on_message = session.handle_envelope
    # a fresh socket gets the current cart; nothing sent before the drop is replayed
    client.on_open = lambda _client: session.push_cart()
    return client, session


async def watch_display(settings: Optional[Settings] = None) -> None:
    """Headless display: logs every state change until cancelled."""
    client, session = display_client(settings)
    handle = session.handle

    def logged(e: Envelope) -> None:
        before = session.state
        handle(e)
        if session.state is not before:
            logger.info("display %s -> %s", before.value, session.state.value)

    client.on_message = logged
    try:
        async with client:
            await asyncio.Event().wait()
    finally:
        session.close()


def main() -> None:
    setup_json_logging(default_settings.log_level)
    try:
        asyncio.run(watch_display())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
