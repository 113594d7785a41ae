import asyncio
import contextlib
import logging
from typing import Any, Callable, Optional

import websockets

from ..envelope import Envelope, parse_envelope
from ..errors import EnvelopeError

logger = logging.getLogger(__name__)

MessageHandler = Callable[[Envelope], None]


class RelayClient:
    """Persistent socket to the relay with fixed-delay reconnect.

    Sends are fire-and-forget: ``send`` queues the text for the live socket
    and never waits for delivery. Nothing queued survives a disconnect.
    """

    def __init__(
        self,
        url: str,
        on_message: MessageHandler,
        on_open: Optional[Callable[["RelayClient"], None]] = None,
        on_close: Optional[Callable[[], None]] = None,
        reconnect_delay: float = 3.0,
        max_attempts: Optional[int] = None,
        connect: Callable[[str], Any] = websockets.connect,
        sleep: Callable[[float], Any] = asyncio.sleep,
    ):
        self.url = url
        self.on_message = on_message
        self.on_open = on_open
        self.on_close = on_close
        self.reconnect_delay = reconnect_delay
        self.max_attempts = max_attempts
        self._connect = connect
        self._sleep = sleep
        self._ws: Any = None
        self._outbox: Optional[asyncio.Queue] = None
        self._task: Optional[asyncio.Task] = None
        self._closing = False

    @property
    def connected(self) -> bool:
        return self._ws is not None

    def send(self, envelope: Envelope) -> bool:
        if self._ws is None or self._outbox is None:
            logger.warning("relay not connected, dropping %s", envelope.type)
            return False
        self._outbox.put_nowait(envelope.to_json())
        return True

    def start(self) -> asyncio.Task:
        if self._task is None or self._task.done():
            self._closing = False
            self._task = asyncio.ensure_future(self.run())
        return self._task

    async def run(self) -> None:
        attempts = 0
        while not self._closing:
            try:
                async with self._connect(self.url) as ws:
                    attempts = 0
                    await self._serve(ws)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.info("relay connection to %s failed: %s", self.url, e)

            if self._closing:
                break
            attempts += 1
            if self.max_attempts and attempts >= self.max_attempts:
                logger.warning("giving up on %s after %d attempts", self.url, attempts)
                break
            logger.info("reconnecting to %s in %.1fs", self.url, self.reconnect_delay)
            await self._sleep(self.reconnect_delay)

    async def _serve(self, ws: Any) -> None:
        self._ws = ws
        self._outbox = asyncio.Queue()
        writer = asyncio.ensure_future(self._write(ws, self._outbox))
        logger.info("connected to relay %s", self.url)
        try:
            if self.on_open:
                self.on_open(self)
            async for raw in ws:
                self._dispatch(raw)
        finally:
            self._ws = None
            self._outbox = None
            writer.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await writer
            logger.info("disconnected from relay %s", self.url)
            if self.on_close:
                self.on_close()

    async def _write(self, ws: Any, outbox: asyncio.Queue) -> None:
        while True:
            text = await outbox.get()
            try:
                await ws.send(text)
            except Exception as e:
                # the reader side notices the closed socket and reconnects
                logger.warning("send failed: %s", e)
                return

    def _dispatch(self, raw: Any) -> None:
        try:
            envelope = parse_envelope(raw)
        except EnvelopeError as e:
            logger.warning("dropping message from relay: %s", e)
            return
        try:
            self.on_message(envelope)
        except Exception:
            logger.exception("handler failed for %s", envelope.type)

    async def close(self) -> None:
        self._closing = True
        task, self._task = self._task, None
        ws = self._ws
        if ws is not None:
            with contextlib.suppress(Exception):
                await ws.close()
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

    async def __aenter__(self) -> "RelayClient":
        self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()
