import contextlib
import logging
from typing import Any, Optional, Union

from . import envelope as env
from .envelope import Envelope
from .errors import EnvelopeError
from .registry import ROLE_DISPLAY, Connection, ConnectionRegistry

logger = logging.getLogger(__name__)


class BroadcastRelay:
    """Fans client messages out to every other open connection.

    Holds no history: late joiners see only what is sent after they connect.
    """

    def __init__(self, registry: ConnectionRegistry):
        self.registry = registry

    def open(self, socket: Any) -> Connection:
        conn = self.registry.add(socket)
        logger.info("client connected (%d live)", len(self.registry))
        return conn

    def close(self, conn: Connection) -> None:
        self.registry.remove(conn)
        logger.info("client disconnected (%d live)", len(self.registry))

    async def handle_message(self, conn: Connection, raw: Union[str, bytes]) -> int:
        """Dispatch one inbound message. Returns the number of peers delivered to."""
        if not conn.open:
            logger.debug("ignoring message from dropped %r", conn)
            return 0
        try:
            e = env.parse_envelope(raw)
        except EnvelopeError as exc:
            logger.warning("dropping message: %s", exc)
            return 0

        if e.type == env.PING:
            await self._send(conn, env.make_envelope(env.PONG).to_json())
            return 0

        if e.type == env.CUSTOMER_DISPLAY_CONNECTED:
            conn.role = ROLE_DISPLAY
            logger.info("customer display registered")
            return 0

        if e.type == env.REGISTER_MACHINE:
            machine_id = e.get("machineId")
            if isinstance(machine_id, str) and machine_id:
                conn.machine_id = machine_id
                logger.info("machine registered: %s", machine_id)
            else:
                logger.warning("register_machine without machineId")
            return 0

        if e.type in env.FANOUT_TAGS:
            machine_id = e.get("machineId") if e.type == env.POPUP_CLOSE else None
            return await self.fan_out(e, exclude=conn, machine_id=machine_id)

        # pong and anything else the relay has no action for
        logger.debug("ignoring %s from client", e.type)
        return 0

    async def fan_out(
        self,
        e: Envelope,
        exclude: Optional[Connection] = None,
        machine_id: Optional[str] = None,
    ) -> int:
        text = e.to_json()
        delivered = 0
        for peer in self.registry:
            if peer is exclude or not peer.open:
                continue
            if machine_id and peer.machine_id != machine_id:
                continue
            if await self._send(peer, text):
                delivered += 1
        return delivered

    async def broadcast_popup_close(
        self,
        success: bool,
        transaction_uuid: Optional[str] = None,
        popup_id: Optional[str] = None,
        machine_id: Optional[str] = None,
    ) -> int:
        fields = {"success": success}
        if transaction_uuid:
            fields["transactionUuid"] = transaction_uuid
        if popup_id:
            fields["popupId"] = popup_id
        if machine_id:
            fields["machineId"] = machine_id
        n = await self.fan_out(env.make_envelope(env.POPUP_CLOSE, **fields), machine_id=machine_id)
        logger.info("broadcast popup close success=%s txn=%s to %d", success, transaction_uuid, n)
        return n

    async def broadcast_payment_success(self, transaction_uuid: str) -> int:
        n = await self.fan_out(
            env.make_envelope(env.PAYMENT_SUCCESS, transactionUuid=transaction_uuid)
        )
        logger.info("broadcast payment success txn=%s to %d", transaction_uuid, n)
        return n

    async def _send(self, conn: Connection, text: str) -> bool:
        try:
            await conn.send_text(text)
        except Exception:
            logger.warning("send to %r failed, dropping it", conn, exc_info=True)
            self.registry.remove(conn)
            # close so the peer's own reconnect loop takes over
            with contextlib.suppress(Exception):
                await conn.close()
            return False
        return True
