from typing import Any, Dict, Iterator, List, Optional
from uuid import uuid4

ROLE_DISPLAY = "display"


class Connection:
    """One open socket as the relay sees it.

    ``socket`` only needs awaitable ``send_text(str)`` and ``close()``; FastAPI's WebSocket
    satisfies that, and tests pass fakes.
    """

    def __init__(self, socket: Any):
        self.id = uuid4().hex
        self.socket = socket
        self.role: Optional[str] = None
        self.machine_id: Optional[str] = None
        self.open = True

    @property
    def is_display(self) -> bool:
        return self.role == ROLE_DISPLAY

    async def send_text(self, text: str) -> None:
        await self.socket.send_text(text)

    async def close(self) -> None:
        await self.socket.close()

    def __repr__(self) -> str:
        return f"Connection({self.id[:8]}, role={self.role}, machine={self.machine_id})"


class ConnectionRegistry:
    """Live set of open connections. One per server process."""

    def __init__(self) -> None:
        self._conns: Dict[str, Connection] = {}

    def add(self, socket: Any) -> Connection:
        conn = Connection(socket)
        self._conns[conn.id] = conn
        return conn

    def remove(self, conn: Connection) -> None:
        conn.open = False
        if self._conns.get(conn.id) is conn:
            del self._conns[conn.id]

    def displays(self) -> List[Connection]:
        return [c for c in self._conns.values() if c.is_display]

    def __iter__(self) -> Iterator[Connection]:
        # snapshot; fan-out removes failing peers mid-iteration
        return iter(list(self._conns.values()))

    def __len__(self) -> int:
        return len(self._conns)

    def __contains__(self, conn: object) -> bool:
        return isinstance(conn, Connection) and self._conns.get(conn.id) is conn
