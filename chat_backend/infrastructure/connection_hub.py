# chat_backend/infrastructure/connection_hub.py
import asyncio
import logging
from collections import defaultdict
from typing import Any, Iterable, Protocol


class LiveTransport(Protocol):
    async def send_json(self, data: Any) -> None: ...


class ConnectionHub:
    """Transport registry: connection id -> socket, room -> connection ids.

    Delivery is at-most-once; a peer whose send fails is logged and skipped.
    """

    def __init__(self, logger: logging.Logger):
        self.logger = logger
        self.connections: dict[str, LiveTransport] = {}
        self.rooms: dict[str, set[str]] = defaultdict(set)

    def add(self, connection_id: str, transport: LiveTransport) -> None:
        self.connections[connection_id] = transport

    def remove(self, connection_id: str) -> None:
        self.connections.pop(connection_id, None)
        for room in list(self.rooms):
            self.rooms[room].discard(connection_id)
            if not self.rooms[room]:
                del self.rooms[room]

    def join(self, connection_id: str, room: str) -> None:
        self.rooms[room].add(connection_id)

    def leave(self, connection_id: str, room: str) -> None:
        members = self.rooms.get(room)
        if members is None:
            return
        members.discard(connection_id)
        if not members:
            del self.rooms[room]

    def members(self, room: str) -> set[str]:
        return set(self.rooms.get(room, ()))

    async def emit_to_connection(
        self, connection_id: str, event: str, data: dict[str, Any]
    ) -> None:
        await self._fan_out([connection_id], event, data)

    async def emit_to_room(
        self,
        room: str,
        event: str,
        data: dict[str, Any],
        skip: str | None = None,
    ) -> None:
        targets = [cid for cid in self.members(room) if cid != skip]
        await self._fan_out(targets, event, data)

    async def emit_all(self, event: str, data: dict[str, Any]) -> None:
        await self._fan_out(list(self.connections), event, data)

    async def _fan_out(
        self, connection_ids: Iterable[str], event: str, data: dict[str, Any]
    ) -> None:
        frame = {"event": event, "data": data}
        targets = [
            (cid, self.connections[cid])
            for cid in connection_ids
            if cid in self.connections
        ]
        if not targets:
            return
        results = await asyncio.gather(
            *(transport.send_json(frame) for _, transport in targets),
            return_exceptions=True,
        )
        for (cid, _), result in zip(targets, results):
            if isinstance(result, Exception):
                self.logger.warning(
                    f"Failed to deliver {event} to connection {cid}: {result!s}"
                )
