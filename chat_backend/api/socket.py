# chat_backend/api/socket.py
import uuid
from typing import Optional

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect, status

from chat_backend.domain.entities import LiveConnection
from chat_backend.domain.exceptions import AuthError, PersistenceError

router = APIRouter()


def bearer_credential(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, credential = authorization.partition(" ")
    if scheme.lower() != "bearer" or not credential:
        return None
    return credential.strip()


@router.websocket("/ws")
async def live_channel(websocket: WebSocket, token: Optional[str] = Query(None)):
    state = websocket.app.state
    logger = state.logger
    sessions = state.session_registry

    try:
        identity = sessions.authenticate(
            token or bearer_credential(websocket.headers.get("authorization"))
        )
    except AuthError as e:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason=e.message)
        return

    await websocket.accept()
    connection = LiveConnection(connection_id=uuid.uuid4().hex, identity=identity)
    state.connection_hub.add(connection.connection_id, websocket)

    try:
        try:
            await sessions.on_connect(identity.user_id, connection.connection_id)
            await state.room_membership.join_all_chats(
                connection.connection_id, identity.user_id
            )
        except PersistenceError:
            logger.exception(
                f"Could not set up live connection for user {identity.user_id}"
            )
            await websocket.close(code=status.WS_1011_INTERNAL_ERROR)
            return

        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(
                    message.get("code", status.WS_1000_NORMAL_CLOSURE)
                )
            if message.get("text") is None:
                await state.event_router.emit_error(connection, "Malformed event frame")
                continue
            await state.event_router.handle(connection, message["text"])
    except WebSocketDisconnect:
        pass
    finally:
        state.connection_hub.remove(connection.connection_id)
        try:
            await sessions.on_disconnect(identity.user_id, connection.connection_id)
        except PersistenceError:
            logger.exception(f"Could not record disconnect of user {identity.user_id}")
