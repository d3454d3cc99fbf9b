"""
Group chat over a WebSocket.

Frames are JSON text in both directions: {"event": <name>, "data": <payload>}.

Client -> server: joinGroupChat(groupId), leaveGroupChat(groupId),
chatMessage({groupId, senderId, senderName, message}).
Server -> client: chatHistory([message]) to the joining caller,
groupChatMessage(message) to the room, chatError(text) to the caller.
"""
from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError as PayloadError
from config import open_session, CHAT_HISTORY_LIMIT
from repositories import GroupRepository, ChatMessageRepository
from utils.response_helpers import parse_uuid, chat_message_to_dict
from .hub import ChatHub, ChatConnection
from .schemas import ChatMessageIn, ChatMessageResponse
from typing import Any
import json
import logging

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Chat"])

chat_hub = ChatHub()

ANONYMOUS_ID = "anonymous"
ANONYMOUS_NAME = "Anonymous"


def serialize_message(chat_message) -> dict:
    return ChatMessageResponse.model_validate(chat_message_to_dict(chat_message)).model_dump(
        mode="json", by_alias=True
    )


async def join_group_chat(connection: ChatConnection, data: Any):
    group_uuid = parse_uuid(data)
    if group_uuid is None:
        await connection.emit("chatError", "Invalid group id.")
        return

    chat_hub.join(connection, str(group_uuid))

    try:
        async with open_session() as db:
            messages = await ChatMessageRepository(db).recent_for_group(group_uuid, CHAT_HISTORY_LIMIT)
            history = [serialize_message(m) for m in messages]
    except Exception as e:
        logger.error(f"Error fetching chat history: {str(e)}")
        await connection.emit("chatError", "Failed to load chat history.")
        return

    await connection.emit("chatHistory", history)


async def leave_group_chat(connection: ChatConnection, data: Any):
    group_uuid = parse_uuid(data)
    if group_uuid is None:
        await connection.emit("chatError", "Invalid group id.")
        return
    chat_hub.leave(connection, str(group_uuid))


async def send_chat_message(connection: ChatConnection, data: Any):
    try:
        incoming = ChatMessageIn.model_validate(data)
    except PayloadError:
        await connection.emit("chatError", "Failed to send message.")
        return

    group_uuid = parse_uuid(incoming.group_id)
    if group_uuid is None:
        await connection.emit("chatError", "Invalid group id.")
        return

    text = (incoming.message or "").strip()
    if not text:
        await connection.emit("chatError", "Message cannot be empty.")
        return

    # No identity verification: the client names itself
    sender_id = (incoming.sender_id or "").strip() or ANONYMOUS_ID
    sender_name = (incoming.sender_name or "").strip() or ANONYMOUS_NAME

    room = str(group_uuid)
    lock = chat_hub.room_lock(room)
    async with lock:
        payload = None
        try:
            async with open_session() as db:
                if await GroupRepository(db).find_by_id(group_uuid) is not None:
                    saved = await ChatMessageRepository(db).create(
                        group_id=group_uuid,
                        sender_id=sender_id,
                        sender_name=sender_name,
                        message=text
                    )
                    await db.commit()
                    payload = serialize_message(saved)
        except Exception as e:
            logger.error(f"Error saving chat message: {str(e)}")
            await connection.emit("chatError", "Failed to send message.")
            return

        if payload is None:
            await connection.emit("chatError", "Group not found.")
            return

        await chat_hub.broadcast(room, "groupChatMessage", payload)


EVENT_HANDLERS = {
    "joinGroupChat": join_group_chat,
    "leaveGroupChat": leave_group_chat,
    "chatMessage": send_chat_message,
}


async def dispatch(connection: ChatConnection, raw: str):
    try:
        frame = json.loads(raw)
    except json.JSONDecodeError:
        await connection.emit("chatError", "Malformed message.")
        return

    if not isinstance(frame, dict) or not isinstance(frame.get("event"), str):
        await connection.emit("chatError", "Malformed message.")
        return

    handler = EVENT_HANDLERS.get(frame["event"])
    if handler is None:
        await connection.emit("chatError", f"Unknown event: {frame['event']}")
        return

    await handler(connection, frame.get("data"))


@router.websocket("/ws/chat")
async def group_chat(websocket: WebSocket):
    connection = await chat_hub.connect(websocket)
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(message.get("code", 1000))

            raw = message.get("text")
            if raw is None:
                await connection.emit("chatError", "Malformed message.")
                continue
            await dispatch(connection, raw)
    except WebSocketDisconnect:
        pass
    finally:
        chat_hub.disconnect(connection)
