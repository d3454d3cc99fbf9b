import asyncio
import uuid
import pytest
from conftest import create_group

import config
from repositories import ChatMessageRepository


def send(ws, event, data):
    ws.send_json({"event": event, "data": data})


def chat_message(group_id, message, sender_id="vendor-1", sender_name="Ravi"):
    return {"groupId": group_id, "senderId": sender_id, "senderName": sender_name, "message": message}


def join_room(ws, group_id):
    send(ws, "joinGroupChat", group_id)
    frame = ws.receive_json()
    assert frame["event"] == "chatHistory"
    return frame["data"]


@pytest.fixture
def group(client, vendor):
    return create_group(client, vendor["id"])


def test_join_empty_room_returns_empty_history(client, group):
    with client.websocket_connect("/ws/chat") as ws:
        assert join_room(ws, group["id"]) == []


def test_message_reaches_every_member(client, group):
    with client.websocket_connect("/ws/chat") as first, client.websocket_connect("/ws/chat") as second:
        join_room(first, group["id"])
        join_room(second, group["id"])

        send(second, "chatMessage", chat_message(group["id"], "  Truck leaves at 6  "))

        for ws in (first, second):
            frame = ws.receive_json()
            assert frame["event"] == "groupChatMessage"
            assert frame["data"]["message"] == "Truck leaves at 6"
            assert frame["data"]["senderName"] == "Ravi"
            assert frame["data"]["groupId"] == group["id"]


def test_history_replays_latest_messages_oldest_first(client, group):
    async def seed():
        async with config.open_session() as db:
            messages = ChatMessageRepository(db)
            for i in range(55):
                await messages.create(
                    group_id=uuid.UUID(group["id"]), sender_id="vendor-1",
                    sender_name="Ravi", message=f"message {i}"
                )
            await db.commit()

    asyncio.run(seed())

    with client.websocket_connect("/ws/chat") as ws:
        history = join_room(ws, group["id"])

    assert len(history) == 50
    assert history[0]["message"] == "message 5"
    assert history[-1]["message"] == "message 54"
    assert [m["id"] for m in history] == sorted(m["id"] for m in history)


def test_rooms_are_isolated(client, vendor, group):
    other = create_group(client, vendor["id"], product="Potato")

    with client.websocket_connect("/ws/chat") as first, client.websocket_connect("/ws/chat") as second:
        join_room(first, group["id"])
        join_room(second, other["id"])

        send(second, "chatMessage", chat_message(other["id"], "potatoes only"))
        assert second.receive_json()["data"]["message"] == "potatoes only"

        send(first, "chatMessage", chat_message(group["id"], "onions only"))
        frame = first.receive_json()
        assert frame["data"]["message"] == "onions only"
        assert frame["data"]["groupId"] == group["id"]


def test_leave_stops_delivery(client, vendor, group):
    other = create_group(client, vendor["id"], product="Potato")

    with client.websocket_connect("/ws/chat") as first, client.websocket_connect("/ws/chat") as second:
        join_room(first, group["id"])
        join_room(first, other["id"])
        join_room(second, group["id"])

        send(first, "leaveGroupChat", group["id"])
        send(second, "chatMessage", chat_message(group["id"], "missed"))
        assert second.receive_json()["data"]["message"] == "missed"

        send(first, "chatMessage", chat_message(other["id"], "still here"))
        frame = first.receive_json()
        assert frame["data"]["message"] == "still here"


def test_missing_sender_defaults_to_anonymous(client, group):
    with client.websocket_connect("/ws/chat") as ws:
        join_room(ws, group["id"])
        send(ws, "chatMessage", {"groupId": group["id"], "message": "hello"})
        frame = ws.receive_json()
        assert frame["data"]["senderId"] == "anonymous"
        assert frame["data"]["senderName"] == "Anonymous"


def test_empty_message_is_rejected(client, group):
    with client.websocket_connect("/ws/chat") as ws:
        send(ws, "chatMessage", chat_message(group["id"], "   "))
        assert ws.receive_json() == {"event": "chatError", "data": "Message cannot be empty."}


def test_message_to_unknown_group(client):
    with client.websocket_connect("/ws/chat") as ws:
        send(ws, "chatMessage", chat_message(str(uuid.uuid4()), "hello"))
        assert ws.receive_json() == {"event": "chatError", "data": "Group not found."}


def test_invalid_group_id(client):
    with client.websocket_connect("/ws/chat") as ws:
        send(ws, "joinGroupChat", "group-42")
        assert ws.receive_json() == {"event": "chatError", "data": "Invalid group id."}


def test_malformed_and_unknown_frames(client):
    with client.websocket_connect("/ws/chat") as ws:
        ws.send_text("not json")
        assert ws.receive_json() == {"event": "chatError", "data": "Malformed message."}

        send(ws, "typing", None)
        assert ws.receive_json() == {"event": "chatError", "data": "Unknown event: typing"}


def test_history_failure_keeps_connection_usable(client, group, monkeypatch):
    async def broken_history(self, group_id, limit):
        raise RuntimeError("database went away")

    monkeypatch.setattr(ChatMessageRepository, "recent_for_group", broken_history)

    with client.websocket_connect("/ws/chat") as ws:
        send(ws, "joinGroupChat", group["id"])
        assert ws.receive_json() == {"event": "chatError", "data": "Failed to load chat history."}

        # membership was taken before the fetch failed
        send(ws, "chatMessage", chat_message(group["id"], "anyone there?"))
        frame = ws.receive_json()
        assert frame["event"] == "groupChatMessage"
        assert frame["data"]["message"] == "anyone there?"


def test_save_failure_keeps_connection_usable(client, group, monkeypatch):
    async def broken_create(self, **fields):
        raise RuntimeError("disk full")

    with client.websocket_connect("/ws/chat") as ws:
        join_room(ws, group["id"])

        monkeypatch.setattr(ChatMessageRepository, "create", broken_create)
        send(ws, "chatMessage", chat_message(group["id"], "lost"))
        assert ws.receive_json() == {"event": "chatError", "data": "Failed to send message."}

        monkeypatch.undo()
        send(ws, "chatMessage", chat_message(group["id"], "saved"))
        assert ws.receive_json()["data"]["message"] == "saved"

    with client.websocket_connect("/ws/chat") as ws:
        assert [m["message"] for m in join_room(ws, group["id"])] == ["saved"]


def test_binary_frame_is_malformed(client, group):
    with client.websocket_connect("/ws/chat") as ws:
        ws.send_bytes(b"\x00\x01")
        assert ws.receive_json() == {"event": "chatError", "data": "Malformed message."}

        assert join_room(ws, group["id"]) == []
