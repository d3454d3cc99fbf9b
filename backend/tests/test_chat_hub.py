import asyncio
import json

from routers.chat.hub import ChatHub


class FakeWebSocket:
    def __init__(self, fail=False):
        self.sent = []
        self.accepted = False
        self.fail = fail

    async def accept(self):
        self.accepted = True

    async def send_text(self, text):
        if self.fail:
            raise RuntimeError("socket closed")
        self.sent.append(json.loads(text))


def test_disconnect_releases_every_room():
    async def scenario():
        hub = ChatHub()
        connection = await hub.connect(FakeWebSocket())
        hub.join(connection, "a")
        hub.join(connection, "b")
        hub.disconnect(connection)
        return hub

    hub = asyncio.run(scenario())
    assert hub.rooms == {}
    assert hub.connections == {}


def test_broadcast_only_reaches_room_members():
    async def scenario():
        hub = ChatHub()
        inside, outside = FakeWebSocket(), FakeWebSocket()
        first = await hub.connect(inside)
        second = await hub.connect(outside)
        hub.join(first, "a")
        hub.join(second, "b")
        await hub.broadcast("a", "groupChatMessage", {"message": "hi"})
        return inside, outside

    inside, outside = asyncio.run(scenario())
    assert inside.accepted
    assert inside.sent == [{"event": "groupChatMessage", "data": {"message": "hi"}}]
    assert outside.sent == []


def test_failed_send_drops_connection():
    async def scenario():
        hub = ChatHub()
        healthy = FakeWebSocket()
        good = await hub.connect(healthy)
        bad = await hub.connect(FakeWebSocket(fail=True))
        hub.join(good, "a")
        hub.join(bad, "a")
        await hub.broadcast("a", "groupChatMessage", {"message": "hi"})
        return hub, good, bad, healthy

    hub, good, bad, healthy = asyncio.run(scenario())
    assert set(hub.rooms["a"]) == {good.id}
    assert bad.id not in hub.connections
    assert len(healthy.sent) == 1


def test_room_lock_survives_last_member_leaving():
    async def scenario():
        hub = ChatHub()
        connection = await hub.connect(FakeWebSocket())
        hub.join(connection, "a")

        held = hub.room_lock("a")
        async with held:
            hub.disconnect(connection)
            again = hub.room_lock("a")
            return held, again, again.locked()

    held, again, locked = asyncio.run(scenario())
    assert again is held
    assert locked


def test_room_lock_is_shared_between_senders():
    async def scenario():
        hub = ChatHub()
        order = []

        async def send(name):
            lock = hub.room_lock("a")
            async with lock:
                order.append(f"{name} start")
                await asyncio.sleep(0)
                order.append(f"{name} end")

        await asyncio.gather(send("first"), send("second"))
        return order

    assert asyncio.run(scenario()) == ["first start", "first end", "second start", "second end"]
