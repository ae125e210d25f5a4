import pytest

from msgpipe.core.models.message import Message
from msgpipe.core.routing.app import RoutedHandler
from msgpipe.core.transport.writer import SyncWriter


@pytest.mark.ut
@pytest.mark.asyncio
async def test_routed_handler_dispatch(encoder):
    handler = RoutedHandler()

    @handler.route("echo")
    async def handle_echo(writer, message):
        await writer.write(Message(type="echo", data=message["data"]))

    await handler(SyncWriter(encoder), Message(type="echo", data={"x": 42}))

    assert encoder.encoded == [{"type": "echo", "data": {"x": 42}}]


@pytest.mark.ut
@pytest.mark.asyncio
async def test_routed_handler_multiple_replies(encoder):
    handler = RoutedHandler()

    @handler.route("count")
    async def handle_count(writer, message):
        for i in range(message["up_to"]):
            await writer.write(Message(type="tick", i=i))

    await handler(SyncWriter(encoder), Message(type="count", up_to=3))

    assert [m["i"] for m in encoder.encoded] == [0, 1, 2]


@pytest.mark.ut
@pytest.mark.asyncio
async def test_routed_handler_unknown_type(encoder):
    handler = RoutedHandler()

    await handler(SyncWriter(encoder), Message(type="nope"))

    assert len(encoder.encoded) == 1
    assert encoder.encoded[0]["type"] == "ko"
    assert "Unknown message type 'nope'" in encoder.encoded[0]["message"]


@pytest.mark.ut
@pytest.mark.asyncio
async def test_routed_handler_missing_key(encoder):
    handler = RoutedHandler()

    await handler(SyncWriter(encoder), Message(data=1))

    assert encoder.encoded == [{"type": "ko", "message": "Unknown message type 'None'"}]


@pytest.mark.ut
@pytest.mark.asyncio
async def test_routed_handler_custom_key(encoder):
    handler = RoutedHandler(key="cmd")

    @handler.route("ping")
    async def handle_ping(writer, message):
        await writer.write(Message(cmd="pong"))

    await handler(SyncWriter(encoder), Message(cmd="ping"))

    assert encoder.encoded == [{"cmd": "pong"}]


@pytest.mark.ut
@pytest.mark.asyncio
async def test_routed_handler_exception(encoder):
    handler = RoutedHandler()

    @handler.route("boom")
    async def handle_boom(writer, message):
        raise ValueError("boom!")

    await handler(SyncWriter(encoder), Message(type="boom"))

    assert encoder.encoded == [{"type": "ko", "message": "boom!"}]


@pytest.mark.ut
def test_duplicate_route_is_rejected():
    handler = RoutedHandler()

    @handler.route("dup")
    async def first(writer, message):
        pass

    with pytest.raises(RuntimeError, match="already registered"):
        @handler.route("dup")
        async def second(writer, message):
            pass

    assert handler.router.routes() == {"dup": first}
    assert handler.router.resolve("other") is None
