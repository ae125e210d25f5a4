import asyncio
import pytest

from msgpipe.core.errors import EncodeError
from msgpipe.core.models.message import Message
from msgpipe.core.transport.writer import SyncWriter
from tests.fake.fake_codec import RecordingEncoder


@pytest.mark.ut
@pytest.mark.asyncio
async def test_write_forwards_to_encoder(encoder):
    writer = SyncWriter(encoder)

    await writer.write(Message(a=1))

    assert encoder.encoded == [{"a": 1}]
    assert writer.writes == 1
    assert not writer.locked


@pytest.mark.ut
@pytest.mark.asyncio
async def test_concurrent_writes_never_overlap(encoder):
    writer = SyncWriter(encoder)
    messages = [Message(i=i) for i in range(20)]

    await asyncio.gather(*(writer.write(m) for m in messages))

    assert len(encoder.encoded) == 20
    # every start is immediately followed by its own end
    for start, end in zip(encoder.events[::2], encoder.events[1::2]):
        assert start[0] == "start"
        assert end == ("end", start[1])


@pytest.mark.ut
@pytest.mark.asyncio
async def test_writes_complete_in_lock_acquisition_order(encoder):
    writer = SyncWriter(encoder)
    messages = [Message(i=i) for i in range(5)]

    await asyncio.gather(*(writer.write(m) for m in messages))

    assert [m["i"] for m in encoder.encoded] == [0, 1, 2, 3, 4]


@pytest.mark.ut
@pytest.mark.asyncio
async def test_encode_error_is_propagated_and_lock_released():
    encoder = RecordingEncoder(fail_on="bad")
    writer = SyncWriter(encoder)

    with pytest.raises(EncodeError, match="cannot encode bad"):
        await writer.write(Message(bad=object()))

    assert not writer.locked
    assert writer.writes == 0

    await writer.write(Message(good=True))
    assert encoder.encoded == [{"good": True}]


@pytest.mark.ut
@pytest.mark.asyncio
async def test_stream_error_is_propagated_unchanged():
    class BrokenEncoder:
        async def encode(self, message):
            raise BrokenPipeError("pipe closed")

    writer = SyncWriter(BrokenEncoder())

    with pytest.raises(BrokenPipeError):
        await writer.write(Message(a=1))
    with pytest.raises(BrokenPipeError):
        await writer.write(Message(a=2))
