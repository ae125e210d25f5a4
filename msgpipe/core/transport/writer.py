import asyncio

from msgpipe.core.models.message import Message
from msgpipe.core.ports.codec import MessageEncoder


class SyncWriter:
    """
    MessageWriter serializing concurrent writes on a single encoder.

    Every call to `write()` holds an exclusive lock for the whole encode
    operation, including the wait for the output stream to drain. Messages
    written by concurrent handlers are therefore emitted one after the
    other, in lock acquisition order, and never interleave on the stream.

    Errors raised by the encoder are propagated unchanged to the caller. The
    writer does not retry and stays usable afterwards; if the output stream
    itself is broken, subsequent writes fail as well.
    """
    def __init__(self, encoder: MessageEncoder) -> None:
        self._encoder = encoder
        self._lock = asyncio.Lock()
        self.writes = 0

    @property
    def locked(self) -> bool:
        return self._lock.locked()

    async def write(self, message: Message) -> None:
        async with self._lock:
            await self._encoder.encode(message)
            self.writes += 1
