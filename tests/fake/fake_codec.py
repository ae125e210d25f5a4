import asyncio
from typing import Iterable

from msgpipe.core.errors import EncodeError, EndOfStream
from msgpipe.core.models.message import Message


class FakeDecoder:
    """
    Decoder replaying a scripted sequence of outcomes.

    Each item is either a Message, returned as is, or an exception instance,
    raised. Once the script is exhausted EndOfStream is raised.
    """

    def __init__(self, items: Iterable[Message | Exception]) -> None:
        self._items = list(items)
        self.calls = 0

    async def decode(self) -> Message:
        self.calls += 1
        await asyncio.sleep(0)
        if not self._items:
            raise EndOfStream("script exhausted")
        item = self._items.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


class BlockingDecoder:
    """Decoder whose messages are pushed by the test, one at a time."""

    def __init__(self) -> None:
        self.queue: asyncio.Queue[Message | Exception] = asyncio.Queue()

    async def decode(self) -> Message:
        item = await self.queue.get()
        if isinstance(item, Exception):
            raise item
        return item


class RecordingEncoder:
    """
    Encoder appending every message to `encoded`.

    Each encode yields to the event loop between its start and its end, and
    records both, so tests can check that two encodes never overlap.
    """

    def __init__(self, fail_on: str | None = None) -> None:
        self.encoded: list[Message] = []
        self.events: list[tuple[str, int]] = []
        self._fail_on = fail_on

    async def encode(self, message: Message) -> None:
        if self._fail_on is not None and self._fail_on in message:
            raise EncodeError(f"cannot encode {self._fail_on}")

        self.events.append(("start", id(message)))
        await asyncio.sleep(0)
        self.encoded.append(message)
        self.events.append(("end", id(message)))
