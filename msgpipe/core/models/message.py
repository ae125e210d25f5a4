from typing import Any, Protocol


class Message(dict[str, Any]):
    """
    Unit of communication exchanged over the stream.

    A Message is a plain string-keyed mapping. Decoders build a fresh one
    for every value read from the input stream, and handlers build their
    own to reply. The content is not validated here: whatever the codec
    cannot represent is reported by the codec itself when writing.
    """

    def __repr__(self) -> str:
        return f"Message({dict.__repr__(self)})"


class MessageWriter(Protocol):
    """
    Capability handed to handlers for sending replies.

    Each call writes one complete message on the output stream. Concurrent
    callers never see their messages interleaved.
    """
    async def write(self, message: Message) -> None:
        ...


class MessageHandler(Protocol):
    """
    User logic invoked once per received message.

    A handler receives the shared MessageWriter and the decoded Message and
    may write any number of replies, at any time, before returning. It runs
    on its own task, concurrently with the decode loop and with other
    handler invocations, so any state shared between invocations must be
    guarded by the handler itself.

    Exceptions raised by a handler are logged by the MessageServer and do
    not affect other messages.
    """
    async def __call__(self, writer: MessageWriter, message: Message) -> None:
        ...
