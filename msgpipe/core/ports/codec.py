from typing import Protocol

from msgpipe.core.models.message import Message


class ByteReader(Protocol):
    """Readable side of a byte stream, as exposed by asyncio.StreamReader."""

    async def read(self, n: int = -1) -> bytes:
        ...


class ByteWriter(Protocol):
    """Writable side of a byte stream, as exposed by asyncio.StreamWriter."""

    def write(self, data: bytes) -> None:
        ...

    async def drain(self) -> None:
        ...


class MessageDecoder(Protocol):
    """
    Reads Message objects, one at a time, from an input stream.

    Calls are strictly sequential: the stream carries no framing that would
    allow two decode() calls to proceed in parallel.
    """

    async def decode(self) -> Message:
        """
        Return the next Message of the stream.

        Raises EndOfStream or UnexpectedEndOfStream when the stream is over,
        and DecodeError when a single message is malformed and has been
        skipped.
        """


class MessageEncoder(Protocol):
    """
    Writes Message objects, one at a time, to an output stream.
    """

    async def encode(self, message: Message) -> None:
        """
        Serialize the message and write it to the stream.

        Raises EncodeError when the message holds a value the encoding
        cannot represent. Errors of the underlying stream propagate as is.
        """


class Codec(Protocol):
    """
    Defines an encoding usable by the MessageServer, by building a decoder
    and an encoder over a pair of byte streams.
    """

    def decoder(self, reader: ByteReader) -> MessageDecoder:
        ...

    def encoder(self, writer: ByteWriter) -> MessageEncoder:
        ...
