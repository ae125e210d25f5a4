import logging

import msgpack

from msgpipe.core.errors import DecodeError, EncodeError, EndOfStream, UnexpectedEndOfStream
from msgpipe.core.models.config import CodecConfig
from msgpipe.core.models.message import Message
from msgpipe.core.ports.codec import ByteReader, ByteWriter, Codec


class MsgPackDecoder:
    """
    Streaming msgpack decoder built on msgpack.Unpacker.

    Map keys are checked once a value is fully read, so a map with non-str
    keys is skipped on its own. Invalid UTF-8 in strings is replaced by
    U+FFFD.

    msgpack carries no delimiter to resynchronize on, so when the input is
    structurally malformed every buffered byte is dropped before raising a
    DecodeError. Decoding resumes with the next bytes read from the stream.
    """

    def __init__(self, reader: ByteReader, config: CodecConfig | None = None) -> None:
        self._reader = reader
        self._config = config or CodecConfig()
        self._eof = False
        self._logger = logging.getLogger("infra.msgpack_codec")
        self._reset()

    async def decode(self) -> Message:
        while True:
            try:
                value = self._unpacker.unpack()
            except msgpack.OutOfData:
                if not self._eof:
                    await self._fill()
                    continue
                if self._unpacker.tell() < self._fed:
                    raise UnexpectedEndOfStream("msgpack stream ended inside a value")
                raise EndOfStream("End of msgpack stream")
            except (ValueError, TypeError) as exc:
                # FormatError, StackError, size limits, unhashable map keys
                self._logger.debug(
                    f"Dropping {self._fed - self._unpacker.tell()} buffered byte(s)"
                )
                self._reset()
                raise DecodeError(f"Invalid msgpack data: {exc}") from exc

            if not isinstance(value, dict):
                raise DecodeError(f"Expected a msgpack map, got {type(value).__name__}")
            if bad := [key for key in value if not isinstance(key, str)]:
                raise DecodeError(f"Message keys must be strings, got {bad[0]!r}")
            return Message(value)

    async def _fill(self) -> None:
        chunk = await self._reader.read(self._config.read_chunk_size)
        if not chunk:
            self._eof = True
            return

        try:
            self._unpacker.feed(chunk)
        except msgpack.BufferFull as exc:
            dropped = self._fed - self._unpacker.tell() + len(chunk)
            self._reset()
            raise DecodeError(
                f"Message exceeds max buffer size, dropped {dropped} bytes"
            ) from exc
        self._fed += len(chunk)

    def _reset(self) -> None:
        self._unpacker = msgpack.Unpacker(
            raw=False,
            unicode_errors="replace",
            strict_map_key=False,
            max_buffer_size=self._config.max_buffer_size,
        )
        self._fed = 0


class MsgPackEncoder:
    def __init__(self, writer: ByteWriter) -> None:
        self._writer = writer

    async def encode(self, message: Message) -> None:
        try:
            data = msgpack.packb(message, use_bin_type=True)
        except (TypeError, ValueError, OverflowError) as exc:
            raise EncodeError(f"Cannot encode message as msgpack: {exc}") from exc

        self._writer.write(data)
        await self._writer.drain()


class MsgPackCodec(Codec):
    """
    MsgPack-based implementation of the Codec interface.

    - compact binary encoding
    - bytes values survive the round trip
    - fast
    """
    def __init__(self, config: CodecConfig | None = None) -> None:
        self._config = config or CodecConfig()

    def decoder(self, reader: ByteReader) -> MsgPackDecoder:
        return MsgPackDecoder(reader, self._config)

    def encoder(self, writer: ByteWriter) -> MsgPackEncoder:
        return MsgPackEncoder(writer)
