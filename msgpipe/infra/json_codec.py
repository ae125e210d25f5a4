import codecs
import json
import logging
import re
from typing import Any

from msgpipe.core.errors import DecodeError, EncodeError, EndOfStream, UnexpectedEndOfStream
from msgpipe.core.models.config import CodecConfig
from msgpipe.core.models.message import Message
from msgpipe.core.ports.codec import ByteReader, ByteWriter, Codec

JSON_WHITESPACE = " \t\n\r"
JSON_LITERALS = ("true", "false", "null", "NaN", "Infinity", "-Infinity")
NUMBER_CHARS = "-+.0123456789eE"
# any prefix of a JSON number, including the empty string
NUMBER_PREFIX = re.compile(r"-?(?:\d+(?:\.\d*)?(?:[eE][-+]?\d*)?)?")


class JsonDecoder:
    """
    Streaming JSON decoder reading consecutive JSON objects from a byte stream.

    Values may be separated by any JSON whitespace and may span several
    lines; newline-delimited JSON is the common case. Input is decoded as
    UTF-8, invalid sequences being replaced by U+FFFD.

    When a value is malformed, the decoder skips the input up to and
    including the first newline following the error, then raises a
    DecodeError. The next call resumes on the following line.
    """

    def __init__(self, reader: ByteReader, config: CodecConfig | None = None) -> None:
        self._reader = reader
        self._config = config or CodecConfig()
        self._text = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._json = json.JSONDecoder()
        self._buffer = ""
        self._eof = False
        self._logger = logging.getLogger("infra.json_codec")

    async def decode(self) -> Message:
        while True:
            self._buffer = self._buffer.lstrip(JSON_WHITESPACE)

            if not self._buffer:
                if self._eof:
                    raise EndOfStream("End of JSON stream")
                await self._fill()
                continue

            try:
                value, end = self._json.raw_decode(self._buffer)
            except json.JSONDecodeError as exc:
                newline = self._buffer.find("\n", exc.pos)
                if newline >= 0:
                    skipped = self._buffer[:newline]
                    self._buffer = self._buffer[newline + 1:]
                    self._logger.debug(f"Skipped malformed input: {skipped[:200]!r}")
                    raise DecodeError(f"Invalid JSON: {exc}") from exc

                if not self._eof:
                    # the value may still be incomplete
                    await self._fill()
                    continue

                rest, self._buffer = self._buffer, ""
                if self._is_truncated(rest, exc):
                    raise UnexpectedEndOfStream(f"JSON stream ended inside a value: {exc}") from exc
                raise DecodeError(f"Invalid JSON: {exc}") from exc

            if not self._eof and self._is_partial_number(value):
                # a number at the end of the buffer may go on in the next chunk
                await self._fill()
                continue

            self._buffer = self._buffer[end:]
            return self._to_message(value)

    async def _fill(self) -> None:
        if len(self._buffer) >= self._config.max_buffer_size:
            size = len(self._buffer)
            self._buffer = ""
            raise DecodeError(
                f"Message exceeds max buffer size ({size} >= {self._config.max_buffer_size})"
            )

        chunk = await self._reader.read(self._config.read_chunk_size)
        if not chunk:
            self._eof = True
            self._buffer += self._text.decode(b"", final=True)
            return

        self._buffer += self._text.decode(chunk)

    def _is_partial_number(self, value: Any) -> bool:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return False
        return NUMBER_PREFIX.fullmatch(self._buffer) is not None

    @staticmethod
    def _is_truncated(rest: str, exc: json.JSONDecodeError) -> bool:
        """Tell whether `rest` is a valid JSON text cut short by the end of stream."""
        if exc.pos >= len(rest) or exc.msg.startswith("Unterminated string"):
            return True

        tail = rest[exc.pos:]
        if any(literal.startswith(tail) for literal in JSON_LITERALS):
            return True

        start = exc.pos
        while start > 0 and rest[start - 1] in NUMBER_CHARS:
            start -= 1
        return NUMBER_PREFIX.fullmatch(rest, start) is not None

    @staticmethod
    def _to_message(value: Any) -> Message:
        if not isinstance(value, dict):
            raise DecodeError(f"Expected a JSON object, got {type(value).__name__}")
        return Message(value)


class JsonEncoder:
    """
    Writes each message as compact JSON followed by a newline.

    NaN and infinite floats are rejected so that the output stays valid JSON.
    """

    def __init__(self, writer: ByteWriter) -> None:
        self._writer = writer

    async def encode(self, message: Message) -> None:
        try:
            data = json.dumps(
                message,
                separators=(",", ":"),
                ensure_ascii=False,
                allow_nan=False,
            )
        except (TypeError, ValueError) as exc:
            raise EncodeError(f"Cannot encode message as JSON: {exc}") from exc

        self._writer.write(data.encode("utf-8") + b"\n")
        await self._writer.drain()


class JsonCodec(Codec):
    """
    JSON implementation of the Codec interface, used by default.

    - human readable
    - line oriented, easy to produce from any parent process
    """
    def __init__(self, config: CodecConfig | None = None) -> None:
        self._config = config or CodecConfig()

    def decoder(self, reader: ByteReader) -> JsonDecoder:
        return JsonDecoder(reader, self._config)

    def encoder(self, writer: ByteWriter) -> JsonEncoder:
        return JsonEncoder(writer)
