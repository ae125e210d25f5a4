import asyncio
import logging

from msgpipe.core.errors import DecodeError, StreamClosed, StreamFailed, TooManyDecodeErrors
from msgpipe.core.helpers.spawn import TaskSpawner
from msgpipe.core.models.config import ServerConfig
from msgpipe.core.models.message import Message, MessageHandler
from msgpipe.core.models.state import ServerStatus
from msgpipe.core.ports.codec import MessageDecoder, MessageEncoder
from msgpipe.core.transport.writer import SyncWriter


class MessageServer:
    """
    Runs the receive loop of a message stream and dispatches every decoded
    message to a handler.

    The server owns one MessageDecoder, read exclusively by the `serve()`
    loop, and one SyncWriter wrapping the MessageEncoder of the output
    stream. Each decoded Message is handed to the handler on a dedicated
    asyncio task, together with the SyncWriter, and the loop immediately
    moves on to the next message: decoding and handling are pipelined.
    Tasks are started in decode order, but nothing is guaranteed about the
    order in which they complete or write their replies.

    A malformed message is logged and skipped. An exception raised by a
    handler is logged with its traceback at the boundary of its task and
    affects neither the loop nor the other handlers. The loop only stops
    when the decoder reports that the input stream is closed, when reading
    it fails with an OSError, or after too many consecutive decode errors; `serve()` then returns the terminal
    condition.

    In-flight handler tasks are tracked by a TaskSpawner. They are never
    cancelled by the server: `wait_for_drain()` waits for them, so that all
    replies triggered by already received messages are written before the
    process exits.
    """
    def __init__(
        self,
        decoder: MessageDecoder,
        encoder: MessageEncoder,
        handler: MessageHandler,
        config: ServerConfig | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._decoder = decoder
        self._writer = SyncWriter(encoder)
        self._handler = handler
        self._config = config or ServerConfig()
        self._logger = logger or logging.getLogger("core.transport.server")
        self._spawner = TaskSpawner(loop=loop, logger=self._logger)
        self._status = ServerStatus.idle
        self._dispatched = 0

    @property
    def writer(self) -> SyncWriter:
        return self._writer

    @property
    def in_flight(self) -> int:
        return self._spawner.remaining_tasks

    @property
    def dispatched(self) -> int:
        return self._dispatched

    @property
    def status(self) -> ServerStatus:
        if self._status == ServerStatus.draining and not self.in_flight:
            return ServerStatus.stopped
        return self._status

    async def serve(self) -> StreamClosed:
        if self._status != ServerStatus.idle:
            raise RuntimeError("MessageServer.serve() can only be called once")

        self._status = ServerStatus.running
        max_errors = self._config.max_decode_errors
        errors = 0

        while True:
            try:
                message = await self._decoder.decode()
            except StreamClosed as exc:
                reason = exc
                break
            except OSError as exc:
                self._logger.error(f"Got error while reading input: {exc}", exc_info=exc)
                reason = StreamFailed(f"Input stream failed: {exc}")
                reason.__cause__ = exc
                break
            except DecodeError as exc:
                errors += 1
                self._logger.warning(f"Got error while decoding input: {exc}")
                if max_errors and errors >= max_errors:
                    reason = TooManyDecodeErrors(errors)
                    break
                continue

            errors = 0
            self._dispatch(message)

        self._status = ServerStatus.draining
        self._logger.debug(
            f"Stopped reading input ({reason!r}), "
            f"{self.in_flight} handler(s) still running"
        )
        return reason

    async def wait_for_drain(self) -> None:
        if self.in_flight:
            self._logger.debug(f"Waiting for {self.in_flight} handler(s) to complete.")
        await self._spawner.wait()

    def _dispatch(self, message: Message) -> None:
        self._dispatched += 1
        self._spawner.spawn(
            self._handle(message),
            name=f"msgpipe-handler-{self._dispatched}"
        )

    async def _handle(self, message: Message) -> None:
        try:
            await self._handler(self._writer, message)
        except Exception as exc:
            self._logger.error(f"Caught exception in message handler: {exc}", exc_info=exc)
