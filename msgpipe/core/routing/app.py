import logging
from typing import Callable

from msgpipe.core.models.message import Message, MessageWriter
from msgpipe.core.routing.router import RouteHandler, Router


class RoutedHandler:
    """
    MessageHandler implementation that dispatches incoming messages to
    handlers registered in a `Router`.

    - For each incoming message, the handler resolves the route associated
      with the value of `message[key]` (`"type"` by default).
    - If no route exists, a `ko` Message is written back.
    - If a route exists, it is awaited with the writer and the message and
      is free to write any number of replies.
    - Any exception raised by a route is logged and results in a `ko`
      Message.

    Every invocation handles a single message; the MessageServer runs one
    invocation per decoded message, concurrently.
    """

    def __init__(self, key: str = "type") -> None:
        self.key = key
        self.router = Router()
        self._logger = logging.getLogger("core.routing.app")

    async def __call__(self, writer: MessageWriter, message: Message) -> None:
        name = message.get(self.key)
        handler = self.router.resolve(name) if isinstance(name, str) else None

        if handler is None:
            msg = f"Unknown message type '{name}'"
            self._logger.warning(msg)
            await writer.write(Message(type="ko", message=msg))
            return

        try:
            await handler(writer, message)
        except Exception as exc:
            self._logger.error(f"Error in handler '{name}': {exc}", exc_info=exc)
            await writer.write(Message(type="ko", message=str(exc)))

    def route(self, name: str) -> Callable[[RouteHandler], RouteHandler]:
        return self.router.route(name)
