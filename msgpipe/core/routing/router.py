import logging
from typing import Awaitable, Callable

from msgpipe.core.models.message import Message, MessageWriter


RouteHandler = Callable[[MessageWriter, Message], Awaitable[None]]


class Router:
    """
    A minimal message-routing component used by RoutedHandler.

    The Router maps route names (strings) to asynchronous handler functions.
    Each handler is a coroutine with the same signature as a MessageHandler:
    it receives the MessageWriter and the decoded Message.

    Handlers are registered exactly once per name. Attempting to register a
    second handler for the same name raises a RuntimeError.

    This component does not perform any dispatching by itself; it only
    stores and resolves handlers.
    """

    def __init__(self) -> None:
        self._routes: dict[str, RouteHandler] = {}
        self._logger = logging.getLogger("core.routing.router")

    def route(self, name: str) -> Callable[[RouteHandler], RouteHandler]:
        def decorator(func: RouteHandler) -> RouteHandler:
            if name in self._routes:
                raise RuntimeError(f"Handler already registered for '{name}'")

            self._routes[name] = func
            self._logger.debug(f"Registered route '{name}' -> {func.__qualname__}")
            return func

        return decorator

    def resolve(self, name: str) -> RouteHandler | None:
        return self._routes.get(name)

    def routes(self) -> dict[str, RouteHandler]:
        return dict(self._routes)
