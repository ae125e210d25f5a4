import asyncio
import logging
import os

from msgpipe.bootstrap.config.loader import get_cli_args
from msgpipe.bootstrap.config.settings import MsgPipeConfig
from msgpipe.bootstrap.deps import get_codec, get_config
from msgpipe.core.errors import StreamClosed
from msgpipe.core.helpers.utils import setup_logging
from msgpipe.core.models.message import Message, MessageHandler, MessageWriter
from msgpipe.core.transport.server import MessageServer
from msgpipe.infra.stdio import open_stdio_streams

logger = logging.getLogger("bootstrap.boot")


async def create_stdio_server(
    handler: MessageHandler,
    config: MsgPipeConfig | None = None,
) -> tuple[MessageServer, asyncio.StreamWriter]:
    """
    Build a MessageServer reading messages from stdin and writing replies
    to stdout, with the codec selected by the configuration.

    The stdout StreamWriter is returned along with the server so that the
    caller can close it once the server has drained.
    """
    config = config or get_config()
    codec = get_codec(config)
    reader, writer = await open_stdio_streams(limit=config.read_chunk_size)

    server = MessageServer(
        decoder=codec.decoder(reader),
        encoder=codec.encoder(writer),
        handler=handler,
        config=config.server_config(),
    )
    return server, writer


async def run_stdio(
    handler: MessageHandler,
    config: MsgPipeConfig | None = None,
) -> StreamClosed:
    """
    Serve `handler` over stdin/stdout until the input stream ends, wait for
    every in-flight handler, then close stdout.
    """
    server, writer = await create_stdio_server(handler, config)
    try:
        reason = await server.serve()
        logger.info(f"Input stream closed: {reason}")
        await server.wait_for_drain()
    finally:
        writer.close()
        try:
            await writer.wait_closed()
        except OSError as exc:
            logger.debug(f"Output stream closed with error: {exc}")
    return reason


async def echo(writer: MessageWriter, message: Message) -> None:
    await writer.write(message)


def main() -> None:
    cli = get_cli_args()
    if cli.config:
        os.environ["MSGPIPE_CONFIG"] = cli.config

    config = get_config()
    if cli.codec:
        config = config.model_copy(update={"codec": cli.codec})

    setup_logging(cli.log_level or config.log_level)

    try:
        asyncio.run(run_stdio(echo, config))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
