import asyncio
import sys
from typing import BinaryIO


async def open_stdio_streams(
    stdin: BinaryIO | None = None,
    stdout: BinaryIO | None = None,
    limit: int = 64 * 1024,
) -> tuple[asyncio.StreamReader, asyncio.StreamWriter]:
    """
    Connect asyncio streams to the process standard input and output.

    Both ends must be pipes, sockets or character devices, which is the case
    when the process is spawned by a parent communicating over its stdio.
    """
    loop = asyncio.get_running_loop()
    stdin = stdin or sys.stdin.buffer
    stdout = stdout or sys.stdout.buffer

    reader = asyncio.StreamReader(limit=limit)
    await loop.connect_read_pipe(lambda: asyncio.StreamReaderProtocol(reader), stdin)

    # StreamReaderProtocol provides the close waiter used by wait_closed()
    transport, protocol = await loop.connect_write_pipe(
        lambda: asyncio.StreamReaderProtocol(asyncio.StreamReader()), stdout
    )
    writer = asyncio.StreamWriter(transport, protocol, reader, loop)

    return reader, writer
