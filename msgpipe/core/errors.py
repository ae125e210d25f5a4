class MsgPipeError(Exception):
    """Base class of every error raised by msgpipe."""


class StreamClosed(MsgPipeError):
    """
    Terminal condition of the input stream.

    Raised by a MessageDecoder when no further message can be read, and
    returned by MessageServer.serve() as the reason the loop stopped.
    """


class EndOfStream(StreamClosed):
    """The input stream ended cleanly, between two messages."""


class UnexpectedEndOfStream(StreamClosed):
    """The input stream ended in the middle of a message."""


class StreamFailed(StreamClosed):
    """Reading the input stream failed with an OS level error, e.g. a reset pipe."""


class TooManyDecodeErrors(StreamClosed):
    """The decoder kept failing on consecutive messages, `count` in a row."""

    def __init__(self, count: int) -> None:
        super().__init__(f"Giving up after {count} consecutive decode errors")
        self.count = count


class DecodeError(MsgPipeError):
    """
    A single message could not be decoded.

    The decoder has already discarded the offending input, so the next
    decode() call starts on fresh data.
    """


class EncodeError(MsgPipeError):
    """A message could not be encoded, e.g. it holds an unsupported value."""
