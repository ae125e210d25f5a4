from dataclasses import dataclass


@dataclass
class ServerConfig:
    """
    Runtime limits of a MessageServer.
    """
    max_decode_errors: int = 16
    """
    Number of consecutive recoverable decode errors after which the server
    stops reading and returns TooManyDecodeErrors. A successfully decoded
    message resets the count. Set to 0 to never give up.
    """


@dataclass
class CodecConfig:
    """
    Buffering limits shared by the stream decoders.
    """
    read_chunk_size: int = 64 * 1024
    """
    Maximum number of bytes requested from the input stream per read.
    """

    max_buffer_size: int = 4 * 1024 * 1024  # 4MB
    """
    Maximum amount of undecoded input kept in memory. When a single
    message grows past this limit the buffered input is dropped and a
    DecodeError is raised.
    """
