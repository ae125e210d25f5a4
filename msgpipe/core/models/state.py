from enum import StrEnum


class ServerStatus(StrEnum):
    """
    Lifecycle of a MessageServer.

    - idle: serve() has not been called yet
    - running: the decode loop is reading the input stream
    - draining: the input stream is closed, handlers are still in flight
    - stopped: the input stream is closed and every handler has completed
    """
    idle = "idle"
    running = "running"
    draining = "draining"
    stopped = "stopped"
