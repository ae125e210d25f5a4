import argparse
import os
from functools import lru_cache
from pathlib import Path


@lru_cache
def get_cli_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="msgpipe-echo",
        description=(
            "Serve an echo handler over standard input/output.\n\n"
            "Every message read on stdin is written back unchanged on stdout.\n"
            "Useful to check how a parent process talks to a msgpipe server."
        ),
        formatter_class=argparse.RawTextHelpFormatter
    )

    parser.add_argument(
        "-c", "--config",
        type=str,
        help="Path to a msgpipe configuration file (YAML)"
    )

    parser.add_argument(
        "--codec",
        type=str,
        choices=["json", "msgpack"],
        help="Wire encoding, overrides the configuration file"
    )

    parser.add_argument(
        "-l", "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help=(
            "Logging verbosity, overrides the configuration file.\n"
            "Logs are always written to stderr, stdout carries messages only.\n\n"
            "Example:\n"
            "  --log-level DEBUG"
        ),
    )

    return parser.parse_args()


def get_configfile(raw: str | None = None) -> Path | None:
    # Priority: CLI > ENV, no file otherwise
    raw = raw or os.getenv("MSGPIPE_CONFIG")
    if raw is None:
        return None

    file = Path(raw)
    if not file.is_file():
        raise SystemExit(
            f"[config] Configuration file not found: '{file}'.\n"
            "  - Use --config <file.yaml>\n"
            "  - Or set the MSGPIPE_CONFIG environment variable"
        )

    return file
