"""Shared CLI utilities for consistent argument parsing."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, TextIO


def add_log_level_argument(parser: argparse.ArgumentParser) -> None:
    """Add standard --log-level argument.

    Args:
        parser: ArgumentParser to add the argument to
    """
    parser.add_argument(
        "--log-level",
        choices=["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"],
        default="INFO",
        help="Logging verbosity",
    )


def setup_logging(level: str) -> None:
    """Configure logging on stderr so stdout stays clean for program output.

    Args:
        level: Logging level (CRITICAL, ERROR, WARNING, INFO, DEBUG)
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )


def decode_argument(arg: str) -> str:
    """Re-decode a command-line argument so invalid UTF-8 becomes U+FFFD.

    Undecodable argv bytes arrive as lone surrogates; they are turned into
    replacement characters, the same way piped stdin is decoded.
    """
    return arg.encode("utf-8", "surrogateescape").decode("utf-8", errors="replace")


def read_piped_stdin(stream: Optional[TextIO] = None) -> str:
    """Read everything piped into stdin, or return an empty string.

    An interactive terminal is never read from, so the call cannot block
    waiting for keyboard input. Bytes are decoded as UTF-8; invalid sequences
    become U+FFFD.

    Args:
        stream: Text stream to read (default: sys.stdin)

    Returns:
        Piped content as string
    """
    if stream is None:
        stream = sys.stdin
    if stream is None or stream.isatty():
        return ""

    buffer = getattr(stream, "buffer", None)
    if buffer is not None:
        return buffer.read().decode("utf-8", errors="replace")
    return stream.read()
