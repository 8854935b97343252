"""Shared pytest fixtures for passgen tests."""

from __future__ import annotations

import io
import sys
from typing import Callable

import pytest


class TerminalStdin(io.StringIO):
    """A stdin stand-in that reports itself as an interactive terminal."""

    def isatty(self) -> bool:
        return True

    def read(self, *args, **kwargs) -> str:
        raise AssertionError("interactive stdin must not be read")


@pytest.fixture
def piped_stdin(monkeypatch: pytest.MonkeyPatch) -> Callable[[str], None]:
    """Replace sys.stdin with a pipe carrying the given text.

    Args:
        monkeypatch: Pytest monkeypatch fixture

    Returns:
        Function taking the text to pipe in
    """

    def _pipe(text: str) -> None:
        stream = io.TextIOWrapper(io.BytesIO(text.encode("utf-8")), encoding="utf-8")
        monkeypatch.setattr(sys, "stdin", stream)

    return _pipe


@pytest.fixture
def terminal_stdin(monkeypatch: pytest.MonkeyPatch) -> TerminalStdin:
    """Replace sys.stdin with an interactive terminal that has no input."""
    stream = TerminalStdin()
    monkeypatch.setattr(sys, "stdin", stream)
    return stream
