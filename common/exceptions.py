"""Shared exception classes for passgen."""

from __future__ import annotations


class PassgenError(Exception):
    """Base exception for all passgen errors."""

    exit_code = 1


class UsageError(PassgenError):
    """Conflicting or invalid command-line options."""

    exit_code = 2


class EmptyCandidateSetError(PassgenError):
    """No characters are left to build a password from."""

    exit_code = 2


class RandomSourceError(PassgenError):
    """The cryptographically secure random source failed."""

    exit_code = 1
