"""Secure password generator CLI with a user-editable character set.

Passwords are drawn with `secrets` from the default alphanumeric alphabet.
Characters piped on stdin or passed as positional arguments can be added to
(`-a`), removed from (`-d`) or, with neither flag, used instead of the default
alphabet.
"""

from __future__ import annotations

import argparse
import logging
import secrets
import string
import sys
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from common.cli_helpers import (
    add_log_level_argument,
    decode_argument,
    read_piped_stdin,
    setup_logging,
)
from common.exceptions import (
    EmptyCandidateSetError,
    PassgenError,
    RandomSourceError,
    UsageError,
)

logger = logging.getLogger(__name__)


DEFAULT_ALPHABET = string.ascii_lowercase + string.ascii_uppercase + string.digits
DEFAULT_LENGTH = 8
DEFAULT_NUMBER = 1

# Long spellings accepted as `--name`, `--name=value` or `-name`.
VALUE_OPTIONS: Dict[str, str] = {
    "length": "-l",
    "l": "-l",
    "number": "-n",
    "n": "-n",
}
SWITCH_OPTIONS: Dict[str, str] = {
    "add": "-a",
    "a": "-a",
    "delete": "-d",
    "d": "-d",
    "help": "-h",
    "h": "-h",
}

TRUE_LITERALS = {"1", "t", "T", "true", "TRUE", "True"}
FALSE_LITERALS = {"0", "f", "F", "false", "FALSE", "False"}

# Normalized flags whose value is the next token.
TAKES_VALUE = {"-l", "-n", "--log-level"}


class Mode(Enum):
    """How provided characters combine with the default alphabet."""

    AUGMENT = "augment"
    SUBTRACT = "subtract"
    REPLACE = "replace"
    DEFAULT = "default"


def dedupe(text: str) -> str:
    """Drop repeated characters, keeping first occurrences in order."""
    seen = set()
    kept: List[str] = []
    for ch in text:
        if ch not in seen:
            seen.add(ch)
            kept.append(ch)
    return "".join(kept)


def strip_newlines(text: str) -> str:
    return text.replace("\r\n", "").replace("\n", "").replace("\r", "")


def select_mode(add: bool, delete: bool, provided: str) -> Mode:
    """Pick the charset mode from the flags and the provided characters.

    Raises:
        UsageError: If both add and delete are requested
    """
    if add and delete:
        raise UsageError("-a/--add and -d/--delete cannot be used together")
    if add:
        return Mode.AUGMENT
    if delete:
        return Mode.SUBTRACT
    if provided:
        return Mode.REPLACE
    return Mode.DEFAULT


def build_charset(default_alphabet: str, provided: str, mode: Mode) -> str:
    """Build the candidate characters for `mode`.

    The result may be empty (e.g. every default character was subtracted);
    callers must check before sampling.
    """
    if mode is Mode.AUGMENT:
        return dedupe(default_alphabet + provided)
    if mode is Mode.SUBTRACT:
        removed = set(provided)
        return "".join(ch for ch in dedupe(default_alphabet) if ch not in removed)
    if mode is Mode.REPLACE:
        return dedupe(provided)
    return dedupe(default_alphabet)


def generate_password(length: int, candidates: str) -> str:
    """Draw `length` characters uniformly from `candidates`.

    `secrets.randbelow` rejection-samples the OS entropy source, so there is
    no modulo bias when the candidate count is not a power of two.

    Raises:
        ValueError: If length is below 1
        EmptyCandidateSetError: If there are no candidates
        RandomSourceError: If the secure random source fails
    """
    if length < 1:
        raise ValueError("length must be >= 1")
    if not candidates:
        raise EmptyCandidateSetError("No characters available to generate from")

    size = len(candidates)
    chars: List[str] = []
    for _ in range(length):
        try:
            index = secrets.randbelow(size)
        except (OSError, NotImplementedError) as ex:
            raise RandomSourceError(f"Secure random source failed: {ex}") from ex
        chars.append(candidates[index])
    return "".join(chars)


def normalize_long_options(argv: Sequence[str]) -> List[str]:
    """Rewrite long option spellings into their short forms.

    `--length=12` becomes `-l 12`, `--add` and `-add` become `-a`, and
    `--add=false` is dropped. Unknown options and anything after `--` are
    left alone for the parser to deal with.
    """
    out: List[str] = []
    args = iter(argv)
    for arg in args:
        if arg == "--":
            out.append(arg)
            out.extend(args)
            break
        if not arg.startswith("-") or arg == "-":
            out.append(arg)
            continue

        body = arg[2:] if arg.startswith("--") else arg[1:]
        name, eq, value = body.partition("=")
        # `-l5` and friends are already short; only rewrite whole long names
        # and `-x=value`.
        if not arg.startswith("--") and len(name) < 2 and not eq:
            out.append(arg)
            continue

        if name in VALUE_OPTIONS:
            out.append(VALUE_OPTIONS[name])
            if eq:
                out.append(value)
        elif name in SWITCH_OPTIONS:
            if not eq or value in TRUE_LITERALS:
                out.append(SWITCH_OPTIONS[name])
            elif value not in FALSE_LITERALS:
                out.append(arg)
        else:
            out.append(arg)
    return out


def split_flag_arguments(argv: Sequence[str]) -> Tuple[List[str], List[str]]:
    """Split normalized arguments into flags and leftover characters.

    Flag parsing stops at the first token that is not a flag (a lone `-`
    counts as a character) or right after a bare `--`. Everything from there
    on is character input, even if it looks like an option.
    """
    index = 0
    while index < len(argv):
        arg = argv[index]
        if arg == "--":
            return list(argv[:index]), list(argv[index + 1 :])
        if not arg.startswith("-") or arg == "-":
            break
        index += 2 if arg in TAKES_VALUE else 1
    return list(argv[:index]), list(argv[index:])


def parse_arguments(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="passgen",
        add_help=False,
        allow_abbrev=False,
        description="Generate random passwords from a configurable character set.",
        epilog=(
            "Characters piped on stdin and positional CHARS are combined. "
            "With -a they are added to the default alphabet [a-zA-Z0-9], "
            "with -d they are removed from it, and with neither flag they "
            "replace it."
        ),
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "chars", nargs="*", default=[], help="Characters to add, remove or use"
    )
    parser.add_argument(
        "-l", "--length", type=int, default=DEFAULT_LENGTH, help="Password length"
    )
    parser.add_argument(
        "-n",
        "--number",
        type=int,
        default=DEFAULT_NUMBER,
        help="Number of passwords to generate",
    )
    parser.add_argument(
        "-a",
        "--add",
        action="store_true",
        help="Add the provided characters to the default alphabet",
    )
    parser.add_argument(
        "-d",
        "--delete",
        action="store_true",
        help="Remove the provided characters from the default alphabet",
    )
    parser.add_argument(
        "-h", "--help", action="store_true", help="Show this help and exit"
    )
    add_log_level_argument(parser)

    if argv is None:
        argv = sys.argv[1:]
    flags, chars = split_flag_arguments(normalize_long_options(argv))
    args = parser.parse_args(flags)
    if args.help:
        # -h exits 2 with usage on stderr, like a flag error.
        parser.print_help(sys.stderr)
        parser.exit(2)
    args.chars = [decode_argument(arg) for arg in chars]
    return args


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_arguments(argv)
    setup_logging(args.log_level)

    length = max(1, args.length)
    number = max(1, args.number)
    if (length, number) != (args.length, args.number):
        logger.debug(
            f"Clamped length={args.length} number={args.number} "
            f"to length={length} number={number}"
        )

    try:
        provided = strip_newlines(read_piped_stdin() + "".join(args.chars))
        mode = select_mode(args.add, args.delete, provided)
        candidates = build_charset(DEFAULT_ALPHABET, provided, mode)
        logger.debug(f"Mode {mode.value}: {len(candidates)} candidate characters")
        if not candidates:
            raise EmptyCandidateSetError(
                "Character set is empty (every character was removed)"
            )

        for _ in range(number):
            print(generate_password(length, candidates))
    except PassgenError as ex:
        logger.error(str(ex))
        return ex.exit_code

    return 0


if __name__ == "__main__":
    sys.exit(main())
