"""
Stack text parser.

Recovers a Stacks object from either encoding produced by this library
(JSON or the human-readable console form) and, as a fallback, from
CPython's own traceback printout.
"""

import logging
import re
from typing import List

from pydantic import ValidationError

from stackerr.models import Frame, Stack, Stacks

logger = logging.getLogger(__name__)


# A function line followed by an indented "file:line" line
CONSOLE_STACK_PATTERN = re.compile(r"^[ \t]*([^\n]+)\n[ \t]+([^\n]+):([0-9]+)[ \t]*$", re.MULTILINE)

# One entry of a CPython traceback printout
PYTHON_TRACEBACK_PATTERN = re.compile(r'^[ \t]*File "([^"\n]+)", line ([0-9]+), in ([^\n]+?)[ \t]*$', re.MULTILINE)

BLANK_LINE_PATTERN = re.compile(r"\n[ \t]*\n")


def _parse_json(text: str) -> Stacks:
    stacks = Stacks.model_validate_json(text)
    # A structurally valid decode of unrelated JSON has no file names
    if len(stacks) > 0 and len(stacks[0]) > 0 and stacks[0][0].file != "":
        return stacks
    raise ValueError("decoded JSON does not describe stacks")


def _parse_console_block(block: str) -> List[Frame]:
    return [
        Frame(function=match.group(1), file=match.group(2), line=int(match.group(3)))
        for match in CONSOLE_STACK_PATTERN.finditer(block)
    ]


def _parse_traceback_block(block: str) -> List[Frame]:
    frames = [
        Frame(function=match.group(3), file=match.group(1), line=int(match.group(2)))
        for match in PYTHON_TRACEBACK_PATTERN.finditer(block)
    ]
    # Tracebacks print the most recent call last
    frames.reverse()
    return frames


def parse_stacks(text: str) -> Stacks:
    """
    Parse a stack string into a Stacks object.

    The input can be in JSON, human-readable (console) or CPython traceback
    format. Blocks without any recognizable frame are skipped.

    Args:
        text: Text holding one or more stacks

    Returns:
        Parsed stacks, empty if nothing was recognized
    """
    try:
        return _parse_json(text)
    except (ValidationError, ValueError) as e:
        logger.debug(f"Input is not JSON stacks, falling back to text parsing: {e}")

    text = text.replace("\r", "")

    stacks = []
    for block in BLANK_LINE_PATTERN.split(text):
        frames = _parse_console_block(block)
        if not frames:
            frames = _parse_traceback_block(block)
        if not frames:
            continue
        stacks.append(Stack(tuple(frames)))

    return Stacks(stacks)
