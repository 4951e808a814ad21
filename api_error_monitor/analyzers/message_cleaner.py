"""Stack-frame stripping for human-readable error messages."""

import re

FALLBACK_MESSAGE = "Type mismatch error occurred during JSON parsing"

# Shorter results carry nothing beyond the error class name
MIN_MESSAGE_LENGTH = 10

_FRAME_PREFIXES = ("#", "at ", "Traceback (most recent call last)")

_FRAME_FRAGMENTS = (
    "package:",
    "dart:",
    ".dart:",
    "<anonymous closure>",
    "<asynchronous suspension>",
    "MappedListIterable",
    "ListIterator",
    "_GrowableList",
    "List.of",
    "ListIterable",
)

_PYTHON_FRAME = re.compile(r'^\s*File "[^"]+", line \d+')


def is_stack_frame_line(line: str) -> bool:
    """Return True if a line looks like part of a stack trace."""
    stripped = line.strip()
    if stripped.startswith(_FRAME_PREFIXES):
        return True
    if _PYTHON_FRAME.match(line):
        return True
    return any(fragment in line for fragment in _FRAME_FRAGMENTS)


def strip_stack_trace(message: str) -> str:
    """
    Remove stack-trace-shaped lines from an error message.

    Python traceback frames are followed by an indented source line; that
    line is dropped together with its frame.

    Args:
        message: Raw error message, possibly with an embedded trace

    Returns:
        Cleaned message, or a generic fallback when too little is left
    """
    if not message:
        return message

    clean_lines = []
    skip_source_line = False
    for line in message.split("\n"):
        if not line.strip():
            continue
        if skip_source_line and line.startswith((" ", "\t")):
            skip_source_line = False
            continue
        skip_source_line = False
        if is_stack_frame_line(line):
            skip_source_line = _PYTHON_FRAME.match(line) is not None
            continue
        clean_lines.append(line)

    result = "\n".join(clean_lines).strip()
    if len(result) < MIN_MESSAGE_LENGTH:
        return FALLBACK_MESSAGE
    return result


def truncate(text: str, max_length: int) -> str:
    """Truncate text to max_length characters, marking the cut with '...'."""
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."
