"""
Capture-boundary classification of caught errors.

Turns whatever the embedding application caught (an exception, a string,
any other object) into a uniform ClassifiedError once, so extraction never
has to inspect runtime error types itself.
"""

import traceback
from types import TracebackType
from typing import Any, Optional

import httpx

from api_error_monitor.analyzers.type_pairs import NULL_PATTERN, SUBTYPE_PATTERN
from api_error_monitor.models.error_info import ClassifiedError, ErrorKind


# Message fragments of transport failures across common HTTP stacks
NETWORK_MARKERS = (
    "DioException",
    "SocketException",
    "ClientException",
    "HandshakeException",
    "Connection refused",
    "Connection reset",
    "Failed host lookup",
    "Network is unreachable",
    "timed out",
)

# Wording that marks a message as a parsing/type failure
TYPE_WORDS = ("type", "subtype", "cast")

_NETWORK_ERROR_TYPES = (httpx.TransportError, ConnectionError, TimeoutError)


def mentions_type_words(message: str) -> bool:
    """Return True if the message carries type-related wording."""
    lowered = message.lower()
    return any(word in lowered for word in TYPE_WORDS)


def _root_cause(error: BaseException) -> Optional[BaseException]:
    cause = error.__cause__ or error.__context__
    seen = {id(error)}
    while cause is not None and id(cause) not in seen:
        seen.add(id(cause))
        nxt = cause.__cause__ or cause.__context__
        if nxt is None:
            return cause
        cause = nxt
    return cause


def _kind_from_message(message: str) -> ErrorKind:
    if NULL_PATTERN.search(message) or "NoneType" in message:
        return ErrorKind.NULL_VALUE
    if SUBTYPE_PATTERN.search(message):
        return ErrorKind.TYPE_MISMATCH
    if "key not found" in message.lower():
        return ErrorKind.MISSING_KEY
    if any(marker in message for marker in NETWORK_MARKERS):
        return ErrorKind.NETWORK
    return ErrorKind.UNCLASSIFIED


def classify_error(error: Any) -> ClassifiedError:
    """
    Classify a caught error into a (message, kind) shape.

    A Python ``KeyError`` is rephrased as ``key not found: "<key>"`` so the
    missing-key phrasing applies to it as well.

    Args:
        error: Exception instance, message string, or any object

    Returns:
        ClassifiedError for the extraction components
    """
    if error is None:
        return ClassifiedError(message="", error_type="NoneType")

    if isinstance(error, str):
        return ClassifiedError(message=error, kind=_kind_from_message(error), error_type="str")

    message = str(error)
    error_type = type(error).__name__
    detail = None

    if isinstance(error, BaseException):
        cause = _root_cause(error)
        if cause is not None and str(cause) and str(cause) != message:
            detail = str(cause)

    if isinstance(error, KeyError) and error.args:
        original = message
        message = f'key not found: "{error.args[0]}"'
        return ClassifiedError(
            message=message,
            kind=ErrorKind.MISSING_KEY,
            error_type=error_type,
            detail=detail or original,
        )

    if isinstance(error, _NETWORK_ERROR_TYPES):
        kind = ErrorKind.NETWORK
    else:
        kind = _kind_from_message(message)
        if kind == ErrorKind.UNCLASSIFIED and detail:
            kind = _kind_from_message(detail)
        if kind == ErrorKind.UNCLASSIFIED and isinstance(error, TypeError):
            kind = ErrorKind.TYPE_MISMATCH

    return ClassifiedError(message=message, kind=kind, error_type=error_type, detail=detail)


def is_network_noise(classified: ClassifiedError) -> bool:
    """
    Return True for transport failures that carry no parsing signal.

    Best-effort: a network error whose message mentions types is kept.
    """
    return classified.kind == ErrorKind.NETWORK and not mentions_type_words(classified.message)


def format_stack_trace(stack_trace: Any) -> Optional[str]:
    """
    Render a stack trace argument as text.

    Unrecognized or malformed values fall back to ``str(stack_trace)``.

    Args:
        stack_trace: A string, a traceback object, a StackSummary / list of
            frames, a list of formatted lines (``traceback.format_exception``),
            or None

    Returns:
        Stack trace text, or None
    """
    if stack_trace is None:
        return None
    if isinstance(stack_trace, str):
        return stack_trace or None
    if isinstance(stack_trace, TracebackType):
        return "".join(traceback.format_tb(stack_trace)) or None
    if isinstance(stack_trace, (list, tuple)) and all(isinstance(line, str) for line in stack_trace):
        return "".join(stack_trace) or None
    if isinstance(stack_trace, (list, traceback.StackSummary)):
        try:
            return "".join(traceback.format_list(stack_trace)) or None
        except (TypeError, ValueError, AttributeError):
            return str(stack_trace)
    return str(stack_trace)
