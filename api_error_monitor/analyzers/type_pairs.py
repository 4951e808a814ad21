"""
Type-pair extraction from diagnostic text.

Pulls the received/expected type pair out of runtime type-cast failures
phrased as ``type 'A' is not a subtype of type 'B'``.
"""

import re
from typing import Optional, Sequence, Tuple

from api_error_monitor.models.error_info import TypePair


SUBTYPE_PATTERN = re.compile(
    r"type '([^']+)' is not a subtype of type '([^']+)'",
    re.IGNORECASE,
)

CAST_PATTERN = re.compile(
    r"type '([^']+)' is not a subtype of type '([^']+)' in type cast",
    re.IGNORECASE,
)

NULL_PATTERN = re.compile(
    r"type 'null' is not a subtype of type '([^']+)'",
    re.IGNORECASE,
)

# Namespace prefixes that carry no information for a reader
_TYPE_PREFIXES: Tuple[str, ...] = (
    "dart.core.",
    "dart.collection.",
    "builtins.",
    "typing.",
)

_GENERIC_SUFFIX = re.compile(r"<.*>")


def clean_type(type_name: Optional[str]) -> Optional[str]:
    """
    Normalize a captured type name for presentation.

    Strips namespace prefixes and generic parameters:
    ``dart.core.List<dynamic>`` becomes ``List``.

    Args:
        type_name: Raw captured type string

    Returns:
        Cleaned type name, or None when nothing is left
    """
    if type_name is None:
        return None

    cleaned = type_name
    for prefix in _TYPE_PREFIXES:
        cleaned = cleaned.replace(prefix, "")
    cleaned = _GENERIC_SUFFIX.sub("", cleaned).strip()

    return cleaned or None


def _match_cast(text: str) -> TypePair:
    match = CAST_PATTERN.search(text)
    if match is None:
        return TypePair()
    return TypePair(
        received_type=clean_type(match.group(1)),
        expected_type=clean_type(match.group(2)),
    )


def _match_null(text: str) -> TypePair:
    match = NULL_PATTERN.search(text)
    if match is None:
        return TypePair()
    return TypePair(received_type="null", expected_type=clean_type(match.group(1)))


def _match_subtype(text: str) -> TypePair:
    match = SUBTYPE_PATTERN.search(text)
    if match is None:
        return TypePair()
    return TypePair(
        received_type=clean_type(match.group(1)),
        expected_type=clean_type(match.group(2)),
    )


# Ordered specific to general
_PRIMARY_TEMPLATES = (_match_cast, _match_null, _match_subtype)
_SECONDARY_TEMPLATES = (_match_null, _match_cast)


def _run_templates(text: str, templates: Sequence) -> TypePair:
    pair = TypePair()
    if not text:
        return pair

    for template in templates:
        pair = pair.fill_missing(template(text))
        if pair.is_complete:
            break

    return pair


def extract_type_pair(text: str) -> TypePair:
    """
    Extract the (received, expected) type pair from diagnostic text.

    The first matching template sets the pair; later templates only fill
    fields that are still empty.

    Args:
        text: Diagnostic text

    Returns:
        TypePair with either field possibly None
    """
    return _run_templates(text, _PRIMARY_TEMPLATES)


def extract_secondary_type_pair(text: str) -> TypePair:
    """
    Match only the explicit-null and cast-qualified phrasings.

    Args:
        text: Diagnostic text

    Returns:
        TypePair with either field possibly None
    """
    return _run_templates(text, _SECONDARY_TEMPLATES)
