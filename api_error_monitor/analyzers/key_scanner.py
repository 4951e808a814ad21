"""
Candidate-key scanning.

Finds the JSON key used in a subscript access such as ``json['price']``
inside diagnostic text or a source line, rejecting tokens that are type
names or fragments of the diagnostic phrase itself.

Pattern families, tried in order:
1. Assignment-qualified subscript: ``price: json['price']`` or
   ``price = data["price"]``
2. Bare subscript: ``json['price']``
3. Declaration-qualified subscript: ``final price = json['price']``
"""

from typing import AbstractSet, Iterable, Iterator, Optional, Sequence, Set
import re

from api_error_monitor.models.error_info import TypePair


# Names that stand for "the object being destructured"
CONTAINER_NAMES = ("data", "json", "map", "response")

PRIMITIVE_TYPE_NAMES = frozenset({
    "int", "String", "double", "bool", "num", "List", "Map", "dynamic",
    "null", "Null",
    # Python spellings
    "str", "float", "list", "dict", "None", "NoneType", "Any",
})

# A candidate containing one of these leaked from the diagnostic phrase
_PHRASE_FRAGMENTS = ("type", "subtype", "cast")

_CONTAINER = r"(?:" + "|".join(CONTAINER_NAMES) + r")"
_QUOTED_KEY = r"""(?:'(?P<sq>[^']+)'|"(?P<dq>[^"]+)")"""
_SUBSCRIPT = _CONTAINER + r"\s*\[\s*" + _QUOTED_KEY + r"\s*\]"

ASSIGNMENT_SUBSCRIPT = re.compile(
    r"(?P<ident>\w+)\s*[:=]\s*" + _SUBSCRIPT,
    re.IGNORECASE,
)

BARE_SUBSCRIPT = re.compile(_SUBSCRIPT, re.IGNORECASE)

DECLARATION_SUBSCRIPT = re.compile(
    r"\b(?:final|var|const|let)\s+(?P<ident>\w+)\s*=\s*" + _SUBSCRIPT,
    re.IGNORECASE,
)

# Container-agnostic: any (dotted) name being subscripted
ANY_ASSIGNMENT_SUBSCRIPT = re.compile(
    r"(?P<ident>\w+)\s*[:=]\s*\w+(?:\.\w+)*\s*\[\s*" + _QUOTED_KEY + r"\s*\]",
)


def build_exclusions(type_pair: Optional[TypePair] = None) -> Set[str]:
    """
    Build the per-extraction set of strings that are never field names.

    Args:
        type_pair: Types found in this extraction pass, if any

    Returns:
        Fresh mutable set seeded with primitive type names
    """
    exclusions = set(PRIMITIVE_TYPE_NAMES)
    if type_pair is not None:
        for type_name in (type_pair.received_type, type_pair.expected_type):
            if type_name:
                exclusions.add(type_name)
    return exclusions


def is_valid_candidate(token: Optional[str], exclusions: AbstractSet[str]) -> bool:
    """
    Check whether a token is a plausible JSON key.

    Args:
        token: Extracted token (may be None)
        exclusions: Type names that must never be accepted

    Returns:
        True if the token passes every filter
    """
    if token is None:
        return False
    token = token.strip()
    if len(token) <= 1:
        return False
    if token in exclusions:
        return False
    return not any(fragment in token for fragment in _PHRASE_FRAGMENTS)


def _quoted_key(match: re.Match) -> Optional[str]:
    key = match.group("sq")
    if key is None:
        key = match.group("dq")
    return key.strip() if key is not None else None


def _first_valid(candidates: Iterable[Optional[str]], exclusions: AbstractSet[str]) -> Optional[str]:
    for candidate in candidates:
        if is_valid_candidate(candidate, exclusions):
            return candidate.strip()
    return None


def _assignment_candidates(pattern: re.Pattern, line: str) -> Iterator[Optional[str]]:
    # Subscript key first, then the left-hand identifier
    for match in pattern.finditer(line):
        yield _quoted_key(match)
        yield match.group("ident")


def _subscript_candidates(line: str) -> Iterator[Optional[str]]:
    for match in BARE_SUBSCRIPT.finditer(line):
        yield _quoted_key(match)


def _declaration_candidates(line: str) -> Iterator[Optional[str]]:
    for match in DECLARATION_SUBSCRIPT.finditer(line):
        yield _quoted_key(match)


def _known_assignment_candidates(line: str) -> Iterator[Optional[str]]:
    return _assignment_candidates(ASSIGNMENT_SUBSCRIPT, line)


PATTERN_FAMILIES = (
    _known_assignment_candidates,
    _subscript_candidates,
    _declaration_candidates,
)


def scan_line(line: str, exclusions: AbstractSet[str]) -> Optional[str]:
    """
    Return the first plausible JSON key in a line of text.

    Args:
        line: One line of diagnostic text or source code (or a whole corpus)
        exclusions: Type names that must never be accepted

    Returns:
        Candidate key, or None
    """
    if not line:
        return None

    for family in PATTERN_FAMILIES:
        key = _first_valid(family(line), exclusions)
        if key is not None:
            return key

    return None


def scan_lines(lines: Sequence[str], exclusions: AbstractSet[str]) -> Optional[str]:
    """
    Scan several lines, family by family.

    Every line is tried with the assignment family before any line is
    tried with the bare-subscript family, so ``price: json['price']`` wins
    over a bare ``json['id']`` on an earlier line.

    Args:
        lines: Lines to scan, in text order
        exclusions: Type names that must never be accepted

    Returns:
        Candidate key, or None
    """
    for family in PATTERN_FAMILIES:
        for line in lines:
            if not line:
                continue
            key = _first_valid(family(line), exclusions)
            if key is not None:
                return key

    return None


def scan_assignment(line: str, exclusions: AbstractSet[str]) -> Optional[str]:
    """
    Scan for ``field: anything['key']`` without requiring a known container.

    The subscript key is preferred over the left-hand identifier.

    Args:
        line: One line of text
        exclusions: Type names that must never be accepted

    Returns:
        Candidate key, or None
    """
    if not line:
        return None
    return _first_valid(_assignment_candidates(ANY_ASSIGNMENT_SUBSCRIPT, line), exclusions)
