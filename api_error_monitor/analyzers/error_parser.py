"""
Extraction orchestrator.

Reverse-engineers the offending JSON key and the received/expected type
pair from an error's diagnostic text. Heuristics run in a fixed cascade of
decreasing reliability and the first one that produces a key wins:

1. Missing-key phrasing: ``key not found: "price"``
2. Subscript scan over every line of the corpus
3. Subscript scan in a window around each stack-frame locator
4. Assignment scan without a known container name
5. Source-line lookup (development mode only)

Extraction never raises. An all-empty ApiErrorInfo means the text did not
carry enough information.
"""

import logging
import re
from typing import Any, List, Optional, Sequence, Set, Union

from api_error_monitor.analyzers.classifier import classify_error
from api_error_monitor.analyzers.key_scanner import (
    build_exclusions,
    scan_assignment,
    scan_line,
    scan_lines,
)
from api_error_monitor.analyzers.source_lookup import SourceLineLookup, has_locator
from api_error_monitor.analyzers.type_pairs import (
    extract_secondary_type_pair,
    extract_type_pair,
)
from api_error_monitor.models.error_info import ApiErrorInfo, ClassifiedError
from api_error_monitor.utils.logging import get_logger


KEY_NOT_FOUND_PATTERN = re.compile(
    r"""key not found[:\s]+["']?([^"'\n]+)["']?""",
    re.IGNORECASE,
)

# Proximity window around a stack-frame locator line
LINES_BEFORE_LOCATOR = 5
LINES_AFTER_LOCATOR = 2


def _preview(text: str, limit: int = 200) -> str:
    return text if len(text) <= limit else text[:limit] + "..."


class ErrorParser:
    """
    Parse diagnostic text into key / expected type / received type.

    Instances hold configuration only; every call to ``parse`` builds its
    own exclusion set, so a parser can be shared between concurrent captures.
    """

    def __init__(
        self,
        development_mode: bool = False,
        source_search_roots: Sequence[str] = (),
        source_lookup_timeout: float = 2.0,
        logger: Optional[logging.LoggerAdapter] = None,
    ):
        """
        Initialize the parser.

        Args:
            development_mode: Enables the source-line lookup
            source_search_roots: Directories searched by the source-line lookup
            source_lookup_timeout: Hard timeout in seconds for the lookup
            logger: Logger for extraction decisions (DEBUG level)
        """
        self.development_mode = development_mode
        self.logger = logger or get_logger(__name__)
        self._source_lookup = None
        if development_mode and source_search_roots:
            self._source_lookup = SourceLineLookup(
                source_search_roots,
                timeout=source_lookup_timeout,
            )

    def parse(self, error: Union[ClassifiedError, Any], diagnostic_text: str) -> ApiErrorInfo:
        """
        Extract key and type information from an error.

        Args:
            error: The caught error, or its ClassifiedError
            diagnostic_text: Error message plus stack trace

        Returns:
            ApiErrorInfo, possibly with every field None
        """
        try:
            return self._parse(error, diagnostic_text or "")
        except Exception as e:
            self.logger.warning(f"Error extraction failed: {e}", exc_info=True)
            return ApiErrorInfo()

    def _parse(self, error: Any, text: str) -> ApiErrorInfo:
        self.logger.debug(f"Parsing error text: {_preview(text)}")

        type_pair = extract_type_pair(text)
        exclusions = build_exclusions(type_pair)
        self.logger.debug(
            f"Extracted types - received: {type_pair.received_type}, "
            f"expected: {type_pair.expected_type}"
        )

        key = self.extract_key(text, exclusions)

        # Secondary phrasings only fill what is still empty
        type_pair = type_pair.fill_missing(extract_secondary_type_pair(text))

        own_texts = self._own_diagnostics(error, text)
        for own_text in own_texts:
            if type_pair.is_complete:
                break
            type_pair = type_pair.fill_missing(extract_type_pair(own_text))

        if key is None:
            for own_text in own_texts:
                key = self._key_not_found(own_text)
                if key is not None:
                    break

        info = ApiErrorInfo(
            key=key,
            expected_type=type_pair.expected_type,
            received_type=type_pair.received_type,
        )
        self.logger.debug(
            f"Final extraction - key: {info.key}, expected: {info.expected_type}, "
            f"received: {info.received_type}"
        )
        return info

    def extract_key(self, text: str, exclusions: Set[str]) -> Optional[str]:
        """
        Run the key cascade over diagnostic text.

        Args:
            text: Diagnostic text
            exclusions: Type names that must never be accepted

        Returns:
            Candidate key, or None
        """
        if not text:
            return None

        key = self._key_not_found(text)
        if key is not None:
            self.logger.debug(f"Key from missing-key phrasing: {key}")
            return key

        lines = text.split("\n")

        key = scan_lines(lines, exclusions)
        if key is not None:
            self.logger.debug(f"Key from subscript scan: {key}")
            return key

        key = self._scan_near_locators(lines, exclusions)
        if key is not None:
            self.logger.debug(f"Key from lines near a stack frame: {key}")
            return key

        for line in lines:
            key = scan_assignment(line, exclusions)
            if key is not None:
                self.logger.debug(f"Key from assignment: {key}")
                return key

        if self._source_lookup is not None:
            key = self._source_lookup.lookup(text, lambda line: scan_line(line, exclusions))
            if key is not None:
                self.logger.debug(f"Key from source file: {key}")
                return key

        self.logger.debug("Could not extract key; pass it explicitly to capture()")
        return None

    @staticmethod
    def _key_not_found(text: str) -> Optional[str]:
        match = KEY_NOT_FOUND_PATTERN.search(text)
        if match is None:
            return None
        key = match.group(1).strip()
        return key or None

    @staticmethod
    def _scan_near_locators(lines: List[str], exclusions: Set[str]) -> Optional[str]:
        for index, line in enumerate(lines):
            if not has_locator(line):
                continue
            start = max(index - LINES_BEFORE_LOCATOR, 0)
            end = min(index + LINES_AFTER_LOCATOR, len(lines) - 1)
            for nearby in lines[start:end + 1]:
                key = scan_line(nearby, exclusions)
                if key is not None:
                    return key
        return None

    @staticmethod
    def _own_diagnostics(error: Any, text: str) -> List[str]:
        if error is None:
            return []
        classified = error if isinstance(error, ClassifiedError) else classify_error(error)
        candidates = []
        for own_text in (classified.message, classified.detail):
            if own_text and own_text != text and own_text not in candidates:
                candidates.append(own_text)
        return candidates


_default_parser = ErrorParser()


def parse_error(error: Any, diagnostic_text: str) -> ApiErrorInfo:
    """
    Extract key and type information with a production-mode parser.

    Args:
        error: The caught error, or its ClassifiedError
        diagnostic_text: Error message plus stack trace

    Returns:
        ApiErrorInfo, possibly with every field None
    """
    return _default_parser.parse(error, diagnostic_text)
