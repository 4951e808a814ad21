"""Error-message forensics: classification, type-pair and key extraction."""

from api_error_monitor.analyzers.classifier import (
    classify_error,
    format_stack_trace,
    is_network_noise,
    mentions_type_words,
)
from api_error_monitor.analyzers.error_parser import ErrorParser, parse_error
from api_error_monitor.analyzers.key_scanner import (
    build_exclusions,
    is_valid_candidate,
    scan_assignment,
    scan_line,
    scan_lines,
)
from api_error_monitor.analyzers.message_cleaner import strip_stack_trace
from api_error_monitor.analyzers.type_pairs import (
    clean_type,
    extract_secondary_type_pair,
    extract_type_pair,
)

__all__ = [
    "ErrorParser",
    "parse_error",
    "classify_error",
    "format_stack_trace",
    "is_network_noise",
    "mentions_type_words",
    "build_exclusions",
    "is_valid_candidate",
    "scan_assignment",
    "scan_line",
    "scan_lines",
    "strip_stack_trace",
    "clean_type",
    "extract_secondary_type_pair",
    "extract_type_pair",
]
