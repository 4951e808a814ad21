"""
Development-only source-line lookup.

Resolves a stack-frame locator (``package:shop/models/product.dart:22:18``
or ``File "/src/shop/models.py", line 22``) to a file under an explicit list
of search roots and reads that exact line. Only used when the monitor runs
in development mode; never enabled by default.
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Iterator, List, Optional, Sequence, TypeVar

from api_error_monitor.errors import SourceLookupError
from api_error_monitor.utils.logging import get_logger
from api_error_monitor.utils.resilience import run_with_timeout

logger = get_logger(__name__)

T = TypeVar('T')


DART_LOCATOR = re.compile(r"(?:\(|package:|file://)?([^\s()]+\.dart):(\d+)(?::(\d+))?")
PYTHON_LOCATOR = re.compile(r'File "([^"]+)", line (\d+)')

# Cheap check used by the orchestrator's proximity scan
LOCATOR_MARKER = re.compile(r'\.dart:\d+|File "[^"]+", line \d+')

# Layouts tried under each search root, relative to the locator path
_SOURCE_DIRS = ("lib", "example/lib", "src", "")


@dataclass(frozen=True)
class SourceLocation:
    """A file path and 1-based line number taken from a stack frame."""

    path: str
    line_number: int


def has_locator(line: str) -> bool:
    """Return True if the line carries a source-location marker with a line number."""
    return LOCATOR_MARKER.search(line) is not None


def find_locations(text: str) -> Iterator[SourceLocation]:
    """
    Yield source locations in text order.

    Args:
        text: Diagnostic text

    Yields:
        SourceLocation for every Dart or Python frame locator found
    """
    for line in text.splitlines():
        for pattern in (DART_LOCATOR, PYTHON_LOCATOR):
            match = pattern.search(line)
            if match is None:
                continue
            line_number = int(match.group(2))
            if line_number > 0:
                yield SourceLocation(path=match.group(1), line_number=line_number)
            break


def _relative_candidates(raw_path: str) -> List[Path]:
    path = raw_path
    if path.startswith("file://"):
        path = path[len("file://"):]
    if path.startswith("package:"):
        path = path[len("package:"):]

    candidates = [Path(path)]
    parts = Path(path).parts
    # package:<name>/models/x.dart lives at <root>/lib/models/x.dart
    if len(parts) > 1 and not Path(path).is_absolute():
        candidates.append(Path(*parts[1:]))
    return candidates


class SourceLineLookup:
    """
    Resolve locators against explicit search roots and read source lines.

    Each root is searched directly, then one level of sub-directories
    (a checkout that lives under a workspace folder). The whole lookup is
    bounded by a hard timeout.
    """

    def __init__(self, search_roots: Sequence[str], timeout: float = 2.0):
        """
        Initialize the lookup.

        Args:
            search_roots: Directories that may contain the application source
            timeout: Hard timeout in seconds for one lookup
        """
        self.search_roots = [Path(root).expanduser() for root in search_roots]
        self.timeout = timeout

    def resolve(self, raw_path: str) -> Path:
        """
        Resolve a locator path to an existing file under a search root.

        Args:
            raw_path: Path as written in the stack frame

        Returns:
            Existing file path

        Raises:
            SourceLookupError: If no search root contains the file
        """
        candidates = _relative_candidates(raw_path)

        for root in self.search_roots:
            if not root.is_dir():
                continue
            resolved_root = root.resolve()

            for candidate in candidates:
                if candidate.is_absolute():
                    if candidate.is_file() and resolved_root in candidate.resolve().parents:
                        return candidate
                    continue

                for base in self._bases(root):
                    for source_dir in _SOURCE_DIRS:
                        path = base / source_dir / candidate if source_dir else base / candidate
                        # ".." segments must not leave the search root
                        if path.is_file() and resolved_root in path.resolve().parents:
                            return path

        raise SourceLookupError(f"Could not resolve source path: {raw_path}")

    def _bases(self, root: Path) -> Iterator[Path]:
        yield root
        try:
            for child in sorted(root.iterdir()):
                if child.is_dir() and not child.name.startswith("."):
                    yield child
        except OSError as e:
            logger.debug(f"Cannot list search root {root}: {e}")

    @staticmethod
    def read_line(path: Path, line_number: int) -> str:
        """
        Read one 1-based line from a source file.

        Raises:
            SourceLookupError: If the file is unreadable or too short
        """
        try:
            lines = path.read_text(encoding="utf-8", errors="replace").splitlines()
        except OSError as e:
            raise SourceLookupError(f"Error reading {path}: {e}") from e

        if line_number > len(lines):
            raise SourceLookupError(
                f"Line number {line_number} exceeds file length {len(lines)}"
            )
        return lines[line_number - 1]

    def _lookup(self, text: str, extract: Optional[Callable[[str], Optional[T]]]) -> Optional[Any]:
        for location in find_locations(text):
            try:
                path = self.resolve(location.path)
                source_line = self.read_line(path, location.line_number)
            except SourceLookupError as e:
                logger.debug(str(e))
                continue

            logger.debug(f"Read {path.name}:{location.line_number}: {source_line.strip()}")
            if extract is None:
                return source_line
            value = extract(source_line)
            if value is not None:
                return value

        return None

    def lookup(
        self,
        text: str,
        extract: Optional[Callable[[str], Optional[T]]] = None,
    ) -> Optional[Any]:
        """
        Read the source lines behind the locators in text, in text order.

        Without ``extract`` the first resolvable line is returned. With it,
        every resolvable line is passed to ``extract`` until one yields a
        value; Python tracebacks list the outermost frame first, so the
        failing line is usually not the first one.

        Args:
            text: Diagnostic text
            extract: Optional callable applied to each source line

        Returns:
            The source line or extracted value, or None if nothing matched
            within the timeout
        """
        if not self.search_roots or not text:
            return None
        return run_with_timeout(lambda: self._lookup(text, extract), self.timeout)
