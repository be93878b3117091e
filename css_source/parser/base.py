"""
Parse results, parser errors and safe source file reading.

Defines the data structure handed from the parse step to the source code
model, along with the exception hierarchy used by the parsers.
"""

import hashlib
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import chardet

from ..models.nodes import Comment, StyleSheet

logger = logging.getLogger(__name__)

DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB


@dataclass
class ParseResult:
    """
    Result of parsing one stylesheet.

    ``ast`` is None when parsing failed outright or when syntax errors were
    found and the caller asked for a strict parse.
    """
    # Source information
    file_path: Optional[Path] = None
    language: str = "css"
    text: str = ""

    # Extracted data
    ast: Optional[StyleSheet] = None
    comments: List[Comment] = field(default_factory=list)

    # Performance metrics
    parse_time: float = 0.0  # Seconds
    file_size: int = 0  # Bytes
    file_hash: str = ""

    # Version information
    tree_sitter_version: str = ""
    parser_version: str = ""

    # Error tracking
    syntax_errors: List[Dict[str, Any]] = field(default_factory=list)
    error_recovery_applied: bool = False
    warnings: List[str] = field(default_factory=list)

    # Timestamps
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def ok(self) -> bool:
        """Check if a usable tree was produced without syntax errors"""
        return self.ast is not None and len(self.syntax_errors) == 0

    def add_warning(self, message: str) -> None:
        """Add a warning message"""
        self.warnings.append(message)

    def add_syntax_error(self, error: Dict[str, Any]) -> None:
        """Add a syntax error"""
        self.syntax_errors.append(error)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "file_path": str(self.file_path) if self.file_path else None,
            "language": self.language,
            "ok": self.ok,
            "comment_count": len(self.comments),
            "errors": len(self.syntax_errors),
            "warnings": len(self.warnings),
            "parse_time_ms": self.parse_time * 1000,
            "created_at": self.created_at.isoformat()
        }


def read_source_file(
    file_path: Path,
    max_size: int = DEFAULT_MAX_FILE_SIZE
) -> Tuple[str, str, int]:
    """
    Read a stylesheet with encoding detection.

    A leading byte order mark is stripped.

    Returns:
        (content, file_hash, file_size)

    Raises:
        ValueError: If the file cannot be read or exceeds ``max_size``
    """
    try:
        file_size_bytes = file_path.stat().st_size
    except OSError as e:
        raise ValueError(f"Cannot read file stats: {e}") from e

    if file_size_bytes > max_size:
        raise ValueError(f"File too large: {file_size_bytes} bytes")

    raw_content = file_path.read_bytes()

    encodings_to_try = ['utf-8-sig', 'latin-1']

    detected = chardet.detect(raw_content[:8192])
    if detected['encoding'] and detected['confidence'] > 0.7:
        detected_encoding = detected['encoding'].lower()
        if detected_encoding not in ('ascii', 'utf-8', 'utf-8-sig', 'latin-1'):
            encodings_to_try.insert(1, detected_encoding)

    for encoding in encodings_to_try:
        try:
            content = raw_content.decode(encoding)
        except (UnicodeDecodeError, LookupError):
            continue

        if encoding != 'utf-8-sig':
            logger.warning(f"{file_path} is not valid UTF-8, decoded as {encoding}")

        content = content.lstrip('\ufeff')
        file_hash = hashlib.sha256(raw_content).hexdigest()[:16]
        return content, file_hash, len(raw_content)

    raise ValueError(f"Unable to decode {file_path}")


# Error types for parser exceptions
class ParseError(Exception):
    """Base class for parsing errors"""
    pass


class TreeSitterError(ParseError):
    """Raised when the Tree-sitter grammar cannot be loaded or run"""
    pass
