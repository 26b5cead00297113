"""Metadata models for directory watches."""

from datetime import datetime, timezone
from typing import List, Optional
from dataclasses import dataclass, field

# git on Windows creates and unlinks this file constantly
DEFAULT_IGNORE_PATTERNS = [".git/index.lock"]


@dataclass
class WatchMetadata:
    """Metadata for a single non-recursive directory watch."""

    watch_id: str
    path: str
    is_active: bool = False
    ignore_patterns: Optional[List[str]] = field(
        default_factory=lambda: list(DEFAULT_IGNORE_PATTERNS)
    )
    recursive: bool = False
    created_at: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )

    def __post_init__(self) -> None:
        """Ensure ignore patterns are a list if None."""
        if self.ignore_patterns is None:
            self.ignore_patterns = list(DEFAULT_IGNORE_PATTERNS)
