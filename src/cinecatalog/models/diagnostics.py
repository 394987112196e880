"""Result and diagnostics models for ingestion."""

from dataclasses import dataclass, field
from typing import Optional

from cinecatalog.models.media import Media, RawRecord


@dataclass
class ParseDiagnostics:
    """Counters collected while parsing lenient text."""

    fragments: int = 0  # Candidate objects examined by the line scanner
    failed: int = 0  # Fragments that could not be parsed
    rejected: int = 0  # Parsed objects without id or title
    used_fallback: bool = False
    reasons: list[str] = field(default_factory=list)

    @property
    def skipped(self) -> int:
        """Total records lost during parsing."""
        return self.failed + self.rejected


@dataclass
class ParseResult:
    """Records produced by the lenient parser."""

    records: list[RawRecord] = field(default_factory=list)
    diagnostics: ParseDiagnostics = field(default_factory=ParseDiagnostics)

    def __len__(self) -> int:
        return len(self.records)


@dataclass
class NormalizeResult:
    """Media produced from a batch of raw records."""

    media: list[Media] = field(default_factory=list)
    skipped: int = 0
    reasons: list[str] = field(default_factory=list)


@dataclass
class ImportResult:
    """Outcome of a bulk import. Partial success is normal."""

    success: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=list)
    total: int = 0

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "success": self.success,
            "failed": self.failed,
            "errors": list(self.errors),
        }

    def __str__(self) -> str:
        """Human-readable representation."""
        return f"Imported {self.success}/{self.total} ({self.failed} failed)"


@dataclass
class ValidationResult:
    """Outcome of a strict JSON validation."""

    is_valid: bool
    error: Optional[str] = None
    items: list[RawRecord] = field(default_factory=list)
