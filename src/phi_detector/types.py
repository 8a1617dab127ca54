"""Core types."""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum


class Category(str, Enum):
    """Kinds of PHI the detector knows how to find and mask."""
    SSN = "SSN"            # US social security number, 123-45-6789
    MRN = "MRN"            # medical record number, 8-12 digits
    ICD10 = "ICD10"        # diagnosis code, e.g. B99.8
    DOB = "DOB"            # date of birth
    NIK = "NIK"            # Indonesian national ID, 16 digits
    BPJS = "BPJS"          # Indonesian health insurance number, 13 digits

    @classmethod
    def parse(cls, value: str | Category) -> Category:
        if isinstance(value, cls):
            return value
        key = str(value).strip().upper()
        try:
            return cls(key)
        except ValueError:
            return cls[key]


class MaskingStrategy(str, Enum):
    """Session-wide policy for rewriting detected spans."""
    FULL = "full"                  # XXX-XX-XXXX
    PARTIAL = "partial"            # ***-**-6789
    PLACEHOLDER = "placeholder"    # [REDACTED-SSN]

    @classmethod
    def parse(cls, value: str | MaskingStrategy) -> MaskingStrategy:
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower().replace("_", "").replace("-", "")
        return cls(_STRATEGY_ALIASES.get(key, key))


_STRATEGY_ALIASES = {
    "fullreplacement": "full",
    "partialmasking": "partial",
    "placeholdersubstitution": "placeholder",
}


@dataclass(frozen=True, slots=True)
class Detection:
    """A single located PHI occurrence.

    ``start``/``end`` are half-open character offsets into the scanned
    string, so ``text[start:end] == matched_text``.
    """
    matched_text: str
    start: int
    end: int
    category: Category
    confidence: float      # 0.0–1.0
    context: str           # surrounding snippet for human review
    pattern_id: str = ""


@dataclass(slots=True)
class RedactionResult:
    """Result of redacting a document."""
    text: str                                              # rewritten text
    detections: list[Detection] = field(default_factory=list)  # surviving winners
    replacements: dict[tuple[int, int], str] = field(default_factory=dict)  # source span → replacement
    rewritten: int = 0                                     # spans whose text actually changed
