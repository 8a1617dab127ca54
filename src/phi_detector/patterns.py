"""Pattern registry — the regexes that define what counts as PHI.

The built-ins catch the structured identifiers found in clinical notes:
SSNs, medical record numbers, ICD-10 codes, dates of birth and the two
Indonesian national identifiers.  Order matters: when spans from
different patterns overlap, earlier registration wins ties.
"""

from __future__ import annotations
import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator

from .types import Category, MaskingStrategy


@dataclass(frozen=True, slots=True)
class ContextRule:
    """Per-pattern override of the scanner's context window."""
    before: int | None = None
    after: int | None = None


@dataclass(frozen=True, slots=True)
class Pattern:
    """One detection rule: a category paired with a compiled regex."""
    id: str
    category: Category
    regex: re.Pattern
    group: str | None = None               # named capture that defines the span
    context: ContextRule | None = None
    confidence: float | None = None        # None = scanner default
    template: str | None = None            # FullReplacement literal
    strategy: MaskingStrategy | None = None
    name: str = ""
    description: str = ""
    severity: str = "high"
    examples: tuple[str, ...] = ()


def _builtin(pattern_id: str, category: Category, regex: str, description: str,
             template: str | None = None) -> Pattern:
    return Pattern(
        id=pattern_id,
        category=category,
        regex=re.compile(regex),
        template=template,
        name=category.value,
        description=description,
    )


# Each pattern: category, regex, default full-replacement template
_DEFAULTS: tuple[Pattern, ...] = (
    _builtin("ssn", Category.SSN,
             r"\b\d{3}-\d{2}-\d{4}\b",
             "US social security number", "XXX-XX-XXXX"),

    # 8-12 digit numeric, adjust for site-specific formats
    _builtin("mrn", Category.MRN,
             r"\b\d{8,12}\b",
             "Medical record number"),

    # Letter (not U), 2 digits, optional "." and 1-4 more alphanums
    _builtin("icd10", Category.ICD10,
             r"\b[A-TV-Z][0-9]{2}(?:\.[A-Z0-9]{1,4})?\b",
             "ICD-10 diagnosis code"),

    # MM/DD/YYYY, DD/MM/YYYY or YYYY-MM-DD
    _builtin("dob", Category.DOB,
             r"\b(?:\d{2}/\d{2}/\d{4}|\d{4}-\d{2}-\d{2})\b",
             "Date of birth", "XX/XX/XXXX"),

    # NIK: 16 digits, usually no separators
    _builtin("nik", Category.NIK,
             r"\b\d{16}\b",
             "Indonesian national ID number", "X" * 16),

    _builtin("bpjs", Category.BPJS,
             r"\b\d{13}\b",
             "Indonesian BPJS health insurance number", "X" * 13),
)


def all_patterns() -> list[Pattern]:
    """Return the built-in patterns in registration order."""
    return list(_DEFAULTS)


@dataclass(frozen=True)
class PatternRegistry:
    """Immutable, ordered collection of patterns.

    Build once at startup and hand the same instance to every scanner.
    """

    patterns: tuple[Pattern, ...] = field(default_factory=lambda: _DEFAULTS)

    def __post_init__(self) -> None:
        object.__setattr__(self, "patterns", tuple(self.patterns))
        seen: set[str] = set()
        for p in self.patterns:
            if p.id in seen:
                from .config import ConfigError
                raise ConfigError(f"duplicate pattern id: {p.id!r}")
            seen.add(p.id)

    @classmethod
    def default(cls) -> PatternRegistry:
        return cls(_DEFAULTS)

    @classmethod
    def load_from(cls, config: dict[str, Any]) -> PatternRegistry:
        """Build a registry from a config mapping.

        Raises ConfigError on malformed input; nothing is returned unless
        every pattern compiled.
        """
        from .config import load_config
        return load_config(config)["registry"]

    def all_patterns(self) -> list[Pattern]:
        return list(self.patterns)

    def extend(self, patterns: Iterable[Pattern]) -> PatternRegistry:
        """Return a new registry with ``patterns`` appended after ours."""
        return PatternRegistry(self.patterns + tuple(patterns))

    def templates(self) -> dict[str, str]:
        """Pattern id → full-replacement template, for patterns that set one."""
        return {p.id: p.template for p in self.patterns if p.template is not None}

    def declared_strategy(self) -> MaskingStrategy | None:
        """The strategy every pattern that declares one agrees on, if any."""
        declared = {p.strategy for p in self.patterns if p.strategy is not None}
        return declared.pop() if len(declared) == 1 else None

    def __iter__(self) -> Iterator[Pattern]:
        return iter(self.patterns)

    def __len__(self) -> int:
        return len(self.patterns)
