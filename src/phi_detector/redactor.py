"""Redactor — resolves overlapping detections and rewrites the text.

Usage:
    from phi_detector import Redactor, Scanner, MaskingStrategy

    scanner = Scanner()                                 # built-in patterns
    redactor = Redactor(MaskingStrategy.PARTIAL)        # reusable, stateless

    text = "SSN: 123-45-6789"
    print(redactor.redact(text, scanner.scan(text)))    # "SSN: ***-**-6789"

Overlap policy is keep-longest: detections whose spans intersect form a
cluster, the widest member wins (ties: earliest start, then registration
order) and the whole cluster is masked once under the winner's category.
"""

from __future__ import annotations
import logging
import re
from dataclasses import dataclass
from typing import Callable, Iterable, Mapping

from .types import Category, Detection, MaskingStrategy, RedactionResult

logger = logging.getLogger(__name__)

FULL_MASK_CHAR = "X"
PARTIAL_MASK_CHAR = "*"


@dataclass(frozen=True, slots=True)
class MaskRule:
    """How one category is masked under each strategy."""
    label: str                  # placeholder label, [REDACTED-<label>]
    full: str | None = None     # fixed literal; None = same-length run
    keep_prefix: int = 0        # partial: leading alphanumerics left visible
    keep_suffix: int = 0        # partial: trailing alphanumerics left visible
    min_chars: int = 1          # partial: fewer alphanumerics → left as-is
    year_only: bool = False     # partial: dates keep only the year


MASK_RULES: dict[Category, MaskRule] = {
    Category.SSN: MaskRule("SSN", full="XXX-XX-XXXX", keep_suffix=4, min_chars=9),
    Category.MRN: MaskRule("MRN", keep_suffix=4, min_chars=8),
    Category.ICD10: MaskRule("ICD10", keep_prefix=1, min_chars=3),
    Category.DOB: MaskRule("DOB", full="XX/XX/XXXX", year_only=True),
    Category.NIK: MaskRule("NIK", full="X" * 16, keep_suffix=8, min_chars=16),
    Category.BPJS: MaskRule("BPJS", full="X" * 13, keep_suffix=6, min_chars=13),
}

_DIGIT_GROUP = re.compile(r"\d+")


@dataclass(frozen=True, slots=True)
class Span:
    """A resolved region of the source text and the detection that owns it."""
    start: int
    end: int
    winner: Detection
    members: int = 1


# ---------------------------------------------------------------------------
# Mask functions, one per strategy
# ---------------------------------------------------------------------------

def _full(rule: MaskRule, text: str, char: str) -> str:
    return rule.full if rule.full is not None else char * len(text)


def _partial(rule: MaskRule, text: str, char: str) -> str:
    if rule.year_only:
        return _mask_date(text, char)
    positions = [i for i, c in enumerate(text) if c.isalnum()]
    if len(positions) < rule.min_chars or len(positions) <= rule.keep_prefix + rule.keep_suffix:
        return text
    chars = list(text)
    for i in positions[rule.keep_prefix:len(positions) - rule.keep_suffix]:
        chars[i] = char
    return "".join(chars)


def _placeholder(rule: MaskRule, text: str, char: str) -> str:
    return f"[REDACTED-{rule.label}]"


def _mask_date(text: str, char: str) -> str:
    """Keep the 4-digit year of a three-part date, mask the rest."""
    groups = list(_DIGIT_GROUP.finditer(text))
    if len(groups) != 3:
        return text
    if len(groups[0].group()) == 4:
        year = groups[0]
    elif len(groups[2].group()) == 4:
        year = groups[2]
    else:
        return text
    chars = list(text)
    for g in groups:
        if g is not year:
            for i in range(g.start(), g.end()):
                chars[i] = char
    return "".join(chars)


_MaskFn = Callable[[MaskRule, str, str], str]

_STRATEGIES: dict[MaskingStrategy, _MaskFn] = {
    MaskingStrategy.FULL: _full,
    MaskingStrategy.PARTIAL: _partial,
    MaskingStrategy.PLACEHOLDER: _placeholder,
}


# ---------------------------------------------------------------------------
# Overlap resolution
# ---------------------------------------------------------------------------

def resolve_overlaps(detections: Iterable[Detection], length: int) -> list[Span]:
    """Collapse detections into a sorted, non-overlapping cover set.

    Spans are clamped to ``[0, length]``.  Input order is the tie-break for
    equal starts, so pass detections in pattern-registration order (which
    is what ``Scanner.scan`` returns).
    """
    clamped: list[tuple[int, int, Detection]] = []
    for d in detections:
        start, end = max(0, d.start), min(length, d.end)
        if start < end:
            clamped.append((start, end, d))
    # stable: equal starts keep registration order
    clamped.sort(key=lambda c: c[0])

    spans: list[Span] = []
    last = 0
    cluster_start = 0
    winner: tuple[int, int, Detection] | None = None
    members = 0
    for start, end, det in clamped:
        if winner is None or start >= last:
            if winner is not None:
                spans.append(Span(cluster_start, last, winner[2], members))
            cluster_start, last, winner, members = start, end, (start, end, det), 1
            continue
        members += 1
        if end - start > winner[1] - winner[0]:
            winner = (start, end, det)
        if end > last:
            last = end
    if winner is not None:
        spans.append(Span(cluster_start, last, winner[2], members))
    return spans


# ---------------------------------------------------------------------------
# Redactor
# ---------------------------------------------------------------------------

class Redactor:
    """Strategy-scoped masker.  Holds no per-call state."""

    __slots__ = ("_strategy", "_templates", "_full_char", "_partial_char")

    def __init__(
        self,
        strategy: MaskingStrategy | str = MaskingStrategy.FULL,
        *,
        templates: Mapping[str, str] | None = None,   # pattern id → full literal
        full_char: str = FULL_MASK_CHAR,
        partial_char: str = PARTIAL_MASK_CHAR,
    ) -> None:
        self._strategy = MaskingStrategy.parse(strategy)
        self._templates = dict(templates or {})
        self._full_char = full_char
        self._partial_char = partial_char

    @property
    def strategy(self) -> MaskingStrategy:
        return self._strategy

    def mask(self, category: Category, matched_text: str) -> str:
        """Return the replacement for ``matched_text`` under this strategy."""
        rule = MASK_RULES[category]
        char = self._partial_char if self._strategy is MaskingStrategy.PARTIAL else self._full_char
        fn = _STRATEGIES[self._strategy]
        return fn(rule, matched_text, char)

    def mask_detection(self, detection: Detection, text: str | None = None) -> str:
        """Mask one detection, honouring its pattern's full-replacement template.

        ``text`` defaults to the detection's own matched text.
        """
        if text is None:
            text = detection.matched_text
        template = self._templates.get(detection.pattern_id)
        if template is not None and self._strategy is MaskingStrategy.FULL:
            return template
        return self.mask(detection.category, text)

    def redact(self, text: str, detections: Iterable[Detection]) -> str:
        """Return ``text`` with every resolved span masked."""
        return self.redact_with_map(text, detections).text

    def redact_with_map(self, text: str, detections: Iterable[Detection]) -> RedactionResult:
        """Redact and also report which source span became which replacement."""
        spans = resolve_overlaps(detections, len(text))
        parts: list[str] = []
        replacements: dict[tuple[int, int], str] = {}
        rewritten = 0
        last = 0
        for span in spans:
            parts.append(text[last:span.start])
            replacement = self._mask_span(text[span.start:span.end], span)
            parts.append(replacement)
            replacements[(span.start, span.end)] = replacement
            if replacement != text[span.start:span.end]:
                rewritten += 1
            last = span.end
        parts.append(text[last:])

        if spans:
            logger.debug("redacted %d spans (%s strategy)", len(spans), self._strategy.value)
        return RedactionResult(
            text="".join(parts),
            detections=[s.winner for s in spans],
            replacements=replacements,
            rewritten=rewritten,
        )

    def _mask_span(self, original: str, span: Span) -> str:
        replacement = self.mask_detection(span.winner, original)
        merged = span.members > 1 and (span.end - span.start) > len(span.winner.matched_text)
        if merged and replacement == original:
            # partial rule can't shape a merged span; don't leak it
            return self._partial_char * len(original)
        return replacement
