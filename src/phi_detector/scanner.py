"""Scanner — runs every registered pattern over a document.

Each pattern does its own leftmost, non-overlapping ``finditer`` pass
over the whole text.  Results are concatenated in registration order and
are NOT globally sorted; overlap handling belongs to the redactor.
"""

from __future__ import annotations
import logging

from .patterns import Pattern, PatternRegistry
from .types import Detection

logger = logging.getLogger(__name__)

DEFAULT_CONTEXT_WINDOW = 20
DEFAULT_CONFIDENCE = 1.0


def extract_context(text: str, start: int, end: int, before: int, after: int) -> str:
    """Return ``text[start:end]`` plus up to ``before``/``after`` characters
    either side, silently clipped at the text boundaries."""
    left = max(0, start - max(0, before))
    right = min(len(text), end + max(0, after))
    return text[left:right]


class Scanner:
    """Stateless multi-pattern scanner.  Safe to share between threads."""

    __slots__ = ("_registry", "_window", "_confidence")

    def __init__(
        self,
        registry: PatternRegistry | None = None,
        *,
        context_window: int = DEFAULT_CONTEXT_WINDOW,
        confidence: float = DEFAULT_CONFIDENCE,
    ) -> None:
        self._registry = registry if registry is not None else PatternRegistry.default()
        self._window = max(0, context_window)
        self._confidence = confidence

    @property
    def registry(self) -> PatternRegistry:
        return self._registry

    @property
    def context_window(self) -> int:
        return self._window

    def scan(self, text: str) -> list[Detection]:
        """Find every match of every pattern in ``text``."""
        detections: list[Detection] = []
        for pattern in self._registry:
            detections.extend(self._scan_pattern(pattern, text))
        logger.debug("scanned %d chars with %d patterns: %d detections",
                     len(text), len(self._registry), len(detections))
        return detections

    def _scan_pattern(self, pattern: Pattern, text: str) -> list[Detection]:
        before, after = self._window, self._window
        if pattern.context is not None:
            if pattern.context.before is not None:
                before = pattern.context.before
            if pattern.context.after is not None:
                after = pattern.context.after
        confidence = self._confidence if pattern.confidence is None else pattern.confidence

        out: list[Detection] = []
        for m in pattern.regex.finditer(text):
            start, end = m.span(pattern.group) if pattern.group else m.span()
            # group absent (-1) or empty: nothing to redact
            if start < 0 or end <= start:
                continue
            out.append(Detection(
                matched_text=text[start:end],
                start=start,
                end=end,
                category=pattern.category,
                confidence=confidence,
                context=extract_context(text, start, end, before, after),
                pattern_id=pattern.id,
            ))
        return out
