"""Scan-and-redact pipeline — one scanner plus one redactor per session.

Usage:

    pipeline = DetectionPipeline.create()            # built-in patterns
    detections, redaction = pipeline.process(text)
    print(redaction.text)

Usage with a config (see ``phi_detector.config``):

    pipeline = DetectionPipeline.create(config=load_from_yaml("phi.yaml"))

Usage over files:

    bundle = OutputBundle()
    pipeline.process_source(LocalFileSource("notes/", ["txt"]), bundle)
    print(bundle.to_json())
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Any

from .file_source import FileSourceError, LocalFileSource
from .redactor import Redactor
from .results import OutputBundle
from .scanner import DEFAULT_CONTEXT_WINDOW, Scanner
from .types import Detection, MaskingStrategy, RedactionResult

logger = logging.getLogger(__name__)


@dataclass
class DetectionPipeline:
    """Runs Scanner then Redactor over a document."""

    scanner: Scanner
    redactor: Redactor

    @classmethod
    def create(
        cls,
        *,
        config: dict[str, Any] | None = None,
        strategy: MaskingStrategy | str | None = None,
        context_window: int | None = None,
    ) -> "DetectionPipeline":
        """Factory. Explicit arguments win over values from ``config``
        (the normalized dict returned by ``load_config``)."""
        cfg = config or {}
        registry = cfg.get("registry")
        if context_window is None:
            context_window = cfg.get("context_window")
        if context_window is None:
            context_window = DEFAULT_CONTEXT_WINDOW
        strategy = strategy or cfg.get("strategy") or MaskingStrategy.FULL

        scanner = Scanner(registry, context_window=context_window)
        redactor = Redactor(strategy, templates=scanner.registry.templates())
        return cls(scanner=scanner, redactor=redactor)

    def scan(self, text: str) -> list[Detection]:
        return self.scanner.scan(text)

    def process(
        self, text: str, *, redact: bool = True,
    ) -> tuple[list[Detection], RedactionResult | None]:
        """Scan ``text`` and, if asked, redact it."""
        detections = self.scanner.scan(text)
        if not redact:
            return detections, None
        return detections, self.redactor.redact_with_map(text, detections)

    def annotate(self, detections: list[Detection]) -> list[str]:
        """Mask each detection on its own, without rewriting the document."""
        return [self.redactor.mask_detection(d) for d in detections]

    def process_source(
        self,
        source: LocalFileSource,
        bundle: OutputBundle,
        *,
        redact: bool = False,
    ) -> dict[str, str]:
        """Scan every file of ``source`` into ``bundle``.

        Returns path → redacted text for the files that were redacted.
        Per-file read errors are recorded in the bundle and scanning moves
        on to the next file.
        """
        redacted: dict[str, str] = {}
        for path in source.files():
            try:
                text = source.read_file(path)
            except FileSourceError as e:
                logger.warning("skipping %s: %s", path, e)
                bundle.record_error(str(path), e)
                continue
            detections, result = self.process(text, redact=redact)
            masks = self.annotate(detections) if redact else None
            bundle.record(str(path), detections, result, masks)
            if result is not None:
                redacted[str(path)] = result.text
            logger.info("%s: %d detections", path, len(detections))
        return redacted
