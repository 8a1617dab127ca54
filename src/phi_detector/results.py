"""Report types — per-detection results plus a run summary, as JSON or text."""

from __future__ import annotations
import json
from dataclasses import asdict, dataclass, field
from typing import Any

from .types import Detection, RedactionResult


@dataclass(slots=True)
class DetectionResult:
    """One detection, ready for output."""
    file_path: str
    category: str
    location: tuple[int, int]          # character offsets (start, end)
    context: str
    matched_text: str
    redacted_text: str | None = None   # mask of this detection, if redacting


@dataclass(slots=True)
class ResultsSummary:
    files_processed: int = 0
    total_detections: int = 0
    detections_by_type: dict[str, int] = field(default_factory=dict)
    redacted_count: int = 0
    errors: list[str] = field(default_factory=list)


@dataclass(slots=True)
class OutputBundle:
    """Detection results and summary for a whole run."""
    results: list[DetectionResult] = field(default_factory=list)
    summary: ResultsSummary = field(default_factory=ResultsSummary)

    def record(
        self,
        file_path: str,
        detections: list[Detection],
        redaction: RedactionResult | None = None,
        masks: list[str] | None = None,
    ) -> None:
        """Add one file's detections.

        ``masks`` holds the per-detection replacement (parallel to
        ``detections``) when redaction is on.
        """
        s = self.summary
        s.files_processed += 1
        s.total_detections += len(detections)
        for i, d in enumerate(detections):
            key = d.category.value
            s.detections_by_type[key] = s.detections_by_type.get(key, 0) + 1
            self.results.append(DetectionResult(
                file_path=file_path,
                category=key,
                location=(d.start, d.end),
                context=d.context,
                matched_text=d.matched_text,
                redacted_text=masks[i] if masks is not None else None,
            ))
        if redaction is not None:
            s.redacted_count += redaction.rewritten

    def record_error(self, file_path: str, error: Exception) -> None:
        self.summary.errors.append(f"{file_path}: {error}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "results": [
                {**asdict(r), "location": list(r.location)} for r in self.results
            ],
            "summary": asdict(self.summary),
        }

    def to_json(self, indent: int | None = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    def to_text(self) -> str:
        lines: list[str] = []
        for r in self.results:
            start, end = r.location
            line = f"{r.file_path}:{start}-{end} [{r.category}] {r.matched_text!r}"
            if r.redacted_text is not None:
                line += f" -> {r.redacted_text!r}"
            lines.append(line)
            lines.append(f"    context: {r.context!r}")
        s = self.summary
        lines.append("")
        lines.append(f"Files processed:  {s.files_processed}")
        lines.append(f"Total detections: {s.total_detections}")
        for category, count in sorted(s.detections_by_type.items()):
            lines.append(f"  {category}: {count}")
        lines.append(f"Redacted spans:   {s.redacted_count}")
        if s.errors:
            lines.append(f"Errors ({len(s.errors)}):")
            lines.extend(f"  {e}" for e in s.errors)
        return "\n".join(lines) + "\n"
