"""CLI interface for phi-detector.

Usage:
    # Scan a directory, JSON report on stdout
    phi-detector scan --input notes/

    # Scan and redact, human-readable report, write redacted copies
    phi-detector --strategy partial scan -i notes/ -o text --write-redacted out/

    # Redact plain text (stdin: text, stdout: JSON)
    echo 'SSN: 123-45-6789' | phi-detector redact-text

    # List the active patterns
    phi-detector --config phi.yaml patterns

Exit status: 0 on success, 1 if any file could not be read or written, 2 on a bad
pattern configuration.
"""

from __future__ import annotations
import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any

from .config import DEFAULT_EXTENSIONS, ConfigError, load_from_yaml
from .file_source import FileSourceError, LocalFileSource
from .pipeline import DetectionPipeline
from .results import OutputBundle
from .types import MaskingStrategy

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = os.environ.get("PHI_DETECTOR_CONFIG", "")


def _setup_logging(verbose: int) -> None:
    level = logging.WARNING
    if verbose == 1:
        level = logging.INFO
    elif verbose >= 2:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _load_config(args: argparse.Namespace) -> dict[str, Any]:
    if not args.config:
        return {}
    logger.info("loading pattern config from %s", args.config)
    return load_from_yaml(args.config)


def _build_pipeline(args: argparse.Namespace, config: dict[str, Any]) -> DetectionPipeline:
    return DetectionPipeline.create(
        config=config,
        strategy=args.strategy,
        context_window=args.context_window,
    )


def cmd_scan(args: argparse.Namespace, config: dict[str, Any]) -> int:
    """Scan a file or directory and print a report."""
    pipeline = _build_pipeline(args, config)
    extensions = args.extensions.split(",") if args.extensions else \
        config.get("extensions", list(DEFAULT_EXTENSIONS))
    source = LocalFileSource(args.input, extensions)

    bundle = OutputBundle()
    redact = args.redact or bool(args.write_redacted)
    try:
        redacted = pipeline.process_source(source, bundle, redact=redact)
    except FileSourceError as e:
        sys.stderr.write(f"error: {e}\n")
        return 1

    if args.write_redacted:
        try:
            _write_redacted(redacted, source.root, Path(args.write_redacted))
        except OSError as e:
            sys.stderr.write(f"error: cannot write redacted copies: {e}\n")
            return 1

    if args.output == "json":
        sys.stdout.write(bundle.to_json())
        sys.stdout.write("\n")
    else:
        sys.stdout.write(bundle.to_text())
    return 1 if bundle.summary.errors else 0


def _write_redacted(redacted: dict[str, str], root: Path, out_dir: Path) -> None:
    base = root if root.is_dir() else root.parent
    for path, text in redacted.items():
        target = out_dir / Path(path).relative_to(base)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(text, encoding="utf-8")
        logger.info("wrote %s", target)


def cmd_redact_text(args: argparse.Namespace, config: dict[str, Any]) -> int:
    """Redact PHI from plain text on stdin."""
    pipeline = _build_pipeline(args, config)

    text = sys.stdin.read()
    detections, result = pipeline.process(text)

    # Output both redacted text and detection metadata
    output = {
        "text": result.text,
        "strategy": pipeline.redactor.strategy.value,
        "detections": [
            {
                "category": d.category.value,
                "start": d.start,
                "end": d.end,
                "text": d.matched_text,
                "confidence": d.confidence,
                "context": d.context,
            }
            for d in detections
        ],
        "replacements": [
            {"start": start, "end": end, "original": text[start:end], "replacement": repl}
            for (start, end), repl in result.replacements.items()
        ],
    }
    json.dump(output, sys.stdout, ensure_ascii=False)
    sys.stdout.write("\n")
    return 0


def cmd_patterns(args: argparse.Namespace, config: dict[str, Any]) -> int:
    """List the active patterns in registration order."""
    pipeline = _build_pipeline(args, config)
    for p in pipeline.scanner.registry:
        sys.stdout.write(f"{p.id}\t{p.category.value}\t{p.severity}\t{p.regex.pattern}\n")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="phi-detector",
        description="Detect and redact PHI in text files",
    )
    parser.add_argument("--config", default=DEFAULT_CONFIG, help="YAML pattern config")
    parser.add_argument(
        "--strategy",
        choices=[s.value for s in MaskingStrategy],
        default=None,
        help="Masking strategy (default: from config, else full)",
    )
    parser.add_argument("--context-window", type=int, default=None,
                        help="Characters of context captured each side of a match")
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="Verbosity level (repeat for more verbose)")

    sub = parser.add_subparsers(dest="command", required=True)
    scan = sub.add_parser("scan", help="Scan a file or directory")
    scan.add_argument("-i", "--input", required=True, help="Input file or directory to scan")
    scan.add_argument("-o", "--output", choices=["json", "text"], default="json",
                      help="Report format")
    scan.add_argument("-r", "--redact", action="store_true",
                      help="Include the redacted form of each detection")
    scan.add_argument("--write-redacted", default="",
                      help="Directory to write redacted copies into (implies --redact)")
    scan.add_argument("--extensions", default="",
                      help="Comma-separated file extensions to scan")

    sub.add_parser("redact-text", help="Redact plain text (stdin)")
    sub.add_parser("patterns", help="List active patterns")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    _setup_logging(args.verbose)

    try:
        config = _load_config(args)
    except ConfigError as e:
        sys.stderr.write(f"config error: {e}\n")
        return 2

    cmds = {
        "scan": cmd_scan,
        "redact-text": cmd_redact_text,
        "patterns": cmd_patterns,
    }
    return cmds[args.command](args, config)


if __name__ == "__main__":
    sys.exit(main())
