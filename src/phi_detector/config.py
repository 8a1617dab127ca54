"""YAML/dict config loader for phi-detector.

Supports loading from a YAML file or a plain dict (for embedding in a
larger config).  Loading is all-or-nothing: any malformed pattern raises
ConfigError before a registry is returned.

Example YAML:

    phi_detector:
      strategy: partial          # full | partial | placeholder
      context_window: 20
      extensions: [txt, md, csv]
      mode: extend               # extend built-ins, or replace them
      patterns:
        - id: employee_id
          name: Employee ID
          pattern: '\\bEMP-\\d{6}\\b'
          context: {window: 15}
          confidence: 0.8
          redaction: {template: 'EMP-XXXXXX', strategy: full}
          metadata: {category: MRN, severity: medium, examples: [EMP-123456]}
"""

from __future__ import annotations
import logging
import re
from pathlib import Path
from typing import Any

from .patterns import ContextRule, Pattern, PatternRegistry
from .types import Category, MaskingStrategy

logger = logging.getLogger(__name__)

DEFAULT_EXTENSIONS = ("txt", "md", "csv", "log", "json", "xml", "hl7")
_MODES = ("extend", "replace")


class ConfigError(ValueError):
    """Pattern configuration is unreadable or invalid."""


def _require_mapping(value: Any, where: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"{where}: expected a mapping, got {type(value).__name__}")
    return value


def _optional_int(value: Any, where: str) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ConfigError(f"{where}: expected a non-negative integer, got {value!r}")
    return value


def _parse_context(data: Any, where: str) -> ContextRule | None:
    ctx = _require_mapping(data, where)
    if not ctx:
        return None
    window = _optional_int(ctx.get("window"), f"{where}.window")
    before = _optional_int(ctx.get("before"), f"{where}.before")
    after = _optional_int(ctx.get("after"), f"{where}.after")
    return ContextRule(
        before=before if before is not None else window,
        after=after if after is not None else window,
    )


def _parse_pattern(entry: Any, index: int) -> Pattern:
    where = f"patterns[{index}]"
    entry = _require_mapping(entry, where)

    pid = entry.get("id")
    if not isinstance(pid, str) or not pid:
        raise ConfigError(f"{where}: missing 'id'")
    where = f"pattern {pid!r}"

    source = entry.get("pattern", entry.get("regex"))
    if not isinstance(source, str) or not source:
        raise ConfigError(f"{where}: missing 'pattern'")
    try:
        regex = re.compile(source)
    except re.error as e:
        raise ConfigError(f"{where}: invalid regex: {e}") from e

    group = entry.get("group")
    if group is not None and not isinstance(group, str):
        raise ConfigError(f"{where}: group must be a string")
    if group is not None and group not in regex.groupindex:
        raise ConfigError(f"{where}: regex has no named group {group!r}")

    metadata = _require_mapping(entry.get("metadata"), f"{where}.metadata")
    try:
        category = Category.parse(metadata["category"])
    except KeyError as e:
        raise ConfigError(f"{where}: unknown or missing metadata.category {e}") from e

    confidence = entry.get("confidence")
    if confidence is not None:
        if isinstance(confidence, bool) or not isinstance(confidence, (int, float)) \
                or not 0.0 <= confidence <= 1.0:
            raise ConfigError(f"{where}: confidence must be between 0.0 and 1.0")
        confidence = float(confidence)

    redaction = _require_mapping(entry.get("redaction"), f"{where}.redaction")
    template = redaction.get("template")
    if template is not None and not isinstance(template, str):
        raise ConfigError(f"{where}: redaction.template must be a string")
    strategy = None
    if redaction.get("strategy") is not None:
        try:
            strategy = MaskingStrategy.parse(redaction["strategy"])
        except ValueError as e:
            raise ConfigError(f"{where}: unknown redaction.strategy {redaction['strategy']!r}") from e

    for key in ("name", "description"):
        if entry.get(key) is not None and not isinstance(entry[key], str):
            raise ConfigError(f"{where}: {key} must be a string")

    examples = metadata.get("examples") or []
    if not isinstance(examples, list):
        raise ConfigError(f"{where}: metadata.examples must be a list")

    return Pattern(
        id=pid,
        category=category,
        regex=regex,
        group=group,
        context=_parse_context(entry.get("context"), f"{where}.context"),
        confidence=confidence,
        template=template,
        strategy=strategy,
        name=entry.get("name") or pid,
        description=entry.get("description") or "",
        severity=str(metadata.get("severity", "high")),
        examples=tuple(str(x) for x in examples),
    )


def load_patterns(entries: Any) -> list[Pattern]:
    """Parse a list of pattern definitions."""
    if not isinstance(entries, list):
        raise ConfigError("patterns: expected a list")
    return [_parse_pattern(entry, i) for i, entry in enumerate(entries)]


def load_config(data: dict[str, Any]) -> dict[str, Any]:
    """Normalize a config dict (from YAML or inline) and build the registry."""
    data = _require_mapping(data, "config")
    # Support nested under "phi_detector" key or flat
    if "phi_detector" in data:
        data = _require_mapping(data["phi_detector"], "phi_detector")

    mode = data.get("mode", "extend")
    if mode not in _MODES:
        raise ConfigError(f"mode: expected one of {_MODES}, got {mode!r}")

    custom = load_patterns(data.get("patterns", []))
    if mode == "replace":
        if not custom:
            raise ConfigError("mode 'replace' needs at least one pattern")
        registry = PatternRegistry(tuple(custom))
    else:
        registry = PatternRegistry.default().extend(custom)

    strategy = data.get("strategy")
    if strategy is not None:
        try:
            strategy = MaskingStrategy.parse(strategy)
        except ValueError as e:
            raise ConfigError(f"strategy: unknown masking strategy {strategy!r}") from e

    extensions = data.get("extensions", list(DEFAULT_EXTENSIONS))
    if not isinstance(extensions, list) or not all(isinstance(x, str) for x in extensions):
        raise ConfigError("extensions: expected a list of strings")

    context_window = data.get("context_window")
    _optional_int(context_window, "context_window")

    logger.debug("loaded %d custom patterns (%s mode)", len(custom), mode)
    return {
        "strategy": strategy or registry.declared_strategy(),
        "context_window": context_window,
        "extensions": [x.lstrip(".").lower() for x in extensions],
        "registry": registry,
    }


def load_from_yaml(path: str | Path) -> dict[str, Any]:
    """Load config from a YAML file."""
    import yaml

    try:
        with open(Path(path).expanduser(), encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"cannot read config {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in {path}: {e}") from e
    return load_config(data or {})
