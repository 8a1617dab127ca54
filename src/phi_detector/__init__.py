"""PHI Detector — find and redact protected health identifiers in text."""

from .types import Category, Detection, MaskingStrategy, RedactionResult
from .patterns import ContextRule, Pattern, PatternRegistry, all_patterns
from .scanner import Scanner
from .redactor import MaskRule, Redactor, resolve_overlaps
from .config import ConfigError, load_config, load_from_yaml, load_patterns
from .file_source import FileSourceError, LocalFileSource, NotTextFileError
from .results import DetectionResult, OutputBundle, ResultsSummary
from .pipeline import DetectionPipeline

__all__ = [
    "Category", "Detection", "MaskingStrategy", "RedactionResult",
    "ContextRule", "Pattern", "PatternRegistry", "all_patterns",
    "Scanner",
    "MaskRule", "Redactor", "resolve_overlaps",
    "ConfigError", "load_config", "load_from_yaml", "load_patterns",
    "FileSourceError", "LocalFileSource", "NotTextFileError",
    "DetectionResult", "OutputBundle", "ResultsSummary",
    "DetectionPipeline",
]
__version__ = "0.1.0"
