"""End-to-end tests: scan, redact and report through the pipeline."""

import json

from phi_detector import (
    Category, DetectionPipeline, LocalFileSource, MaskingStrategy, OutputBundle, load_config,
)


def test_full_pipeline_json_output():
    text = "SSN: 123-45-6789, MRN: 12345678, NIK: 1234567890123456"
    pipeline = DetectionPipeline.create(context_window=10)
    detections, result = pipeline.process(text)
    assert result.text == "SSN: XXX-XX-XXXX, MRN: XXXXXXXX, NIK: XXXXXXXXXXXXXXXX"

    bundle = OutputBundle()
    bundle.record("test.txt", detections, result, pipeline.annotate(detections))
    out = bundle.to_json()
    assert '"SSN"' in out and '"MRN"' in out and '"NIK"' in out
    assert "123-45-6789" in out  # original reported alongside the mask


def test_process_without_redaction():
    detections, result = DetectionPipeline.create().process("MRN 12345678", redact=False)
    assert result is None
    assert [d.category for d in detections] == [Category.MRN]


def test_annotate_does_not_touch_document():
    pipeline = DetectionPipeline.create(strategy="placeholder")
    detections = pipeline.scan("DOB 2000-12-31")
    assert pipeline.annotate(detections) == ["[REDACTED-DOB]"]


def test_config_drives_strategy_and_templates():
    config = load_config({
        "strategy": "full",
        "patterns": [{
            "id": "emp", "pattern": r"\bEMP-\d{6}\b",
            "redaction": {"template": "EMP-######"},
            "metadata": {"category": "ICD10"},
        }],
    })
    pipeline = DetectionPipeline.create(config=config)
    assert pipeline.redactor.strategy is MaskingStrategy.FULL
    _, result = pipeline.process("code EMP-123456")
    assert result.text == "code EMP-######"


def test_custom_template_does_not_leak_to_builtin_of_same_category():
    config = load_config({
        "strategy": "full",
        "patterns": [{
            "id": "emp", "pattern": r"\bEMP-\d{6}\b",
            "redaction": {"template": "EMP-######"},
            "metadata": {"category": "ICD10"},
        }],
    })
    _, result = DetectionPipeline.create(config=config).process("dx B99.8")
    assert result.text == "dx XXXXX"


def test_custom_template_applies_to_its_own_matches():
    config = load_config({
        "strategy": "full",
        "patterns": [{
            "id": "ssn_compact", "pattern": r"\bSSN#\d{9}\b",
            "redaction": {"template": "SSN#*********"},
            "metadata": {"category": "SSN"},
        }],
    })
    _, result = DetectionPipeline.create(config=config).process("id SSN#123456789 and 123-45-6789")
    assert result.text == "id SSN#********* and XXX-XX-XXXX"


def test_explicit_arguments_beat_config():
    config = load_config({"strategy": "placeholder", "context_window": 1})
    pipeline = DetectionPipeline.create(config=config, strategy="partial", context_window=0)
    assert pipeline.redactor.strategy is MaskingStrategy.PARTIAL
    assert pipeline.scanner.context_window == 0


def test_process_source_records_results_and_errors(tmp_path):
    (tmp_path / "a.txt").write_text("SSN: 123-45-6789\n", encoding="utf-8")
    (tmp_path / "b.txt").write_bytes(b"\xff\xfe broken")
    (tmp_path / "c.txt").write_text("nothing here\n", encoding="utf-8")

    pipeline = DetectionPipeline.create(strategy="partial")
    bundle = OutputBundle()
    redacted = pipeline.process_source(LocalFileSource(tmp_path, ["txt"]), bundle, redact=True)

    s = bundle.summary
    assert s.files_processed == 2
    assert s.total_detections == 1
    assert s.redacted_count == 1
    assert len(s.errors) == 1 and "b.txt" in s.errors[0]
    assert redacted[str(tmp_path / "a.txt")] == "SSN: ***-**-6789\n"
    assert json.loads(bundle.to_json())["results"][0]["redacted_text"] == "***-**-6789"


def test_redacted_count_skips_spans_left_unchanged(tmp_path):
    (tmp_path / "a.txt").write_text("badge EMP-123, MRN 12345678\n", encoding="utf-8")
    config = load_config({
        "strategy": "partial",
        "patterns": [{
            "id": "emp_short", "pattern": r"\bEMP-\d{3}\b",
            "metadata": {"category": "MRN"},
        }],
    })
    pipeline = DetectionPipeline.create(config=config)
    bundle = OutputBundle()
    redacted = pipeline.process_source(LocalFileSource(tmp_path, ["txt"]), bundle, redact=True)

    # EMP-123 is below the MRN partial minimum and stays as is
    assert redacted[str(tmp_path / "a.txt")] == "badge EMP-123, MRN ****5678\n"
    assert bundle.summary.total_detections == 2
    assert bundle.summary.redacted_count == 1
