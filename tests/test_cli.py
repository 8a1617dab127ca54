"""Tests for the command-line interface."""

import io
import json

from phi_detector.cli import main


def _write_notes(tmp_path):
    notes = tmp_path / "notes"
    notes.mkdir()
    (notes / "visit.txt").write_text("SSN: 123-45-6789, MRN: 12345678\n", encoding="utf-8")
    (notes / "scan.png").write_bytes(b"\x89PNG")
    return notes


def test_scan_json(tmp_path, capsys):
    notes = _write_notes(tmp_path)
    assert main(["--config", "", "scan", "--input", str(notes)]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["summary"]["files_processed"] == 1
    assert data["summary"]["detections_by_type"] == {"SSN": 1, "MRN": 1}
    assert all(r["redacted_text"] is None for r in data["results"])


def test_scan_text_with_redaction(tmp_path, capsys):
    notes = _write_notes(tmp_path)
    code = main(["--config", "", "--strategy", "partial",
                 "scan", "-i", str(notes), "-o", "text", "--redact"])
    assert code == 0
    out = capsys.readouterr().out
    assert "-> '***-**-6789'" in out
    assert "Redacted spans:   2" in out


def test_write_redacted_copies(tmp_path, capsys):
    notes = _write_notes(tmp_path)
    out_dir = tmp_path / "out"
    assert main(["--config", "", "scan", "-i", str(notes), "--write-redacted", str(out_dir)]) == 0
    assert (out_dir / "visit.txt").read_text(encoding="utf-8") == \
        "SSN: XXX-XX-XXXX, MRN: XXXXXXXX\n"


def test_scan_missing_input_exits_1(tmp_path, capsys):
    assert main(["--config", "", "scan", "-i", str(tmp_path / "missing")]) == 1
    assert "error:" in capsys.readouterr().err


def test_redact_text(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO("SSN: 123-45-6789"))
    assert main(["--config", "", "--strategy", "placeholder", "redact-text"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["text"] == "SSN: [REDACTED-SSN]"
    assert data["replacements"] == [
        {"start": 5, "end": 16, "original": "123-45-6789", "replacement": "[REDACTED-SSN]"},
    ]


def test_patterns_lists_config(tmp_path, capsys):
    config = tmp_path / "phi.yaml"
    config.write_text(
        "patterns:\n"
        "  - id: employee_id\n"
        "    pattern: 'EMP-\\d{6}'\n"
        "    metadata: {category: MRN, severity: low}\n"
    )
    assert main(["--config", str(config), "patterns"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[0].startswith("ssn\tSSN\t")
    assert lines[-1] == "employee_id\tMRN\tlow\tEMP-\\d{6}"


def test_bad_config_exits_2(tmp_path, capsys):
    config = tmp_path / "phi.yaml"
    config.write_text("patterns:\n  - id: x\n    pattern: '('\n    metadata: {category: MRN}\n")
    assert main(["--config", str(config), "patterns"]) == 2
    assert "config error" in capsys.readouterr().err


def test_non_utf8_config_exits_2(tmp_path, capsys):
    config = tmp_path / "phi.yaml"
    config.write_bytes(b"strategy: full\n# caf\xe9\n")
    assert main(["--config", str(config), "patterns"]) == 2
    assert "config error" in capsys.readouterr().err


def test_unwritable_redacted_dir_exits_1(tmp_path, capsys):
    notes = _write_notes(tmp_path)
    blocker = tmp_path / "out"
    blocker.write_text("not a directory", encoding="utf-8")
    code = main(["--config", "", "scan", "-i", str(notes), "--write-redacted", str(blocker)])
    assert code == 1
    assert "error: cannot write redacted copies" in capsys.readouterr().err
