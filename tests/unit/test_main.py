# tests/unit/test_main.py — v2
"""Tests for the clincerta CLI."""

from __future__ import annotations

import json
import logging
from logging.handlers import RotatingFileHandler

import pytest

from clincerta.logging.logger import JsonFormatter, TextFormatter
from clincerta.main import main


@pytest.fixture(autouse=True)
def cli_env(tmp_path, monkeypatch):
    """Run the CLI in an empty directory with a throwaway JSON cache."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("CACHE_BACKEND", "json")
    monkeypatch.setenv("CACHE_ROOT", str(tmp_path / "cache"))
    monkeypatch.setenv("OCR_ENABLED", "false")
    package_logger = logging.getLogger("clincerta")
    handlers, level = list(package_logger.handlers), package_logger.level
    yield tmp_path
    package_logger.handlers[:] = handlers
    package_logger.setLevel(level)


@pytest.fixture
def note_file(cli_env, clinical_note):
    path = cli_env / "visit.txt"
    path.write_text(clinical_note, encoding="utf-8")
    return path


class TestProcessCommand:
    def test_prints_text(self, note_file, clinical_note, capsys):
        assert main(["process", str(note_file)]) == 0
        assert capsys.readouterr().out.strip() == clinical_note.strip()

    def test_json_and_cache(self, note_file, capsys):
        assert main(["process", str(note_file), "--json"]) == 0
        first = json.loads(capsys.readouterr().out)
        assert first["fromCache"] is False
        assert first["isScanned"] is False

        assert main(["process", str(note_file), "--json"]) == 0
        assert json.loads(capsys.readouterr().out)["fromCache"] is True

    def test_json_includes_clinical_data(self, note_file, capsys):
        assert main(["process", str(note_file), "--json", "--no-cache"]) == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["clinicalData"] == {
            "patientId": "MRN-4471", "date": "2024-03-12", "age": 67, "gender": "female",
        }

    def test_no_cache(self, note_file, capsys):
        main(["process", str(note_file), "--json"])
        capsys.readouterr()
        assert main(["process", str(note_file), "--json", "--no-cache"]) == 0
        assert json.loads(capsys.readouterr().out)["fromCache"] is False

    def test_missing_file(self, cli_env):
        assert main(["process", str(cli_env / "absent.pdf")]) == 1


class TestAnalyzeCommand:
    def test_selected_passes(self, note_file, capsys):
        code = main([
            "analyze", str(note_file), "--pass", "integrity", "--pass", "audit",
            "--document-id", "enc-1", "--no-cache",
        ])
        assert code == 0
        reports = json.loads(capsys.readouterr().out)
        assert list(reports) == ["integrity", "audit"]
        assert reports["audit"]["document_id"] == "enc-1"

    def test_invalid_pass_rejected(self, note_file):
        with pytest.raises(SystemExit):
            main(["analyze", str(note_file), "--pass", "spelling"])

    def test_empty_file(self, cli_env):
        path = cli_env / "blank.txt"
        path.write_text("   ", encoding="utf-8")
        assert main(["analyze", str(path), "--no-cache"]) == 1


class TestCacheCommand:
    def test_stats_clear_cleanup(self, note_file, capsys):
        main(["process", str(note_file)])
        capsys.readouterr()

        assert main(["cache", "stats"]) == 0
        assert "Documents:  1" in capsys.readouterr().out

        assert main(["cache", "cleanup"]) == 0
        assert "Removed 0 expired document(s)" in capsys.readouterr().out

        assert main(["cache", "clear"]) == 0
        main(["cache", "stats"])
        assert "Documents:  0" in capsys.readouterr().out


class TestNoCommand:
    def test_help(self, capsys):
        assert main([]) == 1
        assert "usage" in capsys.readouterr().out.lower()


class TestLoggingSetup:
    def test_uses_log_settings(self, note_file, cli_env, monkeypatch, capsys):
        log_file = cli_env / "logs" / "cli.log"
        monkeypatch.setenv("LOG_LEVEL", "WARNING")
        monkeypatch.setenv("LOG_FORMAT", "text")
        monkeypatch.setenv("LOG_FILE", str(log_file))
        monkeypatch.setenv("LOG_RETENTION", "3")

        assert main(["process", str(note_file), "--no-cache"]) == 0

        package_logger = logging.getLogger("clincerta")
        assert package_logger.level == logging.WARNING
        file_handlers = [h for h in package_logger.handlers if isinstance(h, RotatingFileHandler)]
        assert len(file_handlers) == 1
        assert file_handlers[0].backupCount == 3
        assert file_handlers[0].baseFilename == str(log_file)
        assert all(isinstance(h.formatter, TextFormatter) for h in package_logger.handlers)
        for handler in file_handlers:
            handler.close()

    def test_verbose_overrides_level(self, note_file, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "ERROR")
        assert main(["-v", "process", str(note_file), "--no-cache"]) == 0
        package_logger = logging.getLogger("clincerta")
        assert package_logger.level == logging.DEBUG
        assert isinstance(package_logger.handlers[0].formatter, JsonFormatter)

    def test_console_on_stderr(self, note_file, capsys):
        assert main(["-v", "process", str(note_file), "--json", "--no-cache"]) == 0
        captured = capsys.readouterr()
        json.loads(captured.out)
        assert captured.err
