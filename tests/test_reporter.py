"""
Tests for the result reporter.
"""
import json

import pytest

from static_uploader.exceptions import ReportWriteError
from static_uploader.models import UploadFailure, UploadSuccess
from static_uploader.reporter import ResultReporter


def test_report_structure(tmp_path):
    reporter = ResultReporter()
    reporter.record_all([
        UploadSuccess("/b/dist/a.js", "a.js"),
        UploadFailure("/b/dist/b.js", "b.js", "code: 599", 599),
    ])

    path = reporter.save(str(tmp_path), "report.json")

    assert path == tmp_path / "report.json"
    assert json.loads(path.read_text()) == {
        "success": [{"file": "/b/dist/a.js", "key": "a.js", "skipped": False}],
        "fail": [{"file": "/b/dist/b.js", "key": "b.js", "msg": "code: 599"}],
    }
    assert "\n\t" in path.read_text()


def test_empty_report(tmp_path):
    path = ResultReporter().save(str(tmp_path), "report.json")
    assert json.loads(path.read_text()) == {"success": [], "fail": []}


def test_unwritable_report_raises(tmp_path):
    reporter = ResultReporter()
    with pytest.raises(ReportWriteError) as exc_info:
        reporter.save(str(tmp_path), "missing-dir/report.json")
    assert exc_info.value.path.endswith("report.json")
