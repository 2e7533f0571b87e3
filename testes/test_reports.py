import csv
import json
import os
import sys

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from blog_migrator.utils.errors import report_error, report_ok
from blog_migrator.utils.migration_map import MAP_COLUMNS, write_migration_map

ARTICLE = {"id": 42, "title": "Answer"}


def test_report_error_appends_jsonl(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    report_error("ARTICLE_CREATE", ARTICLE, ValueError("boom"), detail="part 2/3")
    report_error("CUSTOM_CODE", ARTICLE)

    with open(os.path.join("reports", "migration", "errors.jsonl"), encoding="utf-8") as f:
        entries = [json.loads(line) for line in f]
    assert entries[0] == {
        "code": "ARTICLE_CREATE",
        "message": "Failed to create article on the target store",
        "article_id": 42,
        "title": "Answer",
        "error": "boom",
        "detail": "part 2/3",
    }
    assert entries[1]["message"] == "CUSTOM_CODE"


def test_report_ok_merges_extra(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    report_ok("ARTICLE_CREATED", ARTICLE, {"target_id": 7})

    with open(os.path.join("reports", "migration", "success.jsonl"), encoding="utf-8") as f:
        entry = json.loads(f.readline())
    assert entry["target_id"] == 7
    assert entry["message"] == "Article created successfully"


def test_write_migration_map(tmp_path):
    out = tmp_path / "nested" / "map.csv"
    rows = [
        {"SourceArticleId": 1, "Part": 1, "TargetArticleId": 9, "Title": "A (Part 1)", "ExternalId": "migrated:article:1:part:1"},
        {"SourceArticleId": 1, "Part": 2, "TargetArticleId": None, "Title": "A (Part 2)"},
    ]
    path = write_migration_map(rows, out_path=str(out))

    with open(path, encoding="utf-8", newline="") as f:
        lines = list(csv.reader(f))
    assert lines[0] == MAP_COLUMNS
    assert lines[1] == ["1", "1", "9", "A (Part 1)", "migrated:article:1:part:1"]
    assert lines[2] == ["1", "2", "", "A (Part 2)", ""]
