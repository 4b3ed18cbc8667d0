import pytest

from portfolio_assistant.cli import build_parser, cmd_ingest, main


def test_ingest_arguments():
    args = build_parser().parse_args(["ingest", "--dir", "kb", "--dry-run", "--reset"])

    assert args.func is cmd_ingest
    assert args.dir == "kb"
    assert args.dry_run is True
    assert args.reset is True


def test_search_defaults():
    args = build_parser().parse_args(["search"])

    assert args.query == []
    assert args.count == 8
    assert args.intent is None


def test_search_rejects_unknown_intent():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["search", "hi", "--intent", "salary"])


def test_dry_run_succeeds(tmp_path):
    (tmp_path / "faq.md").write_text("## Remote?\nYes.", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        main(["ingest", "--dir", str(tmp_path), "--dry-run"])

    assert excinfo.value.code == 0


def test_missing_directory_exits_nonzero(tmp_path):
    with pytest.raises(SystemExit) as excinfo:
        main(["ingest", "--dir", str(tmp_path / "missing"), "--dry-run"])

    assert excinfo.value.code == 1


def test_directory_without_markdown_exits_nonzero(tmp_path):
    (tmp_path / "notes.txt").write_text("x", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        main(["ingest", "--dir", str(tmp_path), "--dry-run"])

    assert excinfo.value.code == 1
