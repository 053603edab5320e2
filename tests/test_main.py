"""Tests for the high-level API and CLI entry point."""

import io
import json

import pytest

import main as cli
from pipeline.hybrid import HybridOrchestrator
from recognition.engine import RecognitionResult


BANK_TEXT = "Amount: PHP 1,250.00 Ref: ABC123456 Date: 2025-03-28 14:30"


class StubRecognizer:
    def recognize_best(self, source):
        return RecognitionResult(BANK_TEXT, 85.0, "orig-psm6")


@pytest.fixture
def api():
    return cli.ReceiptOCRAPI(orchestrator=HybridOrchestrator(StubRecognizer()))


def test_scan_missing_file(api, tmp_path):
    with pytest.raises(FileNotFoundError):
        api.scan(tmp_path / "nope.jpg")


def test_scan_reads_image(api, tmp_path):
    img = tmp_path / "receipt.jpg"
    img.write_bytes(b"fake jpeg")
    s = api.scan(img)
    assert s.winner.suggested_amount == 1250.0
    assert s.variant == "orig-psm6"


def test_scan_many_writes_one_json_per_receipt(api, tmp_path):
    paths = []
    for name in ("a.jpg", "b.png"):
        p = tmp_path / name
        p.write_bytes(b"img")
        paths.append(p)
    out_dir = tmp_path / "out"

    outputs = api.scan_many(paths, save_dir=out_dir)

    assert len(outputs) == 2
    assert sorted(f.name for f in out_dir.iterdir()) == ["a.json", "b.json"]
    saved = json.loads((out_dir / "a.json").read_text(encoding="utf-8"))
    assert saved["suggested"]["suggested_ref"] == "ABC123456"
    assert saved["image"].endswith("a.jpg")


def test_parse_text(api):
    assert api.parse_text(BANK_TEXT).winner.suggested_date_time == "2025-03-28T14:30"


def test_cli_parse_command(capsys):
    cli.main(["parse", BANK_TEXT])
    out = json.loads(capsys.readouterr().out)
    assert out["suggested"]["suggested_amount"] == 1250.0
    assert out["source"] == "local"


def test_cli_parse_reads_stdin(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO("Official Receipt No. 000123456 Total PHP 500.00"))
    cli.main(["parse", "-"])
    out = json.loads(capsys.readouterr().out)
    assert out["parses"]["cash"]["suggested_ref"] == "000123456"


def test_cli_requires_command():
    with pytest.raises(SystemExit):
        cli.main([])


def test_build_parser_scan_options():
    args = cli.build_parser().parse_args(["scan", "r.jpg", "--force-remote", "--threshold", "75"])
    assert args.image == "r.jpg"
    assert args.force_remote is True
    assert args.threshold == 75.0
