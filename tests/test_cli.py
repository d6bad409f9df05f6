import json
from pathlib import Path

import pytest
from PIL import Image
from typer.testing import CliRunner

from lookalike.cli import app


def make_image_dir(directory: Path) -> Path:
    """Two identical red squares and one horizontal ramp."""
    directory.mkdir(parents=True, exist_ok=True)
    Image.new('RGB', (64, 64), color='red').save(directory / "red_a.png")
    Image.new('RGB', (64, 64), color='red').save(directory / "red_b.png")
    ramp = Image.linear_gradient('L').rotate(90).convert('RGB').resize((64, 64))
    ramp.save(directory / "ramp.png")
    return directory


class TestCLIBasicFunctionality:
    def test_help_command_works(self):
        runner = CliRunner()
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        assert "scan" in result.stdout
        assert "compare" in result.stdout

    def test_scan_help_lists_options(self):
        runner = CliRunner()
        result = runner.invoke(app, ["scan", "--help"])

        assert result.exit_code == 0
        assert "--threshold" in result.stdout
        assert "--workers" in result.stdout
        assert "--report" in result.stdout

    def test_scan_finds_duplicates(self, tmp_path):
        image_dir = make_image_dir(tmp_path / "images")

        runner = CliRunner()
        result = runner.invoke(app, ["scan", str(image_dir), "--threshold", "0.9"])

        assert result.exit_code == 0
        assert "Scan complete" in result.stdout
        assert "group_001" in result.stdout
        assert "red_a.png" in result.stdout
        assert "red_b.png" in result.stdout
        assert "Potential duplicates: 1" in result.stdout

    def test_scan_writes_report(self, tmp_path):
        image_dir = make_image_dir(tmp_path / "images")
        report_path = tmp_path / "out" / "report.json"

        runner = CliRunner()
        result = runner.invoke(app, ["scan", str(image_dir), "--threshold", "0.9", "--report", str(report_path)])

        assert result.exit_code == 0
        report = json.loads(report_path.read_text(encoding="utf-8"))
        assert report["summary"]["similar_groups"] == 1
        assert report["groups"][0]["image_ids"] == ["red_a.png", "red_b.png"]
        assert report["groups"][0]["canonical_id"] == "red_a.png"
        assert report["failures"] == []

    def test_scan_reports_unreadable_files(self, tmp_path):
        image_dir = make_image_dir(tmp_path / "images")
        (image_dir / "broken.png").write_bytes(b"not an image")

        runner = CliRunner()
        result = runner.invoke(app, ["scan", str(image_dir), "--threshold", "0.9"])

        assert result.exit_code == 0
        assert "Skipped 1 images" in result.stdout
        assert "broken.png" in result.stdout

    def test_empty_directory_fails(self, tmp_path):
        runner = CliRunner()
        result = runner.invoke(app, ["scan", str(tmp_path)])
        assert result.exit_code == 1

    def test_nonexistent_directory_error(self, tmp_path):
        runner = CliRunner()
        result = runner.invoke(app, ["scan", str(tmp_path / "missing")])
        assert result.exit_code == 2

    @pytest.mark.parametrize("threshold", ["0", "1.5"])
    def test_threshold_range_enforced(self, tmp_path, threshold):
        image_dir = make_image_dir(tmp_path / "images")
        runner = CliRunner()
        result = runner.invoke(app, ["scan", str(image_dir), "--threshold", threshold])
        assert result.exit_code == 2


class TestCompareCommand:
    def test_identical_images(self, tmp_path):
        image_dir = make_image_dir(tmp_path / "images")

        runner = CliRunner()
        result = runner.invoke(app, ["compare", str(image_dir / "red_a.png"), str(image_dir / "red_b.png")])

        assert result.exit_code == 0
        assert "Overall similarity: 100.0%" in result.stdout
        assert "phash" in result.stdout

    def test_unreadable_image_fails(self, tmp_path):
        image_dir = make_image_dir(tmp_path / "images")
        broken = image_dir / "broken.png"
        broken.write_bytes(b"garbage")

        runner = CliRunner()
        result = runner.invoke(app, ["compare", str(image_dir / "red_a.png"), str(broken)])
        assert result.exit_code == 1
