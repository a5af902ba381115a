"""End-to-end tests for the ``combine`` and ``validate`` commands."""

from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from mdcombine.cli import app
from tests.conftest import write_tree

runner = CliRunner()


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    for name in ("LOG_LEVEL", "MAX_WORKERS", "ENCODING", "MAX_RESOLUTION_PASSES"):
        monkeypatch.delenv(f"MDCOMBINE_{name}", raising=False)


class TestCombine:
    def test_combines_sample_tree(self, sample_tree: Path, tmp_path: Path) -> None:
        out = tmp_path / "out"
        result = runner.invoke(app, ["combine", str(sample_tree), str(out)])
        assert result.exit_code == 0, result.output
        assert (out / "windows-features.md").read_text(encoding="utf-8") == (
            " * windows feature\n * common feature\n"
        )
        assert (out / "linux" / "ubuntu-features.md").exists()
        assert (out / "README.md").read_text(encoding="utf-8") == "# Readme\n"
        assert not (out / "shared" / "footer.mdsrc").exists()

    def test_missing_input_folder(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["combine", str(tmp_path / "nope"), str(tmp_path / "out")])
        assert result.exit_code == 1
        assert "does not exist" in result.output

    def test_no_templates_is_a_failure(self, tmp_path: Path) -> None:
        src = write_tree(tmp_path / "src", {"only.md": "x"})
        result = runner.invoke(app, ["combine", str(src), str(tmp_path / "out")])
        assert result.exit_code == 1
        assert "No markdown template files found" in result.output

    def test_validation_errors_block_output(self, tmp_path: Path) -> None:
        src = write_tree(tmp_path / "src", {"a.mdext": "<insert missing.md>"})
        out = tmp_path / "out"
        result = runner.invoke(app, ["combine", str(src), str(out)])
        assert result.exit_code == 1
        assert "missing.md" in result.output
        assert not out.exists()

    def test_warnings_do_not_block_output(self, tmp_path: Path) -> None:
        src = write_tree(
            tmp_path / "src",
            {"a.mdext": "<insert loop.mdsrc>", "loop.mdsrc": "x<insert loop.mdsrc>"},
        )
        out = tmp_path / "out"
        result = runner.invoke(app, ["combine", str(src), str(out)])
        assert result.exit_code == 0, result.output
        assert (out / "a.md").exists()

    def test_template_output_wins_over_plain_markdown(self, tmp_path: Path) -> None:
        src = write_tree(tmp_path / "src", {"page.mdext": "resolved", "page.md": "stale"})
        out = tmp_path / "out"
        result = runner.invoke(app, ["combine", str(src), str(out)])
        assert result.exit_code == 0, result.output
        assert (out / "page.md").read_text(encoding="utf-8") == "resolved"


class TestValidate:
    def test_valid_tree(self, sample_tree: Path) -> None:
        result = runner.invoke(app, ["validate", str(sample_tree)])
        assert result.exit_code == 0, result.output
        assert "Total files:   2" in result.output
        assert "Valid files:   2" in result.output
        assert "Invalid files: 0" in result.output

    def test_invalid_tree(self, tmp_path: Path) -> None:
        src = write_tree(
            tmp_path / "src",
            {"a.mdext": "ok\n<insert missing.md>", "b.mdext": "fine", "c.mdsrc": ""},
        )
        result = runner.invoke(app, ["validate", str(src)])
        assert result.exit_code == 1
        assert "Invalid files: 1" in result.output
        assert "a.mdext:2" in result.output

    def test_no_templates_is_not_a_failure(self, tmp_path: Path) -> None:
        src = write_tree(tmp_path / "src", {"only.mdsrc": "x"})
        result = runner.invoke(app, ["validate", str(src)])
        assert result.exit_code == 0
        assert "No markdown template files found" in result.output

    def test_missing_input_folder(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["validate", str(tmp_path / "nope")])
        assert result.exit_code == 1

    def test_log_level_option(self, sample_tree: Path) -> None:
        result = runner.invoke(app, ["--log-level", "WARNING", "validate", str(sample_tree)])
        assert result.exit_code == 0, result.output
