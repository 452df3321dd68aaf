"""Tests for CLI interface."""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from duscan.app.cli import cli
from duscan.core.data.filesystem import scanner as scanner_module
from duscan.core.exceptions import TraversalInvariantViolation
from duscan.core.report import TOTAL_LABEL, format_line


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep user configuration and block size variables out of CLI tests."""
    monkeypatch.delenv("DUSCAN_CONFIG", raising=False)
    monkeypatch.delenv("DU_BLOCK_SIZE", raising=False)
    monkeypatch.delenv("BLOCK_SIZE", raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))


@pytest.fixture
def runner() -> CliRunner:
    """Create a Click test runner."""
    return CliRunner()


@pytest.fixture
def sample_root(tmp_path: Path) -> Path:
    """root/f (100 bytes), root/sub/g (50 bytes)."""
    root = tmp_path / "root"
    (root / "sub").mkdir(parents=True)
    _ = (root / "f").write_text("f" * 100)
    _ = (root / "sub" / "g").write_text("g" * 50)
    return root


class TestCLIBasicFunctionality:
    """Test basic CLI functionality."""

    def test_cli_help_command(self, runner: CliRunner) -> None:
        """Test CLI help command displays correctly."""
        result = runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        assert "Summarize disk usage" in result.stdout
        for option in ("--all", "--human-readable", "--si", "--bytes", "--block-size", "--summarize", "--total"):
            assert option in result.stdout
        for option in ("--max-depth", "--threshold", "--one-file-system", "--exclude-from", "--count-links"):
            assert option in result.stdout

    def test_cli_version_command(self, runner: CliRunner) -> None:
        """Test CLI version command displays correctly."""
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert "version" in result.stdout.lower()

    def test_cli_runner_invocation(self, runner: CliRunner) -> None:
        """Test that options reach the application runner."""
        with patch("duscan.app.runner.ApplicationRunner") as mock_runner:
            mock_instance = MagicMock()
            mock_instance.run.return_value = 0
            mock_runner.return_value = mock_instance

            result = runner.invoke(cli, ["-sch", "-d", "2", "--exclude", "*.iso", "--exclude", "/tmp", "a", "b"])

            assert result.exit_code == 0
            options = mock_runner.call_args.kwargs["options"]
            assert options.paths == ("a", "b")
            assert options.summarize is True
            assert options.total is True
            assert options.human_readable is True
            assert options.max_depth == 2
            assert options.exclude == ("*.iso", "/tmp")

    def test_default_path_is_current_directory(self, runner: CliRunner) -> None:
        """Test that no PATH argument means the current directory."""
        with patch("duscan.app.runner.ApplicationRunner") as mock_runner:
            mock_runner.return_value.run.return_value = 0

            _ = runner.invoke(cli, [])

            assert mock_runner.call_args.kwargs["options"].paths == (".",)

    def test_invalid_log_level(self, runner: CliRunner) -> None:
        """Test that an unknown log level is a usage error."""
        result = runner.invoke(cli, ["--log-level", "chatty", "."])

        assert result.exit_code == 2
        assert "Invalid log level" in result.stderr

    def test_invalid_config_extension(self, runner: CliRunner, tmp_path: Path) -> None:
        """Test that non-YAML configuration paths are rejected."""
        result = runner.invoke(cli, ["--config", str(tmp_path / "config.json"), "."])

        assert result.exit_code == 2


class TestReportOutput:
    """Test end-to-end report output."""

    def test_apparent_bytes(self, runner: CliRunner, sample_root: Path) -> None:
        """Test post-order output in apparent bytes."""
        result = runner.invoke(cli, ["-b", str(sample_root)])

        assert result.exit_code == 0
        assert result.stdout.splitlines() == [
            format_line("50", os.path.join(str(sample_root), "sub")),
            format_line("150", str(sample_root)),
        ]

    def test_all_lists_files(self, runner: CliRunner, sample_root: Path) -> None:
        """Test that -a prints file lines."""
        result = runner.invoke(cli, ["-ab", str(sample_root)])

        assert result.stdout.splitlines() == [
            format_line("100", os.path.join(str(sample_root), "f")),
            format_line("50", os.path.join(str(sample_root), "sub", "g")),
            format_line("50", os.path.join(str(sample_root), "sub")),
            format_line("150", str(sample_root)),
        ]

    def test_summarize_and_total(self, runner: CliRunner, tmp_path: Path) -> None:
        """Test one line per root plus the grand total."""
        first = tmp_path / "first"
        second = tmp_path / "second"
        first.mkdir()
        second.mkdir()
        _ = (first / "f").write_text("x" * 500)
        _ = (second / "g").write_text("y" * 700)

        result = runner.invoke(cli, ["-sbc", str(first), str(second)])

        assert result.exit_code == 0
        assert result.stdout.splitlines() == [
            format_line("500", str(first)),
            format_line("700", str(second)),
            format_line("1200", TOTAL_LABEL),
        ]

    def test_human_readable(self, runner: CliRunner, tmp_path: Path) -> None:
        """Test human-readable apparent sizes."""
        root = tmp_path / "root"
        root.mkdir()
        _ = (root / "f").write_bytes(b"x" * 2048)

        result = runner.invoke(cli, ["-sbh", str(root)])

        assert result.stdout.splitlines() == [format_line("2.0K", str(root))]

    def test_block_size_suffix(self, runner: CliRunner, sample_root: Path) -> None:
        """Test that -BK renders block counts with a K suffix."""
        result = runner.invoke(cli, ["-s", "-BK", str(sample_root)])

        assert result.exit_code == 0
        (line,) = result.stdout.splitlines()
        assert line.split()[0].endswith("K")
        assert line.split()[0][:-1].isdigit()

    def test_threshold_hides_small_directories(self, runner: CliRunner, sample_root: Path) -> None:
        """Test a positive threshold."""
        result = runner.invoke(cli, ["-b", "--threshold=100", str(sample_root)])

        assert result.stdout.splitlines() == [format_line("150", str(sample_root))]

    def test_negative_threshold(self, runner: CliRunner, sample_root: Path) -> None:
        """Test that a negative threshold shows only small directories."""
        result = runner.invoke(cli, ["-b", "--threshold=-100", str(sample_root)])

        assert result.stdout.splitlines() == [format_line("50", os.path.join(str(sample_root), "sub"))]

    def test_max_depth(self, runner: CliRunner, sample_root: Path) -> None:
        """Test that -d 0 keeps subdirectory contents out."""
        result = runner.invoke(cli, ["-b", "-d", "0", str(sample_root)])

        assert result.stdout.splitlines() == [format_line("100", str(sample_root))]

    def test_exclude(self, runner: CliRunner, sample_root: Path) -> None:
        """Test a command-line exclusion."""
        result = runner.invoke(cli, ["-b", "--exclude", os.path.join(str(sample_root), "sub"), str(sample_root)])

        assert result.stdout.splitlines() == [format_line("100", str(sample_root))]

    def test_exclude_from_file(self, runner: CliRunner, sample_root: Path, tmp_path: Path) -> None:
        """Test exclusions read from a file."""
        exclude_file = tmp_path / "exclude"
        _ = exclude_file.write_text("# generated trees\n\n*/sub\n")

        result = runner.invoke(cli, ["-b", "-X", str(exclude_file), str(sample_root)])

        assert result.stdout.splitlines() == [format_line("100", str(sample_root))]

    def test_config_file(self, runner: CliRunner, sample_root: Path, tmp_path: Path) -> None:
        """Test settings taken from a configuration file."""
        config_path = tmp_path / "duscan.yaml"
        _ = config_path.write_text(f"exclude:\n  - {sample_root / 'sub'}\n")

        result = runner.invoke(cli, ["--config", str(config_path), "-b", str(sample_root)])

        assert result.exit_code == 0
        assert result.stdout.splitlines() == [format_line("100", str(sample_root))]


class TestExitCodes:
    """Test exit codes and error messages."""

    def test_missing_root(self, runner: CliRunner, sample_root: Path, tmp_path: Path) -> None:
        """Test that a missing root is reported and others still print."""
        missing = tmp_path / "missing"

        result = runner.invoke(cli, ["-sb", str(missing), str(sample_root)])

        assert result.exit_code == 1
        assert f"duscan: cannot access '{missing}'" in result.stderr
        assert result.stdout.splitlines() == [format_line("150", str(sample_root))]

    def test_soft_error(self, runner: CliRunner, sample_root: Path) -> None:
        """Test that unreadable subdirectories give exit code 1."""
        original = scanner_module.read_directory
        locked = os.path.join(str(sample_root), "sub")

        def fake_read_directory(path: str, state: object) -> object:
            if path == locked:
                raise PermissionError(13, "Permission denied", path)
            return original(path, state)  # pyright: ignore[reportArgumentType]

        with patch.object(scanner_module, "read_directory", side_effect=fake_read_directory):
            result = runner.invoke(cli, ["-b", str(sample_root)])

        assert result.exit_code == 1
        assert f"duscan: cannot read directory '{locked}'" in result.stderr
        assert result.stdout.splitlines() == [format_line("100", str(sample_root))]

    @pytest.mark.parametrize(
        "args",
        [
            ["-B", "0"],
            ["-B", "lots"],
            ["--max-depth=-1"],
            ["--threshold=abc"],
        ],
    )
    def test_configuration_errors(self, runner: CliRunner, sample_root: Path, args: list[str]) -> None:
        """Test that invalid settings exit with code 2 before scanning."""
        result = runner.invoke(cli, [*args, str(sample_root)])

        assert result.exit_code == 2
        assert result.stderr.startswith("duscan: ")
        assert result.stdout == ""

    def test_rejected_negative_threshold(self, runner: CliRunner, sample_root: Path, tmp_path: Path) -> None:
        """Test the reject policy for negative thresholds."""
        config_path = tmp_path / "duscan.yaml"
        _ = config_path.write_text("negative_threshold: reject\n")

        result = runner.invoke(cli, ["--config", str(config_path), "--threshold=-1K", str(sample_root)])

        assert result.exit_code == 2
        assert "negative threshold not allowed" in result.stderr

    def test_invalid_config_file(self, runner: CliRunner, sample_root: Path, tmp_path: Path) -> None:
        """Test that an invalid configuration file exits with code 2."""
        config_path = tmp_path / "duscan.yaml"
        _ = config_path.write_text("max_depth: 3\n")

        result = runner.invoke(cli, ["--config", str(config_path), str(sample_root)])

        assert result.exit_code == 2
        assert "max_depth" in result.stderr

    def test_invariant_violation(self, runner: CliRunner, sample_root: Path) -> None:
        """Test that a traversal invariant violation exits with code 3 after reporting."""
        original = scanner_module.read_directory

        def fake_read_directory(path: str, state: object) -> object:
            if path == os.path.join(str(sample_root), "sub"):
                raise TraversalInvariantViolation(path)
            return original(path, state)  # pyright: ignore[reportArgumentType]

        with patch.object(scanner_module, "read_directory", side_effect=fake_read_directory):
            result = runner.invoke(cli, ["-sb", str(sample_root), os.path.join(str(sample_root), "f")])

        assert result.exit_code == 3
        assert "internal error" in result.stderr
        assert result.stdout.splitlines() == [format_line("100", os.path.join(str(sample_root), "f"))]
