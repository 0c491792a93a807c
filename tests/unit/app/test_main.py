"""Tests for the command-line entry point."""

from __future__ import annotations

import io
from collections.abc import Callable
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from folder_sizer.__main__ import (
    EXIT_CONFIG_ERROR,
    EXIT_INTERRUPTED,
    EXIT_INVALID_ROOT,
    EXIT_SUCCESS,
    build_config,
    main,
    parse_arguments,
    render_result,
    wait_for_result,
)
from folder_sizer.core.config import ConfigurationError
from folder_sizer.core.data.filesystem.size_calculator import SizeMode
from folder_sizer.core.scan.handle import ScanHandle
from folder_sizer.types.models import FolderInfo, ScanProgress, ScanResult

MakeTree = Callable[[dict[str, object]], Path]


def _run_main(argv: list[str]) -> int | str | None:
    with pytest.raises(SystemExit) as exc_info:
        main(argv)
    return exc_info.value.code


@pytest.mark.unit
class TestParseArguments:
    """Test command-line parsing."""

    def test_defaults(self) -> None:
        """Test only the root is required."""
        args = parse_arguments(["/srv"])

        assert args.root == Path("/srv")
        assert args.top is None
        assert args.config is None
        assert args.log_level is None
        assert args.workers is None
        assert args.poll_interval is None
        assert args.quiet is False

    def test_all_options(self) -> None:
        """Test every option is parsed."""
        args = parse_arguments(
            [
                "/srv",
                "-n",
                "3",
                "-c",
                "conf.yaml",
                "--log-level",
                "DEBUG",
                "--workers",
                "2",
                "--poll-interval",
                "0.25",
                "-q",
            ]
        )

        assert args.top == 3
        assert args.config == Path("conf.yaml")
        assert args.log_level == "DEBUG"
        assert args.workers == 2
        assert args.poll_interval == 0.25
        assert args.quiet is True

    def test_invalid_log_level(self) -> None:
        """Test unknown levels are rejected by argparse."""
        with pytest.raises(SystemExit):
            _ = parse_arguments(["/srv", "--log-level", "LOUD"])


@pytest.mark.unit
class TestBuildConfig:
    """Test merging the configuration file with command-line overrides."""

    def test_defaults_without_file(self) -> None:
        """Test built-in settings are used without --config."""
        config = build_config(parse_arguments(["/srv"]))

        assert config.scan.max_results == 10
        assert config.application.log_level == "WARNING"

    def test_overrides_win_over_file(self, tmp_path: Path) -> None:
        """Test command-line values replace file values."""
        config_file = tmp_path / "config.yaml"
        _ = config_file.write_text(
            "scan:\n  max_results: 20\n  max_workers: 8\n  size_mode: disk_usage\napplication:\n  log_level: ERROR\n"
        )

        config = build_config(
            parse_arguments(["/srv", "-c", str(config_file), "--top", "5", "--log-level", "DEBUG"])
        )

        assert config.scan.max_results == 5
        assert config.scan.max_workers == 8
        assert config.scan.size_mode == SizeMode.DISK_USAGE
        assert config.application.log_level == "DEBUG"

    @pytest.mark.parametrize(
        "option",
        [["--top", "0"], ["--workers", "0"], ["--poll-interval", "-1"]],
    )
    def test_invalid_override(self, option: list[str]) -> None:
        """Test out-of-range overrides become configuration errors."""
        with pytest.raises(ConfigurationError, match="Invalid command-line option"):
            _ = build_config(parse_arguments(["/srv", *option]))


@pytest.mark.unit
class TestWaitForResult:
    """Test the polling loop."""

    def test_reports_progress_changes(self) -> None:
        """Test a progress line is written only when progress moves."""
        final = ScanResult(entries=(), elapsed_seconds=0.0, scanned_root=Path("/srv"))
        handle = MagicMock(spec=ScanHandle)
        handle.result.side_effect = [None, None, None, final]
        handle.progress.side_effect = [
            ScanProgress(completed=1, total=2, current_path="/srv/a"),
            ScanProgress(completed=1, total=2, current_path="/srv/a"),
            ScanProgress(completed=2, total=2, current_path="/srv/b"),
        ]
        stream = io.StringIO()

        result = wait_for_result(handle, poll_interval=0.001, stream=stream)

        assert result is final
        assert stream.getvalue().splitlines() == [
            "Scanning 1/2: /srv/a",
            "Scanning 2/2: /srv/b",
        ]

    def test_quiet_skips_progress(self) -> None:
        """Test no progress is read without a stream."""
        final = ScanResult(entries=(), elapsed_seconds=0.0, scanned_root=Path("/srv"))
        handle = MagicMock(spec=ScanHandle)
        handle.result.side_effect = [None, final]

        assert wait_for_result(handle, poll_interval=0.001) is final
        handle.progress.assert_not_called()


@pytest.mark.unit
class TestRenderResult:
    """Test result output."""

    def test_rows_and_summary(self) -> None:
        """Test one row per shown folder plus a summary."""
        result = ScanResult(
            entries=(
                FolderInfo(path=Path("/srv/big"), size=3072),
                FolderInfo(path=Path("/srv/small"), size=1024),
            ),
            elapsed_seconds=1.5,
            scanned_root=Path("/srv"),
        )
        stream = io.StringIO()

        render_result(result, 1, stream)

        lines = stream.getvalue().splitlines()
        assert len(lines) == 2
        assert lines[0].split() == ["3.0", "KB", "75.0%", str(Path("/srv/big"))]
        assert lines[1] == f"1 of 2 folders in {Path('/srv')}, 4.0 KB total, scanned in 1.50s"

    def test_cancelled_is_flagged(self) -> None:
        """Test an incomplete ranking is labelled."""
        result = ScanResult(entries=(), elapsed_seconds=0.2, scanned_root=Path("/srv"), cancelled=True)
        stream = io.StringIO()

        render_result(result, 10, stream)

        assert stream.getvalue().rstrip().endswith("(cancelled, results incomplete)")


@pytest.mark.unit
@pytest.mark.usefixtures("restore_root_logger")
class TestMain:
    """Test exit codes and output of the entry point."""

    def test_successful_scan(self, make_tree: MakeTree, capsys: pytest.CaptureFixture[str]) -> None:
        """Test the largest folders are printed to stdout."""
        root = make_tree({"A": {"f": 2048}, "B": {"f": 4096}, "C": {"f": 10}})

        code = _run_main([str(root), "--top", "2", "-q", "--poll-interval", "0.01"])

        out = capsys.readouterr().out.splitlines()
        assert code == EXIT_SUCCESS
        assert len(out) == 3
        assert out[0].endswith(str(root / "B"))
        assert out[1].endswith(str(root / "A"))
        assert out[2].startswith(f"2 of 3 folders in {root}")

    def test_invalid_root(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """Test a missing root exits with its own code."""
        code = _run_main([str(tmp_path / "absent")])

        assert code == EXIT_INVALID_ROOT
        assert "Invalid root:" in capsys.readouterr().err

    def test_configuration_error(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """Test a bad configuration file stops before scanning."""
        code = _run_main([str(tmp_path), "--config", str(tmp_path / "absent.yaml")])

        assert code == EXIT_CONFIG_ERROR
        assert "Configuration error:" in capsys.readouterr().err

    def test_keyboard_interrupt(self, make_tree: MakeTree, capsys: pytest.CaptureFixture[str]) -> None:
        """Test Ctrl+C cancels the scan and exits with 130."""
        root = make_tree({"A": {}})

        with patch("folder_sizer.__main__.wait_for_result", side_effect=KeyboardInterrupt):
            code = _run_main([str(root), "-q"])

        assert code == EXIT_INTERRUPTED
        assert "Scan interrupted" in capsys.readouterr().err
