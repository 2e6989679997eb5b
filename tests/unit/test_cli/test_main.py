"""
Unit tests for the command-line entry point.
"""

from unittest.mock import patch

import pytest

from treemonitor.cli.main import EXIT_CODES, build_parser, main_cli
from treemonitor.models import MonitoringResults, StopReason, UsageSummary


def _results(reason):
    results = MonitoringResults(
        root_pid=77, interval_seconds=1.0, ticks_completed=2, stop_reason=reason
    )
    results.summaries[77] = UsageSummary(
        pid=77, name="sleep", avg_cpu_percent=0.0, avg_rss_bytes=2 * 1024 * 1024,
        peak_rss_bytes=3 * 1024 * 1024, lifetime_ticks=2, avg_vm_bytes=0,
        peak_vm_bytes=0, first_tick=1, last_tick=2,
    )
    return results


@pytest.mark.unit
class TestBuildParser:
    """Test cases for argument parsing."""

    def test_command_with_options(self):
        args = build_parser().parse_args(["-d", "30s", "-v", "make", "-j4"])

        assert args.duration == "30s"
        assert args.verbose is True
        assert args.command == ["make", "-j4"]

    def test_defaults(self):
        args = build_parser().parse_args(["sleep", "1"])

        assert args.config is None
        assert args.interval is None
        assert args.no_save is False


@pytest.mark.unit
class TestMainCli:
    """Test cases for main_cli."""

    def test_no_command(self):
        with pytest.raises(SystemExit) as exc_info:
            main_cli([])

        assert exc_info.value.code == 1

    def test_missing_config(self, temp_dir):
        with pytest.raises(SystemExit) as exc_info:
            main_cli(["-c", str(temp_dir / "missing.toml"), "sleep", "1"])

        assert exc_info.value.code == 1

    def test_malformed_config(self, temp_dir):
        config_file = temp_dir / "config.toml"
        config_file.write_text("[monitor.collection\ninterval_seconds = 1.0\n")

        with pytest.raises(SystemExit) as exc_info:
            main_cli(["-c", str(config_file), "true"])

        assert exc_info.value.code == 1

    @pytest.mark.parametrize(
        "option",
        [["-i", "0.5"], ["-i", "90"], ["-d", "forever"]],
    )
    def test_invalid_overrides(self, config_files, option):
        with pytest.raises(SystemExit) as exc_info:
            main_cli(["-c", str(config_files["config"]), *option, "sleep", "1"])

        assert exc_info.value.code == 1

    @pytest.mark.parametrize("reason", list(StopReason))
    def test_exit_codes(self, config_files, capsys, reason):
        with patch("treemonitor.cli.main.MonitorRunner") as runner_cls:
            runner_cls.return_value.run.return_value = _results(reason)
            with pytest.raises(SystemExit) as exc_info:
                main_cli(["-c", str(config_files["config"]), "sleep", "1"])

        assert exc_info.value.code == EXIT_CODES[reason]
        assert "sleep(77): seconds alive: 2" in capsys.readouterr().out

    def test_overrides_reach_runner(self, config_files):
        with patch("treemonitor.cli.main.MonitorRunner") as runner_cls:
            runner_cls.return_value.run.return_value = _results(StopReason.DURATION_ELAPSED)
            with pytest.raises(SystemExit):
                main_cli([
                    "-c", str(config_files["config"]), "-d", "1m", "-i", "2",
                    "-v", "--no-save", "--", "sleep", "100",
                ])

        command, config = runner_cls.call_args.args
        assert command == ["sleep", "100"]
        assert config.duration_seconds == 60.0
        assert config.interval_seconds == 2.0
        assert config.verbose is True
        assert config.save_results is False

    def test_launch_failure(self, config_files):
        with patch("treemonitor.cli.main.MonitorRunner") as runner_cls:
            runner_cls.return_value.run.side_effect = FileNotFoundError("no such file: nosuchcmd")
            with pytest.raises(SystemExit) as exc_info:
                main_cli(["-c", str(config_files["config"]), "nosuchcmd"])

        assert exc_info.value.code == 1
