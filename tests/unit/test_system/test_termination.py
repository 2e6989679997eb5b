"""
Unit tests for best-effort process termination.
"""

from unittest.mock import MagicMock, patch

import psutil
import pytest

from treemonitor.system.termination import terminate_processes


def _process(pid):
    process = MagicMock()
    process.pid = pid
    return process


@pytest.mark.unit
class TestTerminateProcesses:
    """Test cases for terminate_processes."""

    @patch("treemonitor.system.termination.psutil.wait_procs")
    @patch("treemonitor.system.termination.psutil.Process")
    def test_graceful_termination(self, mock_process, mock_wait):
        processes = {pid: _process(pid) for pid in (10, 11)}
        mock_process.side_effect = lambda pid: processes[pid]
        mock_wait.return_value = (list(processes.values()), [])

        assert terminate_processes([11, 10], timeout=0.5) == []
        for process in processes.values():
            process.terminate.assert_called_once()
            process.kill.assert_not_called()
        mock_wait.assert_called_once()

    @patch("treemonitor.system.termination.psutil.wait_procs")
    @patch("treemonitor.system.termination.psutil.Process")
    def test_exited_processes_are_not_failures(self, mock_process, mock_wait):
        mock_process.side_effect = psutil.NoSuchProcess(10)

        assert terminate_processes([10]) == []
        mock_wait.assert_not_called()

    @patch("treemonitor.system.termination.psutil.wait_procs")
    @patch("treemonitor.system.termination.psutil.Process")
    def test_escalates_to_kill(self, mock_process, mock_wait):
        stubborn = _process(10)
        mock_process.return_value = stubborn
        mock_wait.side_effect = [([], [stubborn]), ([stubborn], [])]

        assert terminate_processes([10], timeout=0.1) == []
        stubborn.kill.assert_called_once()

    @patch("treemonitor.system.termination.psutil.wait_procs")
    @patch("treemonitor.system.termination.psutil.Process")
    def test_reports_processes_that_survive_kill(self, mock_process, mock_wait):
        stubborn = _process(10)
        mock_process.return_value = stubborn
        mock_wait.side_effect = [([], [stubborn]), ([], [stubborn])]

        failures = terminate_processes([10], timeout=0.1)

        assert len(failures) == 1
        assert "PID 10" in failures[0]

    @patch("treemonitor.system.termination.psutil.wait_procs")
    @patch("treemonitor.system.termination.psutil.Process")
    def test_access_denied_is_reported(self, mock_process, mock_wait):
        mock_process.return_value.terminate.side_effect = psutil.AccessDenied(1)

        failures = terminate_processes([1])

        assert failures == ["PID 1: access denied sending SIGTERM"]
