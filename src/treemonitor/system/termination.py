"""
Best-effort termination of a monitored process tree.

Used when sampling stops: every process known to be alive is sent SIGTERM,
and whatever is still running after the grace period is sent SIGKILL.
A process that already exited is not an error.
"""

import logging
from typing import Iterable, List

import psutil

logger = logging.getLogger(__name__)


def terminate_processes(pids: Iterable[int], timeout: float = 3.0) -> List[str]:
    """
    Terminate the given processes.

    Args:
        pids: Processes to stop; the root should be included.
        timeout: Seconds to wait after SIGTERM before escalating to SIGKILL.

    Returns:
        Human-readable descriptions of the processes that could not be
        stopped. Empty when cleanup fully succeeded.
    """
    failures: List[str] = []
    processes: List[psutil.Process] = []

    for pid in sorted(set(pids)):
        try:
            process = psutil.Process(pid)
            process.terminate()
            processes.append(process)
            logger.debug(f"Sent SIGTERM to PID {pid}")
        except psutil.NoSuchProcess:
            continue
        except psutil.AccessDenied:
            failures.append(f"PID {pid}: access denied sending SIGTERM")

    if not processes:
        return failures

    _, still_alive = psutil.wait_procs(processes, timeout=timeout)
    for process in still_alive:
        try:
            logger.warning(f"PID {process.pid} did not terminate gracefully, killing...")
            process.kill()
        except psutil.NoSuchProcess:
            continue
        except psutil.AccessDenied:
            failures.append(f"PID {process.pid}: access denied sending SIGKILL")

    if still_alive:
        _, stubborn = psutil.wait_procs(still_alive, timeout=timeout)
        for process in stubborn:
            failures.append(f"PID {process.pid}: still running after SIGKILL")

    for failure in failures:
        logger.error(f"Cleanup failed for {failure}")
    return failures
