"""
Process-tree discovery.

The walker expands a root pid breadth-first into the set of its live
descendants. Child lookups are delegated to a ChildEnumerator so the source
of the parent/child relation can be swapped (psutil, or ``pgrep -P``).
"""

import logging
from abc import ABC, abstractmethod
from collections import deque
from typing import Deque, List, Optional, Set

import psutil

from .commands import run_command
from .exceptions import ProcessGoneError, ReadError

logger = logging.getLogger(__name__)


class ChildEnumerator(ABC):
    """
    Lists the direct children of a process.

    ``children`` returns an empty list when the process has no children, raises
    ProcessGoneError when the process itself no longer exists and ReadError for
    any other lookup failure.
    """

    @abstractmethod
    def children(self, pid: int) -> List[int]:
        pass

    def is_alive(self, pid: int) -> bool:
        """True if the process exists and is not a zombie."""
        try:
            process = psutil.Process(pid)
            if not process.is_running():
                return False
            return process.status() not in (psutil.STATUS_ZOMBIE, psutil.STATUS_DEAD)
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            return False


class PsutilChildEnumerator(ChildEnumerator):
    """Child lookup through ``psutil.Process.children``."""

    def children(self, pid: int) -> List[int]:
        try:
            return [child.pid for child in psutil.Process(pid).children()]
        except psutil.NoSuchProcess as e:
            raise ProcessGoneError(f"process {pid} exited during enumeration", pid=pid) from e
        except psutil.Error as e:
            raise ReadError(f"cannot list children of {pid}: {e}", pid=pid) from e


class PgrepChildEnumerator(ChildEnumerator):
    """
    Child lookup through ``pgrep -P <pid>``.

    pgrep exits with status 1 and prints nothing when there is no match, which
    is the "no children" signal. Any other non-zero status is a failure.
    """

    def children(self, pid: int) -> List[int]:
        return_code, stdout, stderr = run_command(["pgrep", "-P", str(pid)])
        if return_code == 1 and not stdout.strip():
            return []
        if return_code != 0:
            raise ReadError(
                f"pgrep -P {pid} failed with code {return_code}: {stderr.strip()}", pid=pid
            )

        pids = []
        for token in stdout.split():
            try:
                pids.append(int(token))
            except ValueError:
                raise ReadError(f"unexpected pgrep output for {pid}: {token!r}", pid=pid)
        return pids


class ProcessTreeWalker:
    """
    Enumerates a root process and all of its live descendants.

    Attributes:
        enumerator: Source of the parent/child relation.
        last_errors: ReadErrors from the most recent walk; each one stopped the
                     expansion of a single branch.
    """

    def __init__(self, enumerator: Optional[ChildEnumerator] = None):
        self.enumerator = enumerator or PsutilChildEnumerator()
        self.last_errors: List[ReadError] = []

    def descendants(self, root_pid: int) -> Set[int]:
        """
        Return the root and its live descendants, or an empty set if the root
        is not alive.

        Every discovered pid is queried exactly once. A pid reached through a
        second parent (the tree changed during the walk) is not added again.
        """
        self.last_errors = []
        if not self.enumerator.is_alive(root_pid):
            return set()

        discovered: Set[int] = {root_pid}
        frontier: Deque[int] = deque([root_pid])

        while frontier:
            pid = frontier.popleft()
            try:
                children = self.enumerator.children(pid)
            except ProcessGoneError:
                logger.debug(f"PID {pid} exited while listing its children")
                continue
            except ReadError as e:
                logger.warning(f"Not expanding PID {pid}: {e}")
                self.last_errors.append(e)
                continue

            for child in children:
                if child in discovered:
                    logger.debug(f"PID {child} already discovered, reached again via {pid}")
                    continue
                if not self.enumerator.is_alive(child):
                    continue
                discovered.add(child)
                frontier.append(child)

        return discovered
