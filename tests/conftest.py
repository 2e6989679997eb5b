"""
Pytest configuration and shared fixtures for the treemonitor test suite.

Provides a fake proc filesystem written into a temporary directory, scripted
stand-ins for the sampler's collaborators, and configuration file fixtures.
"""

import shutil
import sys
import tempfile
import types
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set

import pytest

# Add src to Python path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


# ============================================================================
# Test Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "slow: mark test as slow running")


# ============================================================================
# Core Fixtures
# ============================================================================


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path, ignore_errors=True)


# ============================================================================
# Fake proc filesystem
# ============================================================================


class FakeProcFS:
    """Writes status/stat files in the layout of /proc under a directory."""

    def __init__(self, root: Path):
        self.root = root
        self.set_system_ticks(1000, 20, 500, 8000, 30, 0, 10, 0, 0, 0)

    def set_system_ticks(self, *fields: int) -> None:
        cpu_line = "cpu  " + " ".join(str(f) for f in fields)
        per_core = "cpu0 " + " ".join(str(f // 2) for f in fields)
        (self.root / "stat").write_text(
            f"{cpu_line}\n{per_core}\nintr 12345 0 0\nctxt 999\nbtime 1700000000\n"
        )

    def add_process(
        self,
        pid: int,
        name: str = "worker",
        rss_kb: int = 2048,
        hwm_kb: int = 4096,
        vm_kb: int = 10240,
        peak_kb: int = 12288,
        fd_size: int = 64,
        threads: int = 1,
        utime: int = 0,
        stime: int = 0,
    ) -> Path:
        proc_dir = self.root / str(pid)
        proc_dir.mkdir(parents=True, exist_ok=True)
        self.write_status(
            pid,
            f"Name:\t{name}\n"
            "Umask:\t0022\n"
            "State:\tS (sleeping)\n"
            f"Tgid:\t{pid}\n"
            f"Pid:\t{pid}\n"
            "PPid:\t1\n"
            "Uid:\t1000\t1000\t1000\t1000\n"
            f"FDSize:\t{fd_size}\n"
            f"VmPeak:\t{peak_kb} kB\n"
            f"VmSize:\t{vm_kb} kB\n"
            f"VmHWM:\t{hwm_kb} kB\n"
            f"VmRSS:\t{rss_kb} kB\n"
            f"Threads:\t{threads}\n"
            "SigQ:\t0/63445\n"
            "Cpus_allowed_list:\t0-7\n",
        )
        self.write_stat(pid, name, utime, stime)
        return proc_dir

    def write_status(self, pid: int, text: str) -> None:
        proc_dir = self.root / str(pid)
        proc_dir.mkdir(parents=True, exist_ok=True)
        (proc_dir / "status").write_text(text)

    def write_stat(self, pid: int, name: str, utime: int, stime: int) -> None:
        proc_dir = self.root / str(pid)
        proc_dir.mkdir(parents=True, exist_ok=True)
        (proc_dir / "stat").write_text(
            f"{pid} ({name}) S 1 {pid} {pid} 0 -1 4194560 120 0 0 0 "
            f"{utime} {stime} 0 0 20 0 1 0 5000 10485760 512\n"
        )

    def remove_process(self, pid: int) -> None:
        shutil.rmtree(self.root / str(pid), ignore_errors=True)


@pytest.fixture
def fake_proc(tmp_path):
    """A fake proc filesystem rooted in a temporary directory."""
    root = tmp_path / "proc"
    root.mkdir()
    return FakeProcFS(root)


# ============================================================================
# Scripted sampler collaborators
# ============================================================================


@dataclass
class FakeProcess:
    """Counters of a scripted process; CPU ticks grow by a fixed step per read."""

    name: str
    rss_bytes: int = 4 * 1024 * 1024
    vm_bytes: int = 16 * 1024 * 1024
    user_step: int = 10
    kernel_step: int = 5
    user_ticks: int = 0
    kernel_ticks: int = 0
    threads: int = 1
    peak_rss_bytes: int = 0
    peak_vm_bytes: int = 0


class FakeReader:
    """Snapshot reader serving FakeProcess counters, or scripted errors."""

    def __init__(self, processes: Optional[Dict[int, FakeProcess]] = None):
        self.processes: Dict[int, FakeProcess] = dict(processes or {})
        self.errors: Dict[int, Exception] = {}
        self.reads: List[int] = []

    def read_snapshot(self, pid: int, system_ticks: Optional[int] = None):
        from treemonitor.models.snapshots import ProcessSnapshot
        from treemonitor.system.exceptions import ProcessGoneError

        self.reads.append(pid)
        if pid in self.errors:
            raise self.errors[pid]
        process = self.processes.get(pid)
        if process is None:
            raise ProcessGoneError(f"process {pid} is gone", pid=pid)

        process.user_ticks += process.user_step
        process.kernel_ticks += process.kernel_step
        process.peak_rss_bytes = max(process.peak_rss_bytes, process.rss_bytes)
        process.peak_vm_bytes = max(process.peak_vm_bytes, process.vm_bytes)
        return ProcessSnapshot(
            pid=pid,
            name=process.name,
            rss_bytes=process.rss_bytes,
            peak_rss_bytes=process.peak_rss_bytes,
            vm_bytes=process.vm_bytes,
            peak_vm_bytes=process.peak_vm_bytes,
            fd_slots=64,
            threads=process.threads,
            user_ticks=process.user_ticks,
            kernel_ticks=process.kernel_ticks,
            system_ticks=system_ticks,
        )


class FakeWalker:
    """Returns one scripted pid set per walk; the last set repeats."""

    def __init__(self, schedule: Iterable[Iterable[int]]):
        self.schedule: List[Set[int]] = [set(pids) for pids in schedule]
        self.walks = 0
        self.last_errors: List[Exception] = []
        self.scripted_errors: Dict[int, List[Exception]] = {}

    def descendants(self, root_pid: int) -> Set[int]:
        self.walks += 1
        self.last_errors = list(self.scripted_errors.get(self.walks, []))
        index = min(self.walks, len(self.schedule)) - 1
        return set(self.schedule[index])


class FakeTimeSource:
    """System tick total growing by ``step`` per call; fails from call ``fail_at``."""

    def __init__(self, start: int = 10_000, step: int = 100, fail_at: Optional[int] = None):
        self.start = start
        self.step = step
        self.fail_at = fail_at
        self.calls = 0

    def current_system_ticks(self) -> int:
        from treemonitor.system.exceptions import ReadError

        self.calls += 1
        if self.fail_at is not None and self.calls >= self.fail_at:
            raise ReadError("failed to read /proc/stat", source="/proc/stat")
        return self.start + self.step * self.calls


class FakeTerminator:
    """Records cleanup requests and returns scripted failures."""

    def __init__(self, failures: Optional[List[str]] = None, error: Optional[Exception] = None):
        self.failures = list(failures or [])
        self.error = error
        self.calls: List[tuple] = []

    def __call__(self, pids, timeout):
        self.calls.append((set(pids), timeout))
        if self.error is not None:
            raise self.error
        return list(self.failures)


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeEvent:
    """Cancellation event whose wait() advances a FakeClock instead of sleeping."""

    def __init__(self, clock: FakeClock):
        self.clock = clock
        self._set = False
        self.waits: List[float] = []

    def is_set(self) -> bool:
        return self._set

    def set(self) -> None:
        self._set = True

    def wait(self, timeout: float) -> bool:
        self.waits.append(timeout)
        if not self._set:
            self.clock.advance(timeout)
        return self._set


@pytest.fixture
def fake_terminator():
    return FakeTerminator()


@pytest.fixture
def make_sampler(fake_terminator):
    """Build a Sampler around scripted collaborators."""
    from treemonitor.monitoring.sampler import Sampler

    def _make(root_pid, walker, reader, time_source=None, **kwargs):
        kwargs.setdefault("interval_seconds", 0.0)
        kwargs.setdefault("terminator", fake_terminator)
        return Sampler(
            root_pid,
            walker=walker,
            reader=reader,
            time_source=time_source or FakeTimeSource(),
            **kwargs,
        )

    return _make


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def sample_config_data(temp_dir):
    """Sample ``[monitor]`` configuration data for testing."""
    return {
        "general": {
            "log_root_dir": str(temp_dir / "logs"),
            "verbose": False,
            "save_results": True,
        },
        "collection": {
            "interval_seconds": 1.0,
            "duration_seconds": "2s",
            "proc_root": "/proc",
            "children_source": "psutil",
        },
        "shutdown": {
            "graceful_shutdown_timeout": 2.0,
        },
        "storage": {
            "format": "parquet",
            "compression": "zstd",
            "generate_legacy_formats": True,
        },
    }


@pytest.fixture
def config_files(temp_dir, sample_config_data):
    """Create a temporary config.toml for testing."""
    import toml

    config_file = temp_dir / "config.toml"
    with open(config_file, "w") as f:
        toml.dump({"monitor": sample_config_data}, f)

    return {"config": config_file, "dir": temp_dir}


@pytest.fixture(autouse=True)
def clear_config_after_test():
    """Automatically clear configuration cache after each test."""
    original_config_path = Path(__file__).parent.parent / "conf" / "config.toml"

    yield

    from treemonitor.config import clear_config_cache, set_config_path

    clear_config_cache()
    set_config_path(original_config_path)


@pytest.fixture
def fakes():
    """The scripted collaborator classes, for tests that build their own."""
    return types.SimpleNamespace(
        FakeProcess=FakeProcess,
        FakeReader=FakeReader,
        FakeWalker=FakeWalker,
        FakeTimeSource=FakeTimeSource,
        FakeTerminator=FakeTerminator,
        FakeClock=FakeClock,
        FakeEvent=FakeEvent,
    )
