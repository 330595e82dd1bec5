import os
import subprocess

import pytest


def _open_fds() -> set[str]:
    return set(os.listdir("/proc/self/fd"))


@pytest.fixture
def fd_snapshot():
    if not os.path.isdir("/proc/self/fd"):
        pytest.skip("descriptor table inspection needs /proc")
    return _open_fds


@pytest.fixture
def spawn_log(monkeypatch):
    """Record the argv of every Popen call made by the executor."""

    calls: list[list[str]] = []
    real_popen = subprocess.Popen

    def recording_popen(argv, *args, **kwargs):
        calls.append(list(argv))
        return real_popen(argv, *args, **kwargs)

    monkeypatch.setattr("pipeshell.executor.subprocess.Popen", recording_popen)
    return calls
