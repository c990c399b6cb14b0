"""Describe the process holding a pid file, for operator-facing messages."""
from __future__ import annotations

import psutil


def describe_process(pid: int) -> str:
    """Return ``"pid 123, gunicorn"``-style text, or ``""`` when nothing is known.

    Only used to enrich error messages; the liveness decision itself is made
    with ``os.kill(pid, 0)`` so that EPERM stays distinguishable from ESRCH.
    """
    if pid <= 0:
        return ""
    try:
        proc = psutil.Process(pid)
        name = proc.name()
    except psutil.AccessDenied:
        return f"pid {pid}, owned by another user"
    except (psutil.NoSuchProcess, psutil.ZombieProcess):
        return ""
    return f"pid {pid}, {name}" if name else f"pid {pid}"


__all__ = ["describe_process"]
