"""Process-level lifecycle primitives: pid files and daemonization."""

from .daemon import daemonize
from .inspector import describe_process
from .pidfile import (
    MAX_PID_WRITE_ATTEMPTS,
    PidStatus,
    check_pid,
    pidfile_process_status,
    read_pid,
    remove_pid,
    write_pid,
)

__all__ = [
    "MAX_PID_WRITE_ATTEMPTS",
    "PidStatus",
    "check_pid",
    "daemonize",
    "describe_process",
    "pidfile_process_status",
    "read_pid",
    "remove_pid",
    "write_pid",
]
