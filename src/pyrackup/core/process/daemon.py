"""Detach the current process into a background daemon.

The sequence is fixed: fork (parent exits), ``setsid`` to lead a new session
without a controlling terminal, fork again (session leader exits, so the
daemon can never reacquire a terminal), ``chdir("/")``, and finally point
stdin, stdout and stderr at ``os.devnull``. None of it can be undone.
"""
from __future__ import annotations

import logging
import os
import sys

logger = logging.getLogger(__name__)


def _fork_and_exit_parent() -> None:
    if os.fork() > 0:
        # Skip atexit handlers and buffered output of the parent copy.
        os._exit(0)


def redirect_standard_streams(target: str = os.devnull) -> None:
    for stream in (sys.stdout, sys.stderr):
        try:
            stream.flush()
        except (AttributeError, OSError, ValueError):
            pass

    read_fd = os.open(target, os.O_RDONLY)
    write_fd = os.open(target, os.O_WRONLY | os.O_APPEND)
    try:
        os.dup2(read_fd, 0)
        os.dup2(write_fd, 1)
        os.dup2(write_fd, 2)
    finally:
        os.close(read_fd)
        os.close(write_fd)


def daemonize() -> int:
    """Run the daemonization sequence; returns the daemon's pid."""
    logger.info("Daemonizing")
    _fork_and_exit_parent()
    os.setsid()
    _fork_and_exit_parent()
    os.chdir("/")
    redirect_standard_streams()
    return os.getpid()


__all__ = ["daemonize", "redirect_standard_streams"]
