"""PID file locking with stale-lock recovery.

The pid file is the only cross-process mutual exclusion: at most one live
server per pid-file path. It is created with ``O_CREAT | O_EXCL``; when it
already exists, the recorded pid is probed with signal 0:

- file absent                      -> ``EXITED``   (nothing to do)
- pid 0 / no leading digits        -> ``DEAD``     (delete, proceed)
- unreadable file                  -> ``PidFileError``
- probe succeeds                   -> ``RUNNING``  (refuse to start)
- ``ProcessLookupError`` (ESRCH)   -> ``DEAD``     (delete, proceed)
- ``PermissionError`` (EPERM)      -> ``NOT_OWNED`` (refuse to start)
"""
from __future__ import annotations

import atexit
import enum
import logging
import os
import re
import sys
from pathlib import Path
from typing import Callable, Optional

from pyrackup.core.exceptions import PidFileError

from .inspector import describe_process

logger = logging.getLogger(__name__)

MAX_PID_WRITE_ATTEMPTS = 3

_LEADING_PID = re.compile(r"\s*(\d+)")


class PidStatus(str, enum.Enum):
    EXITED = "exited"
    DEAD = "dead"
    RUNNING = "running"
    NOT_OWNED = "not_owned"


def read_pid(path: Path | str) -> int:
    """Return the leading decimal pid in ``path``; content without one reads as 0."""
    text = Path(path).read_text(encoding="utf-8", errors="ignore")
    match = _LEADING_PID.match(text)
    return int(match.group(1)) if match else 0


def pidfile_process_status(path: Path | str) -> PidStatus:
    path = Path(path)
    try:
        pid = read_pid(path)
    except FileNotFoundError:
        return PidStatus.EXITED
    except OSError as exc:
        raise PidFileError(f"cannot read pid file {path}: {exc}", path=str(path)) from exc
    if pid <= 0:
        return PidStatus.DEAD

    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return PidStatus.DEAD
    except PermissionError:
        return PidStatus.NOT_OWNED
    return PidStatus.RUNNING


def _remove_stale(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        # Another starting instance reclaimed it first.
        return
    except OSError as exc:
        raise PidFileError(f"cannot remove stale pid file {path}: {exc}", path=str(path)) from exc
    logger.warning("Removed stale pid file %s", path)


def check_pid(path: Path | str) -> PidStatus:
    """Refuse to start if ``path`` is held by a live process; reclaim it if stale.

    Exits the process with status 1 when the lock is held (``RUNNING`` or
    ``NOT_OWNED``); the pid file is left untouched in that case.
    """
    path = Path(path)
    status = pidfile_process_status(path)
    if status in (PidStatus.RUNNING, PidStatus.NOT_OWNED):
        holder = ""
        try:
            holder = describe_process(read_pid(path))
        except OSError:
            holder = ""
        suffix = f" ({holder})" if holder else ""
        print(f"A server is already running{suffix}. Check {path}.", file=sys.stderr)
        sys.exit(1)
    if status is PidStatus.DEAD:
        _remove_stale(path)
    return status


def _exclusive_write(path: Path, pid: int) -> None:
    fd = os.open(str(path), os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
    with os.fdopen(fd, "w", encoding="utf-8") as fh:
        fh.write(str(pid))


def write_pid(
    path: Path | str,
    pid: Optional[int] = None,
    *,
    register: Callable[[Callable[[], None]], object] = atexit.register,
) -> int:
    """Create ``path`` exclusively and record ``pid`` (default: this process).

    A ``FileExistsError`` triggers :func:`check_pid` and another attempt, up to
    ``MAX_PID_WRITE_ATTEMPTS`` in total. On success a cleanup is registered
    that removes the file at interpreter exit if it still holds this pid.
    """
    path = Path(path)
    pid = os.getpid() if pid is None else int(pid)
    path.parent.mkdir(parents=True, exist_ok=True)

    for attempt in range(1, MAX_PID_WRITE_ATTEMPTS + 1):
        try:
            _exclusive_write(path, pid)
            break
        except FileExistsError:
            logger.debug("pid file %s exists (attempt %d/%d)", path, attempt, MAX_PID_WRITE_ATTEMPTS)
            check_pid(path)
    else:
        raise PidFileError(
            f"could not acquire pid file {path} after {MAX_PID_WRITE_ATTEMPTS} attempts",
            path=str(path),
            context={"attempts": MAX_PID_WRITE_ATTEMPTS},
        )

    register(lambda: remove_pid(path, pid))
    logger.info("Wrote pid %d to %s", pid, path)
    return pid


def remove_pid(path: Path | str, pid: int) -> bool:
    """Delete ``path`` if it still belongs to ``pid``; returns whether it was removed."""
    path = Path(path)
    try:
        if read_pid(path) != pid:
            return False
        path.unlink()
    except FileNotFoundError:
        return False
    except OSError as exc:
        logger.warning("Could not remove pid file %s: %s", path, exc)
        return False
    return True


__all__ = [
    "MAX_PID_WRITE_ATTEMPTS",
    "PidStatus",
    "check_pid",
    "pidfile_process_status",
    "read_pid",
    "remove_pid",
    "write_pid",
]
