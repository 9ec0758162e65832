"""
File locks for the JSON project store.

One lock file per project record, plus one for the code counters. A lock
only covers the read-check-write of a single save; edits that race across
separate load/save calls are caught by record versions instead.
"""

import fcntl
import os
import time
from contextlib import contextmanager
from pathlib import Path

POLL_INTERVAL = 0.05


class LockTimeout(Exception):
    """Another process held the lock for longer than the timeout."""


def _try_lock(handle) -> bool:
    try:
        fcntl.flock(handle, fcntl.LOCK_EX | fcntl.LOCK_NB)
    except BlockingIOError:
        return False
    return True


@contextmanager
def hold_lock(lock_file: Path, timeout: float, what: str):
    """Hold an exclusive flock on lock_file for the duration of the block.

    The file records the holder's PID. It is never deleted: unlinking a
    lock file lets two processes lock different inodes under one path.
    """
    lock_file.parent.mkdir(parents=True, exist_ok=True)
    deadline = time.monotonic() + timeout

    with open(lock_file, "a+") as handle:
        while not _try_lock(handle):
            if time.monotonic() >= deadline:
                raise LockTimeout(f"Timed out after {timeout}s waiting for {what}")
            time.sleep(POLL_INTERVAL)
        try:
            handle.truncate(0)
            handle.write(f"{os.getpid()}\n")
            handle.flush()
            yield
        finally:
            fcntl.flock(handle, fcntl.LOCK_UN)


def record_lock(store_dir: Path, project_id: str, timeout: float = 10):
    """Lock one project record."""
    return hold_lock(store_dir / "locks" / f"{project_id}.lock", timeout, f"project {project_id}")


def sequence_lock(store_dir: Path, timeout: float = 10):
    """Lock the project code counters."""
    return hold_lock(store_dir / "locks" / "sequence.lock", timeout, "the code sequence")
