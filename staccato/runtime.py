"""Per-user runtime files: liveness marker (PID file), control socket, client lock.

The daemon claims the PID file at startup, keeps it locked while running
and removes it on exit. Clients serialize their use of the trigger
channel with an exclusive `flock` on the lock file, held while the
channel is populated and the trigger sent.
"""

import contextlib
import fcntl
import os
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

import aiofiles

from . import constants
from .models import AlreadyRunningError

__all__ = [
    "RuntimePaths",
    "claim_pid_file",
    "client_lock",
    "is_alive",
    "read_pid",
    "release_pid_file",
    "remove_pid",
    "write_pid",
]


@dataclass(frozen=True)
class RuntimePaths:
    """Locations shared by the daemon and its clients."""

    pid_file: Path
    control: Path
    lock_file: Path
    channel_name: str

    @classmethod
    def for_user(cls, uid: int | None = None, folder: Path | None = None) -> "RuntimePaths":
        """Build the paths for `uid` (defaults to the current user)."""
        if uid is None:
            uid = os.getuid()
        if folder is None:
            folder = constants.RUNTIME_DIR
        return cls(
            pid_file=folder / f"staccato-{uid}.pid",
            control=folder / f"staccato-{uid}.sock",
            lock_file=folder / f"staccato-{uid}.lock",
            channel_name=f"staccato-{uid}",
        )


def is_alive(pid: int) -> bool:
    """Return True if a process with this pid exists."""
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        # exists, owned by someone else
        return True
    return True


async def read_pid(pid_file: Path) -> int | None:
    """Return the pid stored in `pid_file`, None if missing or unreadable."""
    try:
        async with aiofiles.open(pid_file, encoding="utf-8") as f:
            content = await f.read()
    except FileNotFoundError:
        return None
    try:
        return int(content.strip())
    except ValueError:
        return None


async def write_pid(pid_file: Path, pid: int | None = None) -> None:
    """Store `pid` (defaults to the current process) in `pid_file`."""
    async with aiofiles.open(pid_file, "w", encoding="utf-8") as f:
        await f.write(f"{pid or os.getpid()}\n")


def remove_pid(pid_file: Path) -> None:
    """Delete the PID file if present."""
    with contextlib.suppress(FileNotFoundError):
        pid_file.unlink()


async def claim_pid_file(pid_file: Path) -> int:
    """Claim the liveness marker for this process.

    The marker is locked with `flock` for as long as the returned descriptor
    stays open, so two daemons starting together can't both claim it. A
    marker naming a dead process is taken over.

    Returns:
        The open, locked descriptor, to pass to `release_pid_file`

    Raises:
        AlreadyRunningError: if another daemon holds the marker, or if it names a live process
    """
    while True:
        fd = os.open(pid_file, os.O_RDWR | os.O_CREAT, 0o644)
        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError:
            os.close(fd)
            raise AlreadyRunningError(await read_pid(pid_file)) from None
        # the previous owner may have unlinked the file before unlocking it
        with contextlib.suppress(FileNotFoundError):
            if os.fstat(fd).st_ino == os.stat(pid_file).st_ino:
                break
        _unlock(fd)

    pid = await read_pid(pid_file)
    if pid is not None and pid != os.getpid() and is_alive(pid):
        _unlock(fd)
        raise AlreadyRunningError(pid)
    await write_pid(pid_file)
    return fd


def release_pid_file(pid_file: Path, fd: int) -> None:
    """Remove the marker claimed with `claim_pid_file`, then drop its lock."""
    remove_pid(pid_file)
    _unlock(fd)


def _unlock(fd: int) -> None:
    fcntl.flock(fd, fcntl.LOCK_UN)
    os.close(fd)


@contextlib.contextmanager
def client_lock(lock_file: Path) -> Iterator[int]:
    """Hold an exclusive advisory lock on `lock_file` (blocks until available)."""
    fd = os.open(lock_file, os.O_RDWR | os.O_CREAT, 0o600)
    try:
        fcntl.flock(fd, fcntl.LOCK_EX)
        yield fd
    finally:
        fcntl.flock(fd, fcntl.LOCK_UN)
        os.close(fd)
