"""Run one segment's command and capture the first line of its output."""

from __future__ import annotations

import asyncio
import os
from collections.abc import Iterable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import logging

    from .registry import SegmentRegistry

__all__ = ["CommandExecutor", "first_line", "read_first_line"]

READ_CHUNK = 64 * 1024


def first_line(output: bytes, cap: int) -> bytes:
    """Keep what a line reader of `cap` bytes would return, without the newline."""
    return output.split(b"\n", 1)[0][:cap]


async def read_first_line(stream: asyncio.StreamReader, cap: int) -> bytes:
    """Read `stream` to its end, keeping at most its first line (up to `cap` bytes).

    Whatever follows is read and dropped so the writer never blocks on a full pipe.
    """
    head = b""
    while chunk := await stream.read(READ_CHUNK):
        if len(head) < cap and b"\n" not in head:
            head += chunk
    return first_line(head, cap)


def environment_with(extra_env: Iterable[str]) -> dict[str, str] | None:
    """Return a copy of the process environment updated with `NAME=VALUE` strings.

    Returns None (inherit unchanged) when there is nothing to add.
    """
    extra = [item.split("=", 1) for item in extra_env if "=" in item]
    if not extra:
        return None
    env = dict(os.environ)
    env.update(extra)
    return env


class CommandExecutor:
    """Runs segment commands through the shell.

    There is no timeout: a command which never exits blocks its caller
    (the scheduler or the dispatcher) for as long as it runs.
    """

    def __init__(self, registry: SegmentRegistry, output_cap: int, log: logging.Logger) -> None:
        self.registry = registry
        self.output_cap = output_cap
        self.log = log

    async def execute(self, index: int, extra_env: Iterable[str] = ()) -> bytes | None:
        """Run segment `index`, optionally with extra environment strings.

        Args:
            index: a valid segment index
            extra_env: `NAME=VALUE` strings set for this invocation only

        Returns:
            The first output line, truncated to `output_cap` bytes,
            or None when the command could not be spawned.
        """
        segment = self.registry[index]
        try:
            proc = await asyncio.create_subprocess_shell(
                segment.command,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                env=environment_with(extra_env),
            )
        except OSError as e:
            self.log.error("Cannot run segment %d (%s): %s", index, segment.command, e)
            return None

        output = await read_first_line(proc.stdout, self.output_cap)
        await proc.wait()
        if proc.returncode:
            self.log.debug("Segment %d (%s) exited with %s", index, segment.command, proc.returncode)
        return output
