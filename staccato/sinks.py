"""Status line sinks: where the assembled line is published.

The sink is chosen once, when the daemon starts.
"""

from __future__ import annotations

import asyncio
import sys
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, TextIO

if TYPE_CHECKING:
    import logging

__all__ = ["SINKS", "StatusSink", "StdoutSink", "XRootSink", "get_sink"]


class StatusSink(ABC):
    """Publishes a status line."""

    def __init__(self, log: logging.Logger) -> None:
        self.log = log

    @abstractmethod
    async def publish(self, status: bytes) -> None:
        """Publish the status line."""


class StdoutSink(StatusSink):
    """Prints one line per update (useful for bars reading stdin, or debugging)."""

    def __init__(self, log: logging.Logger, stream: TextIO | None = None) -> None:
        super().__init__(log)
        self.stream = stream or sys.stdout

    async def publish(self, status: bytes) -> None:
        print(status.decode("utf-8", errors="replace"), file=self.stream, flush=True)


class XRootSink(StatusSink):
    """Sets the X root window name, as read by dwm-like window managers."""

    command = "xsetroot"

    async def publish(self, status: bytes) -> None:
        try:
            proc = await asyncio.create_subprocess_exec(
                self.command,
                "-name",
                status.decode("utf-8", errors="replace"),
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
            _, stderr = await proc.communicate()
        except OSError as e:
            self.log.error("Cannot run %s: %s", self.command, e)
            return
        if proc.returncode:
            self.log.error("%s failed: %s", self.command, stderr.decode(errors="replace").strip())


SINKS: dict[str, type[StatusSink]] = {
    "stdout": StdoutSink,
    "xroot": XRootSink,
}


def get_sink(name: str, log: logging.Logger) -> StatusSink:
    """Instantiate the sink called `name`.

    Raises:
        KeyError: for an unknown sink name
    """
    return SINKS[name](log)
