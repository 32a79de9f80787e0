"""Periodic refresh of the segments."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import logging

    from .daemon import Staccato

__all__ = ["Scheduler"]


class Scheduler:
    """Re-runs each segment every `interval` ticks.

    Tick 0 is the startup run of every segment; a segment with interval N
    then runs again at ticks N, 2N, ... and interval 0 segments only run
    when triggered.
    """

    def __init__(self, app: Staccato, log: logging.Logger, tick_length: float = 1.0) -> None:
        self.app = app
        self.log = log
        self.tick_length = tick_length
        self.tick = 0

    def due(self, tick: int) -> list[int]:
        """Return the indices of the segments to refresh at `tick`."""
        if tick <= 0:
            return []
        return [i for i, segment in enumerate(self.app.registry) if segment.interval > 0 and tick % segment.interval == 0]

    async def step(self, tick: int) -> bool:
        """Refresh the segments due at `tick`, then republish once.

        Returns:
            True if the status line was republished
        """
        indices = self.due(tick)
        for index in indices:
            await self.app.run_segment(index)
        if not indices:
            return False
        self.log.debug("tick %d: refreshed %s", tick, indices)
        await self.app.flush()
        return True

    async def run(self) -> None:
        """Tick forever (until cancelled)."""
        while True:
            await asyncio.sleep(self.tick_length)
            self.tick += 1
            await self.step(self.tick)
