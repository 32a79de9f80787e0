"""Trigger dispatcher: turns decoded triggers into one segment run + one republish.

Triggers are queued as they arrive on the control socket and drained one
at a time, so a trigger never interleaves with another one. Both the
dispatcher and the scheduler mutate the output cache through the daemon's
critical section.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from .constants import TRIGGER_QUEUE_SIZE
from .models import ClickResult, TriggerKind, TriggerMessage
from .resolver import segment_from_offset

if TYPE_CHECKING:
    import logging

    from .daemon import Staccato

__all__ = ["Dispatcher"]


class Dispatcher:
    """Routes triggers to the executor."""

    def __init__(self, app: Staccato, log: logging.Logger, maxsize: int = TRIGGER_QUEUE_SIZE) -> None:
        self.app = app
        self.log = log
        self.queue: asyncio.Queue[TriggerMessage] = asyncio.Queue(maxsize=maxsize)

    def submit(self, message: TriggerMessage) -> bool:
        """Queue a trigger without waiting; drop it if too many are pending."""
        try:
            self.queue.put_nowait(message)
        except asyncio.QueueFull:
            self.log.warning("Too many pending triggers, dropping %s", message)
            return False
        return True

    def resolve(self, message: TriggerMessage) -> int:
        """Return the segment index targeted by `message`, or a negative `ClickResult`."""
        registry = self.app.registry
        if message.kind == TriggerKind.DIRECT:
            return message.selector if registry.is_valid_index(message.selector) else ClickResult.OUT_OF_RANGE
        return segment_from_offset(
            self.app.assembler.last_status,
            registry.delimiter_bytes,
            registry.delimiter_width,
            message.selector,
        )

    async def dispatch(self, message: TriggerMessage) -> bool:
        """Run the segment targeted by `message` and republish the status line.

        Triggers that don't designate a segment are dropped silently.

        Returns:
            True if a segment was run
        """
        index = self.resolve(message)
        if index < 0:
            self.log.debug("Dropping %s: %s", message, ClickResult(index).name)
            return False
        if message.aux_count != len(message.extra_env):
            self.log.debug("Expected %d environment strings, got %d", message.aux_count, len(message.extra_env))

        if not await self.app.run_segment(index, message.extra_env):
            return False
        await self.app.flush()
        return True

    async def run(self) -> None:
        """Drain the trigger queue until cancelled."""
        while True:
            message = await self.queue.get()
            try:
                await self.dispatch(message)
            except Exception:  # pylint: disable=W0718
                self.log.exception("Unhandled error dispatching %s", message)
            finally:
                self.queue.task_done()
