"""Staccato daemon - the application object and its startup sequence."""

from __future__ import annotations

import asyncio
import contextlib
import os
import signal

from .assembler import OutputCache, StatusAssembler
from .channel import TriggerChannel
from .config import Configuration
from .config_loader import ConfigLoader
from .constants import TERMINATION_SIGNALS
from .dispatcher import Dispatcher
from .executor import CommandExecutor
from .logging_setup import get_logger
from .models import AlreadyRunningError, StaccatoError, TriggerMessage, WireError
from .registry import SegmentRegistry, load_settings
from .runtime import RuntimePaths, claim_pid_file, release_pid_file
from .scheduler import Scheduler
from .sinks import StatusSink, get_sink
from .wire import FRAME, unpack_frame

__all__ = ["Staccato", "run_daemon"]


class Staccato:  # pylint: disable=too-many-instance-attributes
    """Main app object.

    Owns the output cache and the status line. Every cache mutation and
    every assembly + publication happen inside `self.lock`, so a trigger
    never observes (or publishes) a half refreshed line.
    """

    server: asyncio.Server | None = None
    channel: TriggerChannel | None = None

    def __init__(self, registry: SegmentRegistry, settings: Configuration, sink: StatusSink, paths: RuntimePaths) -> None:
        self.log = get_logger()
        self.registry = registry
        self.paths = paths
        self.sink = sink
        output_cap = settings.get_int("output_cap")
        self.cache = OutputCache(len(registry), output_cap)
        self.assembler = StatusAssembler(self.cache, registry.delimiter_bytes)
        self.executor = CommandExecutor(registry, output_cap, get_logger("executor"))
        self.dispatcher = Dispatcher(self, get_logger("dispatcher"))
        self.scheduler = Scheduler(self, get_logger("scheduler"), tick_length=settings.get_float("tick"))
        self.lock = asyncio.Lock()
        self._stop_event = asyncio.Event()
        self._pid_fd: int | None = None

    async def run_segment(self, index: int, extra_env: list[str] | tuple[str, ...] = ()) -> bool:
        """Run segment `index` and store its output.

        Returns:
            False if the command couldn't be spawned (the previous output is kept)
        """
        async with self.lock:
            output = await self.executor.execute(index, extra_env)
            if output is None:
                return False
            self.cache.store(index, output)
            return True

    async def flush(self) -> bytes:
        """Assemble the status line and publish it."""
        async with self.lock:
            status = self.assembler.assemble()
            await self.sink.publish(status)
        return status

    async def run_all(self) -> None:
        """Run every segment once, then publish."""
        for index in range(len(self.registry)):
            await self.run_segment(index)
        await self.flush()

    async def read_command(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        """Receive one trigger frame from a client.

        The auxiliary strings are read from the channel before the
        connection is closed: the client keeps its lock until then.
        Nothing is ever answered.
        """
        try:
            try:
                data = await reader.readexactly(FRAME.size)
                kind, selector, aux_count = unpack_frame(data)
            except asyncio.IncompleteReadError as e:
                self.log.warning("Short trigger frame received (%d bytes)", len(e.partial))
                return
            except WireError as e:
                self.log.warning("Invalid trigger frame: %s", e)
                return

            extra_env = self.channel.consume() if aux_count and self.channel else []
            self.dispatcher.submit(TriggerMessage(kind, selector, aux_count, extra_env))
        finally:
            writer.close()
            with contextlib.suppress(ConnectionError):
                await writer.wait_closed()

    def stop(self) -> None:
        """Request the shutdown of the main loop."""
        self.log.info("Stopping")
        self._stop_event.set()

    async def start(self) -> None:
        """Claim the runtime resources, run every segment once and open the control socket.

        Raises:
            StaccatoError: if a resource can't be acquired (already logged)
        """
        try:
            self._pid_fd = await claim_pid_file(self.paths.pid_file)
        except AlreadyRunningError as e:
            self.log.critical("Daemon already running (pid %s, see %s)", e.pid or "unknown", self.paths.pid_file)
            raise StaccatoError from e

        try:
            self.channel = TriggerChannel.create(self.paths.channel_name, get_logger("channel"))
        except OSError as e:
            self.log.critical("Cannot create the trigger channel %s: %s", self.paths.channel_name, e)
            raise StaccatoError from e

        await self.run_all()

        # triggers are accepted once the first status line is out
        try:
            self.server = await asyncio.start_unix_server(self.read_command, path=str(self.paths.control))
        except OSError as e:
            self.log.critical("Cannot listen on %s: %s", self.paths.control, e)
            raise StaccatoError from e

        loop = asyncio.get_running_loop()
        for name in TERMINATION_SIGNALS:
            loop.add_signal_handler(getattr(signal, name), self.stop)

    async def run(self) -> None:
        """Run the scheduler and the dispatcher until `stop` is called."""
        tasks = [
            asyncio.create_task(self.scheduler.run()),
            asyncio.create_task(self.dispatcher.run()),
        ]
        await self._stop_event.wait()
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    async def cleanup(self) -> None:
        """Release every resource acquired by `start`; safe to call more than once."""
        if self.server:
            loop = asyncio.get_running_loop()
            for name in TERMINATION_SIGNALS:
                loop.remove_signal_handler(getattr(signal, name))
            self.server.close()
            await self.server.wait_closed()
            self.server = None
            with contextlib.suppress(FileNotFoundError):
                os.unlink(self.paths.control)
        if self.channel:
            self.channel.close()
            with contextlib.suppress(FileNotFoundError):
                self.channel.unlink()
            self.channel = None
        if self._pid_fd is not None:
            release_pid_file(self.paths.pid_file, self._pid_fd)
            self._pid_fd = None


async def run_daemon(config_filename: str = "", sink_name: str | None = None, paths: RuntimePaths | None = None) -> None:
    """Run the server / daemon.

    Args:
        config_filename: configuration file or folder (default location if empty)
        sink_name: overrides the configured sink
        paths: runtime files to use (per user defaults if not set)

    Raises:
        StaccatoError: on configuration or startup failures (already logged)
    """
    log = get_logger()
    config = await ConfigLoader(log).load(config_filename)
    settings = load_settings(config, log)
    registry = SegmentRegistry.from_config(config, log, settings)
    sink = get_sink(sink_name or settings.get_str("sink"), get_logger("sink"))

    manager = Staccato(registry, settings, sink, paths or RuntimePaths.for_user())
    try:
        await manager.start()
        manager.log.debug("[ initialized ]".center(80, "="))
        await manager.run()
    finally:
        await manager.cleanup()
