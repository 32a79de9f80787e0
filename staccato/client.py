"""Client-side functions: ask the daemon to re-run a segment.

The client is fire-and-forget: it gets no answer back, only the closing
of the connection once the daemon has read the trigger.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

from .channel import TriggerChannel
from .config_loader import ConfigLoader
from .constants import MAX_AUX_COUNT
from .logging_setup import get_logger
from .models import ChannelError, ExitCode, TriggerKind, WireError
from .registry import SegmentRegistry
from .runtime import RuntimePaths, client_lock
from .wire import encode_payload, pack_frame

__all__ = ["ClientRequest", "parse_args", "run_client", "send_trigger"]

MODES = {
    "-i": "index",
    "-t": "tag",
    "-c": "offset",
}


@dataclass
class ClientRequest:
    """What the command line asked for."""

    mode: str  # one of MODES values
    value: str
    extra_env: list[str] = field(default_factory=list)


def parse_args(args: list[str]) -> ClientRequest:
    """Parse `-i INDEX | -t TAG | -c OFFSET` followed by `-e NAME=VALUE` pairs.

    Raises:
        ValueError: on invalid arguments
    """
    if len(args) < 2 or args[0] not in MODES:  # noqa: PLR2004
        msg = "Invalid arguments."
        raise ValueError(msg)
    request = ClientRequest(MODES[args[0]], args[1])

    trailing = args[2:]
    if len(trailing) % 2:
        msg = "Invalid arguments: expected pairs of `-e NAME=VALUE`."
        raise ValueError(msg)
    for flag, env in zip(trailing[::2], trailing[1::2], strict=True):
        if flag != "-e":
            msg = f"Invalid argument {flag!r}."
            raise ValueError(msg)
        if "=" not in env:
            msg = f"Invalid arguments: {env!r} is not of the form 'NAME=VALUE'."
            raise ValueError(msg)
        request.extra_env.append(env)
    if len(request.extra_env) > MAX_AUX_COUNT:
        msg = f"At most {MAX_AUX_COUNT} environment strings can be passed."
        raise ValueError(msg)
    return request


async def send_trigger(paths: RuntimePaths, kind: TriggerKind, selector: int, aux_count: int = 0) -> None:
    """Send one trigger frame and wait until the daemon closed the connection.

    Raises:
        ConnectionRefusedError, FileNotFoundError: if the daemon is not listening
    """
    reader, writer = await asyncio.open_unix_connection(str(paths.control))
    writer.write(pack_frame(kind, selector, aux_count))
    writer.write_eof()
    await writer.drain()
    await reader.read()
    writer.close()
    await writer.wait_closed()


async def _targets(request: ClientRequest, config_filename: str) -> list[tuple[TriggerKind, int]]:
    """Return the (kind, selector) pairs to send for `request`.

    Raises:
        ValueError: if the selector is not a valid number
        ConfigError: if the configuration can't be read (tags only)
    """
    if request.mode == "tag":
        log = get_logger("client")
        config = await ConfigLoader(log).load(config_filename)
        registry = SegmentRegistry.from_config(config, log)
        return [(TriggerKind.DIRECT, index) for index in registry.indices_for_tag(request.value)]
    kind = TriggerKind.DIRECT if request.mode == "index" else TriggerKind.POSITIONAL
    selector = int(request.value)
    encode_payload(selector)
    return [(kind, selector)]


async def run_client(args: list[str], config_filename: str = "", paths: RuntimePaths | None = None) -> ExitCode:
    """Run the client (CLI).

    Every segment matching a tag gets its own trigger; the channel is
    written again before each of them since the daemon clears it on read.
    """
    log = get_logger("client")
    paths = paths or RuntimePaths.for_user()

    try:
        request = parse_args(args)
        targets = await _targets(request, config_filename)
    except (ValueError, WireError) as e:
        log.error("%s", e)
        return ExitCode.USAGE_ERROR

    if not targets:
        log.warning("No segment tagged %r", request.value)
        return ExitCode.SUCCESS

    with client_lock(paths.lock_file):
        channel = None
        try:
            if request.extra_env:
                channel = TriggerChannel.attach(paths.channel_name, log)
            for kind, selector in targets:
                if channel:
                    channel.publish(request.extra_env)
                await send_trigger(paths, kind, selector, len(request.extra_env))
        except (ConnectionRefusedError, FileNotFoundError):
            log.critical("Cannot connect to staccato daemon at %s.\nIs the daemon running? Start it with: staccatod", paths.control)
            return ExitCode.CONNECTION_ERROR
        except ChannelError as e:
            log.error("Cannot pass the environment strings: %s", e)
            return ExitCode.COMMAND_ERROR
        finally:
            if channel:
                channel.close()
    return ExitCode.SUCCESS
