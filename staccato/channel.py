"""Trigger channel: a fixed size shared memory region carrying `NAME=VALUE` strings.

Layout, offsets relative to the region base::

    [0]           offset of string 0    (one signed native word)
    [word]        offset of string 1
    ...
    [k * word]    0                     (sentinel, ends the table)
    [after table] "NAME=VALUE\\0"        string 0
                  "NAME=VALUE\\0"        string 1

The client writes it (holding the client lock) before sending a trigger
with a non-zero auxiliary count; the daemon reads it once and clears it.
"""

from __future__ import annotations

import struct
from multiprocessing import shared_memory
from typing import TYPE_CHECKING

from .constants import CHANNEL_SIZE
from .models import ChannelError

if TYPE_CHECKING:
    import logging

__all__ = ["TriggerChannel", "decode_strings", "encode_strings"]

WORD = struct.Struct("=q")


def encode_strings(strings: list[str], capacity: int = CHANNEL_SIZE) -> bytes:
    """Serialize `strings` using the channel layout.

    Raises:
        ChannelError: if a string is not `NAME=VALUE`, contains NUL, or if it doesn't fit
    """
    table_size = (len(strings) + 1) * WORD.size
    table = bytearray()
    data = bytearray()
    for text in strings:
        if "=" not in text:
            msg = f"{text!r} is not of the form NAME=VALUE"
            raise ChannelError(msg)
        if "\0" in text:
            msg = f"{text!r} contains a NUL character"
            raise ChannelError(msg)
        table += WORD.pack(table_size + len(data))
        data += text.encode("utf-8") + b"\0"
    table += WORD.pack(0)
    if table_size + len(data) > capacity:
        msg = f"{len(strings)} strings need {table_size + len(data)} bytes, channel holds {capacity}"
        raise ChannelError(msg)
    return bytes(table + data)


def decode_strings(buffer: bytes) -> list[str]:
    """Read back the strings stored in `buffer` (the whole region).

    Every read stays within `buffer`.

    Raises:
        ChannelError: on an unterminated table, an offset outside the string area
            or an unterminated / undecodable string
    """
    capacity = len(buffer)
    offsets = []
    pos = 0
    while True:
        if pos + WORD.size > capacity:
            msg = "offset table is not terminated"
            raise ChannelError(msg)
        (offset,) = WORD.unpack_from(buffer, pos)
        pos += WORD.size
        if offset == 0:
            break
        offsets.append(offset)

    strings = []
    for offset in offsets:
        if not pos <= offset < capacity:
            msg = f"offset {offset} outside of the string area [{pos}, {capacity})"
            raise ChannelError(msg)
        end = buffer.find(b"\0", offset)
        if end == -1:
            msg = f"string at {offset} is not terminated"
            raise ChannelError(msg)
        try:
            strings.append(buffer[offset:end].decode("utf-8"))
        except UnicodeDecodeError as e:
            msg = f"string at {offset} is not valid UTF-8"
            raise ChannelError(msg) from e
    return strings


class TriggerChannel:
    """Shared memory side channel between one client and the daemon."""

    def __init__(self, shm: shared_memory.SharedMemory, capacity: int, log: logging.Logger) -> None:
        self._shm = shm
        self.capacity = capacity
        self.log = log

    @property
    def name(self) -> str:
        """Name of the shared memory region."""
        return self._shm.name

    @classmethod
    def create(cls, name: str, log: logging.Logger, capacity: int = CHANNEL_SIZE) -> TriggerChannel:
        """Create the region (daemon side), replacing a stale one left by a dead daemon.

        Raises:
            OSError: if the region can't be created
        """
        try:
            shm = shared_memory.SharedMemory(name=name, create=True, size=capacity)
        except FileExistsError:
            log.warning("Removing stale trigger channel %s", name)
            stale = shared_memory.SharedMemory(name=name, track=False)
            stale.close()
            stale.unlink()
            shm = shared_memory.SharedMemory(name=name, create=True, size=capacity)
        channel = cls(shm, capacity, log)
        channel.clear()
        return channel

    @classmethod
    def attach(cls, name: str, log: logging.Logger, capacity: int = CHANNEL_SIZE) -> TriggerChannel:
        """Attach to the daemon's region (client side).

        Raises:
            FileNotFoundError: if no daemon created the region
        """
        shm = shared_memory.SharedMemory(name=name, track=False)
        return cls(shm, min(capacity, shm.size), log)

    def publish(self, strings: list[str]) -> None:
        """Write `strings` into the region (client side, under the client lock).

        Raises:
            ChannelError: if the strings can't be stored
        """
        data = encode_strings(strings, self.capacity)
        self._shm.buf[: len(data)] = data

    def consume(self) -> list[str]:
        """Read the strings once and clear the region (daemon side).

        A malformed region is logged and read as no string at all.
        """
        buffer = self._shm.buf[: self.capacity].tobytes()
        self.clear()
        try:
            return decode_strings(buffer)
        except ChannelError as e:
            self.log.warning("Ignoring malformed trigger channel content: %s", e)
            return []

    def clear(self) -> None:
        """Reset the offset table to "no string"."""
        self._shm.buf[: WORD.size] = WORD.pack(0)

    def close(self) -> None:
        """Detach from the region."""
        self._shm.close()

    def unlink(self) -> None:
        """Destroy the region (daemon side, on shutdown)."""
        self._shm.unlink()
