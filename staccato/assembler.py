"""Per-segment output cache and the status line built from it."""

__all__ = ["OutputCache", "StatusAssembler"]


class OutputCache:
    """One bounded output buffer per segment, initially empty."""

    def __init__(self, size: int, cap: int) -> None:
        self.cap = cap
        self._entries = [b""] * size

    def __len__(self) -> int:
        return len(self._entries)

    def __getitem__(self, index: int) -> bytes:
        return self._entries[index]

    def store(self, index: int, output: bytes) -> None:
        """Replace the entry of segment `index`."""
        self._entries[index] = output[: self.cap]

    def snapshot(self) -> tuple[bytes, ...]:
        """Return every entry, in registry order."""
        return tuple(self._entries)


class StatusAssembler:
    """Joins the cached outputs with the delimiter.

    Callers hold the daemon's critical section while assembling so that
    no entry changes halfway through.
    """

    def __init__(self, cache: OutputCache, delimiter: bytes) -> None:
        self.cache = cache
        self.delimiter = delimiter
        self.last_status = b""

    def assemble(self) -> bytes:
        """Build the status line, remember it as `last_status` and return it."""
        self.last_status = self.delimiter.join(self.cache.snapshot())
        return self.last_status
