"""Byte level UTF-8 helpers used to count characters in the status line."""

__all__ = ["char_size", "sequence_size", "strlen"]

# index 0 matches continuation bytes, 1..4 match lead bytes of that length
_UTF_BYTE = (0x80, 0x00, 0xC0, 0xE0, 0xF0)
_UTF_MASK = (0xC0, 0x80, 0xE0, 0xF0, 0xF8)


def char_size(lead: int) -> int:
    """Return the length of the sequence started by byte `lead`, 0 if it can't start one."""
    for size, (byte, mask) in enumerate(zip(_UTF_BYTE, _UTF_MASK, strict=True)):
        if lead & mask == byte:
            return size
    return 0


def sequence_size(data: bytes, pos: int) -> int:
    """Return the size of the UTF-8 sequence at `data[pos]`, 0 when it is invalid or truncated."""
    size = char_size(data[pos])
    if size == 0 or pos + size > len(data):
        return 0
    for i in range(pos + 1, pos + size):
        if data[i] & _UTF_MASK[0] != _UTF_BYTE[0]:
            return 0
    return size


def strlen(data: bytes) -> int:
    """Count the characters of a UTF-8 byte string.

    Raises:
        ValueError: if `data` is not valid UTF-8
    """
    length = pos = 0
    while pos < len(data):
        size = sequence_size(data, pos)
        if not size:
            msg = f"invalid UTF-8 at byte {pos}"
            raise ValueError(msg)
        pos += size
        length += 1
    return length
