"""Map a character offset in the status line back to the segment it belongs to."""

from .models import ClickResult
from .utf8 import sequence_size

__all__ = ["segment_from_offset"]


def segment_from_offset(status: bytes, delimiter: bytes, delimiter_width: int, offset: int) -> int:
    """Retrieve the segment index owning the character at `offset`.

    The status line is walked once, one code point at a time; a delimiter
    occurrence counts as `delimiter_width` characters and bumps the segment
    index.

    Args:
        status: the last assembled status line (UTF-8 bytes)
        delimiter: the raw delimiter bytes
        delimiter_width: number of characters in the delimiter
        offset: zero based character (not byte) offset

    Returns:
        The segment index, or a negative `ClickResult`:
        DELIMITER if the offset falls on a delimiter,
        INVALID_UTF8 if undecodable bytes come first,
        OUT_OF_RANGE if the line is shorter than `offset`.
    """
    if offset < 0:
        return ClickResult.OUT_OF_RANGE
    char_count = delim_count = pos = 0
    while pos < len(status):
        if delimiter and status.startswith(delimiter, pos):
            char_count += delimiter_width
            if char_count > offset:
                return ClickResult.DELIMITER
            delim_count += 1
            pos += len(delimiter)
            continue
        if char_count >= offset:
            return delim_count
        size = sequence_size(status, pos)
        if not size:
            return ClickResult.INVALID_UTF8
        pos += size
        char_count += 1
    return ClickResult.OUT_OF_RANGE
