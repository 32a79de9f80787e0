"""Trigger wire format.

A trigger is one payload word of `PAYLOAD_BITS` bits:

    bits [0, SELECTOR_BITS)            selector (segment index or character offset)
    bits [SELECTOR_BITS, PAYLOAD_BITS) number of auxiliary strings in the channel

It travels in a fixed 5 bytes frame on the control socket, prefixed with
the trigger kind (direct or positional). Client and daemon must agree on
this exact layout.
"""

import struct

from .constants import MAX_AUX_COUNT, SELECTOR_BITS
from .models import TriggerKind, WireError

__all__ = [
    "FRAME",
    "decode_payload",
    "encode_payload",
    "pack_frame",
    "unpack_frame",
]

FRAME = struct.Struct("=BI")
SELECTOR_MASK = (1 << SELECTOR_BITS) - 1


def encode_payload(selector: int, aux_count: int = 0) -> int:
    """Pack a selector and an auxiliary string count into one payload word.

    Raises:
        WireError: if a field doesn't fit its width
    """
    if not 0 <= selector <= SELECTOR_MASK:
        msg = f"selector {selector} out of range [0, {SELECTOR_MASK}]"
        raise WireError(msg)
    if not 0 <= aux_count <= MAX_AUX_COUNT:
        msg = f"auxiliary count {aux_count} out of range [0, {MAX_AUX_COUNT}]"
        raise WireError(msg)
    return (aux_count << SELECTOR_BITS) | selector


def decode_payload(word: int) -> tuple[int, int]:
    """Return (selector, aux_count) from a payload word."""
    return word & SELECTOR_MASK, (word >> SELECTOR_BITS) & MAX_AUX_COUNT


def pack_frame(kind: TriggerKind, selector: int, aux_count: int = 0) -> bytes:
    """Build the frame sent by the client for one trigger."""
    return FRAME.pack(kind, encode_payload(selector, aux_count))


def unpack_frame(data: bytes) -> tuple[TriggerKind, int, int]:
    """Decode a frame into (kind, selector, aux_count).

    Raises:
        WireError: on a short frame or an unknown trigger kind
    """
    if len(data) != FRAME.size:
        msg = f"expected {FRAME.size} bytes, got {len(data)}"
        raise WireError(msg)
    raw_kind, word = FRAME.unpack(data)
    try:
        kind = TriggerKind(raw_kind)
    except ValueError as e:
        msg = f"unknown trigger kind {raw_kind}"
        raise WireError(msg) from e
    selector, aux_count = decode_payload(word)
    return kind, selector, aux_count
