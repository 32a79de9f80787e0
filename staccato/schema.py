"""Configuration schemas for the `[staccato]` section and `[[segments]]` entries."""

from .constants import DEFAULT_DELIMITER, DEFAULT_OUTPUT_CAP, DEFAULT_SINK, DEFAULT_TICK
from .validation import ConfigField, ConfigItems

__all__ = ["SEGMENT_SCHEMA", "STACCATO_CONFIG_SCHEMA"]


def _positive(value: float) -> list[str]:
    return [] if value > 0 else [f"must be greater than 0, got {value}"]


def _not_negative(value: int) -> list[str]:
    return [] if value >= 0 else [f"must be 0 or more, got {value}"]


def _not_empty(value: str) -> list[str]:
    return [] if value else ["must not be empty"]


STACCATO_CONFIG_SCHEMA = ConfigItems(
    ConfigField("delimiter", str, default=DEFAULT_DELIMITER, description="Text inserted between segments", validator=_not_empty),
    ConfigField("output_cap", int, default=DEFAULT_OUTPUT_CAP, description="Maximum bytes kept from a command output", validator=_positive),
    ConfigField("sink", str, default=DEFAULT_SINK, description="Where the status line goes", choices=["xroot", "stdout"]),
    ConfigField("tick", (int, float), default=DEFAULT_TICK, description="Scheduler tick length in seconds", validator=_positive),
)

SEGMENT_SCHEMA = ConfigItems(
    ConfigField("command", str, required=True, description="Shell command producing the segment text"),
    ConfigField("interval", int, default=0, description="Refresh period in seconds, 0 to only refresh on trigger", validator=_not_negative),
    ConfigField("tag", str, default="", description="Name used by `staccato -t`"),
)
