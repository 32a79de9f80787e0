"""The ordered, immutable list of segments and the delimiter between them."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from typing import TYPE_CHECKING, Any

from .config import Configuration
from .constants import SELECTOR_BITS
from .models import ConfigError, Segment
from .schema import SEGMENT_SCHEMA, STACCATO_CONFIG_SCHEMA
from .utf8 import strlen
from .validation import ConfigValidator

if TYPE_CHECKING:
    import logging

__all__ = ["SegmentRegistry", "load_settings"]


class SegmentRegistry:
    """Segments in display order; a segment's position is its identity on the wire."""

    def __init__(self, segments: Sequence[Segment], delimiter: str) -> None:
        if not segments:
            msg = "Nothing to do."
            raise ConfigError(msg)
        if len(segments) > 1 << SELECTOR_BITS:
            msg = f"Too many segments ({len(segments)})"
            raise ConfigError(msg)
        self._segments = tuple(segments)
        self.delimiter = delimiter
        try:
            self.delimiter_bytes = delimiter.encode("utf-8")
            self.delimiter_width = strlen(self.delimiter_bytes)
        except ValueError as e:
            msg = "delimiter is not valid UTF-8."
            raise ConfigError(msg) from e

    def __len__(self) -> int:
        return len(self._segments)

    def __getitem__(self, index: int) -> Segment:
        return self._segments[index]

    def __iter__(self) -> Iterator[Segment]:
        return iter(self._segments)

    def is_valid_index(self, index: int) -> bool:
        """Tell if `index` designates a segment."""
        return 0 <= index < len(self._segments)

    def indices_for_tag(self, tag: str) -> list[int]:
        """Return the index of every segment tagged `tag` (may be empty)."""
        return [i for i, segment in enumerate(self._segments) if segment.tag == tag]

    @classmethod
    def from_config(cls, config: dict[str, Any], log: logging.Logger, settings: Configuration | None = None) -> SegmentRegistry:
        """Build the registry from the loaded configuration.

        Args:
            config: the whole configuration
            log: logger used to report configuration errors
            settings: the already validated `[staccato]` section, if available

        Raises:
            ConfigError: if the configuration is invalid (errors are logged)
        """
        if settings is None:
            settings = load_settings(config, log)
        raw_segments = config.get("segments", [])
        if not isinstance(raw_segments, list):
            log.critical("[segments] must be an array of tables ([[segments]])")
            raise ConfigError

        errors: list[str] = []
        segments = []
        for index, raw in enumerate(raw_segments):
            section = f"segments[{index}]"
            if not isinstance(raw, dict):
                errors.append(f"[{section}] Expected a table, got {type(raw).__name__}")
                continue
            validator = ConfigValidator(raw, section, log)
            errors.extend(validator.validate(SEGMENT_SCHEMA))
            validator.warn_unknown_keys(SEGMENT_SCHEMA)
            conf = Configuration(raw, logger=log, schema=SEGMENT_SCHEMA)
            segments.append(Segment(conf.get_str("command"), conf.get_int("interval"), conf.get_str("tag")))

        for error in errors:
            log.error(error)
        if errors:
            log.critical("Invalid configuration: %d error(s)", len(errors))
            raise ConfigError

        try:
            return cls(segments, settings.get_str("delimiter"))
        except ConfigError as e:
            log.critical("%s", e)
            raise


def load_settings(config: dict[str, Any], log: logging.Logger) -> Configuration:
    """Validate and return the `[staccato]` section with its defaults applied.

    Raises:
        ConfigError: if the section is invalid (errors are logged)
    """
    section = config.get("staccato", {})
    validator = ConfigValidator(section, "staccato", log)
    errors = validator.validate(STACCATO_CONFIG_SCHEMA)
    validator.warn_unknown_keys(STACCATO_CONFIG_SCHEMA)
    for error in errors:
        log.error(error)
    if errors:
        log.critical("Invalid configuration: %d error(s)", len(errors))
        raise ConfigError
    return Configuration(section, logger=log, schema=STACCATO_CONFIG_SCHEMA)
