"""Typed read access to one configuration section."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import logging

    from .validation import ConfigItems

__all__ = ["Configuration"]


class Configuration(dict):
    """A configuration section (`[staccato]` or one `[[segments]]` entry).

    Missing keys fall back to the defaults declared in `schema`.
    """

    def __init__(self, *args: Any, logger: logging.Logger, schema: ConfigItems | None = None, **kwargs: Any) -> None:  # noqa: ANN401
        super().__init__(*args, **kwargs)
        self.log = logger
        self._defaults = {f.name: f.default for f in schema or () if f.default is not None}

    def get(self, name: str, default: Any = None) -> Any:  # noqa: ANN401
        """Return the configured value, else the schema default, else `default`."""
        if name in self:
            return self[name]
        return self._defaults.get(name, default)

    def _convert(self, name: str, kind: type, default: Any) -> Any:  # noqa: ANN401
        value = self.get(name)
        if value is None:
            return default
        try:
            return kind(value)
        except (ValueError, TypeError):
            self.log.warning("Invalid %s value for %s: %r", kind.__name__, name, value)
            return default

    def get_int(self, name: str, default: int = 0) -> int:
        """Get an integer value (`default` if missing or not a number)."""
        return self._convert(name, int, default)

    def get_float(self, name: str, default: float = 0.0) -> float:
        """Get a float value (`default` if missing or not a number)."""
        return self._convert(name, float, default)

    def get_str(self, name: str, default: str = "") -> str:
        return self._convert(name, str, default)
