"""Read the TOML configuration: one file, or every `.toml` file of a folder."""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import TYPE_CHECKING, Any

import aiofiles

from . import constants
from .models import ConfigError
from .utils import merge

if TYPE_CHECKING:
    import logging

__all__ = ["ConfigLoader"]


class ConfigLoader:
    """Loads the configuration.

    Files of a folder are merged in name order: tables are merged key by
    key and `[[segments]]` arrays are concatenated, so segments can be
    split across files (e.g. `10-system.toml`, `20-media.toml`).
    """

    def __init__(self, log: logging.Logger) -> None:
        self.log = log
        self.config: dict[str, Any] = {}

    async def load(self, config_filename: str = "") -> dict[str, Any]:
        """Load `config_filename` (the per-user default when empty).

        Environment variables and `~` are expanded.

        Raises:
            ConfigError: if a file is missing or isn't valid TOML (logged)
        """
        path = Path(os.path.expandvars(config_filename)).expanduser() if config_filename else constants.CONFIG_FILE
        if path.is_dir():
            for fname in sorted(path.glob("*.toml")):
                merge(self.config, await self._read(fname))
        else:
            merge(self.config, await self._read(path))
        return self.config

    async def _read(self, fname: Path) -> dict[str, Any]:
        if not fname.exists():
            self.log.critical("Config file not found! Please create %s", fname)
            raise ConfigError

        self.log.info("Loading %s", fname)
        async with aiofiles.open(fname, encoding="utf-8") as f:
            content = await f.read()
        try:
            return tomllib.loads(content)
        except tomllib.TOMLDecodeError as e:
            self.log.critical("Problem reading %s: %s", fname, e)
            raise ConfigError from e
