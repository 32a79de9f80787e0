"""Shared constants for staccato."""

import os
from pathlib import Path

__all__ = [
    "AUX_BITS",
    "CHANNEL_SIZE",
    "CONFIG_FILE",
    "DEFAULT_DELIMITER",
    "DEFAULT_OUTPUT_CAP",
    "DEFAULT_SINK",
    "DEFAULT_TICK",
    "MAX_AUX_COUNT",
    "PAYLOAD_BITS",
    "RUNTIME_DIR",
    "SELECTOR_BITS",
    "TERMINATION_SIGNALS",
    "TRIGGER_QUEUE_SIZE",
]

# Config file path - use XDG_CONFIG_HOME with fallback to ~/.config
_xdg_config_home = Path(os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config")
CONFIG_FILE = _xdg_config_home / "staccato" / "config.toml"

# PID file, control socket and client lock file live here
RUNTIME_DIR = Path(os.environ.get("XDG_RUNTIME_DIR") or "/tmp")  # noqa: S108

# Status line defaults
DEFAULT_DELIMITER = " | "
DEFAULT_OUTPUT_CAP = 32  # bytes kept from a command's first output line
DEFAULT_SINK = "xroot"
DEFAULT_TICK = 1.0  # seconds per scheduler tick

# Trigger payload: one 32 bits word, aux count in the 3 high bits
PAYLOAD_BITS = 32
AUX_BITS = 3
SELECTOR_BITS = PAYLOAD_BITS - AUX_BITS
MAX_AUX_COUNT = (1 << AUX_BITS) - 1

# Trigger channel capacity in bytes
CHANNEL_SIZE = 4096

# Pending triggers waiting for the dispatcher
TRIGGER_QUEUE_SIZE = 32

TERMINATION_SIGNALS = ("SIGTERM", "SIGINT", "SIGHUP", "SIGQUIT")
