"""Common types shared by the daemon and the client."""

from dataclasses import dataclass, field
from enum import IntEnum

__all__ = [
    "AlreadyRunningError",
    "ChannelError",
    "ClickResult",
    "ConfigError",
    "ExitCode",
    "Segment",
    "StaccatoError",
    "TriggerKind",
    "TriggerMessage",
    "WireError",
]


@dataclass(frozen=True)
class Segment:
    """One periodically executed command contributing a field to the status line."""

    command: str
    interval: int = 0  # seconds, 0 = only run on trigger
    tag: str = ""


class TriggerKind(IntEnum):
    """How the selector of a trigger must be interpreted."""

    DIRECT = 1  # segment index
    POSITIONAL = 2  # character offset in the last status line


class ClickResult(IntEnum):
    """Sentinels returned when an offset can't be attributed to a segment."""

    DELIMITER = -1
    INVALID_UTF8 = -2
    OUT_OF_RANGE = -3


@dataclass
class TriggerMessage:
    """A decoded trigger, consumed once by the dispatcher."""

    kind: TriggerKind
    selector: int
    aux_count: int = 0
    extra_env: list[str] = field(default_factory=list)


class StaccatoError(BaseException):
    """Used for errors which already triggered logging."""


class ConfigError(StaccatoError):
    """The configuration is missing or invalid."""


class AlreadyRunningError(Exception):
    """Another daemon owns the liveness marker."""

    def __init__(self, pid: int | None) -> None:
        super().__init__(pid)
        self.pid = pid  # None if it could not be read


class ChannelError(Exception):
    """The trigger channel can't hold the requested payload."""


class WireError(ValueError):
    """A value doesn't fit in the trigger payload layout."""


class ExitCode(IntEnum):
    """Standard exit codes for staccato commands."""

    SUCCESS = 0
    USAGE_ERROR = 1  # invalid arguments
    ENV_ERROR = 2  # configuration or runtime environment problem
    CONNECTION_ERROR = 3  # cannot reach the daemon
    COMMAND_ERROR = 4  # the trigger could not be sent
