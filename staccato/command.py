"""Command line entry points: `staccatod` (daemon) and `staccato` (client)."""

import asyncio
import sys

from .client import run_client
from .daemon import run_daemon
from .logging_setup import get_logger, init_logger
from .models import ConfigError, ExitCode, StaccatoError

__all__ = ["client_main", "daemon_main", "use_flag", "use_param"]

DAEMON_USAGE = """Syntax: staccatod [-p] [--config PATH] [--debug LOGFILE]

Runs the status line daemon.

 -p                 print the status line on stdout instead of the X root window name
 --config PATH      configuration file or folder
 --debug LOGFILE    verbose logging, also written to LOGFILE
"""

CLIENT_USAGE = """Syntax: staccato (-i INDEX | -t TAG | -c OFFSET) [-e NAME=VALUE]... [--config PATH]

Asks the running daemon to refresh one segment.

 -i INDEX           segment at this position (starting at 0)
 -t TAG             every segment with this tag
 -c OFFSET          segment displayed at this character offset of the status line
 -e NAME=VALUE      environment variable set for this run only (up to 7)
"""


def use_param(txt: str, argv: list[str] | None = None) -> str:
    """Check if parameter `txt` is in argv (sys.argv by default).

    if found, removes it from argv & returns the argument value
    """
    if argv is None:
        argv = sys.argv
    v = ""
    if txt in argv:
        i = argv.index(txt)
        if i + 1 < len(argv):
            v = argv[i + 1]
        del argv[i : i + 2]
    return v


def use_flag(txt: str, argv: list[str] | None = None) -> bool:
    """Remove flag `txt` from argv (sys.argv by default), returning True if it was there."""
    if argv is None:
        argv = sys.argv
    if txt in argv:
        argv.remove(txt)
        return True
    return False


def _init_logging() -> None:
    debug_flag = use_param("--debug")
    if debug_flag:
        init_logger(filename=debug_flag, force_debug=True)
    else:
        init_logger()


def daemon_main() -> None:
    """Run the daemon command."""
    if use_flag("--help") or use_flag("-h"):
        print(DAEMON_USAGE)
        sys.exit(ExitCode.SUCCESS)
    _init_logging()
    log = get_logger("startup")

    config_override = use_param("--config")
    to_stdout = use_flag("-p")
    if len(sys.argv) > 1:
        log.error("Invalid arguments: %s", " ".join(sys.argv[1:]))
        print(DAEMON_USAGE, file=sys.stderr)
        sys.exit(ExitCode.USAGE_ERROR)

    try:
        asyncio.run(run_daemon(config_override, "stdout" if to_stdout else None))
    except KeyboardInterrupt:
        pass
    except ConfigError:
        log.critical("Invalid configuration.")
        sys.exit(ExitCode.ENV_ERROR)
    except StaccatoError:
        log.critical("Daemon startup failed.")
        sys.exit(ExitCode.ENV_ERROR)
    except Exception:  # pylint: disable=W0718
        log.critical("Unhandled exception:", exc_info=True)
        sys.exit(ExitCode.COMMAND_ERROR)


def client_main() -> None:
    """Run the client command."""
    no_args = len(sys.argv) <= 1
    if no_args or use_flag("--help") or use_flag("-h"):
        print(CLIENT_USAGE)
        sys.exit(ExitCode.USAGE_ERROR if no_args else ExitCode.SUCCESS)
    _init_logging()
    log = get_logger("startup")

    config_override = use_param("--config")
    try:
        code = asyncio.run(run_client(sys.argv[1:], config_override))
    except KeyboardInterrupt:
        code = ExitCode.COMMAND_ERROR
    except StaccatoError:
        log.critical("Cannot read the configuration.")
        code = ExitCode.ENV_ERROR
    if code == ExitCode.USAGE_ERROR:
        print(CLIENT_USAGE, file=sys.stderr)
    sys.exit(code)


if __name__ == "__main__":
    daemon_main()
