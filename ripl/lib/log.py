"""
Debug tracing for the ripl engine, written through Loguru to stderr.

`LOG` records what the loop is doing while a session runs:
- Loop Driver state transitions (`awaiting_input -> evaluating`, ...)
- Reader decisions: directives, and fragments found incomplete, complete
  or invalid after N lines
- Runtime faults with their Ruby error class
- Meta command parse and dispatch errors
- Settings in effect at startup

Records carry the calling module, function and line. `appsettings.beQuiet`
is read on every call, so `--verbose` takes effect after import.

Example:
    from ripl.lib.log import LOG
    LOG("Fragment incomplete after 2 line(s)")

Environment:
- Set `RIPL_BEQUIET=false` (or pass `--verbose`) to see debug output.
"""

from loguru import logger
from typing import Any
import sys

engine_logger = logger.bind(app="RIPL")

logger_format = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> │ "
    "<level>{level: <5}</level> │ "
    "<yellow>{name: >22}</yellow>::"
    "<cyan>{function: <24}</cyan> @ "
    "<cyan>{line: <4}</cyan> ║ "
    "<level>{message}</level>"
)

engine_logger.remove()
engine_logger.add(sys.stderr, format=logger_format, level="DEBUG")


def LOG(*args: Any, **kwargs: Any) -> None:
    """
    Trace an engine event at debug level unless `appsettings.beQuiet` is set.

    :param args: Positional arguments for the log message.
    :param kwargs: Keyword arguments for additional log metadata.
    """
    try:
        from ripl.config.settings import appsettings

        if not appsettings.beQuiet:
            engine_logger.opt(depth=1).debug(*args, **kwargs)
    except Exception as e:
        print(f"Logging error: {e}", file=sys.stderr)
