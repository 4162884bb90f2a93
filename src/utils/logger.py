import sys
from typing import Any, Literal
from loguru import logger

# Every logger bound by this project lives under this namespace
BASE_LOGGER_NAMESPACE = "jit_tools"

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

_MODULE_FORMAT = "<level>{level: <8}</level> | <cyan>{extra[module]}</cyan> | {message}"
_PLAIN_FORMAT = "<level>{level: <8}</level> | {message}"

_handler_ids: list[int] = []


def get_logger(name: str) -> "logger":
    """
    Returns a loguru logger bound with the given component name.

    Example: get_logger("Retriever") → logger with module="jit_tools.Retriever"

    loguru has one global logger; binding only attaches the ``module`` extra
    that the handlers below use for formatting.
    """
    return logger.bind(module=f"{BASE_LOGGER_NAMESPACE}.{name}")


def configure_logging(
    level: LogLevel = "INFO",
    sink: Any = sys.stderr,
    serialize: bool = False,
) -> None:
    """
    Configures loguru for the whole process.

    Only the first call installs handlers; later calls are no-ops so library
    code and the CLI can both call it safely.

    Args:
        level: Minimum level to emit.
        sink: Any loguru sink (stream, path or callable). Defaults to stderr.
        serialize: Emit JSON records instead of the coloured console format.
    """
    if _handler_ids:
        return

    logger.remove()

    colorize = not serialize and sink in (sys.stderr, sys.stdout)
    _handler_ids.append(
        logger.add(
            sink,
            format=_MODULE_FORMAT,
            level=level,
            colorize=colorize,
            serialize=serialize,
            filter=lambda record: "module" in record["extra"],
        )
    )
    _handler_ids.append(
        logger.add(
            sink,
            format=_PLAIN_FORMAT,
            level=level,
            colorize=colorize,
            serialize=serialize,
            filter=lambda record: "module" not in record["extra"],
        )
    )


def reset_logging() -> None:
    """Remove handlers installed by configure_logging so it can run again."""
    while _handler_ids:
        logger.remove(_handler_ids.pop())
