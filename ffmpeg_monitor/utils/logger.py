"""
Logging utilities with Rich integration.

Console output goes through a RichHandler on stderr so it never mixes with
anything a caller pipes from stdout; an optional plain-text file handler
keeps a full debug trail of a run.
"""

import inspect
import logging
import time
from functools import wraps
from pathlib import Path
from typing import Any, Callable, MutableMapping, Optional, TypeVar, cast

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from .errors import RunCancelledError

F = TypeVar("F", bound=Callable[..., Any])

ROOT_LOGGER_NAME = "ffmpeg_monitor"
FILE_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logger(
    name: str = ROOT_LOGGER_NAME,
    level: str = "INFO",
    log_file: Optional[Path] = None,
    verbose: bool = False,
    console: Optional[Console] = None,
) -> logging.Logger:
    """
    Configure the package logger.

    Calling it again replaces the handlers, so the CLI can reconfigure the
    import-time default once options are known.

    Args:
        name: Logger name (module loggers below "ffmpeg_monitor" inherit from it)
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to log file, overwritten on each setup
        verbose: Force DEBUG and show source paths
        console: Rich console to use (stderr console if None)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    log_level = logging.DEBUG if verbose else getattr(logging, level.upper(), logging.INFO)
    logger.setLevel(log_level)
    logger.handlers.clear()

    rich_handler = RichHandler(
        console=console or Console(stderr=True),
        rich_tracebacks=True,
        markup=True,
        show_time=True,
        show_path=verbose,
        omit_repeated_times=False,
        level=log_level,
    )
    rich_handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    logger.addHandler(rich_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        file_handler.setLevel(log_level)
        file_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(file_handler)

    # Handlers live on the package logger only
    logger.propagate = False

    return logger


class RunLoggerAdapter(logging.LoggerAdapter):
    """
    Logger adapter tagging every message with the input file of a run.

    Several runs may share one engine, so supervisor messages carry the run
    they belong to.
    """

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        return f"{escape(self.extra['run'])}: {msg}", kwargs


def get_run_logger(logger: logging.Logger, input_file: str) -> RunLoggerAdapter:
    """
    Wrap a module logger for one run.

    Args:
        logger: Module logger
        input_file: Input file identifying the run

    Returns:
        Adapter prefixing messages with the input file name
    """
    return RunLoggerAdapter(logger, {"run": Path(input_file).name or input_file})


def log_performance(
    logger: Optional[logging.Logger] = None, level: int = logging.DEBUG
) -> Callable[[F], F]:
    """
    Decorator logging how long a call took, and the error if it raised.

    Works for plain and coroutine functions. A RunCancelledError is logged at
    INFO since the caller asked for it.

    Args:
        logger: Logger instance to use (package logger if None)
        level: Level of the success message
    """
    log = logger or logging.getLogger(ROOT_LOGGER_NAME)

    def report(name: str, started: float, error: Optional[BaseException] = None) -> None:
        elapsed = time.perf_counter() - started
        if error is None:
            log.log(level, f"[cyan]{name}[/cyan] completed in {elapsed:.2f}s")
        elif isinstance(error, RunCancelledError):
            log.info(f"[yellow]{name}[/yellow] cancelled after {elapsed:.2f}s")
        else:
            log.error(f"[red]{name}[/red] failed after {elapsed:.2f}s: {escape(str(error))}")

    def decorator(func: F) -> F:
        if inspect.iscoroutinefunction(func):

            @wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                started = time.perf_counter()
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    report(func.__name__, started, e)
                    raise
                report(func.__name__, started)
                return result

            return cast(F, async_wrapper)

        @wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            started = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                report(func.__name__, started, e)
                raise
            report(func.__name__, started)
            return result

        return cast(F, sync_wrapper)

    return decorator


# Import-time default so library users get formatted output without setup
default_logger = setup_logger()


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """
    Get a logger instance.

    Modules call get_logger(__name__); names like "ffmpeg_monitor.executor.supervisor"
    inherit the handlers of the "ffmpeg_monitor" logger configured by setup_logger().

    Args:
        name: Logger name (typically __name__ from the calling module)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
