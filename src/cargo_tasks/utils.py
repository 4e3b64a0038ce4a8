"""
General utility functions for the cargo-tasks tool.

This module provides common functionality used across the task runner
including:
- Logging configuration with severity highlighting on stderr
- System-level operations like executable discovery
- Blocking subprocess invocation with inherited output streams

The logger function configures logging to stderr, respecting the LOG_LEVEL
environment variable.
"""

import functools
import logging
import os
import pathlib
import shutil
import subprocess
import sys
from os import PathLike
from typing import Any, Callable, Mapping, TypeVar

import click

T = TypeVar("T")

LOG = logging.getLogger("utils")

# Severity highlighting, informational vs fatal
_LEVEL_STYLES: dict[int, dict[str, Any]] = {
    logging.DEBUG: {"dim": True},
    logging.INFO: {"fg": "cyan"},
    logging.WARNING: {"fg": "yellow"},
    logging.ERROR: {"fg": "red", "bold": True},
    logging.CRITICAL: {"fg": "red", "bold": True},
}


class _StyleFormatter(logging.Formatter):
    """Formatter that colors the rendered record by its level."""

    def __init__(self, fmt: str, color: bool = True):
        super().__init__(fmt)
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        style = _LEVEL_STYLES.get(record.levelno)
        return click.style(text, **style) if style and self.color else text


def logger(name: str) -> logging.Logger:
    """
    Get a logger for a cargo-tasks module, configuring stderr output once.

    Modules pass their own __file__, which is shortened to the file stem so
    records read "steps", "tasks" and so on.
    """
    _configure_root_logger()
    path = run_catching(pathlib.Path, name)
    if path is not None and path.suffix == ".py":
        name = path.stem
    return logging.getLogger(name)


def log_level(value: str | None, default: int = logging.INFO) -> int:
    """Map a level name such as "debug" to its logging constant."""
    return logging.getLevelNamesMapping().get((value or "").upper(), default)


def set_log_level(value: str | None):
    """Apply a level name to the root logger, ignoring unknown names."""
    _configure_root_logger()
    logging.getLogger().setLevel(log_level(value))


@functools.cache
def _configure_root_logger():
    """
    Configure the root logger with a single stderr handler.

    Every record is diagnostic output, so nothing is written to stdout.
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        _StyleFormatter("%(message)s", color=bool(run_catching(sys.stderr.isatty)))
    )

    logging.basicConfig(
        level=log_level(os.getenv("LOG_LEVEL")),
        handlers=[handler],
    )


def run_catching(fn: Callable[..., T], *args: Any, default: T = None) -> T:
    """
    Call fn for a value that may simply be unavailable.

    Startup probes (a detached stderr, an argv[0] that cannot be resolved, a
    PATH lookup on a broken entry) return default instead of aborting; the
    failure is logged at DEBUG level.
    """
    try:
        return fn(*args)
    except Exception as e:
        LOG.debug("%s%s unavailable: %s", fn, args, e)
        return default


def process_call(
    args: list[Any],
    cwd: os.PathLike | str | None = None,
    env: Mapping[str, str] | None = None,
) -> int:
    """
    Execute a command synchronously and return its exit code.

    The child inherits stdin, stdout and stderr so the wrapped tool talks to
    the terminal directly. Its output is never captured or transformed.

    Args:
        args: Command and arguments.
        cwd: Directory to run the command in.
        env: Extra environment variables layered over the current environment.

    Returns:
        The command's exit code.

    Raises:
        OSError: If the executable cannot be started.
    """
    process_args = [
        os.fspath(arg) if isinstance(arg, PathLike) else str(arg) for arg in args
    ]
    process_env = {**os.environ, **env} if env else None
    LOG.debug("Executing command: %s cwd:%s", process_args, cwd)
    return subprocess.run(process_args, cwd=cwd, env=process_env).returncode


@functools.lru_cache(maxsize=None)
def which(name: str) -> pathlib.Path | None:
    """
    Locate an executable in the system path.

    Finds the absolute path to a tool (like `cargo`) needed by the CLI.
    Relative paths are anchored to the current directory so the result still
    names the same file after a chdir. Symlinks are not followed: a
    rustup proxy must keep its own name. Results are cached.

    Args:
        name: Name or path of the executable to find.

    Returns:
        Path to the executable if found, otherwise None.
    """
    path = run_catching(shutil.which, name)
    if path:
        return pathlib.Path(path).absolute()
    else:
        file = pathlib.Path(name)
        if file.is_file() and os.access(file, os.X_OK):
            return file.absolute()
    LOG.debug("Executable not found: %s", name)
    return None
