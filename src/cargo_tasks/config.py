"""
Configuration and startup context for cargo-tasks.

This module resolves everything a task needs exactly once, before dispatch:
- Settings read from CARGO_TASKS_* environment variables
- The working directory every delegated tool runs in
- The required executable, whose absence is fatal

The resulting TaskContext is immutable and passed explicitly to the
dispatcher and its handlers.
"""

import os
import pathlib
import sys
from typing import Mapping

from pydantic import BaseModel, ConfigDict, Field

from cargo_tasks import utils
from cargo_tasks.errors import ToolNotFoundError

LOG = utils.logger(__file__)

ENV_PREFIX = "CARGO_TASKS_"
ROOT_ENV = f"{ENV_PREFIX}ROOT"
CARGO_MANIFEST = "Cargo.toml"


class Settings(BaseModel):
    """
    Tool settings with defaults matching a stock rustup install.

    Attributes:
        cargo: Name or path of the cargo executable
        fmt_toolchain: Toolchain channel the formatter runs on
        rustdocflags: Value exported as RUSTDOCFLAGS for the documentation build
    """

    model_config = ConfigDict(frozen=True)

    cargo: str = Field(default="cargo", min_length=1)
    fmt_toolchain: str = Field(default="nightly", min_length=1)
    rustdocflags: str = "-D warnings"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """
        Build settings from CARGO_TASKS_<FIELD> variables.

        Args:
            environ: Environment mapping, defaults to os.environ

        Returns:
            Settings with every variable present applied over the defaults
        """
        if environ is None:
            environ = os.environ
        values = {}
        for name in cls.model_fields:
            env_name = f"{ENV_PREFIX}{name.upper()}"
            if env_name in environ:
                values[name] = environ[env_name]
        return cls(**values)


class TaskContext(BaseModel):
    """
    Startup values shared by every handler.

    Attributes:
        root: Directory all delegated tools run in
        cargo: Resolved path of the cargo executable
        settings: Settings the context was built from
    """

    model_config = ConfigDict(frozen=True)

    root: pathlib.Path
    cargo: pathlib.Path
    settings: Settings = Settings()


def entry_point_dir(argv0: str | None = None) -> pathlib.Path:
    """
    Return the directory containing the invoked entry-point script.

    Only a script sitting next to a Cargo.toml counts. An installed console
    script, or an argv[0] that is not a file, falls back to the current
    directory.
    """
    if argv0 is None:
        argv0 = sys.argv[0] if sys.argv else ""
    path = utils.run_catching(lambda: pathlib.Path(argv0).resolve())
    if path and path.is_file() and (path.parent / CARGO_MANIFEST).is_file():
        return path.parent
    return pathlib.Path.cwd()


def resolve_root(
    root: os.PathLike | str | None = None,
    environ: Mapping[str, str] | None = None,
) -> pathlib.Path:
    """
    Resolve the working directory: explicit value, then CARGO_TASKS_ROOT, then
    the entry point's own directory.
    """
    if environ is None:
        environ = os.environ
    if root is None:
        root = environ.get(ROOT_ENV) or None
    if root is None:
        return entry_point_dir()
    path = pathlib.Path(root).resolve()
    if not path.is_dir():
        raise NotADirectoryError(f"Invalid root directory: {path}")
    return path


def load_context(
    root: os.PathLike | str | None = None, settings: Settings | None = None
) -> TaskContext:
    """
    Run the environment precondition and build the task context.

    Args:
        root: Working directory override, see resolve_root
        settings: Settings override, defaults to Settings.from_env()

    Returns:
        The immutable TaskContext

    Raises:
        ToolNotFoundError: If the cargo executable cannot be resolved
    """
    if settings is None:
        settings = Settings.from_env()
    cargo = utils.which(settings.cargo)
    if cargo is None:
        raise ToolNotFoundError(settings.cargo)
    context = TaskContext(root=resolve_root(root), cargo=cargo, settings=settings)
    LOG.debug("Task context: %s", context)
    return context
