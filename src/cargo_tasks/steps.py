"""
Step results and sequencing.

A step is one blocking invocation of an external tool. Its outcome is a
StepResult carrying the tool's exit code. Multi-step handlers are built with
run_sequence, which stops at the first failing step.
"""

import errno
import pathlib
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping, Protocol

from cargo_tasks import utils

LOG = utils.logger(__file__)

# Shell conventions for commands that could not be started
EXIT_NOT_EXECUTABLE = 126
EXIT_NOT_FOUND = 127


class Runner(Protocol):
    def __call__(
        self,
        args: list[Any],
        cwd: pathlib.Path | None = None,
        env: Mapping[str, str] | None = None,
    ) -> int: ...


@dataclass(frozen=True)
class StepResult:
    """Outcome of a step: success, or failure with the delegated exit code."""

    code: int = 0

    @property
    def ok(self) -> bool:
        return self.code == 0

    @classmethod
    def success(cls) -> "StepResult":
        return cls(0)

    @classmethod
    def failure(cls, code: int) -> "StepResult":
        if code == 0:
            raise ValueError("Failure requires a non-zero exit code")
        return cls(code)


def run_step(
    name: str,
    args: list[Any],
    cwd: pathlib.Path,
    env: Mapping[str, str] | None = None,
    runner: Runner = utils.process_call,
) -> StepResult:
    """
    Run a single external command and wrap its exit code.

    Args:
        name: Step name used in log output
        args: Command and arguments
        cwd: Directory to run the command in
        env: Extra environment variables for the command
        runner: Callable that executes the command and returns its exit code

    Returns:
        StepResult for the command
    """
    LOG.info("[%s] %s", name, " ".join(str(a) for a in args))
    try:
        code = runner(args, cwd=cwd, env=env)
    except OSError as e:
        LOG.error("[%s] failed to start %s: %s", name, args[0], e)
        code = EXIT_NOT_FOUND if e.errno == errno.ENOENT else EXIT_NOT_EXECUTABLE
    if code < 0:
        # Killed by signal N, reported the way a shell does
        code = 128 - code
    if code != 0:
        LOG.error("[%s] failed with exit code %s", name, code)
        return StepResult.failure(code)
    return StepResult.success()


def run_sequence(steps: Iterable[Callable[[], StepResult]]) -> StepResult:
    """
    Run steps in order, returning the first failure.

    Steps after a failing one are never called.
    """
    for step in steps:
        result = step()
        if not result.ok:
            return result
    return StepResult.success()
