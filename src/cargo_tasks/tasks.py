"""
Task handlers and command dispatch.

This module defines the closed set of commands the CLI accepts. Each Command
member carries its token, its usage line and its handler, so the usage text
always lists exactly the registered commands. Commands:
- check: cargo fix, then fmt, then cargo clippy, then cargo doc with warnings as errors
- fmt: cargo fmt on the configured toolchain channel

Handlers return a StepResult whose code becomes the process exit status.
"""

import enum
import functools
from typing import Callable, Sequence

from cargo_tasks import steps, utils
from cargo_tasks.config import TaskContext
from cargo_tasks.errors import UsageError
from cargo_tasks.steps import Runner, StepResult

LOG = utils.logger(__file__)

Handler = Callable[[TaskContext, Sequence[str], Runner], StepResult]


def fix(context: TaskContext, runner: Runner = utils.process_call) -> StepResult:
    return steps.run_step("fix", [context.cargo, "fix"], context.root, runner=runner)


def fmt(
    context: TaskContext,
    args: Sequence[str] = (),
    runner: Runner = utils.process_call,
) -> StepResult:
    """Run the formatter once on the configured toolchain channel."""
    toolchain = f"+{context.settings.fmt_toolchain}"
    return steps.run_step(
        "fmt", [context.cargo, toolchain, "fmt", *args], context.root, runner=runner
    )


def lint(context: TaskContext, runner: Runner = utils.process_call) -> StepResult:
    return steps.run_step(
        "lint", [context.cargo, "clippy"], context.root, runner=runner
    )


def doc(context: TaskContext, runner: Runner = utils.process_call) -> StepResult:
    """Build documentation with RUSTDOCFLAGS promoting warnings to errors."""
    return steps.run_step(
        "doc",
        [context.cargo, "doc"],
        context.root,
        env={"RUSTDOCFLAGS": context.settings.rustdocflags},
        runner=runner,
    )


def check(
    context: TaskContext,
    args: Sequence[str] = (),
    runner: Runner = utils.process_call,
) -> StepResult:
    """
    Run fix, fmt, lint and doc in order, stopping at the first failure.

    Pass-through arguments are accepted but not handed to the individual
    steps, which always run with their default arguments.
    """
    if args:
        LOG.debug("check ignores arguments: %s", list(args))
    return steps.run_sequence(
        [
            functools.partial(fix, context, runner=runner),
            functools.partial(fmt, context, runner=runner),
            functools.partial(lint, context, runner=runner),
            functools.partial(doc, context, runner=runner),
        ]
    )


def _fmt_command(
    context: TaskContext, args: Sequence[str], runner: Runner
) -> StepResult:
    return fmt(context, args, runner=runner)


def _check_command(
    context: TaskContext, args: Sequence[str], runner: Runner
) -> StepResult:
    return check(context, args, runner=runner)


class Command(enum.Enum):
    """Registered commands as (token, description, handler)."""

    CHECK = (
        "check",
        "Run cargo fix, fmt, cargo clippy and cargo doc (warnings as errors)",
        _check_command,
    )
    FMT = ("fmt", "Run cargo fmt on the configured toolchain channel", _fmt_command)

    def __init__(self, token: str, description: str, handler: Handler):
        self.token = token
        self.description = description
        self.handler = handler

    @classmethod
    def from_token(cls, token: str | None) -> "Command | None":
        for command in cls:
            if command.token == token:
                return command
        return None


def usage(prog: str = "x.py") -> str:
    """Render the usage listing with one line per registered command."""
    width = max(len(command.token) for command in Command)
    lines = [f"Usage: {prog} <command> [args...]", "", "Commands:"]
    for command in Command:
        lines.append(f"  {command.token.ljust(width)}  {command.description}")
    return "\n".join(lines)


def dispatch(
    tokens: Sequence[str],
    context: TaskContext,
    runner: Runner = utils.process_call,
) -> int:
    """
    Route the first token to its handler and return the exit status.

    Args:
        tokens: Command token followed by pass-through arguments
        context: Startup context from config.load_context
        runner: Callable used to execute external commands

    Returns:
        The handler's exit code, 0 on success

    Raises:
        UsageError: If no token is given or it matches no command
    """
    if not tokens:
        raise UsageError()
    command = Command.from_token(tokens[0])
    if command is None:
        raise UsageError(tokens[0])
    args = list(tokens[1:])
    LOG.debug("Dispatching %s args:%s root:%s", command.token, args, context.root)
    result = command.handler(context, args, runner)
    if result.ok:
        LOG.info("%s finished", command.token)
    return result.code
