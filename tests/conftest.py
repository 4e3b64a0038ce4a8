import pathlib

import pytest

from cargo_tasks import utils
from cargo_tasks.config import Settings, TaskContext

_STEP_NAMES = {"fix": "fix", "clippy": "lint", "doc": "doc", "fmt": "fmt"}


def step_name(args) -> str:
    """Map a recorded cargo command line to its step name."""
    for arg in args[1:]:
        if str(arg) in _STEP_NAMES:
            return _STEP_NAMES[str(arg)]
    raise AssertionError(f"Unexpected command: {args}")


class RecordingRunner:
    """Runner double that records calls and returns configured exit codes."""

    def __init__(self, codes: dict[str, int] | None = None):
        self.codes = codes or {}
        self.calls: list[tuple[list, pathlib.Path | None, dict | None]] = []

    def __call__(self, args, cwd=None, env=None) -> int:
        self.calls.append((list(args), cwd, env))
        return self.codes.get(step_name(args), 0)

    @property
    def steps(self) -> list[str]:
        return [step_name(args) for args, _, _ in self.calls]


@pytest.fixture
def context(tmp_path) -> TaskContext:
    return TaskContext(
        root=tmp_path,
        cargo=pathlib.Path("/usr/bin/cargo"),
        settings=Settings(),
    )


@pytest.fixture
def runner() -> RecordingRunner:
    return RecordingRunner()


@pytest.fixture(autouse=True)
def clear_which_cache():
    utils.which.cache_clear()
    yield
    utils.which.cache_clear()
