"""Exceptions raised before any task runs."""


class TaskError(Exception):
    """Base exception for fatal task runner errors."""

    exit_code = 1


class ToolNotFoundError(TaskError):
    """Raised when a required executable cannot be resolved on the path."""

    def __init__(self, tool: str):
        self.tool = tool
        super().__init__(f"Required executable not found: {tool}")


class UsageError(TaskError):
    """Raised when the command token is missing or unrecognized."""

    def __init__(self, token: str | None = None):
        self.token = token
        if token is None:
            message = "No command given"
        else:
            message = f"Unknown command: {token}"
        super().__init__(message)
