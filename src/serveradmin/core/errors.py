"""
Error types shared by all operations
"""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .runner import CommandResult


class AdminError(Exception):
    """Base class for every failure the CLI reports to the operator"""


class ValidationError(AdminError):
    """Operator input was rejected (username, password, port, domain...)"""


class PrerequisiteError(AdminError):
    """A precondition is missing: root privileges, a command, a readable file"""


class CommandError(AdminError):
    """An external command exited with a non-zero status"""

    def __init__(self, message: str, result: Optional["CommandResult"] = None):
        super().__init__(message)
        self.result = result

    def __str__(self) -> str:
        message = super().__str__()
        if self.result is not None and self.result.output:
            return f"{message}: {self.result.output}"
        return message
