"""
External command execution
Every OS tool is invoked through an explicit argv list and yields a CommandResult
"""

import logging
import os
import shutil
import subprocess
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from .errors import CommandError, PrerequisiteError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one external command"""
    args: Sequence[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        """stderr if present, stdout otherwise, stripped"""
        return (self.stderr or self.stdout).strip()

    def check(self, message: str) -> "CommandResult":
        """Raise CommandError with ``message`` unless the command succeeded"""
        if not self.ok:
            raise CommandError(message, self)
        return self


class CommandRunner:
    """
    Runs system commands synchronously

    Commands are never passed through a shell. A command missing from PATH
    yields returncode 127 instead of raising, the same way a shell reports it.
    """

    def run(
        self,
        args: Sequence[str],
        input: Optional[str] = None,
        env: Optional[dict] = None,
    ) -> CommandResult:
        args = [str(a) for a in args]
        logger.debug("Running: %s", " ".join(args))

        try:
            completed = subprocess.run(
                args,
                input=input,
                capture_output=True,
                text=True,
                env=env,
            )
        except FileNotFoundError:
            logger.debug("Command not found: %s", args[0])
            return CommandResult(args, 127, "", f"{args[0]}: command not found")

        result = CommandResult(args, completed.returncode, completed.stdout, completed.stderr)
        if not result.ok:
            logger.debug("Exit code %s from %s: %s", result.returncode, args[0], result.output)
        return result

    def which(self, name: str) -> Optional[str]:
        return shutil.which(name)

    def is_root(self) -> bool:
        return os.geteuid() == 0


def require_root(runner: CommandRunner):
    """Fail unless running with administrative privileges"""
    if not runner.is_root():
        raise PrerequisiteError("This command must be run as root (try: sudo serveradmin ...)")


def require_commands(runner: CommandRunner, commands: Iterable[str]):
    """Fail on the first command that is not on PATH"""
    for cmd in commands:
        if runner.which(cmd) is None:
            raise PrerequisiteError(
                f"Required command '{cmd}' not found! Please install the necessary packages."
            )
