"""
Shared command state and error reporting
"""

import typer
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Callable

import docker

from ..core.config import Settings
from ..core.errors import AdminError
from ..core.runner import CommandRunner
from ..utils.logger import log_exception


@dataclass
class AppContext:
    """Carried in typer's ctx.obj from the main callback to every command"""
    settings: Settings = field(default_factory=Settings)
    runner: CommandRunner = field(default_factory=CommandRunner)
    docker_client_factory: Callable = docker.from_env


def get_context(ctx: typer.Context) -> AppContext:
    if ctx.obj is None:
        ctx.obj = AppContext()
    return ctx.obj


@contextmanager
def reporting_errors(context: str = ""):
    """Turn AdminError into a printed report and exit code 1"""
    try:
        yield
    except AdminError as e:
        log_exception(e, context)
        raise typer.Exit(1)
