#!/usr/bin/env python3
"""
Server Admin CLI - Main Entry Point
Ubuntu server administration with a clean command structure
"""

import typer
from pathlib import Path
from typing import Optional

from .commands import users, packages, nginx, portainer, system
from .commands.context import AppContext
from .core.config import load_settings
from .utils.display import show_banner, show_quick_help
from .utils.logger import setup_logging

# Main app
app = typer.Typer(
    name="serveradmin",
    help="🛠 Server Admin CLI - Manage users, packages and Nginx services on Ubuntu",
    add_completion=True,
    no_args_is_help=False
)

# Register command groups
app.add_typer(users.app, name="user", help="👤 Manage super users")
app.add_typer(packages.docker_app, name="docker", help="🐳 Docker Engine")
app.add_typer(packages.git_app, name="git", help="📦 Git installation and configuration")
app.add_typer(packages.setup_app, name="setup", help="🚀 Full server setup")
app.add_typer(nginx.app, name="nginx", help="🌐 Nginx and reverse-proxy services")
app.add_typer(portainer.app, name="portainer", help="🐳 Portainer CE")

# Register system commands
app.command(name="info")(system.info)
app.command(name="version")(system.version)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    debug: bool = typer.Option(False, "--debug", help="Verbose logging and stack traces"),
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Configuration file (default: /etc/serveradmin/config.yml)"
    ),
):
    """
    Server Admin CLI

    Automate routine Ubuntu server administration.
    """
    setup_logging(debug)

    if ctx.obj is None:
        ctx.obj = AppContext(settings=load_settings(config))

    if ctx.invoked_subcommand is None:
        # No command specified, show help
        show_banner()
        show_quick_help()


if __name__ == "__main__":
    app()
