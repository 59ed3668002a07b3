"""
Package installation commands
Docker, Git and the all-in-one server setup
"""

import typer
from typing import Optional

from ..core.installers import Installer, InstallStatus
from ..core.runner import require_root
from ..utils.display import console, print_info, print_success, print_warning
from .context import get_context, reporting_errors

docker_app = typer.Typer()
git_app = typer.Typer()
setup_app = typer.Typer()


def _installer(ctx: typer.Context) -> Installer:
    state = get_context(ctx)
    return Installer(state.settings, state.runner, notify=print_info)


def report_status(name: str, status: InstallStatus):
    if status == InstallStatus.SKIPPED:
        print_warning(f"{name} is already installed. Skipping installation...")
    else:
        print_success(f"{name} installed successfully!")


def show_summary(installer: Installer):
    """Versions and status of everything the setup manages"""
    console.print("\n[green bold]=== INSTALLATION SUMMARY ===[/green bold]\n")
    for name, facts in installer.installation_summary().items():
        version = facts.get("version")
        if version is None:
            console.print(f"[red]✗ {name}: not installed[/red]")
            continue
        console.print(f"[green]✓ {name}: {version}[/green]")
        if facts.get("user") is not None:
            console.print(f"  User: {facts['user'] or 'not set'}")
            console.print(f"  Email: {facts['email'] or 'not set'}")
        if facts.get("status") is not None:
            color = "green" if facts["status"] == "running" else "yellow"
            console.print(f"  Status: [{color}]{facts['status']}[/{color}]")
    console.print()


def _configure_git(installer: Installer, name: Optional[str], email: Optional[str]):
    if name is None:
        name = typer.prompt("Enter your Git user name").strip()
    if email is None:
        email = typer.prompt("Enter your Git email").strip()

    settings = installer.configure_git(name, email)
    print_success("Git configured successfully!")
    console.print("\n[cyan]Git configuration:[/cyan]")
    console.print(settings)


@docker_app.command("install")
def install_docker(ctx: typer.Context):
    """🐳 Install Docker Engine"""
    installer = _installer(ctx)
    with reporting_errors("Docker installation failed"):
        require_root(installer.runner)
        print_info("Checking whether Docker is already installed...")
        report_status("Docker", installer.install_docker())


@git_app.command("install")
def install_git(ctx: typer.Context):
    """📦 Install Git"""
    installer = _installer(ctx)
    with reporting_errors("Git installation failed"):
        require_root(installer.runner)
        report_status("Git", installer.install_git())


@git_app.command("configure")
def configure_git(
    ctx: typer.Context,
    name: Optional[str] = typer.Option(None, "--name", help="Global git user.name"),
    email: Optional[str] = typer.Option(None, "--email", help="Global git user.email"),
):
    """⚙ Configure global Git identity and defaults"""
    installer = _installer(ctx)
    with reporting_errors("Git configuration failed"):
        _configure_git(installer, name, email)


@setup_app.command("all")
def setup_all(
    ctx: typer.Context,
    git_name: Optional[str] = typer.Option(None, "--git-name", help="Global git user.name"),
    git_email: Optional[str] = typer.Option(None, "--git-email", help="Global git user.email"),
):
    """🚀 Update the system, install Docker, configure Git and install Nginx"""
    installer = _installer(ctx)
    with reporting_errors("Server setup failed"):
        require_root(installer.runner)

        installer.update_packages()
        print_success("System packages updated!")

        report_status("Docker", installer.install_docker())
        _configure_git(installer, git_name, git_email)
        report_status("Nginx", installer.install_nginx())

        show_summary(installer)


@setup_app.command("summary")
def summary(ctx: typer.Context):
    """📊 Show installed versions and service status"""
    show_summary(_installer(ctx))
