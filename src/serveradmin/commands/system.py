"""
System commands
System-wide information and version
"""

import typer

from .. import __version__
from ..core.accounts import AccountManager
from ..core.errors import AdminError
from ..core.system import system_report
from ..utils.display import console, print_warning, show_info_table
from .context import get_context


def info(ctx: typer.Context):
    """🖥 Show system information"""
    state = get_context(ctx)

    for title, section in system_report(state.runner).items():
        show_info_table(section, title)

    try:
        stats = AccountManager(state.settings, state.runner).summary()
    except AdminError as e:
        print_warning(f"User statistics unavailable: {e}")
        return

    show_info_table({
        "Total Users": str(stats["total_users"]),
        "Currently Logged In": str(stats["logged_in"]),
    }, "User Statistics")


def version():
    """ℹ️ Show version information"""
    console.print(f"[cyan]Server Admin CLI[/cyan] version [green]{__version__}[/green]")
