"""
Display utilities for CLI
Handles banners, tables and formatted status output
"""

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from typing import Dict, List, Optional, Tuple

console = Console()


def show_banner():
    """Show CLI banner"""
    console.print("""
╔══════════════════════════════════════════╗
║   🛠   Ubuntu Server Admin CLI            ║
║   Users, packages and Nginx services     ║
╚══════════════════════════════════════════╝
""")


def show_quick_help():
    """Show quick command reference"""
    console.print("""
[cyan]Quick Commands:[/cyan]
  serveradmin user create            Create a super user
  serveradmin user list              List system users
  serveradmin user rm <name>         Remove a user
  serveradmin setup all              Update system, install Docker, Git, Nginx
  serveradmin portainer install      Run Portainer CE
  serveradmin nginx vhost add        Configure a reverse-proxy service
  serveradmin nginx vhost list       List configured services
  serveradmin info                   Show system information
  serveradmin --help                 Full help
""")


def print_info(message: str):
    console.print(f"[blue]\\[INFO][/blue] {escape(message)}")


def print_success(message: str):
    console.print(f"[green]✓ {escape(message)}[/green]")


def print_warning(message: str):
    console.print(f"[yellow]⚠ {escape(message)}[/yellow]")


def print_error(message: str):
    console.print(f"[red]❌ {escape(message)}[/red]")


def create_users_table(title: str) -> Table:
    """Create a table for account listing"""
    table = Table(title=title)
    table.add_column("Username", style="cyan", no_wrap=True)
    table.add_column("UID", style="magenta", justify="right")
    table.add_column("Home", style="blue")
    table.add_column("Shell", style="white")
    return table


def create_vhosts_table(title: str = "🌐 Nginx Services") -> Table:
    """Create a table for virtual host listing"""
    table = Table(title=title)
    table.add_column("Service", style="cyan", no_wrap=True)
    table.add_column("Domain", style="blue")
    table.add_column("Port", style="magenta", justify="right")
    table.add_column("SSL", style="white")
    table.add_column("Status", style="green")
    return table


def format_enabled(enabled: bool) -> str:
    """Format site status with emoji and color"""
    return "[green]▶ enabled[/green]" if enabled else "[red]⏹ disabled[/red]"


def show_checks(checks: List[Tuple[str, Optional[bool]]]):
    """Show verification results: ✓ passed, ✗ failed, ? inconclusive"""
    for label, passed in checks:
        if passed is True:
            console.print(f"  [green]✓ {label}[/green]")
        elif passed is False:
            console.print(f"  [red]✗ {label}[/red]")
        else:
            console.print(f"  [yellow]? {label} (could not be confirmed)[/yellow]")


def show_info_table(data: Dict[str, str], title: str = "Information"):
    """Show information in a table format"""
    table = Table(show_header=False, box=None)
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="white")

    for key, value in data.items():
        table.add_row(key, value)

    console.print(f"\n[cyan bold]{title}[/cyan bold]\n")
    console.print(table)
    console.print()
