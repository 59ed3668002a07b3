"""
User management commands
Create, list, inspect, re-password and remove super users
"""

import typer
from typing import Optional

from ..core.accounts import AccountManager, AccountRequest
from ..core.errors import ValidationError
from ..core.runner import require_root
from ..core.validators import validate_username
from ..utils.display import (
    console, create_users_table, print_info, print_success, print_warning,
    show_checks, show_info_table
)
from ..utils.prompts import (
    confirm_token, prompt_optional, prompt_password, prompt_validated
)
from .context import get_context, reporting_errors

app = typer.Typer()

SYSTEM_USERS_SHOWN = 10


def _manager(ctx: typer.Context) -> AccountManager:
    state = get_context(ctx)
    return AccountManager(state.settings, state.runner, warn=print_warning)


def _show_available(manager: AccountManager):
    print_info("Available users:")
    for account in manager.store.regular():
        console.print(f"  - {account.name}")
    console.print()


def _existing_username(manager: AccountManager, username: Optional[str], action: str) -> str:
    if username is None:
        _show_available(manager)
        username = typer.prompt(f"Enter username to {action}").strip()
    manager.get(username)
    return username


@app.command()
def create(
    ctx: typer.Context,
    username: Optional[str] = typer.Argument(None, help="Login name of the new user"),
    full_name: Optional[str] = typer.Option(None, "--full-name", help="Full name (GECOS)"),
    phone: Optional[str] = typer.Option(None, "--phone", help="Phone number for the info file"),
    email: Optional[str] = typer.Option(None, "--email", help="Email address for the info file"),
):
    """👤 Create a super user"""
    manager = _manager(ctx)

    with reporting_errors("Cannot create user"):
        require_root(manager.runner)
        manager.check_prerequisites()

        if username is None:
            username = prompt_validated(
                "Enter the new username",
                lambda value: validate_username(value, manager.store.exists),
            )
        else:
            ok, reason = validate_username(username, manager.store.exists)
            if not ok:
                raise ValidationError(reason)

    password = prompt_password()

    request = AccountRequest(
        username=username,
        password=password,
        full_name=full_name if full_name is not None else prompt_optional("Enter full name (optional)"),
        phone=phone if phone is not None else prompt_optional("Enter phone number (optional)"),
        email=email if email is not None else prompt_optional("Enter email address (optional)"),
    )

    print_info(f"Creating user '{username}'...")
    with reporting_errors(f"Failed to create user '{username}'"):
        created = manager.create(request)

    print_success(f"User '{username}' created successfully!")

    show_info_table({
        "Username": created.username,
        "Home directory": str(created.home),
        "Shell": created.shell,
        "Groups": " ".join(created.groups) or "none",
    }, "User Information")

    if created.info_file:
        print_info(f"User account information file created at: {created.info_file}")

    console.print("[cyan bold]Testing configuration[/cyan bold]")
    show_checks(created.checks)

    console.print()
    print_warning("IMPORTANT NOTES:")
    console.print("  1. Save credentials in a secure location")
    console.print("  2. User can use 'sudo' for administrative commands")
    console.print("  3. Recommend changing password periodically")


@app.command(name="list")
def list_users(ctx: typer.Context):
    """📋 List regular and system users"""
    manager = _manager(ctx)

    with reporting_errors("Cannot list users"):
        regular, system = manager.list_accounts()

    table = create_users_table("👤 Regular Users (UID >= 1000)")
    for account in regular:
        table.add_row(account.name, str(account.uid), account.home, account.shell)
    console.print(table)

    table = create_users_table("⚙ System Users (UID < 1000)")
    for account in system[:SYSTEM_USERS_SHOWN]:
        table.add_row(account.name, str(account.uid), account.home, account.shell)
    console.print(table)
    if len(system) > SYSTEM_USERS_SHOWN:
        console.print(f"[dim]  ... showing first {SYSTEM_USERS_SHOWN} of {len(system)} system users[/dim]")


@app.command()
def show(
    ctx: typer.Context,
    username: Optional[str] = typer.Argument(None, help="User to inspect"),
):
    """ℹ️ Show detailed user information"""
    manager = _manager(ctx)

    with reporting_errors("Cannot show user"):
        username = _existing_username(manager, username, "view details")
        details = manager.details(username)

    account = details.account
    show_info_table({
        "Username": account.name,
        "User ID (UID)": str(account.uid),
        "Group ID (GID)": str(account.gid),
        "Full Name": account.gecos.split(",")[0] or "Not set",
        "Home Directory": account.home,
        "Shell": account.shell,
        "Groups": " ".join(details.groups),
        "Last Login": details.last_login,
        "Home Directory Size": details.home_size,
        "Status": "Currently logged in" if details.logged_in else "Not logged in",
    }, f"User Information for: {username}")


@app.command()
def passwd(
    ctx: typer.Context,
    username: Optional[str] = typer.Argument(None, help="User whose password changes"),
):
    """🔑 Change a user's password"""
    manager = _manager(ctx)

    with reporting_errors("Cannot change password"):
        require_root(manager.runner)
        manager.check_prerequisites()
        username = _existing_username(manager, username, "change password")

    print_info(f"Setting new password for user '{username}'")
    password = prompt_password()

    with reporting_errors("Failed to change password"):
        manager.change_password(username, password)

    print_success(f"Password changed successfully for user '{username}'!")


@app.command(name="rm")
def remove(
    ctx: typer.Context,
    username: Optional[str] = typer.Argument(None, help="User to remove"),
    remove_home: Optional[bool] = typer.Option(
        None, "--remove-home/--keep-home", help="Also delete home directory and mail spool"
    ),
):
    """🗑️  Remove a user"""
    manager = _manager(ctx)

    with reporting_errors("Cannot remove user"):
        require_root(manager.runner)
        manager.check_prerequisites()
        username = _existing_username(manager, username, "remove")
        account = manager.check_removable(username)

    print_warning("User information:")
    console.print(f"  Username: {account.name}\n  Home: {account.home}\n  Shell: {account.shell}\n")

    print_warning("This action will permanently remove the user and all their data!")
    answer = typer.prompt(f"Are you sure you want to remove user '{username}'? (yes/no)", default="no")
    if answer.strip().lower() != "yes":
        print_info("User removal cancelled.")
        return

    if remove_home is None:
        remove_home = typer.confirm("Remove home directory and mail spool?", default=False)

    print_warning("FINAL WARNING: This cannot be undone!")
    if not confirm_token("DELETE"):
        print_info("User removal cancelled.")
        return

    print_info(f"Removing user '{username}'...")
    with reporting_errors(f"Failed to remove user '{username}'"):
        manager.remove(username, remove_home=remove_home)

    print_success(f"User '{username}' removed successfully!")
