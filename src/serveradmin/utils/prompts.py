"""
Interactive prompts
Re-ask until the value passes its validator
"""

import typer
from typing import Callable, Optional, Tuple

from ..core.validators import password_warnings, validate_password
from .display import print_error, print_warning


def prompt_validated(
    text: str,
    validator: Callable[[str], Tuple[bool, str]],
    default: Optional[str] = None,
    hide_input: bool = False,
    transform: Callable[[str], str] = lambda value: value.strip(),
) -> str:
    """Prompt until validator accepts; each rejection prints its reason"""
    while True:
        value = transform(typer.prompt(text, default=default, hide_input=hide_input))
        ok, reason = validator(value)
        if ok:
            return value
        print_error(reason)


def prompt_optional(text: str) -> str:
    return typer.prompt(text, default="", show_default=False).strip()


def prompt_password(text: str = "Enter password for the user") -> str:
    """Ask for a valid password, warn on weak ones, then ask for the confirmation"""
    password = prompt_validated(text, validate_password, hide_input=True, transform=lambda v: v)
    for warning in password_warnings(password):
        print_warning(f"Recommendation: {warning}")

    while True:
        confirmation = typer.prompt("Confirm password", hide_input=True)
        if confirmation == password:
            return password
        print_error("Passwords do not match! Please try again.")


def confirm_token(token: str) -> bool:
    """True only when the operator types the token exactly"""
    return typer.prompt(f"Type '{token}' to confirm", default="", show_default=False) == token
