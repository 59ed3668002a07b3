"""
Input validators
Pure predicates returning (ok, reason) for operator-supplied values
"""

import re
from typing import Callable, List, Tuple

USERNAME_PATTERN = re.compile(r"^[a-z][-a-z0-9_]*$")
USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 32
PASSWORD_MIN_LENGTH = 8

SERVICE_NAME_PATTERN = re.compile(r"^[a-z0-9][a-z0-9._-]*$")
DOMAIN_LABEL_PATTERN = re.compile(r"^[a-z0-9]([a-z0-9-]{0,61}[a-z0-9])?$")
PORT_PATTERN = re.compile(r"^[0-9]+$")


def validate_username(username: str, exists: Callable[[str], bool]) -> Tuple[bool, str]:
    """
    Check a candidate login name

    Args:
        username: Candidate name
        exists: Lookup against the account store

    Returns:
        (True, "") when accepted, (False, reason) otherwise
    """
    if not username:
        return False, "Username cannot be empty!"

    if not USERNAME_PATTERN.fullmatch(username):
        return False, (
            "Invalid username! It must start with a lowercase letter and contain only "
            "lowercase letters, numbers, hyphens and underscores"
        )

    if not USERNAME_MIN_LENGTH <= len(username) <= USERNAME_MAX_LENGTH:
        return False, (
            f"Username must be between {USERNAME_MIN_LENGTH} and "
            f"{USERNAME_MAX_LENGTH} characters!"
        )

    if exists(username):
        return False, f"User '{username}' already exists!"

    return True, ""


def validate_password(password: str) -> Tuple[bool, str]:
    """Accept any password of at least PASSWORD_MIN_LENGTH characters"""
    if not password:
        return False, "Password cannot be empty!"
    if len(password) < PASSWORD_MIN_LENGTH:
        return False, f"Password must be at least {PASSWORD_MIN_LENGTH} characters long!"
    return True, ""


def password_warnings(password: str) -> List[str]:
    """Complexity recommendations; never a reason to reject"""
    warnings = []
    if not re.search(r"[A-Z]", password):
        warnings.append("Password should contain at least one uppercase letter")
    if not re.search(r"[a-z]", password):
        warnings.append("Password should contain at least one lowercase letter")
    if not re.search(r"[0-9]", password):
        warnings.append("Password should contain at least one number")
    if not re.search(r"[^a-zA-Z0-9]", password):
        warnings.append("Password should contain at least one special character")
    return warnings


def validate_port(value: str) -> Tuple[bool, str]:
    """Decimal port number in [1, 65535]"""
    value = str(value).strip()
    if not PORT_PATTERN.fullmatch(value):
        return False, f"Invalid port '{value}'! Must be a number between 1 and 65535."
    if not 1 <= int(value) <= 65535:
        return False, f"Invalid port {value}! Must be a number between 1 and 65535."
    return True, ""


def validate_domain(domain: str) -> Tuple[bool, str]:
    """Lowercase DNS hostname such as app.example.com"""
    if not domain:
        return False, "Domain cannot be empty!"
    if len(domain) > 253:
        return False, "Domain must be at most 253 characters!"
    for label in domain.split("."):
        if not DOMAIN_LABEL_PATTERN.fullmatch(label):
            return False, f"Invalid domain '{domain}'! Use letters, digits, hyphens and dots only."
    return True, ""


def normalize_service_name(value: str) -> str:
    """Spaces become hyphens, everything lowercase"""
    return value.strip().replace(" ", "-").lower()


def validate_service_name(name: str) -> Tuple[bool, str]:
    """Service names are used as file names under the sites directories"""
    if not name:
        return False, "Service name cannot be empty!"
    if not SERVICE_NAME_PATTERN.fullmatch(name) or name in (".", ".."):
        return False, (
            f"Invalid service name '{name}'! Use lowercase letters, digits, dots, "
            "hyphens and underscores."
        )
    return True, ""
