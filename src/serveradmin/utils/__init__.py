"""
CLI Utils Package
Display, logging and prompt helpers
"""

from .display import (
    console,
    show_banner,
    show_quick_help,
    print_info,
    print_success,
    print_warning,
    print_error,
    create_users_table,
    create_vhosts_table,
    format_enabled,
    show_checks,
    show_info_table
)
from .logger import setup_logging, log_exception

__all__ = [
    'console',
    'show_banner',
    'show_quick_help',
    'print_info',
    'print_success',
    'print_warning',
    'print_error',
    'create_users_table',
    'create_vhosts_table',
    'format_enabled',
    'show_checks',
    'show_info_table',
    'setup_logging',
    'log_exception'
]
