"""
CLI Core Package
Configuration, validation and the operations behind every command
"""

from .config import Settings, load_settings
from .errors import AdminError, ValidationError, PrerequisiteError, CommandError
from .runner import CommandRunner, CommandResult, require_root, require_commands
from .accounts import Account, AccountRequest, AccountManager, AccountStore
from .installers import Installer, InstallStatus
from .portainer import PortainerInstaller, PortInUseError, check_port, port_in_use
from .vhosts import VirtualHost, VhostManager, VhostState

__all__ = [
    # Config
    'Settings',
    'load_settings',

    # Errors
    'AdminError',
    'ValidationError',
    'PrerequisiteError',
    'CommandError',

    # Command execution
    'CommandRunner',
    'CommandResult',
    'require_root',
    'require_commands',

    # Operations
    'Account',
    'AccountRequest',
    'AccountManager',
    'AccountStore',
    'Installer',
    'InstallStatus',
    'PortainerInstaller',
    'PortInUseError',
    'check_port',
    'port_in_use',
    'VirtualHost',
    'VhostManager',
    'VhostState'
]
