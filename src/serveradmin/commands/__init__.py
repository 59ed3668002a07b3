"""
CLI Commands Package
User, package, nginx, portainer and system commands
"""

from . import users
from . import packages
from . import nginx
from . import portainer
from . import system

__all__ = ['users', 'packages', 'nginx', 'portainer', 'system']
