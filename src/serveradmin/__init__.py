"""
Server Admin CLI Package
Routine Ubuntu server administration: accounts, installers and Nginx virtual hosts
"""

__version__ = "1.0.0"
__author__ = "Server Admin Team"
__description__ = "CLI for managing Ubuntu server accounts, Docker, Git, Nginx and Portainer"

__all__ = [
    '__version__',
    '__author__',
    '__description__'
]
