"""
Configuration management for CLI
Loads settings from config.yml and validates them with pydantic
"""

import os
import yaml
from pathlib import Path
from typing import List, Optional
import typer
from pydantic import BaseModel, Field, ValidationError, field_validator
from rich.console import Console
from rich.markup import escape

console = Console()

# Paths
DEFAULT_CONFIG_FILE = Path("/etc/serveradmin/config.yml")
CONFIG_ENV_VAR = "SERVERADMIN_CONFIG"


class NginxSettings(BaseModel):
    sites_available: Path = Path("/etc/nginx/sites-available")
    sites_enabled: Path = Path("/etc/nginx/sites-enabled")
    ssl_dir: Path = Path("/etc/nginx/ssl")
    log_dir: Path = Path("/var/log/nginx")
    cert_days: int = Field(365, ge=1)
    cert_subject: str = "/C=BR/ST=State/L=City/O=Organization"


class PortainerSettings(BaseModel):
    image: str = "portainer/portainer-ce:latest"
    container_name: str = "portainer"
    data_dir: Path = Path("/opt/portainer")
    container_port: int = Field(9000, ge=1, le=65535)
    default_port: int = Field(9000, ge=1, le=65535)
    max_port_attempts: int = Field(3, ge=1)
    startup_timeout: float = Field(30.0, gt=0)


class DockerSettings(BaseModel):
    gpg_url: str = "https://download.docker.com/linux/ubuntu/gpg"
    keyring: Path = Path("/usr/share/keyrings/docker-archive-keyring.gpg")
    apt_source: Path = Path("/etc/apt/sources.list.d/docker.list")
    packages: List[str] = ["docker-ce", "docker-ce-cli", "containerd.io"]
    prerequisites: List[str] = [
        "apt-transport-https", "ca-certificates", "curl", "gnupg", "lsb-release"
    ]


class Settings(BaseModel):
    """All tunables of the CLI, one section per area"""
    passwd_file: Path = Path("/etc/passwd")
    hosts_file: Path = Path("/etc/hosts")
    action_log: Path = Path("/var/log/user_management.log")
    default_shell: str = "/bin/bash"
    home_base: Path = Path("/home")
    info_file_name: str = "user_account_info.txt"
    protected_users: List[str] = ["root", "ubuntu"]
    admin_groups: List[str] = ["sudo", "adm", "dialout", "cdrom", "dip", "video", "plugdev"]
    container_group: str = "docker"

    nginx: NginxSettings = NginxSettings()
    portainer: PortainerSettings = PortainerSettings()
    docker: DockerSettings = DockerSettings()

    @field_validator("default_shell")
    @classmethod
    def shell_is_absolute(cls, value: str) -> str:
        if not value.startswith("/"):
            raise ValueError("default_shell must be an absolute path")
        return value


def resolve_config_path(path: Optional[Path] = None) -> Path:
    """Explicit path, then $SERVERADMIN_CONFIG, then the system default"""
    if path is not None:
        return path
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)
    return DEFAULT_CONFIG_FILE


def load_settings(path: Optional[Path] = None) -> Settings:
    """Load settings from YAML; a missing file means defaults"""
    config_file = resolve_config_path(path)

    if not config_file.exists():
        if path is not None:
            console.print(f"[red]❌ Config file not found: {config_file}[/red]")
            raise typer.Exit(1)
        return Settings()

    try:
        with config_file.open("r") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        console.print(f"[red]❌ Failed to parse {config_file.name}: {escape(str(e))}[/red]")
        raise typer.Exit(1)
    except OSError as e:
        console.print(f"[red]❌ Cannot read {config_file}: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    if data is None:
        return Settings()
    if not isinstance(data, dict):
        console.print(f"[red]❌ {config_file.name} must contain a mapping at the top level[/red]")
        raise typer.Exit(1)

    try:
        return Settings(**data)
    except ValidationError as e:
        console.print(f"[red]❌ Invalid configuration in {config_file.name}:[/red]")
        for error in e.errors():
            location = ".".join(str(part) for part in error["loc"])
            console.print(f"   {location}: {escape(error['msg'])}")
        raise typer.Exit(1)
