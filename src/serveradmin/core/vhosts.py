"""
Nginx virtual host management
Write to sites-available, enable through sites-enabled, validate, then reload
"""

import logging
import os
import shutil
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional

from pydantic import BaseModel, field_validator

from .config import Settings
from .errors import CommandError, PrerequisiteError
from .nginx_config import build_vhost, parse_vhost
from .runner import CommandRunner
from .validators import (
    normalize_service_name,
    validate_domain,
    validate_port,
    validate_service_name,
)

logger = logging.getLogger(__name__)


class VhostState(str, Enum):
    ABSENT = "absent"
    CONFIGURED = "configured"
    ENABLED = "enabled"


class VirtualHost(BaseModel):
    """A reverse-proxy request: route `domain` to localhost:`port`"""
    service_name: str
    domain: str
    port: int
    ssl: bool = False

    @field_validator("service_name", mode="before")
    @classmethod
    def check_service_name(cls, value: str) -> str:
        value = normalize_service_name(str(value))
        ok, reason = validate_service_name(value)
        if not ok:
            raise ValueError(reason)
        return value

    @field_validator("domain", mode="before")
    @classmethod
    def check_domain(cls, value: str) -> str:
        value = str(value).strip().lower()
        ok, reason = validate_domain(value)
        if not ok:
            raise ValueError(reason)
        return value

    @field_validator("port", mode="before")
    @classmethod
    def check_port(cls, value) -> int:
        ok, reason = validate_port(str(value))
        if not ok:
            raise ValueError(reason)
        return int(value)


@dataclass
class VhostSummary:
    name: str
    domain: Optional[str]
    port: Optional[int]
    ssl: bool
    enabled: bool


class VhostManager:
    """
    Publishes virtual hosts with the sites-available/sites-enabled pattern

    A host only stays enabled when `nginx -t` passed after its latest write
    and the reload succeeded; otherwise its symlink is removed again.
    """

    def __init__(
        self,
        settings: Settings,
        runner: Optional[CommandRunner] = None,
        warn: Optional[Callable[[str], None]] = None,
    ):
        self.settings = settings
        self.nginx = settings.nginx
        self.runner = runner or CommandRunner()
        self.warn = warn or logger.warning

    # Paths

    def config_path(self, name: str) -> Path:
        return self.nginx.sites_available / name

    def enabled_path(self, name: str) -> Path:
        return self.nginx.sites_enabled / name

    def cert_dir(self, name: str) -> Path:
        return self.nginx.ssl_dir / name

    def cert_files(self, name: str):
        cert_dir = self.cert_dir(name)
        return cert_dir / f"{name}.crt", cert_dir / f"{name}.key"

    def check_installed(self):
        if self.runner.which("nginx") is None:
            raise PrerequisiteError("Nginx not found. Install it first: serveradmin nginx install")

    # State

    def state(self, name: str) -> VhostState:
        enabled = self.enabled_path(name)
        if enabled.is_symlink() and enabled.resolve() == self.config_path(name).resolve():
            if self.config_path(name).is_file():
                return VhostState.ENABLED
        if self.config_path(name).is_file():
            return VhostState.CONFIGURED
        return VhostState.ABSENT

    def list(self) -> List[VhostSummary]:
        available = self.nginx.sites_available
        if not available.is_dir():
            return []

        summaries = []
        for path in sorted(available.iterdir()):
            if not path.is_file():
                continue
            try:
                parsed = parse_vhost(path.read_text())
            except (OSError, UnicodeDecodeError) as e:
                logger.debug("Skipping unreadable site %s: %s", path, e)
                continue
            summaries.append(VhostSummary(
                name=path.name,
                domain=parsed["domain"],
                port=parsed["port"],
                ssl=parsed["ssl"],
                enabled=self.state(path.name) == VhostState.ENABLED,
            ))
        return summaries

    # Publishing

    def render(self, vhost: VirtualHost) -> str:
        cert_file, key_file = self.cert_files(vhost.service_name)
        return build_vhost(
            vhost.service_name,
            vhost.domain,
            vhost.port,
            vhost.ssl,
            cert_file=cert_file if vhost.ssl else None,
            key_file=key_file if vhost.ssl else None,
            log_dir=self.nginx.log_dir,
        )

    def generate_certificate(self, vhost: VirtualHost):
        """Self-signed certificate for development use"""
        cert_file, key_file = self.cert_files(vhost.service_name)
        cert_file.parent.mkdir(parents=True, exist_ok=True)

        subject = f"{self.nginx.cert_subject}/CN={vhost.domain}"
        self.runner.run([
            "openssl", "req", "-x509", "-nodes",
            "-days", str(self.nginx.cert_days),
            "-newkey", "rsa:2048",
            "-keyout", str(key_file),
            "-out", str(cert_file),
            "-subj", subject,
        ]).check(f"Failed to create certificate for {vhost.domain}")
        key_file.chmod(0o600)
        logger.info("Created self-signed certificate %s", cert_file)

    def write_config(self, vhost: VirtualHost) -> Path:
        """Atomically (re)write sites-available/<name>"""
        config_file = self.config_path(vhost.service_name)
        config_file.parent.mkdir(parents=True, exist_ok=True)

        tmp_file = config_file.with_name(f".{config_file.name}.tmp")
        tmp_file.write_text(self.render(vhost))
        os.replace(tmp_file, config_file)
        logger.info("Wrote %s", config_file)
        return config_file

    def enable(self, name: str) -> Path:
        """Point sites-enabled/<name> at the config, replacing any previous link"""
        link = self.enabled_path(name)
        link.parent.mkdir(parents=True, exist_ok=True)

        tmp_link = link.with_name(f".{link.name}.tmp")
        if tmp_link.is_symlink() or tmp_link.exists():
            tmp_link.unlink()
        os.symlink(self.config_path(name), tmp_link)
        os.replace(tmp_link, link)
        return link

    def disable(self, name: str) -> bool:
        link = self.enabled_path(name)
        if link.is_symlink() or link.exists():
            link.unlink()
            return True
        return False

    def test_config(self):
        self.runner.run(["nginx", "-t"]).check("Nginx configuration test failed")

    def reload(self):
        self.runner.run(["systemctl", "reload", "nginx"]).check("Failed to reload Nginx")

    def add(self, vhost: VirtualHost) -> VhostState:
        """
        Generate, enable and activate a virtual host

        Raises:
            PrerequisiteError: nginx is not installed
            CommandError: certificate generation, syntax check or reload failed;
                the host is left configured but not enabled
        """
        self.check_installed()
        if vhost.ssl:
            self.generate_certificate(vhost)

        self.write_config(vhost)
        self.enable(vhost.service_name)

        try:
            self.test_config()
            self.reload()
        except CommandError:
            self.disable(vhost.service_name)
            logger.error("Disabled %s after failed activation", vhost.service_name)
            raise

        return self.state(vhost.service_name)

    def remove(self, name: str, delete_config: bool = False) -> List[Path]:
        """Disable a host, optionally deleting its config and certificate"""
        self.check_installed()
        removed = []

        if self.disable(name):
            removed.append(self.enabled_path(name))

        if delete_config:
            config_file = self.config_path(name)
            if config_file.exists():
                config_file.unlink()
                removed.append(config_file)
            cert_dir = self.cert_dir(name)
            if cert_dir.is_dir():
                shutil.rmtree(cert_dir)
                removed.append(cert_dir)

        if not removed:
            self.warn(f"No configuration found for service '{name}'")
            return removed

        self.test_config()
        self.reload()
        return removed
