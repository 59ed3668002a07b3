"""
Package and service installers
Each installer checks, installs, starts, enables and verifies one tool
"""

import logging
import os
import tempfile
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional

from .config import Settings
from .errors import CommandError
from .runner import CommandRunner

logger = logging.getLogger(__name__)


class InstallStatus(str, Enum):
    INSTALLED = "installed"
    SKIPPED = "already installed"


class Installer:
    """
    apt/systemctl based installers

    Args:
        settings: Loaded CLI settings
        runner: Command runner (replaced by a fake in tests)
        notify: Progress callback for status lines
    """

    def __init__(
        self,
        settings: Settings,
        runner: Optional[CommandRunner] = None,
        notify: Optional[Callable[[str], None]] = None,
    ):
        self.settings = settings
        self.runner = runner or CommandRunner()
        self.notify = notify or logger.info

    # Building blocks

    def is_installed(self, command: str) -> bool:
        return self.runner.which(command) is not None

    def apt_install(self, packages: List[str]):
        self.runner.run(
            ["apt-get", "install", "-y", *packages],
            env=self._apt_env(),
        ).check(f"Failed to install {' '.join(packages)}")

    def _apt_env(self) -> Dict[str, str]:
        env = dict(os.environ)
        env["DEBIAN_FRONTEND"] = "noninteractive"
        return env

    def service_active(self, service: str) -> bool:
        return self.runner.run(["systemctl", "is-active", "--quiet", service]).ok

    def start_service(self, service: str):
        self.notify(f"Starting and enabling {service} service...")
        self.runner.run(["systemctl", "start", service]).check(f"Failed to start {service}")
        self.runner.run(["systemctl", "enable", service]).check(f"Failed to enable {service}")
        if not self.service_active(service):
            raise CommandError(f"Service {service} is not running")

    # Installers

    def update_packages(self):
        self.notify("Updating package lists...")
        self.runner.run(["apt-get", "update"]).check("Failed to update package lists")
        self.notify("Upgrading system packages...")
        self.runner.run(
            ["apt-get", "upgrade", "-y"], env=self._apt_env()
        ).check("Failed to upgrade packages")

    def install_docker(self) -> InstallStatus:
        if self.is_installed("docker"):
            return InstallStatus.SKIPPED

        docker = self.settings.docker
        self.notify("Installing required dependencies...")
        self.apt_install(docker.prerequisites)

        self.notify("Adding Docker repository...")
        self._add_docker_repository()
        self.runner.run(["apt-get", "update"]).check("Failed to update package lists")

        self.notify("Installing Docker...")
        self.apt_install(docker.packages)
        self.start_service("docker")

        sudo_user = os.environ.get("SUDO_USER")
        if sudo_user and sudo_user != "root":
            self.notify(f"Adding user {sudo_user} to the docker group...")
            self.runner.run(["usermod", "-aG", "docker", sudo_user]).check(
                f"Failed to add {sudo_user} to the docker group"
            )

        return InstallStatus.INSTALLED

    def _add_docker_repository(self):
        docker = self.settings.docker
        docker.keyring.parent.mkdir(parents=True, exist_ok=True)

        with tempfile.TemporaryDirectory() as tmp:
            armored = Path(tmp) / "docker.asc"
            self.runner.run(
                ["curl", "-fsSL", docker.gpg_url, "-o", str(armored)]
            ).check("Failed to download Docker GPG key")
            self.runner.run(
                ["gpg", "--batch", "--yes", "--dearmor", "-o", str(docker.keyring), str(armored)]
            ).check("Failed to import Docker GPG key")

        distro = self._query(["lsb_release", "-is"]).lower()
        codename = self._query(["lsb_release", "-cs"])
        arch = self._query(["dpkg", "--print-architecture"])

        source = (
            f"deb [arch={arch} signed-by={docker.keyring}] "
            f"https://download.docker.com/linux/{distro} {codename} stable\n"
        )
        docker.apt_source.parent.mkdir(parents=True, exist_ok=True)
        docker.apt_source.write_text(source)
        logger.info("Wrote %s", docker.apt_source)

    def _query(self, args: List[str]) -> str:
        return self.runner.run(args).check(f"Failed to run {args[0]}").stdout.strip()

    def install_nginx(self) -> InstallStatus:
        if self.is_installed("nginx"):
            return InstallStatus.SKIPPED

        self.notify("Installing Nginx...")
        self.apt_install(["nginx"])
        self.start_service("nginx")
        return InstallStatus.INSTALLED

    def install_git(self) -> InstallStatus:
        if self.is_installed("git"):
            return InstallStatus.SKIPPED

        self.notify("Git not found. Installing...")
        self.apt_install(["git"])
        return InstallStatus.INSTALLED

    def configure_git(self, name: str, email: str) -> str:
        """Global identity and defaults; returns `git config --global --list`"""
        self.install_git()
        for key, value in (
            ("user.name", name),
            ("user.email", email),
            ("init.defaultBranch", "main"),
            ("pull.rebase", "false"),
        ):
            self.runner.run(["git", "config", "--global", key, value]).check(
                f"Failed to set git {key}"
            )
        return self.runner.run(["git", "config", "--global", "--list"]).stdout.strip()

    # Reporting

    def installation_summary(self) -> Dict[str, Dict[str, Optional[str]]]:
        """Installed version and extra facts per tool, None when missing"""
        summary: Dict[str, Dict[str, Optional[str]]] = {}

        docker = None
        if self.is_installed("docker"):
            out = self.runner.run(["docker", "--version"]).stdout.split()
            docker = out[2].rstrip(",") if len(out) > 2 else "unknown"
        summary["Docker"] = {"version": docker}

        git = None
        git_info: Dict[str, Optional[str]] = {}
        if self.is_installed("git"):
            out = self.runner.run(["git", "--version"]).stdout.split()
            git = out[2] if len(out) > 2 else "unknown"
            git_info["user"] = self.runner.run(["git", "config", "--global", "user.name"]).stdout.strip()
            git_info["email"] = self.runner.run(["git", "config", "--global", "user.email"]).stdout.strip()
        summary["Git"] = {"version": git, **git_info}

        nginx = None
        nginx_info: Dict[str, Optional[str]] = {}
        if self.is_installed("nginx"):
            # nginx -v prints to stderr: "nginx version: nginx/1.24.0"
            result = self.runner.run(["nginx", "-v"])
            text = (result.stderr or result.stdout).strip()
            nginx = text.split("/", 1)[1].split()[0] if "/" in text else "unknown"
            nginx_info["status"] = "running" if self.service_active("nginx") else "stopped"
        summary["Nginx"] = {"version": nginx, **nginx_info}

        return summary
