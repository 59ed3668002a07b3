"""
Portainer installation
Runs the Portainer CE container through the Docker API
"""

import logging
import socket
import time
from typing import Callable, List, Optional

import docker

from .config import Settings
from .errors import CommandError, PrerequisiteError, ValidationError
from .hosts import local_ip
from .runner import CommandRunner
from .validators import validate_port

logger = logging.getLogger(__name__)

DOCKER_SOCKET = "/var/run/docker.sock"


class PortInUseError(ValidationError):
    """The requested port is bound; the operator may pick another one"""


def port_in_use(port: int, host: str = "0.0.0.0") -> bool:
    """True when something already listens on the TCP port"""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    # TIME_WAIT leftovers do not count, only a live listener does
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    try:
        sock.bind((host, port))
    except OSError:
        return True
    finally:
        sock.close()
    return False


def check_port(value: str, in_use: Callable[[int], bool] = port_in_use) -> int:
    """
    Validate a host port for the container

    Raises:
        ValidationError: not numeric or outside [1, 65535]
        PortInUseError: valid but already bound
    """
    ok, reason = validate_port(value)
    if not ok:
        raise ValidationError(reason)
    port = int(value)
    if in_use(port):
        raise PortInUseError(f"Port {port} is already in use!")
    return port


class PortainerInstaller:
    def __init__(
        self,
        settings: Settings,
        runner: Optional[CommandRunner] = None,
        client_factory: Callable[[], "docker.DockerClient"] = docker.from_env,
        notify: Optional[Callable[[str], None]] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.settings = settings
        self.portainer = settings.portainer
        self.runner = runner or CommandRunner()
        self.client_factory = client_factory
        self.notify = notify or logger.info
        self.sleep = sleep

    def _client(self):
        try:
            return self.client_factory()
        except docker.errors.DockerException as e:
            raise PrerequisiteError(f"Could not connect to Docker. Is Docker running? ({e})") from e

    def ensure_docker(self):
        if self.runner.which("docker") is None:
            raise PrerequisiteError("Docker not found. Install Docker first: serveradmin docker install")

        if not self.runner.run(["systemctl", "is-active", "--quiet", "docker"]).ok:
            self.notify("Starting Docker service...")
            self.runner.run(["systemctl", "start", "docker"]).check("Failed to start Docker")

    def install(self, port: int) -> List[str]:
        """
        (Re)create the Portainer container on the given host port

        Returns:
            Access URLs
        """
        self.ensure_docker()
        client = self._client()
        name = self.portainer.container_name

        self.portainer.data_dir.mkdir(parents=True, exist_ok=True)

        try:
            existing = client.containers.get(name)
            self.notify("Stopping existing Portainer container...")
            existing.stop(timeout=10)
            existing.remove()
        except docker.errors.NotFound:
            pass

        run_params = {
            "detach": True,
            "name": name,
            "restart_policy": {"Name": "always"},
            "ports": {f"{self.portainer.container_port}/tcp": port},
            "volumes": {
                DOCKER_SOCKET: {"bind": DOCKER_SOCKET, "mode": "rw"},
                str(self.portainer.data_dir): {"bind": "/data", "mode": "rw"},
            },
        }

        self.notify(f"Starting Portainer CE on port {port}...")
        try:
            try:
                container = client.containers.run(self.portainer.image, **run_params)
            except docker.errors.ImageNotFound:
                self.notify(f"Pulling image {self.portainer.image}...")
                client.images.pull(self.portainer.image)
                container = client.containers.run(self.portainer.image, **run_params)
        except docker.errors.APIError as e:
            if "port is already allocated" in str(e).lower():
                raise PortInUseError(f"Port {port} is already in use!") from e
            raise CommandError(f"Docker API error while starting {name}: {e}") from e

        self.wait_running(container)
        return [
            f"http://{local_ip(self.runner)}:{port}",
            f"http://localhost:{port}",
        ]

    def wait_running(self, container):
        self.notify("Waiting for Portainer to start...")
        elapsed = 0.0
        while elapsed < self.portainer.startup_timeout:
            container.reload()
            if container.status == "running":
                return
            if container.status in ("exited", "dead"):
                logs = container.logs().decode("utf-8", errors="replace")
                raise CommandError(f"Portainer container failed to start: {logs[:500]}")
            self.sleep(0.5)
            elapsed += 0.5
        raise CommandError(
            f"Portainer did not start in time. Check: docker logs {self.portainer.container_name}"
        )
