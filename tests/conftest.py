"""Shared fixtures: temporary settings and a recording command runner."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Callable, List, Optional

import docker
import pytest

from serveradmin.core.config import NginxSettings, PortainerSettings, Settings
from serveradmin.core.runner import CommandResult, CommandRunner

PASSWD = """\
root:x:0:0:root:/root:/bin/bash
daemon:x:1:1:daemon:/usr/sbin:/usr/sbin/nologin
ubuntu:x:1000:1000:Ubuntu:/home/ubuntu:/bin/bash
alice:x:1001:1001:Alice Example,,,:/home/alice:/bin/bash
nobody:x:65534:65534:nobody:/nonexistent:/usr/sbin/nologin
"""


class FakeRunner(CommandRunner):
    """Records every command and answers from scripted responses."""

    def __init__(self, root: bool = True, missing: tuple = ()):
        self.calls: List[List[str]] = []
        self.inputs: List[Optional[str]] = []
        self.responses: list = []
        self.root = root
        self.missing = set(missing)

    def on(self, *prefix, returncode=0, stdout="", stderr="", effect: Callable = None):
        """Most recently registered matching prefix wins."""
        self.responses.insert(0, (tuple(prefix), returncode, stdout, stderr, effect))
        return self

    def run(self, args, input=None, env=None):
        args = [str(a) for a in args]
        self.calls.append(args)
        self.inputs.append(input)
        for prefix, returncode, stdout, stderr, effect in self.responses:
            if tuple(args[: len(prefix)]) == prefix:
                if effect is not None:
                    effect(args, input)
                return CommandResult(args, returncode, stdout, stderr)
        return CommandResult(args, 0, "", "")

    def which(self, name):
        return None if name in self.missing else f"/usr/bin/{name}"

    def is_root(self):
        return self.root

    def called(self, *prefix) -> bool:
        return any(tuple(call[: len(prefix)]) == tuple(prefix) for call in self.calls)


class FakeUserDatabase:
    """Makes useradd/userdel edit the temporary passwd file and home tree."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.next_uid = 2000

    def install(self, runner: FakeRunner):
        runner.on("useradd", effect=self.useradd)
        runner.on("userdel", effect=self.userdel)

    def useradd(self, args, _input):
        username = args[-1]
        home = Path(args[args.index("-d") + 1])
        shell = args[args.index("-s") + 1]
        gecos = args[args.index("-c") + 1] if "-c" in args else ""
        home.mkdir(parents=True)
        with self.settings.passwd_file.open("a") as f:
            f.write(f"{username}:x:{self.next_uid}:{self.next_uid}:{gecos}:{home}:{shell}\n")
        self.next_uid += 1

    def userdel(self, args, _input):
        username = args[-1]
        lines = self.settings.passwd_file.read_text().splitlines(keepends=True)
        self.settings.passwd_file.write_text(
            "".join(line for line in lines if not line.startswith(f"{username}:"))
        )
        if "-r" in args:
            shutil.rmtree(self.settings.home_base / username, ignore_errors=True)


@pytest.fixture
def settings(tmp_path) -> Settings:
    passwd = tmp_path / "passwd"
    passwd.write_text(PASSWD)
    hosts = tmp_path / "hosts"
    hosts.write_text("127.0.0.1 localhost\n")
    (tmp_path / "home").mkdir()

    return Settings(
        passwd_file=passwd,
        hosts_file=hosts,
        action_log=tmp_path / "log" / "user_management.log",
        home_base=tmp_path / "home",
        nginx=NginxSettings(
            sites_available=tmp_path / "nginx" / "sites-available",
            sites_enabled=tmp_path / "nginx" / "sites-enabled",
            ssl_dir=tmp_path / "nginx" / "ssl",
            log_dir=tmp_path / "log" / "nginx",
        ),
        portainer=PortainerSettings(data_dir=tmp_path / "portainer", startup_timeout=2),
    )


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def user_db(settings, runner) -> FakeUserDatabase:
    database = FakeUserDatabase(settings)
    database.install(runner)
    return database


@pytest.fixture(autouse=True)
def _close_action_log():
    yield
    import logging

    logger = logging.getLogger("serveradmin.actions")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


@pytest.fixture(autouse=True)
def _no_chown(monkeypatch):
    monkeypatch.setattr("serveradmin.core.accounts.shutil.chown", lambda *args, **kwargs: None)


class FakeContainer:
    def __init__(self, statuses=("running",), logs=b""):
        self.statuses = list(statuses)
        self.status = "created"
        self._logs = logs
        self.stopped = False
        self.removed = False

    def reload(self):
        if self.statuses:
            self.status = self.statuses.pop(0)

    def logs(self):
        return self._logs

    def stop(self, timeout=None):
        self.stopped = True

    def remove(self):
        self.removed = True


class FakeContainers:
    def __init__(self, existing=None, errors=(), container=None):
        self.existing = existing
        self.errors = list(errors)
        self.container = container or FakeContainer()
        self.run_calls = []

    def get(self, name):
        if self.existing is None:
            raise docker.errors.NotFound("No such container")
        return self.existing

    def run(self, image, **params):
        self.run_calls.append((image, params))
        if self.errors:
            raise self.errors.pop(0)
        return self.container


class FakeImages:
    def __init__(self):
        self.pulled = []

    def pull(self, image):
        self.pulled.append(image)


class FakeDockerClient:
    """The slice of docker.DockerClient used by the Portainer installer"""

    def __init__(self, **kwargs):
        self.containers = FakeContainers(**kwargs)
        self.images = FakeImages()


@pytest.fixture
def make_client():
    return FakeDockerClient


@pytest.fixture
def make_container():
    return FakeContainer
