"""Tests for the account lifecycle operations."""

from __future__ import annotations

import stat

import pytest

from serveradmin.core.accounts import Account, AccountManager, AccountRequest, AccountStore
from serveradmin.core.audit import ActionLog
from serveradmin.core.errors import CommandError, PrerequisiteError, ValidationError


def _manager(settings, runner, warnings=None):
    return AccountManager(
        settings,
        runner,
        warn=(warnings.append if warnings is not None else None),
    )


def _request(username="deploy_01", password="Sup3r-secret"):
    return AccountRequest(
        username=username,
        password=password,
        full_name="Deploy Bot",
        phone="",
        email="deploy@example.com",
    )


def test_passwd_line_parsing():
    account = Account.from_passwd_line("alice:x:1001:1001:Alice,,,:/home/alice:/bin/bash\n")
    assert account == Account("alice", 1001, 1001, "Alice,,,", "/home/alice", "/bin/bash")
    assert account.is_regular
    assert Account.from_passwd_line("broken:line") is None


def test_store_splits_regular_and_system_accounts(settings):
    store = AccountStore(settings.passwd_file)
    assert [a.name for a in store.regular()] == ["ubuntu", "alice"]
    assert [a.name for a in store.system()] == ["root", "daemon"]
    assert store.exists("alice")
    assert not store.exists("bob")


def test_unreadable_account_database_is_a_prerequisite_error(settings, runner):
    settings.passwd_file.unlink()
    with pytest.raises(PrerequisiteError):
        _manager(settings, runner).check_prerequisites()


def test_missing_command_is_a_prerequisite_error(settings, runner):
    runner.missing.add("chpasswd")
    with pytest.raises(PrerequisiteError, match="chpasswd"):
        _manager(settings, runner).check_prerequisites()


def test_create_runs_useradd_chpasswd_and_groups(settings, runner, user_db):
    runner.on("getent", "group", "docker", returncode=2)
    manager = _manager(settings, runner)

    created = manager.create(_request())

    home = settings.home_base / "deploy_01"
    assert runner.calls[0] == [
        "useradd", "-m", "-d", str(home), "-c", "Deploy Bot", "-s", "/bin/bash", "deploy_01"
    ]
    assert ["chpasswd"] in runner.calls
    assert "deploy_01:Sup3r-secret\n" in runner.inputs

    group_calls = [call[2] for call in runner.calls if call[:2] == ["usermod", "-aG"]]
    assert group_calls == ["sudo", "adm", "dialout", "cdrom", "dip", "video", "plugdev"]
    assert created.home == home
    assert manager.store.exists("deploy_01")


def test_create_adds_container_group_when_present(settings, runner, user_db):
    runner.on("getent", "group", "docker", returncode=0, stdout="docker:x:999:\n")
    _manager(settings, runner).create(_request())
    assert runner.called("usermod", "-aG", "docker", "deploy_01")


def test_create_without_full_name_omits_gecos(settings, runner, user_db):
    request = _request()
    request.full_name = ""
    _manager(settings, runner).create(request)
    assert "-c" not in runner.calls[0]


def test_create_writes_private_info_file(settings, runner, user_db):
    runner.on("id", "-nG", stdout="deploy_01 sudo adm\n")
    runner.on("lsb_release", "-ds", stdout="Ubuntu 24.04 LTS\n")

    created = _manager(settings, runner).create(_request())

    assert created.info_file == settings.home_base / "deploy_01" / "user_account_info.txt"
    content = created.info_file.read_text()
    assert "Username: deploy_01" in content
    assert "Full Name: Deploy Bot" in content
    assert "Phone: Not provided" in content
    assert "Email: deploy@example.com" in content
    assert "Groups: deploy_01 sudo adm" in content
    assert "Ubuntu Version: Ubuntu 24.04 LTS" in content
    assert stat.S_IMODE(created.info_file.stat().st_mode) == 0o600


def test_create_records_action_log(settings, runner, user_db):
    _manager(settings, runner).create(_request())
    log = settings.action_log.read_text().splitlines()
    assert log[0].endswith(": User management log initialized")
    assert log[-1].endswith(": Super user created - deploy_01")


def test_create_rejects_invalid_and_existing_usernames(settings, runner):
    manager = _manager(settings, runner)
    with pytest.raises(ValidationError, match="between 3 and 32"):
        manager.create(_request(username="ab"))
    with pytest.raises(ValidationError, match="already exists"):
        manager.create(_request(username="alice"))
    with pytest.raises(ValidationError, match="at least 8"):
        manager.create(_request(password="short"))
    assert runner.calls == []


def test_useradd_failure_aborts(settings, runner):
    runner.on("useradd", returncode=9, stderr="useradd: user 'deploy_01' already exists")
    manager = _manager(settings, runner)

    with pytest.raises(CommandError, match="Failed to create user"):
        manager.create(_request())

    assert not runner.called("chpasswd")
    assert not runner.called("usermod")


def test_password_failure_rolls_back_account(settings, runner, user_db):
    runner.on("chpasswd", returncode=1, stderr="chpasswd: (user deploy_01) pam_chauthtok() failed")
    manager = _manager(settings, runner)

    with pytest.raises(CommandError, match="account removed"):
        manager.create(_request())

    assert runner.called("userdel", "-r", "deploy_01")
    assert not manager.store.exists("deploy_01")
    assert not (settings.home_base / "deploy_01").exists()
    assert not runner.called("usermod")


def test_failed_group_is_a_soft_warning(settings, runner, user_db):
    runner.on("usermod", "-aG", "plugdev", returncode=6, stderr="group 'plugdev' does not exist")
    warnings = []

    created = _manager(settings, runner, warnings).create(_request())

    assert created.group_failures == ["plugdev"]
    assert any("plugdev" in w for w in warnings)


def test_create_then_remove_restores_account_store(settings, runner, user_db):
    before = settings.passwd_file.read_text()
    manager = _manager(settings, runner)

    manager.create(_request())
    manager.remove("deploy_01", remove_home=True)

    assert settings.passwd_file.read_text() == before
    assert not (settings.home_base / "deploy_01").exists()
    assert settings.action_log.read_text().splitlines()[-1].endswith("User removed - deploy_01")


def test_remove_without_home_keeps_directory(settings, runner, user_db):
    manager = _manager(settings, runner)
    manager.create(_request())

    manager.remove("deploy_01", remove_home=False)

    assert runner.calls[-1] == ["userdel", "deploy_01"]
    assert (settings.home_base / "deploy_01").is_dir()


@pytest.mark.parametrize("username", ["root", "ubuntu"])
def test_protected_accounts_cannot_be_removed(settings, runner, username):
    with pytest.raises(ValidationError, match="critical system user"):
        _manager(settings, runner).remove(username)
    assert not runner.called("userdel")


def test_remove_unknown_user(settings, runner):
    with pytest.raises(ValidationError, match="does not exist"):
        _manager(settings, runner).remove("ghost")


def test_userdel_failure_is_reported(settings, runner):
    runner.on("userdel", returncode=8, stderr="userdel: user alice is currently used by process 1")
    with pytest.raises(CommandError, match="currently used"):
        _manager(settings, runner).remove("alice")


def test_change_password(settings, runner):
    manager = _manager(settings, runner)
    manager.change_password("alice", "N3w-password")

    assert runner.calls == [["chpasswd"]]
    assert runner.inputs == ["alice:N3w-password\n"]
    assert settings.action_log.read_text().splitlines()[-1].endswith(
        "Password changed for user - alice"
    )


def test_change_password_failure(settings, runner):
    runner.on("chpasswd", returncode=1)
    with pytest.raises(CommandError):
        _manager(settings, runner).change_password("alice", "N3w-password")


def test_details_collects_groups_login_and_usage(settings, runner, tmp_path):
    home = tmp_path / "home" / "alice"
    home.mkdir()
    lines = settings.passwd_file.read_text().replace("/home/alice", str(home))
    settings.passwd_file.write_text(lines)

    runner.on("id", "-nG", "alice", stdout="alice sudo\n")
    runner.on("last", stdout="alice    pts/0        10.0.0.5         Mon Oct 13 09:12   still logged in\n")
    runner.on("du", "-sh", stdout=f"12M\t{home}\n")
    runner.on("who", stdout="alice    pts/0        2026-10-13 09:12 (10.0.0.5)\n")

    details = _manager(settings, runner).details("alice")

    assert details.groups == ["alice", "sudo"]
    assert details.last_login.startswith("10.0.0.5 Mon Oct 13")
    assert details.home_size == "12M"
    assert details.logged_in is True


def test_details_for_user_that_never_logged_in(settings, runner):
    runner.on("last", stdout="\nwtmp begins Mon Oct  6 10:00:00 2026\n")
    details = _manager(settings, runner).details("ubuntu")
    assert details.last_login == "Never logged in"
    assert details.logged_in is False


def test_action_log_format(tmp_path):
    action_log = ActionLog(tmp_path / "actions.log")
    action_log.record("User removed", "bob")
    action_log.close()

    lines = (tmp_path / "actions.log").read_text().splitlines()
    assert len(lines) == 2
    timestamp, _, message = lines[1].partition(": ")
    assert message == "User removed - bob"
    assert len(timestamp) == len("2026-10-18 20:34:00")
