"""
Account lifecycle operations
Create, inspect, re-password and remove Linux accounts through the OS tools
"""

import logging
import platform
import shutil
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from .audit import ActionLog
from .config import Settings
from .errors import CommandError, PrerequisiteError, ValidationError
from .runner import CommandRunner, require_commands
from .validators import validate_password, validate_username

logger = logging.getLogger(__name__)

REQUIRED_COMMANDS = ("useradd", "usermod", "userdel", "chpasswd", "groups", "id")
NOBODY_UID = 65534
REGULAR_UID_MIN = 1000


@dataclass(frozen=True)
class Account:
    """One account database entry"""
    name: str
    uid: int
    gid: int
    gecos: str
    home: str
    shell: str

    @property
    def is_regular(self) -> bool:
        return self.uid >= REGULAR_UID_MIN and self.uid != NOBODY_UID

    @classmethod
    def from_passwd_line(cls, line: str) -> Optional["Account"]:
        parts = line.rstrip("\n").split(":")
        if len(parts) < 7:
            return None
        try:
            uid, gid = int(parts[2]), int(parts[3])
        except ValueError:
            return None
        return cls(parts[0], uid, gid, parts[4], parts[5], parts[6])


@dataclass
class AccountRequest:
    """Everything collected from the operator for one new account"""
    username: str
    password: str
    full_name: str = ""
    phone: str = ""
    email: str = ""


@dataclass
class CreatedAccount:
    username: str
    home: Path
    shell: str
    groups: List[str]
    info_file: Optional[Path]
    group_failures: List[str] = field(default_factory=list)
    checks: List[Tuple[str, Optional[bool]]] = field(default_factory=list)


@dataclass
class AccountDetails:
    account: Account
    groups: List[str]
    last_login: str
    home_size: str
    logged_in: bool


class AccountStore:
    """Read-only view of the account database file"""

    def __init__(self, passwd_file: Path):
        self.passwd_file = Path(passwd_file)

    def check_readable(self):
        try:
            with self.passwd_file.open("r"):
                pass
        except OSError as e:
            raise PrerequisiteError(f"Cannot read {self.passwd_file} file!") from e

    def all(self) -> List[Account]:
        self.check_readable()
        accounts = []
        with self.passwd_file.open("r") as f:
            for line in f:
                if not line.strip() or line.startswith("#"):
                    continue
                account = Account.from_passwd_line(line)
                if account is not None:
                    accounts.append(account)
        return accounts

    def get(self, username: str) -> Optional[Account]:
        for account in self.all():
            if account.name == username:
                return account
        return None

    def exists(self, username: str) -> bool:
        return self.get(username) is not None

    def regular(self) -> List[Account]:
        return [a for a in self.all() if a.is_regular]

    def system(self) -> List[Account]:
        return [a for a in self.all() if a.uid < REGULAR_UID_MIN]


class AccountManager:
    """
    Account operations backed by useradd/usermod/userdel/chpasswd

    Args:
        settings: Loaded CLI settings
        runner: Command runner (replaced by a fake in tests)
        action_log: Where completed actions are recorded
        warn: Callback for soft warnings shown to the operator
    """

    def __init__(
        self,
        settings: Settings,
        runner: Optional[CommandRunner] = None,
        action_log: Optional[ActionLog] = None,
        warn: Optional[Callable[[str], None]] = None,
    ):
        self.settings = settings
        self.runner = runner or CommandRunner()
        self.store = AccountStore(settings.passwd_file)
        self.action_log = action_log or ActionLog(settings.action_log)
        self.warn = warn or logger.warning

    def check_prerequisites(self):
        require_commands(self.runner, REQUIRED_COMMANDS)
        self.store.check_readable()

    def home_for(self, username: str) -> Path:
        return self.settings.home_base / username

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, username: str) -> Account:
        account = self.store.get(username)
        if account is None:
            raise ValidationError(f"User '{username}' does not exist!")
        return account

    def groups(self, username: str) -> List[str]:
        result = self.runner.run(["id", "-nG", username])
        if not result.ok:
            return []
        return result.stdout.split()

    def list_accounts(self) -> Tuple[List[Account], List[Account]]:
        """(regular accounts, system accounts)"""
        return self.store.regular(), self.store.system()

    def details(self, username: str) -> AccountDetails:
        account = self.get(username)

        last_login = "Never logged in"
        result = self.runner.run(["last", "-n", "1", username])
        if result.ok:
            first = result.stdout.splitlines()[0] if result.stdout.strip() else ""
            if first and "wtmp begins" not in first:
                fields = first.split()
                last_login = " ".join(fields[2:7])

        home_size = "Unknown"
        if Path(account.home).is_dir():
            result = self.runner.run(["du", "-sh", account.home])
            if result.ok and result.stdout.strip():
                home_size = result.stdout.split()[0]

        logged_in = False
        result = self.runner.run(["who"])
        if result.ok:
            logged_in = any(
                line.split()[0] == username for line in result.stdout.splitlines() if line.strip()
            )

        return AccountDetails(account, self.groups(username), last_login, home_size, logged_in)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create(self, request: AccountRequest) -> CreatedAccount:
        """
        Create a super user

        Aborts if useradd fails. If chpasswd fails the account and its home
        directory are deleted again before the error is raised.
        """
        ok, reason = validate_username(request.username, self.store.exists)
        if not ok:
            raise ValidationError(reason)
        ok, reason = validate_password(request.password)
        if not ok:
            raise ValidationError(reason)

        username = request.username
        shell = self.settings.default_shell

        useradd = ["useradd", "-m", "-d", str(self.home_for(username))]
        if request.full_name:
            useradd += ["-c", request.full_name]
        useradd += ["-s", shell, username]
        self.runner.run(useradd).check(f"Failed to create user '{username}'")
        logger.info("Created account %s", username)

        result = self.runner.run(["chpasswd"], input=f"{username}:{request.password}\n")
        if not result.ok:
            rollback = self.runner.run(["userdel", "-r", username])
            if not rollback.ok:
                logger.error("Rollback of %s failed: %s", username, rollback.output)
            raise CommandError(f"Failed to set password for '{username}'; account removed", result)

        group_failures = self._add_admin_groups(username)

        created = CreatedAccount(
            username=username,
            home=self.home_for(username),
            shell=shell,
            groups=self.groups(username),
            info_file=None,
            group_failures=group_failures,
        )
        created.info_file = self.write_info_file(request, created.groups)
        created.checks = self.verify(username)

        self.action_log.record("Super user created", username)
        return created

    def _add_admin_groups(self, username: str) -> List[str]:
        groups = list(self.settings.admin_groups)
        container_group = self.settings.container_group
        if container_group and self.runner.run(["getent", "group", container_group]).ok:
            groups.append(container_group)

        failures = []
        for group in groups:
            result = self.runner.run(["usermod", "-aG", group, username])
            if not result.ok:
                failures.append(group)
                self.warn(f"Could not add '{username}' to group '{group}': {result.output}")
        return failures

    def write_info_file(self, request: AccountRequest, groups: List[str]) -> Optional[Path]:
        """Owner-only summary of the new account in its home directory"""
        home = self.home_for(request.username)
        info_file = home / self.settings.info_file_name

        os_description = "Unknown"
        result = self.runner.run(["lsb_release", "-ds"])
        if result.ok and result.stdout.strip():
            os_description = result.stdout.strip().strip('"')

        content = "\n".join([
            "Account Information Created:",
            "============================",
            f"Username: {request.username}",
            f"Full Name: {request.full_name or 'Not provided'}",
            f"Phone: {request.phone or 'Not provided'}",
            f"Email: {request.email or 'Not provided'}",
            f"Creation Date: {datetime.now():%Y-%m-%d %H:%M:%S}",
            f"Home Directory: {home}",
            f"Groups: {' '.join(groups)}",
            "",
            "Instructions:",
            "- To use super user privileges, use 'sudo' before commands",
            "- Example: sudo apt update",
            "- The first time you use sudo, you may be prompted for your password",
            "- Keep your credentials secure!",
            "",
            "System Information:",
            f"- Ubuntu Version: {os_description}",
            f"- Kernel Version: {platform.release()}",
            f"- System Architecture: {platform.machine()}",
            "",
        ])

        try:
            info_file.write_text(content)
            info_file.chmod(0o600)
            shutil.chown(str(info_file), user=request.username, group=request.username)
        except (OSError, LookupError) as e:
            self.warn(f"Could not write account information file {info_file}: {e}")
            return None

        logger.info("Wrote account information file %s", info_file)
        return info_file

    def verify(self, username: str) -> List[Tuple[str, Optional[bool]]]:
        """
        Post-creation checks. None means the check could not be completed.
        """
        checks = []
        account = self.store.get(username)
        checks.append(("User exists in system", account is not None))
        checks.append(("Home directory created", self.home_for(username).is_dir()))
        checks.append((
            "User has sudo privileges",
            self.runner.run(["sudo", "-l", "-U", username]).ok,
        ))

        whoami = self.runner.run(["su", "-", username, "-c", "whoami"])
        checks.append(("Authentication working", True if username in whoami.stdout else None))

        shell_ok = account is not None and account.shell == self.settings.default_shell
        checks.append((f"{self.settings.default_shell} shell configured", True if shell_ok else None))
        return checks

    def change_password(self, username: str, password: str):
        self.get(username)
        ok, reason = validate_password(password)
        if not ok:
            raise ValidationError(reason)

        self.runner.run(["chpasswd"], input=f"{username}:{password}\n").check(
            f"Failed to change password for '{username}'"
        )
        self.action_log.record("Password changed for user", username)

    def check_removable(self, username: str) -> Account:
        account = self.get(username)
        if username in self.settings.protected_users:
            raise ValidationError(f"Cannot remove critical system user '{username}'!")
        return account

    def remove(self, username: str, remove_home: bool = False):
        """Delete the account, and with remove_home its home and mail spool"""
        self.check_removable(username)

        args = ["userdel", "-r", username] if remove_home else ["userdel", username]
        self.runner.run(args).check(f"Failed to remove user '{username}'")
        logger.info("Removed account %s", username)
        self.action_log.record("User removed", username)

    def summary(self) -> Dict[str, int]:
        regular, _ = self.list_accounts()
        logged_in = 0
        result = self.runner.run(["who"])
        if result.ok:
            logged_in = len([line for line in result.stdout.splitlines() if line.strip()])
        return {"total_users": len(regular), "logged_in": logged_in}
