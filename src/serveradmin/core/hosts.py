"""
Local DNS aliases in the hosts file
"""

import logging
from pathlib import Path
from typing import Optional

from .runner import CommandRunner

logger = logging.getLogger(__name__)

FALLBACK_IP = "127.0.0.1"


def local_ip(runner: Optional[CommandRunner] = None) -> str:
    """First address reported by `hostname -I`"""
    runner = runner or CommandRunner()
    result = runner.run(["hostname", "-I"])
    if result.ok and result.stdout.split():
        return result.stdout.split()[0]
    return FALLBACK_IP


def has_entry(hosts_file: Path, domain: str) -> bool:
    if not hosts_file.exists():
        return False
    return domain in hosts_file.read_text()


def add_entry(hosts_file: Path, domain: str, ip: str, service_name: str) -> bool:
    """
    Append `<ip> <domain>` with a marker comment

    Returns False without writing when the domain already appears in the file.
    """
    if has_entry(hosts_file, domain):
        return False

    prefix = ""
    if hosts_file.exists():
        content = hosts_file.read_text()
        if content and not content.endswith("\n"):
            prefix = "\n"

    with hosts_file.open("a") as f:
        f.write(f"{prefix}# Configured automatically - {service_name}\n")
        f.write(f"{ip} {domain}\n")

    logger.info("Added hosts entry %s -> %s", domain, ip)
    return True
