"""
System information report
"""

import platform
import shutil
from typing import Dict, Optional

import psutil

from .runner import CommandRunner


def _human(num_bytes: float) -> str:
    for unit in ("B", "K", "M", "G", "T"):
        if num_bytes < 1024 or unit == "T":
            return f"{num_bytes:.1f}{unit}"
        num_bytes /= 1024
    return f"{num_bytes:.1f}T"


def memory_usage() -> Optional[str]:
    """`used of total`, where used excludes reclaimable cache"""
    try:
        memory = psutil.virtual_memory()
    except (OSError, RuntimeError):
        return None
    return f"{_human(memory.total - memory.available)} used of {_human(memory.total)}"


def disk_usage(path: str = "/") -> str:
    usage = shutil.disk_usage(path)
    percent = usage.used / usage.total * 100 if usage.total else 0
    return f"{_human(usage.used)} used of {_human(usage.total)} ({percent:.0f}% full)"


def system_report(runner: Optional[CommandRunner] = None) -> Dict[str, Dict[str, str]]:
    """Sections of label -> value for display"""
    runner = runner or CommandRunner()

    result = runner.run(["lsb_release", "-ds"])
    os_description = result.stdout.strip().strip('"') if result.ok else platform.platform()

    result = runner.run(["uptime", "-p"])
    uptime = result.stdout.strip() if result.ok else "Unknown"

    return {
        "Operating System": {
            "Description": os_description,
        },
        "System Details": {
            "Hostname": platform.node(),
            "Kernel": platform.release(),
            "Architecture": platform.machine(),
            "Uptime": uptime,
        },
        "Resources": {
            "Root Partition": disk_usage("/"),
            "RAM": memory_usage() or "Unknown",
        },
    }
