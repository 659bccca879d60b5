"""
System Helper

Introspection of the host the process runs on: OS, memory, CPU,
disk and network usage, plus running external commands.

Uses psutil for anything platform-specific.
"""

import os
import platform
import subprocess
import sys
import uuid
from typing import Optional, Union

import psutil


Size = Union[int, str]


def format_size(num_bytes: float) -> str:
    """Human-readable byte size ("1.5 MB")."""
    units = ["B", "KB", "MB", "GB", "TB", "PB"]
    size = float(num_bytes)
    for unit in units[:-1]:
        if abs(size) < 1024:
            return f"{size:.2f} {unit}" if unit != "B" else f"{int(size)} B"
        size /= 1024
    return f"{size:.2f} {units[-1]}"


def _size(num_bytes: int, fmt: bool) -> Size:
    return format_size(num_bytes) if fmt else num_bytes


class System:
    """Host introspection helpers. All methods are static."""

    @staticmethod
    def is_cli() -> bool:
        """True when attached to an interactive terminal."""
        return sys.stdin is not None and sys.stdin.isatty()

    @staticmethod
    def get_os() -> str:
        return platform.system()

    @staticmethod
    def get_os_name() -> str:
        return platform.platform()

    @staticmethod
    def get_python_version() -> str:
        return platform.python_version()

    @staticmethod
    def get_memory_usage(fmt: bool = True) -> Size:
        """Resident memory of the current process."""
        return _size(psutil.Process().memory_info().rss, fmt)

    @staticmethod
    def is_memory_out(percent: float = 0.9) -> bool:
        """True when system memory use is at or above `percent` (0..1)."""
        return psutil.virtual_memory().percent / 100 >= percent

    @staticmethod
    def get_cpu_usage() -> dict:
        return {
            "usage": psutil.cpu_percent(interval=0.1),
            "count": psutil.cpu_count(),
        }

    @staticmethod
    def get_system_memory_usage() -> dict:
        memory = psutil.virtual_memory()
        return {
            "total": format_size(memory.total),
            "available": format_size(memory.available),
            "used": format_size(memory.used),
            "free": format_size(memory.free),
            "usage": memory.percent,
        }

    @staticmethod
    def get_network_usage() -> dict:
        counters = psutil.net_io_counters()
        return {
            "sent": format_size(counters.bytes_sent),
            "received": format_size(counters.bytes_recv),
        }

    @staticmethod
    def get_disk_usage(directory: str = ".") -> dict:
        disk = psutil.disk_usage(directory)
        return {
            "total": format_size(disk.total),
            "used": format_size(disk.used),
            "free": format_size(disk.free),
            "usage": disk.percent,
        }

    @staticmethod
    def get_disk_free_space(directory: str = ".", fmt: bool = True) -> Size:
        return _size(psutil.disk_usage(directory).free, fmt)

    @staticmethod
    def get_disk_total_space(directory: str = ".", fmt: bool = True) -> Size:
        return _size(psutil.disk_usage(directory).total, fmt)

    @staticmethod
    def get_load_avg() -> tuple[float, float, float]:
        return psutil.getloadavg()

    @staticmethod
    def get_size(directory: str = ".", fmt: bool = True) -> Size:
        """Total size of the regular files under `directory`."""
        total = 0
        for root, _dirs, files in os.walk(directory):
            for name in files:
                path = os.path.join(root, name)
                if not os.path.islink(path):
                    total += os.path.getsize(path)
        return _size(total, fmt)

    @staticmethod
    def get_mac() -> str:
        node = uuid.getnode()
        return ":".join(f"{(node >> shift) & 0xff:02x}" for shift in range(40, -1, -8))

    @staticmethod
    def run_command(command: list[str]) -> str:
        """Run a command and return its stripped standard output."""
        result = subprocess.run(command, capture_output=True, text=True, check=False)
        return result.stdout.strip()

    @staticmethod
    def execute(command: list[str]) -> tuple[list[str], int]:
        """Run a command, returning (output lines, exit code)."""
        result = subprocess.run(command, capture_output=True, text=True, check=False)
        return result.stdout.splitlines(), result.returncode

    @staticmethod
    def get_usage(directory: Optional[str] = None) -> dict:
        return {
            "cpu": System.get_cpu_usage(),
            "memory": System.get_system_memory_usage(),
            "disk": System.get_disk_usage(directory or "."),
            "network": System.get_network_usage(),
        }
